#!/usr/bin/env python3
"""
ct-launch - interactive pattern launcher.

Remembers deployment targets, spaces and recently used patterns so a
deploy is a few keystrokes instead of a long ``ct charm new`` command.
"""

import argparse
import logging
import sys

from ct_tools.commands import LaunchCommand
from ct_tools.core import CtToolsError, DeploymentTarget
from ct_tools.core.config import get_launcher_history_path, load_launcher_config
from ct_tools.utils.macos import set_process_name


def main(argv=None):
    """Main entry point for ct-launch."""
    set_process_name("ct-launch")

    parser = argparse.ArgumentParser(
        description="Deploy patterns with remembered targets, spaces and history",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ct-launch                # Pick target, space and pattern interactively
  ct-launch --prod         # Start with production selected
  ct-launch --no-browser   # Don't offer to open the deployed charm
        """
    )

    target_group = parser.add_mutually_exclusive_group()
    target_group.add_argument(
        '--prod',
        dest='target',
        action='store_const',
        const=DeploymentTarget.PRODUCTION,
        help='Default the target menu to production'
    )
    target_group.add_argument(
        '--local',
        dest='target',
        action='store_const',
        const=DeploymentTarget.LOCAL,
        help='Default the target menu to localhost:8000'
    )

    parser.add_argument(
        '--no-browser',
        action='store_true',
        help='Skip the open-in-browser prompt after deploying'
    )
    parser.add_argument(
        '--config',
        help=f'Path to the launcher history file (default: {get_launcher_history_path()})',
        default=None
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output'
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    config_path = args.config or get_launcher_history_path()
    config = load_launcher_config(config_path)

    if args.verbose:
        print(f"Using launcher history: {config_path}")

    try:
        cmd = LaunchCommand(config, config_path, verbose=args.verbose)
        success = cmd.run(target=args.target, open_browser=not args.no_browser)
        return 0 if success else 1

    except KeyboardInterrupt:
        print("\n👋 Cancelled")
        return 0
    except CtToolsError as e:
        print(f"❌ {e}")
        if e.hint:
            print(f"   {e.hint}")
        return 1
    except Exception as e:
        print(f"Error: {e}")
        if not args.verbose:
            print("Re-run with --verbose for more detail.")
        else:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
