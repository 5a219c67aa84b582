#!/usr/bin/env python3
"""
ct-apple-sync - sync Apple Messages, Calendar, Reminders and Notes into charms.
"""

import argparse
import logging
import sys

from ct_tools.commands import InitCommand, StatusCommand, SyncCommand
from ct_tools.core import CtToolsError, SourceName
from ct_tools.core.config import (
    get_sync_config_path,
    get_sync_state_path,
    load_sync_config,
    load_sync_state,
)
from ct_tools.sync.daemon import DEFAULT_INTERVAL
from ct_tools.apple.calendar import DEFAULT_DAYS_BACK
from ct_tools.utils.macos import set_process_name

SOURCE_COMMANDS = {source.value: source for source in SourceName}


def _positive_int(value):
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def _add_sync_options(parser, suppress=False):
    # Subcommands must not overwrite options given before the command name
    def default(value):
        return argparse.SUPPRESS if suppress else value

    parser.add_argument(
        '--mock',
        action='store_true',
        default=default(False),
        help='Use generated sample data instead of real Apple data'
    )
    parser.add_argument(
        '--charm',
        metavar='ID',
        default=default(None),
        help='Charm ID to write to for this run (single source only)'
    )
    parser.add_argument(
        '--space',
        default=default(None),
        help='Space to sync into for this run'
    )
    parser.add_argument(
        '--api-url',
        metavar='URL',
        default=default(None),
        help='Toolshed API URL for this run'
    )
    parser.add_argument(
        '--days-back',
        type=_positive_int,
        default=default(DEFAULT_DAYS_BACK),
        help=f'Calendar: days of past events to include (default: {DEFAULT_DAYS_BACK})'
    )
    parser.add_argument(
        '--daemon',
        action='store_true',
        default=default(False),
        help='Keep running and sync periodically'
    )
    parser.add_argument(
        '--interval',
        type=_positive_int,
        default=default(DEFAULT_INTERVAL),
        metavar='SECONDS',
        help=f'Seconds between daemon cycles (default: {DEFAULT_INTERVAL})'
    )


def main(argv=None):
    """Main entry point for ct-apple-sync."""
    set_process_name("ct-apple-sync")

    parser = argparse.ArgumentParser(
        description="Sync Apple data (iMessage, Calendar, Reminders, Notes) into charms",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ct-apple-sync init                       # Configure space, API and charm IDs
  ct-apple-sync status                     # Show configuration and sync state
  ct-apple-sync messages                   # Sync new iMessages
  ct-apple-sync messages --mock            # Test with sample data
  ct-apple-sync calendar --charm baed...   # Sync calendar into a specific charm
  ct-apple-sync --all --daemon             # Sync everything every 5 minutes
        """
    )

    parser.add_argument(
        '--all',
        action='store_true',
        help='Sync all data sources (same as the "all" command)'
    )
    parser.add_argument(
        '--config',
        help=f'Path to sync configuration file (default: {get_sync_config_path()})',
        default=None
    )
    parser.add_argument(
        '--state',
        help=f'Path to sync state file (default: {get_sync_state_path()})',
        default=None
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output'
    )
    _add_sync_options(parser)

    subparsers = parser.add_subparsers(dest='command', help='Commands')
    subparsers.add_parser('init', help='Configure space, API URL and charm IDs')
    subparsers.add_parser('status', help='Show configuration and sync state')

    for source in SourceName:
        source_parser = subparsers.add_parser(source.value, help=f'Sync {source.label}')
        _add_sync_options(source_parser, suppress=True)
    all_parser = subparsers.add_parser('all', help='Sync all data sources')
    _add_sync_options(all_parser, suppress=True)

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
    elif args.daemon:
        # Timestamped cycle logs
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(levelname)s - %(message)s'
        )

    command = 'all' if args.all and args.command in (None, 'all') else args.command
    if args.all and args.command not in (None, 'all'):
        print("--all cannot be combined with another command.")
        return 1

    if not command:
        parser.print_help()
        return 1

    config_path = args.config or get_sync_config_path()
    state_path = args.state or get_sync_state_path()
    config = load_sync_config(config_path)

    if args.verbose:
        print(f"Using config: {config_path}")
        print(f"Using state: {state_path}")

    try:
        if command == 'init':
            cmd = InitCommand(config, config_path, verbose=args.verbose)
            success = cmd.run()

        elif command == 'status':
            cmd = StatusCommand(config, load_sync_state(state_path), verbose=args.verbose)
            success = cmd.run()

        else:
            sources = list(SourceName) if command == 'all' else [SOURCE_COMMANDS[command]]
            cmd = SyncCommand(config, config_path, state_path, verbose=args.verbose)
            success = cmd.run(
                sources,
                mock=args.mock,
                charm_override=args.charm,
                space=args.space,
                api_url=args.api_url,
                days_back=args.days_back,
                daemon=args.daemon,
                interval=args.interval,
            )

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
