"""Launch command - guided pattern deployment."""

import logging
import os
from typing import Callable, Optional

from ..core.models import DeploymentTarget, LauncherConfig
from ..core.paths import PathManager, get_path_manager
from ..launcher.actions import OtherActions
from ..launcher.browser import PatternBrowser
from ..launcher.deploy import Deployer, DeployStatus, prompt_open_browser, report_result
from ..launcher.history import cull_missing, recent_patterns, record_usage
from ..launcher.labs import resolve_labs_dir
from ..utils.prompts import prompt as default_prompt
from ..utils.spaces import suggest_spaces
from ..utils.terminal import SelectOption, interactive_select
from ..utils.text import short_path

OTHER_ACTIONS = "other"
NEW_SPACE = "__new__"
BROWSE = "__browse__"

SPACE_ICONS = {"last": "🔄 ", "today": "📅 ", "next": "➡️  "}
SPACE_LABELS = {"last": "last used", "today": "today", "next": "next"}


class LaunchCommand:
    """Walks the user from target to space to pattern, then deploys."""

    def __init__(self, config: LauncherConfig, config_path: str,
                 paths: Optional[PathManager] = None,
                 select=interactive_select,
                 prompt: Callable[..., str] = default_prompt,
                 deployer_factory: Callable[..., Deployer] = Deployer,
                 browser: Optional[PatternBrowser] = None,
                 actions_factory: Callable[..., OtherActions] = OtherActions,
                 open_browser: Callable[[str], bool] = prompt_open_browser,
                 verbose: bool = False):
        self.config = config
        self.config_path = config_path
        self.paths = paths or get_path_manager()
        self.select = select
        self.prompt = prompt
        self.deployer_factory = deployer_factory
        self.browser = browser or PatternBrowser(select=select, prompt=prompt)
        self.actions_factory = actions_factory
        self.open_browser = open_browser
        self.verbose = verbose
        self.logger = logging.getLogger(__name__)

    def save(self) -> None:
        if not self.config.save_to_file(self.config_path):
            print(f"⚠️  Could not save launcher history to {self.config_path}")

    def cull_history(self) -> int:
        removed = cull_missing(self.config)
        if removed:
            self.save()
            plural = "s" if removed > 1 else ""
            print(f"🧹 Cleaned up {removed} invalid pattern{plural} from history\n")
        return removed

    def resolve_labs_dir(self) -> str:
        default_dir = str(self.paths.default_labs_dir)
        labs_dir, prompted = resolve_labs_dir(self.config, default_dir, prompt=self.prompt)
        if prompted and labs_dir != default_dir:
            self.config.labs_dir = labs_dir
            self.save()
        return labs_dir

    def choose_target(self, preferred: Optional[DeploymentTarget] = None) -> Optional[DeploymentTarget]:
        """Target menu; returns None when the user picks ``Take other actions...``."""
        last_used = self.config.last_deployment_target
        default = preferred or last_used or DeploymentTarget.LOCAL
        other = DeploymentTarget.PRODUCTION if default is DeploymentTarget.LOCAL else DeploymentTarget.LOCAL

        def option(target: DeploymentTarget) -> SelectOption:
            if target.is_production:
                label, icon = "production (toolshed.saga-castor.ts.net)", "🌐 "
            else:
                label, icon = "localhost:8000", "💻 "
            if target is last_used:
                label += " (last used)"
            return SelectOption(label=label, value=target.value, icon=icon)

        options = [
            option(default),
            option(other),
            SelectOption(label="Take other actions...", value=OTHER_ACTIONS, icon="⚙️  "),
        ]
        selection = self.select(
            options,
            "🚀 Pattern Launcher\n\nSelect deployment target (↑/↓ to move, Enter to select):",
        )

        if selection == OTHER_ACTIONS:
            return None
        return DeploymentTarget.parse(selection) or default

    def choose_space(self, target: DeploymentTarget) -> str:
        last_space = self.config.last_space_for(target)
        fallback = last_space or target.default_space

        options = [
            SelectOption(label=f"{name} ({SPACE_LABELS[kind]})", value=name, icon=SPACE_ICONS[kind])
            for kind, name in suggest_spaces(last_space)
        ]
        options.append(SelectOption(label="Enter new space name...", value=NEW_SPACE, icon="✨ "))

        selection = self.select(options, "Select space (↑/↓ to move, Enter to select):")

        if selection == NEW_SPACE:
            return self.prompt("Enter space name", fallback).strip()
        return selection or fallback

    def choose_pattern(self) -> Optional[str]:
        options = [
            SelectOption(label=short_path(record.path), value=record.path, icon="📄 ")
            for record in recent_patterns(self.config)
        ]
        options.append(SelectOption(label="Browse for a new pattern...", value=BROWSE, icon="📁 "))

        selection = self.select(options, "📋 Select a pattern (↑/↓ to move, Enter to select, Q to quit):")

        if selection == BROWSE:
            chosen = self.browser.choose_start(self.config, self.paths.patterns_dir)
            return str(chosen) if chosen else None
        return selection

    def run(self, target: Optional[DeploymentTarget] = None, open_browser: bool = True) -> bool:
        """
        Run the launcher.

        Returns False on configuration or deployment failure; cancelling is
        not a failure.
        """
        self.cull_history()
        labs_dir = self.resolve_labs_dir()

        chosen_target = self.choose_target(target)
        if chosen_target is None:
            self.actions_factory(labs_dir, select=self.select, prompt=self.prompt).run()
            return True

        space = self.choose_space(chosen_target)
        if not space:
            print("❌ No space provided")
            return False

        # Saved before deploying so a failed deploy still remembers the choice
        self.config.last_deployment_target = chosen_target
        self.config.set_last_space(chosen_target, space)
        self.save()

        pattern_path = self.choose_pattern()
        if not pattern_path:
            print("👋 Cancelled")
            return True

        pattern_path = os.path.abspath(os.path.expanduser(pattern_path))
        record_usage(self.config, pattern_path)
        self.save()

        deployer = self.deployer_factory(labs_dir, str(self.paths.identity_path))
        result = deployer.deploy(pattern_path, space, chosen_target)
        report_result(result, chosen_target, space)

        if not result.succeeded:
            return False

        cull_missing(self.config)
        self.save()

        if open_browser and result.status is DeployStatus.SUCCESS_WITH_ID:
            self.open_browser(result.url(chosen_target.api_url, space))

        return True
