"""Maintenance actions offered from the launcher's target menu."""

import logging
import subprocess
from pathlib import Path
from typing import Callable, Optional

from ..utils.prompts import confirm, prompt as default_prompt
from ..utils.terminal import SelectOption, interactive_select

logger = logging.getLogger(__name__)

CLEAR_LLM_CACHE = "clear-llm-cache"
CLEAR_SQLITE = "clear-sqlite"
BACK = "back"

SQLITE_CACHE_DIR = Path("packages") / "toolshed" / "cache" / "memory"
FINAL_CONFIRMATION = "I understand this is permanent"


class OtherActions:
    """The ``Take other actions...`` submenu."""

    def __init__(self, labs_dir: str, select=interactive_select,
                 prompt: Callable[..., str] = default_prompt,
                 runner=subprocess.run, logger: Optional[logging.Logger] = None):
        self.labs_dir = Path(labs_dir)
        self.select = select
        self.prompt = prompt
        self.runner = runner
        self.logger = logger or logging.getLogger(__name__)

    def run(self) -> bool:
        """Show the submenu and run the chosen action; returns True if it did something."""
        options = [
            SelectOption(label="Clear LLM cache", value=CLEAR_LLM_CACHE, icon="🗑️  "),
            SelectOption(label="Clear local SQLite database", value=CLEAR_SQLITE, icon="⚠️  "),
            SelectOption(label="Back to main menu", value=BACK, icon="⬅️  "),
        ]
        selection = self.select(options, "⚙️  Other Actions\n\n(↑/↓ to move, Enter to select, Q to cancel):")

        if selection == CLEAR_LLM_CACHE:
            return self.clear_llm_cache()
        if selection == CLEAR_SQLITE:
            return self.clear_sqlite_database()
        return False

    def clear_llm_cache(self) -> bool:
        print("\n🗑️  Clear LLM Cache\n")
        print("This will delete all cached LLM responses.")
        print("You will need to regenerate any AI-generated content.\n")

        if not confirm("Type 'yes' to confirm", ask=self.prompt):
            print("❌ Cancelled\n")
            return False

        try:
            completed = self.runner(["deno", "task", "ct", "cache", "clear"], cwd=str(self.labs_dir))
        except OSError as exc:
            print(f"\n❌ Error: {exc}\n")
            return False

        if completed.returncode == 0:
            print("\n✅ LLM cache cleared successfully\n")
            return True
        print("\n❌ Failed to clear LLM cache\n")
        return False

    def clear_sqlite_database(self) -> bool:
        print("\n⚠️  DANGER: Clear Local SQLite Database\n")
        print("THIS WILL PERMANENTLY DELETE ALL LOCAL DATA.")
        print("You will lose every local space, charm and pattern deployed to localhost.")
        print("THIS CANNOT BE UNDONE!\n")

        if not confirm("Type 'DELETE' (in caps) to proceed", "DELETE", case_sensitive=True, ask=self.prompt):
            print("❌ Cancelled - no data was deleted\n")
            return False

        print("\n⚠️  Final confirmation required\n")
        if not confirm(f"Type '{FINAL_CONFIRMATION}' to confirm", FINAL_CONFIRMATION,
                       case_sensitive=True, ask=self.prompt):
            print("❌ Cancelled - no data was deleted\n")
            return False

        sqlite_dir = self.labs_dir / SQLITE_CACHE_DIR
        deleted = 0
        try:
            for entry in sorted(sqlite_dir.glob("*.sqlite")):
                if entry.is_file():
                    entry.unlink()
                    deleted += 1
        except OSError as exc:
            self.logger.debug("Could not clear %s: %s", sqlite_dir, exc)
            print(f"\n❌ Error: {exc}\n")
            return False

        if deleted:
            plural = "s" if deleted > 1 else ""
            print(f"\n✅ Deleted {deleted} SQLite database file{plural} from:")
            print(f"   {sqlite_dir}\n")
            print("   Restart your dev server to initialize fresh databases.\n")
            return True

        print("\n⚠️  No SQLite database files found\n")
        print(f"   Checked: {sqlite_dir}/*.sqlite\n")
        print("   The database may already be clean.\n")
        return False
