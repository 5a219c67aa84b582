"""
Read and write charm inputs through the ``ct`` command-line tool.

Both operations shell out to ``deno task ct charm get|set`` using the labs
checkout's ``deno.json``. Values travel as JSON: ``get`` prints the input's
current value, ``set`` reads the new value from stdin.
"""

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Callable, List, Optional

from ..core.exceptions import CharmError

# Markers the ct tool prints when an input has never been written
EMPTY_MARKERS = ("undefined", "null")


class CharmClient:
    """Client for one space on one toolshed."""

    def __init__(self, labs_dir: str, identity_path: str, api_url: str, space: str,
                 runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
                 logger: Optional[logging.Logger] = None):
        self.labs_dir = Path(labs_dir)
        self.identity_path = str(identity_path)
        self.api_url = api_url
        self.space = space
        self.runner = runner
        self.logger = logger or logging.getLogger(__name__)

    def _command(self, action: str, charm_id: str, path: str) -> List[str]:
        return [
            "deno", "task",
            "--config", str(self.labs_dir / "deno.json"),
            "ct", "charm", action,
            "--api-url", self.api_url,
            "--identity", self.identity_path,
            "--space", self.space,
            "--charm", charm_id,
            "--input", path,
        ]

    def _run(self, args: List[str], stdin: Optional[str] = None) -> subprocess.CompletedProcess:
        self.logger.debug("Running: %s", " ".join(args))
        try:
            return self.runner(args, input=stdin, capture_output=True, text=True)
        except FileNotFoundError as exc:
            raise CharmError(
                f"Could not run deno: {exc}",
                hint="Install Deno (https://deno.land) and make sure it is on your PATH.",
            ) from exc
        except OSError as exc:
            raise CharmError(f"Could not start ct: {exc}") from exc

    def read(self, charm_id: str, path: str) -> Optional[Any]:
        """
        Return the JSON value of input ``path`` on ``charm_id``.

        None means the input holds no value yet (or printed something that
        isn't JSON).

        Raises:
            CharmError: the ct tool failed
        """
        completed = self._run(self._command("get", charm_id, path))

        if completed.returncode != 0:
            stderr = (completed.stderr or "").strip()
            if any(marker in stderr for marker in EMPTY_MARKERS):
                return None
            raise CharmError(f"Failed to read from charm: {stderr}")

        stdout = (completed.stdout or "").strip()
        if not stdout or stdout in EMPTY_MARKERS:
            return None

        try:
            return json.loads(stdout)
        except json.JSONDecodeError:
            self.logger.warning("Charm %s returned non-JSON output for %s", charm_id, path)
            return None

    def write(self, charm_id: str, path: str, data: Any) -> None:
        """
        Replace input ``path`` on ``charm_id`` with ``data``.

        Raises:
            CharmError: the ct tool failed
        """
        payload = json.dumps(data, ensure_ascii=False)
        completed = self._run(self._command("set", charm_id, path), stdin=payload)

        if completed.returncode != 0:
            stderr = (completed.stderr or "").strip()
            raise CharmError(f"Failed to write to charm: {stderr}")
