"""
Pattern deployment through the external ``ct`` tool.

The deploy command runs inside the labs checkout and prints the new
charm's ID somewhere in its output; which format it uses has changed over
time, so the ID is recovered with an ordered list of patterns.
"""

import logging
import os
import re
import select
import subprocess
import sys
import webbrowser
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Mapping, Optional

from ..core.exceptions import DeploymentError
from ..core.models import DeploymentTarget
from ..utils.terminal import CLEAR_LINE, CURSOR_TO_START, CURSOR_UP, raw_terminal, supports_raw_mode
from ..utils.text import short_path

logger = logging.getLogger(__name__)

# Tried in order; the first match wins
CHARM_ID_PATTERNS = [
    # Base32 content ID on its own line (baedr..., baed...)
    re.compile(r"^(ba[a-z0-9]{50,})$", re.MULTILINE),
    # Base32 ID as the last line of output
    re.compile(r"\n(ba[a-z0-9]{50,})\s*$"),
    # UUID anywhere
    re.compile(r"([a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12})", re.IGNORECASE),
    # "charm: <uuid>"
    re.compile(r"charm[:\s]+([a-f0-9-]{36})", re.IGNORECASE),
    # UUID in a URL path
    re.compile(r"/([a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12})", re.IGNORECASE),
]

NETWORK_ERROR_MARKERS = (
    "connect",
    "econnrefused",
    "network",
    "timeout",
    "enotfound",
    "getaddrinfo",
    "fetch failed",
    "failed to fetch",
)

BROWSER_PROMPT_SECONDS = 10


def extract_charm_id(output: str) -> Optional[str]:
    """Return the charm ID printed by ``ct charm new``, or None."""
    for pattern in CHARM_ID_PATTERNS:
        match = pattern.search(output or "")
        if match:
            return match.group(1)
    return None


def network_hint(output: str, target: DeploymentTarget) -> Optional[str]:
    """Suggest a fix when the failure output looks like a connectivity problem."""
    lowered = (output or "").lower()
    if not any(marker in lowered for marker in NETWORK_ERROR_MARKERS):
        return None
    if target.is_production:
        return ("Production deployments require Tailscale to be running.\n"
                "   Check if Tailscale is connected and try again.")
    return (f"Is the local toolshed running at {target.api_url}?\n"
            "   Start it from the labs checkout and try again.")


def build_environment(identity_path: str, api_url: str,
                      base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Environment for the child process; ``os.environ`` itself is left untouched."""
    env = dict(os.environ if base is None else base)
    env["CT_IDENTITY"] = str(identity_path)
    env["CT_API_URL"] = api_url
    return env


class DeployStatus(Enum):
    SUCCESS_WITH_ID = "success_with_id"
    SUCCESS_NO_ID = "success_no_id"
    FAILED = "failed"


@dataclass
class DeployResult:
    """Outcome of one ``ct charm new`` run."""

    status: DeployStatus
    charm_id: Optional[str] = None
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0
    hint: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is not DeployStatus.FAILED

    def url(self, api_url: str, space: str) -> str:
        """Charm URL when the ID is known, otherwise the space URL."""
        if self.charm_id:
            return f"{api_url}/{space}/{self.charm_id}"
        return f"{api_url}/{space}/"


class Deployer:
    """Runs ``deno task ct charm new`` for a pattern."""

    def __init__(self, labs_dir: str, identity_path: str,
                 runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
                 logger: Optional[logging.Logger] = None):
        self.labs_dir = str(labs_dir)
        self.identity_path = str(identity_path)
        self.runner = runner
        self.logger = logger or logging.getLogger(__name__)

    def command(self, pattern_path: str, space: str) -> list:
        return ["deno", "task", "ct", "charm", "new", "--space", space, str(pattern_path)]

    def deploy(self, pattern_path: str, space: str, target: DeploymentTarget) -> DeployResult:
        """
        Deploy ``pattern_path`` into ``space`` and wait for the tool to exit.

        Raises:
            DeploymentError: deno could not be started
        """
        print("\n🚀 Deploying...")
        print(f"  Pattern: {short_path(str(pattern_path))}")
        print(f"  Space: {space}")
        print(f"  API: {target.api_url}")
        print(f"  Identity: {self.identity_path}\n")

        args = self.command(pattern_path, space)
        self.logger.debug("Running %s in %s", " ".join(args), self.labs_dir)

        try:
            completed = self.runner(
                args,
                cwd=self.labs_dir,
                env=build_environment(self.identity_path, target.api_url),
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise DeploymentError(
                f"Could not run deno: {exc}",
                hint="Install Deno (https://deno.land) and make sure it is on your PATH.",
            ) from exc
        except OSError as exc:
            raise DeploymentError(f"Could not start deployment: {exc}") from exc

        stdout = completed.stdout or ""
        stderr = completed.stderr or ""

        if completed.returncode != 0:
            self.logger.debug("Deploy exited with %s", completed.returncode)
            return DeployResult(
                status=DeployStatus.FAILED,
                stdout=stdout,
                stderr=stderr,
                returncode=completed.returncode,
                hint=network_hint(stdout + stderr, target),
            )

        charm_id = extract_charm_id(stdout)
        return DeployResult(
            status=DeployStatus.SUCCESS_WITH_ID if charm_id else DeployStatus.SUCCESS_NO_ID,
            charm_id=charm_id,
            stdout=stdout,
            stderr=stderr,
            returncode=completed.returncode,
        )


def report_result(result: DeployResult, target: DeploymentTarget, space: str) -> None:
    """Print the user-facing summary of a deployment."""
    if result.status is DeployStatus.SUCCESS_WITH_ID:
        print("\n✅ Deployed successfully!")
        print(f"\n🔗 {result.url(target.api_url, space)}\n")
        return

    if result.status is DeployStatus.SUCCESS_NO_ID:
        print("\n✅ Deployed successfully!")
        print(f"   View at: {result.url(target.api_url, space)}")
        print("\n⚠️  Could not extract charm ID from output.")
        print("   (Check the space to find your charm)")
        return

    print("\n❌ Deployment failed\n")
    if result.stdout:
        print(result.stdout)
    if result.stderr:
        print(result.stderr, file=sys.stderr)
    if result.hint:
        print(f"\n💡 Tip: {result.hint}\n")


def _wait_for_key(fd: int, timeout: int, out) -> Optional[bytes]:
    """Read one key within ``timeout`` seconds, rewriting a countdown each second."""
    remaining = timeout
    while remaining > 0:
        ready, _, _ = select.select([fd], [], [], 1.0)
        if ready:
            return os.read(fd, 1)
        remaining -= 1
        if remaining > 0:
            plural = "s" if remaining != 1 else ""
            out.write(f"{CURSOR_UP}{CLEAR_LINE}{CURSOR_TO_START}(Auto-closing in {remaining} second{plural})\r\n")
            out.flush()
    return None


def prompt_open_browser(url: str, timeout: int = BROWSER_PROMPT_SECONDS,
                        opener: Callable[[str], bool] = webbrowser.open,
                        stdin=None, stdout=None) -> bool:
    """
    Offer to open ``url``: Enter opens it, q skips, silence closes.

    Returns True when the browser was asked to open the URL.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    if not supports_raw_mode(stdin):
        return False

    stdout.write("Press Enter to open in browser, or Q to quit...\n")
    stdout.write(f"(Auto-closing in {timeout} seconds)\n")
    stdout.flush()

    fd = stdin.fileno()
    with raw_terminal(fd, stdout):
        key = _wait_for_key(fd, timeout, stdout)

    if key is None:
        print("\n👋 Timed out, closing...\n")
        return False
    if key in (b"\r", b"\n"):
        print("\n🌐 Opening in browser...\n")
        try:
            return bool(opener(url))
        except webbrowser.Error as exc:
            print(f"⚠️  Could not open browser: {exc}")
            return False
    if key == b"\x03":
        raise KeyboardInterrupt
    if key in (b"q", b"Q"):
        print("\n👋 Closing without opening browser...\n")
    else:
        print("\n👋 Closing...\n")
    return False
