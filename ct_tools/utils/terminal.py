"""
Single-keypress list selector drawn in place with ANSI escapes.

The selector redraws only the lines it drew last time, so it works inline
in a normal scrolling terminal rather than taking over the screen the way
curses does. Raw mode and the hidden cursor are scoped to
:func:`raw_terminal` and restored on every exit path.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import signal
import sys
import threading
from dataclasses import dataclass
from typing import IO, Callable, Iterable, Iterator, List, Optional, Sequence

try:  # termios/tty are only available on POSIX platforms
    import termios  # type: ignore
    import tty  # type: ignore
except ImportError:  # pragma: no cover - Windows fallback
    termios = None  # type: ignore
    tty = None  # type: ignore

from .prompts import prompt


# ANSI escape codes
CURSOR_UP = "\x1b[A"
CURSOR_DOWN = "\x1b[B"
CLEAR_LINE = "\x1b[2K"
CURSOR_TO_START = "\x1b[0G"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
DIM = "\x1b[90m"
REVERSE = "\x1b[7m"
RESET = "\x1b[0m"

# Key tokens produced by parse_keys
KEY_UP = "UP"
KEY_DOWN = "DOWN"
KEY_LEFT = "LEFT"
KEY_RIGHT = "RIGHT"
KEY_ENTER = "ENTER"
KEY_BACKSPACE = "BACKSPACE"
KEY_ESCAPE = "ESC"
KEY_CTRL_C = "CTRL_C"
KEY_UNKNOWN = "UNKNOWN"

_ARROWS = {
    ord("A"): KEY_UP,
    ord("B"): KEY_DOWN,
    ord("C"): KEY_RIGHT,
    ord("D"): KEY_LEFT,
}

READ_CHUNK = 32


@dataclass
class SelectOption:
    """One row in the selector; rebuilt on every render."""

    label: str
    value: str
    icon: str = ""


@dataclass
class KeyResult:
    """Outcome of feeding one key to the selector."""

    done: bool = False
    value: Optional[str] = None
    redraw: bool = False


def filter_options(options: Sequence[SelectOption], text: str) -> List[SelectOption]:
    """Case-insensitive substring match on labels, keeping the original order."""
    if not text:
        return list(options)
    needle = text.lower()
    return [option for option in options if needle in option.label.lower()]


class SelectorState:
    """Filter buffer and cursor for an option list.

    Pure state machine: keys go in through :meth:`handle_key`, drawing is
    somebody else's job.
    """

    def __init__(self, options: Sequence[SelectOption]):
        self.options = list(options)
        self.filter_text = ""
        self.filtered: List[SelectOption] = list(self.options)
        self.selected_index = 0

    @property
    def highlighted(self) -> Optional[SelectOption]:
        if not self.filtered:
            return None
        return self.filtered[self.selected_index]

    def set_filter(self, text: str) -> None:
        self.filter_text = text
        self.filtered = filter_options(self.options, text)
        self.selected_index = 0

    def handle_key(self, key: str) -> KeyResult:
        if key == KEY_CTRL_C:
            raise KeyboardInterrupt

        if key == KEY_ENTER:
            option = self.highlighted
            return KeyResult(done=True, value=option.value if option else None)

        if key in (KEY_UP, KEY_DOWN):
            if not self.filtered:
                return KeyResult()
            step = -1 if key == KEY_UP else 1
            self.selected_index = (self.selected_index + step) % len(self.filtered)
            return KeyResult(redraw=True)

        if key == KEY_BACKSPACE:
            if not self.filter_text:
                return KeyResult()
            self.set_filter(self.filter_text[:-1])
            return KeyResult(redraw=True)

        if key == KEY_ESCAPE:
            if not self.filter_text:
                return KeyResult()
            self.set_filter("")
            return KeyResult(redraw=True)

        if len(key) == 1 and key.isprintable():
            # q only cancels before filtering starts, so "quit" can be typed
            if key in ("q", "Q") and not self.filter_text:
                return KeyResult(done=True, value=None)
            self.set_filter(self.filter_text + key)
            return KeyResult(redraw=True)

        return KeyResult()


def parse_keys(data: bytes) -> List[str]:
    """
    Split a raw stdin chunk into key tokens.

    A single read can carry several keystrokes (fast typing, paste) and
    escape sequences arrive as one chunk, so the whole buffer is walked.
    """
    keys: List[str] = []
    index = 0
    length = len(data)

    while index < length:
        byte = data[index]

        if byte == 0x1b:
            if index + 1 < length and data[index + 1] in (ord("["), ord("O")):
                introducer = data[index + 1]
                cursor = index + 2
                if introducer == ord("["):
                    # CSI: parameter bytes, then one final byte
                    while cursor < length and 0x20 <= data[cursor] <= 0x3f:
                        cursor += 1
                if cursor < length:
                    final = data[cursor]
                    keys.append(_ARROWS.get(final, KEY_UNKNOWN))
                    index = cursor + 1
                else:
                    keys.append(KEY_UNKNOWN)
                    index = length
                continue
            keys.append(KEY_ESCAPE)
            index += 1
            continue

        if byte in (0x0d, 0x0a):
            keys.append(KEY_ENTER)
        elif byte in (0x7f, 0x08):
            keys.append(KEY_BACKSPACE)
        elif byte == 0x03:
            keys.append(KEY_CTRL_C)
        elif 0x20 <= byte < 0x7f:
            keys.append(chr(byte))
        elif byte >= 0xc0:
            width = 2 if byte < 0xe0 else 3 if byte < 0xf0 else 4
            chunk = data[index:index + width]
            try:
                char = chunk.decode("utf-8")
            except UnicodeDecodeError:
                char = ""
            keys.append(char if char.isprintable() and char else KEY_UNKNOWN)
            index += width
            continue
        else:
            keys.append(KEY_UNKNOWN)
        index += 1

    return keys


def visible_window(count: int, selected: int, rows: int) -> range:
    """Indexes of at most ``rows`` options, keeping ``selected`` in view."""
    if count <= rows:
        return range(count)
    start = min(max(selected - rows // 2, 0), count - rows)
    return range(start, start + rows)


def render_lines(state: SelectorState, width: Optional[int] = None,
                 height: Optional[int] = None) -> List[str]:
    """
    Lines for the current state: a filter line, then options or ``(no matches)``.

    With ``height``, the block is kept shorter than the terminal by showing a
    window of options around the highlighted one between ``more`` markers.
    """
    lines: List[str] = []

    if state.filter_text:
        lines.append(f"🔍 Filter: {state.filter_text}")
    else:
        lines.append(f"{DIM}(type to filter){RESET}")

    if not state.filtered:
        lines.append(f"  {DIM}(no matches){RESET}")
        return lines

    count = len(state.filtered)
    window = range(count)
    if height:
        # One row for the filter line, one for the cursor parked below the block
        rows = max(height - 2, 3)
        if count > rows:
            window = visible_window(count, state.selected_index, rows - 2)

    if window.start > 0:
        lines.append(f"  {DIM}↑ {window.start} more{RESET}")

    for index in window:
        option = state.filtered[index]
        label = option.label
        if width:
            # Keep every option on one terminal row so line counts stay exact
            room = max(width - 2 - len(option.icon) - 2, 8)
            if len(label) > room:
                label = label[:room - 1] + "…"
        if index == state.selected_index:
            lines.append(f"→ {REVERSE}{option.icon}{label}{RESET}")
        else:
            lines.append(f"  {option.icon}{label}")

    if window.stop < count:
        lines.append(f"  {DIM}↓ {count - window.stop} more{RESET}")

    return lines


class InlineRenderer:
    """Redraws a block of lines in place, tracking how many were drawn."""

    def __init__(self, out: IO[str]):
        self.out = out
        self.line_count = 0

    def clear(self) -> None:
        """Erase exactly the previously drawn lines and park at their origin."""
        count = self.line_count
        if not count:
            return
        parts = [CURSOR_UP * count]
        for index in range(count):
            parts.append(CLEAR_LINE + CURSOR_TO_START)
            if index < count - 1:
                parts.append(CURSOR_DOWN)
        if count > 1:
            parts.append(CURSOR_UP * (count - 1))
        parts.append(CURSOR_TO_START)
        self.out.write("".join(parts))
        self.line_count = 0

    def draw(self, lines: Sequence[str]) -> None:
        self.clear()
        # Raw mode disables output post-processing, so return the carriage explicitly
        self.out.write("".join(f"{line}\r\n" for line in lines))
        self.out.flush()
        self.line_count = len(lines)


@contextlib.contextmanager
def raw_terminal(fd: int, out: IO[str]) -> Iterator[None]:
    """Put ``fd`` in raw mode with the cursor hidden for the duration of the block.

    The previous terminal attributes and the cursor are restored on normal
    exit, on exceptions (including KeyboardInterrupt) and when SIGTERM or
    SIGHUP arrive while the block is active.
    """
    old_attrs = termios.tcgetattr(fd)
    previous_handlers = {}

    def _terminate(signum, frame):
        raise SystemExit(128 + signum)

    if threading.current_thread() is threading.main_thread():
        for signum in (signal.SIGTERM, getattr(signal, "SIGHUP", None)):
            if signum is not None:
                previous_handlers[signum] = signal.signal(signum, _terminate)

    try:
        tty.setraw(fd)
        out.write(HIDE_CURSOR)
        out.flush()
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_attrs)
        out.write(SHOW_CURSOR)
        out.flush()
        for signum, handler in previous_handlers.items():
            signal.signal(signum, handler)


def run_selector(state: SelectorState, keys: Iterable[List[str]],
                 renderer: InlineRenderer, width: Optional[int] = None,
                 height: Optional[int] = None) -> Optional[str]:
    """
    Drive ``state`` with batches of key tokens until a choice is made.

    Returns the chosen value, or None on cancel or end of input.
    """
    renderer.draw(render_lines(state, width, height))

    for batch in keys:
        needs_redraw = False
        for key in batch:
            result = state.handle_key(key)
            if result.done:
                return result.value
            needs_redraw = needs_redraw or result.redraw
        if needs_redraw:
            renderer.draw(render_lines(state, width, height))

    return None


def _read_key_batches(fd: int, read: Callable[[int, int], bytes] = os.read) -> Iterator[List[str]]:
    while True:
        data = read(fd, READ_CHUNK)
        if not data:
            return
        yield parse_keys(data)


def supports_raw_mode(stream) -> bool:
    if termios is None:
        return False
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


def _numbered_select(options: Sequence[SelectOption], title: Optional[str], out: IO[str]) -> Optional[str]:
    """Fallback for pipes and dumb terminals: pick by number."""
    if title:
        out.write(f"\n{title}\n\n")
    for index, option in enumerate(options, 1):
        out.write(f"  {index}. {option.icon}{option.label}\n")
    out.flush()

    while True:
        answer = prompt("Choose a number (blank or q to cancel)").strip()
        if not answer or answer.lower() == "q":
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return options[int(answer) - 1].value
        out.write(f"⚠️  Enter a number between 1 and {len(options)}.\n")


def interactive_select(options: Sequence[SelectOption], title: Optional[str] = None,
                       *, stdin=None, stdout: Optional[IO[str]] = None) -> Optional[str]:
    """
    Let the user pick one option; returns its value or None when cancelled.

    Keys: type to filter, Backspace to edit the filter, Esc to clear it,
    Up/Down to move (wrapping), Enter to choose, q to cancel before filtering.
    Ctrl-C restores the terminal and raises KeyboardInterrupt.
    """
    if not options:
        return None

    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    if not supports_raw_mode(stdin):
        return _numbered_select(options, title, stdout)

    if title:
        stdout.write(f"\n{title}\n\n")
        stdout.flush()

    fd = stdin.fileno()
    size = shutil.get_terminal_size((80, 24))
    state = SelectorState(options)
    renderer = InlineRenderer(stdout)

    with raw_terminal(fd, stdout):
        try:
            return run_selector(state, _read_key_batches(fd), renderer, size.columns, size.lines)
        finally:
            stdout.write("\r\n")
