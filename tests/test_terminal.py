"""
Tests for the inline selector (ct_tools/utils/terminal.py).

The state machine, key parser and renderer are exercised directly; raw
terminal handling is checked with termios/tty patched out.
"""

import io
from unittest.mock import Mock, patch

import pytest

from ct_tools.utils import terminal
from ct_tools.utils.terminal import (
    CURSOR_UP,
    HIDE_CURSOR,
    KEY_BACKSPACE,
    KEY_CTRL_C,
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_UNKNOWN,
    KEY_UP,
    SHOW_CURSOR,
    InlineRenderer,
    SelectOption,
    SelectorState,
    filter_options,
    interactive_select,
    parse_keys,
    raw_terminal,
    render_lines,
    run_selector,
)


@pytest.fixture
def options():
    return [
        SelectOption(label="red-button", value="red"),
        SelectOption(label="blue-button", value="blue"),
        SelectOption(label="green-light", value="green"),
    ]


class TestFiltering:
    """Case-insensitive substring filtering."""

    def test_filter_keeps_original_order(self, options):
        filtered = filter_options(options, "button")
        assert [o.label for o in filtered] == ["red-button", "blue-button"]

    def test_filter_is_case_insensitive(self, options):
        assert [o.value for o in filter_options(options, "GREEN")] == ["green"]

    def test_typing_resets_cursor(self, options):
        state = SelectorState(options)
        state.handle_key(KEY_DOWN)
        state.handle_key(KEY_DOWN)
        assert state.selected_index == 2

        for char in "button":
            state.handle_key(char)

        assert [o.label for o in state.filtered] == ["red-button", "blue-button"]
        assert state.selected_index == 0

    def test_backspace_and_escape(self, options):
        state = SelectorState(options)
        for char in "red":
            state.handle_key(char)
        assert len(state.filtered) == 1

        state.handle_key(KEY_BACKSPACE)
        assert state.filter_text == "re"
        assert len(state.filtered) == 2  # red-button, green-light

        state.handle_key(KEY_ESCAPE)
        assert state.filter_text == ""
        assert len(state.filtered) == 3


class TestSelectorKeys:
    """Navigation, selection and cancellation."""

    def test_arrows_wrap(self, options):
        state = SelectorState(options)
        state.handle_key(KEY_UP)
        assert state.highlighted.value == "green"
        state.handle_key(KEY_DOWN)
        assert state.highlighted.value == "red"

    def test_enter_returns_highlighted_value(self, options):
        state = SelectorState(options)
        state.handle_key(KEY_DOWN)
        result = state.handle_key(KEY_ENTER)
        assert result.done
        assert result.value == "blue"

    def test_enter_with_no_matches_returns_none(self, options):
        state = SelectorState(options)
        for char in "zzz":
            state.handle_key(char)
        result = state.handle_key(KEY_ENTER)
        assert result.done
        assert result.value is None

    def test_q_cancels_only_without_filter(self, options):
        state = SelectorState(options)
        result = state.handle_key("q")
        assert result.done and result.value is None

        state = SelectorState(options)
        state.handle_key("b")
        result = state.handle_key("q")
        assert not result.done
        assert state.filter_text == "bq"

    def test_ctrl_c_raises(self, options):
        state = SelectorState(options)
        with pytest.raises(KeyboardInterrupt):
            state.handle_key(KEY_CTRL_C)


class TestParseKeys:
    """Raw byte chunks to key tokens."""

    def test_arrow_sequences(self):
        assert parse_keys(b"\x1b[A\x1b[B") == [KEY_UP, KEY_DOWN]

    def test_application_mode_arrows(self):
        assert parse_keys(b"\x1bOA") == [KEY_UP]

    def test_multiple_printables_in_one_chunk(self):
        assert parse_keys(b"abc\r") == ["a", "b", "c", KEY_ENTER]

    def test_bare_escape_and_controls(self):
        assert parse_keys(b"\x1b") == [KEY_ESCAPE]
        assert parse_keys(b"\x7f\x03") == [KEY_BACKSPACE, KEY_CTRL_C]

    def test_unknown_csi_sequence(self):
        assert parse_keys(b"\x1b[3~x") == [KEY_UNKNOWN, "x"]

    def test_utf8_character(self):
        assert parse_keys("é".encode("utf-8")) == ["é"]


class TestRendering:
    """Line counts and in-place redraws."""

    def test_render_line_counts_follow_filter(self, options):
        state = SelectorState(options)
        assert len(render_lines(state)) == 4

        state.set_filter("button")
        lines = render_lines(state)
        assert len(lines) == 3
        assert "button" in lines[0]

        state.set_filter("nothing")
        lines = render_lines(state)
        assert len(lines) == 2
        assert "(no matches)" in lines[1]

    def test_highlight_marker(self, options):
        lines = render_lines(SelectorState(options))
        assert lines[1].startswith("→ ")
        assert lines[2].startswith("  ")

    def test_long_labels_truncated_to_width(self):
        state = SelectorState([SelectOption(label="x" * 200, value="x")])
        lines = render_lines(state, width=40)
        assert "…" in lines[1]

    def test_long_lists_fit_the_terminal(self):
        options = [SelectOption(label=f"pattern-{n:02d}.tsx", value=str(n)) for n in range(50)]
        state = SelectorState(options)

        for selected in (0, 25, 49):
            state.selected_index = selected
            lines = render_lines(state, width=80, height=10)

            assert len(lines) <= 9
            assert any(line.startswith("→ ") and f"pattern-{selected:02d}" in line for line in lines)

        state.selected_index = 25
        lines = render_lines(state, height=10)
        assert "↑ 22 more" in lines[1]
        assert "↓ 22 more" in lines[-1]

    def test_short_lists_ignore_height(self, options):
        assert render_lines(SelectorState(options), height=10) == render_lines(SelectorState(options))

    def test_renderer_clears_previous_lines(self):
        out = io.StringIO()
        renderer = InlineRenderer(out)

        renderer.draw(["a", "b", "c"])
        assert renderer.line_count == 3
        assert CURSOR_UP not in out.getvalue()

        out.seek(0)
        out.truncate()
        renderer.draw(["a", "b"])

        written = out.getvalue()
        assert written.startswith(CURSOR_UP * 3)
        assert written.endswith("a\r\nb\r\n")
        assert renderer.line_count == 2

    def test_run_selector_drives_state(self, options):
        out = io.StringIO()
        renderer = InlineRenderer(out)
        batches = iter([["b", "l"], [KEY_ENTER]])

        value = run_selector(SelectorState(options), batches, renderer)

        assert value == "blue"

    def test_run_selector_end_of_input(self, options):
        value = run_selector(SelectorState(options), iter([]), InlineRenderer(io.StringIO()))
        assert value is None


class TestRawTerminal:
    """Terminal attributes and cursor are restored on every exit path."""

    def test_restores_after_keyboard_interrupt(self):
        fake_termios = Mock()
        fake_termios.tcgetattr.return_value = ["saved"]
        out = io.StringIO()

        with patch.object(terminal, "termios", fake_termios), \
                patch.object(terminal, "tty", Mock()) as fake_tty:
            with pytest.raises(KeyboardInterrupt):
                with raw_terminal(5, out):
                    raise KeyboardInterrupt

        fake_tty.setraw.assert_called_once_with(5)
        fake_termios.tcsetattr.assert_called_once_with(5, fake_termios.TCSADRAIN, ["saved"])
        assert out.getvalue() == HIDE_CURSOR + SHOW_CURSOR


class TestNumberedFallback:
    """Non-TTY input falls back to numbered selection."""

    def test_pick_by_number(self, options):
        stdin = io.StringIO()
        out = io.StringIO()
        with patch.object(terminal, "prompt", return_value="2"):
            value = interactive_select(options, "Pick", stdin=stdin, stdout=out)
        assert value == "blue"
        assert "1. red-button" in out.getvalue()

    def test_blank_cancels(self, options):
        with patch.object(terminal, "prompt", return_value=""):
            value = interactive_select(options, stdin=io.StringIO(), stdout=io.StringIO())
        assert value is None

    def test_empty_options(self):
        assert interactive_select([]) is None
