"""
Tests for display helpers (ct_tools/utils/text.py).
"""

from datetime import datetime, timezone

import pytest

from ct_tools.utils.text import format_time_since, preview, short_path


class TestShortPath:

    def test_repo_user_and_wip_context(self):
        path = "/Users/alex/Code/community-patterns/patterns/jkomoros/WIP/cozy-poll.tsx"
        assert short_path(path) == "cozy-poll.tsx  (community-patterns/jkomoros/WIP)"

    def test_repo_user_context(self):
        path = "/Users/alex/Code/community-patterns-2/patterns/alex/counter.tsx"
        assert short_path(path) == "counter.tsx  (community-patterns-2/alex)"

    def test_labs_without_user_dir(self):
        assert short_path("/x/labs/packages/patterns/foo.tsx") == "foo.tsx"

    def test_unrelated_path(self):
        assert short_path("/tmp/foo.tsx") == "foo.tsx"


class TestFormatTimeSince:
    NOW = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("timestamp, expected", [
        ("2025-01-10T11:59:40Z", "just now"),
        ("2025-01-10T11:55:00Z", "5 min ago"),
        ("2025-01-10T11:00:00Z", "1 hour ago"),
        ("2025-01-10T09:00:00Z", "3 hours ago"),
        ("2025-01-09T12:00:00Z", "yesterday"),
        ("2025-01-05T12:00:00Z", "5 days ago"),
    ])
    def test_buckets(self, timestamp, expected):
        assert format_time_since(timestamp, now=self.NOW) == expected

    def test_missing_and_invalid(self):
        assert format_time_since(None) == "never"
        assert format_time_since("not a date") == "unknown"


def test_preview_flattens_whitespace():
    assert preview("hello\n  world") == "hello world"
    assert preview(None) == "(no text)"
    assert len(preview("x" * 100)) == 40
