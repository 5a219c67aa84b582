"""
Test suite for ct-tools.

This package contains:
- Unit tests for the launcher, selector and space helpers
- Sync engine, merge and daemon tests against fake charm clients
- Reader tests over temporary SQLite databases and canned osascript output
- CLI tests that run the entry points with patched commands
"""
