"""Shared fixtures for the httpdconf tests."""

import os
import sys
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@pytest.fixture
def make_tree(tmp_path):
    """Write {relative path: content} into a temporary server root and return its path."""
    def _make_tree(files):
        for relative_path, content in files.items():
            path = tmp_path / relative_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return str(tmp_path)
    return _make_tree
