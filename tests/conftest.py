"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import pytest
from privshell.core.utilbox import UtilBox


@pytest.fixture
def toybox() -> UtilBox:
    """A resolved toybox utility binary."""
    return UtilBox(
        name="toybox",
        path="/system/bin/toybox",
        quoted='"/system/bin/toybox"',
        version="toybox 0.8.4-android",
    )


@pytest.fixture
def mock_ls_output() -> str:
    """Sample ``ls -bAll`` output of an app data directory."""
    return """total 40
drwxrwx--x 2 u0_a441 u0_a441       4096 2021-10-19 01:54:32.029625295 +0200 cache
drwxrws--x 2 u0_a441 u0_a441_cache 4096 2021-10-19 01:54:32.029625295 +0200 code_cache
drwxrwx--x 5 u0_a441 u0_a441       4096 2021-10-19 01:54:32.029625295 +0200 files
-rw-rw---- 1 u0_a441 u0_a441       4096 2021-10-19 01:54:32.029625295 +0200 file.txt
lrwxrwxrwx 1 root    root            61 2021-08-25 16:44:49.757000571 +0200 lib -> /data/app/lib/arm
-rw-rw---- 1 u0_a441 u0_a441         12 2021-10-19 01:54:32.029625295 +0200 my\\ notes.txt
"""
