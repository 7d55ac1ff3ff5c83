"""
Shared pytest fixtures and configuration for backup-spine tests.

This module provides:
- src/ on sys.path for running without an editable install
- Settings and registry cleanup for test isolation
"""

import sys
from pathlib import Path

import pytest

# Ensure backup_spine package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from backup_spine.core.settings import clear_settings_cache
from backup_spine.jobs import reset_default_registry


@pytest.fixture(autouse=True)
def _isolate_globals():
    """Reset cached settings and the default job registry around each test."""
    clear_settings_cache()
    reset_default_registry()
    yield
    clear_settings_cache()
    reset_default_registry()
