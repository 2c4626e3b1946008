"""Shared fixtures for backend tests"""

import os

import pytest

# No sys.path manipulation needed - packages installed via pip install -e
os.environ.setdefault("ENVIRONMENT", "development")


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Settings are cached process-wide; drop them so env overrides apply per test."""
    from gpd_backend.core.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
