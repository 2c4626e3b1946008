"""Shared fixtures for worker tests"""

import pytest

# No sys.path manipulation needed - packages installed via pip install -e


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Ensure test environment is properly configured."""
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.delenv("OUTPUT_PATH", raising=False)
    yield
