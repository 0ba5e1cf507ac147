"""Shared fixtures: isolated settings and silent logging."""

import pytest

from expbackoff.foundation.config import clear_settings_cache
from expbackoff.runtime.observability import configure_logging


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> object:
    """Reset cached settings and strip EXPBACKOFF_* variables around each test."""
    import os
    for key in [k for k in os.environ if k.startswith("EXPBACKOFF_")]:
        monkeypatch.delenv(key)
    monkeypatch.chdir(os.path.dirname(__file__))  # No stray .env from the working directory
    clear_settings_cache()
    configure_logging(format="none")
    yield
    clear_settings_cache()
