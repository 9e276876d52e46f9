"""
Shared fixtures.

Every test starts from default configuration, a fresh default rule
registry and quiet logging.
"""

from __future__ import annotations

import io
import os

import pytest

from wordforge.core.config import reset_config
from wordforge.utils.logger import configure_logging
from wordforge.validation import registry as registry_module


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    for key in list(os.environ):
        if key.startswith("WORDFORGE_"):
            monkeypatch.delenv(key)

    reset_config()
    registry_module._default_registry = None
    yield
    configure_logging("WARNING")
    reset_config()
    registry_module._default_registry = None


@pytest.fixture
def log_stream():
    """Capture DEBUG output of every WordForge logger."""
    stream = io.StringIO()
    configure_logging("DEBUG", stream=stream)
    return stream
