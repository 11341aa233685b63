"""
Pytest configuration and shared fixtures for reqchain tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_models = importlib.import_module("fixtures.models")
_server = importlib.import_module("fixtures.server")
_text_app = importlib.import_module("fixtures.text_app")

DEFAULT_USER_AGENT = _models.DEFAULT_USER_AGENT
EchoServerThread = _server.EchoServerThread

from reqchain import HttpConfig, Request, RequestsTransport, Serializer  # noqa: E402
from reqchain.config import set_default_config  # noqa: E402


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture(scope="session")
def echo_server():
    """Echo server listening on a free local port for the whole session."""
    server = EchoServerThread()
    server.start()
    yield server
    server.stop()


@pytest.fixture(scope="session")
def text_server():
    """Server answering fixed non-ASCII text bodies."""
    server = EchoServerThread(app=_text_app.create_text_app())
    server.start()
    yield server
    server.stop()


@pytest.fixture
def serializer():
    """Serializer with JSON, XML and form encoders."""
    return Serializer.default()


@pytest.fixture
def transport():
    """Real transport that ignores proxy settings from the environment."""
    with RequestsTransport(HttpConfig(timeout=10.0, trust_env=False)) as t:
        yield t


@pytest.fixture
def request_builder(echo_server, transport, serializer):
    """Base request pointed at the echo server."""
    return (
        Request.create(transport, serializer)
        .base(echo_server.url)
        .header("User-Agent", DEFAULT_USER_AGENT)
    )


@pytest.fixture(autouse=True)
def reset_default_config():
    """Keep tests from leaking the process-wide default configuration."""
    yield
    set_default_config(None)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (start the echo server)"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
