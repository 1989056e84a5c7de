import pytest
from unittest.mock import patch

from callgate.config import CallgateConfig
from callgate.handlers import HandlerRegistry, get_registry


@pytest.fixture
def registry():
    """A fresh registry per test."""
    return HandlerRegistry()


@pytest.fixture(autouse=True)
def clean_default_registry():
    yield
    get_registry().clear()


@pytest.fixture
def test_config():
    return CallgateConfig(
        app_config={"site_name": "test-site"},
        log_level="DEBUG",
        log_format="pretty",
        console=False,
    )


@pytest.fixture(autouse=True)
def mock_load_config(request, test_config):
    # Don't patch for config tests
    if "test_config" in request.module.__name__:
        yield
        return

    with patch("callgate.config.load_config", return_value=test_config):
        yield
