"""Pytest configuration and shared fixtures."""
from unittest.mock import Mock

import pytest

import proxystate.config as config_module
from proxystate import create_tracking_proxy


@pytest.fixture(autouse=True)
def restore_default_config():
    """Restore the module-level default config after each test."""
    original = config_module._default_config
    yield
    config_module._default_config = original


@pytest.fixture
def listener():
    """A listener that records its calls."""
    return Mock(return_value=None)


@pytest.fixture
def nested_raw():
    return {"foo": {"bar": 123}, "baz": 456}


@pytest.fixture
def tracking(nested_raw, listener):
    """Tracking instance over nested_raw with listener attached."""
    handle = create_tracking_proxy(nested_raw)
    handle.add_listener(listener)
    return handle
