"""Shared fixtures for confcheck tests."""

import pytest

from config_models import ServiceSettings, Settings


@pytest.fixture
def settings():
    """A fresh, unconfigured settings tree."""
    return Settings()


@pytest.fixture
def service_settings():
    """A fresh pydantic settings tree."""
    return ServiceSettings()
