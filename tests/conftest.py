"""
Pytest configuration and shared fixtures.
"""
import os
import tempfile
from pathlib import Path

import pytest

from catalog.view_model import EndpointViewModel
from ui.controller import EndpointTreeController
from ui.text_tree import TextTreePresenter
from utils.error_handler import ErrorHandler
from tests.fixtures.endpoint_fixtures import EndpointFixtures


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def temp_config_file():
    """Create temporary configuration file."""
    temp_file = EndpointFixtures.create_temp_env_file(EndpointFixtures.valid_config())
    yield temp_file
    EndpointFixtures.cleanup_temp_file(temp_file)


@pytest.fixture
def invalid_config_file():
    """Create invalid configuration file."""
    temp_file = EndpointFixtures.create_temp_env_file(EndpointFixtures.invalid_config())
    yield temp_file
    EndpointFixtures.cleanup_temp_file(temp_file)


@pytest.fixture
def openapi_file():
    """Create temporary OpenAPI document."""
    temp_file = EndpointFixtures.create_temp_openapi_file()
    yield temp_file
    EndpointFixtures.cleanup_temp_file(temp_file)


@pytest.fixture
def foo_endpoints():
    """Endpoints /a (untagged) and /b (tag x), both in class Foo."""
    return EndpointFixtures.foo_scenario()


@pytest.fixture
def service_endpoints():
    """Endpoints of a small multi-controller service."""
    return EndpointFixtures.user_service()


@pytest.fixture
def error_handler():
    """Error handler without a parent window, so no dialogs are shown."""
    return ErrorHandler()


@pytest.fixture
def presenter():
    """Text presenter recording what the controller pushes."""
    return TextTreePresenter()


@pytest.fixture
def controller(presenter, error_handler):
    """Controller wired to a text presenter and a fresh view model."""
    return EndpointTreeController(
        view_model=EndpointViewModel(),
        presenter=presenter,
        error_handler=error_handler
    )


@pytest.fixture
def tk_root():
    """Create Tkinter root window for UI tests."""
    import tkinter as tk

    root = tk.Tk()
    root.withdraw()  # Hide window during tests
    yield root
    root.destroy()


@pytest.fixture
def clean_env():
    """Clean environment variables for tests."""
    original_env = dict(os.environ)

    catalog_vars = [key for key in os.environ.keys() if key.startswith('CATALOG_')]
    for var in catalog_vars:
        del os.environ[var]

    yield

    os.environ.clear()
    os.environ.update(original_env)


# Pytest markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow running tests")
    config.addinivalue_line("markers", "network: Tests that require network access")
    config.addinivalue_line("markers", "ui: Tests that involve UI components")
    config.addinivalue_line("markers", "config: Configuration related tests")
    config.addinivalue_line("markers", "error: Error handling tests")


# Skip UI tests if no display available
def pytest_collection_modifyitems(config, items):
    """Modify test collection to handle UI tests."""
    skip_ui = pytest.mark.skip(reason="No display available for UI tests")

    # Check if display is available (for Linux/Unix systems)
    has_display = os.environ.get('DISPLAY') is not None

    # On Windows, assume display is available
    if os.name == 'nt':
        has_display = True

    for item in items:
        if "ui" in item.keywords and not has_display:
            item.add_marker(skip_ui)
