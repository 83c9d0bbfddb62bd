"""
Unit tests for configuration management system.
"""
import pytest

from catalog.filtering import HighlightMarker
from catalog.view_mode import ViewMode
from config import (
    CatalogConfiguration, CatalogSettings, EnvLoader, HighlightConfig,
    ScannerConfig, ValidationError
)
from tests.fixtures.endpoint_fixtures import EndpointFixtures


pytestmark = pytest.mark.config


class TestEnvLoader:
    """Test cases for EnvLoader class."""

    @pytest.fixture
    def loader(self):
        return EnvLoader()

    def test_defaults_without_sources(self, loader):
        """Test that an empty environment yields default settings."""
        configuration = loader.load_config(environ={})

        assert configuration.is_valid
        assert configuration.settings == CatalogSettings()

    def test_load_valid_config(self, loader, temp_config_file):
        """Test loading a valid configuration file."""
        configuration = loader.load_config(temp_config_file, environ={})
        settings = configuration.settings

        assert configuration.is_valid, [str(error) for error in configuration.validation_errors]
        assert settings.default_view_mode == ViewMode.SWAGGER
        assert settings.untagged_label == "Other"
        assert settings.filter_debounce_ms == 150
        assert settings.debug is True
        assert settings.highlight == HighlightConfig(open_marker="[", close_marker="]")
        assert settings.scanner.openapi_url == "http://localhost:8080/v3/api-docs"
        assert settings.scanner.timeout == 5000
        assert settings.scanner.rescan_interval == 60000

    def test_environment_overrides_file(self, loader, temp_config_file):
        """Test that process environment values take precedence."""
        configuration = loader.load_config(temp_config_file, environ={
            'CATALOG_DEFAULT_VIEW_MODE': 'class_method',
            'UNRELATED': 'ignored'
        })

        assert configuration.settings.default_view_mode == ViewMode.CLASS_METHOD
        assert configuration.settings.untagged_label == "Other"

    def test_missing_file(self, loader):
        """Test that a missing file is reported, not raised."""
        configuration = loader.load_config("/nonexistent/.env", environ={})

        assert not configuration.is_valid
        assert configuration.validation_errors[0].field == "file"
        assert configuration.settings == CatalogSettings()

    def test_invalid_values_fall_back(self, loader, invalid_config_file):
        """Test that each invalid value is reported and replaced by its default."""
        configuration = loader.load_config(invalid_config_file, environ={})
        settings = configuration.settings
        fields = {error.field for error in configuration.validation_errors}

        assert fields == {
            'CATALOG_DEFAULT_VIEW_MODE',
            'CATALOG_UNTAGGED_LABEL',
            'CATALOG_FILTER_DEBOUNCE_MS',
            'CATALOG_OPENAPI_URL',
            'CATALOG_SCAN_TIMEOUT',
            'CATALOG_RESCAN_INTERVAL',
        }
        assert settings.default_view_mode == ViewMode.AUTO_DISCOVERY
        assert settings.untagged_label == "Untagged"
        assert settings.filter_debounce_ms == 200
        assert settings.scanner.openapi_url is None
        assert settings.scanner.timeout == 30000
        assert settings.scanner.rescan_interval == 0

    def test_view_mode_by_label(self, loader):
        """Test that a view mode can be given by its display label."""
        configuration = loader.load_config(environ={'CATALOG_DEFAULT_VIEW_MODE': 'Class / Method'})

        assert configuration.settings.default_view_mode == ViewMode.CLASS_METHOD

    def test_openapi_file(self, loader):
        """Test configuring a local OpenAPI document."""
        configuration = loader.load_config(environ={'CATALOG_OPENAPI_FILE': 'api.json'})

        assert configuration.settings.scanner.openapi_file == 'api.json'
        assert configuration.settings.scanner.source == 'api.json'

    def test_get_validation_errors(self, loader):
        """Test that errors of the last load are kept on the loader."""
        loader.load_config(environ={'CATALOG_SCAN_TIMEOUT': 'abc'})

        errors = loader.get_validation_errors()

        assert len(errors) == 1
        assert errors[0].value == 'abc'

    def test_reload_resets_errors(self, loader):
        """Test that a second load does not keep errors of the first one."""
        loader.load_config(environ={'CATALOG_SCAN_TIMEOUT': 'abc'})
        configuration = loader.load_config(environ={})

        assert configuration.is_valid
        assert loader.get_validation_errors() == []


class TestConfigModels:
    """Test cases for configuration data classes."""

    def test_highlight_to_marker(self):
        """Test converting highlight settings to a marker."""
        assert HighlightConfig("<em>", "</em>").to_marker() == HighlightMarker(open="<em>", close="</em>")

    def test_scanner_source_prefers_url(self):
        """Test that a URL takes precedence over a file."""
        config = ScannerConfig(openapi_url="http://localhost/api-docs", openapi_file="api.json")

        assert config.source == "http://localhost/api-docs"
        assert config.is_configured

    def test_scanner_not_configured(self):
        """Test a scanner without any source."""
        assert ScannerConfig().is_configured is False

    def test_validation_error_str(self):
        """Test validation error formatting."""
        assert str(ValidationError("CATALOG_SCAN_TIMEOUT", "Must be a valid integer", "x")) == \
            "CATALOG_SCAN_TIMEOUT: Must be a valid integer (got: x)"
        assert str(ValidationError("file", "Missing")) == "file: Missing"

    def test_configuration_validity(self):
        """Test CatalogConfiguration.is_valid."""
        assert CatalogConfiguration(settings=CatalogSettings()).is_valid
        assert not CatalogConfiguration(
            settings=CatalogSettings(),
            validation_errors=[ValidationError("x", "bad")]
        ).is_valid
