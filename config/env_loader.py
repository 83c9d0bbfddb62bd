"""
Environment configuration loader for the endpoint catalog.
Reads .env files with python-dotenv and builds CatalogSettings.
"""
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional
from urllib.parse import urlparse

from dotenv import dotenv_values

from catalog.view_mode import ViewMode
from .catalog_config import (
    CatalogConfiguration, CatalogSettings, HighlightConfig, ScannerConfig,
    ValidationError
)


ENV_PREFIX = "CATALOG_"


class EnvLoader:
    """Loads and parses environment configuration files."""

    def __init__(self):
        """Initialize the environment loader."""
        self._env_data: Dict[str, str] = {}
        self._validation_errors: List[ValidationError] = []

    def load_config(self,
                    env_path: Optional[str] = None,
                    environ: Optional[Mapping[str, str]] = None) -> CatalogConfiguration:
        """
        Load configuration from an environment file and the process environment.

        Values from the process environment take precedence over the file.
        Invalid values are reported as validation errors and replaced by
        defaults; loading never raises.

        Args:
            env_path: Path to the .env file, optional
            environ: Environment mapping, defaults to os.environ

        Returns:
            CatalogConfiguration with parsed settings
        """
        self._validation_errors = []
        self._env_data = {}

        if env_path:
            self._load_env_file(env_path)

        if environ is None:
            environ = os.environ
        for key, value in environ.items():
            if key.startswith(ENV_PREFIX):
                self._env_data[key] = value

        settings = CatalogSettings(
            default_view_mode=self._parse_view_mode(),
            untagged_label=self._parse_untagged_label(),
            filter_debounce_ms=self._parse_int('CATALOG_FILTER_DEBOUNCE_MS', 200, minimum=0),
            debug=self._parse_bool('CATALOG_DEBUG'),
            highlight=self._parse_highlight_config(),
            scanner=self._parse_scanner_config()
        )

        return CatalogConfiguration(settings=settings, validation_errors=self._validation_errors)

    def _load_env_file(self, env_path: str) -> bool:
        """
        Load variables from a .env file.

        Args:
            env_path: Path to the .env file

        Returns:
            True if file was loaded successfully, False otherwise
        """
        env_file = Path(env_path)
        if not env_file.exists():
            self._validation_errors.append(
                ValidationError("file", f"Environment file not found: {env_path}")
            )
            return False

        try:
            values = dotenv_values(env_file)
        except (OSError, UnicodeDecodeError) as e:
            self._validation_errors.append(
                ValidationError("file", f"Error reading environment file: {e}")
            )
            return False

        for key, value in values.items():
            if value is None:
                self._validation_errors.append(
                    ValidationError(key, "Missing value")
                )
                continue
            self._env_data[key] = value

        return True

    def _parse_view_mode(self) -> ViewMode:
        raw = self._env_data.get('CATALOG_DEFAULT_VIEW_MODE')
        if not raw:
            return ViewMode.default()

        mode = ViewMode.from_string(raw)
        if mode is None:
            self._validation_errors.append(
                ValidationError(
                    'CATALOG_DEFAULT_VIEW_MODE',
                    f"Must be one of: {', '.join(m.value for m in ViewMode)}",
                    raw
                )
            )
            return ViewMode.default()
        return mode

    def _parse_untagged_label(self) -> str:
        default = CatalogSettings().untagged_label
        raw = self._env_data.get('CATALOG_UNTAGGED_LABEL')
        if raw is None:
            return default
        if not raw.strip():
            self._validation_errors.append(
                ValidationError('CATALOG_UNTAGGED_LABEL', "Label must not be blank")
            )
            return default
        return raw.strip()

    def _parse_highlight_config(self) -> HighlightConfig:
        config = HighlightConfig()
        config.open_marker = self._env_data.get('CATALOG_HIGHLIGHT_OPEN', config.open_marker)
        config.close_marker = self._env_data.get('CATALOG_HIGHLIGHT_CLOSE', config.close_marker)
        return config

    def _parse_scanner_config(self) -> ScannerConfig:
        """Parse endpoint discovery settings."""
        config = ScannerConfig()

        url = self._env_data.get('CATALOG_OPENAPI_URL')
        if url:
            if self._validate_url(url):
                config.openapi_url = url
            else:
                self._validation_errors.append(
                    ValidationError('CATALOG_OPENAPI_URL', "Invalid URL format", url)
                )

        openapi_file = self._env_data.get('CATALOG_OPENAPI_FILE')
        if openapi_file:
            config.openapi_file = openapi_file

        config.timeout = self._parse_int('CATALOG_SCAN_TIMEOUT', config.timeout, minimum=1)
        config.rescan_interval = self._parse_int('CATALOG_RESCAN_INTERVAL', config.rescan_interval, minimum=0)

        return config

    def _parse_int(self, key: str, default: int, minimum: int = 0) -> int:
        raw = self._env_data.get(key)
        if raw is None or raw == "":
            return default

        try:
            value = int(raw)
        except ValueError:
            self._validation_errors.append(
                ValidationError(key, "Must be a valid integer", raw)
            )
            return default

        if value < minimum:
            self._validation_errors.append(
                ValidationError(key, f"Must be at least {minimum}", value)
            )
            return default
        return value

    def _parse_bool(self, key: str) -> bool:
        return self._env_data.get(key, '').strip().lower() in ('true', '1', 'yes')

    def _validate_url(self, url: str) -> bool:
        parsed = urlparse(url)
        return parsed.scheme in ('http', 'https') and bool(parsed.netloc)

    def get_validation_errors(self) -> List[ValidationError]:
        """Errors collected by the last load_config() call."""
        return self._validation_errors.copy()
