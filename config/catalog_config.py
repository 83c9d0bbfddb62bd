"""
Data classes for the endpoint catalog configuration.
"""
from dataclasses import dataclass, field
from typing import Optional, List, Any

from catalog.filtering import HighlightMarker
from catalog.view_mode import DEFAULT_UNTAGGED_LABEL, ViewMode


@dataclass
class HighlightConfig:
    """Markup used to highlight filter matches."""
    open_marker: str = "<b>"
    close_marker: str = "</b>"

    def to_marker(self) -> HighlightMarker:
        return HighlightMarker(open=self.open_marker, close=self.close_marker)


@dataclass
class ScannerConfig:
    """Configuration for endpoint discovery."""
    openapi_url: Optional[str] = None
    openapi_file: Optional[str] = None
    timeout: int = 30000  # milliseconds
    rescan_interval: int = 0  # milliseconds, 0 disables periodic rescans

    @property
    def source(self) -> Optional[str]:
        """The configured source, a URL taking precedence over a file."""
        return self.openapi_url or self.openapi_file

    @property
    def is_configured(self) -> bool:
        return self.source is not None


@dataclass
class CatalogSettings:
    """Settings for the endpoint catalog panel."""
    default_view_mode: ViewMode = ViewMode.AUTO_DISCOVERY
    untagged_label: str = DEFAULT_UNTAGGED_LABEL
    filter_debounce_ms: int = 200
    debug: bool = False
    highlight: HighlightConfig = field(default_factory=HighlightConfig)
    scanner: ScannerConfig = field(default_factory=ScannerConfig)


@dataclass
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Optional[Any] = None

    def __str__(self) -> str:
        """String representation of the validation error."""
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value})"
        return f"{self.field}: {self.message}"


@dataclass
class CatalogConfiguration:
    """Loaded settings together with any problems found while loading them."""
    settings: CatalogSettings
    validation_errors: List[ValidationError] = None

    def __post_init__(self):
        """Initialize default values after object creation."""
        if self.validation_errors is None:
            self.validation_errors = []

    @property
    def is_valid(self) -> bool:
        """Check if configuration is valid."""
        return len(self.validation_errors) == 0
