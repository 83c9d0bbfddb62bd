"""
Endpoint data model shared by the catalog engine.
Records are produced by a scanner and only ever read by the engine.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class HttpMethod(Enum):
    """HTTP verbs an endpoint can be declared with."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def from_string(cls, method: str) -> Optional["HttpMethod"]:
        """
        Look up a method by name, ignoring case.

        Args:
            method: Verb as written in a route declaration or OpenAPI document

        Returns:
            Matching HttpMethod, or None for unsupported verbs
        """
        try:
            return cls[method.strip().upper()]
        except (KeyError, AttributeError):
            return None


class EndpointSource(Enum):
    """Where an endpoint record came from."""
    CODE_SCAN = "code_scan"
    OPENAPI = "openapi"


@dataclass(frozen=True)
class EndpointRecord:
    """One discovered HTTP route together with the source method declaring it."""
    path: str
    method: HttpMethod
    class_name: str
    method_name: str
    summary: Optional[str] = None
    tags: Tuple[str, ...] = field(default_factory=tuple)
    operation_id: Optional[str] = None
    source: EndpointSource = EndpointSource.CODE_SCAN
    source_file: Optional[str] = None

    def __post_init__(self):
        # Tags are a set kept in declaration order; a tuple keeps the record hashable
        object.__setattr__(self, 'tags', tuple(dict.fromkeys(self.tags or ())))

    def __str__(self) -> str:
        return f"{self.method.value} {self.path}"

    @property
    def display_name(self) -> str:
        """Label used for leaf nodes in the presentation tree."""
        if self.summary:
            return f"{self.method.value} {self.path} - {self.summary}"
        return str(self)
