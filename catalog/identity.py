"""
Endpoint identity and tiered restoration.

After a re-scan the previous EndpointRecord objects are gone. An identity is
a structural snapshot of the selected record that is used to find the same
logical endpoint, or the closest reasonable substitute, in the new data.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from .models import EndpointRecord, HttpMethod


logger = logging.getLogger("EndpointCatalog.Identity")


class MatchTier(Enum):
    """Restoration tiers, in priority order."""
    EXACT = "exact"
    FUZZY = "fuzzy"
    TAG = "tag"
    NONE = "none"


@dataclass(frozen=True)
class EndpointIdentity:
    """Structural fingerprint of an endpoint, compared by value only."""
    path: str
    method: HttpMethod
    class_name: str
    method_name: str
    tags: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_endpoint(cls, endpoint: EndpointRecord) -> "EndpointIdentity":
        return cls(
            path=endpoint.path,
            method=endpoint.method,
            class_name=endpoint.class_name,
            method_name=endpoint.method_name,
            tags=tuple(endpoint.tags),
        )

    def exact_match(self, endpoint: EndpointRecord) -> bool:
        """Same route: path and HTTP method are identical."""
        return endpoint.path == self.path and endpoint.method == self.method

    def fuzzy_match(self, endpoint: EndpointRecord) -> bool:
        """Same source method, even if its route changed."""
        return endpoint.class_name == self.class_name and endpoint.method_name == self.method_name

    def tag_match(self, endpoint: EndpointRecord) -> bool:
        """At least one shared tag. Never matches when either side is untagged."""
        if not self.tags or not endpoint.tags:
            return False
        return any(tag in endpoint.tags for tag in self.tags)

    def __str__(self) -> str:
        return f"{self.method.value} {self.path} ({self.class_name}.{self.method_name})"


@dataclass(frozen=True)
class MatchResult:
    """Outcome of a restoration attempt."""
    endpoint: Optional[EndpointRecord] = None
    tier: MatchTier = MatchTier.NONE

    @property
    def found(self) -> bool:
        return self.endpoint is not None


def _tiers(identity: EndpointIdentity) -> List[Tuple[MatchTier, Callable[[EndpointRecord], bool]]]:
    return [
        (MatchTier.EXACT, identity.exact_match),
        (MatchTier.FUZZY, identity.fuzzy_match),
        (MatchTier.TAG, identity.tag_match),
    ]


def find_match(identity: Optional[EndpointIdentity],
               endpoints: Iterable[EndpointRecord]) -> MatchResult:
    """
    Locate the endpoint best matching a stored identity.

    Tiers are tried in order (exact, fuzzy, tag) and the first tier with any
    candidate wins. Within a tier the first candidate in the order of
    endpoints is chosen; callers wanting another tie-break must sort first.
    If no tier matches, nothing is selected: there is no fallback to an
    arbitrary endpoint.

    Args:
        identity: Identity of the last explicit selection, or None
        endpoints: New flat endpoint collection

    Returns:
        MatchResult with the matched endpoint and tier, or an empty result
    """
    if identity is None:
        return MatchResult()

    candidates = list(endpoints)
    for tier, predicate in _tiers(identity):
        for endpoint in candidates:
            if predicate(endpoint):
                logger.debug(f"Restored {identity} as {endpoint} via {tier.value} match")
                return MatchResult(endpoint=endpoint, tier=tier)

    logger.debug(f"No match for {identity} among {len(candidates)} endpoints")
    return MatchResult()
