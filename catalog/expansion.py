"""
Expansion state of the presentation tree.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable

from .view_mode import GroupKey, NodeStructure


@dataclass(frozen=True)
class ExpansionState:
    """Set of expanded group keys, captured before a mode switch or refresh."""
    expanded_keys: FrozenSet[GroupKey] = field(default_factory=frozenset)

    @classmethod
    def of(cls, keys: Iterable[GroupKey]) -> "ExpansionState":
        return cls(expanded_keys=frozenset(keys))

    @classmethod
    def empty(cls) -> "ExpansionState":
        return cls()

    def restorable_in(self, structure: NodeStructure) -> FrozenSet[GroupKey]:
        """
        Keys that should be re-expanded in a new structure.

        Group keys are paths of names, so restoration is exact set membership;
        a key whose group no longer exists is dropped.
        """
        return self.expanded_keys & structure.group_keys()

    def __len__(self) -> int:
        return len(self.expanded_keys)

    def __contains__(self, key: GroupKey) -> bool:
        return key in self.expanded_keys
