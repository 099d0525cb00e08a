"""
Node storage for the refinement forest.

Nodes are addressed by integer index. An index is assigned once, at
allocation, and never changes; parent links, the location map and the
per-pattern split caches all hold indices rather than node objects.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Optional

from ..core.predicates import Predicate
from .errors import CapacityError

if TYPE_CHECKING:
    from ..core.patterns import Pattern


@dataclass
class RefinementNode:
    """
    A maximal group of predicates sharing the same split history.
    
    members is an insertion-ordered set (dict keys): predicates appear in
    the order they arrived at this node.
    """
    index: int
    parent: Optional[int] = None
    pattern: Optional["Pattern"] = None
    members: Dict[Predicate, None] = field(default_factory=dict)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_empty(self) -> bool:
        return not self.members

    def add(self, predicate: Predicate) -> None:
        self.members[predicate] = None

    def discard(self, predicate: Predicate) -> None:
        self.members.pop(predicate, None)

    def __contains__(self, predicate: object) -> bool:
        return predicate in self.members

    def __len__(self) -> int:
        return len(self.members)


def capacity_for(patterns: Iterable["Pattern"]) -> int:
    """Upper bound on nodes: the root plus one per predicate occurrence."""
    return 1 + sum(len(pattern) for pattern in patterns)


class NodeArena:
    """
    Pre-sized, append-only node store.
    
    Slots are reserved up front for the full capacity bound; allocating
    past it raises CapacityError instead of growing.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._slots: List[Optional[RefinementNode]] = [None] * capacity
        self._size = 0

    def allocate(self, parent: Optional[int] = None,
                 pattern: Optional["Pattern"] = None) -> RefinementNode:
        """
        Create a node in the next free slot.
        
        Args:
            parent: Index of the node this one splits from
            pattern: Pattern whose membership test caused the split
            
        Returns:
            The new node
            
        Raises:
            CapacityError: If every slot is already taken
        """
        if self._size >= self.capacity:
            raise CapacityError(
                f"Node arena exhausted: capacity {self.capacity}",
                capacity=self.capacity,
                requested=self._size + 1,
            )
        if parent is not None and not 0 <= parent < self._size:
            raise IndexError(f"parent index {parent} is not an allocated node")
        node = RefinementNode(index=self._size, parent=parent, pattern=pattern)
        self._slots[self._size] = node
        self._size += 1
        return node

    def __getitem__(self, index: int) -> RefinementNode:
        if not 0 <= index < self._size:
            raise IndexError(f"node index {index} out of range")
        return self._slots[index]

    def __iter__(self) -> Iterator[RefinementNode]:
        """Iterate over allocated nodes in creation order."""
        for index in range(self._size):
            yield self._slots[index]

    def __reversed__(self) -> Iterator[RefinementNode]:
        for index in range(self._size - 1, -1, -1):
            yield self._slots[index]

    def __len__(self) -> int:
        return self._size
