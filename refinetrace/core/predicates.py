"""Predicate catalog: the uniquing store for atomic elements."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Hashable, Iterator, Optional


@dataclass(frozen=True)
class Predicate:
    """An atomic, immutable element identified by its representation value."""
    
    representation: Hashable

    @property
    def symbol(self) -> str:
        """Printable token for reports (integer codes render as characters)."""
        if isinstance(self.representation, int) and 0 <= self.representation < 0x110000:
            return chr(self.representation)
        return str(self.representation)

    def __str__(self) -> str:
        return self.symbol


class PredicateCatalog:
    """
    Hands out exactly one Predicate per representation value.
    
    Because every predicate a caller holds came from get(), identity
    comparison is a valid membership test everywhere else.
    """

    def __init__(self) -> None:
        self._predicates: Dict[Hashable, Predicate] = {}

    def get(self, representation: Hashable) -> Predicate:
        """Return the registered predicate, creating it on first use."""
        predicate = self._predicates.get(representation)
        if predicate is None:
            predicate = Predicate(representation)
            self._predicates[representation] = predicate
        return predicate

    def find(self, representation: Hashable) -> Optional[Predicate]:
        """Look up a predicate without registering it."""
        return self._predicates.get(representation)

    def issued(self, predicate: Predicate) -> bool:
        """True if this exact object was handed out by this catalog."""
        return self._predicates.get(predicate.representation) is predicate

    def __contains__(self, predicate: object) -> bool:
        return isinstance(predicate, Predicate) and self.issued(predicate)

    def __iter__(self) -> Iterator[Predicate]:
        """Iterate over registered predicates (registration order, for listing)."""
        return iter(self._predicates.values())

    def __len__(self) -> int:
        return len(self._predicates)
