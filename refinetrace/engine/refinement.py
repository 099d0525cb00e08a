"""
Partition refinement with split provenance.

Each pattern in the processing order splits every current group into the
members it contains and the members it does not. Only the contained part
becomes a new child node; the complement stays where it was. A node's
ancestor chain is therefore the exact list of memberships that separate
its predicates from the rest of the universe.
"""

from __future__ import annotations
import time
from typing import TYPE_CHECKING, Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..core.predicates import Predicate
from ..utils.logging_setup import get_logger, log_operation
from .arena import NodeArena, RefinementNode, capacity_for
from .errors import EngineError, UnknownPredicateError

if TYPE_CHECKING:
    from ..core.patterns import Pattern


logger = get_logger(__name__)

Observer = Callable[["RefinementForest", "Pattern"], None]


class RefinementForest:
    """
    The nodes produced by one refinement pass, plus the location map.
    
    The forest is append-only while refine() runs and is not modified
    afterwards.
    """

    def __init__(self, universe: Sequence[Predicate], patterns: Sequence["Pattern"]):
        self.universe: Tuple[Predicate, ...] = tuple(universe)
        self.patterns: Tuple["Pattern", ...] = tuple(patterns)
        self.arena = NodeArena(capacity_for(self.patterns))
        self.root = self.arena.allocate()
        for predicate in self.universe:
            self.root.add(predicate)
        self._owner: Dict[Predicate, int] = {p: self.root.index for p in self.universe}

    @property
    def capacity(self) -> int:
        return self.arena.capacity

    @property
    def nodes(self) -> List[RefinementNode]:
        """All nodes in creation order, empty ones included."""
        return list(self.arena)

    def owner_of(self, predicate: Predicate) -> RefinementNode:
        """Node currently holding a predicate."""
        return self.arena[self._owner[predicate]]

    def children(self, index: int) -> List[RefinementNode]:
        return [node for node in self.arena if node.parent == index]

    def surviving(self) -> List[RefinementNode]:
        """Non-empty nodes in creation order."""
        return [node for node in self.arena if not node.is_empty]

    def trace(self, index: int) -> List["Pattern"]:
        """
        Split-trace of a node: the originating patterns on the way up to
        the root, most recently applied first.
        """
        trace = []
        node = self.arena[index]
        while node.pattern is not None:
            trace.append(node.pattern)
            node = self.arena[node.parent]
        return trace

    def traces(self) -> Dict[int, List["Pattern"]]:
        """Split-trace of every surviving node, keyed by node index."""
        return {node.index: self.trace(node.index) for node in self.surviving()}

    def _apply(self, pattern: "Pattern") -> int:
        """
        Split the current partition by one pattern.
        
        Returns:
            Number of nodes created
        """
        split_of: Dict[int, RefinementNode] = {}
        for predicate in pattern.members:
            current = self.arena[self._owner[predicate]]
            child = split_of.get(current.index)
            if child is None:
                child = self.arena.allocate(parent=current.index, pattern=pattern)
                split_of[current.index] = child
                logger.debug(f"Node {child.index} split from {current.index} by {pattern.name}")
            current.discard(predicate)
            child.add(predicate)
            self._owner[predicate] = child.index
        return len(split_of)

    def __getitem__(self, index: int) -> RefinementNode:
        return self.arena[index]

    def __iter__(self) -> Iterator[RefinementNode]:
        return iter(self.arena)

    def __len__(self) -> int:
        return len(self.arena)


def _validate_inputs(universe: Sequence[Predicate], patterns: Sequence["Pattern"]) -> None:
    known = set(universe)
    seen = set()
    for pattern in patterns:
        if id(pattern) in seen:
            raise EngineError(
                f"Pattern '{pattern.name}' appears more than once in the processing order",
                details={'pattern': pattern.name},
            )
        seen.add(id(pattern))
        for predicate in pattern.members:
            if predicate not in known:
                raise UnknownPredicateError(
                    f"Pattern '{pattern.name}' references {predicate!r}, which is not in the universe",
                    pattern=pattern.name,
                    predicate=predicate.representation,
                )


def refine(
    universe: Iterable[Predicate],
    patterns: Sequence["Pattern"],
    observer: Optional[Observer] = None,
) -> RefinementForest:
    """
    Run the refinement pass over an explicit, ordered pattern sequence.
    
    Args:
        universe: Every predicate to classify (e.g. a PredicateCatalog)
        patterns: Splitters, applied in exactly this order
        observer: Called as observer(forest, pattern) after each pattern
        
    Returns:
        The finished forest
        
    Raises:
        UnknownPredicateError: If a pattern member is outside the universe
        EngineError: If a pattern appears twice in the order
    """
    universe = tuple(dict.fromkeys(universe))
    patterns = tuple(patterns)
    _validate_inputs(universe, patterns)

    log_operation(logger, "refine", predicates=len(universe), patterns=len(patterns))
    start = time.perf_counter()

    forest = RefinementForest(universe, patterns)
    for pattern in patterns:
        created = forest._apply(pattern)
        logger.debug(f"Pattern {pattern.name}: {created} new node(s)")
        if observer is not None:
            observer(forest, pattern)

    logger.info(
        f"Refinement finished: {len(forest)} nodes ({forest.capacity} reserved), "
        f"{len(forest.surviving())} surviving",
        extra={'duration': time.perf_counter() - start},
    )
    return forest
