"""
Invariant checks for refinement forests.

Provides partition, single-child-per-splitter and monotonic-depletion
checks, plus the order-independence check: two predicates share a
surviving node iff they have the same membership vector across all
patterns, whatever order the patterns were applied in.
"""

from __future__ import annotations
from itertools import permutations
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterable, List, Optional, Sequence, Set

import numpy as np

from ..core.predicates import Predicate
from ..utils.logging_setup import get_logger
from .errors import InvariantViolation
from .refinement import RefinementForest, refine

if TYPE_CHECKING:
    from ..core.patterns import Pattern


logger = get_logger(__name__)

Partition = Set[FrozenSet[Predicate]]


def check_partition(forest: RefinementForest) -> bool:
    """
    Verify node member sets are pairwise disjoint and cover the universe.
    
    Raises:
        InvariantViolation: On overlap, a missing or a foreign predicate
    """
    placed: Dict[Predicate, int] = {}
    for node in forest:
        for predicate in node.members:
            if predicate in placed:
                raise InvariantViolation(
                    f"{predicate!r} is in nodes {placed[predicate]} and {node.index}",
                    invariant='partition',
                    node=node.index,
                )
            placed[predicate] = node.index

    universe = set(forest.universe)
    missing = universe - placed.keys()
    foreign = placed.keys() - universe
    if missing or foreign:
        raise InvariantViolation(
            "Node members do not cover the universe exactly",
            invariant='partition',
            details={
                'missing': sorted(p.symbol for p in missing),
                'foreign': sorted(p.symbol for p in foreign),
            },
        )
    return True


def check_single_child(forest: RefinementForest) -> bool:
    """
    Verify no node has two children created by the same pattern.
    
    Raises:
        InvariantViolation: If a (parent, pattern) pair repeats
    """
    seen: Dict[tuple, int] = {}
    for node in forest:
        if node.parent is None:
            continue
        key = (node.parent, id(node.pattern))
        if key in seen:
            raise InvariantViolation(
                f"Node {node.parent} has two children from pattern {node.pattern.name}: "
                f"{seen[key]} and {node.index}",
                invariant='single_child',
                node=node.parent,
            )
        seen[key] = node.index
    return True


class DepletionMonitor:
    """
    Observer for refine() that checks invariants after every pattern.
    
    Tracks each node's member set from one pattern to the next; a node
    that existed before a pattern may lose members but never gain them.
    """

    def __init__(self, check_structure: bool = True):
        self.check_structure = check_structure
        self.steps = 0
        self._previous: Dict[int, FrozenSet[Predicate]] = {}

    def __call__(self, forest: RefinementForest, pattern: "Pattern") -> None:
        for node in forest:
            current = frozenset(node.members)
            before = self._previous.get(node.index)
            if before is not None and not current <= before:
                gained = sorted(p.symbol for p in current - before)
                raise InvariantViolation(
                    f"Node {node.index} gained {gained} while applying {pattern.name}",
                    invariant='depletion',
                    node=node.index,
                )
            self._previous[node.index] = current
        if self.check_structure:
            check_partition(forest)
            check_single_child(forest)
        self.steps += 1


def membership_classes(universe: Sequence[Predicate],
                       patterns: Iterable["Pattern"]) -> Partition:
    """
    Group predicates by their membership vector across all patterns.
    
    This is the coarsest partition consistent with every pattern,
    computed directly rather than by refinement.
    """
    universe = list(dict.fromkeys(universe))
    patterns = list(patterns)
    if not universe:
        return set()
    if not patterns:
        return {frozenset(universe)}

    matrix = np.zeros((len(universe), len(patterns)), dtype=bool)
    for column, pattern in enumerate(patterns):
        matrix[:, column] = [predicate in pattern.member_set for predicate in universe]

    _, labels = np.unique(matrix, axis=0, return_inverse=True)
    groups: Dict[int, List[Predicate]] = {}
    for predicate, label in zip(universe, np.asarray(labels).ravel()):
        groups.setdefault(int(label), []).append(predicate)
    return {frozenset(group) for group in groups.values()}


def forest_classes(forest: RefinementForest) -> Partition:
    """Partition induced by the forest's surviving nodes."""
    return {frozenset(node.members) for node in forest.surviving()}


def check_equivalence(forest: RefinementForest) -> bool:
    """
    Verify the forest groups predicates exactly by membership vector.
    
    Raises:
        InvariantViolation: If the induced partition differs
    """
    expected = membership_classes(forest.universe, forest.patterns)
    actual = forest_classes(forest)
    if expected != actual:
        raise InvariantViolation(
            "Surviving nodes do not match membership-vector classes",
            invariant='equivalence',
            details={
                'expected': sorted(sorted(p.symbol for p in c) for c in expected),
                'actual': sorted(sorted(p.symbol for p in c) for c in actual),
            },
        )
    return True


def validate_forest(forest: RefinementForest) -> bool:
    """Run every structural check on a finished forest."""
    check_partition(forest)
    check_single_child(forest)
    check_equivalence(forest)
    return True


def check_order_independence(universe: Sequence[Predicate],
                             patterns: Sequence["Pattern"],
                             orders: Optional[Iterable[Sequence["Pattern"]]] = None) -> int:
    """
    Refine under several processing orders and compare the partitions.
    
    Args:
        universe: Predicates to classify
        patterns: Patterns to apply
        orders: Orders to try; every permutation of patterns when None
        
    Returns:
        Number of orders checked
        
    Raises:
        InvariantViolation: If any order fails a check or yields a
            different partition
    """
    universe = list(universe)
    expected = membership_classes(universe, patterns)
    if orders is None:
        orders = permutations(patterns)

    checked = 0
    for order in orders:
        monitor = DepletionMonitor()
        forest = refine(universe, order, observer=monitor)
        validate_forest(forest)
        if forest_classes(forest) != expected:
            raise InvariantViolation(
                f"Order {[p.name for p in order]} produced a different partition",
                invariant='equivalence',
            )
        checked += 1
    logger.info(f"Order independence holds across {checked} order(s)")
    return checked
