"""
Engine module for partition refinement with split provenance.

Provides the node arena, the refinement pass, invariant validation and
the engine error types.
"""

from .errors import (
    EngineError,
    CapacityError,
    RegistrationConflictError,
    UnknownPredicateError,
    InvariantViolation,
    is_partition_error,
    is_equivalence_error,
)

from .arena import (
    NodeArena,
    RefinementNode,
    capacity_for,
)

from .refinement import (
    RefinementForest,
    refine,
)

from .validation import (
    DepletionMonitor,
    check_partition,
    check_single_child,
    check_equivalence,
    check_order_independence,
    membership_classes,
    forest_classes,
    validate_forest,
)

__all__ = [
    # Errors
    'EngineError',
    'CapacityError',
    'RegistrationConflictError',
    'UnknownPredicateError',
    'InvariantViolation',
    'is_partition_error',
    'is_equivalence_error',
    # Storage
    'NodeArena',
    'RefinementNode',
    'capacity_for',
    # Refinement
    'RefinementForest',
    'refine',
    # Validation
    'DepletionMonitor',
    'check_partition',
    'check_single_child',
    'check_equivalence',
    'check_order_independence',
    'membership_classes',
    'forest_classes',
    'validate_forest',
]
