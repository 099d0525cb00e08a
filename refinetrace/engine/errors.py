"""
Error types for the refinement engine and its catalogs.

Every error derives from EngineError and carries a details dict for
structured logging and reporting.
"""

from typing import Optional, Any, Dict, Iterable


class EngineError(Exception):
    """
    Base exception for all engine-related errors.
    
    Provides common functionality for error tracking and reporting.
    """
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize engine error.
        
        Args:
            message: Error message
            details: Optional detailed error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class CapacityError(EngineError):
    """
    Raised when the node arena is asked for more nodes than it was sized for.
    
    The arena bound is exact, so this signals a defect in capacity
    planning rather than a recoverable condition.
    """
    
    def __init__(self, message: str,
                 capacity: int = 0,
                 requested: int = 0,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.capacity = capacity
        self.requested = requested
        
        self.details.update({
            'capacity': capacity,
            'requested': requested
        })


class RegistrationConflictError(EngineError):
    """
    Raised when a pattern name is re-registered with a different member set
    and the catalog policy is to reject conflicts.
    """
    
    def __init__(self, message: str,
                 name: str = '',
                 stored: Iterable[str] = (),
                 requested: Iterable[str] = (),
                 details: Optional[Dict[str, Any]] = None):
        """
        Initialize registration conflict error.
        
        Args:
            message: Error message
            name: Pattern name that was re-registered
            stored: Symbols of the member set already registered
            requested: Symbols of the member set that was asked for
            details: Additional error context
        """
        super().__init__(message, details)
        self.name = name
        self.stored = sorted(stored)
        self.requested = sorted(requested)
        
        self.details.update({
            'name': name,
            'stored': self.stored,
            'requested': self.requested
        })


class UnknownPredicateError(EngineError):
    """Raised when a pattern references a predicate outside the universe."""
    
    def __init__(self, message: str,
                 pattern: Optional[str] = None,
                 predicate: Any = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.pattern = pattern
        self.predicate = predicate
        
        self.details.update({
            'pattern': pattern,
            'predicate': predicate
        })


class InvariantViolation(EngineError):
    """
    Raised when a refinement forest breaks one of its structural invariants.
    
    invariant is one of 'partition', 'single_child', 'depletion' or
    'equivalence'.
    """
    
    def __init__(self, message: str,
                 invariant: str = 'general',
                 node: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.invariant = invariant
        self.node = node
        
        self.details.update({
            'invariant': invariant,
            'node': node
        })


def is_partition_error(error: Exception) -> bool:
    """Check if error is a partition invariant violation."""
    return isinstance(error, InvariantViolation) and error.invariant == 'partition'


def is_equivalence_error(error: Exception) -> bool:
    """Check if error is an order-independence violation."""
    return isinstance(error, InvariantViolation) and error.invariant == 'equivalence'
