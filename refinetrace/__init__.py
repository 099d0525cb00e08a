"""refinetrace - Partition refinement with split provenance."""

__version__ = "0.1.0"

from .core.predicates import Predicate, PredicateCatalog
from .core.patterns import ConflictPolicy, Pattern, PatternCatalog
from .core.reporting import TraceReporter, TraceRow
from .engine.refinement import RefinementForest, refine

__all__ = [
    "Predicate",
    "PredicateCatalog",
    "ConflictPolicy",
    "Pattern",
    "PatternCatalog",
    "TraceReporter",
    "TraceRow",
    "RefinementForest",
    "refine",
    "__version__",
]
