"""Catalogs and reporting for refinetrace."""

from .predicates import Predicate, PredicateCatalog
from .patterns import (
    ConflictPolicy,
    Pattern,
    PatternCatalog,
    Registration,
    RegistrationStatus,
)
from .reporting import (
    ReportFormat,
    TraceReporter,
    TraceRow,
    format_row,
    render,
    render_json,
    render_table,
    render_text,
    render_yaml,
)

__all__ = [
    'Predicate',
    'PredicateCatalog',
    'ConflictPolicy',
    'Pattern',
    'PatternCatalog',
    'Registration',
    'RegistrationStatus',
    'ReportFormat',
    'TraceReporter',
    'TraceRow',
    'format_row',
    'render',
    'render_json',
    'render_table',
    'render_text',
    'render_yaml',
]
