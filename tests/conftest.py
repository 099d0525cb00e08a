"""Shared fixtures for refinetrace tests."""

import logging

import pytest

from refinetrace.core.patterns import PatternCatalog
from refinetrace.core.predicates import PredicateCatalog
from refinetrace.demo import build_demo


DEMO_REPORT = (
    "( P3 ): [ E ]\n"
    "( P3 P2 ): [ D ]\n"
    "( P3 P1 ): [ C ]\n"
    "( P2 P1 ): [ A B ]\n"
)


@pytest.fixture(autouse=True)
def reset_refinetrace_logger():
    """Undo handlers installed by setup_logging so caplog keeps working."""
    yield
    logger = logging.getLogger("refinetrace")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def expected_demo_report():
    """Report lines for the demonstration in P1, P2, P3 order."""
    return DEMO_REPORT


@pytest.fixture
def demo():
    """(predicates, patterns, order) for the five-predicate demonstration."""
    return build_demo()


@pytest.fixture
def catalogs():
    """Empty, bound predicate and pattern catalogs."""
    predicates = PredicateCatalog()
    return predicates, PatternCatalog(predicates)
