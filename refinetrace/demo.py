"""
The fixed demonstration: five predicates and three patterns.

    P1 = {A, B, C}
    P2 = {A, B, D}
    P3 = {C, D, E}
"""

from typing import List, Tuple

from .core.patterns import ConflictPolicy, Pattern, PatternCatalog
from .core.predicates import PredicateCatalog


DEMO_SYMBOLS = "ABCDE"

DEMO_PATTERNS = (
    ("P1", "ABC"),
    ("P2", "ABD"),
    ("P3", "CDE"),
)


def build_demo(
    conflict_policy: ConflictPolicy = ConflictPolicy.WARN,
) -> Tuple[PredicateCatalog, PatternCatalog, List[Pattern]]:
    """
    Populate both catalogs with the demonstration data.
    
    Predicates are keyed by character code, so they render as A..E.
    
    Returns:
        (predicates, patterns, processing order P1, P2, P3)
    """
    predicates = PredicateCatalog()
    for symbol in DEMO_SYMBOLS:
        predicates.get(ord(symbol))

    patterns = PatternCatalog(predicates, conflict_policy=conflict_policy)
    for name, symbols in DEMO_PATTERNS:
        patterns.get(name, [predicates.get(ord(s)) for s in symbols])

    return predicates, patterns, patterns.sequence([name for name, _ in DEMO_PATTERNS])
