"""Tests for the predicate catalog."""

from refinetrace.core.predicates import Predicate, PredicateCatalog


class TestPredicate:
    """Test Predicate value object."""
    
    def test_integer_representation_renders_as_character(self):
        assert Predicate(ord("A")).symbol == "A"
        assert str(Predicate(ord("z"))) == "z"
    
    def test_other_representation_renders_via_str(self):
        assert Predicate("alpha").symbol == "alpha"
    
    def test_integer_outside_code_point_range_renders_via_str(self):
        assert Predicate(-1).symbol == "-1"
        assert Predicate(2_000_000).symbol == "2000000"
        assert Predicate(0x10FFFF).symbol == chr(0x10FFFF)
    
    def test_equal_representation_means_equal_predicate(self):
        assert Predicate(65) == Predicate(65)
        assert hash(Predicate(65)) == hash(Predicate(65))


class TestPredicateCatalog:
    """Test PredicateCatalog uniquing."""
    
    def test_get_returns_identical_object(self):
        catalog = PredicateCatalog()
        first = catalog.get(65)
        second = catalog.get(65)
        
        assert first is second
        assert len(catalog) == 1
    
    def test_get_distinct_representations(self):
        catalog = PredicateCatalog()
        a = catalog.get(65)
        b = catalog.get(66)
        
        assert a is not b
        assert len(catalog) == 2
    
    def test_find_does_not_register(self):
        catalog = PredicateCatalog()
        
        assert catalog.find(65) is None
        assert len(catalog) == 0
        
        a = catalog.get(65)
        assert catalog.find(65) is a
    
    def test_contains_is_identity_based(self):
        catalog = PredicateCatalog()
        a = catalog.get(65)
        
        assert a in catalog
        # Equal but not issued by this catalog
        assert Predicate(65) not in catalog
        assert 65 not in catalog
    
    def test_iteration_lists_every_predicate(self):
        catalog = PredicateCatalog()
        for code in (67, 65, 66):
            catalog.get(code)
        
        assert sorted(p.symbol for p in catalog) == ["A", "B", "C"]
