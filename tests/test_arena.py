"""Tests for the node arena."""

import pytest

from refinetrace.core.patterns import Pattern
from refinetrace.engine.arena import NodeArena, RefinementNode, capacity_for
from refinetrace.engine.errors import CapacityError, EngineError


class TestCapacity:
    """Test the node capacity bound."""
    
    def test_capacity_is_root_plus_occurrences(self, demo):
        _, _, order = demo
        
        assert capacity_for(order) == 1 + 3 + 3 + 3
    
    def test_capacity_without_patterns(self):
        assert capacity_for([]) == 1
        assert capacity_for([Pattern("EMPTY")]) == 1


class TestNodeArena:
    """Test NodeArena allocation."""
    
    def test_allocate_assigns_sequential_indices(self):
        arena = NodeArena(3)
        root = arena.allocate()
        child = arena.allocate(parent=root.index)
        
        assert root.index == 0
        assert root.is_root
        assert child.index == 1
        assert child.parent == 0
        assert len(arena) == 2
        assert arena[1] is child
    
    def test_exhausted_arena_raises(self):
        arena = NodeArena(1)
        arena.allocate()
        
        with pytest.raises(CapacityError) as exc_info:
            arena.allocate(parent=0)
        
        assert isinstance(exc_info.value, EngineError)
        assert exc_info.value.capacity == 1
        assert exc_info.value.requested == 2
        assert len(arena) == 1
    
    def test_nodes_keep_identity(self):
        arena = NodeArena(4)
        root = arena.allocate()
        first = arena.allocate(parent=0)
        arena.allocate(parent=1)
        arena.allocate(parent=1)
        
        assert arena[0] is root
        assert arena[1] is first
    
    def test_parent_must_be_allocated(self):
        arena = NodeArena(2)
        
        with pytest.raises(IndexError):
            arena.allocate(parent=0)
    
    def test_index_out_of_range(self):
        arena = NodeArena(2)
        arena.allocate()
        
        with pytest.raises(IndexError):
            arena[1]
    
    def test_iteration_orders(self):
        arena = NodeArena(3)
        for _ in range(3):
            arena.allocate()
        
        assert [n.index for n in arena] == [0, 1, 2]
        assert [n.index for n in reversed(arena)] == [2, 1, 0]
    
    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            NodeArena(0)


class TestRefinementNode:
    """Test RefinementNode membership."""
    
    def test_members_keep_arrival_order(self, demo):
        predicates, _, _ = demo
        a, b, c = (predicates.get(ord(s)) for s in "ABC")
        node = RefinementNode(index=0)
        
        node.add(c)
        node.add(a)
        node.add(b)
        node.discard(a)
        
        assert list(node.members) == [c, b]
        assert a not in node
        assert len(node) == 2
        assert not node.is_empty
