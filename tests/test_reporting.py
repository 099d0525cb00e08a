"""Tests for trace reporting and rendering."""

import json
from io import StringIO

import pytest
import yaml
from rich.console import Console

from refinetrace.core.patterns import PatternCatalog
from refinetrace.core.predicates import PredicateCatalog
from refinetrace.core.reporting import (
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
from refinetrace.engine.refinement import refine


@pytest.fixture
def rows(demo):
    predicates, _, order = demo
    return TraceReporter(refine(predicates, order)).rows()


class TestTraceReporter:
    """Test row production."""
    
    def test_rows_in_reverse_creation_order(self, rows):
        assert [row.node_index for row in rows] == [6, 5, 4, 2]
    
    def test_rows_carry_traces_and_members(self, rows):
        assert rows[0] == TraceRow(6, ("P3",), ("E",))
        assert rows[3] == TraceRow(2, ("P2", "P1"), ("A", "B"))
    
    def test_every_predicate_reported_once(self, rows):
        members = [symbol for row in rows for symbol in row.members]
        
        assert sorted(members) == ["A", "B", "C", "D", "E"]
    
    def test_reporter_does_not_mutate_forest(self, demo):
        predicates, _, order = demo
        forest = refine(predicates, order)
        before = [list(node.members) for node in forest]
        
        TraceReporter(forest).rows()
        TraceReporter(forest).rows()
        
        assert [list(node.members) for node in forest] == before


class TestTextRendering:
    """Test the literal line format."""
    
    def test_format_row(self):
        assert format_row(TraceRow(3, ("P3", "P1"), ("C",))) == "( P3 P1 ): [ C ]"
    
    def test_format_row_empty_trace(self):
        assert format_row(TraceRow(0, (), ("F", "G"))) == "( ): [ F G ]"
    
    def test_render_text(self, rows, expected_demo_report):
        assert render_text(rows) == expected_demo_report
    
    def test_render_text_no_rows(self):
        assert render_text([]) == ""
    
    def test_render_text_out_of_range_codes(self):
        predicates = PredicateCatalog()
        low, high, a = predicates.get(-1), predicates.get(2_000_000), predicates.get(ord("A"))
        patterns = PatternCatalog(predicates)
        forest = refine(predicates, [patterns.get("P", [high, a])])
        
        assert render_text(TraceReporter(forest).rows()) == (
            "( P ): [ 2000000 A ]\n"
            "( ): [ -1 ]\n"
        )


class TestStructuredRendering:
    """Test JSON, YAML and table output."""
    
    def test_json(self, rows):
        data = json.loads(render_json(rows))
        
        assert data["total_rows"] == 4
        assert data["rows"][1] == {"node": 5, "trace": ["P3", "P2"], "members": ["D"]}
    
    def test_yaml(self, rows):
        data = yaml.safe_load(render_yaml(rows))
        
        assert data["total_rows"] == 4
        assert data["rows"][3]["members"] == ["A", "B"]
    
    def test_table(self, rows):
        output = StringIO()
        render_table(rows, Console(file=output, width=100))
        
        text = output.getvalue()
        assert "Split Traces" in text
        assert "P3 P2" in text
    
    def test_render_dispatch(self, rows, expected_demo_report):
        assert render(rows, ReportFormat.TEXT) == expected_demo_report
        assert render(rows, "json").endswith("}\n")
        assert yaml.safe_load(render(rows, ReportFormat.YAML))["total_rows"] == 4
    
    def test_render_table_needs_console(self, rows):
        with pytest.raises(ValueError):
            render(rows, ReportFormat.TABLE)
