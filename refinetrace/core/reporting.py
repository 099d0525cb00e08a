"""Report generation for refinement forests."""

from __future__ import annotations
import json
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Tuple

import yaml
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from ..engine.refinement import RefinementForest


class ReportFormat(Enum):
    """Supported report formats."""
    TEXT = "text"
    JSON = "json"
    YAML = "yaml"
    TABLE = "table"


@dataclass(frozen=True)
class TraceRow:
    """One surviving node: its split-trace and its members."""
    node_index: int
    trace: Tuple[str, ...]
    members: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "node": self.node_index,
            "trace": list(self.trace),
            "members": list(self.members),
        }


class TraceReporter:
    """
    Read-only walk over a finished forest.
    
    Nodes are visited most recently created first, ending at the root;
    nodes with no members are skipped.
    """

    def __init__(self, forest: "RefinementForest"):
        self.forest = forest

    def rows(self) -> List[TraceRow]:
        rows = []
        for node in reversed(self.forest.arena):
            if node.is_empty:
                continue
            rows.append(TraceRow(
                node_index=node.index,
                trace=tuple(pattern.name for pattern in self.forest.trace(node.index)),
                members=tuple(predicate.symbol for predicate in node.members),
            ))
        return rows


def format_row(row: TraceRow) -> str:
    """Render a row as `( P3 P1 ): [ C ]`; every token is followed by a space."""
    trace = "".join(f"{name} " for name in row.trace)
    members = "".join(f"{symbol} " for symbol in row.members)
    return f"( {trace}): [ {members}]"


def render_text(rows: List[TraceRow]) -> str:
    return "".join(format_row(row) + "\n" for row in rows)


def render_json(rows: List[TraceRow]) -> str:
    output = {
        "total_rows": len(rows),
        "rows": [row.to_dict() for row in rows],
    }
    return json.dumps(output, indent=2)


def render_yaml(rows: List[TraceRow]) -> str:
    output = {
        "total_rows": len(rows),
        "rows": [row.to_dict() for row in rows],
    }
    return yaml.dump(output, default_flow_style=False, sort_keys=False)


def render_table(rows: List[TraceRow], console: Console, title: str = "Split Traces") -> None:
    """Print rows as a rich table."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Node", justify="right", style="green")
    table.add_column("Trace (most recent first)", style="cyan")
    table.add_column("Members", style="yellow")

    for row in rows:
        table.add_row(
            str(row.node_index),
            " ".join(row.trace) or "[dim]<root>[/dim]",
            " ".join(row.members),
        )

    console.print(table)


def render(rows: List[TraceRow], report_format: ReportFormat) -> str:
    """
    Render rows as text in one of the string formats.
    
    Raises:
        ValueError: For ReportFormat.TABLE, which needs a console
    """
    report_format = ReportFormat(report_format)
    if report_format is ReportFormat.TEXT:
        return render_text(rows)
    if report_format is ReportFormat.JSON:
        return render_json(rows) + "\n"
    if report_format is ReportFormat.YAML:
        return render_yaml(rows)
    raise ValueError(f"{report_format.value} output requires a console; use render_table()")
