"""
Command-line interface for refinetrace.

With no subcommand, runs the demonstration and prints the split-trace
report to stdout.
"""

import sys
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console

from . import __version__
from .config import ConfigManager, RefineConfig, create_default_config_file
from .core.reporting import ReportFormat, TraceReporter, render, render_table
from .demo import build_demo
from .engine.errors import EngineError
from .engine.refinement import refine
from .engine.validation import DepletionMonitor, check_order_independence, validate_forest
from .utils.logging_setup import get_logger, setup_logging


logger = get_logger(__name__)

# Status messages and tables; the plain report formats go to stdout via click.echo
console = Console(stderr=True)


def _load_config(path: Optional[str]) -> RefineConfig:
    config = ConfigManager(Path(path) if path else None, console=console).load()
    if not config.validate(console):
        raise click.ClickException("invalid configuration")
    setup_logging(
        level=config.log_level,
        log_dir=Path(config.log_dir) if config.log_dir else None,
        file=config.log_file,
        json_format=config.log_json,
    )
    return config


def _parse_order(order: Optional[str]) -> Optional[List[str]]:
    if not order:
        return None
    return [name.strip() for name in order.split(",") if name.strip()]


def run_demo(config: RefineConfig, order: Optional[List[str]] = None,
             report_format: Optional[ReportFormat] = None) -> None:
    """Run the demonstration and write the report."""
    predicates, patterns, sequence = build_demo(config.policy)
    if order is not None:
        sequence = patterns.sequence(order)

    monitor = DepletionMonitor() if config.check_invariants else None
    forest = refine(predicates, sequence, observer=monitor)
    if config.check_invariants:
        validate_forest(forest)

    rows = TraceReporter(forest).rows()
    report_format = report_format or config.report_format
    if report_format is ReportFormat.TABLE:
        render_table(rows, Console())
    else:
        click.echo(render(rows, report_format), nl=False)


@click.group(name="refinetrace", invoke_without_command=True)
@click.version_option(__version__, prog_name="refinetrace")
@click.option("--config", "config_path", type=click.Path(), help="Path to config file")
@click.pass_context
def main(ctx, config_path):
    """Partition refinement with split provenance."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@main.command(name="run")
@click.option(
    "--format", "report_format",
    type=click.Choice([f.value for f in ReportFormat]),
    default=None,
    help="Report format (default from config: text)"
)
@click.option(
    "--order",
    default=None,
    help="Comma-separated pattern processing order, e.g. P3,P1,P2"
)
@click.option("--config", "config_path", type=click.Path(), help="Path to config file")
@click.pass_context
def run(ctx, report_format=None, order=None, config_path=None):
    """Run the demonstration and print the split-trace report."""
    config_path = config_path or (ctx.obj or {}).get("config_path")
    config = _load_config(config_path)
    try:
        run_demo(
            config,
            order=_parse_order(order),
            report_format=ReportFormat(report_format) if report_format else None,
        )
    except KeyError as e:
        raise click.BadParameter(str(e.args[0]), param_hint="--order")
    except EngineError as e:
        logger.error(e.message, extra={'extra_fields': e.details})
        raise click.ClickException(e.message)


@main.command(name="check")
@click.option("--config", "config_path", type=click.Path(), help="Path to config file")
@click.pass_context
def check(ctx, config_path=None):
    """Verify invariants under every processing order of the demo patterns."""
    config_path = config_path or (ctx.obj or {}).get("config_path")
    config = _load_config(config_path)
    predicates, _, sequence = build_demo(config.policy)
    try:
        checked = check_order_independence(list(predicates), sequence)
    except EngineError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        logger.error(e.message, extra={'extra_fields': e.details})
        sys.exit(1)
    console.print(f"[green]✓ Invariants hold across {checked} processing orders[/green]")


@main.group(name="config")
def config_group():
    """Manage refinetrace configuration."""
    pass


@config_group.command(name="init")
@click.option(
    "--path",
    type=click.Path(),
    default=ConfigManager.DEFAULT_CONFIG_FILE,
    help="Path for config file"
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def config_init(path, force):
    """Initialize a configuration file."""
    config_path = Path(path)
    
    if config_path.exists() and not force:
        if not click.confirm(f"Config file {path} already exists. Overwrite?"):
            console.print("[yellow]Aborted[/yellow]")
            return
    
    if create_default_config_file(config_path):
        console.print(f"[green]✓ Created config file at {path}[/green]")
    else:
        console.print("[red]✗ Failed to create config file[/red]")
        sys.exit(1)


@config_group.command(name="show")
@click.option("--path", type=click.Path(exists=True), help="Path to config file")
def config_show(path):
    """Display current configuration."""
    manager = ConfigManager(Path(path) if path else None, console=console)
    manager.display(manager.load())


@config_group.command(name="validate")
@click.option("--path", type=click.Path(exists=True), help="Path to config file")
def config_validate(path):
    """Validate configuration."""
    config = ConfigManager(Path(path) if path else None, console=console).load()
    
    if config.validate(console):
        console.print("[green]✓ Configuration is valid[/green]")
    else:
        console.print("[red]✗ Configuration has validation errors[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
