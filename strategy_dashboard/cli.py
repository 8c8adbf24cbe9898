"""CLI interface for the strategy dashboard.

Usage:
    python -m strategy_dashboard.cli summary                 # Tabs, record and group counts
    python -m strategy_dashboard.cli export                  # PDF of all records
    python -m strategy_dashboard.cli export --filtered --portfolio Education
    python -m strategy_dashboard.cli dashboard               # Launch the Streamlit app
"""

import logging
import os
import subprocess
import sys
from pathlib import Path

import click

from strategy_dashboard.filters import FilterState
from strategy_dashboard.pipeline import DashboardPipeline, DashboardSession
from strategy_dashboard.settings import SETTINGS_ENV, SOURCE_ENV, load_settings
from strategy_dashboard.workbook import LoadError

logger = logging.getLogger(__name__)

LOAD_FAILURE_MESSAGE = "Failed to load – please check sharing permissions."


def _load_session(ctx) -> DashboardSession:
    pipeline = DashboardPipeline(
        ctx.obj["settings"],
        source=ctx.obj["source"],
        use_cache=ctx.obj["use_cache"],
    )
    try:
        data = pipeline.load()
    except LoadError as e:
        logger.error(f"Load failed: {e}")
        click.echo(f"Error: {LOAD_FAILURE_MESSAGE}", err=True)
        sys.exit(1)
    return DashboardSession(data)


@click.group()
@click.option("--settings", "settings_path", default=None, type=click.Path(path_type=Path),
              help="YAML settings file")
@click.option("--source", default=None, help="Workbook URL or local .xlsx path")
@click.option("--use-cache", is_flag=True, help="Read the saved workbook if present; save fresh downloads")
@click.option("--verbose", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx, settings_path, source, use_cache, verbose):
    """National Strategy Dashboard"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    ctx.ensure_object(dict)
    try:
        ctx.obj["settings"] = load_settings(settings_path)
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    ctx.obj["settings_path"] = settings_path
    ctx.obj["source"] = source
    ctx.obj["use_cache"] = use_cache


@cli.command()
@click.pass_context
def summary(ctx):
    """Show tabs, record counts, groups and filter options."""
    session = _load_session(ctx)

    click.echo("--- Tabs ---")
    for tab in session.tabs:
        groups = session.groups(tab)
        click.echo(f"  {tab}: {len(session.records(tab))} records, {len(groups)} group(s)")
        for group in groups:
            click.echo(f"    [{group.key}] {group.title} ({len(group)})")

    context = session.context
    click.echo(f"\nPortfolios ({len(context.portfolio_options)}): "
               f"{', '.join(context.portfolio_options) or '(none)'}")
    click.echo(f"Tags ({len(context.tag_options)}): "
               f"{', '.join(context.tag_options) or '(none)'}")


@cli.command("export")
@click.option("--filtered/--all", "apply_filters", default=False,
              help="Export the filtered view or every record")
@click.option("--portfolio", "portfolios", multiple=True, help="Portfolio filter (repeatable)")
@click.option("--tag", "tags", multiple=True, help="Tag filter (repeatable)")
@click.option("--search", default="", help="Free-text search")
@click.option("--output-dir", default=None, type=click.Path(path_type=Path),
              help="Directory for the PDF (defaults to the export_dir setting)")
@click.pass_context
def export_cmd(ctx, apply_filters, portfolios, tags, search, output_dir):
    """Export tables to a paginated PDF."""
    session = _load_session(ctx)
    session.state = FilterState(portfolios=list(portfolios), tags=list(tags), query=search)

    if not apply_filters and session.state.is_active:
        click.echo("Note: filters given without --filtered are ignored.")

    path = session.export(
        apply_filters=apply_filters,
        export_dir=output_dir or ctx.obj["settings"].export_dir,
    )
    if path:
        click.echo(f"Exported: {path}")
    else:
        click.echo("Nothing to export (no matching rows).")


@cli.command()
@click.pass_context
def dashboard(ctx):
    """Launch the interactive Streamlit dashboard."""
    app_path = Path(__file__).with_name("dashboard.py")
    env = dict(os.environ)
    if ctx.obj["settings_path"]:
        env[SETTINGS_ENV] = str(ctx.obj["settings_path"])
    if ctx.obj["source"]:
        env[SOURCE_ENV] = ctx.obj["source"]
    cmd = [sys.executable, "-m", "streamlit", "run", str(app_path)]
    logger.info(f"Starting dashboard: {' '.join(cmd)}")
    sys.exit(subprocess.call(cmd, env=env))


if __name__ == "__main__":
    cli()
