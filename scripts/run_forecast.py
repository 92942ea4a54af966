#!/usr/bin/env python3
"""
CLI script for the debris growth forecasts.

Prints the year-by-year growth projection, or the per-category forecast
seeded from a record file or data source, or per-group statistics for the
analysis groups, and can export any of them as CSV.
"""

import sys
from pathlib import Path

import click
import pandas as pd

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from debris_tracker.forecast.projection import (
    marker_events,
    project,
    project_categories,
    summarize,
    to_dataframe,
)
from debris_tracker.simulation.classifier import RecordClassifier, category_counts
from debris_tracker.simulation.tle_loader import TLELoader
from debris_tracker.utils.config_loader import Config
from debris_tracker.utils.logging_config import get_logger

logger = get_logger("forecast")


@click.group()
@click.option(
    '--config-dir',
    default='config',
    type=click.Path(file_okay=False),
    help='Directory holding YAML configuration files'
)
@click.pass_context
def cli(ctx, config_dir):
    """Debris growth forecasts."""
    config = Config(Path(config_dir))
    config.load_all()
    ctx.obj = config


@cli.command()
@click.option('--start-year', type=int, help='First year (default from config)')
@click.option('--end-year', type=int, help='Last year, inclusive (default from config)')
@click.option('--baseline', type=int, help='Object count in 2000 (default from config)')
@click.option(
    '--output',
    '-o',
    type=click.Path(dir_okay=False),
    help='Write the table to this CSV file'
)
@click.pass_obj
def growth(config, start_year, end_year, baseline, output):
    """Year-by-year growth projection with risk levels."""
    cfg = config.projection
    start_year = cfg.start_year if start_year is None else start_year
    end_year = cfg.end_year if end_year is None else end_year
    baseline = cfg.baseline_count if baseline is None else baseline

    if end_year < start_year:
        raise click.BadParameter(f"end year {end_year} precedes start year {start_year}")

    points = project(start_year, end_year, baseline)
    df = to_dataframe(points)
    click.echo(df.to_string())

    summary = summarize(points)
    if summary:
        click.echo()
        click.echo(f"Projected total by {summary.final_year}: {summary.final_total:,}")
        if summary.growth_percent is not None:
            click.echo(f"  {summary.growth_percent:.0f}% increase from {start_year}")
        click.echo(f"Large debris (>10cm): {summary.final_large_debris:,}")
        click.echo(f"Risk level: {summary.final_risk_level.value}")

    for marker in marker_events(start_year, end_year):
        click.echo(f"  {marker.first_year}: {marker.label}")

    if output:
        df.to_csv(output)
        logger.info(f"Wrote growth projection to {output}")


@cli.command()
@click.option(
    '--input',
    '-i',
    'input_path',
    type=click.Path(exists=True, dir_okay=False),
    help='Three-line record file to seed counts from'
)
@click.option('--start-year', type=int, help='Year of the observed counts (default from config)')
@click.option('--years', type=int, help='Years to forecast (default from config)')
@click.option(
    '--output',
    '-o',
    type=click.Path(dir_okay=False),
    help='Write the table to this CSV file'
)
@click.pass_obj
def categories(config, input_path, start_year, years, output):
    """Per-category forecast from observed counts."""
    cfg = config.projection

    if input_path:
        records = TLELoader().load_from_file(Path(input_path))
        objects = RecordClassifier().classify_all(records)
    else:
        from debris_tracker.api.dataset_loader import generate_synthetic
        click.echo(f"No input file; using simulated {config.data_source.source.label} data")
        objects = generate_synthetic(config.data_source.source)

    counts = category_counts(objects)
    click.echo("Observed: " + ", ".join(f"{c.value}={n}" for c, n in counts.items()))

    points = project_categories(
        counts,
        start_year=cfg.category_start_year if start_year is None else start_year,
        years=cfg.category_horizon_years if years is None else years,
    )
    df = to_dataframe(points)
    click.echo(df.to_string(float_format=lambda v: f"{v:.1f}"))

    if output:
        df.to_csv(output)
        logger.info(f"Wrote category forecast to {output}")


@cli.command()
@click.option('--offline', is_flag=True, help='Use simulated data for every group')
@click.option(
    '--output',
    '-o',
    type=click.Path(dir_okay=False),
    help='Write the table to this CSV file'
)
@click.pass_obj
def groups(config, offline, output):
    """Statistics for each analysis group (first 40 records of each)."""
    from debris_tracker.api.dataset_loader import ANALYSIS_SOURCES, load_group

    tle_loader = TLELoader(timeout=config.data_source.request_timeout_seconds)
    classifier = RecordClassifier()
    offline = offline or config.data_source.offline

    rows = []
    for source in ANALYSIS_SOURCES:
        group = load_group(source, tle_loader, classifier, offline=offline)
        if group.warning:
            click.echo(group.warning, err=True)
        rows.append({
            "group": source.label,
            "count": group.count,
            "avg_inclination_deg": group.avg_inclination_deg,
            "avg_altitude_km": group.avg_altitude_km,
            **{category.value: n for category, n in group.counts.items()},
            "synthetic": group.synthetic,
        })

    df = pd.DataFrame(rows).set_index("group")
    click.echo(df.to_string(float_format=lambda v: f"{v:.1f}"))

    if output:
        df.to_csv(output)
        logger.info(f"Wrote group statistics to {output}")


if __name__ == "__main__":
    cli()
