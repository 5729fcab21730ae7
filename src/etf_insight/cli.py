"""
Command-line interface for ETF Insight.

Provides commands for:
- serve: Run the HTTP API
- init-config: Write a default server configuration file
- latest: Show the latest price per constituent
- enriched: Show holdings joined with latest prices
- series: Compute the portfolio valuation series
- top: Rank holdings by dollar size
"""

import sys
from pathlib import Path
from typing import Optional

import click
import pandas as pd

from etf_insight import __version__
from etf_insight.config import (
    ConfigurationError,
    configure_logging,
    load_server_config,
    write_config,
)
from etf_insight.data import DataLoadError, load_holdings, load_price_panel
from etf_insight.models import Holding, PricePanel, ServerConfig, SortField, SortOrder
from etf_insight.portfolio import (
    build_latest_price_index,
    compute_valuation_series,
    enrich_holdings,
    parse_sort_field,
    parse_sort_order,
    sort_holdings,
    top_holdings,
)
from etf_insight.portfolio.ranking import DEFAULT_TOP_N, MAX_TOP_N
from etf_insight.server import run_server


@click.group()
@click.version_option(version=__version__, prog_name="etf-insight")
def main():
    """
    ETF Insight.

    Values a weighted portfolio of constituents against a
    historical price panel.
    """
    pass


@main.command()
@click.option(
    "--config", "-c",
    type=click.Path(exists=True),
    default=None,
    help="Path to server configuration YAML file",
)
@click.option("--host", type=str, default=None, help="Interface to bind")
@click.option("--port", "-p", type=int, default=None, help="HTTP port")
@click.option(
    "--upload-dir", "-u",
    type=click.Path(),
    default=None,
    help="Directory for the persisted price file",
)
def serve(config: Optional[str], host: Optional[str], port: Optional[int], upload_dir: Optional[str]):
    """Run the HTTP API server."""
    try:
        server_config = load_server_config(config)
    except ConfigurationError as e:
        click.echo(f"Error loading config: {e}", err=True)
        sys.exit(1)

    if host:
        server_config.host = host
    if port:
        server_config.port = port
    if upload_dir:
        server_config.upload_dir = upload_dir

    run_server(server_config)


@main.command("init-config")
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    default="etf-insight.yaml",
    show_default=True,
    help="Where to write the configuration file",
)
@click.option("--host", type=str, default=None, help="Interface to bind")
@click.option("--port", "-p", type=int, default=None, help="HTTP port")
@click.option(
    "--upload-dir", "-u",
    type=str,
    default=None,
    help="Directory for the persisted price file",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init_config(output: str, host: Optional[str], port: Optional[int], upload_dir: Optional[str], force: bool):
    """Write a server configuration file with default settings."""
    output_path = Path(output)
    if output_path.exists() and not force:
        click.echo(f"Error: {output_path} already exists (use --force to overwrite)", err=True)
        sys.exit(1)

    server_config = ServerConfig()
    if host:
        server_config.host = host
    if port:
        server_config.port = port
    if upload_dir:
        server_config.upload_dir = upload_dir

    write_config(server_config, output_path)
    click.echo(f"Config written: {output_path}")
    click.echo(f"Start the server with: etf-insight serve -c {output_path}")


@main.command()
@click.option(
    "--prices", "-p",
    required=True,
    type=click.Path(exists=True),
    help="Path to price panel CSV file",
)
def latest(prices: str):
    """Show the most recent price of each constituent."""
    configure_logging("WARNING")
    panel = _load_panel(prices)

    index = build_latest_price_index(panel.prices)
    if not index:
        click.echo("No prices found.")
        return

    click.echo(f"{'Constituent':<20} {'Date':<12} {'Price':>14}")
    click.echo("-" * 48)
    for constituent, latest_price in index.items():
        click.echo(
            f"{constituent:<20} {latest_price.date:<12} {latest_price.price:>14,.2f}"
        )


@main.command()
@click.option(
    "--holdings", "-h",
    required=True,
    type=click.Path(exists=True),
    help="Path to holdings CSV file",
)
@click.option(
    "--prices", "-p",
    required=True,
    type=click.Path(exists=True),
    help="Path to price panel CSV file",
)
@click.option(
    "--sort", "-s",
    type=click.Choice([f.value for f in SortField]),
    default=SortField.CONSTITUENT.value,
    help="Field to sort by",
)
@click.option(
    "--order",
    type=click.Choice([o.value for o in SortOrder]),
    default=SortOrder.ASC.value,
    help="Sort direction",
)
def enriched(holdings: str, prices: str, sort: str, order: str):
    """Show holdings with latest price and holding size."""
    configure_logging("WARNING")
    holdings_list = _load_holdings(holdings)
    panel = _load_panel(prices)

    index = build_latest_price_index(panel.prices)
    rows = sort_holdings(
        enrich_holdings(holdings_list, index),
        parse_sort_field(sort),
        parse_sort_order(order),
    )

    click.echo(f"{'Constituent':<20} {'Weight':>10} {'Latest Price':>14} {'Holding Size':>14}")
    click.echo("-" * 61)
    for row in rows:
        price = f"{row.latest_price:,.2f}" if row.latest_price is not None else "-"
        size = f"{row.holding_size:,.2f}" if row.holding_size is not None else "-"
        click.echo(f"{row.constituent:<20} {row.weight:>10.4f} {price:>14} {size:>14}")

    missing = sum(1 for row in rows if row.latest_price is None)
    if missing:
        click.echo()
        click.echo(f"{missing} holding(s) have no price data.")


@main.command()
@click.option(
    "--holdings", "-h",
    required=True,
    type=click.Path(exists=True),
    help="Path to holdings CSV file",
)
@click.option(
    "--prices", "-p",
    required=True,
    type=click.Path(exists=True),
    help="Path to price panel CSV file",
)
@click.option(
    "--output", "-o",
    type=click.Path(),
    default=None,
    help="Write the series to this CSV file instead of printing it",
)
def series(holdings: str, prices: str, output: Optional[str]):
    """Compute the portfolio value on every date of the price panel."""
    configure_logging("WARNING")
    holdings_list = _load_holdings(holdings)
    panel = _load_panel(prices)

    points = compute_valuation_series(holdings_list, panel.prices)

    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        df = pd.DataFrame(
            [{"date": p.date, "price": str(p.value)} for p in points],
            columns=["date", "price"],
        )
        df.to_csv(output_path, index=False)
        click.echo(f"Series saved: {output_path} ({len(points)} dates)")
        return

    click.echo(f"{'Date':<12} {'Value':>14}")
    click.echo("-" * 27)
    for point in points:
        click.echo(f"{point.date:<12} {point.value:>14,.2f}")


@main.command()
@click.option(
    "--holdings", "-h",
    required=True,
    type=click.Path(exists=True),
    help="Path to holdings CSV file",
)
@click.option(
    "--prices", "-p",
    required=True,
    type=click.Path(exists=True),
    help="Path to price panel CSV file",
)
@click.option(
    "--count", "-n",
    type=click.IntRange(1, MAX_TOP_N),
    default=DEFAULT_TOP_N,
    help="Number of holdings to show",
)
def top(holdings: str, prices: str, count: int):
    """Rank holdings by dollar size."""
    configure_logging("WARNING")
    holdings_list = _load_holdings(holdings)
    panel = _load_panel(prices)

    index = build_latest_price_index(panel.prices)
    entries = top_holdings(holdings_list, index, count)
    if not entries:
        click.echo("No holdings with a positive size.")
        return

    click.echo(f"{'#':>3} {'Constituent':<20} {'Size':>14}")
    click.echo("-" * 39)
    for rank, entry in enumerate(entries, start=1):
        click.echo(f"{rank:>3} {entry.name:<20} {entry.size:>14,.2f}")


def _load_holdings(path: str) -> list[Holding]:
    try:
        return load_holdings(path)
    except DataLoadError as e:
        click.echo(f"Error loading holdings: {e}", err=True)
        sys.exit(1)


def _load_panel(path: str) -> PricePanel:
    try:
        return load_price_panel(path)
    except DataLoadError as e:
        click.echo(f"Error loading prices: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
