import logging
from pathlib import Path
from typing import Optional

import click

from retailpos.infrastructure.cli.bill_commands import bill_list, bill_show
from retailpos.infrastructure.cli.context import CliState
from retailpos.infrastructure.cli.report_commands import (
    report_daily,
    report_reorder,
    report_reshelve,
    report_stats,
    report_stock,
)
from retailpos.infrastructure.cli.sale_commands import sale_create
from retailpos.infrastructure.cli.stock_commands import (
    stock_add,
    stock_expire,
    stock_list,
    stock_shelve,
)
from retailpos.infrastructure.logging_config import configure_logging


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to retailpos.ini.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log progress to stderr.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool) -> None:
    """RetailPOS: point of sale and stock keeping."""
    configure_logging(logging.INFO if verbose else logging.WARNING)
    ctx.obj = CliState(config_path)


@cli.group()
def stock() -> None:
    """Manage stock batches."""


@cli.group()
def sale() -> None:
    """Ring up sales."""


@cli.group()
def bill() -> None:
    """Look up saved bills."""


@cli.group()
def report() -> None:
    """Sales and stock reports."""


# Register subcommands
stock.add_command(stock_add)
stock.add_command(stock_shelve)
stock.add_command(stock_list)
stock.add_command(stock_expire)
sale.add_command(sale_create)
bill.add_command(bill_list)
bill.add_command(bill_show)
report.add_command(report_daily)
report.add_command(report_stock)
report.add_command(report_reorder)
report.add_command(report_reshelve)
report.add_command(report_stats)
