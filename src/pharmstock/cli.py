from __future__ import annotations

import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Prompt
from rich.table import Table

from pharmstock import __version__
from pharmstock.cache import StoreCache
from pharmstock.config import load_config
from pharmstock.errors import PharmStockError
from pharmstock.models import AppConfig, CacheKey, Medication, StockLevel, normalize_postcode
from pharmstock.runner import SweepReport, build_service

LOG = logging.getLogger(__name__)

console = Console()


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def postcode_arg(value: str) -> str:
    postcode = value.strip()
    if not normalize_postcode(postcode):
        raise argparse.ArgumentTypeError("postcode must not be blank")
    return postcode


def prompt_postcode() -> str:
    while True:
        postcode = Prompt.ask("Enter a valid UK postcode", console=console).strip()
        if postcode:
            return postcode


def prompt_medication(medications: list[Medication]) -> Medication:
    for index, medication in enumerate(medications, start=1):
        console.print(f"  [bold]{index}[/bold]. {medication.name}")
    choice = Prompt.ask(
        "Please select a dosage",
        choices=[str(i) for i in range(1, len(medications) + 1)],
        console=console,
    )
    return medications[int(choice) - 1]


def resolve_medication(config: AppConfig, medication_id: str | None) -> Medication:
    if medication_id is None:
        return prompt_medication(config.medications)
    medication = config.find_medication(medication_id)
    if medication is None:
        raise SystemExit(f"unknown medication id: {medication_id}")
    return medication


def render_report(report: SweepReport) -> None:
    table = Table(title=f"In stock near {report.postcode} ({report.radius:g} miles)")
    table.add_column("Store")
    table.add_column("Postcode")
    table.add_column("Phone")
    for row in report.in_stock:
        table.add_row(row.store_name, row.store_postcode or "", row.store_phone_number or "")

    style = "green" if report.in_stock else "red"
    console.print(f"[{style}]Found stock in {len(report.in_stock)} locations.[/{style}]")
    if report.in_stock:
        console.print(table)
    low = sum(1 for r in report.results if r.stock_status == StockLevel.LOW_STOCK.value)
    out = sum(1 for r in report.results if r.stock_status == StockLevel.OUT_OF_STOCK.value)
    console.print(f"Low stock in {low} locations, out of stock in {out}.")
    if report.failed_batches:
        console.print(
            f"[yellow]{len(report.failed_batches)} batch(es) failed; "
            "results may under-count available stock.[/yellow]"
        )
    console.print(f"Results written to {report.output_path}")


def run_check(args: argparse.Namespace) -> int:
    service = build_service(config_path=args.config, no_delay=args.no_delay)
    try:
        postcode = args.postcode or prompt_postcode()
        medication = resolve_medication(service.config, args.medication)
        LOG.info("Checking stock of %s near %s", medication.name, postcode)
        report = service.run(postcode, medication.id, refresh=args.refresh)
    except PharmStockError as exc:
        LOG.error("stock check failed: %s", exc)
        return 1
    finally:
        service.close()

    render_report(report)
    return 0


def list_medications(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    for medication in config.medications:
        console.print(f"{medication.id}  {medication.name}")
    return 0


def clear_cache(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    key = CacheKey.for_search(args.postcode, config.radius_miles)
    cache = StoreCache(config.data_dir)
    if cache.invalidate(key):
        LOG.info("Removed %s", cache.path_for(key))
    else:
        LOG.info("No cached stores for %s", key.postcode)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="pharmstock")
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="run one stock sweep")
    check.add_argument("--config")
    check.add_argument("--postcode", type=postcode_arg)
    check.add_argument("--medication", help="product id from the medication catalog")
    check.add_argument("--refresh", action="store_true", help="ignore cached store data")
    check.add_argument("--no-delay", action="store_true", help="disable the delay between requests")
    check.set_defaults(handler=run_check)

    meds = sub.add_parser("medications", help="list the medication catalog")
    meds.add_argument("--config")
    meds.set_defaults(handler=list_medications)

    clear = sub.add_parser("clear-cache", help="forget cached stores for a postcode")
    clear.add_argument("--config")
    clear.add_argument("--postcode", type=postcode_arg, required=True)
    clear.set_defaults(handler=clear_cache)

    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
