"""CLI entry point for shelfscan."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import asdict

from dotenv import load_dotenv

from .analysis import (
    AnalysisError,
    AnalysisRequest,
    AnalysisResult,
    ConfigStatus,
    ProductAnalyzer,
    validate_config,
)
from .config import ShelfScanConfig, load_config
from .db import InventoryDB
from .manual_entry import (
    Continuation,
    ManualEntryFlow,
    ManualEntryForm,
    SubmissionStatus,
)
from .shelf_life import DateParseError, days_until, status_label

_LOG_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_CONTINUATION_LABELS = {
    Continuation.OK: "OK",
    Continuation.RETRY: "Retry",
    Continuation.CANCEL: "Cancel",
    Continuation.ADD_ANOTHER: "Add Another",
    Continuation.VIEW_INVENTORY: "View Inventory",
    Continuation.DONE: "Done",
}


def _configure_logging(verbose: bool) -> None:
    if verbose:
        level = logging.DEBUG
    else:
        level = _LOG_LEVELS.get(
            os.environ.get("LOG_LEVEL", "WARNING").upper().strip(), logging.WARNING
        )
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _add_input_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--barcode", "-b", type=str, default=None, help="Product barcode")
    parser.add_argument("--code", type=str, default=None, help="Batch or other product code")
    parser.add_argument("--image", type=str, default=None, help="Image path or URI")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="shelfscan",
        description="Identify products by barcode and track their expiry dates",
    )
    parser.add_argument(
        "--config", "-c", type=str, default=None, help="Path to a TOML config file"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # check-config
    sub.add_parser("check-config", help="Check the analysis service credentials")

    # analyze
    analyze_parser = sub.add_parser("analyze", help="Identify a product")
    _add_input_args(analyze_parser)
    analyze_parser.add_argument("--json", action="store_true", help="Output JSON")

    # scan
    scan_parser = sub.add_parser(
        "scan", help="Identify a product and save it, falling back to manual entry"
    )
    _add_input_args(scan_parser)

    # add
    add_parser = sub.add_parser("add", help="Enter a product manually")
    add_parser.add_argument("--name", type=str, default=None, help="Product name")
    add_parser.add_argument("--category", type=str, default=None, help="Category")
    add_parser.add_argument("--barcode", "-b", type=str, default=None, help="Batch code / barcode")
    add_parser.add_argument("--expiry", type=str, default=None, help="Expiry date (YYYY-MM-DD)")

    # inventory
    inv_parser = sub.add_parser("inventory", help="List stored products")
    inv_parser.add_argument(
        "--expiring", type=int, nargs="?", const=-1, default=None, metavar="DAYS",
        help="Only show products expiring within DAYS days (default from config)",
    )
    inv_parser.add_argument("--json", action="store_true", help="Output JSON")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    load_dotenv()
    _configure_logging(args.verbose)
    config = load_config(args.config)

    match args.command:
        case "check-config":
            _cmd_check_config(config)
        case "analyze":
            asyncio.run(_cmd_analyze(config, args))
        case "scan":
            asyncio.run(_cmd_scan(config, args))
        case "add":
            _cmd_add(config, args)
        case "inventory":
            _cmd_inventory(config, args)


def _request_from_args(args) -> AnalysisRequest:
    return AnalysisRequest(barcode=args.barcode, code=args.code, image_uri=args.image)


def _analyzer(config: ShelfScanConfig) -> ProductAnalyzer:
    return ProductAnalyzer(
        config.supabase,
        default_shelf_life_days=config.analysis.default_shelf_life_days,
    )


def _result_to_dict(result: AnalysisResult) -> dict:
    data = asdict(result)
    data["expiry_date"] = result.expiry_date.isoformat() if result.expiry_date else None
    return data


def _print_result(result: AnalysisResult) -> None:
    print(f"  Product:    {result.name}")
    print(f"  Category:   {result.category}")
    if result.expiry_date:
        print(f"  Expires:    {result.expiry_date.isoformat()}")
    print(f"  Shelf life: {status_label(result.shelf_life_days)}")
    print(f"  Confidence: {result.confidence_score:.0%}")


def _cmd_check_config(config: ShelfScanConfig) -> None:
    if not config.supabase.is_set:
        print("NOT_CONFIGURED: set SUPABASE_URL and SUPABASE_ANON_KEY", file=sys.stderr)
        sys.exit(1)
    status = validate_config(config.supabase.url, config.supabase.anon_key)
    print(status.value)
    if status is not ConfigStatus.OK:
        sys.exit(1)


async def _cmd_analyze(config: ShelfScanConfig, args) -> None:
    try:
        result = await _analyzer(config).analyze_product(_request_from_args(args))
    except AnalysisError as e:
        print(f"[{e.code.value}] {e.message}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(_result_to_dict(result), ensure_ascii=False, indent=2))
        return
    if result.manual_entry_required:
        print("Could not identify this product. Use `shelfscan add` to enter it manually.")
        return
    _print_result(result)


async def _cmd_scan(config: ShelfScanConfig, args) -> None:
    request = _request_from_args(args)
    db = InventoryDB(config.inventory.db_path)
    try:
        try:
            print("🔍 Analyzing product...")
            result = await _analyzer(config).analyze_product(request)
        except AnalysisError as e:
            print(f"[{e.code.value}] {e.message}", file=sys.stderr)
            result = None

        if result is not None and not result.manual_entry_required:
            _print_result(result)
            try:
                item_id = db.add_inventory_item(
                    {
                        "barcode": request.code_to_analyze or "Manual Entry",
                        "product_name": result.name,
                        "category": result.category,
                        "expiry_date": result.expiry_date,
                        "ai_confidence": result.confidence_score,
                    }
                )
            except Exception as e:
                print(f"❌ Failed to save product to inventory: {e}", file=sys.stderr)
                print("✏️  Check the details and save again.")
            else:
                print(f"✅ Saved to inventory (ID: {item_id})")
                return
        else:
            print("✏️  Please enter the product details manually.")
        form = ManualEntryForm(initial_barcode=request.code_to_analyze)
        if result is not None:
            form.product_name = "" if result.name == "Unknown Product" else result.name
            form.category = "" if result.category == "General" else result.category
            if result.expiry_date:
                form.expiry_date = result.expiry_date.isoformat()
        _run_manual_entry(db, form)
    finally:
        db.close()


def _cmd_add(config: ShelfScanConfig, args) -> None:
    form = ManualEntryForm(initial_barcode=args.barcode or "")
    db = InventoryDB(config.inventory.db_path)
    try:
        if args.name is not None or args.expiry is not None:
            form.product_name = args.name or ""
            form.category = args.category or ""
            form.expiry_date = args.expiry or ""
            flow = ManualEntryFlow(db, form)
            outcome = flow.submit()
            if not outcome.saved:
                print(f"{outcome.title}: {outcome.message}", file=sys.stderr)
                sys.exit(1)
            record = outcome.record
            print(f"✅ Saved {record.product_name} ({record.status})")
            return
        _run_manual_entry(db, form)
    finally:
        db.close()


def _ask(label: str, current: str) -> str:
    suffix = f" [{current}]" if current else ""
    value = input(f"{label}{suffix}: ").strip()
    return value or current


def _choose(options: tuple[Continuation, ...]) -> Continuation:
    for i, option in enumerate(options, 1):
        print(f"  {i}. {_CONTINUATION_LABELS[option]}")
    while True:
        answer = input("> ").strip()
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return options[int(answer) - 1]


def _run_manual_entry(db: InventoryDB, form: ManualEntryForm) -> None:
    """Prompt for the form fields until the user saves, cancels or is done."""
    state = {"open": True}

    def on_back() -> None:
        state["open"] = False

    def on_view_inventory() -> None:
        _print_inventory(db.get_inventory())

    flow = ManualEntryFlow(
        db, form, on_back=on_back, on_view_inventory=on_view_inventory
    )

    while state["open"]:
        form.product_name = _ask("Product name *", form.product_name)
        form.category = _ask("Category (optional)", form.category)
        form.barcode = _ask("Batch code / barcode (optional)", form.barcode)
        form.expiry_date = _ask("Expiry date * (YYYY-MM-DD)", form.expiry_date)

        outcome = flow.submit()
        print(f"\n{outcome.title}: {outcome.message}")
        if outcome.status in (SubmissionStatus.MISSING_FIELDS, SubmissionStatus.INVALID_DATE):
            continue
        flow.choose(_choose(outcome.options))


def _print_inventory(items: list[dict]) -> None:
    if not items:
        print("Inventory is empty.")
        return
    print(f"\n📦 Inventory ({len(items)} items):")
    for item in items:
        if not item["expiry_date"]:
            label = "no expiry date"
        else:
            try:
                label = status_label(days_until(item["expiry_date"]))
            except DateParseError:
                label = "unknown expiry"
        print(
            f"  {item['product_name']:<24} {item['category']:<12} "
            f"{item['expiry_date'] or '-':<10}  {label}"
        )


def _cmd_inventory(config: ShelfScanConfig, args) -> None:
    db = InventoryDB(config.inventory.db_path)
    try:
        if args.expiring is not None:
            days = args.expiring if args.expiring >= 0 else config.inventory.expiring_days
            items = db.get_expiring_soon(days)
        else:
            items = db.get_inventory()
    finally:
        db.close()

    if args.json:
        print(json.dumps(items, ensure_ascii=False, indent=2))
        return
    _print_inventory(items)
