"""
Command line tool for offline day logs.

Usage:
    nutrition-log log 2024-05-01 eggs --qty 2 --meal breakfast
    nutrition-log show 2024-05-01
    nutrition-log dates
    nutrition-log sync 2024-05-01 --token <access token>
"""

from __future__ import annotations

import argparse
import asyncio
import math
import sys
from datetime import date
from pathlib import Path

from nutrition_log.adapters.json_day_cache import JsonFileDayCache
from nutrition_log.app_logging import configure_logging
from nutrition_log.containers import build_container
from nutrition_log.domain.days import MEAL_BUCKETS, DayLog, FoodReference
from nutrition_log.errors import NotAuthenticatedError, StoreUnavailableError
from nutrition_log.services.reconciler import (
    IMPORT_LOCAL,
    KEEP_SERVER,
    CleanDay,
    DayLogReconciler,
    PendingConflict,
    UnavailableDay,
)

DEFAULT_CACHE_DIR = "data/days"


def get_cache(args: argparse.Namespace) -> JsonFileDayCache:
    """Return the local day cache selected on the command line."""
    return JsonFileDayCache(Path(args.cache_dir or DEFAULT_CACHE_DIR))


def cmd_log(args: argparse.Namespace) -> int:
    """Append a food to a locally cached day."""
    if not math.isfinite(args.qty) or args.qty < 0:
        print("Error: quantity must be a finite, non-negative number")
        return 1
    cache = get_cache(args)
    day = cache.get(args.date) or DayLog.empty()
    day = day.with_item(args.meal, FoodReference(food_id=args.food, qty=args.qty))
    cache.put(args.date, day)
    print(f"Logged {args.qty:g} x {args.food} for {args.meal} on {args.date}")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Print a locally cached day."""
    day = get_cache(args).get(args.date)
    if day is None:
        print(f"No local data for {args.date}")
        return 0
    _print_day(day)
    return 0


def cmd_dates(args: argparse.Namespace) -> int:
    """List dates with local data."""
    dates = get_cache(args).dates()
    if not dates:
        print("No local days.")
        return 0
    for day_date in dates:
        print(day_date)
    return 0


def cmd_sync(args: argparse.Namespace) -> int:
    """Reconcile a locally cached day with the account copy."""
    container = build_container()
    configure_logging(debug=container.settings.debug)
    cache = JsonFileDayCache(
        Path(args.cache_dir or container.settings.local_cache_dir)
    )
    try:
        user = container.auth_service.authenticate(args.token)
    except NotAuthenticatedError as exc:
        print(f"Error: {exc}")
        return 1

    reconciler = DayLogReconciler(store=container.day_service, local_cache=cache)
    reconciler.handle_auth_transition(user.id)
    return asyncio.run(_sync(reconciler, args.date, args.resolution))


async def _sync(
    reconciler: DayLogReconciler, day_date: str, resolution: str | None
) -> int:
    outcome = await reconciler.open_date(day_date)
    if isinstance(outcome, UnavailableDay):
        print(f"Error: account data unavailable ({outcome.reason})")
        return 1
    if isinstance(outcome, CleanDay):
        print(f"{day_date} is up to date ({outcome.day.item_count()} items)")
        return 0
    if not isinstance(outcome, PendingConflict):
        return 1

    print(f"Local and account data differ for {day_date}:")
    print(f"  local:   {outcome.local_count} items {outcome.local.bucket_counts()}")
    print(f"  account: {outcome.server_count} items {outcome.server.bucket_counts()}")
    if resolution is None:
        answer = input("Import local data? [i]mport / [k]eep account data ")
        if answer.lower().startswith("i"):
            resolution = IMPORT_LOCAL
        elif answer.lower().startswith("k"):
            resolution = KEEP_SERVER
        else:
            print("Cancelled.")
            return 0
    try:
        day = await reconciler.resolve(day_date, resolution)
    except (StoreUnavailableError, ValueError) as exc:
        print(f"Error: {exc}")
        return 1
    print(f"Resolved {day_date} with {resolution} ({day.item_count()} items)")
    return 0


def _print_day(day: DayLog) -> None:
    for meal in MEAL_BUCKETS:
        print(f"{meal}:")
        for ref in day.bucket(meal):
            print(f"  {ref.qty:g} x {ref.food_id}")


def _iso_date(value: str) -> str:
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid date: {value}") from exc


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Nutrition log CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--cache-dir",
        help=f"Directory of local day files (default: {DEFAULT_CACHE_DIR})",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    log_parser = subparsers.add_parser("log", help="Log a food offline")
    log_parser.add_argument("date", type=_iso_date, help="Day in YYYY-MM-DD form")
    log_parser.add_argument("food", help="Food id")
    log_parser.add_argument("--qty", type=float, default=1.0, help="Servings")
    log_parser.add_argument(
        "--meal", choices=MEAL_BUCKETS, default="dinner", help="Meal bucket"
    )

    show_parser = subparsers.add_parser("show", help="Show a local day")
    show_parser.add_argument("date", type=_iso_date, help="Day in YYYY-MM-DD form")

    subparsers.add_parser("dates", help="List local days")

    sync_parser = subparsers.add_parser("sync", help="Reconcile with the account")
    sync_parser.add_argument("date", type=_iso_date, help="Day in YYYY-MM-DD form")
    sync_parser.add_argument("--token", required=True, help="Access token")
    sync_parser.add_argument(
        "--resolution",
        choices=(IMPORT_LOCAL, KEEP_SERVER),
        help="Apply this choice instead of prompting on a conflict",
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        "log": cmd_log,
        "show": cmd_show,
        "dates": cmd_dates,
        "sync": cmd_sync,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
