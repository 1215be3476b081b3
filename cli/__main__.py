#!/usr/bin/env python3
"""
Tally CLI - command-line interface for the transaction ledger and budgets.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    transactions Record and query transactions
    budgets      Manage budgets and check progress
    categories   Show the category catalog
    migrate      Database migrations

Examples:
    python -m cli migrate apply
    python -m cli transactions add --type expense --amount 12.50 --category food
    python -m cli budgets add --category food --limit 300 --period monthly
    python -m cli budgets progress food
"""

import sys
import argparse
from cli import transactions, budgets, categories, migrate
from config import load_config
from services.base import Services
from services.events import BudgetExceeded
from db.manager import DatabaseManager
from logger import setup_logging, get_logger

SERVICE_COMMANDS = ("transactions", "budgets", "categories")


def notify_budget_exceeded(event: BudgetExceeded) -> None:
    get_logger().warning(
        f"⚠ Budget exceeded for '{event.category_id}': "
        f"{event.spent} spent of {event.limit} this {event.period[:-2]}"
    )


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="Tally - Personal finance ledger and budgets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    transactions.setup_parser(subparsers)
    budgets.setup_parser(subparsers)
    categories.setup_parser(subparsers)
    migrate.setup_parser(subparsers)

    args = parser.parse_args()

    if hasattr(args, "func"):
        try:
            config = load_config()
            setup_logging(config)

            # Services load their snapshots on construction, so they are only
            # built for commands that use them; migrate works on the raw database
            if args.command in SERVICE_COMMANDS:
                services = Services(config)
                services.events.subscribe(BudgetExceeded, notify_budget_exceeded)
                args.func(args, services)
            elif args.command == "migrate":
                args.func(args, DatabaseManager(config))
            else:
                args.func(args)
        except Exception as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
