#!/usr/bin/env python3

import sys
import argparse
import asyncio
from dataclasses import replace
from decimal import Decimal, InvalidOperation
from dateutil.relativedelta import relativedelta
from models.timestamps import parse_timestamp
from models.transaction import TRANSACTION_TYPES, TransactionDraft
from services.errors import ValidationError
from logger import get_logger

logger = get_logger()


def parse_bound(value, end=False):
    """Parse a --start/--end option.

    A bare date (YYYY-MM-DD) covers the whole day, so as an end bound it
    resolves to the last instant of that day.
    """
    if value is None:
        return None
    bound = parse_timestamp(value)
    if end and len(value) == 10:
        bound += relativedelta(days=1, microseconds=-1)
    return bound


def parse_amount(value):
    """argparse type for money amounts."""
    try:
        return Decimal(value)
    except InvalidOperation:
        raise ValueError(f"not a number: {value}")


def _log_transaction(transaction, categories):
    category = categories.find(transaction.category_id)
    category_label = (
        f"{category.icon} {category.name}" if category else transaction.category_id
    )
    sign = "+" if transaction.type == "income" else "-"
    logger.info(
        f"{transaction.date:%Y-%m-%d %H:%M}  {sign}{transaction.amount:>10}  "
        f"{category_label:<16} {transaction.description or ''}"
    )
    logger.info(f"  ID: {transaction.id}")


def cmd_add(args, services):
    """Record a new transaction."""
    draft = TransactionDraft(
        type=args.type,
        amount=args.amount,
        category_id=args.category,
        description=args.description,
    )

    try:
        transaction = asyncio.run(services.transactions.add(draft))
    except ValidationError as e:
        logger.error(f"Invalid transaction: {e}")
        logger.info("Use 'python -m cli categories list' to see available categories.")
        sys.exit(1)

    logger.info(f"✓ Transaction recorded with ID: {transaction.id}")
    logger.info(f"  Balance: {services.transactions.total_balance()}")


def cmd_list(args, services):
    """List transactions, optionally filtered."""
    transactions = services.transactions.query(
        type=args.type,
        category_id=args.category,
        start_date=parse_bound(args.start),
        end_date=parse_bound(args.end, end=True),
    )

    if not transactions:
        logger.info("No transactions found.")
        return

    logger.info("\nTransactions:")
    logger.info("=" * 80)
    for transaction in transactions:
        _log_transaction(transaction, services.categories)
    logger.info("-" * 80)
    logger.info(f"Total transactions: {len(transactions)}")


def cmd_set_category(args, services):
    """Move a transaction to another category."""
    transaction = services.transactions.find(args.transaction_id)
    if not transaction:
        logger.error(f"Transaction with ID '{args.transaction_id}' not found.")
        sys.exit(1)

    category = services.categories.find(args.category)
    if not category:
        logger.error(f"Category '{args.category}' not found.")
        logger.info("Use 'python -m cli categories list' to see available categories.")
        sys.exit(1)

    services.transactions.update(replace(transaction, category_id=category.id))
    logger.info("✓ Transaction categorized successfully")
    logger.info(f"  Category: {category.name}")


def cmd_delete(args, services):
    """Delete a transaction by ID."""
    if services.transactions.remove(args.transaction_id):
        logger.info(f"✓ Transaction {args.transaction_id} deleted.")
    else:
        logger.error(f"Transaction with ID '{args.transaction_id}' not found.")
        sys.exit(1)


def cmd_balance(args, services):
    """Show the balance over all transactions."""
    logger.info(f"Balance: {services.transactions.total_balance()}")


def cmd_spending(args, services):
    """Show total expenses for a category."""
    spent = services.transactions.spending_for(
        args.category,
        parse_bound(args.start),
        parse_bound(args.end, end=True),
    )
    logger.info(f"Spending for '{args.category}': {spent}")


def _add_range_arguments(parser):
    parser.add_argument(
        "--start",
        help="Earliest date to include (YYYY-MM-DD or ISO 8601 timestamp)",
    )
    parser.add_argument(
        "--end",
        help="Latest date to include (YYYY-MM-DD or ISO 8601 timestamp)",
    )


def setup_parser(subparsers):
    """Setup transactions subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "transactions",
        help="Record and query transactions",
        description="Record income and expenses and query the ledger",
    )

    transactions_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available transaction commands",
        dest="subcommand",
        required=True,
    )

    # transactions add
    add_parser = transactions_subparsers.add_parser(
        "add",
        help="Record a transaction",
        epilog="""
Examples:
  python -m cli transactions add --type expense --amount 12.50 --category food
  python -m cli transactions add --type income --amount 2000 --category transport --description "Refund"
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    add_parser.add_argument("--type", required=True, choices=TRANSACTION_TYPES)
    add_parser.add_argument("--amount", required=True, type=parse_amount)
    add_parser.add_argument("--category", required=True, help="Category ID")
    add_parser.add_argument("--description", help="Optional free text")
    add_parser.set_defaults(func=cmd_add)

    # transactions list
    list_parser = transactions_subparsers.add_parser(
        "list", help="List transactions"
    )
    list_parser.add_argument("--type", choices=TRANSACTION_TYPES)
    list_parser.add_argument("--category", help="Category ID")
    _add_range_arguments(list_parser)
    list_parser.set_defaults(func=cmd_list)

    # transactions set-category
    set_category_parser = transactions_subparsers.add_parser(
        "set-category", help="Set category for a transaction"
    )
    set_category_parser.add_argument("transaction_id", help="Transaction ID")
    set_category_parser.add_argument("category", help="Category ID")
    set_category_parser.set_defaults(func=cmd_set_category)

    # transactions delete
    delete_parser = transactions_subparsers.add_parser(
        "delete", help="Delete a transaction by ID"
    )
    delete_parser.add_argument("transaction_id", help="Transaction ID")
    delete_parser.set_defaults(func=cmd_delete)

    # transactions balance
    balance_parser = transactions_subparsers.add_parser(
        "balance", help="Show the total balance"
    )
    balance_parser.set_defaults(func=cmd_balance)

    # transactions spending
    spending_parser = transactions_subparsers.add_parser(
        "spending", help="Show total expenses for a category"
    )
    spending_parser.add_argument("category", help="Category ID")
    _add_range_arguments(spending_parser)
    spending_parser.set_defaults(func=cmd_spending)
