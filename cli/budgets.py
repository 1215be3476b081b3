#!/usr/bin/env python3

import sys
from models.budget import MONTHLY, PERIODS, BudgetDraft
from services.errors import InvalidPeriodError, ValidationError
from cli.transactions import parse_amount
from logger import get_logger

logger = get_logger()


def cmd_add(args, services):
    """Register a new budget."""
    draft = BudgetDraft(
        category_id=args.category,
        limit=args.limit,
        period=args.period,
        currency=args.currency,
    )

    try:
        budget = services.budgets.add(draft)
    except (ValidationError, InvalidPeriodError) as e:
        logger.error(f"Invalid budget: {e}")
        sys.exit(1)

    if not services.categories.exists(budget.category_id):
        logger.warning(
            f"Category '{budget.category_id}' is not in the catalog; "
            "no transaction can count against this budget."
        )

    logger.info(f"✓ Budget created successfully with ID: {budget.id}")
    logger.info(f"  Category: {budget.category_id}")
    logger.info(f"  Limit: {budget.limit} {budget.currency or ''}".rstrip())
    logger.info(f"  Period: {budget.period}")


def cmd_list(args, services):
    """List all budgets with their current progress."""
    budgets = services.budgets.find_all()

    if not budgets:
        logger.info("No budgets found.")
        return

    logger.info("\nBudgets:")
    logger.info("=" * 80)
    for budget in budgets:
        spent = services.budgets.current_spending(budget.category_id, budget.period)
        logger.info(f"ID: {budget.id}")
        logger.info(f"Category: {budget.category_id}")
        logger.info(f"Period: {budget.period}")
        logger.info(f"Limit: {budget.limit} {budget.currency or ''}".rstrip())
        logger.info(f"Spent this {budget.period[:-2]}: {spent}")
        logger.info("-" * 80)

    logger.info(f"\nTotal budgets: {len(budgets)}")


def cmd_delete(args, services):
    """Delete a budget by ID."""
    if services.budgets.remove(args.budget_id):
        logger.info(f"✓ Budget {args.budget_id} deleted.")
    else:
        logger.error(f"Budget with ID '{args.budget_id}' not found.")
        sys.exit(1)


def cmd_progress(args, services):
    """Show how much of a category's budget is spent this period."""
    budget = services.budgets.budget_for(args.category, args.period)
    if budget is None:
        logger.info(f"No {args.period} budget for '{args.category}'.")
        return

    start, end = services.budgets.resolve_period_range(args.period)
    progress = services.budgets.progress_for(args.category, args.period)
    logger.info(f"Period: {start:%Y-%m-%d} to {end:%Y-%m-%d}")
    logger.info(f"Progress for '{args.category}': {progress:.1f}% of {budget.limit}")
    if progress >= 100:
        logger.warning("Budget exceeded.")


def setup_parser(subparsers):
    """Setup budgets subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "budgets",
        help="Manage budgets",
        description="Create, list, and delete per-category spending caps",
    )

    budgets_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available budget commands",
        dest="subcommand",
        required=True,
    )

    # budgets add
    add_parser = budgets_subparsers.add_parser("add", help="Create a budget")
    add_parser.add_argument("--category", required=True, help="Category ID")
    add_parser.add_argument("--limit", required=True, type=parse_amount)
    add_parser.add_argument("--period", required=True, choices=PERIODS)
    add_parser.add_argument("--currency", help="Informational currency code")
    add_parser.set_defaults(func=cmd_add)

    # budgets list
    list_parser = budgets_subparsers.add_parser("list", help="List all budgets")
    list_parser.set_defaults(func=cmd_list)

    # budgets delete
    delete_parser = budgets_subparsers.add_parser(
        "delete", help="Delete a budget by ID"
    )
    delete_parser.add_argument("budget_id", help="Budget ID")
    delete_parser.set_defaults(func=cmd_delete)

    # budgets progress
    progress_parser = budgets_subparsers.add_parser(
        "progress", help="Show budget progress for a category"
    )
    progress_parser.add_argument("category", help="Category ID")
    progress_parser.add_argument("--period", choices=PERIODS, default=MONTHLY)
    progress_parser.set_defaults(func=cmd_progress)
