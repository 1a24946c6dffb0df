"""Command line entry point for practice desk."""

import argparse
import asyncio
import sys
from datetime import date
from decimal import Decimal, InvalidOperation

from practice_desk.api import PracticeAPIClient, PracticeAPIError
from practice_desk.cache import QueryCache
from practice_desk.compliance import (
    ComplianceFrequency,
    compliance_period_label,
    compute_compliance_end_date,
)
from practice_desk.config import configure_logging, get_logger
from practice_desk.invoicing import compute_invoice_totals
from practice_desk.notifications import Notification, Notifier
from practice_desk.validation import validate_compliance_years
from practice_desk.workflow import StatusControl, TaskWorkflowService
from practice_desk.workflow.transitions import sort_statuses

logger = get_logger(__name__)


def _print_notification(notification: Notification) -> None:
    stream = sys.stderr if notification.is_error else sys.stdout
    print(f"{notification.title}: {notification.description}", file=stream)


def _decimal(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a number: {value}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="practice-desk",
        description="Task workflow, compliance and invoicing helpers",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override LOG_LEVEL",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("statuses", help="List configured task statuses")

    transitions = commands.add_parser("transitions", help="Show next statuses for a task")
    transitions.add_argument("task_id", type=int)

    move = commands.add_parser("move", help="Move a task to another status")
    move.add_argument("task_id", type=int)
    move.add_argument("status_id", type=int)

    complete = commands.add_parser("complete", help="Mark a task as completed")
    complete.add_argument("task_id", type=int)

    end = commands.add_parser("compliance-end", help="Compute a compliance period end")
    end.add_argument("frequency", choices=[f.value for f in ComplianceFrequency])
    end.add_argument("start", type=date.fromisoformat, help="Start date (YYYY-MM-DD)")

    years = commands.add_parser("check-years", help="Validate compliance year text")
    years.add_argument("text")
    years.add_argument("--frequency", default=None)

    totals = commands.add_parser("invoice-totals", help="Compute invoice totals")
    totals.add_argument("rate", type=_decimal)
    totals.add_argument("--discount", type=_decimal, default=Decimal("0"))
    totals.add_argument("--tax-percent", type=_decimal, default=Decimal("0"))

    return parser


def _run_offline(args: argparse.Namespace) -> int:
    if args.command == "compliance-end":
        end = compute_compliance_end_date(args.frequency, args.start)
        print(f"End date: {end.isoformat() if end else '-'}")
        print(f"Period:   {compliance_period_label(args.frequency, args.start)}")
        return 0

    if args.command == "check-years":
        result = validate_compliance_years(args.text, args.frequency)
        for error in result.errors:
            print(f"error: {error.message}", file=sys.stderr)
        for warning in result.warnings:
            print(f"warning: {warning.message}")
        return 0 if result.is_valid else 1

    totals = compute_invoice_totals(args.rate, args.discount, args.tax_percent)
    for key, amount in totals.formatted().items():
        print(f"{key:>15}: {amount}")
    return 0


async def _run_online(args: argparse.Namespace) -> int:
    notifier = Notifier()
    notifier.add_hook(_print_notification)

    async with PracticeAPIClient() as client:
        service = TaskWorkflowService(client, QueryCache())

        if args.command == "statuses":
            for status in sort_statuses(await service.load_statuses()):
                print(f"{status.id:>5}  {status.rank!s:>5}  {status.name}")
            return 0

        task = await service.load_task(args.task_id)
        control = StatusControl(service, notifier, task.id, task.status_id)
        await control.refresh()

        if args.command == "transitions":
            view = control.view()
            print(f"Current: {view.label}")
            for status in view.options:
                print(f"  -> {status.id:>5}  {status.name}")
            if view.show_completion_fallback:
                print("  -> mark as completed")
            if not view.interactive:
                print("  (no transitions available)")
            return 0

        if args.command == "move":
            updated = await control.select(args.status_id)
        else:
            updated = await control.complete()
        return 0 if updated is not None else 1


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command in ("compliance-end", "check-years", "invoice-totals"):
        # Offline commands run without API credentials
        configure_logging(level=args.log_level or "WARNING", format="console")
        return _run_offline(args)

    configure_logging(level=args.log_level)
    try:
        return asyncio.run(_run_online(args))
    except PracticeAPIError as e:
        logger.error("command_failed", command=args.command, error=str(e))
        print(f"Error: {e.user_message or e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
