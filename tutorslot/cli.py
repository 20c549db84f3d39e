"""
CLI entry point for querying a bookings snapshot file.

Usage:
    tutorslot check --snapshot snapshot.json --provider T1 --date 2026-10-26 --start 09:00 --end 10:00
    tutorslot sweep --snapshot snapshot.json --now 2026-10-20T08:00:00+00:00
    tutorslot report --snapshot snapshot.json

Snapshot format: {"calendars": [ProviderCalendar, ...], "bookings": [Booking, ...]}
"""

import argparse
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from tutorslot.analytics.metrics import SessionMetricsCalculator
from tutorslot.clock import Clock, FixedClock, system_clock
from tutorslot.engine.availability import compute_availability, would_double_book_requester
from tutorslot.engine.expiry import expire_pending_bookings
from tutorslot.engine.rules import check_structure
from tutorslot.schemas.booking_schema import Booking
from tutorslot.schemas.schedule_schema import ProviderCalendar, TimeInterval

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_BAD_INPUT = 2


class Snapshot(BaseModel):
    """Calendars and bookings exported from the store."""

    calendars: list[ProviderCalendar] = Field(default_factory=list)
    bookings: list[Booking] = Field(default_factory=list)

    def calendar_for(self, provider_id: str) -> ProviderCalendar:
        for calendar in self.calendars:
            if calendar.provider_id == provider_id:
                return calendar
        return ProviderCalendar(provider_id=provider_id)


def load_snapshot(path: Path) -> Snapshot:
    return Snapshot.model_validate_json(path.read_text(encoding="utf-8"))


def _clock(value: Optional[str]) -> Clock:
    """A fixed clock at ``--now`` (naive values are UTC), else the system clock."""
    return FixedClock(datetime.fromisoformat(value)) if value else system_clock


def _cmd_check(args: argparse.Namespace, snapshot: Snapshot) -> int:
    day = date.fromisoformat(args.date)
    interval = TimeInterval.parse(args.start, args.end)

    clock = _clock(args.now)
    structural = check_structure(day, interval, clock())
    if not structural.passed:
        sys.stdout.write(f"REJECTED ({structural.rejection.value}): {structural.message}\n")
        return EXIT_REJECTED

    result = compute_availability(snapshot.calendar_for(args.provider), day, interval, snapshot.bookings)
    if not result.available:
        sys.stdout.write(f"UNAVAILABLE ({result.rejection.value}): {result.reason}\n")
        return EXIT_REJECTED

    if args.requester and would_double_book_requester(args.requester, day, interval, snapshot.bookings):
        sys.stdout.write("REJECTED (requester_double_booked): requester already booked at this time\n")
        return EXIT_REJECTED

    sys.stdout.write(f"AVAILABLE: {args.provider} on {day} {interval}\n")
    return EXIT_OK


def _cmd_sweep(args: argparse.Namespace, snapshot: Snapshot) -> int:
    clock = _clock(args.now)
    for booking_id in expire_pending_bookings(snapshot.bookings, clock()):
        sys.stdout.write(booking_id + "\n")
    return EXIT_OK


def _cmd_report(args: argparse.Namespace, snapshot: Snapshot) -> int:
    calculator = SessionMetricsCalculator()
    output = calculator.format_report(calculator.calculate(snapshot.bookings))
    if args.report:
        report_path = Path(args.report)
        report_path.write_text(output, encoding="utf-8")
        logger.info("Report written to %s", report_path)
    else:
        sys.stdout.write(output + "\n")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tutorslot",
        description="Check tutor availability and booking state from a snapshot file.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging output.")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_snapshot(p: argparse.ArgumentParser) -> None:
        p.add_argument("--snapshot", type=str, required=True,
                       help="Path to a JSON snapshot of calendars and bookings.")

    check = sub.add_parser("check", help="Check whether a tutor can take a session.")
    add_snapshot(check)
    check.add_argument("--provider", required=True, help="Tutor id.")
    check.add_argument("--requester", default=None, help="Tutee id, to check their own calendar too.")
    check.add_argument("--date", required=True, help="Session date (YYYY-MM-DD).")
    check.add_argument("--start", required=True, help="Start time (HH:MM).")
    check.add_argument("--end", required=True, help="End time (HH:MM).")
    check.add_argument("--now", default=None, help="ISO timestamp to use as the current time.")
    check.set_defaults(handler=_cmd_check)

    sweep = sub.add_parser("sweep", help="List pending requests due for auto-decline.")
    add_snapshot(sweep)
    sweep.add_argument("--now", default=None, help="ISO timestamp to use as the current time.")
    sweep.set_defaults(handler=_cmd_sweep)

    report = sub.add_parser("report", help="Print session analytics.")
    add_snapshot(report)
    report.add_argument("--report", default=None,
                        help="Path to write the report (default: stdout).")
    report.set_defaults(handler=_cmd_report)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    snapshot_path = Path(args.snapshot)
    if not snapshot_path.exists():
        logger.error("Snapshot file not found: %s", snapshot_path)
        return EXIT_BAD_INPUT

    try:
        snapshot = load_snapshot(snapshot_path)
        return args.handler(args, snapshot)
    except ValueError as exc:
        # pydantic's ValidationError is a ValueError too
        logger.error("Invalid input: %s", exc)
        return EXIT_BAD_INPUT


if __name__ == "__main__":
    sys.exit(main())
