"""
Family Days — Command line.

    serve                          start the daily cron runner
    run <slot>                     one reminder run (morning|afternoon|evening)
    test-send --to ... --message   send one message immediately
    convert <YYYY-MM-DD>           Gregorian day -> Hebrew date
    convert <day> <month> <year>   Hebrew date -> Gregorian day
    import <file.json>             load users and events from a JSON export
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from datetime import date

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="familydays", description="Family Days reminder scheduler")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="Start the daily reminder runs")

    run = sub.add_parser("run", help="Run the reminders of one time slot now")
    run.add_argument("slot", choices=["morning", "afternoon", "evening"])

    send = sub.add_parser("test-send", help="Send a single test message")
    send.add_argument("--to", required=True, help="Phone number, chat id or email address")
    send.add_argument("--message", required=True)
    send.add_argument("--channel", default="chat", help="chat (or whatsapp), sms, email")
    send.add_argument("--subject", default=None, help="Email subject")
    send.add_argument("--as-user", default=None, help="Require this user id to be an admin")

    convert = sub.add_parser("convert", help="Convert between Gregorian and Hebrew dates")
    convert.add_argument("parts", nargs="+", help="YYYY-MM-DD, or DAY MONTH YEAR (Hebrew)")

    load = sub.add_parser("import", help="Load users and events from a JSON file")
    load.add_argument("path")
    return parser


def _convert(parts: list[str]) -> str:
    from familydays.core import hebrew_calendar
    from familydays.data.models import HebrewDate

    if len(parts) == 1:
        hebrew = hebrew_calendar.to_hebrew(date.fromisoformat(parts[0]))
        return hebrew_calendar.format_hebrew_date(hebrew)
    if len(parts) == 3:
        day, month, year = (int(p) for p in parts)
        return hebrew_calendar.to_gregorian(HebrewDate(day=day, month=month, year=year)).isoformat()
    raise ValueError("Expected YYYY-MM-DD or DAY MONTH YEAR")


async def _send_test_message(reminder_scheduler, args: argparse.Namespace):
    try:
        return await reminder_scheduler.test_send(
            args.to, args.message,
            channel=args.channel, subject=args.subject, requested_by=args.as_user,
        )
    finally:
        await reminder_scheduler.close()


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.command == "convert":
        try:
            print(_convert(args.parts))
        except ValueError as exc:
            logger.error("Cannot convert %s: %s", " ".join(args.parts), exc)
            return 2
        return 0

    from familydays import runner

    if args.command == "serve":
        try:
            asyncio.run(runner.serve())
        except KeyboardInterrupt:
            logger.info("Interrupted")
        return 0

    if args.command == "import":
        from familydays.ports.store_port import StoreError

        try:
            _, rejected = runner.import_documents(args.path)
        except (OSError, ValueError, StoreError) as exc:
            logger.error("Cannot import %s: %s", args.path, exc)
            return 2
        return 1 if rejected else 0

    reminder_scheduler = runner.build_scheduler()

    if args.command == "run":
        summary = asyncio.run(runner.run_once(reminder_scheduler, args.slot))
        return 0 if summary is not None else 1

    from familydays.core.access_policy import PermissionDenied

    try:
        result = asyncio.run(_send_test_message(reminder_scheduler, args))
    except PermissionDenied as exc:
        logger.error("%s", exc)
        return 1
    print(json.dumps(result.to_dict()))
    return 0 if result.success else 1
