"""Batch runner for scheduled reconciliation (cron, systemd timers).

Exit codes: 0 all groups settled, 1 some groups FAILED or ESCALATED,
2 the store became unavailable and the batch stopped.
"""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import signal
import threading
from datetime import timedelta
from typing import Optional, Sequence

from dotenv import load_dotenv

from config import get_settings_module

from .common.datetime_utils import now_local, parse_iso_date
from .container import Container, build_container
from .core.enums import OutcomeKind
from .core.exceptions import DomainError, PersistenceUnavailableError
from .main import LOG_FORMAT


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Reconcile biometric punches into daily attendance")
    parser.add_argument("--start", type=str, help="First work date (YYYY-MM-DD), default: yesterday")
    parser.add_argument("--end", type=str, help="Last work date (YYYY-MM-DD), default: today")
    parser.add_argument("--employee", type=int, help="Only this employee id")
    parser.add_argument("--include-processed", action="store_true", help="Re-derive already processed days")
    parser.add_argument("--json", action="store_true", help="Print the batch result as JSON")
    return parser


def main(argv: Optional[Sequence[str]] = None, *, container: Optional[Container] = None) -> int:
    args = _parser().parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format=LOG_FORMAT)
    log = logging.getLogger("attendance_reconciler.cli")

    today = now_local().date()
    try:
        start = parse_iso_date(args.start) if args.start else today - timedelta(days=1)
        end = parse_iso_date(args.end) if args.end else today
    except ValueError:
        log.error("Dates must be YYYY-MM-DD")
        return 2

    if container is None:
        container = build_container(db_config=getattr(settings, "DB_CONFIG"), settings=settings)

    cancel = threading.Event()
    previous = None
    if threading.current_thread() is threading.main_thread():
        # SIGTERM finishes the running groups and cancels the rest
        previous = signal.signal(signal.SIGTERM, lambda *_: cancel.set())

    try:
        result = container.reconciliation_service.reconcile(
            start_date=start,
            end_date=end,
            employee_id=args.employee,
            include_processed=args.include_processed,
            cancel=cancel,
        )
    except PersistenceUnavailableError as e:
        log.error("Batch stopped after %d group(s): %s", len(e.outcomes), e)
        for o in e.outcomes:
            if o.kind == OutcomeKind.FAILED:
                log.error("Group %s/%s failed: %s", o.employee_id, o.work_date, o.reason)
        return 2
    except DomainError as e:
        log.error("Batch rejected: %s", e)
        return 2
    finally:
        if previous is not None:
            signal.signal(signal.SIGTERM, previous)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(" ".join(f"{k}={v}" for k, v in result.summary().items()))

    unsettled = result.count(OutcomeKind.FAILED) + result.count(OutcomeKind.ESCALATED)
    return 1 if unsettled else 0


if __name__ == "__main__":
    raise SystemExit(main())
