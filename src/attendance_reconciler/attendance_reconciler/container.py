from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .attendance.audit import AttendanceAuditService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceReviewService
from .core.constants import DEFAULT_RECONCILE_WORKERS
from .database.connection import DBConfig, DatabaseConnection
from .devices.gap_verifier import GapVerifier
from .punches.mysql_punch_repository import MySQLPunchRepository
from .punches.repository import PunchRepository
from .reconciliation.mysql_reconciliation_store import MySQLReconciliationStore
from .reconciliation.service import ReconciliationService
from .reconciliation.store import ReconciliationStore
from .rules.loader import RulesProvider, SettingsRulesProvider


@dataclass(frozen=True)
class Container:
    punches_repo: PunchRepository
    attendance_repo: AttendanceRepository
    store: ReconciliationStore
    rules: RulesProvider

    reconciliation_service: ReconciliationService
    gap_verifier: GapVerifier
    review_service: AttendanceReviewService
    audit_service: AttendanceAuditService


def build_services(
    *,
    punches_repo: PunchRepository,
    attendance_repo: AttendanceRepository,
    store: ReconciliationStore,
    rules: RulesProvider,
    workers: int = DEFAULT_RECONCILE_WORKERS,
    logger: Optional[logging.Logger] = None,
) -> Container:
    """Wire services over any repository implementation (MySQL or in-memory)."""

    return Container(
        punches_repo=punches_repo,
        attendance_repo=attendance_repo,
        store=store,
        rules=rules,
        reconciliation_service=ReconciliationService(
            punches_repo, attendance_repo, store, rules, workers=workers, logger=logger
        ),
        gap_verifier=GapVerifier(punches_repo, rules, logger=logger),
        review_service=AttendanceReviewService(attendance_repo, logger=logger),
        audit_service=AttendanceAuditService(attendance_repo, logger=logger),
    )


def build_container(*, db_config: dict, settings: Any) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        connection_timeout=int(db_config.get("connection_timeout", 10)),
    )
    conn = DatabaseConnection.get_instance(config)

    return build_services(
        punches_repo=MySQLPunchRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        store=MySQLReconciliationStore(conn),
        rules=SettingsRulesProvider(settings),
        workers=int(getattr(settings, "RECONCILE_WORKERS", DEFAULT_RECONCILE_WORKERS)),
    )
