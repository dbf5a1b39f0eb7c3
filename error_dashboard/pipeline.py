"""
One update of the aggregate error database.

The table is built and normalized in memory and committed with a single
write, so a failed run leaves the stored table as it was.
"""

from __future__ import annotations

import logging
import smtplib
import time
import uuid
from datetime import datetime
from typing import Sequence

from .aggregate import aggregate
from .catalog import SourceRecord
from .config import Settings
from .errors import DashboardError
from .logging_setup import set_run_id
from .models import RunError, RunReport
from .normalize import normalize_table
from .notify import Notifier
from .store import TableStore
from .table import ConsolidatedTable

logger = logging.getLogger(__name__)

SUCCESS_LABEL = "Last Update"
FAILURE_LABEL = "Last Failed Updated"


def format_update_time(moment: datetime) -> str:
    # e.g. "Mon, October 19, 2026, 06:19:00 AM UTC"
    return moment.strftime("%a, %B %d, %Y, %I:%M:%S %p %Z")


def build_table(
    sources: Sequence[SourceRecord],
    store: TableStore,
    report: RunReport,
) -> ConsolidatedTable:
    result = aggregate(sources, store.fetch_source_rows)
    report.included_sources = result.included
    report.skipped_sources = result.skipped
    return normalize_table(result.table)


def _success_message(report: RunReport) -> str:
    return (
        "Successful Update of Global Academic Error Dashboard.\n\n"
        f"Update Time: {report.update_time}\n\n"
        f"Execution Time: {report.execution_ms} milliseconds"
    )


def _failure_message(error: str, frequency_hours: int) -> str:
    return (
        "Unsuccessful Update of Global Academic Error Dashboard.\n\n"
        f"Error Message: {error}\n\n"
        f"Will try again in {frequency_hours} Hour(s)."
    )


def update_entire_dataset(
    store: TableStore,
    sources: Sequence[SourceRecord],
    notifier: Notifier,
    settings: Settings,
) -> RunReport:
    """
    Aggregate, normalize and commit; then record the status and notify.

    Failures are returned in the report (status "failure" + error), not raised.
    """
    run_id = uuid.uuid4().hex[:12]
    set_run_id(run_id)
    started = time.monotonic()

    report = RunReport(
        run_id=run_id,
        status="success",
        status_label=SUCCESS_LABEL,
        update_time=format_update_time(datetime.now().astimezone()),
        execution_ms=0,
    )

    try:
        table = build_table(sources, store, report)
        store.write_table(table)
        report.rows = len(table)
        report.execution_ms = int((time.monotonic() - started) * 1000)
        subject, body = "Successful AET Update", _success_message(report)
        logger.info("%s", body, extra={"component": "pipeline"})
    except DashboardError as e:
        report.status = "failure"
        report.error = RunError(**e.to_dict())
        logger.error("%s: %s", e.code, e.message, extra={"component": "pipeline"})
    except Exception as e:
        # every failure is reported through the status file and the notifier
        report.status = "failure"
        report.error = RunError(code="UNEXPECTED", message=f"{type(e).__name__}: {e}")
        logger.exception("update failed", extra={"component": "pipeline"})

    if report.status == "failure":
        report.status_label = FAILURE_LABEL
        report.execution_ms = int((time.monotonic() - started) * 1000)
        subject = "Unsuccessful AET Update"
        body = _failure_message(report.error.message, settings.update_frequency_hours)
        logger.info("%s", body, extra={"component": "pipeline"})

    store.write_status({
        "status": report.status_label,
        "update_time": report.update_time,
        "run_id": report.run_id,
    })

    try:
        notifier.send(subject, body)
        report.notified = True
    except (OSError, smtplib.SMTPException):
        logger.exception("notification failed", extra={"component": "notify"})

    return report


def refresh_normalization(store: TableStore) -> ConsolidatedTable:
    """Re-run the grade, subject and level stages on the stored table."""
    table = normalize_table(store.read_table())
    store.write_table(table)
    return table
