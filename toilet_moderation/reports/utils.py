"""
Report intake and moderator-side report management.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from toilet_moderation.errors import DuplicateReport, InvalidStatusTransition, ReportNotFound
from toilet_moderation.reports import detection, schemas
from toilet_moderation.storage.store import REPORTS, DocumentStore

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    schemas.ReportStatus.pending: {
        schemas.ReportStatus.under_review,
        *schemas.TERMINAL_STATUSES,
    },
    schemas.ReportStatus.under_review: set(schemas.TERMINAL_STATUSES),
}


def submit_report(
    store: DocumentStore,
    resolver,
    reporter_id: str,
    target_type: schemas.ReportTargetType,
    target_id: str,
    reason: schemas.ReportReason,
    description: Optional[str] = None,
    evidence: Optional[List[str]] = None,
    now: Optional[datetime] = None,
) -> schemas.Report:
    """
    Create and persist a new report, then run auto-detection for its target.

    Raises DuplicateReport if the reporter already has an open report on the
    same target. Auto-detection never fails the submission.
    """
    now = now or datetime.now(timezone.utc)
    target_type = schemas.ReportTargetType(target_type)

    with store.lock("report", reporter_id, target_type.value, target_id):
        existing = store.query(
            REPORTS,
            where={
                "reporter_id": reporter_id,
                "target_type": target_type,
                "target_id": target_id,
                "status": schemas.OPEN_STATUSES,
            },
            limit=1,
        )
        if existing:
            raise DuplicateReport(reporter_id, target_type.value, target_id)

        report = schemas.Report(
            reporter_id=reporter_id,
            target_type=target_type,
            target_id=target_id,
            reason=reason,
            description=description,
            evidence=evidence,
            status=schemas.ReportStatus.pending,
            created_at=now,
        )
        store.insert(REPORTS, report.model_dump())

    logger.info("Report %s filed by %s against %s %s (%s)",
                report.id, reporter_id, target_type.value, target_id, report.reason.value)
    detection.evaluate(store, resolver, target_type, target_id, report.reason, report_id=report.id, now=now)
    return report


def get_report(store: DocumentStore, report_id: str) -> Optional[schemas.Report]:
    doc = store.get(REPORTS, report_id)
    return schemas.Report(**doc) if doc else None


def get_reports(store: DocumentStore, status: Optional[schemas.ReportStatus] = None,
                limit: int = 50) -> List[schemas.Report]:
    """Newest reports first, optionally filtered by status (moderator view)."""
    where = {"status": status} if status else None
    docs = store.query(REPORTS, where=where, order_by="created_at", descending=True, limit=limit)
    return [schemas.Report(**d) for d in docs]


def get_user_reports(store: DocumentStore, reporter_id: str, limit: int = 20) -> List[schemas.Report]:
    """A reporter's own report history, newest first."""
    docs = store.query(REPORTS, where={"reporter_id": reporter_id},
                       order_by="created_at", descending=True, limit=limit)
    return [schemas.Report(**d) for d in docs]


def update_report_status(
    store: DocumentStore,
    report_id: str,
    status: schemas.ReportStatus,
    reviewer_id: str,
    resolution: Optional[str] = None,
    now: Optional[datetime] = None,
) -> schemas.Report:
    """Move a report along its lifecycle; terminal reports cannot change status."""
    now = now or datetime.now(timezone.utc)
    status = schemas.ReportStatus(status)

    report = get_report(store, report_id)
    if report is None:
        raise ReportNotFound(report_id)
    if status not in ALLOWED_TRANSITIONS.get(report.status, set()):
        raise InvalidStatusTransition(report.status.value, status.value)

    updated = store.update(REPORTS, report_id, {
        "status": status,
        "reviewer_id": reviewer_id,
        "reviewed_at": now,
        "resolution": resolution,
    })
    logger.info("Report %s moved %s -> %s by %s", report_id, report.status.value, status.value, reviewer_id)
    return schemas.Report(**updated)


def get_summary(store: DocumentStore) -> schemas.ReportSummary:
    """Count reports per status for the moderator dashboard."""
    docs = store.query(REPORTS)
    counts = {s: 0 for s in schemas.ReportStatus}
    for d in docs:
        counts[schemas.ReportStatus(d["status"])] += 1
    return schemas.ReportSummary(
        total_reports=len(docs),
        pending=counts[schemas.ReportStatus.pending],
        under_review=counts[schemas.ReportStatus.under_review],
        resolved=counts[schemas.ReportStatus.resolved],
        dismissed=counts[schemas.ReportStatus.dismissed],
        auto_resolved=counts[schemas.ReportStatus.auto_resolved],
    )
