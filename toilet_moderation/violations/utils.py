"""
utils.py – Violation ledger: append-only, time-boxed violation entries per user.
Expired entries are kept for audit and simply left out of point totals.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Mapping, Optional

from toilet_moderation.storage.store import VIOLATIONS, DocumentStore
from toilet_moderation.violations.schemas import ViolationRecord, ViolationSeverity, ViolationType

logger = logging.getLogger(__name__)

SEVERITY_POINTS: Mapping[ViolationSeverity, int] = {
    ViolationSeverity.LOW: 1,
    ViolationSeverity.MEDIUM: 3,
    ViolationSeverity.HIGH: 6,
    ViolationSeverity.CRITICAL: 12,
}

POINT_EXPIRATION = timedelta(days=30)


def points_for(severity: ViolationSeverity) -> int:
    return SEVERITY_POINTS[ViolationSeverity(severity)]


def add_violation(
    store: DocumentStore,
    user_id: str,
    type: ViolationType,
    severity: ViolationSeverity,
    description: str,
    evidence: Optional[List[str]] = None,
    report_id: Optional[str] = None,
    auto_detected: bool = False,
    now: Optional[datetime] = None,
) -> ViolationRecord:
    """Append a violation entry; points and expiry are fixed at creation."""
    now = now or datetime.now(timezone.utc)
    record = ViolationRecord(
        user_id=user_id,
        type=type,
        severity=severity,
        description=description,
        evidence=evidence,
        report_id=report_id,
        auto_detected=auto_detected,
        points=points_for(severity),
        created_at=now,
        expires_at=now + POINT_EXPIRATION,
    )
    store.insert(VIOLATIONS, record.model_dump())
    logger.info(
        "Recorded %s violation (%s, %d pts) for user %s%s",
        record.type.value, record.severity.value, record.points, user_id,
        " [auto]" if auto_detected else "",
    )
    return record


def get_violations(store: DocumentStore, user_id: str, include_expired: bool = True,
                   now: Optional[datetime] = None) -> List[ViolationRecord]:
    """Raw history for a user, newest first."""
    records = [
        ViolationRecord(**doc)
        for doc in store.query(VIOLATIONS, where={"user_id": user_id}, order_by="created_at", descending=True)
    ]
    if not include_expired:
        now = now or datetime.now(timezone.utc)
        records = [r for r in records if not r.is_expired(now)]
    return records


def total_points(store: DocumentStore, user_id: str, now: Optional[datetime] = None) -> int:
    """Sum of points over the user's entries with expires_at > now."""
    now = now or datetime.now(timezone.utc)
    return sum(r.points for r in get_violations(store, user_id, include_expired=False, now=now))
