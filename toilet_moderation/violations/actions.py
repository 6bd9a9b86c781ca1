from datetime import datetime
from typing import Optional

from toilet_moderation.restrictions import policy
from toilet_moderation.storage.store import DocumentStore
from toilet_moderation.violations import utils
from toilet_moderation.violations.schemas import ViolationCreate, ViolationRecord


def record_violation(store: DocumentStore, violation: ViolationCreate,
                     now: Optional[datetime] = None) -> ViolationRecord:
    """Moderator-issued violation; restrictions are reconciled right after."""
    record = utils.add_violation(
        store,
        violation.user_id,
        violation.type,
        violation.severity,
        violation.description,
        evidence=violation.evidence,
        report_id=violation.report_id,
        auto_detected=False,
        now=now,
    )
    policy.reconcile(store, record.user_id, record.created_at)
    return record
