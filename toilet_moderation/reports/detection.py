"""
detection.py – Turns an accumulation of reports against one target into an
automatic violation for the target's owner.
"""

import logging
from datetime import datetime, timezone
from typing import Mapping, Optional, Tuple

from toilet_moderation.errors import PersistenceFailure, UnresolvableTarget
from toilet_moderation.reports.schemas import ReportReason, ReportStatus, ReportTargetType
from toilet_moderation.restrictions import policy
from toilet_moderation.storage.store import REPORTS, VIOLATIONS, DocumentStore
from toilet_moderation.violations import utils as violation_utils
from toilet_moderation.violations.schemas import ViolationRecord, ViolationSeverity, ViolationType

logger = logging.getLogger(__name__)

AUTO_DETECTION_THRESHOLD = 3

REASON_CLASSIFICATION: Mapping[ReportReason, Tuple[ViolationType, ViolationSeverity]] = {
    ReportReason.spam: (ViolationType.SPAM_POSTING, ViolationSeverity.MEDIUM),
    ReportReason.commercial_spam: (ViolationType.SPAM_POSTING, ViolationSeverity.MEDIUM),
    ReportReason.inappropriate_content: (ViolationType.INAPPROPRIATE_CONTENT, ViolationSeverity.HIGH),
    ReportReason.harassment: (ViolationType.HARASSMENT, ViolationSeverity.HIGH),
    ReportReason.hate_speech: (ViolationType.HARASSMENT, ViolationSeverity.HIGH),
    ReportReason.fake_information: (ViolationType.FAKE_INFORMATION, ViolationSeverity.MEDIUM),
}
DEFAULT_CLASSIFICATION = (ViolationType.INAPPROPRIATE_CONTENT, ViolationSeverity.LOW)


def classify(reason: ReportReason) -> Tuple[ViolationType, ViolationSeverity]:
    return REASON_CLASSIFICATION.get(ReportReason(reason), DEFAULT_CLASSIFICATION)


def count_reports_for_target(store: DocumentStore, target_type: ReportTargetType, target_id: str) -> int:
    """Number of reports against the target that were not dismissed."""
    docs = store.query(REPORTS, where={"target_type": target_type, "target_id": target_id})
    return sum(1 for d in docs if d.get("status") != ReportStatus.dismissed)


def evaluate(
    store: DocumentStore,
    resolver,
    target_type: ReportTargetType,
    target_id: str,
    reason: ReportReason,
    report_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[ViolationRecord]:
    """
    Record an automatic violation against the target's owner once the target
    has AUTO_DETECTION_THRESHOLD or more non-dismissed reports, then reconcile
    the owner's restrictions.

    Every evaluation at or above the threshold adds one violation, except that
    an evaluation for a report that already produced one is a no-op. Owner
    lookup, store and any other failures are logged and swallowed; returns
    None then, so a stored report is never undone by this step.
    """
    now = now or datetime.now(timezone.utc)
    target_type = ReportTargetType(target_type)
    try:
        with store.lock("detection", target_type.value, target_id):
            count = count_reports_for_target(store, target_type, target_id)
            if count < AUTO_DETECTION_THRESHOLD:
                return None

            if report_id and store.query(VIOLATIONS, where={"report_id": report_id, "auto_detected": True}, limit=1):
                logger.debug("Report %s already produced a violation", report_id)
                return None

            owner_id = resolver.resolve(target_type, target_id)
            if not owner_id:
                raise UnresolvableTarget(target_type.value, target_id)

            violation_type, severity = classify(reason)
            record = violation_utils.add_violation(
                store,
                owner_id,
                violation_type,
                severity,
                f"Automatically detected from {count} reports: {ReportReason(reason).value}",
                report_id=report_id,
                auto_detected=True,
                now=now,
            )
    except UnresolvableTarget as e:
        logger.warning("Skipping auto-detection: %s", e)
        return None
    except PersistenceFailure:
        logger.exception("Auto-detection failed for %s %s", target_type.value, target_id)
        return None
    except Exception:
        logger.exception("Unexpected error during auto-detection for %s %s", target_type.value, target_id)
        return None

    try:
        policy.reconcile(store, owner_id, now)
    except Exception:
        logger.exception("Restriction reconciliation failed for user %s", owner_id)
    return record
