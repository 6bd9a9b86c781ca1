"""
utils.py – Restriction store: creation, lazy expiry and manual lifting.
Restrictions are never deleted; they only ever move to is_active=False.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from toilet_moderation.errors import RestrictionNotFound
from toilet_moderation.restrictions.schemas import (
    ModerationStatus,
    RestrictionCreator,
    RestrictionType,
    UserRestriction,
)
from toilet_moderation.storage.store import RESTRICTIONS, DocumentStore
from toilet_moderation.violations import utils as violation_utils

logger = logging.getLogger(__name__)


# ────────────────────────────────
# Core functions
# ────────────────────────────────
def create_restriction(
    store: DocumentStore,
    user_id: str,
    type: RestrictionType,
    reason: str,
    duration: Optional[timedelta] = None,
    created_by: RestrictionCreator = RestrictionCreator.SYSTEM,
    details: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> UserRestriction:
    """Persist a new active restriction starting now; no duration means indefinite."""
    now = now or datetime.now(timezone.utc)
    restriction = UserRestriction(
        user_id=user_id,
        type=type,
        reason=reason,
        start_date=now,
        end_date=now + duration if duration else None,
        is_active=True,
        created_by=created_by,
        details=details,
    )
    store.insert(RESTRICTIONS, restriction.model_dump())
    logger.info(
        "Applied %s to user %s until %s (by %s)",
        restriction.type.value, user_id,
        restriction.end_date.isoformat() if restriction.end_date else "further notice",
        restriction.created_by.value,
    )
    return restriction


def get_restriction(store: DocumentStore, restriction_id: str) -> Optional[UserRestriction]:
    doc = store.get(RESTRICTIONS, restriction_id)
    return UserRestriction(**doc) if doc else None


def get_restrictions(store: DocumentStore, user_id: str) -> List[UserRestriction]:
    """Full restriction history for a user, newest first."""
    docs = store.query(RESTRICTIONS, where={"user_id": user_id}, order_by="start_date", descending=True)
    return [UserRestriction(**d) for d in docs]


def deactivate_restriction(store: DocumentStore, restriction_id: str, **audit) -> bool:
    """Mark a restriction inactive. Returns False if it was already inactive."""
    current = get_restriction(store, restriction_id)
    if current is None:
        raise RestrictionNotFound(restriction_id)
    if not current.is_active:
        return False
    store.update(RESTRICTIONS, restriction_id, {"is_active": False, **audit})
    return True


def active_restrictions(store: DocumentStore, user_id: str, now: Optional[datetime] = None) -> List[UserRestriction]:
    """Return active restrictions and deactivate the ones whose end_date has passed."""
    now = now or datetime.now(timezone.utc)
    docs = store.query(
        RESTRICTIONS,
        where={"user_id": user_id, "is_active": True},
        order_by="start_date",
        descending=True,
    )
    active = []
    for restriction in (UserRestriction(**d) for d in docs):
        if restriction.has_ended(now):
            store.update(RESTRICTIONS, restriction.id, {"is_active": False})
            logger.debug("Restriction %s for user %s expired", restriction.id, user_id)
            continue
        active.append(restriction)
    return active


# ────────────────────────────────
# Moderator actions
# ────────────────────────────────
def apply_restriction(
    store: DocumentStore,
    user_id: str,
    type: RestrictionType,
    reason: str,
    duration_days: Optional[float] = None,
    created_by: RestrictionCreator = RestrictionCreator.ADMIN,
    details: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> UserRestriction:
    duration = timedelta(days=duration_days) if duration_days else None
    return create_restriction(store, user_id, type, reason, duration, created_by, details, now)


def lift_restriction(store: DocumentStore, restriction_id: str, moderator_id: str,
                     now: Optional[datetime] = None) -> UserRestriction:
    """Manually lift a restriction, recording who lifted it and when."""
    now = now or datetime.now(timezone.utc)
    if deactivate_restriction(store, restriction_id, lifted_by=moderator_id, lifted_at=now):
        logger.info("Restriction %s lifted by %s", restriction_id, moderator_id)
    return get_restriction(store, restriction_id)


def get_moderation_status(store: DocumentStore, user_id: str, now: Optional[datetime] = None) -> ModerationStatus:
    now = now or datetime.now(timezone.utc)
    return ModerationStatus(
        user_id=user_id,
        violation_points=violation_utils.total_points(store, user_id, now),
        restrictions=active_restrictions(store, user_id, now),
    )
