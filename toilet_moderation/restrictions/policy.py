"""
policy.py – Maps a user's unexpired violation points to a restriction tier and
makes sure a restriction of that tier's type is active.

Tiers are additive across restriction types: crossing into a tier whose type
differs from the user's current restriction adds a second restriction. Nothing
here ever lifts or shortens a restriction.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from toilet_moderation.errors import PersistenceFailure
from toilet_moderation.restrictions import utils
from toilet_moderation.restrictions.schemas import RestrictionCreator, RestrictionType, UserRestriction
from toilet_moderation.storage.store import DocumentStore
from toilet_moderation.violations.utils import total_points

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RestrictionTier:
    threshold: int
    type: RestrictionType
    duration: Optional[timedelta]
    message: str


# Highest threshold first
RESTRICTION_TIERS: Tuple[RestrictionTier, ...] = (
    RestrictionTier(20, RestrictionType.PERMANENT_BAN, None,
                    "Your account has been permanently suspended."),
    RestrictionTier(12, RestrictionType.TEMPORARY_BAN, timedelta(days=7),
                    "Your account has been suspended for 7 days."),
    RestrictionTier(8, RestrictionType.POST_RESTRICTION, timedelta(days=3),
                    "Posting has been restricted for 3 days."),
    RestrictionTier(5, RestrictionType.POST_RESTRICTION, timedelta(days=1),
                    "Posting has been restricted for 1 day."),
    RestrictionTier(3, RestrictionType.WARNING, None,
                    "Minor violations were detected. Please follow the community guidelines."),
)


def select_tier(points: int) -> Optional[RestrictionTier]:
    """First (highest) tier whose threshold the points meet."""
    for tier in RESTRICTION_TIERS:
        if points >= tier.threshold:
            return tier
    return None


def reconcile(store: DocumentStore, user_id: str, now: Optional[datetime] = None) -> Optional[UserRestriction]:
    """
    Apply the tier the user's current points call for.

    Returns the restriction created, or None when no tier is met, a matching
    unexpired restriction is already active, or anything failed along the way (logged).
    """
    now = now or datetime.now(timezone.utc)
    try:
        with store.lock("restrictions", user_id):
            points = total_points(store, user_id, now)
            tier = select_tier(points)
            if tier is None:
                return None

            active = utils.active_restrictions(store, user_id, now)
            if any(r.type == tier.type for r in active):
                logger.debug("User %s already has an active %s", user_id, tier.type.value)
                return None

            return utils.create_restriction(
                store,
                user_id,
                tier.type,
                tier.message,
                duration=tier.duration,
                created_by=RestrictionCreator.SYSTEM,
                details={"violation_points": points, "trigger_threshold": tier.threshold},
                now=now,
            )
    except PersistenceFailure:
        logger.exception("Failed to reconcile restrictions for user %s", user_id)
        return None
    except Exception:
        logger.exception("Unexpected error reconciling restrictions for user %s", user_id)
        return None
