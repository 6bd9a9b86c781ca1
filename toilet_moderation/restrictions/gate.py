"""
gate.py – Read-only check action handlers run before a user-initiated write.
The gate only reports; enforcement is up to the caller.
"""

from datetime import datetime, timezone
from typing import Dict, FrozenSet, Mapping, Optional

from toilet_moderation.restrictions.schemas import GateResult, RestrictedAction, RestrictionType
from toilet_moderation.restrictions.utils import active_restrictions
from toilet_moderation.storage.store import DocumentStore

_BANS = frozenset({RestrictionType.TEMPORARY_BAN, RestrictionType.PERMANENT_BAN})

BLOCKING_TYPES: Mapping[RestrictedAction, FrozenSet[RestrictionType]] = {
    RestrictedAction.POST: _BANS | {RestrictionType.POST_RESTRICTION},
    RestrictedAction.COMMENT: _BANS | {RestrictionType.COMMENT_RESTRICTION},
    RestrictedAction.REVIEW: _BANS | {RestrictionType.REVIEW_RESTRICTION},
    RestrictedAction.VOTE: _BANS | {RestrictionType.VOTE_RESTRICTION},
}

# Lower rank wins
PRECEDENCE: Dict[RestrictionType, int] = {
    RestrictionType.PERMANENT_BAN: 0,
    RestrictionType.TEMPORARY_BAN: 1,
    RestrictionType.POST_RESTRICTION: 2,
    RestrictionType.COMMENT_RESTRICTION: 2,
    RestrictionType.REVIEW_RESTRICTION: 2,
    RestrictionType.VOTE_RESTRICTION: 2,
    RestrictionType.WARNING: 3,
}


def _sort_key(restriction):
    # Indefinite first, then the latest end date, then the newest start
    end = restriction.end_date.timestamp() if restriction.end_date else float("inf")
    return PRECEDENCE[restriction.type], -end, -restriction.start_date.timestamp()


def is_restricted(
    store: DocumentStore,
    user_id: str,
    action: RestrictedAction,
    now: Optional[datetime] = None,
) -> GateResult:
    now = now or datetime.now(timezone.utc)
    blocking = BLOCKING_TYPES[RestrictedAction(action)]
    matches = [r for r in active_restrictions(store, user_id, now) if r.type in blocking]
    if not matches:
        return GateResult(restricted=False)

    winner = min(matches, key=_sort_key)
    return GateResult(
        restricted=True,
        reason=winner.reason,
        end_date=winner.end_date,
        restriction_type=winner.type,
    )
