"""
Restriction status for users, the action gate, and moderator controls.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List
from toilet_moderation.authentication.security import get_current_user, require_staff
from toilet_moderation.dependencies import get_store
from toilet_moderation.errors import PersistenceFailure, RestrictionNotFound
from toilet_moderation.restrictions import gate, schemas, utils

router = APIRouter(prefix="/restrictions", tags=["Restrictions"])


def require_unrestricted(action: schemas.RestrictedAction):
    """
    Dependency for post/comment/review/vote handlers. Rejects the request with
    the restriction's reason and end date when the gate blocks the action.
    """
    def _check(user=Depends(get_current_user), store=Depends(get_store)):
        result = gate.is_restricted(store, user.user_id, action)
        if result.restricted:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "reason": result.reason,
                    "end_date": result.end_date.isoformat() if result.end_date else None,
                },
            )
        return user

    return _check


@router.get("/me", response_model=schemas.ModerationStatus)
def get_my_status(user=Depends(get_current_user), store=Depends(get_store)):
    """Active restrictions plus current violation points for the caller."""
    return utils.get_moderation_status(store, user.user_id)


@router.get("/check", response_model=schemas.GateResult)
def check_action(
    action: schemas.RestrictedAction = Query(...),
    user=Depends(get_current_user),
    store=Depends(get_store),
):
    return gate.is_restricted(store, user.user_id, action)


@router.get("/{user_id}", response_model=List[schemas.UserRestriction])
def get_user_restrictions(user_id: str, user=Depends(require_staff), store=Depends(get_store)):
    """Full restriction history for a user (moderator/admin only)."""
    return utils.get_restrictions(store, user_id)


@router.post("/", response_model=schemas.UserRestriction)
def impose_restriction(restriction: schemas.RestrictionCreate, user=Depends(require_staff), store=Depends(get_store)):
    """Moderator: impose a restriction by hand."""
    details = {**(restriction.details or {}), "issued_by": user.user_id}
    try:
        return utils.apply_restriction(
            store,
            restriction.user_id,
            restriction.type,
            restriction.reason,
            duration_days=restriction.duration_days,
            details=details,
        )
    except PersistenceFailure:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Could not apply the restriction.")


@router.patch("/{restriction_id}/lift", response_model=schemas.UserRestriction)
def lift_restriction(restriction_id: str, user=Depends(require_staff), store=Depends(get_store)):
    try:
        return utils.lift_restriction(store, restriction_id, moderator_id=user.user_id)
    except RestrictionNotFound:
        raise HTTPException(status_code=404, detail="Restriction not found.")
