from fastapi import APIRouter, Depends, HTTPException, status
from toilet_moderation.authentication.security import get_current_user, require_staff
from toilet_moderation.dependencies import get_store
from toilet_moderation.errors import PersistenceFailure
from toilet_moderation.violations import actions, schemas, utils

router = APIRouter(prefix="/violations", tags=["Violations"])


def _history(store, user_id: str) -> schemas.ViolationHistory:
    return schemas.ViolationHistory(
        user_id=user_id,
        total_points=utils.total_points(store, user_id),
        violations=utils.get_violations(store, user_id),
    )


@router.get("/me", response_model=schemas.ViolationHistory)
def get_my_violations(user=Depends(get_current_user), store=Depends(get_store)):
    """Current point total plus full history, expired entries included."""
    return _history(store, user.user_id)


@router.get("/{user_id}", response_model=schemas.ViolationHistory)
def get_user_violations(user_id: str, user=Depends(require_staff), store=Depends(get_store)):
    return _history(store, user_id)


@router.post("/", response_model=schemas.ViolationRecord)
def issue_violation(violation: schemas.ViolationCreate, user=Depends(require_staff), store=Depends(get_store)):
    """Moderator: record a violation and apply any restriction it triggers."""
    try:
        return actions.record_violation(store, violation)
    except PersistenceFailure:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Could not record the violation.")
