"""
Handles report submission, retrieval, and moderation actions.
Routes are protected by role (members/critics file reports, staff review them).
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
from toilet_moderation.reports import utils, schemas
from toilet_moderation.authentication import schemas as auth_schemas
from toilet_moderation.authentication.security import get_current_user, require_staff
from toilet_moderation.dependencies import get_resolver, get_store
from toilet_moderation.errors import (
    DuplicateReport,
    InvalidStatusTransition,
    PersistenceFailure,
    ReportNotFound,
)

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("/", response_model=schemas.Report)
def submit_report(
    report: schemas.ReportCreate,
    user: auth_schemas.CurrentUser = Depends(get_current_user),
    store=Depends(get_store),
    resolver=Depends(get_resolver),
):
    """Submit a new report (any signed-in, non-guest user)."""
    if user.role not in auth_schemas.REPORTER_ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized.")
    try:
        return utils.submit_report(
            store,
            resolver,
            reporter_id=user.user_id,
            target_type=report.target_type,
            target_id=report.target_id,
            reason=report.reason,
            description=report.description,
            evidence=report.evidence,
        )
    except DuplicateReport as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except PersistenceFailure:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Could not submit the report.")


@router.get("/", response_model=List[schemas.Report])
def get_all_reports(
    status_filter: Optional[schemas.ReportStatus] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    user=Depends(require_staff),
    store=Depends(get_store),
):
    """Retrieve reports, newest first (moderator/admin only)."""
    return utils.get_reports(store, status=status_filter, limit=limit)


@router.get("/me", response_model=List[schemas.Report])
def get_my_reports(user=Depends(get_current_user), store=Depends(get_store)):
    """The caller's own report history."""
    return utils.get_user_reports(store, user.user_id)


@router.get("/summary", response_model=schemas.ReportSummary)
def get_summary(user=Depends(require_staff), store=Depends(get_store)):
    return utils.get_summary(store)


@router.get("/{report_id}", response_model=schemas.Report)
def get_report(report_id: str, user=Depends(require_staff), store=Depends(get_store)):
    """Retrieve a specific report (moderator/admin only)."""
    report = utils.get_report(store, report_id)
    if not report:
        raise HTTPException(status_code=404, detail="Report not found.")
    return report


@router.patch("/{report_id}", response_model=schemas.Report)
def update_report(
    report_id: str,
    update: schemas.ReportUpdate,
    user=Depends(require_staff),
    store=Depends(get_store),
):
    """Update a report’s status (moderator/admin only)."""
    try:
        return utils.update_report_status(
            store, report_id, update.status, reviewer_id=user.user_id, resolution=update.resolution
        )
    except ReportNotFound:
        raise HTTPException(status_code=404, detail="Report not found.")
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
