"""
Identity dependencies. Authentication happens upstream; the identity provider
forwards the verified user id and role in request headers, trusted as given.
"""

from fastapi import Depends, Header, HTTPException, status

from toilet_moderation.authentication import schemas


def get_current_user(
    x_user_id: str = Header(..., description="Verified user id from the identity provider"),
    x_user_role: schemas.UserRole = Header(schemas.UserRole.MEMBER),
) -> schemas.CurrentUser:
    if not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user identity.")
    return schemas.CurrentUser(user_id=x_user_id, role=x_user_role)


def require_staff(current_user: schemas.CurrentUser = Depends(get_current_user)) -> schemas.CurrentUser:
    """Moderator or administrator only."""
    if not current_user.is_staff:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized.")
    return current_user
