"""
schemas.py – Restriction records, creation payloads and gate results.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class RestrictionType(str, Enum):
    WARNING = "warning"
    POST_RESTRICTION = "post_restriction"
    COMMENT_RESTRICTION = "comment_restriction"
    REVIEW_RESTRICTION = "review_restriction"
    VOTE_RESTRICTION = "vote_restriction"
    TEMPORARY_BAN = "temporary_ban"
    PERMANENT_BAN = "permanent_ban"


class RestrictionCreator(str, Enum):
    SYSTEM = "system"
    ADMIN = "admin"


class RestrictedAction(str, Enum):
    POST = "post"
    COMMENT = "comment"
    REVIEW = "review"
    VOTE = "vote"


class UserRestriction(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    type: RestrictionType
    reason: str
    start_date: datetime
    end_date: Optional[datetime] = None  # None = indefinite
    is_active: bool = True
    created_by: RestrictionCreator = RestrictionCreator.SYSTEM
    details: Optional[Dict[str, Any]] = None
    lifted_by: Optional[str] = None
    lifted_at: Optional[datetime] = None

    def has_ended(self, now: datetime) -> bool:
        return self.end_date is not None and self.end_date < now


class RestrictionCreate(BaseModel):
    user_id: str
    type: RestrictionType
    reason: str
    duration_days: Optional[float] = Field(None, gt=0)
    details: Optional[Dict[str, Any]] = None


class GateResult(BaseModel):
    restricted: bool
    reason: Optional[str] = None
    end_date: Optional[datetime] = None
    restriction_type: Optional[RestrictionType] = None


class ModerationStatus(BaseModel):
    user_id: str
    violation_points: int
    restrictions: List[UserRestriction]
