"""
Defines the data models and enums for report management.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ReportTargetType(str, Enum):
    toilet = "toilet"
    review = "review"
    user = "user"
    comment = "comment"


class ReportReason(str, Enum):
    inappropriate_content = "inappropriate_content"
    spam = "spam"
    harassment = "harassment"
    fake_information = "fake_information"
    copyright_violation = "copyright_violation"
    privacy_violation = "privacy_violation"
    commercial_spam = "commercial_spam"
    hate_speech = "hate_speech"
    other = "other"


class ReportStatus(str, Enum):
    pending = "pending"
    under_review = "under_review"
    resolved = "resolved"
    dismissed = "dismissed"
    auto_resolved = "auto_resolved"


OPEN_STATUSES = (ReportStatus.pending, ReportStatus.under_review)
TERMINAL_STATUSES = (ReportStatus.resolved, ReportStatus.dismissed, ReportStatus.auto_resolved)


class Report(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    reporter_id: str
    target_type: ReportTargetType
    target_id: str
    reason: ReportReason
    description: Optional[str] = None
    evidence: Optional[List[str]] = None
    status: ReportStatus = ReportStatus.pending
    created_at: datetime
    reviewed_at: Optional[datetime] = None
    reviewer_id: Optional[str] = None
    resolution: Optional[str] = None


class ReportCreate(BaseModel):
    target_type: ReportTargetType
    target_id: str
    reason: ReportReason
    description: Optional[str] = Field(None, max_length=1000)
    evidence: Optional[List[str]] = None


class ReportUpdate(BaseModel):
    status: ReportStatus
    resolution: Optional[str] = None


class ReportSummary(BaseModel):
    total_reports: int
    pending: int
    under_review: int
    resolved: int
    dismissed: int
    auto_resolved: int
