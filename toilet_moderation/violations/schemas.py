"""
Data models for the violation ledger.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ViolationType(str, Enum):
    SPAM_POSTING = "spam_posting"
    INAPPROPRIATE_CONTENT = "inappropriate_content"
    HARASSMENT = "harassment"
    FAKE_INFORMATION = "fake_information"
    MULTIPLE_ACCOUNTS = "multiple_accounts"
    VOTE_MANIPULATION = "vote_manipulation"
    COMMERCIAL_SPAM = "commercial_spam"


class ViolationSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ViolationRecord(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    type: ViolationType
    severity: ViolationSeverity
    description: str
    evidence: Optional[List[str]] = None
    report_id: Optional[str] = None
    auto_detected: bool = False
    points: int  # frozen at creation
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


class ViolationCreate(BaseModel):
    user_id: str
    type: ViolationType
    severity: ViolationSeverity
    description: str
    evidence: Optional[List[str]] = None
    report_id: Optional[str] = None


class ViolationHistory(BaseModel):
    user_id: str
    total_points: int
    violations: List[ViolationRecord]
