"""
errors.py – Exception taxonomy shared by the moderation modules.
Routers translate these into HTTP responses; background paths log them.
"""

from typing import Optional


class ModerationError(Exception):
    """Base class for every error raised by the moderation core."""


class DuplicateReport(ModerationError):
    def __init__(self, reporter_id: str, target_type: str, target_id: str):
        self.reporter_id = reporter_id
        self.target_type = target_type
        self.target_id = target_id
        super().__init__(f"This {target_type} has already been reported and is awaiting review.")


class UnresolvableTarget(ModerationError):
    def __init__(self, target_type: str, target_id: str):
        self.target_type = target_type
        self.target_id = target_id
        super().__init__(f"No owner found for {target_type} {target_id}.")


class PersistenceFailure(ModerationError):
    """A store operation failed (I/O error, corrupt data, unknown backend)."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class ReportNotFound(ModerationError):
    def __init__(self, report_id: str):
        self.report_id = report_id
        super().__init__(f"Report {report_id} not found.")


class RestrictionNotFound(ModerationError):
    def __init__(self, restriction_id: str):
        self.restriction_id = restriction_id
        super().__init__(f"Restriction {restriction_id} not found.")


class InvalidStatusTransition(ModerationError):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move a report from '{current}' to '{requested}'.")
