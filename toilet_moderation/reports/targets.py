"""
Looks up the user who owns a reported target.
"""

from typing import Optional

from toilet_moderation.reports.schemas import ReportTargetType
from toilet_moderation.storage.store import COMMENTS, REVIEWS, TOILETS, DocumentStore

CONTENT_COLLECTIONS = {
    ReportTargetType.toilet: TOILETS,
    ReportTargetType.review: REVIEWS,
    ReportTargetType.comment: COMMENTS,
}


class StoreOwnerResolver:
    """Reads the author field of the target document from its content collection."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def resolve(self, target_type: ReportTargetType, target_id: str) -> Optional[str]:
        target_type = ReportTargetType(target_type)
        if target_type == ReportTargetType.user:
            return target_id

        doc = self.store.get(CONTENT_COLLECTIONS[target_type], target_id)
        if not doc:
            return None
        return doc.get("user_id") or doc.get("author_id")
