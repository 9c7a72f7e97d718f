"""
Feedback persistence.
Upserts validated scoring results and answers feedback lookups.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ValidationError

from .models import FeedbackRequest
from .schemas import FeedbackRecord, FeedbackScores
from ..config import FEEDBACK_COLLECTION
from ..infrastructure.data import JsonDocumentStore

logger = logging.getLogger("feedback_gateway")


@dataclass
class UpsertResult:
    """Outcome of one feedback write."""
    success: bool
    feedback_id: Optional[str] = None
    record: Optional[FeedbackRecord] = None


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FeedbackRepository:
    """
    Feedback documents in the ``feedback`` collection.

    One record per (interview_id, user_id) is kept by overwriting the
    document named by ``feedback_id`` when the caller has one.
    """

    def __init__(self, store: JsonDocumentStore, collection: str = FEEDBACK_COLLECTION):
        self.store = store
        self.collection = collection

    def upsert_feedback(self,
                        request: FeedbackRequest,
                        scores: FeedbackScores,
                        now: Optional[str] = None) -> UpsertResult:
        """
        Create or overwrite the feedback document for one interview.

        Args:
            request: Interview, user and optional existing feedback id
            scores: Validated scoring output
            now: ISO timestamp override

        Returns:
            UpsertResult; ``success`` is False if the store rejected the write
        """
        timestamp = now or _utc_now()
        feedback_id = request.feedback_id or self.store.new_id()

        created_at = timestamp
        updated_at = None
        if request.feedback_id:
            existing = self.store.get(self.collection, request.feedback_id)
            if existing and existing.get("created_at"):
                created_at = existing["created_at"]
                updated_at = timestamp

        record = FeedbackRecord(
            id=feedback_id,
            interview_id=request.interview_id,
            user_id=request.user_id,
            total_score=scores.total_score,
            category_scores=scores.category_scores,
            strengths=scores.strengths,
            areas_for_improvement=scores.areas_for_improvement,
            final_assessment=scores.final_assessment,
            created_at=created_at,
            updated_at=updated_at,
        )

        if not self.store.set(self.collection, feedback_id, record.model_dump(exclude={"id"})):
            logger.error(f"Failed to store feedback for interview {request.interview_id}")
            return UpsertResult(success=False)

        action = "Overwrote" if updated_at else "Created"
        logger.info(f"{action} feedback {feedback_id} for interview {request.interview_id} "
                    f"(total score {record.total_score})")
        return UpsertResult(success=True, feedback_id=feedback_id, record=record)

    def get_feedback_by_id(self, feedback_id: str) -> Optional[FeedbackRecord]:
        if not feedback_id:
            return None
        return self._to_record(self.store.get(self.collection, feedback_id))

    def get_feedback_by_interview_id(self, interview_id: str, user_id: str) -> Optional[FeedbackRecord]:
        """Feedback of one user for one interview, or None."""
        if not interview_id or not user_id:
            return None
        docs = self.store.where(self.collection, interview_id=interview_id, user_id=user_id)
        if not docs:
            return None
        if len(docs) > 1:
            logger.warning(f"{len(docs)} feedback records for interview {interview_id}, using the newest")
        docs.sort(key=lambda d: d.get("updated_at") or d.get("created_at") or "", reverse=True)
        return self._to_record(docs[0])

    def get_feedbacks_by_user_id(self, user_id: str) -> List[FeedbackRecord]:
        """All feedback of one user, newest first."""
        if not user_id:
            return []
        records = [self._to_record(d) for d in self.store.where(self.collection, user_id=user_id)]
        records = [r for r in records if r is not None]
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records

    def _to_record(self, doc) -> Optional[FeedbackRecord]:
        if doc is None:
            return None
        try:
            return FeedbackRecord.model_validate(doc)
        except ValidationError as e:
            logger.error(f"Stored feedback {doc.get('id')} is malformed: {e}")
            return None
