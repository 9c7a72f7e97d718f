"""
Interview catalog: stored question sets and their listings.
"""
import random
import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from pydantic import ValidationError

from .schemas import InterviewRecord
from ..config import INTERVIEWS_COLLECTION, INTERVIEW_COVERS, LATEST_INTERVIEWS_LIMIT
from ..infrastructure.data import JsonDocumentStore

logger = logging.getLogger("catalog")


def random_interview_cover(rng: Optional[random.Random] = None) -> str:
    """Pick a cover image path for a new interview."""
    return f"/covers{(rng or random).choice(INTERVIEW_COVERS)}"


def split_tech_stack(tech_stack: str) -> List[str]:
    return [tech.strip() for tech in tech_stack.split(",") if tech.strip()]


class InterviewRepository:
    """Interview documents in the ``interviews`` collection."""

    def __init__(self, store: JsonDocumentStore, collection: str = INTERVIEWS_COLLECTION,
                 rng: Optional[random.Random] = None):
        self.store = store
        self.collection = collection
        self.rng = rng

    def create_interview(self,
                         role: str,
                         interview_type: str,
                         level: str,
                         tech_stack: str,
                         questions: Sequence[str],
                         user_id: str,
                         now: Optional[str] = None) -> Optional[InterviewRecord]:
        """
        Store a finalized interview.

        Returns:
            The stored record with its id, or None if the write failed
        """
        record = InterviewRecord(
            role=role,
            type=interview_type,
            level=level,
            techstack=split_tech_stack(tech_stack),
            questions=list(questions),
            user_id=user_id,
            finalized=True,
            cover_image=random_interview_cover(self.rng),
            created_at=now or datetime.now(timezone.utc).isoformat(),
        )

        interview_id = self.store.add(self.collection, record.model_dump(exclude={"id"}))
        if interview_id is None:
            logger.error(f"Failed to store interview for user {user_id}")
            return None

        record.id = interview_id
        logger.info(f"Created interview {interview_id} ({role}, {len(record.questions)} questions)")
        return record

    def get_interview_by_id(self, interview_id: str) -> Optional[InterviewRecord]:
        if not interview_id:
            return None
        return self._to_record(self.store.get(self.collection, interview_id))

    def get_interviews_by_user_id(self, user_id: Optional[str]) -> List[InterviewRecord]:
        """Interviews created by one user, newest first."""
        if not user_id:
            return []
        return self._newest_first(self.store.where(self.collection, user_id=user_id))

    def get_latest_interviews(self,
                              exclude_user_id: Optional[str] = None,
                              limit: int = LATEST_INTERVIEWS_LIMIT) -> List[InterviewRecord]:
        """Finalized interviews, newest first, optionally leaving out one user's."""
        docs = self.store.where(self.collection, finalized=True)
        if exclude_user_id:
            docs = [d for d in docs if d.get("user_id") != exclude_user_id]
        return self._newest_first(docs)[:limit]

    def _newest_first(self, docs) -> List[InterviewRecord]:
        records = [self._to_record(d) for d in docs]
        records = [r for r in records if r is not None]
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records

    def _to_record(self, doc) -> Optional[InterviewRecord]:
        if doc is None:
            return None
        try:
            return InterviewRecord.model_validate(doc)
        except ValidationError as e:
            logger.error(f"Stored interview {doc.get('id')} is malformed: {e}")
            return None
