from prepwise.config import FEEDBACK_CATEGORIES
from prepwise.interview.models import FeedbackRequest, Speaker, TranscriptLine
from prepwise.interview.schemas import FeedbackScores
from prepwise.interview.testing import FeedbackRecordCheck, sample_feedback_scores

TRANSCRIPT = [TranscriptLine(Speaker.USER, "I rebuilt our billing pipeline.")]


def _request(feedback_id=None, interview_id="iv_1", user_id="user_1"):
    return FeedbackRequest(interview_id=interview_id, user_id=user_id,
                           transcript=TRANSCRIPT, feedback_id=feedback_id)


def _scores(total):
    return FeedbackScores.model_validate(sample_feedback_scores(total))


def test_upsert_without_id_allocates_one(feedback_repo):
    result = feedback_repo.upsert_feedback(_request(), _scores(70), now="2026-01-01T00:00:00+00:00")

    assert result.success is True
    assert result.feedback_id
    stored = feedback_repo.get_feedback_by_id(result.feedback_id)
    assert stored.total_score == 70
    assert stored.created_at == "2026-01-01T00:00:00+00:00"
    assert stored.updated_at is None
    FeedbackRecordCheck.assert_valid_record(stored)


def test_double_upsert_with_same_id_keeps_one_record(feedback_repo, store):
    first = feedback_repo.upsert_feedback(_request(), _scores(60), now="2026-01-01T00:00:00+00:00")
    second = feedback_repo.upsert_feedback(_request(first.feedback_id), _scores(85),
                                           now="2026-01-02T00:00:00+00:00")

    assert second.feedback_id == first.feedback_id
    docs = store.list("feedback")
    assert len(docs) == 1
    stored = feedback_repo.get_feedback_by_interview_id("iv_1", "user_1")
    assert stored.total_score == 85
    assert stored.created_at == "2026-01-01T00:00:00+00:00"
    assert stored.updated_at == "2026-01-02T00:00:00+00:00"


def test_upsert_with_unknown_id_creates_that_document(feedback_repo):
    result = feedback_repo.upsert_feedback(_request("fb_fixed"), _scores(50), now="2026-01-01T00:00:00+00:00")

    assert result.feedback_id == "fb_fixed"
    assert feedback_repo.get_feedback_by_id("fb_fixed").updated_at is None


def test_store_failure_is_reported_as_unsuccessful(feedback_repo):
    result = feedback_repo.upsert_feedback(_request("bad/id"), _scores(50))

    assert result.success is False
    assert result.feedback_id is None


def test_lookup_is_scoped_to_interview_and_user(feedback_repo):
    feedback_repo.upsert_feedback(_request(user_id="user_1"), _scores(40))
    feedback_repo.upsert_feedback(_request(user_id="user_2"), _scores(90))

    assert feedback_repo.get_feedback_by_interview_id("iv_1", "user_1").total_score == 40
    assert feedback_repo.get_feedback_by_interview_id("iv_1", "user_2").total_score == 90
    assert feedback_repo.get_feedback_by_interview_id("iv_2", "user_1") is None
    assert feedback_repo.get_feedback_by_interview_id("", "user_1") is None


def test_feedbacks_by_user_newest_first(feedback_repo):
    feedback_repo.upsert_feedback(_request(interview_id="iv_1"), _scores(40), now="2026-01-01T00:00:00+00:00")
    feedback_repo.upsert_feedback(_request(interview_id="iv_2"), _scores(50), now="2026-02-01T00:00:00+00:00")
    feedback_repo.upsert_feedback(_request(interview_id="iv_3", user_id="user_2"), _scores(60))

    records = feedback_repo.get_feedbacks_by_user_id("user_1")

    assert [r.interview_id for r in records] == ["iv_2", "iv_1"]
    assert feedback_repo.get_feedbacks_by_user_id("") == []


def test_stored_categories_keep_canonical_order(feedback_repo):
    payload = sample_feedback_scores(70)
    payload["categoryScores"].reverse()

    result = feedback_repo.upsert_feedback(_request(), FeedbackScores.model_validate(payload))

    stored = feedback_repo.get_feedback_by_id(result.feedback_id)
    assert [c.name for c in stored.category_scores] == list(FEEDBACK_CATEGORIES)
    assert all(0 <= c.score <= 100 for c in stored.category_scores)
