"""
Service classes for the interview system.
"""
import logging
from typing import Dict, Any, List

from .catalog import InterviewRepository
from .feedback_gateway import FeedbackRepository, UpsertResult
from .models import FeedbackRequest
from .prompts import PromptFormatter, build_feedback_prompt, build_question_prompt
from .schemas import FeedbackScores, parse_question_list
from ..errors import FeedbackGenerationError, ParseError, PersistenceError
from ..infrastructure.llm import LLMClient, LLMRequestError, SchemaValidationError

logger = logging.getLogger("services")

REQUIRED_GENERATION_FIELDS = ("type", "role", "level", "techstack", "amount", "userid")


class QuestionGenerationService:
    """Generates interview question sets and stores them in the catalog."""

    def __init__(self, llm_client: LLMClient, interviews: InterviewRepository):
        self.llm_client = llm_client
        self.interviews = interviews

    def generate_questions(self,
                           role: str,
                           level: str,
                           tech_stack: str,
                           question_type: str,
                           amount: int) -> List[str]:
        """
        Ask the LLM for a list of questions.

        Raises:
            LLMRequestError: If the model endpoint fails
            ParseError: If the response is not a JSON array of strings
        """
        prompt = build_question_prompt(role, level, tech_stack, question_type, amount)
        logger.debug(f"Question prompt: {prompt}")
        raw = self.llm_client.generate_text(prompt)
        questions = parse_question_list(raw)
        if len(questions) != amount:
            logger.warning(f"Asked for {amount} questions, model returned {len(questions)}")
        return questions

    def generate_interview(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Generate and store an interview from an intake payload.

        Args:
            payload: Dict with type, role, level, techstack, amount and userid

        Returns:
            ``{"success": True, "interview_id", "questions_count"}`` or
            ``{"success": False, "error"}``
        """
        missing = [name for name in REQUIRED_GENERATION_FIELDS if not payload.get(name)]
        if missing:
            logger.warning(f"Interview generation missing fields: {missing}")
            return {"success": False, "error": "Missing required fields"}

        try:
            amount = int(payload["amount"])
            if amount < 1:
                raise ValueError("amount must be at least 1")
        except (TypeError, ValueError) as e:
            return {"success": False, "error": f"Invalid amount: {e}"}

        try:
            questions = self.generate_questions(
                role=payload["role"],
                level=payload["level"],
                tech_stack=payload["techstack"],
                question_type=payload["type"],
                amount=amount,
            )
        except (LLMRequestError, ParseError) as e:
            logger.error(f"Interview generation error: {e}")
            return {"success": False, "error": str(e)}

        record = self.interviews.create_interview(
            role=payload["role"],
            interview_type=payload["type"],
            level=payload["level"],
            tech_stack=payload["techstack"],
            questions=questions,
            user_id=payload["userid"],
        )
        if record is None:
            return {"success": False, "error": "Failed to store interview"}

        return {
            "success": True,
            "interview_id": record.id,
            "questions_count": len(questions),
        }


class FeedbackService:
    """Turns a finished transcript into a stored feedback record."""

    def __init__(self, llm_client: LLMClient, feedback: FeedbackRepository):
        self.llm_client = llm_client
        self.feedback = feedback

    def score_transcript(self, request: FeedbackRequest) -> FeedbackScores:
        """
        Run the structured scoring call.

        Raises:
            FeedbackGenerationError: If the call fails or the output does not match the schema
        """
        transcript_text = PromptFormatter.format_transcript(request.transcript)
        feedback_prompt = build_feedback_prompt(transcript_text)

        try:
            return self.llm_client.generate_object(
                FeedbackScores, feedback_prompt.prompt, system=feedback_prompt.system
            )
        except (LLMRequestError, SchemaValidationError) as e:
            raise FeedbackGenerationError(f"Feedback scoring failed: {e}") from e

    def create_feedback(self, request: FeedbackRequest) -> UpsertResult:
        """
        Score a transcript and persist the result.

        Raises:
            FeedbackGenerationError: If scoring fails; nothing is written
            PersistenceError: If the store rejects the write
        """
        if not request.transcript:
            raise FeedbackGenerationError("Cannot score an empty transcript")

        logger.info(f"Scoring {len(request.transcript)} transcript lines for interview {request.interview_id}")
        scores = self.score_transcript(request)

        result = self.feedback.upsert_feedback(request, scores)
        if not result.success:
            raise PersistenceError(f"Could not save feedback for interview {request.interview_id}")
        return result
