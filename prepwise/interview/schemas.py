"""
Structured schemas for LLM output and stored documents.
"""
import json
import re
from typing import Annotated, Optional, List, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, TypeAdapter, ValidationError, field_validator

from ..errors import ParseError
from ..config import FEEDBACK_CATEGORIES


CategoryName = Literal[
    "Communication Skills",
    "Technical Knowledge",
    "Problem-Solving",
    "Cultural & Role Fit",
    "Confidence & Clarity",
]

Score = Annotated[int, Field(ge=0, le=100)]
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

_QUESTION_LIST = TypeAdapter(List[NonEmptyStr])
_CODE_FENCE = re.compile(r"```(?:json)?\n?")


class CategoryScore(BaseModel):
    """Score and comment for one fixed category."""
    name: CategoryName
    score: Score
    comment: str


class FeedbackScores(BaseModel):
    """Schema the scoring call must satisfy.

    Field aliases are the camelCase keys the model is asked to produce.
    """
    model_config = ConfigDict(populate_by_name=True)

    total_score: Score = Field(alias="totalScore")
    category_scores: List[CategoryScore] = Field(alias="categoryScores")
    strengths: List[str]
    areas_for_improvement: List[str] = Field(alias="areasForImprovement")
    final_assessment: str = Field(alias="finalAssessment")

    @field_validator("category_scores")
    @classmethod
    def _exactly_fixed_categories(cls, value: List[CategoryScore]) -> List[CategoryScore]:
        names = [c.name for c in value]
        if sorted(names) != sorted(FEEDBACK_CATEGORIES):
            raise ValueError(f"categoryScores must cover exactly {list(FEEDBACK_CATEGORIES)}, got {names}")
        # Stored in the canonical category order
        return sorted(value, key=lambda c: FEEDBACK_CATEGORIES.index(c.name))


class FeedbackRecord(BaseModel):
    """Persisted scoring output."""
    id: Optional[str] = None
    interview_id: str
    user_id: str
    total_score: Score
    category_scores: List[CategoryScore]
    strengths: List[str]
    areas_for_improvement: List[str]
    final_assessment: str
    created_at: str
    updated_at: Optional[str] = None


class InterviewRecord(BaseModel):
    """Stored interview question set."""
    id: Optional[str] = None
    role: str
    type: str
    level: str
    techstack: List[str]
    questions: List[str]
    user_id: str
    finalized: bool = True
    cover_image: str = ""
    created_at: str


class User(BaseModel):
    """Authenticated user as seen by the session core."""
    id: str
    name: str
    email: Optional[str] = None


def strip_code_fences(raw_response: str) -> str:
    """Remove ```json / ``` wrappers a model sometimes adds around its answer."""
    return _CODE_FENCE.sub("", raw_response.strip()).strip()


def parse_question_list(raw_response: str) -> List[str]:
    """
    Parse a question-generation response into a list of questions.

    Args:
        raw_response: Raw text returned by the LLM

    Returns:
        List of non-empty question strings

    Raises:
        ParseError: If the cleaned response is not a JSON array of strings
    """
    cleaned = strip_code_fences(raw_response)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ParseError(f"Question list is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ParseError("Generated questions are not in array format")

    try:
        questions = _QUESTION_LIST.validate_python(data)
    except ValidationError as e:
        raise ParseError(f"Question list must contain only non-empty strings: {e}") from e

    if not questions:
        raise ParseError("Generated question list is empty")
    return questions
