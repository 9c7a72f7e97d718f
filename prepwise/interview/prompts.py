"""
Interview prompt templates and generation.

This module contains all the prompt templates used by the session core,
keeping them separate from the business logic for easier maintenance and editing.
"""
import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Sequence, Union

from .models import TranscriptLine
from ..config import FEEDBACK_CATEGORIES, InterviewerPersona


@dataclass(frozen=True)
class FeedbackPrompt:
    """System instruction and user prompt for one scoring call."""
    system: str
    prompt: str


class InterviewPrompts:
    """Collection of all interview-related prompts."""

    @staticmethod
    def question_generation(role: str, level: str, tech_stack: str,
                            question_type: str, amount: int) -> str:
        """Prompt asking for a bare JSON array of voice-friendly questions."""
        return f"""
Generate {amount} interview questions for a {role} position.

Experience Level: {level}
Tech Stack: {tech_stack}
Question Type Focus: {question_type}

Requirements:
- Return ONLY a JSON array of questions, no markdown formatting
- No code blocks, no backticks, no extra text
- No special characters (/, *, etc.) that break voice assistants
- Questions should be clear and conversational
- Format: ["Question 1", "Question 2", "Question 3"]

Important: Return the raw JSON array directly, not wrapped in ```json blocks.
        """.strip()

    @staticmethod
    def feedback_system_instruction() -> str:
        return (
            "You are a strict professional interviewer analyzing a mock interview. "
            "Your task is to evaluate the candidate based on structured categories."
        )

    @staticmethod
    def feedback_scoring(transcript_text: str) -> str:
        """Scoring prompt embedding the rendered transcript."""
        category_lines = "\n".join(
            f"- **{name}**: {InterviewPrompts.category_descriptions()[name]}"
            for name in FEEDBACK_CATEGORIES
        )
        return f"""
You are an AI interviewer analyzing a mock interview. Your task is to evaluate the candidate based on structured categories. Be thorough and detailed in your analysis. Don't be lenient with the candidate. If there are mistakes or areas for improvement, point them out.

Transcript:
{transcript_text}

Please score the candidate from 0 to 100 in the following areas. Do not add categories other than the ones provided:
{category_lines}

Also give a total score from 0 to 100, a list of strengths, a list of areas for improvement and a short final assessment.
        """.strip()

    @staticmethod
    def category_descriptions() -> Dict[str, str]:
        return {
            "Communication Skills": "Clarity, articulation, structured responses.",
            "Technical Knowledge": "Understanding of key concepts for the role.",
            "Problem-Solving": "Ability to analyze problems and propose solutions.",
            "Cultural & Role Fit": "Alignment with company values and job role.",
            "Confidence & Clarity": "Confidence in responses, engagement, and clarity.",
        }

    @staticmethod
    def interviewer_system_prompt() -> str:
        """System prompt for the voice interviewer. ``{{questions}}`` is filled in by the transport."""
        return """
You are a professional job interviewer conducting a real-time voice interview with a candidate. Your goal is to assess their qualifications, motivation, and fit for the role.

Interview Guidelines:
Follow the structured question flow:
{{questions}}

Engage naturally and react appropriately:
- Listen actively to responses and acknowledge them before moving forward.
- Ask brief follow-up questions if a response is vague or requires more detail.
- Keep the conversation flowing smoothly while maintaining control.

Be professional, yet warm and welcoming:
- Use official yet friendly language.
- Keep responses concise and to the point, like in a real voice interview.
- Avoid robotic phrasing; sound natural and conversational.

Conclude the interview properly:
- Thank the candidate for their time.
- Inform them that the company will reach out soon with feedback.
- End the conversation on a polite and positive note.
        """.strip()


class PromptFormatter:
    """Helper class for formatting and customizing prompts."""

    @staticmethod
    def format_transcript(transcript: Iterable[Union[TranscriptLine, Dict[str, str]]]) -> str:
        """Render transcript lines as ``- <speaker>: <text>`` joined by newlines."""
        lines = []
        for line in transcript:
            if isinstance(line, TranscriptLine):
                lines.append(f"- {line.speaker.value}: {line.text}")
            else:
                lines.append(f"- {line['role']}: {line['content']}")
        return "\n".join(lines)

    @staticmethod
    def format_questions(questions: Sequence[str]) -> str:
        """Render questions as a dash list for the interviewer prompt."""
        return "\n".join(f"- {q}" for q in questions)

    @staticmethod
    def add_custom_context(base_prompt: str, custom_context: str) -> str:
        """Add custom context to a base prompt if provided."""
        if custom_context and custom_context.strip():
            return f"{base_prompt}\n\nADDITIONAL CONTEXT: {custom_context}"
        return base_prompt

    @staticmethod
    def build_interviewer_assistant(persona: InterviewerPersona) -> Dict[str, Any]:
        """Assistant definition sent to the voice transport for an interview call."""
        system_prompt = PromptFormatter.add_custom_context(
            InterviewPrompts.interviewer_system_prompt(), persona.custom_context
        )
        return {
            "name": persona.name,
            "firstMessage": persona.first_message,
            "transcriber": {
                "provider": persona.transcriber_provider,
                "model": persona.transcriber_model,
                "language": persona.language,
            },
            "voice": {
                "provider": persona.voice_provider,
                "voiceId": persona.voice_id,
                "stability": persona.stability,
                "similarityBoost": persona.similarity_boost,
                "speed": persona.speed,
            },
            "model": {
                "provider": persona.model_provider,
                "model": persona.model_name,
                "messages": [{"role": "system", "content": system_prompt}],
            },
        }

    @staticmethod
    def describe_persona(persona: InterviewerPersona) -> str:
        """One-line summary of a persona for logs."""
        fields = [f.name for f in dataclasses.fields(persona) if f.name != "custom_context"]
        return ", ".join(f"{name}={getattr(persona, name)}" for name in fields)


def build_question_prompt(role: str, level: str, tech_stack: str,
                          question_type: str, amount: int) -> str:
    """
    Build the question-generation prompt.

    Args:
        role: Job title the interview targets
        level: Experience level (e.g. junior, senior)
        tech_stack: Comma separated technologies
        question_type: technical, behavioural or mixed
        amount: Number of questions to request

    Returns:
        Prompt text asking for a bare JSON array of ``amount`` strings
    """
    if amount < 1:
        raise ValueError("amount must be at least 1")
    return InterviewPrompts.question_generation(role, level, tech_stack, question_type, amount)


def build_feedback_prompt(transcript_text: str) -> FeedbackPrompt:
    """Build the system instruction and user prompt for scoring a rendered transcript."""
    return FeedbackPrompt(
        system=InterviewPrompts.feedback_system_instruction(),
        prompt=InterviewPrompts.feedback_scoring(transcript_text),
    )
