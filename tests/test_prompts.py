import pytest

from prepwise.config import FEEDBACK_CATEGORIES, InterviewerPersona
from prepwise.interview.models import Speaker, TranscriptLine
from prepwise.interview.prompts import (
    PromptFormatter, build_feedback_prompt, build_question_prompt
)


def test_question_prompt_carries_every_parameter():
    prompt = build_question_prompt("Backend Engineer", "senior", "Python, Postgres", "technical", 4)

    assert "Generate 4 interview questions for a Backend Engineer position." in prompt
    assert "Experience Level: senior" in prompt
    assert "Tech Stack: Python, Postgres" in prompt
    assert "Question Type Focus: technical" in prompt
    assert "JSON array" in prompt
    assert "(/, *, etc.)" in prompt


def test_question_prompt_rejects_zero_amount():
    with pytest.raises(ValueError):
        build_question_prompt("Backend Engineer", "senior", "Python", "technical", 0)


def test_transcript_rendering():
    transcript = [
        TranscriptLine(Speaker.ASSISTANT, "Why this role?"),
        TranscriptLine(Speaker.USER, "I like distributed systems."),
    ]

    assert PromptFormatter.format_transcript(transcript) == (
        "- assistant: Why this role?\n- user: I like distributed systems."
    )


def test_transcript_rendering_accepts_stored_dicts():
    rendered = PromptFormatter.format_transcript([{"role": "system", "content": "Call recorded"}])

    assert rendered == "- system: Call recorded"


def test_feedback_prompt_embeds_transcript_and_categories():
    feedback_prompt = build_feedback_prompt("- user: I rebuilt the billing pipeline.")

    assert "strict professional interviewer" in feedback_prompt.system
    assert "- user: I rebuilt the billing pipeline." in feedback_prompt.prompt
    assert "from 0 to 100" in feedback_prompt.prompt
    for name in FEEDBACK_CATEGORIES:
        assert f"**{name}**" in feedback_prompt.prompt
    assert "strengths" in feedback_prompt.prompt
    assert "areas for improvement" in feedback_prompt.prompt
    assert "final assessment" in feedback_prompt.prompt


def test_question_list_formatting():
    assert PromptFormatter.format_questions(["One?", "Two?"]) == "- One?\n- Two?"


def test_interviewer_assistant_definition():
    persona = InterviewerPersona(name="Riley", custom_context="Focus on Go.")

    assistant = PromptFormatter.build_interviewer_assistant(persona)

    assert assistant["name"] == "Riley"
    assert assistant["voice"]["voiceId"] == "sarah"
    assert assistant["transcriber"]["provider"] == "deepgram"
    system_prompt = assistant["model"]["messages"][0]["content"]
    assert "{{questions}}" in system_prompt
    assert system_prompt.endswith("ADDITIONAL CONTEXT: Focus on Go.")
