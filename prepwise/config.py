"""
PrepWise Configuration System
=============================

This file contains ALL configuration for the PrepWise interview session core.
- User settings at the top (things users might want to change)
- Internal constants at the bottom (technical defaults)
"""
import os
from dataclasses import dataclass, field
from typing import Optional


# =============================================================================
# USER SETTINGS - Edit these to customize PrepWise
# =============================================================================

# REQUIRED: Set your Google Cloud project
GOOGLE_CLOUD_PROJECT = "your-project-id"  # Change this!
GOOGLE_APPLICATION_CREDENTIALS = None  # Optional: path to credentials JSON

# Voice workflow (used for the GENERATE intake call)
VAPI_WORKFLOW_ID = None
VAPI_SECRET_KEY = None

# Storage
DATA_DIR = "./_prepwise"

# Question generation
DEFAULT_QUESTION_AMOUNT = 5
DEFAULT_QUESTION_TYPE = "mixed"

# Post-session navigation
HOME_REDIRECT_DELAY = 1.0

# Logging
LOG_FILE = "./_prepwise/prepwise.log"
LOG_LEVEL = "INFO"


# =============================================================================
# INTERVIEWER PERSONA
# =============================================================================

@dataclass
class InterviewerPersona:
    """Voice assistant persona used for question-set interviews."""
    name: str = "Interviewer"
    first_message: str = (
        "Hello! Thank you for taking the time to speak with me today. "
        "I'm looking forward to learning more about you and your experience."
    )
    voice_provider: str = "11labs"
    voice_id: str = "sarah"
    stability: float = 0.4
    similarity_boost: float = 0.8
    speed: float = 0.9
    transcriber_provider: str = "deepgram"
    transcriber_model: str = "nova-2"
    language: str = "en"
    model_provider: str = "openai"
    model_name: str = "gpt-4"

    # Custom interviewer instructions appended to the system prompt
    custom_context: str = ""


# =============================================================================
# INTERNAL CONSTANTS - Don't change these unless you know what you're doing
# =============================================================================

# LLM
VERTEX_LOCATION = "us-central1"
MODEL_NAME = "gemini-2.0-flash-001"
LLM_TIMEOUT = 60
MAX_OUTPUT_TOKENS = 2048

# Voice transport REST API
VAPI_BASE_URL = "https://api.vapi.ai"
VAPI_TIMEOUT = 30

# Document collections
INTERVIEWS_COLLECTION = "interviews"
FEEDBACK_COLLECTION = "feedback"
USERS_COLLECTION = "users"

# Interview listing
LATEST_INTERVIEWS_LIMIT = 10

INTERVIEW_COVERS = [
    "/adobe.png",
    "/amazon.png",
    "/facebook.png",
    "/hostinger.png",
    "/pinterest.png",
    "/quora.png",
    "/reddit.png",
    "/skype.png",
    "/spotify.png",
    "/telegram.png",
    "/tiktok.png",
    "/yahoo.png",
]

FEEDBACK_CATEGORIES = (
    "Communication Skills",
    "Technical Knowledge",
    "Problem-Solving",
    "Cultural & Role Fit",
    "Confidence & Clarity",
)

# Navigation targets
HOME_ROUTE = "/"


# =============================================================================
# MAIN CONFIG OBJECT
# =============================================================================

@dataclass
class Config:
    """Main configuration object."""
    google_cloud_project: str
    google_application_credentials: Optional[str] = None
    vertex_location: str = VERTEX_LOCATION
    model_name: str = MODEL_NAME
    vapi_workflow_id: Optional[str] = VAPI_WORKFLOW_ID
    vapi_secret_key: Optional[str] = VAPI_SECRET_KEY
    vapi_base_url: str = VAPI_BASE_URL
    data_dir: str = DATA_DIR
    default_question_amount: int = DEFAULT_QUESTION_AMOUNT
    home_redirect_delay: float = HOME_REDIRECT_DELAY
    log_file: str = LOG_FILE
    log_level: str = LOG_LEVEL
    persona: InterviewerPersona = field(default_factory=InterviewerPersona)


def get_config() -> Config:
    """Load configuration."""
    project = os.getenv("GOOGLE_CLOUD_PROJECT") or GOOGLE_CLOUD_PROJECT
    credentials = os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or GOOGLE_APPLICATION_CREDENTIALS

    if project == "your-project-id":
        raise ValueError("Please set GOOGLE_CLOUD_PROJECT in config.py or as environment variable")

    delay = os.getenv("HOME_REDIRECT_DELAY")

    return Config(
        google_cloud_project=project,
        google_application_credentials=credentials,
        vertex_location=os.getenv("VERTEX_LOCATION") or VERTEX_LOCATION,
        model_name=os.getenv("MODEL_NAME") or MODEL_NAME,
        vapi_workflow_id=os.getenv("VAPI_WORKFLOW_ID") or VAPI_WORKFLOW_ID,
        vapi_secret_key=os.getenv("VAPI_SECRET_KEY") or VAPI_SECRET_KEY,
        vapi_base_url=os.getenv("VAPI_BASE_URL") or VAPI_BASE_URL,
        data_dir=os.getenv("PREPWISE_DATA_DIR") or DATA_DIR,
        home_redirect_delay=float(delay) if delay else HOME_REDIRECT_DELAY,
        log_file=os.getenv("LOG_FILE") or LOG_FILE,
        log_level=os.getenv("LOG_LEVEL") or LOG_LEVEL,
    )
