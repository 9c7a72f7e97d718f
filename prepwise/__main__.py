#!/usr/bin/env python3
"""
Main entry point for the PrepWise session core.
Allows running the package with: python -m prepwise <command> [--key=value ...]

Commands:
    generate    Generate and store an interview question set
    replay      Run a voice session from a recorded transcript file
    feedback    Score a recorded transcript without a voice session
    show        Show the stored feedback for an interview
    interviews  List a user's interviews and the latest public ones
    workflow    Start the intake voice workflow through the REST API
"""
import sys
from typing import Dict, List

from .config import get_config, Config, DEFAULT_QUESTION_AMOUNT, DEFAULT_QUESTION_TYPE
from .errors import InterviewError
from .infrastructure.data import JsonDocumentStore
from .infrastructure.llm import VertexRestClient
from .infrastructure.voice import ReplayTransport, VapiRestClient, load_transcript_file
from .interview import (
    SessionOrchestrator, SessionMode, FeedbackRequest, TranscriptLine, User,
    FeedbackRepository, InterviewRepository, FeedbackService, QuestionGenerationService,
    StaticUserProvider, StoredUserProvider, ConsoleNotifier
)
from .utils import setup_logging

COMMANDS = ("generate", "replay", "feedback", "show", "interviews", "workflow")


def _parse_options(args: List[str]) -> Dict[str, str]:
    options = {}
    for arg in args:
        if arg.startswith("--") and "=" in arg:
            key, value = arg[2:].split("=", 1)
            options[key] = value
        elif arg.startswith("--"):
            options[arg[2:]] = "true"
        else:
            print(f"❌ Unexpected argument: {arg}")
            sys.exit(1)
    return options


def _require(options: Dict[str, str], *names: str) -> None:
    missing = [n for n in names if not options.get(n)]
    if missing:
        print(f"❌ Missing options: {', '.join('--' + n + '=...' for n in missing)}")
        sys.exit(1)


def _llm_client(config: Config) -> VertexRestClient:
    return VertexRestClient(
        project=config.google_cloud_project,
        location=config.vertex_location,
        model=config.model_name,
        credentials_json=config.google_application_credentials,
    )


def _print_feedback(record) -> None:
    print(f"📊 Total Score: {record.total_score}/100")
    for category in record.category_scores:
        print(f"   • {category.name}: {category.score}/100 - {category.comment}")
    print(f"💪 Strengths: {'; '.join(record.strengths) or '-'}")
    print(f"🎯 Areas for Improvement: {'; '.join(record.areas_for_improvement) or '-'}")
    print(f"📝 Final Assessment: {record.final_assessment}")


def cmd_generate(config: Config, store: JsonDocumentStore, options: Dict[str, str]) -> int:
    _require(options, "role", "level", "techstack", "user")
    service = QuestionGenerationService(_llm_client(config), InterviewRepository(store))
    print(f"🤔 Generating questions for {options['role']}...")
    result = service.generate_interview({
        "role": options["role"],
        "level": options["level"],
        "techstack": options["techstack"],
        "type": options.get("type", DEFAULT_QUESTION_TYPE),
        "amount": options.get("amount", str(DEFAULT_QUESTION_AMOUNT)),
        "userid": options["user"],
    })
    if not result["success"]:
        print(f"❌ Interview generation failed: {result['error']}")
        return 1
    print(f"✅ Interview {result['interview_id']} created with {result['questions_count']} questions")
    return 0


def cmd_replay(config: Config, store: JsonDocumentStore, options: Dict[str, str]) -> int:
    _require(options, "transcript", "user")
    interviews = InterviewRepository(store)
    feedback = FeedbackRepository(store)

    if options.get("name"):
        user_provider = StaticUserProvider(User(id=options["user"], name=options["name"]))
    else:
        user_provider = StoredUserProvider(store, options["user"])

    transport = ReplayTransport(load_transcript_file(options["transcript"]))
    notifier = ConsoleNotifier()
    orchestrator = SessionOrchestrator(
        transport=transport,
        feedback_service=FeedbackService(_llm_client(config), feedback),
        feedback_repository=feedback,
        user_provider=user_provider,
        navigate=lambda target: print(f"➡️  Navigate to {target}"),
        notifier=notifier,
        persona=config.persona,
        workflow_id=config.vapi_workflow_id,
        home_redirect_delay=config.home_redirect_delay,
    )

    try:
        if options.get("interview"):
            interview = interviews.get_interview_by_id(options["interview"])
            if interview is None:
                print(f"❌ Interview not found: {options['interview']}")
                return 1
            started = orchestrator.start(SessionMode.INTERVIEW, interview_id=interview.id,
                                         questions=interview.questions)
        else:
            started = orchestrator.start(SessionMode.GENERATE)
        if not started:
            return 1

        result = orchestrator.wait()
        print(f"📈 Session metrics: {orchestrator.get_metrics()}")
        if result and result.feedback_id:
            record = feedback.get_feedback_by_id(result.feedback_id)
            if record is None:
                print(f"⚠️  Feedback {result.feedback_id} was saved but could not be read back")
                return 1
            _print_feedback(record)
        return 0
    finally:
        orchestrator.close()


def cmd_feedback(config: Config, store: JsonDocumentStore, options: Dict[str, str]) -> int:
    _require(options, "transcript", "interview", "user")
    feedback = FeedbackRepository(store)
    transcript = [TranscriptLine.from_dict(entry) for entry in load_transcript_file(options["transcript"])]
    existing = feedback.get_feedback_by_interview_id(options["interview"], options["user"])

    service = FeedbackService(_llm_client(config), feedback)
    print(f"🤔 Scoring {len(transcript)} transcript lines...")
    try:
        result = service.create_feedback(FeedbackRequest(
            interview_id=options["interview"],
            user_id=options["user"],
            transcript=transcript,
            feedback_id=existing.id if existing else None,
        ))
    except InterviewError as e:
        print(f"❌ Feedback unavailable: {e}")
        return 1

    print(f"✅ Feedback saved: {result.feedback_id}")
    _print_feedback(result.record)
    return 0


def cmd_show(config: Config, store: JsonDocumentStore, options: Dict[str, str]) -> int:
    _require(options, "interview", "user")
    record = FeedbackRepository(store).get_feedback_by_interview_id(options["interview"], options["user"])
    if record is None:
        print("❌ No feedback found for this interview")
        return 1
    _print_feedback(record)
    return 0


def cmd_interviews(config: Config, store: JsonDocumentStore, options: Dict[str, str]) -> int:
    interviews = InterviewRepository(store)
    user_id = options.get("user")

    if user_id:
        print("🗂️  Your interviews:")
        for record in interviews.get_interviews_by_user_id(user_id):
            print(f"   • {record.id}: {record.role} ({record.level}, {record.type}) - {len(record.questions)} questions")

    print("🌍 Latest interviews:")
    for record in interviews.get_latest_interviews(exclude_user_id=user_id):
        print(f"   • {record.id}: {record.role} ({', '.join(record.techstack)})")
    return 0


def cmd_workflow(config: Config, store: JsonDocumentStore, options: Dict[str, str]) -> int:
    _require(options, "user", "name")
    client = VapiRestClient(config.vapi_secret_key, config.vapi_workflow_id, base_url=config.vapi_base_url)
    try:
        call = client.start_workflow_call({"username": options["name"], "userid": options["user"]})
    except InterviewError as e:
        print(f"❌ Failed to start workflow: {e}")
        return 1
    print(f"✅ Workflow started successfully! Call id: {call.get('id')}")
    return 0


def main():
    """Command-line interface for the session core."""
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        print(__doc__)
        sys.exit(1)

    command = sys.argv[1]
    options = _parse_options(sys.argv[2:])

    # Load configuration from environment
    try:
        config = get_config()
    except ValueError as e:
        print(f"❌ Configuration Error: {e}")
        sys.exit(1)

    log_file = setup_logging(config.log_file, config.log_level)
    print(f"📝 Detailed logs: {log_file}")

    store = JsonDocumentStore(config.data_dir)
    handlers = {
        "generate": cmd_generate,
        "replay": cmd_replay,
        "feedback": cmd_feedback,
        "show": cmd_show,
        "interviews": cmd_interviews,
        "workflow": cmd_workflow,
    }
    sys.exit(handlers[command](config, store, options))


if __name__ == "__main__":
    main()
