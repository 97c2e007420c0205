"""Main entry point for the recruiter conversation assistant API."""
import logging
import threading
from typing import List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from config import (
    PORT, LOG_LEVEL, LOG_FORMAT, PRIMARY_MODEL, FALLBACK_MODEL, VALIDATION_MODEL,
    PROFILE_PATH, PROMPT_CONFIG_PATH, RESPONSE_HISTORY_PATH, RESPONSE_LOG_PATH,
    RESPONSE_RETENTION_DAYS, ALLOW_FOLLOW_UPS,
)
from logger import setup_logging
from models.api import InboundMessageRequest, ProcessedMessageResponse, ResponseRecordPayload
from models.conversation import ConversationTurn, MissingCounterpartTurnError, Sender
from models.message import Message
from services.config_loader import load_profile, load_prompt_config
from services.conversation_pipeline import ConversationPipeline
from services.conversation_store import ConversationStore
from services.fit_evaluator import EnthusiasmTable, FitEvaluator
from services.language_detector import LanguageDetector
from services.llm_client import LLMClient
from services.response_composer import ResponseComposer
from services.response_logger import ResponseLogger
from services.response_tracker import ResponseTracker
from services.sender_classifier import SenderClassifier
from services.strategy_planner import StrategyPlanner

# Initialize logging
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Recruiter Conversation Assistant",
    description="Classifies recruiter messages, tracks conversations and drafts replies",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services (will be done on startup)
pipeline: ConversationPipeline = None
response_tracker: ResponseTracker = None
response_logger: ResponseLogger = None

# Messages are handled one at a time
pipeline_lock = threading.Lock()


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global pipeline, response_tracker, response_logger

    if LOG_FORMAT == "json":
        setup_logging(LOG_LEVEL, LOG_FORMAT)

    logger.info("Initializing recruiter conversation assistant services...")

    try:
        profile = load_profile(PROFILE_PATH)
        prompt_config = load_prompt_config(PROMPT_CONFIG_PATH)
        quality = prompt_config.quality

        response_tracker = ResponseTracker(RESPONSE_HISTORY_PATH)
        removed = response_tracker.purge_older_than(RESPONSE_RETENTION_DAYS)
        logger.info(f"Initialized ResponseTracker ({removed} expired records purged)")

        llm_client = LLMClient()
        logger.info("Initialized LLMClient")

        response_logger = ResponseLogger(RESPONSE_LOG_PATH)

        pipeline = ConversationPipeline(
            classifier=SenderClassifier(
                llm_client,
                response_tracker,
                min_confidence=quality.min_confidence_classification,
                primary_model=PRIMARY_MODEL,
                fallback_model=FALLBACK_MODEL
            ),
            language_detector=LanguageDetector(
                llm_client,
                primary_model=PRIMARY_MODEL,
                secondary_model=FALLBACK_MODEL,
                reliable_threshold=quality.reliable_language_confidence
            ),
            store=ConversationStore(phase_advance_turns=quality.phase_advance_turns),
            fit_evaluator=FitEvaluator(
                llm_client, EnthusiasmTable(prompt_config.decision_thresholds), model=PRIMARY_MODEL
            ),
            planner=StrategyPlanner(
                llm_client,
                prompt_config.decision_thresholds,
                hierarchy=prompt_config.information_hierarchy,
                model=PRIMARY_MODEL
            ),
            composer=ResponseComposer(
                llm_client, profile, prompt_config, model=PRIMARY_MODEL, validation_model=VALIDATION_MODEL
            ),
            tracker=response_tracker,
            response_logger=response_logger,
            profile=profile,
            allow_follow_ups=ALLOW_FOLLOW_UPS
        )
        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


@app.on_event("shutdown")
async def shutdown_event():
    if response_logger is not None:
        response_logger.close()


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "recruiter-conversation-assistant",
        "version": "1.0.0",
        "ready": pipeline is not None
    }


@app.post("/messages", response_model=ProcessedMessageResponse)
def messages_endpoint(request: InboundMessageRequest) -> ProcessedMessageResponse:
    """
    Process one inbound message from the platform.

    The message is classified, added to its conversation and, when it comes
    from a recruiter that has not had a reply yet, answered.

    Args:
        request: Inbound message with optional full thread for resynchronization

    Returns:
        ProcessedMessageResponse with status, analysis summary and reply

    Raises:
        HTTPException: 400 for blank content, 422 when the conversation has no
            recruiter turn, 500 for anything unexpected
    """
    if not request.content or not request.content.strip():
        raise HTTPException(status_code=400, detail="Message content is required and cannot be empty")

    message = Message(
        id=request.id,
        sender_id=request.sender_id,
        sender_name=request.sender_name,
        content=request.content,
        sender_title=request.sender_title,
        sender_company=request.sender_company,
        **({"timestamp": request.timestamp} if request.timestamp else {})
    )
    synced_turns = _to_turns(request) if request.conversation_turns is not None else None

    logger.info(f"Processing message {request.id} from {request.sender_name}")

    try:
        with pipeline_lock:
            outcome = pipeline.process(message, synced_turns)
    except MissingCounterpartTurnError as e:
        logger.error(f"Missing counterpart turn: {e}")
        raise HTTPException(
            status_code=422,
            detail={
                "error": {
                    "code": "MISSING_COUNTERPART_TURN",
                    "message": str(e),
                    "details": {"conversation_id": e.conversation_id}
                }
            }
        )
    except Exception as e:
        logger.error(f"Unexpected error processing message: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(e)}"
        )

    return ProcessedMessageResponse(
        status=outcome.status,
        conversation_id=outcome.conversation_id,
        category=outcome.classification.category if outcome.classification else None,
        language=outcome.language.language if outcome.language else None,
        fit_score=outcome.fit.overall_score if outcome.fit else None,
        recommendation=outcome.fit.recommendation if outcome.fit else None,
        phase=outcome.phase.value if outcome.phase else None,
        reply=outcome.reply,
        degraded=outcome.degraded
    )


@app.get("/responses", response_model=List[ResponseRecordPayload])
def responses_endpoint() -> List[ResponseRecordPayload]:
    """Recorded replies, most recent first."""
    return [ResponseRecordPayload(**record.to_dict()) for record in response_tracker.history()]


@app.delete("/conversations/{conversation_id}")
def clear_conversation(conversation_id: str):
    """Forget the stored history of one conversation."""
    with pipeline_lock:
        pipeline.clear(conversation_id)
    return {"status": "cleared", "conversation_id": conversation_id}


def _to_turns(request: InboundMessageRequest) -> List[ConversationTurn]:
    turns = []
    for turn in request.conversation_turns:
        kwargs = {"timestamp": turn.timestamp} if turn.timestamp else {}
        turns.append(ConversationTurn(sender=Sender(turn.sender), content=turn.content, **kwargs))
    return turns


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting recruiter conversation assistant API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
