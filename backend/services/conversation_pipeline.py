"""End-to-end handling of one inbound message."""
from dataclasses import dataclass, field
import logging
from typing import List, Optional

from models.conversation import ConversationTurn, Phase, Sender
from models.fit import FitAnalysis
from models.message import Message
from models.profile import Profile
from models.result import Result
from models.strategy import Strategy
from services.conversation_store import ConversationStore
from services.fit_evaluator import FitEvaluator
from services.language_detector import LanguageDetection, LanguageDetector
from services.response_composer import ResponseComposer
from services.response_logger import ResponseLogger
from services.response_tracker import ResponseTracker
from services.sender_classifier import Classification, SenderClassifier
from services.strategy_planner import StrategyPlanner

logger = logging.getLogger(__name__)

REPLIED = "replied"
SKIPPED = "skipped"
ALREADY_RESPONDED = "already_responded"


@dataclass
class PipelineOutcome:
    """What happened to one inbound message."""
    status: str
    conversation_id: str
    classification: Optional[Classification] = None
    language: Optional[LanguageDetection] = None
    fit: Optional[FitAnalysis] = None
    strategy: Optional[Strategy] = None
    reply: Optional[str] = None
    phase: Optional[Phase] = None
    degraded: List[str] = field(default_factory=list)


class ConversationPipeline:
    """
    Runs an inbound message through classification, language detection,
    conversation tracking, fit evaluation, planning and composition.

    Calls must be serialized by the caller; the store and tracker are not
    locked here.
    """

    def __init__(
        self,
        classifier: SenderClassifier,
        language_detector: LanguageDetector,
        store: ConversationStore,
        fit_evaluator: FitEvaluator,
        planner: StrategyPlanner,
        composer: ResponseComposer,
        tracker: ResponseTracker,
        response_logger: ResponseLogger,
        profile: Profile,
        allow_follow_ups: bool = False
    ):
        self.classifier = classifier
        self.language_detector = language_detector
        self.store = store
        self.fit_evaluator = fit_evaluator
        self.planner = planner
        self.composer = composer
        self.tracker = tracker
        self.response_logger = response_logger
        self.profile = profile
        self.allow_follow_ups = allow_follow_ups

    def process(self, message: Message, synced_turns: Optional[List[ConversationTurn]] = None) -> PipelineOutcome:
        """
        Handle one inbound message.

        Args:
            message: Inbound counterpart message
            synced_turns: Full thread as shown by the platform; replaces the
                stored history before the message is appended

        Returns:
            PipelineOutcome with status ``replied``, ``skipped`` or ``already_responded``

        Raises:
            MissingCounterpartTurnError: Planning found no counterpart turn
        """
        conversation_id = message.conversation_id
        degraded: List[str] = []

        # Step 1: At most one automated reply per conversation
        if self.tracker.has_responded(conversation_id) and not self.allow_follow_ups:
            logger.info(f"Already responded to {conversation_id}, skipping")
            return PipelineOutcome(status=ALREADY_RESPONDED, conversation_id=conversation_id)

        # Step 2: Classify the sender
        stored = self.store.get(conversation_id)
        context_turns = synced_turns if synced_turns is not None else (stored.turns if stored else None)
        classification = self._unwrap(self.classifier.classify(message, context_turns), "classifier", degraded)
        if not SenderClassifier.is_recruiter(classification.category):
            logger.info(f"Skipping {conversation_id}: sender classified as {classification.category}")
            return PipelineOutcome(
                status=SKIPPED,
                conversation_id=conversation_id,
                classification=classification,
                degraded=degraded
            )

        # Step 3: Detect the reply language
        language = self._unwrap(self.language_detector.detect(message.content), "language_detector", degraded)

        # Step 4: Update the conversation history
        if synced_turns is not None:
            self.store.replace_history(conversation_id, synced_turns)
        if self.store.is_duplicate_counterpart_turn(conversation_id, message.content):
            logger.info(f"Counterpart turn already recorded for {conversation_id}")
        else:
            self.store.append_turn(
                conversation_id,
                ConversationTurn(sender=Sender.COUNTERPART, content=message.content, timestamp=message.timestamp)
            )
        state = self.store.get(conversation_id)

        # Step 5: Fit, reused until the next counterpart turn
        fit = state.fit_analysis
        if fit is None:
            fit = self._unwrap(
                self.fit_evaluator.evaluate(message.content, state, self.profile), "fit_evaluator", degraded
            )
            self.store.cache_fit(conversation_id, fit)

        # Step 6: Plan and apply the decision policy
        strategy = self._unwrap(
            self.planner.plan(state, state.latest_counterpart_turn(), self.profile), "strategy_planner", degraded
        )
        if strategy.enter_decision:
            self.store.advance_phase(conversation_id, Phase.DECISION)

        # Step 7: Compose, remember and log the reply
        reply = self._unwrap(
            self.composer.compose(message, classification.category, state, strategy, fit, language.language),
            "response_composer",
            degraded
        )
        self.store.append_turn(conversation_id, ConversationTurn(sender=Sender.SELF, content=reply))
        self.tracker.record(conversation_id, message.sender_name, message.content, reply)
        self.response_logger.log_response(
            conversation_id=conversation_id,
            sender_name=message.sender_name,
            category=classification.category,
            language=language.language,
            phase=state.phase.value,
            inbound=message.content,
            outbound=reply,
            fit_score=fit.overall_score,
            recommendation=fit.recommendation,
            degraded=degraded
        )

        logger.info(
            f"Replied to {conversation_id}: category={classification.category}, language={language.language}, "
            f"fit={fit.overall_score}/{fit.recommendation}, phase={state.phase.value}, degraded={degraded}"
        )
        return PipelineOutcome(
            status=REPLIED,
            conversation_id=conversation_id,
            classification=classification,
            language=language,
            fit=fit,
            strategy=strategy,
            reply=reply,
            phase=state.phase,
            degraded=degraded
        )

    def clear(self, conversation_id: str) -> None:
        self.store.clear(conversation_id)

    @staticmethod
    def _unwrap(result: Result, component: str, degraded: List[str]):
        if result.is_fallback:
            logger.warning(f"{component} fell back to defaults: {result.reason}")
            degraded.append(component)
        return result.value
