"""
Sender classification for inbound messages.

Decides whether a message comes from an internal recruiter, an external
recruiter or someone else. Counterparts we have already replied to are
classified from the response history without calling the model.
"""

from dataclasses import dataclass
import logging
from typing import List, Optional

from config import PRIMARY_MODEL, FALLBACK_MODEL
from models.conversation import ConversationTurn
from models.message import Message
from models.result import Ok, Fallback, Result
from services.llm_client import LLMClient, LLMClientError
from services.response_tracker import ResponseTracker
from services.text_utils import sanitize_input, extract_json, clamp

logger = logging.getLogger(__name__)


@dataclass
class Classification:
    """
    Result of sender classification.

    Attributes:
        category: One of SenderClassifier.CATEGORIES
        confidence: Model confidence in [0, 1]
        rule_triggered: Which path produced the category
        reasoning: Short explanation from the model, if any
    """
    category: str
    confidence: float
    rule_triggered: str
    reasoning: str = ""


CLASSIFICATION_PROMPT = """Analyze this message from a professional networking platform and classify the sender.

{context}

Classify the sender as one of these types:
- INTERNAL_RECRUITER: Employee of the hiring company (HR, talent acquisition, hiring manager)
- EXTERNAL_RECRUITER: Third-party recruiter or agency representing a client company
- COLLEAGUE: Former or current colleague, or a professional contact reconnecting
- NETWORKING: Someone looking to connect professionally or build their network
- SALES: Someone trying to sell services, products, or business opportunities
- SPAM: Generic messages, obvious spam, or irrelevant content
- OTHER: Doesn't fit the above categories

INTERNAL_RECRUITER indicators:
- Job title includes the company name or "at [Company]"
- Mentions "we are looking for", "our team", "join us"
- Specific internal role details

EXTERNAL_RECRUITER indicators:
- Works for a recruitment agency or consultancy
- Mentions "client", "on behalf of", "representing"
- Several opportunities mentioned at once

Return JSON only:
{{"classification": "CATEGORY", "confidence": 0.0-1.0, "reasoning": "one sentence"}}"""


class SenderClassifier:
    """Assigns a sender category using history first, then the model."""

    INTERNAL_RECRUITER = "INTERNAL_RECRUITER"
    EXTERNAL_RECRUITER = "EXTERNAL_RECRUITER"
    COLLEAGUE = "COLLEAGUE"
    NETWORKING = "NETWORKING"
    SALES = "SALES"
    SPAM = "SPAM"
    OTHER = "OTHER"

    # Substring matching relies on this order: INTERNAL_ before EXTERNAL_
    CATEGORIES = [INTERNAL_RECRUITER, EXTERNAL_RECRUITER, COLLEAGUE, NETWORKING, SALES, SPAM, OTHER]
    RECRUITER_CATEGORIES = {INTERNAL_RECRUITER, EXTERNAL_RECRUITER}

    # Anyone we already replied to is treated as a recruiter we are in talks with
    KNOWN_COUNTERPART_CATEGORY = EXTERNAL_RECRUITER

    CONTEXT_TURNS = 3

    def __init__(
        self,
        llm_client: LLMClient,
        response_tracker: ResponseTracker,
        min_confidence: float = 0.6,
        primary_model: str = PRIMARY_MODEL,
        fallback_model: str = FALLBACK_MODEL
    ):
        self.llm_client = llm_client
        self.response_tracker = response_tracker
        self.min_confidence = min_confidence
        self.primary_model = primary_model
        self.fallback_model = fallback_model

    @classmethod
    def is_recruiter(cls, category: str) -> bool:
        return category in cls.RECRUITER_CATEGORIES

    def classify(
        self,
        message: Message,
        recent_turns: Optional[List[ConversationTurn]] = None
    ) -> Result[Classification]:
        """
        Classify the sender of ``message``.

        Paths, in order:
        1. History: a recorded reply for this conversation -> known counterpart
        2. Primary model, JSON output; low confidence downgrades to OTHER
        3. Fallback model with the same prompt, read leniently
        4. OTHER when both model calls fail
        """
        conversation_id = message.conversation_id
        if self.response_tracker.has_responded(conversation_id):
            logger.info(f"Classification: {self.KNOWN_COUNTERPART_CATEGORY} (history) - {message.sender_name}")
            return Ok(Classification(
                category=self.KNOWN_COUNTERPART_CATEGORY,
                confidence=1.0,
                rule_triggered="history",
                reasoning="Counterpart already has a recorded reply"
            ))

        prompt = CLASSIFICATION_PROMPT.format(context=self._build_context(message, recent_turns))

        try:
            response = self.llm_client.generate(
                model=self.primary_model,
                prompt=prompt,
                max_tokens=500,
                temperature=0.1,
                json_mode=True
            )
        except LLMClientError as e:
            logger.error(f"Primary classification failed ({e.error.code}), trying fallback model")
            return self._classify_with_fallback_model(prompt)

        parsed = extract_json(response.text)
        if parsed is None:
            category = self._match_category_token(response.text)
            logger.warning(f"Classification output malformed, matched token: {category}")
            return Fallback(
                Classification(category, 0.0, "malformed_output"),
                reason="malformed_output"
            )

        category = self._normalize_category(parsed.get("classification"))
        confidence = clamp(parsed.get("confidence"), 0.0, 1.0, default=0.5)
        reasoning = str(parsed.get("reasoning") or "")

        if confidence < self.min_confidence:
            logger.warning(
                f"Classification confidence {confidence:.2f} below threshold {self.min_confidence} "
                f"for {category}, downgrading to {self.OTHER}"
            )
            return Fallback(
                Classification(self.OTHER, confidence, "low_confidence", reasoning),
                reason="low_confidence"
            )

        logger.info(f"Classification: {category} (confidence={confidence:.2f}) - {message.sender_name}")
        return Ok(Classification(category, confidence, "primary_model", reasoning))

    def _classify_with_fallback_model(self, prompt: str) -> Result[Classification]:
        try:
            response = self.llm_client.generate(
                model=self.fallback_model,
                prompt=prompt,
                max_tokens=500,
                temperature=0.1
            )
        except LLMClientError as e:
            logger.error(f"Fallback classification also failed ({e.error.code}), defaulting to {self.OTHER}")
            return Fallback(
                Classification(self.OTHER, 0.0, "default"),
                reason="service_unavailable"
            )

        parsed = extract_json(response.text)
        if parsed is not None and parsed.get("classification"):
            category = self._normalize_category(parsed.get("classification"))
            confidence = clamp(parsed.get("confidence"), 0.0, 1.0, default=0.5)
        else:
            category = self._match_category_token(response.text)
            confidence = 0.0

        logger.info(f"Classification: {category} (fallback model)")
        return Fallback(Classification(category, confidence, "fallback_model"), reason="fallback_model")

    def _build_context(self, message: Message, recent_turns: Optional[List[ConversationTurn]]) -> str:
        parts = [f"Sender: {message.sender_name}"]
        if message.sender_title:
            parts.append(f"Title: {message.sender_title}")
        if message.sender_company:
            parts.append(f"Company: {message.sender_company}")

        if recent_turns:
            parts.append("\nConversation History:")
            for turn in recent_turns[-self.CONTEXT_TURNS:]:
                parts.append(f"{turn.sender.value}: {sanitize_input(turn.content)}")
        else:
            parts.append(f'Message: "{sanitize_input(message.content)}"')

        return "\n".join(parts)

    def _normalize_category(self, raw: object) -> str:
        label = str(raw or "").strip().upper().replace(" ", "_").replace("-", "_")
        return label if label in self.CATEGORIES else self.OTHER

    def _match_category_token(self, text: str) -> str:
        """Plain substring match of category tokens in free text."""
        upper = (text or "").upper()
        for category in self.CATEGORIES:
            if category in upper:
                return category
        return self.OTHER
