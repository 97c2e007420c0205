"""
Language consensus detection for inbound messages.

Two independent generation requests (a linguistic-marker prompt and a
register/context prompt) run concurrently; their answers are merged by
``synthesize``. When neither request produces a usable answer, a lexical
word-list heuristic over Dutch and English picks the language with low
confidence.
"""
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from config import PRIMARY_MODEL, FALLBACK_MODEL
from models.result import Ok, Fallback, Result
from services.llm_client import LLMClient, LLMClientError
from services.text_utils import sanitize_input, extract_json, clamp

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"

LANGUAGE_ALIASES = {
    "dutch": "nl",
    "nederlands": "nl",
    "netherlands": "nl",
    "english": "en",
    "german": "de",
    "deutsch": "de",
    "french": "fr",
    "francais": "fr",
    "français": "fr",
    "spanish": "es",
    "espanol": "es",
    "español": "es",
}

DUTCH_WORDS = {
    "de", "het", "een", "van", "en", "in", "op", "is", "dit", "met", "voor",
    "aan", "ook", "zijn", "je", "rol", "functie", "mogelijkheden",
}
ENGLISH_WORDS = {
    "the", "and", "of", "to", "in", "is", "you", "that", "it", "he", "for",
    "on", "are", "as", "with", "his", "they", "this", "role", "position",
}

PRIMARY_PROMPT = """You are a professional language detection specialist. Analyze this text and determine its primary language.

TEXT TO ANALYZE:
"{text}"

DETECTION CRITERIA:
- Focus on vocabulary, grammar patterns, and linguistic markers
- Consider context clues like names, locations, and terminology
- Evaluate sentence structure and word order patterns
- Account for code-switching or mixed language content

SUPPORTED LANGUAGES (priority order):
1. Dutch (nl) - Professional/business Dutch, including recruitment language
2. English (en) - Professional/business English
3. German (de)
4. French (fr)
5. Spanish (es)

IMPORTANT: For recruitment messages, pay special attention to:
- Dutch: "rol", "functie", "werkgever", "salaris", "mogelijkheden", "ervaring"
- English: "role", "position", "employer", "salary", "opportunities", "experience"
- Company names and technical terms in another language are normal

Return JSON only:
{{"language": "ISO 639-1 code", "confidence": 0.0-1.0, "reasoning": "brief explanation", "is_mixed_language": false}}"""

CONTEXTUAL_PROMPT = """Perform contextual language analysis on this text:

"{text}"

Focus on:
1. Professional/business language patterns
2. Regional variations and formality levels
3. Industry-specific terminology (recruiting, tech, business)
4. Cultural communication markers

Return JSON with the ISO 639-1 language code and confidence (0.0-1.0):
{{"language": "code", "confidence": 0.0, "context_type": "description"}}"""


@dataclass(frozen=True)
class LanguageDetection:
    """Detected dominant language of a text."""
    language: str
    confidence: float
    is_reliable: bool


def normalize_language_code(code: str) -> str:
    normalized = (code or "").strip().lower()
    return LANGUAGE_ALIASES.get(normalized, normalized) or UNKNOWN


def synthesize(
    primary: Optional[LanguageDetection],
    secondary: Optional[LanguageDetection],
    reliable_threshold: float = 0.7
) -> Optional[LanguageDetection]:
    """
    Merge two optional detector answers into one.

    Agreement keeps the language with the higher of the two confidences.
    Disagreement keeps the more confident answer, ties going to ``primary``.
    A single answer is returned as is; no answers yield None.
    """
    if primary is None or secondary is None:
        return primary or secondary

    if primary.language == secondary.language:
        confidence = max(primary.confidence, secondary.confidence)
        logger.debug(f"Language consensus on {primary.language} (confidence={confidence:.2f})")
        return LanguageDetection(
            language=primary.language,
            confidence=confidence,
            is_reliable=confidence >= reliable_threshold
        )

    best = primary if primary.confidence >= secondary.confidence else secondary
    logger.warning(
        f"Language detection disagreement: primary={primary.language} ({primary.confidence:.2f}), "
        f"secondary={secondary.language} ({secondary.confidence:.2f}), chosen={best.language}"
    )
    return best


def lexical_detection(text: str) -> LanguageDetection:
    """Word-list heuristic used when both generation requests fail."""
    words = re.findall(r"[^\W\d_]+", text.lower())
    dutch_matches = sum(1 for word in words if word in DUTCH_WORDS)
    english_matches = sum(1 for word in words if word in ENGLISH_WORDS)

    language = UNKNOWN
    confidence = 0.3
    if dutch_matches > english_matches:
        language = "nl"
        confidence = min(0.6, 0.3 + dutch_matches * 0.05)
    elif english_matches > dutch_matches:
        language = "en"
        confidence = min(0.6, 0.3 + english_matches * 0.05)

    logger.warning(
        f"Using lexical language detection: language={language}, confidence={confidence:.2f}, "
        f"dutch_matches={dutch_matches}, english_matches={english_matches}"
    )
    return LanguageDetection(language=language, confidence=round(confidence, 2), is_reliable=False)


class LanguageDetector:
    """Detect the dominant language of a message by consensus of two prompts."""

    def __init__(
        self,
        llm_client: LLMClient,
        primary_model: str = PRIMARY_MODEL,
        secondary_model: str = FALLBACK_MODEL,
        reliable_threshold: float = 0.7
    ):
        self.llm_client = llm_client
        self.primary_model = primary_model
        self.secondary_model = secondary_model
        self.reliable_threshold = reliable_threshold

    def detect(self, text: str) -> Result[LanguageDetection]:
        if not text or not text.strip():
            return Fallback(LanguageDetection(UNKNOWN, 0.0, False), reason="empty_input")

        sanitized = sanitize_input(text)

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="language-detect") as pool:
            primary_future = pool.submit(
                self._ask, PRIMARY_PROMPT.format(text=sanitized), self.primary_model, 0.1, 500, "primary"
            )
            secondary_future = pool.submit(
                self._ask, CONTEXTUAL_PROMPT.format(text=sanitized), self.secondary_model, 0.2, 300, "contextual"
            )
            primary = primary_future.result()
            secondary = secondary_future.result()

        merged = synthesize(primary, secondary, self.reliable_threshold)
        if merged is None:
            logger.error("All language detection requests failed")
            return Fallback(lexical_detection(sanitized), reason="service_unavailable")

        logger.info(f"Language detected: {merged.language} (confidence={merged.confidence:.2f})")
        return Ok(merged)

    def _ask(
        self,
        prompt: str,
        model: str,
        temperature: float,
        max_tokens: int,
        label: str
    ) -> Optional[LanguageDetection]:
        """Run one detector request; None stands for any failure."""
        try:
            response = self.llm_client.generate(
                model=model,
                prompt=prompt,
                max_tokens=max_tokens,
                temperature=temperature,
                json_mode=True
            )
        except LLMClientError as e:
            logger.error(f"{label} language detection failed: {e.error.code}")
            return None

        parsed = extract_json(response.text)
        if parsed is None or not parsed.get("language"):
            logger.warning(f"{label} language detection returned malformed output")
            return None

        confidence = clamp(parsed.get("confidence"), 0.0, 1.0, default=0.0)
        return LanguageDetection(
            language=normalize_language_code(str(parsed["language"])),
            confidence=confidence,
            is_reliable=confidence >= self.reliable_threshold
        )
