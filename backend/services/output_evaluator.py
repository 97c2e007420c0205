"""Output evaluator for reply quality checks."""
import re
from typing import Dict, List, Optional


class OutputEvaluator:
    """Analyzes generated replies and flags issues that must never be sent."""

    # Phrases where the reply gives away that it was written by a model
    AI_SELF_REFERENCES = [
        "as an ai",
        "as a language model",
        "i am an ai",
        "i'm an ai",
        "ai assistant",
        "language model",
        "als ai",
        "ik ben een ai",
        "taalmodel",
    ]

    # International or local phone numbers: 8+ digits with optional separators
    PHONE_PATTERN = re.compile(r"(?:\+|00)?\d[\d\s().-]{7,}\d")

    # Salary ranges such as 90.000 - 95.000 or 85,000-95,000
    AMOUNT_RANGE_PATTERN = re.compile(r"\d{1,3}(?:[.,]\d{3})+\s*-\s*\d{1,3}(?:[.,]\d{3})+")
    CURRENCY_BEFORE = re.compile(r"(?:[€$£]|\b(?:eur|euro|euros|usd|gbp)\b)\s*$", re.IGNORECASE)
    CURRENCY_AFTER = re.compile(r"^\s*(?:[€$£]|k\b|(?:eur|euro|euros|usd|gbp)\b)", re.IGNORECASE)

    def __init__(
        self,
        max_words: int = 150,
        avoid_phrases: Optional[Dict[str, List[str]]] = None
    ):
        self.max_words = max_words
        self.avoid_phrases = avoid_phrases or {}

    def evaluate(self, reply: str, language: Optional[str] = None) -> List[str]:
        """
        Evaluate a reply and return flags.

        Args:
            reply: Generated reply text
            language: ISO 639-1 code of the expected reply language; selects
                the discouraged phrase list (all lists when unknown)

        Returns:
            List of flag strings (empty if no issues)
        """
        if not reply or not reply.strip():
            return ["empty"]

        flags = []

        # Check 1: Phone number disclosure
        if self._has_phone_number(reply):
            flags.append("phone_number")

        # Check 2: Word cap
        if len(reply.split()) > self.max_words:
            flags.append("too_long")

        # Check 3: Discouraged phrasing
        if self._has_avoided_phrase(reply, language):
            flags.append("avoided_phrase")

        # Check 4: Self-disclosure as a model
        reply_lower = reply.lower()
        if any(re.search(rf"\b{re.escape(phrase)}\b", reply_lower) for phrase in self.AI_SELF_REFERENCES):
            flags.append("ai_self_reference")

        return flags

    def _has_phone_number(self, reply: str) -> bool:
        for match in self.PHONE_PATTERN.finditer(reply):
            digits = re.sub(r"\D", "", match.group())
            if len(digits) < 9 or self._is_amount(reply, match):
                continue
            return True
        return False

    def _is_amount(self, reply: str, match: "re.Match") -> bool:
        """Salary figures and ranges also match the phone pattern."""
        if self.AMOUNT_RANGE_PATTERN.fullmatch(match.group()):
            return True
        before = reply[max(0, match.start() - 8):match.start()]
        after = reply[match.end():match.end() + 8]
        return bool(self.CURRENCY_BEFORE.search(before) or self.CURRENCY_AFTER.search(after))

    def _has_avoided_phrase(self, reply: str, language: Optional[str]) -> bool:
        reply_lower = reply.lower()
        if language and language in self.avoid_phrases:
            phrases = self.avoid_phrases[language]
        else:
            phrases = [phrase for group in self.avoid_phrases.values() for phrase in group]
        return any(phrase.lower() in reply_lower for phrase in phrases)
