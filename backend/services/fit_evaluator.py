"""Opportunity fit scoring against the static preference profile."""
import logging

import yaml

from config import PRIMARY_MODEL
from models.conversation import ConversationState
from models.fit import FitAnalysis, EnthusiasmTier, RECOMMENDATIONS, INTERESTED, EXPLORING, DECLINE
from models.profile import Profile, DecisionThresholds
from models.result import Ok, Fallback, Result
from services.llm_client import LLMClient, LLMClientError
from services.text_utils import sanitize_input, extract_json, clamp, string_list

logger = logging.getLogger(__name__)

FIT_PROMPT = """Evaluate how well this job opportunity fits this person's profile and priorities.

PERSON'S PROFILE:
{profile}

CONVERSATION HISTORY:
{transcript}

RECRUITER'S LATEST MESSAGE:
{counterpart_text}

Analyze the fit between this opportunity and the person's requirements. Consider:
- Salary alignment with their minimum/ideal range
- Schedule compatibility (days per week, hours, office vs remote days)
- Location and commute requirements
- Must-have vs nice-to-have alignment
- Company type preferences (prefer vs avoid)
- Role relevance to their skills and interests

Return JSON only:
{{
  "overallScore": number from 0-100,
  "positives": ["specific good matches"],
  "concerns": ["specific concerns or misalignments"],
  "missingInfo": ["important info still needed"],
  "recommendation": "interested" | "exploring" | "decline"
}}

Be specific and reference actual details from the conversation."""


def default_fit_analysis() -> FitAnalysis:
    """Cautious analysis used whenever the model cannot be consulted."""
    return FitAnalysis(
        overall_score=50,
        positives=[],
        concerns=[],
        missing_info=["salary details", "work arrangement details"],
        recommendation=EXPLORING,
    )


class EnthusiasmTable:
    """
    Score-to-enthusiasm lookup driven by configured thresholds.

    A score exactly at a threshold belongs to the higher tier.
    """

    def __init__(self, thresholds: DecisionThresholds):
        self.thresholds = thresholds
        self._rows = [
            (thresholds.dream_job, EnthusiasmTier("dream_job", "high")),
            (thresholds.interested, EnthusiasmTier("interested", "medium")),
            (thresholds.exploring, EnthusiasmTier("exploring", "low")),
            (thresholds.decline, EnthusiasmTier("decline", "decline")),
        ]

    def tier_for(self, score: int) -> EnthusiasmTier:
        for minimum, tier in self._rows:
            if score >= minimum:
                return tier
        return EnthusiasmTier("decline", "decline")

    def recommendation_for(self, score: int) -> str:
        tier = self.tier_for(score).name
        if tier in ("dream_job", "interested"):
            return INTERESTED
        if tier == "exploring":
            return EXPLORING
        return DECLINE


class FitEvaluator:
    """Scores an opportunity with one structured generation request."""

    def __init__(
        self,
        llm_client: LLMClient,
        enthusiasm_table: EnthusiasmTable,
        model: str = PRIMARY_MODEL,
        temperature: float = 0.3,
        max_tokens: int = 2000
    ):
        self.llm_client = llm_client
        self.enthusiasm_table = enthusiasm_table
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def evaluate(self, counterpart_text: str, state: ConversationState, profile: Profile) -> Result[FitAnalysis]:
        """
        Score the opportunity described so far. Never raises.

        Args:
            counterpart_text: The counterpart's latest message
            state: Conversation whose transcript is evaluated
            profile: Static preference profile

        Returns:
            Ok with the model's analysis, or Fallback with the cautious default
        """
        prompt = FIT_PROMPT.format(
            profile=yaml.safe_dump(profile.model_dump(mode="json"), sort_keys=False, allow_unicode=True),
            transcript=sanitize_input(state.transcript()) or "(no previous messages)",
            counterpart_text=sanitize_input(counterpart_text),
        )

        try:
            response = self.llm_client.generate(
                model=self.model,
                prompt=prompt,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                json_mode=True
            )
        except LLMClientError as e:
            logger.error(f"Fit evaluation failed for {state.conversation_id}: {e.error.code}")
            return Fallback(default_fit_analysis(), reason="service_unavailable")

        parsed = extract_json(response.text)
        if parsed is None or "overallScore" not in parsed:
            logger.error(f"Fit evaluation returned malformed output for {state.conversation_id}")
            return Fallback(default_fit_analysis(), reason="malformed_output")

        score = int(round(clamp(parsed.get("overallScore"), 0, 100, default=50)))
        recommendation = str(parsed.get("recommendation") or "").strip().lower()
        if recommendation not in RECOMMENDATIONS:
            recommendation = self.enthusiasm_table.recommendation_for(score)

        analysis = FitAnalysis(
            overall_score=score,
            positives=string_list(parsed.get("positives")),
            concerns=string_list(parsed.get("concerns")),
            missing_info=string_list(parsed.get("missingInfo")),
            recommendation=recommendation,
        )
        logger.info(
            f"Fit evaluated for {state.conversation_id}: score={analysis.overall_score}, "
            f"recommendation={analysis.recommendation}"
        )
        return Ok(analysis)
