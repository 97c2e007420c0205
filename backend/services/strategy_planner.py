"""
Strategic planning for the next reply in a recruiter conversation.

The planner asks the model for a multi-step analysis of the exchange (style of
the counterpart, open questions, goals) and then normalises that answer:
goals are ordered by priority, information gaps are tiered with a fixed
hierarchy, and the decision-phase policy is applied from the cached fit.
"""
import json
import logging
import re
from typing import List, Optional

from config import PRIMARY_MODEL
from models.conversation import ConversationState, ConversationTurn, MissingCounterpartTurnError
from models.fit import FitAnalysis, INTERESTED, DECLINE
from models.profile import Profile, DecisionThresholds, InformationHierarchy
from models.result import Ok, Fallback, Result
from models.strategy import (
    Strategy, Goal, NextAction, InformationGap, CounterpartProfile,
    GOAL_TYPES, QUALIFY_OPPORTUNITY, GRACEFUL_EXIT,
    CRITICAL, IMPORTANT, VALUABLE, GAP_TIERS,
)
from services.llm_client import LLMClient, LLMClientError
from services.text_utils import sanitize_input, extract_json, string_list

logger = logging.getLogger(__name__)

STYLES = {"pushy", "collaborative", "professional", "unclear"}
LEVELS = {"high", "medium", "low"}
PHASES = {"initial_contact", "information_gathering", "mutual_evaluation", "decision_making", "negotiation"}
ACTIONS = {"ask_question", "express_interest", "request_info", "deflect_pressure", "close_conversation"}

# Keywords that place a free-text gap in a tier; checked critical first
TIER_KEYWORDS = {
    CRITICAL: (
        "role", "responsibilit", "requirement", "company name", "industry", "client",
        "work arrangement", "remote", "hybrid", "onsite", "on-site", "office", "location",
    ),
    IMPORTANT: (
        "salary", "compensation", "budget", "pay", "rate", "benefit",
        "team", "technolog", "tech stack", "tools", "stack",
    ),
    VALUABLE: ("culture", "values", "growth", "advancement", "timeline", "process", "start date"),
}

STRATEGY_PROMPT = """You are an expert conversation strategist analyzing recruiter interactions on a professional networking platform.

STEP 1: RECRUITER ANALYSIS
Assess communication style (pushy/collaborative/professional/unclear), responsiveness and credibility.

STEP 2: INFORMATION GAP ANALYSIS
List critical information that is still missing: role responsibilities, company, work arrangement,
salary range, team structure, technologies, culture, hiring timeline.

STEP 3: CONVERSATION PHASE
One of: initial_contact, information_gathering, mutual_evaluation, decision_making, negotiation.

STEP 4: GOAL PRIORITIZATION
Goal types: qualify_opportunity, extract_compensation (learn THEIR range without revealing ours),
maintain_channel_control (keep the conversation in written messages, deflect calls), graceful_exit.

STEP 5: TACTICAL PLANNING
Next actions from: ask_question, express_interest, request_info, deflect_pressure, close_conversation.

CURRENT CONVERSATION:
{transcript}

LATEST RECRUITER MESSAGE:
{latest}

CANDIDATE REQUIREMENTS:
{requirements}

FIT ANALYSIS SO FAR:
{fit}

Return JSON only:
{{
  "goals": [{{"type": "goal_type", "priority": 1, "status": "pending|in_progress|completed"}}],
  "next_actions": [{{"action": "action_type", "content": "what to do", "reasoning": "why"}}],
  "information_gaps": ["missing information"],
  "recruiter_profile": {{"style": "...", "responsiveness": "high|medium|low", "credibility": "high|medium|low"}},
  "conversation_phase": "..."
}}"""


def tier_for_gap(description: str) -> str:
    lowered = description.lower()
    for tier in GAP_TIERS:
        if any(keyword in lowered for keyword in TIER_KEYWORDS[tier]):
            return tier
    return VALUABLE


class StrategyPlanner:
    """Derives goals, counterpart style and information gaps for the next reply."""

    def __init__(
        self,
        llm_client: LLMClient,
        thresholds: DecisionThresholds,
        hierarchy: Optional[InformationHierarchy] = None,
        model: str = PRIMARY_MODEL
    ):
        self.llm_client = llm_client
        self.thresholds = thresholds
        self.model = model
        if hierarchy is not None:
            salary = [item for item in hierarchy.tier_2_important if "salary" in item.lower()]
            self.fallback_gaps = list(hierarchy.tier_1_critical) + salary
        else:
            self.fallback_gaps = [
                "Role responsibilities and technical requirements",
                "Work arrangement (remote/hybrid/onsite)",
                "Salary range",
            ]

    def plan(
        self,
        state: ConversationState,
        latest_counterpart_turn: Optional[ConversationTurn],
        profile: Profile
    ) -> Result[Strategy]:
        """
        Plan the next reply.

        Raises:
            MissingCounterpartTurnError: No counterpart turn given or present in the state
        """
        latest = latest_counterpart_turn or state.latest_counterpart_turn()
        if latest is None:
            raise MissingCounterpartTurnError(state.conversation_id)

        fit = state.fit_analysis
        prompt = STRATEGY_PROMPT.format(
            transcript=sanitize_input(state.transcript()) or "(no previous messages)",
            latest=sanitize_input(latest.content),
            requirements=json.dumps(profile.requirements.model_dump(mode="json"), ensure_ascii=False),
            fit=self._describe_fit(fit),
        )

        try:
            response = self.llm_client.generate(
                model=self.model,
                prompt=prompt,
                max_tokens=1000,
                temperature=0.3,
                json_mode=True
            )
        except LLMClientError as e:
            logger.error(f"Strategy planning failed for {state.conversation_id}: {e.error.code}")
            return Fallback(self.default_strategy(fit), reason="service_unavailable")

        parsed = extract_json(response.text)
        if parsed is None:
            logger.error(f"Strategy planning returned malformed output for {state.conversation_id}")
            return Fallback(self.default_strategy(fit), reason="malformed_output")

        strategy = Strategy(
            goals=self._parse_goals(parsed.get("goals"), fit),
            next_actions=self._parse_actions(parsed.get("next_actions")),
            information_gaps=self._tier_gaps(string_list(parsed.get("information_gaps")), fit),
            counterpart_profile=self._parse_profile(parsed.get("recruiter_profile")),
            phase=self._pick(parsed.get("conversation_phase"), PHASES, "information_gathering"),
            enter_decision=self.should_enter_decision(fit),
        )
        if strategy.enter_decision:
            strategy.phase = "decision_making"

        logger.info(
            f"Strategy for {state.conversation_id}: phase={strategy.phase}, "
            f"primary_goal={strategy.primary_goal}, style={strategy.counterpart_profile.style}, "
            f"gaps={len(strategy.information_gaps)}"
        )
        return Ok(strategy)

    def should_enter_decision(self, fit: Optional[FitAnalysis]) -> bool:
        """
        Decision-phase policy.

        A conversation is ready for a decision once the fit is clearly good
        (recommended ``interested`` at or above the interested threshold) or
        clearly poor (recommended ``decline`` below the exploring threshold).
        """
        if fit is None:
            return False
        if fit.recommendation == INTERESTED and fit.overall_score >= self.thresholds.interested:
            return True
        if fit.recommendation == DECLINE and fit.overall_score < self.thresholds.exploring:
            return True
        return False

    def default_strategy(self, fit: Optional[FitAnalysis] = None) -> Strategy:
        """Deterministic plan used when the model cannot be consulted."""
        enter_decision = self.should_enter_decision(fit)
        return Strategy(
            goals=self._parse_goals([], fit),
            next_actions=[NextAction(
                action="request_info",
                content="Ask for key details about the opportunity",
                reasoning="Need basic information to evaluate fit",
            )],
            information_gaps=self._tier_gaps(list(self.fallback_gaps), fit),
            counterpart_profile=CounterpartProfile(),
            phase="decision_making" if enter_decision else "information_gathering",
            enter_decision=enter_decision,
        )

    def _parse_goals(self, raw: object, fit: Optional[FitAnalysis]) -> List[Goal]:
        goals: List[Goal] = []
        seen = set()
        for item in raw if isinstance(raw, list) else []:
            if not isinstance(item, dict):
                continue
            goal_type = str(item.get("type") or "").strip().lower()
            if goal_type not in GOAL_TYPES or goal_type in seen:
                continue
            seen.add(goal_type)
            try:
                priority = int(item.get("priority", len(goals) + 1))
            except (TypeError, ValueError, OverflowError):
                priority = len(goals) + 1
            status = self._pick(item.get("status"), {"pending", "in_progress", "completed"}, "pending")
            goals.append(Goal(type=goal_type, priority=priority, status=status))

        if not goals:
            goals.append(Goal(type=QUALIFY_OPPORTUNITY, priority=1))

        if fit is not None and fit.recommendation == DECLINE:
            goals = [g for g in goals if g.type != GRACEFUL_EXIT]
            goals.append(Goal(type=GRACEFUL_EXIT, priority=0, status="in_progress"))

        goals.sort(key=lambda g: g.priority)
        # Renumber so priorities read 1..n after sorting
        return [Goal(type=g.type, priority=i, status=g.status) for i, g in enumerate(goals, start=1)]

    def _parse_actions(self, raw: object) -> List[NextAction]:
        actions = []
        for item in raw if isinstance(raw, list) else []:
            if not isinstance(item, dict):
                continue
            action = str(item.get("action") or "").strip().lower()
            if action not in ACTIONS:
                continue
            actions.append(NextAction(
                action=action,
                content=str(item.get("content") or "").strip(),
                reasoning=str(item.get("reasoning") or "").strip(),
            ))
        return actions

    def _tier_gaps(self, gaps: List[str], fit: Optional[FitAnalysis]) -> List[InformationGap]:
        if fit is not None:
            gaps = gaps + fit.missing_info

        seen = set()
        tiered: List[InformationGap] = []
        for gap in gaps:
            key = re.sub(r"[\s_]+", " ", gap.lower()).strip()
            if not key or key in seen:
                continue
            seen.add(key)
            description = gap.replace("_", " ").strip()
            tiered.append(InformationGap(description=description, tier=tier_for_gap(description)))

        tiered.sort(key=lambda g: GAP_TIERS.index(g.tier))
        return tiered

    def _parse_profile(self, raw: object) -> CounterpartProfile:
        data = raw if isinstance(raw, dict) else {}
        return CounterpartProfile(
            style=self._pick(data.get("style"), STYLES, "unclear"),
            responsiveness=self._pick(data.get("responsiveness"), LEVELS, "medium"),
            credibility=self._pick(data.get("credibility"), LEVELS, "medium"),
        )

    @staticmethod
    def _pick(value: object, allowed: set, default: str) -> str:
        normalized = str(value or "").strip().lower()
        return normalized if normalized in allowed else default

    @staticmethod
    def _describe_fit(fit: Optional[FitAnalysis]) -> str:
        if fit is None:
            return "Not evaluated yet"
        return (
            f"Score: {fit.overall_score}/100, recommendation: {fit.recommendation}\n"
            f"Concerns: {', '.join(fit.concerns) or 'none'}\n"
            f"Missing info: {', '.join(fit.missing_info) or 'none'}"
        )
