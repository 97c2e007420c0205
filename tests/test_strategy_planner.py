"""Unit tests for StrategyPlanner."""
import sys
sys.path.insert(0, 'backend')

import json
import pytest

from conftest import STRATEGY, llm_error
from models.conversation import ConversationState, ConversationTurn, MissingCounterpartTurnError, Sender
from models.fit import FitAnalysis
from models.profile import DecisionThresholds
from services.strategy_planner import StrategyPlanner, tier_for_gap


@pytest.fixture
def state():
    return ConversationState(
        conversation_id="linkedin-mark-jansen",
        turns=[
            ConversationTurn(Sender.COUNTERPART, "Hi! Great Platform Engineer role at a fintech client."),
            ConversationTurn(Sender.SELF, "Thanks, could you share more?"),
            ConversationTurn(Sender.COUNTERPART, "Sure, can we call tomorrow?"),
        ]
    )


@pytest.fixture
def planner(scripted_llm, prompt_config):
    return StrategyPlanner(
        scripted_llm,
        prompt_config.decision_thresholds,
        hierarchy=prompt_config.information_hierarchy
    )


def _plan(**overrides):
    payload = {
        "goals": [
            {"type": "extract_compensation", "priority": 2, "status": "pending"},
            {"type": "maintain_channel_control", "priority": 1, "status": "in_progress"},
            {"type": "make_coffee", "priority": 0},
        ],
        "next_actions": [
            {"action": "deflect_pressure", "content": "Keep it in writing", "reasoning": "Call requested"},
            {"action": "dance", "content": "?"},
        ],
        "information_gaps": ["Salary range", "Company culture", "Work arrangement"],
        "recruiter_profile": {"style": "Pushy", "responsiveness": "high", "credibility": "sky-high"},
        "conversation_phase": "information_gathering",
    }
    payload.update(overrides)
    return json.dumps(payload)


class TestTierForGap:

    @pytest.mark.parametrize("gap,tier", [
        ("Role responsibilities and technical requirements", "critical"),
        ("Work arrangement (remote/hybrid/onsite)", "critical"),
        ("work arrangement details", "critical"),
        ("Salary range", "important"),
        ("salary details", "important"),
        ("Team size and structure", "important"),
        ("Technologies and tools used", "important"),
        ("Company culture and values", "valuable"),
        ("Timeline for hiring process", "valuable"),
        ("Something else entirely", "valuable"),
    ])
    def test_tiers(self, gap, tier):
        assert tier_for_gap(gap) == tier


class TestStrategyPlanner:

    def test_plan_normalizes_model_output(self, scripted_llm, planner, state, profile):
        scripted_llm.on(STRATEGY, _plan())

        result = planner.plan(state, None, profile)

        assert not result.is_fallback
        strategy = result.value
        assert [goal.type for goal in strategy.goals] == ["maintain_channel_control", "extract_compensation"]
        assert [goal.priority for goal in strategy.goals] == [1, 2]
        assert [action.action for action in strategy.next_actions] == ["deflect_pressure"]
        assert strategy.counterpart_profile.style == "pushy"
        assert strategy.counterpart_profile.responsiveness == "high"
        assert strategy.counterpart_profile.credibility == "medium"
        assert strategy.phase == "information_gathering"
        assert strategy.enter_decision is False

        call = scripted_llm.calls[0]
        assert call["json_mode"] is True
        assert call["temperature"] == 0.3
        assert "Sure, can we call tomorrow?" in call["prompt"]

    def test_gaps_are_tiered_and_ordered(self, scripted_llm, planner, state, profile):
        scripted_llm.on(STRATEGY, _plan())

        gaps = planner.plan(state, None, profile).value.information_gaps

        assert [(gap.description, gap.tier) for gap in gaps] == [
            ("Work arrangement", "critical"),
            ("Salary range", "important"),
            ("Company culture", "valuable"),
        ]

    def test_gaps_merge_fit_missing_info_without_duplicates(self, scripted_llm, planner, state, profile):
        state.fit_analysis = FitAnalysis(
            overall_score=60, missing_info=["salary range", "team_size"], recommendation="exploring"
        )
        scripted_llm.on(STRATEGY, _plan(information_gaps=["Salary range"]))

        gaps = planner.plan(state, None, profile).value.information_gaps

        assert [gap.description for gap in gaps] == ["Salary range", "team size"]

    def test_decline_forces_graceful_exit_first(self, scripted_llm, planner, state, profile):
        state.fit_analysis = FitAnalysis(overall_score=40, concerns=["5 office days"], recommendation="decline")
        scripted_llm.on(STRATEGY, _plan())

        strategy = planner.plan(state, None, profile).value

        assert strategy.primary_goal == "graceful_exit"
        assert strategy.goals[0].priority == 1
        assert strategy.enter_decision is True
        assert strategy.phase == "decision_making"

    def test_strong_interest_enters_decision(self, scripted_llm, planner, state, profile):
        state.fit_analysis = FitAnalysis(overall_score=85, recommendation="interested")
        scripted_llm.on(STRATEGY, _plan())

        assert planner.plan(state, None, profile).value.enter_decision is True

    @pytest.mark.parametrize("score,recommendation,expected", [
        (70, "interested", True),
        (69, "interested", False),
        (49, "decline", True),
        (50, "decline", False),
        (95, "exploring", False),
        (10, "exploring", False),
    ])
    def test_decision_policy(self, scripted_llm, prompt_config, score, recommendation, expected):
        planner = StrategyPlanner(scripted_llm, DecisionThresholds())
        fit = FitAnalysis(overall_score=score, recommendation=recommendation)
        assert planner.should_enter_decision(fit) is expected

    def test_no_fit_never_enters_decision(self, planner):
        assert planner.should_enter_decision(None) is False

    def test_empty_goals_default_to_qualify(self, scripted_llm, planner, state, profile):
        scripted_llm.on(STRATEGY, _plan(goals=[]))

        assert planner.plan(state, None, profile).value.primary_goal == "qualify_opportunity"

    def test_service_failure_returns_default_strategy(self, scripted_llm, planner, state, profile):
        scripted_llm.on(STRATEGY, llm_error("RATE_LIMIT_ERROR"))

        result = planner.plan(state, None, profile)

        assert result.is_fallback
        assert result.reason == "service_unavailable"
        strategy = result.value
        assert [goal.type for goal in strategy.goals] == ["qualify_opportunity"]
        assert strategy.phase == "information_gathering"
        assert strategy.counterpart_profile.style == "unclear"
        assert [gap.description for gap in strategy.information_gaps] == [
            "Role responsibilities and technical requirements",
            "Company name and industry (for external recruiters)",
            "Work arrangement (remote/hybrid/onsite)",
            "Salary range (ask for THEIR budget, never reveal ours)",
        ]

    def test_default_strategy_still_applies_decision_policy(self, scripted_llm, planner, state, profile):
        state.fit_analysis = FitAnalysis(overall_score=92, recommendation="interested")
        scripted_llm.on(STRATEGY, "not json at all")

        result = planner.plan(state, None, profile)

        assert result.is_fallback
        assert result.reason == "malformed_output"
        assert result.value.enter_decision is True
        assert result.value.phase == "decision_making"

    def test_missing_counterpart_turn_raises(self, scripted_llm, planner, profile):
        state = ConversationState(
            conversation_id="linkedin-nobody",
            turns=[ConversationTurn(Sender.SELF, "Hello?")]
        )

        with pytest.raises(MissingCounterpartTurnError) as exc_info:
            planner.plan(state, None, profile)

        assert exc_info.value.conversation_id == "linkedin-nobody"
        assert scripted_llm.calls == []

    def test_explicit_latest_turn_is_used(self, scripted_llm, planner, profile):
        state = ConversationState(conversation_id="linkedin-nobody")
        scripted_llm.on(STRATEGY, _plan())

        result = planner.plan(state, ConversationTurn(Sender.COUNTERPART, "Open to a chat?"), profile)

        assert not result.is_fallback
        assert "Open to a chat?" in scripted_llm.calls[0]["prompt"]

    @pytest.mark.parametrize("priority", ["Infinity", "-Infinity", "NaN", '"first"', "null"])
    def test_non_numeric_goal_priority_is_recovered(self, scripted_llm, planner, state, profile, priority):
        scripted_llm.on(
            STRATEGY,
            '{"goals": [{"type": "qualify_opportunity", "priority": %s}, '
            '{"type": "extract_compensation", "priority": 2}]}' % priority
        )

        result = planner.plan(state, None, profile)

        assert not result.is_fallback
        assert {goal.type for goal in result.value.goals} == {"qualify_opportunity", "extract_compensation"}
        assert sorted(goal.priority for goal in result.value.goals) == [1, 2]
