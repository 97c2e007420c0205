"""Strategy planner output models."""
from dataclasses import dataclass, field
from typing import List

# Goal types, in their default priority order
QUALIFY_OPPORTUNITY = "qualify_opportunity"
EXTRACT_COMPENSATION = "extract_compensation"
MAINTAIN_CHANNEL_CONTROL = "maintain_channel_control"
GRACEFUL_EXIT = "graceful_exit"

GOAL_TYPES = (QUALIFY_OPPORTUNITY, EXTRACT_COMPENSATION, MAINTAIN_CHANNEL_CONTROL, GRACEFUL_EXIT)

# Information gap tiers
CRITICAL = "critical"
IMPORTANT = "important"
VALUABLE = "valuable"

GAP_TIERS = (CRITICAL, IMPORTANT, VALUABLE)


@dataclass
class Goal:
    type: str
    priority: int
    status: str = "pending"  # pending | in_progress | completed


@dataclass
class NextAction:
    action: str  # ask_question | express_interest | request_info | deflect_pressure | close_conversation
    content: str
    reasoning: str = ""


@dataclass
class InformationGap:
    description: str
    tier: str = VALUABLE


@dataclass
class CounterpartProfile:
    style: str = "unclear"          # pushy | collaborative | professional | unclear
    responsiveness: str = "medium"  # high | medium | low
    credibility: str = "medium"     # high | medium | low


@dataclass
class Strategy:
    """Per-cycle plan for the next reply. Never persisted."""
    goals: List[Goal] = field(default_factory=list)
    next_actions: List[NextAction] = field(default_factory=list)
    information_gaps: List[InformationGap] = field(default_factory=list)
    counterpart_profile: CounterpartProfile = field(default_factory=CounterpartProfile)
    phase: str = "information_gathering"
    enter_decision: bool = False

    @property
    def primary_goal(self) -> str:
        return self.goals[0].type if self.goals else QUALIFY_OPPORTUNITY
