"""Conversation data models."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .fit import FitAnalysis


class Sender(str, Enum):
    """Who wrote a turn."""
    SELF = "self"
    COUNTERPART = "counterpart"


class Phase(str, Enum):
    """Coarse conversational stage, ordered from first contact to decision."""
    INITIAL = "initial"
    FOLLOW_UP = "follow_up"
    DECISION = "decision"

    @property
    def rank(self) -> int:
        return _PHASE_ORDER.index(self)


_PHASE_ORDER = [Phase.INITIAL, Phase.FOLLOW_UP, Phase.DECISION]


class MissingCounterpartTurnError(LookupError):
    """Raised when an operation needs a counterpart turn and the history has none."""

    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        super().__init__(f"No counterpart turn found in conversation {conversation_id}")


@dataclass(frozen=True)
class ConversationTurn:
    """Represents a single turn in a conversation."""
    sender: Sender
    content: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class ConversationState:
    """Ordered turn history and phase marker for one counterpart."""
    conversation_id: str
    turns: List[ConversationTurn] = field(default_factory=list)
    phase: Phase = Phase.INITIAL
    fit_analysis: Optional[FitAnalysis] = None

    def latest_counterpart_turn(self) -> Optional[ConversationTurn]:
        for turn in reversed(self.turns):
            if turn.sender == Sender.COUNTERPART:
                return turn
        return None

    def recent_turns(self, limit: int) -> List[ConversationTurn]:
        return self.turns[-limit:] if limit > 0 else []

    def transcript(self, limit: Optional[int] = None) -> str:
        """Render turns as ``sender: content`` lines, optionally only the last ``limit``."""
        turns = self.turns if limit is None else self.recent_turns(limit)
        return "\n".join(f"{turn.sender.value}: {turn.content}" for turn in turns)
