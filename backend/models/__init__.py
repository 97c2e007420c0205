"""Data models for the recruiter conversation assistant."""
from .message import Message, conversation_id_for
from .conversation import (
    ConversationState,
    ConversationTurn,
    MissingCounterpartTurnError,
    Phase,
    Sender,
)
from .fit import FitAnalysis, EnthusiasmTier
from .strategy import Strategy, Goal, NextAction, InformationGap, CounterpartProfile
from .response_record import ResponseRecord
from .result import Ok, Fallback, Result
from .profile import Profile, PromptConfig
from .api import InboundMessageRequest, ProcessedMessageResponse, ResponseRecordPayload, TurnPayload

__all__ = [
    "Message",
    "conversation_id_for",
    "ConversationState",
    "ConversationTurn",
    "MissingCounterpartTurnError",
    "Phase",
    "Sender",
    "FitAnalysis",
    "EnthusiasmTier",
    "Strategy",
    "Goal",
    "NextAction",
    "InformationGap",
    "CounterpartProfile",
    "ResponseRecord",
    "Ok",
    "Fallback",
    "Result",
    "Profile",
    "PromptConfig",
    "InboundMessageRequest",
    "ProcessedMessageResponse",
    "ResponseRecordPayload",
    "TurnPayload",
]
