"""In-memory conversation store for multi-turn conversation support."""
import logging
from typing import Dict, Iterable, Optional

from models.conversation import ConversationState, ConversationTurn, Phase, Sender
from models.fit import FitAnalysis

logger = logging.getLogger(__name__)


class ConversationStore:
    """
    Owns every ConversationState, keyed by conversation identity.

    Phase only moves forward while a state lives: ``initial`` on creation,
    ``follow_up`` once the turn count exceeds ``phase_advance_turns``, and
    ``decision`` only when a caller advances it explicitly. ``clear`` is the
    one way back to ``initial``.

    The store does not deduplicate turns. Callers must not append a
    counterpart turn whose trimmed content equals the immediately preceding
    counterpart turn; ``is_duplicate_counterpart_turn`` performs that check.
    """

    def __init__(self, phase_advance_turns: int = 2):
        self.phase_advance_turns = phase_advance_turns
        self._states: Dict[str, ConversationState] = {}

    def get(self, conversation_id: str) -> Optional[ConversationState]:
        return self._states.get(conversation_id)

    def append_turn(self, conversation_id: str, turn: ConversationTurn) -> ConversationState:
        """
        Append a turn, creating the conversation on first use.

        A counterpart turn invalidates the cached fit analysis.
        """
        state = self._states.get(conversation_id)
        if state is None:
            state = ConversationState(conversation_id=conversation_id)
            self._states[conversation_id] = state
            logger.info(f"Created conversation state: {conversation_id}")

        state.turns.append(turn)
        if turn.sender == Sender.COUNTERPART:
            state.fit_analysis = None

        if len(state.turns) > self.phase_advance_turns:
            self._raise_phase(state, Phase.FOLLOW_UP)

        logger.debug(f"Appended {turn.sender.value} turn to {conversation_id} ({len(state.turns)} turns)")
        return state

    def replace_history(self, conversation_id: str, turns: Iterable[ConversationTurn]) -> Optional[ConversationState]:
        """Resynchronize a conversation from an external view of the thread."""
        self.clear(conversation_id)
        for turn in turns:
            self.append_turn(conversation_id, turn)
        state = self.get(conversation_id)
        logger.info(
            f"Conversation {conversation_id} resynchronized: "
            f"{len(state.turns) if state else 0} turns, phase={state.phase.value if state else None}"
        )
        return state

    def clear(self, conversation_id: str) -> None:
        if self._states.pop(conversation_id, None) is not None:
            logger.info(f"Cleared conversation state: {conversation_id}")

    def advance_phase(self, conversation_id: str, phase: Phase) -> Optional[ConversationState]:
        """Move a conversation to ``phase`` if that is later than its current phase."""
        state = self._states.get(conversation_id)
        if state is not None:
            self._raise_phase(state, phase)
        return state

    def cache_fit(self, conversation_id: str, fit: FitAnalysis) -> None:
        state = self._states.get(conversation_id)
        if state is not None:
            state.fit_analysis = fit

    def is_duplicate_counterpart_turn(self, conversation_id: str, content: str) -> bool:
        """True when ``content`` repeats the last turn and that turn came from the counterpart."""
        state = self._states.get(conversation_id)
        if state is None or not state.turns:
            return False
        last = state.turns[-1]
        return last.sender == Sender.COUNTERPART and last.content.strip() == content.strip()

    @staticmethod
    def _raise_phase(state: ConversationState, phase: Phase) -> None:
        if phase.rank > state.phase.rank:
            logger.info(f"Conversation {state.conversation_id} phase {state.phase.value} -> {phase.value}")
            state.phase = phase
