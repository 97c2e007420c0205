"""Named-slot prompt templates, checked against the known slot producers."""
import logging
from string import Formatter
from typing import Dict, Iterable, List

logger = logging.getLogger(__name__)

# Every slot the response composer knows how to fill
KNOWN_SLOTS = (
    "assistant_persona_context",
    "recruiter_name",
    "recruiter_type",
    "message_content",
    "detected_language",
    "language_instructions",
    "profile_summary",
    "requirements_summary",
    "conversation_phase",
    "conversation_history",
    "strategic_approach",
    "strategic_goals",
    "fit_summary",
    "enthusiasm_guidance",
    "instructions_list",
    "questions_list",
    "assistant_behavior_rules",
)


class TemplateSlotError(ValueError):
    """Raised when a template is malformed or names a slot nothing produces."""

    def __init__(self, message: str, slots: List[str]):
        self.slots = slots
        super().__init__(message)


class PromptTemplate:
    """
    A prompt template with ``{slot}`` placeholders.

    Slots are discovered once at construction and must all be producible,
    so a typo in a configured template fails at startup instead of
    rendering a literal ``{slot}`` into a live prompt.
    """

    def __init__(self, template: str, known_slots: Iterable[str] = KNOWN_SLOTS):
        self.template = template
        self.known_slots = frozenset(known_slots)
        self.slots = self._parse_slots(template)

        unknown = sorted(set(self.slots) - self.known_slots)
        if unknown:
            raise TemplateSlotError(f"Template uses unknown slots: {', '.join(unknown)}", unknown)

    @staticmethod
    def _parse_slots(template: str) -> List[str]:
        slots: List[str] = []
        try:
            parsed = list(Formatter().parse(template))
        except ValueError as e:
            raise TemplateSlotError(f"Malformed template: {e}", []) from e

        for _, field_name, format_spec, conversion in parsed:
            if field_name is None:
                continue
            if not field_name.isidentifier() or format_spec or conversion:
                raise TemplateSlotError(f"Unsupported placeholder: {{{field_name}}}", [field_name])
            if field_name not in slots:
                slots.append(field_name)
        return slots

    def render(self, values: Dict[str, str]) -> str:
        """
        Fill every slot of the template.

        Raises:
            TemplateSlotError: A slot used by the template has no value
        """
        missing = [slot for slot in self.slots if slot not in values]
        if missing:
            raise TemplateSlotError(f"No value for slots: {', '.join(missing)}", missing)
        return self.template.format_map({slot: values[slot] for slot in self.slots})
