"""
Reply composition for recruiter conversations.

One prompt is rendered from the configured master template, sent for
generation and then checked twice: deterministic checks first
(OutputEvaluator), then a generative validator that also confirms the reply
language. A failing reply is regenerated once at a lower temperature; if
that fails too, the configured fallback reply for the language is used.
"""
import logging
from typing import Dict, List, Optional

from config import PRIMARY_MODEL, VALIDATION_MODEL
from models.conversation import ConversationState, Phase
from models.fit import FitAnalysis
from models.message import Message
from models.profile import Profile, PromptConfig
from models.result import Ok, Fallback, Result
from models.strategy import Strategy
from services.fit_evaluator import EnthusiasmTable
from services.language_detector import UNKNOWN
from services.llm_client import LLMClient, LLMClientError
from services.output_evaluator import OutputEvaluator
from services.prompt_template import PromptTemplate
from services.text_utils import sanitize_input, extract_json, string_list

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_REPLY = (
    "Thank you for reaching out. I'd be happy to learn more about this opportunity. "
    "Could you share some details about the role and company?"
)

LANGUAGE_NAMES = {
    "nl": "Dutch",
    "en": "English",
    "de": "German",
    "fr": "French",
    "es": "Spanish",
    "it": "Italian",
    "pt": "Portuguese",
}

PHASE_GUIDANCE = {
    Phase.INITIAL: [
        "Objective: establish interest and gather key information",
        "Ask professional qualification questions about the role, the company and the basic requirements",
    ],
    Phase.FOLLOW_UP: [
        "Objective: deeper evaluation of the opportunity",
        "First respond to what the recruiter just said, then ask targeted questions based on the fit analysis",
    ],
    Phase.DECISION: [
        "Objective: clear next steps or a polite decline",
        "Communicate your level of interest directly and agree on the next step",
    ],
}

MAX_QUESTIONS = 5
HISTORY_TURNS = 6

VALIDATION_PROMPT = """Review this reply to a recruiter before it is sent.

Check that it:
- is professional and business-focused
- does not share a phone number or agree to a phone call
- does not mention being an AI or an assistant
- does not reveal salary expectations
- is written in the expected language

Reply to validate: "{reply}"
Expected language: {language}
IMPORTANT: the reply MUST be written in {language_name}. A reply in another language fails.

Return JSON only: {{"passed": true|false, "issues": ["..."], "language_match": true|false}}"""


class ResponseComposer:
    """Renders, generates and validates the outbound reply."""

    def __init__(
        self,
        llm_client: LLMClient,
        profile: Profile,
        prompt_config: PromptConfig,
        model: str = PRIMARY_MODEL,
        validation_model: str = VALIDATION_MODEL,
        temperature: float = 0.7,
        max_tokens: int = 800
    ):
        self.llm_client = llm_client
        self.profile = profile
        self.prompt_config = prompt_config
        self.model = model
        self.validation_model = validation_model
        self.temperature = temperature
        self.max_tokens = max_tokens

        self.template = PromptTemplate(prompt_config.prompt_template)
        self.enthusiasm_table = EnthusiasmTable(prompt_config.decision_thresholds)
        self.output_evaluator = OutputEvaluator(
            max_words=prompt_config.quality.max_response_words,
            avoid_phrases=prompt_config.avoid_phrases
        )

    def compose(
        self,
        message: Message,
        category: str,
        state: ConversationState,
        strategy: Strategy,
        fit: Optional[FitAnalysis],
        detected_language: str
    ) -> Result[str]:
        """
        Produce the reply to ``message``. Never returns an empty reply.

        Returns:
            Ok with a validated reply, or Fallback with the configured
            fallback reply for the detected language
        """
        language = detected_language or UNKNOWN
        prompt = self.build_prompt(message, category, state, strategy, fit, language)

        try:
            reply = self._generate(prompt, self.temperature)
        except LLMClientError as e:
            logger.error(f"Reply generation failed for {state.conversation_id}: {e.error.code}")
            return Fallback(self._with_disclosure(self.fallback_reply(language)), reason="service_unavailable")

        issues = self.check(reply, language)
        if not issues:
            return Ok(self._with_disclosure(reply))

        logger.warning(f"Reply for {state.conversation_id} failed validation: {issues}")
        if not self.prompt_config.quality.regenerate_on_low_quality:
            return Fallback(self._with_disclosure(self.fallback_reply(language)), reason="validation_failed")

        retry_temperature = max(0.3, self.temperature - 0.2)
        try:
            reply = self._generate(prompt, retry_temperature)
        except LLMClientError as e:
            logger.error(f"Reply regeneration failed for {state.conversation_id}: {e.error.code}")
            return Fallback(self._with_disclosure(self.fallback_reply(language)), reason="service_unavailable")

        issues = self.check(reply, language)
        if issues:
            logger.warning(f"Regenerated reply for {state.conversation_id} failed validation: {issues}")
            return Fallback(self._with_disclosure(self.fallback_reply(language)), reason="validation_failed")

        logger.info(f"Reply for {state.conversation_id} passed validation after regeneration")
        return Ok(self._with_disclosure(reply))

    def check(self, reply: str, language: str) -> List[str]:
        """Deterministic checks first; the generative validator only sees replies that pass them."""
        flags = self.output_evaluator.evaluate(reply, language if language != UNKNOWN else None)
        if flags:
            return flags
        return self._validate(reply, language)

    def fallback_reply(self, language: str) -> str:
        replies = self.prompt_config.fallback_replies
        return replies.get(language) or replies.get("en") or DEFAULT_FALLBACK_REPLY

    def build_prompt(
        self,
        message: Message,
        category: str,
        state: ConversationState,
        strategy: Strategy,
        fit: Optional[FitAnalysis],
        language: str
    ) -> str:
        slots = {
            "assistant_persona_context": self._persona_context(),
            "recruiter_name": message.sender_name,
            "recruiter_type": category,
            "message_content": sanitize_input(message.content),
            "detected_language": language,
            "language_instructions": self._language_instructions(language),
            "profile_summary": self._profile_summary(),
            "requirements_summary": self._requirements_summary(),
            "conversation_phase": state.phase.value,
            "conversation_history": sanitize_input(state.transcript(limit=HISTORY_TURNS)) or "(first message)",
            "strategic_approach": self._strategic_approach(category, strategy),
            "strategic_goals": self._strategic_goals(strategy),
            "fit_summary": self._fit_summary(fit),
            "enthusiasm_guidance": self._enthusiasm_guidance(fit),
            "instructions_list": self._instructions_list(state.phase),
            "questions_list": self._questions_list(category, strategy),
            "assistant_behavior_rules": self._behavior_rules(),
        }
        return self.template.render(slots)

    def _generate(self, prompt: str, temperature: float) -> str:
        response = self.llm_client.generate(
            model=self.model,
            prompt=prompt,
            max_tokens=self.max_tokens,
            temperature=temperature
        )
        return response.text.strip().strip('"').strip()

    def _validate(self, reply: str, language: str) -> List[str]:
        prompt = VALIDATION_PROMPT.format(
            reply=reply,
            language=language,
            language_name=LANGUAGE_NAMES.get(language, "the same language as the recruiter's message"),
        )
        try:
            response = self.llm_client.generate(
                model=self.validation_model,
                prompt=prompt,
                max_tokens=500,
                temperature=0.1,
                json_mode=True
            )
        except LLMClientError as e:
            # Validator outages must not block replies; deterministic checks already ran
            logger.error(f"Reply validation unavailable ({e.error.code}), accepting reply")
            return []

        parsed = extract_json(response.text)
        if parsed is None:
            logger.warning("Reply validation returned malformed output, accepting reply")
            return []

        issues = string_list(parsed.get("issues"))
        if parsed.get("language_match") is False:
            issues.append("language_mismatch")
        if parsed.get("passed") is False or parsed.get("language_match") is False:
            return issues or ["validator_rejected"]
        return []

    def _with_disclosure(self, reply: str) -> str:
        disclosure = self.profile.ai_disclosure
        if disclosure.enabled and disclosure.message:
            return f"{reply}\n\n{disclosure.message}"
        return reply

    def _persona_context(self) -> str:
        if self.profile.assistant.persona:
            return self.profile.assistant.persona.strip()
        personal = self.profile.personal
        return (
            f"You are {personal.name}, a {personal.current_role} living in {personal.location}. "
            f"You are replying to a recruiter on a professional networking platform."
        )

    def _language_instructions(self, language: str) -> str:
        behavior = self.prompt_config.language_behavior.get(language)
        if behavior is None:
            return "Respond in the same language as the recruiter's message."

        name = LANGUAGE_NAMES.get(language, language)
        lines = [
            f"Respond in {name}.",
            f"Tone: {behavior.tone}",
        ]
        if behavior.approach:
            lines.append(f"Approach: {behavior.approach}")
        lines.append(f"Close with: {behavior.closing_format.replace('{name}', self.profile.personal.name)}")

        openings = self.prompt_config.preferred_openings.get(language)
        if openings:
            lines.append(f"Good openings: {' / '.join(openings)}")
        avoid = self.prompt_config.avoid_phrases.get(language)
        if avoid:
            lines.append(f"Never use: {' / '.join(avoid)}")
        return "\n".join(lines)

    def _profile_summary(self) -> str:
        personal = self.profile.personal
        current = self.profile.current_situation
        lines = [
            f"- Name: {personal.name}",
            f"- Role: {personal.current_role}",
            f"- Location (where you live): {personal.location}",
            f"- Current: {current.salary:,} {current.currency}/year, {current.hours_per_week}h/week",
            f"- Skills: {', '.join(self.profile.skills)}",
            f"- Interests: {', '.join(self.profile.interests)}",
        ]
        if self.profile.dream_job:
            lines.append(f"- Dream job: {self.profile.dream_job.title}")
        return "\n".join(lines)

    def _requirements_summary(self) -> str:
        req = self.profile.requirements
        company_types = self.profile.preferences.company_types
        lines = [
            f"- Salary: {req.salary.minimum:,}+ {req.salary.currency} (ideal: {req.salary.ideal:,}), never reveal these numbers",
            f"- Schedule: {req.schedule.days_per_week} days/week, {req.schedule.hours_per_day}h/day",
            f"- Location: max {req.location.max_commute_minutes} min commute, "
            f"{req.location.remote_days_min}+ remote days, at most {req.location.office_days_max} office days",
            f"- Must have: {', '.join(req.must_have)}",
            f"- Nice to have: {', '.join(req.nice_to_have)}",
        ]
        if company_types.prefer:
            lines.append(f"- Preferred companies: {', '.join(company_types.prefer)}")
        if company_types.avoid:
            lines.append(f"- Companies to avoid: {', '.join(company_types.avoid)}")
        return "\n".join(lines)

    def _strategic_approach(self, category: str, strategy: Strategy) -> str:
        approach = self.prompt_config.strategic_approaches.get(category)
        parts = []
        if approach:
            parts.append(f"{approach.approach} ({approach.question_style})" if approach.question_style else approach.approach)
        parts.append(f"Recruiter style: {strategy.counterpart_profile.style}")
        if strategy.counterpart_profile.style == "pushy":
            parts.append("Deflect pressure for calls or quick commitments politely and keep the conversation in writing")
        return "\n".join(parts)

    @staticmethod
    def _strategic_goals(strategy: Strategy) -> str:
        lines = [f"{goal.priority}. {goal.type} ({goal.status})" for goal in strategy.goals]
        for action in strategy.next_actions[:3]:
            lines.append(f"- Next: {action.action}: {action.content}")
        return "\n".join(lines)

    @staticmethod
    def _fit_summary(fit: Optional[FitAnalysis]) -> str:
        if fit is None:
            return "Not evaluated yet"
        lines = [f"Score: {fit.overall_score}/100, recommendation: {fit.recommendation}"]
        if fit.positives:
            lines.append(f"Positives: {', '.join(fit.positives)}")
        if fit.concerns:
            lines.append(f"Concerns: {', '.join(fit.concerns)}")
        if fit.missing_info:
            lines.append(f"Missing info: {', '.join(fit.missing_info)}")
        return "\n".join(lines)

    def _enthusiasm_guidance(self, fit: Optional[FitAnalysis]) -> str:
        levels = self.prompt_config.enthusiasm_levels
        if fit is None:
            return levels.medium
        tier = self.enthusiasm_table.tier_for(fit.overall_score)
        guidance: Dict[str, str] = {
            "high": levels.high,
            "medium": levels.medium,
            "low": levels.low,
            "decline": levels.decline,
        }
        return f"{tier.name}: {guidance[tier.enthusiasm]}"

    def _instructions_list(self, phase: Phase) -> str:
        rules = self.prompt_config.core_rules + self.prompt_config.response_structure + PHASE_GUIDANCE[phase]
        return "\n".join(f"{index}. {rule}" for index, rule in enumerate(rules, start=1))

    def _questions_list(self, category: str, strategy: Strategy) -> str:
        questions: List[str] = [gap.description for gap in strategy.information_gaps]
        approach = self.prompt_config.strategic_approaches.get(category)
        if approach:
            known = {q.lower() for q in questions}
            questions.extend(area for area in approach.focus_areas if area.lower() not in known)
        if not questions:
            return "- Ask what the role involves"
        return "\n".join(f"- {question}" for question in questions[:MAX_QUESTIONS])

    def _behavior_rules(self) -> str:
        rules = self.profile.assistant.behavior_rules
        if not rules:
            return "- Write in the first person as yourself"
        return "\n".join(f"- {rule}" for rule in rules)
