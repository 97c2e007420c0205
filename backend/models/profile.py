"""Typed schemas for the static profile and the prompt configuration."""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class PersonalInfo(BaseModel):
    name: str
    current_role: str
    location: str


class CurrentSituation(BaseModel):
    salary: int
    currency: str = "EUR"
    hours_per_week: int = 40


class DreamJob(BaseModel):
    title: str
    description: str = ""


class SalaryRequirement(BaseModel):
    minimum: int
    ideal: int
    currency: str = "EUR"

    @model_validator(mode="after")
    def check_range(self) -> "SalaryRequirement":
        if self.minimum > self.ideal:
            raise ValueError("salary minimum must not exceed the ideal salary")
        return self


class ScheduleRequirement(BaseModel):
    days_per_week: int = Field(ge=1, le=7)
    hours_per_day: int = Field(ge=1, le=24)


class LocationRequirement(BaseModel):
    max_commute_minutes: int
    remote_days_min: int = 0
    office_days_max: int = 5


class Requirements(BaseModel):
    salary: SalaryRequirement
    schedule: ScheduleRequirement
    location: LocationRequirement
    must_have: List[str] = Field(default_factory=list)
    nice_to_have: List[str] = Field(default_factory=list)


class CompanyTypes(BaseModel):
    prefer: List[str] = Field(default_factory=list)
    avoid: List[str] = Field(default_factory=list)


class Preferences(BaseModel):
    company_types: CompanyTypes = Field(default_factory=CompanyTypes)


class AssistantSettings(BaseModel):
    persona: Optional[str] = None
    behavior_rules: List[str] = Field(default_factory=list)


class AIDisclosure(BaseModel):
    enabled: bool = False
    message: str = "AI-assisted response"


class Profile(BaseModel):
    """Personal identity, requirements and preferences. Read-only during a run."""
    personal: PersonalInfo
    current_situation: CurrentSituation
    dream_job: Optional[DreamJob] = None
    requirements: Requirements
    skills: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    preferences: Preferences = Field(default_factory=Preferences)
    assistant: AssistantSettings = Field(default_factory=AssistantSettings)
    ai_disclosure: AIDisclosure = Field(default_factory=AIDisclosure)


class LanguageBehavior(BaseModel):
    tone: str
    approach: str = ""
    closing_format: str = "{name}"


class EnthusiasmLevels(BaseModel):
    high: str
    medium: str
    low: str
    decline: str


class DecisionThresholds(BaseModel):
    dream_job: int = 90
    interested: int = 70
    exploring: int = 50
    decline: int = 30

    @model_validator(mode="after")
    def check_order(self) -> "DecisionThresholds":
        if not (100 >= self.dream_job > self.interested > self.exploring > self.decline >= 0):
            raise ValueError("decision thresholds must be strictly descending within 0..100")
        return self


class StrategicApproach(BaseModel):
    approach: str
    focus_areas: List[str] = Field(default_factory=list)
    question_style: str = ""


class InformationHierarchy(BaseModel):
    tier_1_critical: List[str]
    tier_2_important: List[str]
    tier_3_valuable: List[str]


class QualitySettings(BaseModel):
    min_confidence_classification: float = Field(default=0.6, ge=0.0, le=1.0)
    reliable_language_confidence: float = Field(default=0.7, ge=0.0, le=1.0)
    phase_advance_turns: int = Field(default=2, ge=0)
    max_response_words: int = Field(default=150, gt=0)
    regenerate_on_low_quality: bool = True


class PromptConfig(BaseModel):
    """Behavioral rules, per-language tone and the master prompt template."""
    core_rules: List[str]
    response_structure: List[str] = Field(default_factory=list)
    avoid_phrases: Dict[str, List[str]] = Field(default_factory=dict)
    preferred_openings: Dict[str, List[str]] = Field(default_factory=dict)
    language_behavior: Dict[str, LanguageBehavior] = Field(default_factory=dict)
    enthusiasm_levels: EnthusiasmLevels
    decision_thresholds: DecisionThresholds = Field(default_factory=DecisionThresholds)
    strategic_approaches: Dict[str, StrategicApproach] = Field(default_factory=dict)
    information_hierarchy: InformationHierarchy
    quality: QualitySettings = Field(default_factory=QualitySettings)
    fallback_replies: Dict[str, str] = Field(default_factory=dict)
    prompt_template: str
