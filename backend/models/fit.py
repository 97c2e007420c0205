"""Opportunity fit models."""
from dataclasses import dataclass, field
from typing import List

INTERESTED = "interested"
EXPLORING = "exploring"
DECLINE = "decline"

RECOMMENDATIONS = (INTERESTED, EXPLORING, DECLINE)


@dataclass
class FitAnalysis:
    """How well an opportunity matches the static preference profile."""
    overall_score: int
    positives: List[str] = field(default_factory=list)
    concerns: List[str] = field(default_factory=list)
    missing_info: List[str] = field(default_factory=list)
    recommendation: str = EXPLORING


@dataclass(frozen=True)
class EnthusiasmTier:
    """A row of the score-to-enthusiasm table."""
    name: str        # dream_job | interested | exploring | decline
    enthusiasm: str  # high | medium | low | decline
