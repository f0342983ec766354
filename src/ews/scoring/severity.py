# Flowsheet colouring levels derived from NEWS2 sub-scores.
#   sub-score 3 -> severe, 2 -> moderate, 0-1 -> ok
# A result is as severe as its worst parameter.

from __future__ import annotations
from typing import Dict, Mapping

from src.ews.models.clinical_types import NEWS2Result

LEVELS = ("ok", "moderate", "severe")   # ascending


def subscore_level(score: int) -> str:
    return LEVELS[max(0, min(score, 3) - 1)]


def parameter_levels(result: NEWS2Result) -> Dict[str, str]:
    """Per-parameter level for flowsheet colouring, keyed by display label."""
    return {s.parameter: subscore_level(s.score) for s in result.sub_scores}


def severity_rank(level: str) -> int:
    """Position in LEVELS; unknown levels raise ValueError."""
    return LEVELS.index(level)


def overall_level(levels: Mapping[str, str]) -> str:
    return max(levels.values(), key=severity_rank, default="ok")
