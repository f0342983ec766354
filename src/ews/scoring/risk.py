"""Clinical risk banding from the aggregate score and the red-score rule."""

from __future__ import annotations

from src.ews.config.thresholds import CLINICAL_RISK_THRESHOLDS
from src.ews.models.clinical_types import ClinicalRisk


def classify(total_score: int, has_red_score: bool = False) -> ClinicalRisk:
    """
    Aggregate thresholds take precedence over the red-score rule:
      - High: total >= 7 (red score irrelevant)
      - Medium: total 5-6 (a red score does not lift it to High)
      - Low-Medium: total < 5 with any single parameter = 3
      - Low: otherwise
    """
    if total_score >= CLINICAL_RISK_THRESHOLDS["high"]:
        return ClinicalRisk.HIGH
    if total_score >= CLINICAL_RISK_THRESHOLDS["medium"]:
        return ClinicalRisk.MEDIUM
    if has_red_score:
        return ClinicalRisk.LOW_MEDIUM
    return ClinicalRisk.LOW


def risk_trigger(total_score: int, has_red_score: bool = False) -> str:
    """Name of the rule that decided the band."""
    if total_score >= CLINICAL_RISK_THRESHOLDS["high"]:
        return "aggregate_score_7_or_more"
    if total_score >= CLINICAL_RISK_THRESHOLDS["medium"]:
        return "aggregate_score_5_to_6"
    if has_red_score:
        return "red_score_single_parameter_3"
    return "aggregate_score_0_to_4"
