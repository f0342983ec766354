from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, Tuple, Union

from src.ews.models.clinical_types import ClinicalRisk, EscalationLevel


@dataclass(frozen=True)
class EscalationAdvice:
    risk: ClinicalRisk
    escalation_level: EscalationLevel
    title: str
    frequency: str
    observation_interval: timedelta
    recommendation: str
    actions: Tuple[str, ...]


ESCALATION_PROTOCOL: Dict[ClinicalRisk, EscalationAdvice] = {
    ClinicalRisk.LOW: EscalationAdvice(
        risk=ClinicalRisk.LOW,
        escalation_level=EscalationLevel.ROUTINE,
        title="Routine Monitoring",
        frequency="Minimum every 12 hours",
        observation_interval=timedelta(hours=12),
        recommendation="Continue routine monitoring (minimum 12-hourly observations)",
        actions=(
            "Continue routine NEWS monitoring",
            "Document observations as per protocol",
        ),
    ),
    ClinicalRisk.LOW_MEDIUM: EscalationAdvice(
        risk=ClinicalRisk.LOW_MEDIUM,
        escalation_level=EscalationLevel.INCREASED,
        title="Increased Observation",
        frequency="Minimum every 1 hour",
        observation_interval=timedelta(hours=1),
        recommendation=(
            "Increase observation frequency to minimum 1-hourly. Inform registered "
            "nurse in charge, who must assess the patient and decide whether more "
            "frequent monitoring and/or escalation of clinical care is required."
        ),
        actions=(
            "Inform registered nurse in charge",
            "RN to assess and decide on escalation",
            "Increase monitoring frequency",
        ),
    ),
    ClinicalRisk.MEDIUM: EscalationAdvice(
        risk=ClinicalRisk.MEDIUM,
        escalation_level=EscalationLevel.URGENT,
        title="Urgent Clinical Review",
        frequency="Minimum every 1 hour",
        observation_interval=timedelta(hours=1),
        recommendation=(
            "Urgent clinical review by ward-based doctor or acute team nurse. "
            "Consider escalation to a team with critical-care skills "
            "(e.g. critical care outreach team)."
        ),
        actions=(
            "Urgent assessment by ward-based doctor or acute team nurse",
            "Consider escalation to critical care outreach",
            "Prepare ISBAR handover if escalating",
        ),
    ),
    ClinicalRisk.HIGH: EscalationAdvice(
        risk=ClinicalRisk.HIGH,
        escalation_level=EscalationLevel.EMERGENCY,
        title="Emergency Response",
        frequency="Continuous monitoring / every 30 minutes",
        observation_interval=timedelta(minutes=30),
        recommendation=(
            "Emergency response. Immediate assessment by clinical team or critical "
            "care outreach team. Consider transfer to a higher level of care "
            "(ICU/HDU). Clinical review every 30 minutes."
        ),
        actions=(
            "Immediate assessment by clinical team with critical-care competency",
            "Consider transfer to ICU / HDU",
            "Activate Medical Emergency Team (MET) call if criteria met",
            "Clinical review every 30 minutes until stabilised",
        ),
    ),
}


def advise(risk: Union[ClinicalRisk, str]) -> EscalationAdvice:
    """Escalation advice for a risk band. Raises ValueError for an unknown band."""
    return ESCALATION_PROTOCOL[ClinicalRisk(risk)]


def escalation_level(risk: Union[ClinicalRisk, str]) -> EscalationLevel:
    return advise(risk).escalation_level


def recommendation(risk: Union[ClinicalRisk, str]) -> str:
    return advise(risk).recommendation


def observation_interval(risk: Union[ClinicalRisk, str]) -> timedelta:
    return advise(risk).observation_interval
