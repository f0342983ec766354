from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Tuple, Union


class Consciousness(str, Enum):
    """AVPU scale plus new confusion (ACVPU)."""

    ALERT = "A"
    CONFUSION = "C"
    VOICE = "V"
    PAIN = "P"
    UNRESPONSIVE = "U"

    @classmethod
    def parse(cls, value: Any) -> Optional["Consciousness"]:
        """Accept a member, a letter ("V") or a word ("Voice"); None if unrecognised."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str) or not value.strip():
            return None
        text = value.strip().upper()
        for member in cls:
            if text == member.value or text == member.name:
                return member
        if text == "NEW CONFUSION":
            return cls.CONFUSION
        return None


class ClinicalRisk(str, Enum):
    LOW = "Low"
    LOW_MEDIUM = "Low-Medium"
    MEDIUM = "Medium"
    HIGH = "High"

    @property
    def rank(self) -> int:
        return _RISK_ORDER.index(self)


_RISK_ORDER = (
    ClinicalRisk.LOW,
    ClinicalRisk.LOW_MEDIUM,
    ClinicalRisk.MEDIUM,
    ClinicalRisk.HIGH,
)


class EscalationLevel(IntEnum):
    ROUTINE = 0
    INCREASED = 1
    URGENT = 2
    EMERGENCY = 3


class Trend(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    WORSENING = "worsening"


class AlertSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class AlertType(str, Enum):
    VITAL_OUT_OF_RANGE = "vital_out_of_range"
    NEWS_SCORE_ELEVATED = "news_score_elevated"
    NEWS_SCORE_CRITICAL = "news_score_critical"
    DETERIORATION_TREND = "deterioration_trend"
    OVERDUE_OBSERVATION = "overdue_observation"


@dataclass(frozen=True)
class VitalSign:
    """One charted observation. Every field is optional; None means not charted."""

    timestamp: Optional[Union[str, datetime]] = None
    temp: Optional[float] = None      # °C
    hr: Optional[float] = None        # bpm
    rr: Optional[float] = None        # /min
    bp_sys: Optional[float] = None    # mmHg
    bp_dia: Optional[float] = None    # mmHg
    spo2: Optional[float] = None      # %
    avpu: Optional[Union[str, Consciousness]] = None
    supplemental_o2: Optional[bool] = None
    pain_score: Optional[float] = None


@dataclass(frozen=True)
class NEWS2SubScore:
    parameter: str                    # display label, e.g. "Respiratory Rate"
    value: Union[float, str]
    score: int
    key: str = ""                     # threshold table key, e.g. "respiratoryRate"


@dataclass(frozen=True)
class NEWS2Result:
    total_score: int
    sub_scores: Tuple[NEWS2SubScore, ...]
    clinical_risk: ClinicalRisk
    escalation_level: EscalationLevel
    trigger: str = ""
    timestamp: Optional[Union[str, datetime]] = None

    @property
    def has_red_score(self) -> bool:
        return any(s.score == 3 for s in self.sub_scores)

    @property
    def red_parameters(self) -> Tuple[NEWS2SubScore, ...]:
        return tuple(s for s in self.sub_scores if s.score == 3)

    def sub_score(self, parameter: str) -> Optional[NEWS2SubScore]:
        """Look up a sub-score by display label or table key."""
        for s in self.sub_scores:
            if parameter in (s.parameter, s.key):
                return s
        return None


@dataclass(frozen=True)
class Alert:
    id: str
    type: AlertType
    severity: AlertSeverity
    message: str
    timestamp: datetime
    patient_id: str
    acknowledged: bool = False
    parameter: Optional[str] = None
    seq: int = field(default=0, repr=False, compare=False)

    @property
    def key(self) -> Tuple[str, AlertType, Optional[str]]:
        return (self.patient_id, self.type, self.parameter)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "acknowledged": self.acknowledged,
            "patientId": self.patient_id,
            "parameter": self.parameter,
        }


@dataclass(frozen=True)
class ScoreThresholdBand:
    """Half-open band (min, max] mapped to a sub-score; min=-inf opens the first band."""

    min: float
    max: float
    score: int

    def contains(self, value: float) -> bool:
        if self.min == float("-inf"):
            return value <= self.max
        return self.min < value <= self.max


@dataclass(frozen=True)
class ParameterThresholds:
    parameter: str                    # VitalSign field the table scores
    label: str
    bands: Tuple[ScoreThresholdBand, ...]


@dataclass(frozen=True)
class VitalAlertLimits:
    """Absolute alert limits for one vital. A value at or past a limit trips it."""

    label: str
    warning_low: Optional[float] = None
    warning_high: Optional[float] = None
    critical_low: Optional[float] = None
    critical_high: Optional[float] = None
