# NEWS2 scoring (0–3 per parameter) from the threshold table in config/thresholds.py.
# score_of():        one parameter key + value -> sub-score
# calculate_news2(): one observation -> NEWS2Result (sub-scores, total, risk, escalation)
#
# Fields that are missing (None) or unreadable are left out, never scored as normal.

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional

from src.ews.config.thresholds import (
    AVPU_NUMERIC_MAP,
    DEFAULT_SPO2_SCALE,
    NEWS2_THRESHOLDS,
)
from src.ews.models.clinical_types import (
    Consciousness,
    NEWS2Result,
    NEWS2SubScore,
    ParameterThresholds,
)
from src.ews.scoring.escalation import escalation_level
from src.ews.scoring.risk import classify, risk_trigger

logger = logging.getLogger(__name__)

Thresholds = Dict[str, ParameterThresholds]


def to_float(x: Any) -> Optional[float]:
    if x is None or isinstance(x, bool):
        return None
    try:
        value = float(x)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def has_parameter(parameter: str, thresholds: Optional[Thresholds] = None) -> bool:
    table = NEWS2_THRESHOLDS if thresholds is None else thresholds
    return parameter in table


def score_of(parameter: str, value: Any, thresholds: Optional[Thresholds] = None) -> int:
    """Sub-score for one value. Unknown parameters and unreadable values give 0."""
    table = NEWS2_THRESHOLDS if thresholds is None else thresholds
    params = table.get(parameter)
    if params is None:
        logger.warning("No threshold table for parameter %r, scoring 0", parameter)
        return 0

    # the O2 flag is charted as a bool; numeric vitals never are
    if isinstance(value, bool) and params.parameter == "supplemental_o2":
        value = int(value)

    v = to_float(value)
    if v is None:
        logger.warning("Unreadable value %r for %s, scoring 0", value, parameter)
        return 0

    for band in params.bands:
        if band.contains(v):
            return band.score
    return 0


def score_rr(rr: Any) -> int:
    return score_of("respiratoryRate", rr)


def score_spo2(spo2: Any) -> int:
    return score_of(DEFAULT_SPO2_SCALE, spo2)


def score_temp(temp: Any) -> int:
    return score_of("temperature", temp)


def score_bp_sys(bp_sys: Any) -> int:
    return score_of("systolicBP", bp_sys)


def score_hr(hr: Any) -> int:
    return score_of("heartRate", hr)


def _numeric_field(vital: Any, field: str) -> Optional[float]:
    raw = getattr(vital, field, None)
    if raw is None:
        return None
    value = to_float(raw)
    if value is None:
        logger.warning("Skipping unreadable %s value %r", field, raw)
    return value


def _o2_field(vital: Any) -> Optional[bool]:
    raw = getattr(vital, "supplemental_o2", None)
    if raw is None:
        return None
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str) and raw.strip().lower() in ("yes", "no", "true", "false"):
        return raw.strip().lower() in ("yes", "true")
    logger.warning("Skipping unreadable supplemental_o2 value %r", raw)
    return None


def compute_subscores(
    vital: Any,
    thresholds: Optional[Thresholds] = None,
    spo2_scale: str = DEFAULT_SPO2_SCALE,
) -> List[NEWS2SubScore]:
    """
    vital is a VitalSign or any object with the same attribute names
    (rr, spo2, supplemental_o2, temp, bp_sys, hr, avpu).
    """
    table = NEWS2_THRESHOLDS if thresholds is None else thresholds
    subs: List[NEWS2SubScore] = []

    def add(key: str, label: str, value: float, shown: Any = None) -> None:
        score = score_of(key, value, table)
        subs.append(NEWS2SubScore(label, value if shown is None else shown, score, key))

    rr = _numeric_field(vital, "rr")
    if rr is not None:
        add("respiratoryRate", "Respiratory Rate", rr)

    spo2 = _numeric_field(vital, "spo2")
    if spo2 is not None:
        add(spo2_scale, "SpO2", spo2)

    on_o2 = _o2_field(vital)
    if on_o2 is not None:
        add("supplementalO2", "Supplemental O2", 1 if on_o2 else 0, "Yes" if on_o2 else "No")

    temp = _numeric_field(vital, "temp")
    if temp is not None:
        add("temperature", "Temperature", temp)

    bp_sys = _numeric_field(vital, "bp_sys")
    if bp_sys is not None:
        add("systolicBP", "Systolic BP", bp_sys)

    hr = _numeric_field(vital, "hr")
    if hr is not None:
        add("heartRate", "Heart Rate", hr)

    raw_avpu = getattr(vital, "avpu", None)
    if raw_avpu is not None:
        avpu = Consciousness.parse(raw_avpu)
        if avpu is None:
            logger.warning("Skipping unrecognised AVPU value %r", raw_avpu)
        else:
            add("consciousness", "Consciousness", AVPU_NUMERIC_MAP[avpu.value], avpu.value)

    return subs


def calculate_news2(
    vital: Any,
    thresholds: Optional[Thresholds] = None,
    spo2_scale: str = DEFAULT_SPO2_SCALE,
) -> NEWS2Result:
    """
    Full NEWS2 result for one observation.

    Banding:
      - High: total >= 7
      - Medium: total 5-6
      - Low-Medium: any single parameter = 3 (red) but total < 5
      - Low: otherwise
    """
    subs = compute_subscores(vital, thresholds, spo2_scale)
    total = sum(s.score for s in subs)
    has_red = any(s.score == 3 for s in subs)

    risk = classify(total, has_red)
    result = NEWS2Result(
        total_score=total,
        sub_scores=tuple(subs),
        clinical_risk=risk,
        escalation_level=escalation_level(risk),
        trigger=risk_trigger(total, has_red),
        timestamp=getattr(vital, "timestamp", None),
    )
    logger.debug("NEWS2 total=%d risk=%s (%d parameters)", total, risk.value, len(subs))
    return result
