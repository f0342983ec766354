# NEWS2 threshold table (Royal College of Physicians chart).
#
# Bands are (min, max]: the first band of each parameter opens at -inf, each
# following band starts where the previous one ends, the last one runs to +inf.
# For integer-charted vitals (min, max] == [min + 1, max], e.g. RR (8, 11] is 9-11.
#
#   RR:        <=8 -> 3, 9-11 -> 1, 12-20 -> 0, 21-24 -> 2, >=25 -> 3
#   SpO2 S1:   <=91 -> 3, 92-93 -> 2, 94-95 -> 1, >=96 -> 0
#   SpO2 S2:   <=83 -> 3, 84-85 -> 2, 86-87 -> 1, 88-92 -> 0,
#              >=93 on O2 -> 0 | 93-94 / 95-96 / >=97 on air -> 1 / 2 / 3
#   O2:        No -> 0, Yes -> 2
#   Temp:      <=35.0 -> 3, 35.1-36.0 -> 1, 36.1-38.0 -> 0, 38.1-39.0 -> 1, >=39.1 -> 2
#   BP sys:    <=90 -> 3, 91-100 -> 2, 101-110 -> 1, 111-219 -> 0, >=220 -> 3
#   HR:        <=40 -> 3, 41-50 -> 1, 51-90 -> 0, 91-110 -> 1, 111-130 -> 2, >=131 -> 3
#   AVPU:      Alert -> 0, C/V/P/U -> 3

from __future__ import annotations

from typing import Dict, Iterable, Tuple

from src.ews.models.clinical_types import ParameterThresholds, ScoreThresholdBand

INF = float("inf")


class ThresholdTableError(Exception):
    """Raised when a threshold table does not partition the real line."""


def _bands(*edges: Tuple[float, int]) -> Tuple[ScoreThresholdBand, ...]:
    """Build contiguous bands from (upper_edge, score) pairs."""
    out = []
    lower = -INF
    for upper, score in edges:
        out.append(ScoreThresholdBand(lower, upper, score))
        lower = upper
    return tuple(out)


NEWS2_THRESHOLDS: Dict[str, ParameterThresholds] = {
    "respiratoryRate": ParameterThresholds(
        "rr", "Respiratory Rate",
        _bands((8, 3), (11, 1), (20, 0), (24, 2), (INF, 3)),
    ),
    "spo2Scale1": ParameterThresholds(
        "spo2", "SpO2 Scale 1",
        _bands((91, 3), (93, 2), (95, 1), (INF, 0)),
    ),
    "spo2Scale2OnO2": ParameterThresholds(
        "spo2", "SpO2 Scale 2 (on supplemental O2)",
        _bands((83, 3), (85, 2), (87, 1), (92, 0), (INF, 0)),
    ),
    "spo2Scale2OnAir": ParameterThresholds(
        "spo2", "SpO2 Scale 2 (on room air)",
        _bands((83, 3), (85, 2), (87, 1), (92, 0), (94, 1), (96, 2), (INF, 3)),
    ),
    "supplementalO2": ParameterThresholds(
        "supplemental_o2", "Supplemental Oxygen",
        _bands((0, 0), (INF, 2)),
    ),
    "temperature": ParameterThresholds(
        "temp", "Temperature",
        _bands((35.0, 3), (36.0, 1), (38.0, 0), (39.0, 1), (INF, 2)),
    ),
    "systolicBP": ParameterThresholds(
        "bp_sys", "Systolic Blood Pressure",
        _bands((90, 3), (100, 2), (110, 1), (219, 0), (INF, 3)),
    ),
    "heartRate": ParameterThresholds(
        "hr", "Heart Rate",
        _bands((40, 3), (50, 1), (90, 0), (110, 1), (130, 2), (INF, 3)),
    ),
    "consciousness": ParameterThresholds(
        "avpu", "Consciousness (AVPU)",
        _bands((0, 0), (INF, 3)),
    ),
}

# Scale 1 is always used; the Scale 2 tables are kept for a future toggle.
DEFAULT_SPO2_SCALE = "spo2Scale1"

AVPU_NUMERIC_MAP: Dict[str, int] = {
    "A": 0,
    "C": 1,
    "V": 2,
    "P": 3,
    "U": 3,
}

CLINICAL_RISK_THRESHOLDS: Dict[str, int] = {
    "high": 7,
    "medium": 5,
}

RED_SCORE = 3


def validate_table(table: Dict[str, ParameterThresholds]) -> None:
    for key, params in table.items():
        _validate_bands(key, params.bands)


def _validate_bands(key: str, bands: Iterable[ScoreThresholdBand]) -> None:
    bands = list(bands)
    if not bands:
        raise ThresholdTableError(f"{key}: no bands")
    if bands[0].min != -INF:
        raise ThresholdTableError(f"{key}: first band must start at -inf")
    if bands[-1].max != INF:
        raise ThresholdTableError(f"{key}: last band must end at +inf")
    for prev, cur in zip(bands, bands[1:]):
        if cur.min != prev.max:
            raise ThresholdTableError(
                f"{key}: gap or overlap between {prev.max} and {cur.min}"
            )
    for band in bands:
        if band.score not in (0, 1, 2, 3):
            raise ThresholdTableError(f"{key}: score {band.score} outside 0-3")
        if band.max <= band.min:
            raise ThresholdTableError(f"{key}: empty band ({band.min}, {band.max}]")


validate_table(NEWS2_THRESHOLDS)
