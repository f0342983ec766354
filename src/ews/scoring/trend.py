# Short-term NEWS2 trajectory.
# Two-point comparison of the latest two totals (newest first):
#   delta > 0 -> worsening, delta < 0 -> improving, otherwise stable.
# Not a statistical trend; fewer than two scores is always "stable".

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence, Tuple, Union

import pandas as pd

from src.ews.models.clinical_types import ClinicalRisk, NEWS2Result, Trend
from src.ews.scoring.news2 import calculate_news2

HISTORY_COLUMNS = ["Time", "Score", "Risk", "Escalation"]


@dataclass(frozen=True)
class NewsSummary:
    latest: Optional[NEWS2Result]
    risk: Optional[ClinicalRisk]
    trend: Trend
    history: Tuple[NEWS2Result, ...]   # newest first


def _total(x: Union[NEWS2Result, int]) -> int:
    return x.total_score if isinstance(x, NEWS2Result) else int(x)


def trend_between(current: Union[NEWS2Result, int], previous: Union[NEWS2Result, int]) -> Trend:
    delta = _total(current) - _total(previous)
    if delta > 0:
        return Trend.WORSENING
    if delta < 0:
        return Trend.IMPROVING
    return Trend.STABLE


def trend_of(scores: Sequence[Union[NEWS2Result, int]]) -> Trend:
    """Trend over newest-first scores (results or plain totals)."""
    if len(scores) < 2:
        return Trend.STABLE
    return trend_between(scores[0], scores[1])


def summarize(vitals: Iterable[Any]) -> NewsSummary:
    """Score every observation (newest first) and report latest, risk and trend."""
    history = tuple(calculate_news2(v) for v in vitals)
    if not history:
        return NewsSummary(latest=None, risk=None, trend=Trend.STABLE, history=())

    latest = history[0]
    return NewsSummary(
        latest=latest,
        risk=latest.clinical_risk,
        trend=trend_of(history),
        history=history,
    )


def score_history_frame(items: Iterable[Any]) -> pd.DataFrame:
    """
    Score history for charting, oldest first.

    items can be vital observations or already computed NEWS2Results.
    Rows whose timestamp is missing or unparseable are dropped.
    """
    rows = []
    for item in items:
        res = item if isinstance(item, NEWS2Result) else calculate_news2(item)
        rows.append((res.timestamp, res.total_score, res.clinical_risk.value, int(res.escalation_level)))

    if not rows:
        return pd.DataFrame(columns=HISTORY_COLUMNS)

    df = pd.DataFrame(rows, columns=HISTORY_COLUMNS)
    # naive stamps are read as UTC so aware and naive charting can share a frame
    df["Time"] = pd.to_datetime(df["Time"], errors="coerce", format="mixed", utc=True)
    df = df.dropna(subset=["Time"]).sort_values("Time", kind="stable")
    return df.reset_index(drop=True)
