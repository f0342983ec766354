# Alert rules feeding an AlertStore.
#
# check_vitals():      absolute vital limits (critical checked first, then warning)
# check_news_score():  risk band -> severity, plus a RED-score warning below High
# check_trend():       worsening NEWS2 at Low-Medium or above
# check_overdue():     no observation within the advised interval for the risk
#
# Each returns only the alerts actually appended (cooldown repeats are dropped).

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from src.ews.alerts.store import AlertStore, as_utc
from src.ews.config.alerts import VITAL_ALERT_THRESHOLDS
from src.ews.models.clinical_types import (
    Alert,
    AlertSeverity,
    AlertType,
    ClinicalRisk,
    NEWS2Result,
    Trend,
)
from src.ews.scoring.escalation import observation_interval
from src.ews.scoring.news2 import to_float
from src.ews.scoring.trend import NewsSummary

RISK_ALERTS: Dict[ClinicalRisk, Optional[Tuple[AlertSeverity, AlertType]]] = {
    ClinicalRisk.LOW: None,
    ClinicalRisk.LOW_MEDIUM: (AlertSeverity.INFO, AlertType.NEWS_SCORE_ELEVATED),
    ClinicalRisk.MEDIUM: (AlertSeverity.WARNING, AlertType.NEWS_SCORE_ELEVATED),
    ClinicalRisk.HIGH: (AlertSeverity.CRITICAL, AlertType.NEWS_SCORE_CRITICAL),
}


def _keep(out: List[Alert], alert: Optional[Alert]) -> None:
    if alert is not None:
        out.append(alert)


def check_vitals(store: AlertStore, patient_id: str, vital: Any) -> List[Alert]:
    """At most one alert per vital per call: critical wins over warning."""
    out: List[Alert] = []
    now = store.now()

    for key, lim in VITAL_ALERT_THRESHOLDS.items():
        value = to_float(getattr(vital, key, None))
        if value is None:
            continue

        critical = (lim.critical_low is not None and value <= lim.critical_low) or (
            lim.critical_high is not None and value >= lim.critical_high
        )
        if critical:
            _keep(out, store.raise_alert(
                patient_id,
                AlertType.VITAL_OUT_OF_RANGE,
                AlertSeverity.CRITICAL,
                f"CRITICAL: {lim.label} = {value:g} (outside safe range)",
                parameter=key,
                now=now,
            ))
            continue

        warning = (lim.warning_low is not None and value <= lim.warning_low) or (
            lim.warning_high is not None and value >= lim.warning_high
        )
        if warning:
            _keep(out, store.raise_alert(
                patient_id,
                AlertType.VITAL_OUT_OF_RANGE,
                AlertSeverity.WARNING,
                f"WARNING: {lim.label} = {value:g} (approaching limits)",
                parameter=key,
                now=now,
            ))

    return out


def check_news_score(store: AlertStore, result: NEWS2Result, patient_id: str) -> List[Alert]:
    out: List[Alert] = []
    now = store.now()

    config = RISK_ALERTS[result.clinical_risk]
    if config is not None:
        severity, alert_type = config
        _keep(out, store.raise_alert(
            patient_id,
            alert_type,
            severity,
            f"NEWS2 score {result.total_score}: {result.clinical_risk.value} risk. "
            f"Escalation level {int(result.escalation_level)}.",
            parameter="news2",
            now=now,
        ))

    # High already raised a critical alert
    red = result.red_parameters
    if red and result.clinical_risk != ClinicalRisk.HIGH:
        _keep(out, store.raise_alert(
            patient_id,
            AlertType.NEWS_SCORE_ELEVATED,
            AlertSeverity.WARNING,
            f"RED score in: {', '.join(s.parameter for s in red)}. Requires increased monitoring.",
            parameter="red:" + ",".join(s.key or s.parameter for s in red),
            now=now,
        ))

    return out


def check_trend(store: AlertStore, patient_id: str, summary: NewsSummary) -> List[Alert]:
    if summary.trend != Trend.WORSENING or summary.risk is None:
        return []
    if summary.risk.rank < ClinicalRisk.LOW_MEDIUM.rank:
        return []

    current, previous = summary.history[0], summary.history[1]
    out: List[Alert] = []
    _keep(out, store.raise_alert(
        patient_id,
        AlertType.DETERIORATION_TREND,
        AlertSeverity.WARNING,
        f"NEWS2 rising: {previous.total_score} -> {current.total_score} "
        f"({summary.risk.value} risk).",
        parameter="news2",
    ))
    return out


def check_overdue(
    store: AlertStore,
    patient_id: str,
    last_observed: Union[datetime, str],
    risk: Union[ClinicalRisk, str],
    now: Optional[datetime] = None,
) -> List[Alert]:
    """Warn when the last observation is older than the advised interval."""
    if isinstance(last_observed, str):
        last_observed = datetime.fromisoformat(last_observed)
    last_observed = as_utc(last_observed)
    now = store.now() if now is None else as_utc(now)

    risk = ClinicalRisk(risk)
    interval = observation_interval(risk)
    elapsed = now - last_observed
    if elapsed <= interval:
        return []

    minutes = int(elapsed.total_seconds() // 60)
    out: List[Alert] = []
    _keep(out, store.raise_alert(
        patient_id,
        AlertType.OVERDUE_OBSERVATION,
        AlertSeverity.WARNING,
        f"Observations overdue: last set {minutes} min ago ({risk.value} risk, "
        f"due every {int(interval.total_seconds() // 60)} min).",
        parameter="observations",
        now=now,
    ))
    return out
