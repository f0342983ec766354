# AlertStore: in-process alert ledger.
#
# - ids are ALT-0001, ALT-0002, ... for the lifetime of the store (reset by clear())
# - id allocation and append happen under one lock
# - a repeat of an unacknowledged alert with the same (patient, type, parameter)
#   and severity inside cooldown_sec is suppressed, like the alarm cooldown
#   that stops the same alarm replaying on every refresh

from __future__ import annotations

import logging
import threading
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, List, Optional

from src.ews.config.alerts import ALERT_COOLDOWN_SEC, ALERT_ID_PREFIX
from src.ews.models.clinical_types import Alert, AlertSeverity, AlertType

logger = logging.getLogger(__name__)


def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC; aware ones are converted."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class AlertStore:
    def __init__(
        self,
        cooldown_sec: float = ALERT_COOLDOWN_SEC,
        clock: Callable[[], float] = time.time,
        id_prefix: str = ALERT_ID_PREFIX,
    ) -> None:
        self.cooldown_sec = cooldown_sec
        self.clock = clock
        self.id_prefix = id_prefix
        self._alerts: List[Alert] = []
        self._counter = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._alerts)

    def now(self) -> datetime:
        return datetime.fromtimestamp(self.clock(), tz=timezone.utc)

    def _next_id(self) -> str:
        self._counter += 1
        return f"{self.id_prefix}-{self._counter:04d}"

    def _recent_duplicate(self, alert_key, severity: AlertSeverity, now: datetime) -> Optional[Alert]:
        if self.cooldown_sec <= 0:
            return None
        for a in reversed(self._alerts):
            if a.acknowledged or a.key != alert_key or a.severity != severity:
                continue
            if (now - a.timestamp).total_seconds() < self.cooldown_sec:
                return a
        return None

    def raise_alert(
        self,
        patient_id: str,
        type: AlertType,
        severity: AlertSeverity,
        message: str,
        parameter: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Optional[Alert]:
        """Append a new alert; returns None when suppressed by the cooldown."""
        now = self.now() if now is None else as_utc(now)
        with self._lock:
            dup = self._recent_duplicate((patient_id, type, parameter), severity, now)
            if dup is not None:
                logger.info(
                    "Suppressed repeat of %s for %s (%s, %s)", dup.id, patient_id, type.value, parameter
                )
                return None

            alert_id = self._next_id()
            alert = Alert(
                id=alert_id,
                type=type,
                severity=severity,
                message=message,
                timestamp=now,
                patient_id=patient_id,
                parameter=parameter,
                seq=self._counter,
            )
            self._alerts.append(alert)

        logger.debug("Raised %s %s for %s: %s", alert.id, severity.value, patient_id, message)
        return alert

    def _index(self, alert_id: str) -> Optional[int]:
        for i, a in enumerate(self._alerts):
            if a.id == alert_id:
                return i
        return None

    def get(self, alert_id: str) -> Optional[Alert]:
        i = self._index(alert_id)
        return None if i is None else self._alerts[i]

    def acknowledge(self, alert_id: str) -> bool:
        """Mark an alert as reviewed. Unknown ids are ignored (returns False)."""
        with self._lock:
            i = self._index(alert_id)
            if i is None:
                return False
            # alerts are frozen; swap in an acknowledged copy
            if not self._alerts[i].acknowledged:
                self._alerts[i] = replace(self._alerts[i], acknowledged=True)
                logger.info("Acknowledged %s", alert_id)
            return True

    def all_alerts(self) -> List[Alert]:
        """Full history, newest first."""
        with self._lock:
            snapshot = list(self._alerts)
        return sorted(snapshot, key=lambda a: (a.timestamp, a.seq), reverse=True)

    def active_alerts(self) -> List[Alert]:
        """Unacknowledged alerts, newest first."""
        return [a for a in self.all_alerts() if not a.acknowledged]

    def clear(self) -> None:
        with self._lock:
            n = len(self._alerts)
            self._alerts = []
            self._counter = 0
        logger.info("Cleared %d alerts", n)
