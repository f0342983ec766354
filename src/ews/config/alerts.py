from __future__ import annotations

from typing import Dict

from src.ews.models.clinical_types import VitalAlertLimits


# Independent of NEWS2: absolute danger limits per vital, keyed by VitalSign field.
VITAL_ALERT_THRESHOLDS: Dict[str, VitalAlertLimits] = {
    "hr": VitalAlertLimits("Heart Rate", warning_low=50, warning_high=110, critical_low=40, critical_high=130),
    "rr": VitalAlertLimits("Respiratory Rate", warning_low=11, warning_high=21, critical_low=8, critical_high=25),
    "bp_sys": VitalAlertLimits("Systolic BP", warning_low=100, warning_high=180, critical_low=90, critical_high=220),
    "spo2": VitalAlertLimits("SpO2", warning_low=94, critical_low=91),
    "temp": VitalAlertLimits("Temperature", warning_low=35.5, warning_high=38.5, critical_low=35.0, critical_high=39.1),
}

# Repeat alerts with the same (patient, type, parameter) and severity are
# suppressed for this long while the earlier one is unacknowledged. 0 disables.
ALERT_COOLDOWN_SEC = 300

ALERT_ID_PREFIX = "ALT"
