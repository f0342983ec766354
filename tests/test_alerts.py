import dataclasses
import threading
from datetime import datetime, timedelta, timezone

import pytest

from src.ews.alerts.alerts import check_news_score, check_overdue, check_trend, check_vitals
from src.ews.alerts.store import AlertStore
from src.ews.models.clinical_types import AlertSeverity, AlertType, ClinicalRisk, VitalSign
from src.ews.scoring.news2 import calculate_news2
from src.ews.scoring.trend import summarize

MRN = "MRN001"


class FakeClock:
    """Controllable replacement for time.time."""
    def __init__(self, t=1_770_000_000.0):
        self.t = t

    def __call__(self):
        return self.t

    def advance(self, seconds):
        self.t += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return AlertStore(clock=clock)


def normal(**overrides):
    base = dict(temp=37.0, hr=75, rr=16, bp_sys=120, spo2=98, avpu="A", supplemental_o2=False)
    base.update(overrides)
    return VitalSign(**base)


# 1) Absolute vital limits

def test_normal_vitals_raise_nothing(store):
    assert check_vitals(store, MRN, normal()) == []
    assert len(store) == 0


@pytest.mark.parametrize("field, value, severity", [
    ("hr", 135, AlertSeverity.CRITICAL),
    ("hr", 130, AlertSeverity.CRITICAL),
    ("hr", 40, AlertSeverity.CRITICAL),
    ("hr", 115, AlertSeverity.WARNING),
    ("hr", 50, AlertSeverity.WARNING),
    ("rr", 8, AlertSeverity.CRITICAL),
    ("rr", 21, AlertSeverity.WARNING),
    ("bp_sys", 220, AlertSeverity.CRITICAL),
    ("bp_sys", 95, AlertSeverity.WARNING),
    ("spo2", 91, AlertSeverity.CRITICAL),
    ("spo2", 93, AlertSeverity.WARNING),
    ("temp", 39.1, AlertSeverity.CRITICAL),
    ("temp", 38.5, AlertSeverity.WARNING),
    ("temp", 35.0, AlertSeverity.CRITICAL),
])
def test_one_alert_per_vital_critical_wins(store, field, value, severity):
    alerts = check_vitals(store, MRN, normal(**{field: value}))
    assert len(alerts) == 1
    a = alerts[0]
    assert a.severity == severity
    assert a.type == AlertType.VITAL_OUT_OF_RANGE
    assert a.parameter == field
    assert a.patient_id == MRN
    assert a.acknowledged is False


def test_spo2_has_no_high_limit(store):
    assert check_vitals(store, MRN, normal(spo2=100)) == []


def test_missing_vitals_are_not_checked(store):
    assert check_vitals(store, MRN, VitalSign()) == []


def test_vital_alert_messages(store):
    crit, warn = check_vitals(store, MRN, normal(hr=135, temp=38.5))
    assert crit.message == "CRITICAL: Heart Rate = 135 (outside safe range)"
    assert warn.message == "WARNING: Temperature = 38.5 (approaching limits)"


# 2) Score path

def test_low_score_raises_nothing(store):
    assert check_news_score(store, calculate_news2(normal()), MRN) == []


def test_low_medium_gives_info_and_red_warning(store):
    alerts = check_news_score(store, calculate_news2(normal(rr=7)), MRN)
    assert [(a.type, a.severity) for a in alerts] == [
        (AlertType.NEWS_SCORE_ELEVATED, AlertSeverity.INFO),
        (AlertType.NEWS_SCORE_ELEVATED, AlertSeverity.WARNING),
    ]
    assert "RED score in: Respiratory Rate" in alerts[1].message


def test_medium_without_red_gives_single_warning(store):
    result = calculate_news2(normal(temp=38.5, hr=95, rr=22, bp_sys=105))
    alerts = check_news_score(store, result, MRN)
    assert len(alerts) == 1
    assert alerts[0].severity == AlertSeverity.WARNING
    assert alerts[0].message.startswith("NEWS2 score 5: Medium risk")


def test_medium_with_red_gets_extra_red_warning(store):
    result = calculate_news2(normal(rr=26, hr=120))
    assert result.clinical_risk == ClinicalRisk.MEDIUM
    alerts = check_news_score(store, result, MRN)
    assert len(alerts) == 2
    assert "Respiratory Rate" in alerts[1].message


def test_high_gives_only_critical(store):
    result = calculate_news2(normal(temp=39.5, hr=135, rr=26, bp_sys=85, spo2=90, avpu="V", supplemental_o2=True))
    alerts = check_news_score(store, result, MRN)
    assert len(alerts) == 1
    assert alerts[0].type == AlertType.NEWS_SCORE_CRITICAL
    assert alerts[0].severity == AlertSeverity.CRITICAL


# 3) Ledger

def test_ids_are_sequential_and_clear_resets(store):
    alerts = check_vitals(store, MRN, normal(hr=135, rr=30, bp_sys=85))
    assert [a.id for a in alerts] == ["ALT-0001", "ALT-0002", "ALT-0003"]
    store.clear()
    assert store.all_alerts() == []
    assert check_vitals(store, MRN, normal(hr=135))[0].id == "ALT-0001"


def test_acknowledge_is_idempotent(store):
    a = check_vitals(store, MRN, normal(hr=135))[0]
    assert store.acknowledge(a.id) is True
    assert store.acknowledge(a.id) is True
    assert store.get(a.id).acknowledged is True
    assert store.active_alerts() == []
    assert len(store.all_alerts()) == 1


def test_alerts_are_frozen_and_acknowledge_swaps_a_copy(store):
    a = check_vitals(store, MRN, normal(hr=135))[0]
    with pytest.raises(dataclasses.FrozenInstanceError):
        a.acknowledged = True
    assert store.acknowledge(a.id) is True
    assert a.acknowledged is False
    acked = store.get(a.id)
    assert acked.acknowledged is True
    assert (acked.id, acked.seq, acked.timestamp) == (a.id, a.seq, a.timestamp)
    assert store.all_alerts() == [acked]


def test_acknowledge_unknown_id_is_noop(store):
    check_vitals(store, MRN, normal(hr=135))
    assert store.acknowledge("ALT-9999") is False
    assert len(store.active_alerts()) == 1


def test_newest_first(store, clock):
    first = check_vitals(store, MRN, normal(hr=135))[0]
    clock.advance(10)
    second, third = check_vitals(store, "MRN002", normal(rr=30, bp_sys=85))
    assert [a.id for a in store.all_alerts()] == [third.id, second.id, first.id]
    store.acknowledge(second.id)
    assert [a.id for a in store.active_alerts()] == [third.id, first.id]


def test_to_dict(store):
    d = check_vitals(store, MRN, normal(hr=135))[0].to_dict()
    assert d["id"] == "ALT-0001"
    assert d["type"] == "vital_out_of_range"
    assert d["severity"] == "critical"
    assert d["patientId"] == MRN
    assert d["acknowledged"] is False
    assert datetime.fromisoformat(d["timestamp"]).tzinfo is not None


# 4) Cooldown / dedup

def test_repeat_within_cooldown_is_suppressed(store, clock):
    assert len(check_vitals(store, MRN, normal(hr=135))) == 1
    clock.advance(60)
    assert check_vitals(store, MRN, normal(hr=140)) == []
    assert len(store) == 1


def test_repeat_after_cooldown_is_raised(store, clock):
    check_vitals(store, MRN, normal(hr=135))
    clock.advance(store.cooldown_sec + 1)
    assert len(check_vitals(store, MRN, normal(hr=135))) == 1
    assert len(store) == 2


def test_repeat_after_acknowledge_is_raised(store):
    a = check_vitals(store, MRN, normal(hr=135))[0]
    store.acknowledge(a.id)
    assert len(check_vitals(store, MRN, normal(hr=135))) == 1


def test_severity_change_is_raised(store):
    check_vitals(store, MRN, normal(hr=115))
    escalated = check_vitals(store, MRN, normal(hr=135))
    assert [a.severity for a in escalated] == [AlertSeverity.CRITICAL]


def test_other_patient_not_suppressed(store):
    check_vitals(store, MRN, normal(hr=135))
    assert len(check_vitals(store, "MRN002", normal(hr=135))) == 1


def test_zero_cooldown_appends_every_call(clock):
    store = AlertStore(cooldown_sec=0, clock=clock)
    result = calculate_news2(normal(rr=7))
    for _ in range(3):
        assert len(check_news_score(store, result, MRN)) == 2
    assert len(store) == 6
    assert store.all_alerts()[0].id == "ALT-0006"


def test_concurrent_raises_get_unique_ids(clock):
    store = AlertStore(cooldown_sec=0, clock=clock)

    def worker(n):
        for i in range(50):
            store.raise_alert(f"p{n}", AlertType.VITAL_OUT_OF_RANGE, AlertSeverity.INFO, "x", parameter=str(i))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    ids = [a.id for a in store.all_alerts()]
    assert len(ids) == 400
    assert len(set(ids)) == 400


# 5) Trend and overdue

def test_worsening_trend_raises_warning(store):
    summary = summarize([normal(rr=26, hr=120), normal()])
    alerts = check_trend(store, MRN, summary)
    assert len(alerts) == 1
    assert alerts[0].type == AlertType.DETERIORATION_TREND
    assert alerts[0].message == "NEWS2 rising: 0 -> 5 (Medium risk)."


def test_worsening_within_low_risk_is_quiet(store):
    summary = summarize([normal(rr=22), normal()])
    assert check_trend(store, MRN, summary) == []


def test_improving_trend_is_quiet(store):
    summary = summarize([normal(), normal(rr=26, hr=120)])
    assert check_trend(store, MRN, summary) == []


@pytest.mark.parametrize("risk, minutes_ago, expected", [
    ("High", 20, 0),
    ("High", 45, 1),
    ("Medium", 59, 0),
    ("Medium", 61, 1),
    ("Low", 11 * 60, 0),
    ("Low", 13 * 60, 1),
])
def test_overdue_observations(store, risk, minutes_ago, expected):
    now = datetime(2026, 2, 17, 12, 0, tzinfo=timezone.utc)
    last = now - timedelta(minutes=minutes_ago)
    alerts = check_overdue(store, MRN, last, risk, now=now)
    assert len(alerts) == expected
    if alerts:
        assert alerts[0].type == AlertType.OVERDUE_OBSERVATION


def test_overdue_accepts_iso_string(store):
    alerts = check_overdue(
        store, MRN, "2026-02-17T08:00:00", ClinicalRisk.HIGH, now=datetime(2026, 2, 17, 9, 0)
    )
    assert "last set 60 min ago" in alerts[0].message


def test_overdue_alert_is_stamped_with_supplied_now(store):
    now = datetime(2026, 2, 17, 12, 0, tzinfo=timezone.utc)
    alert = check_overdue(store, MRN, now - timedelta(hours=2), "High", now=now)[0]
    assert alert.timestamp == now


def test_overdue_mixes_naive_and_aware_times(store):
    aware = datetime(2026, 2, 17, 8, 0, tzinfo=timezone.utc)
    alerts = check_overdue(store, MRN, aware, "High", now=datetime(2026, 2, 17, 9, 0))
    assert "last set 60 min ago" in alerts[0].message
    assert alerts[0].timestamp.tzinfo is not None
    # naive stamps sort alongside the store's own aware ones
    check_vitals(store, MRN, normal(hr=135))
    assert len(store.all_alerts()) == 2


def test_overdue_cooldown_follows_supplied_now(store):
    now = datetime(2026, 2, 17, 12, 0, tzinfo=timezone.utc)
    last = now - timedelta(hours=2)
    assert len(check_overdue(store, MRN, last, "High", now=now)) == 1
    assert check_overdue(store, MRN, last, "High", now=now + timedelta(minutes=1)) == []
    later = now + timedelta(seconds=store.cooldown_sec + 1)
    assert len(check_overdue(store, MRN, last, "High", now=later)) == 1


def test_overdue_defaults_to_store_clock(store, clock):
    last = store.now() - timedelta(minutes=45)
    assert len(check_overdue(store, MRN, last, "High")) == 1
