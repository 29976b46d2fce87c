# backend/tests/test_reporting.py

from datetime import datetime, timedelta, timezone

import pytest

from honeyward.db import ACTIVITY, INCIDENT, MemoryStore
from honeyward.services.reporting import Reporter, top_n

NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def _activity(action, session="s1", ip="10.0.0.1", hours_ago=0, severity="low"):
    return {
        "action":     action,
        "session_id": session,
        "ip_address": ip,
        "severity":   severity,
        "timestamp":  (NOW - timedelta(hours=hours_ago)).isoformat(),
    }


def _incident(category, severity, ip, hours_ago=0, resolved=False, id=None):
    return {
        "id":         id or f"{category}-{ip}-{hours_ago}",
        "category":   category,
        "severity":   severity,
        "ip_address": ip,
        "resolved":   resolved,
        "timestamp":  (NOW - timedelta(hours=hours_ago)).isoformat(),
    }


@pytest.fixture
def store():
    s = MemoryStore()
    s.extend(ACTIVITY, [
        _activity("page_visit", "s1", "10.0.0.1"),
        _activity("page_visit", "s2", "10.0.0.2", hours_ago=30),
        _activity("api_request", "s2", "10.0.0.2"),
        _activity("api_request", "s3", "10.0.0.3", hours_ago=2),
    ])
    s.extend(INCIDENT, [
        _incident("xss", "high", "10.0.0.2", id="i1"),
        _incident("sql_injection", "critical", "10.0.0.3", hours_ago=1, id="i2"),
        _incident("sql_injection", "critical", "10.0.0.2", hours_ago=48, id="i3", resolved=True),
        _incident("rapid_requests", "medium", "10.0.0.3", id="i4"),
    ])
    return s


def test_top_n_breaks_ties_by_first_seen():
    assert top_n(["b", "a", "b", "a", "c", None, ""], 3) == [("b", 2), ("a", 2), ("c", 1)]


def test_distinct_counts(store):
    r = Reporter(store)
    assert r.distinct_sessions() == 3
    assert r.distinct_ips() == 3
    assert r.total_activities() == 4


def test_incident_counts(store):
    r = Reporter(store)
    assert r.incident_counts_by_severity() == {"low": 0, "medium": 1, "high": 1, "critical": 2}
    by_category = r.incident_counts_by_category()
    assert by_category["sql_injection"] == 2
    assert by_category["xss"] == 1
    assert by_category["path_traversal"] == 0
    assert by_category["rapid_requests"] == 1
    assert r.unresolved_incidents() == 3


def test_top_offenders_tie_break(store):
    assert Reporter(store).top_offenders(2) == [
        {"ip_address": "10.0.0.2", "incidents": 2},
        {"ip_address": "10.0.0.3", "incidents": 2},
    ]


def test_top_actions(store):
    assert Reporter(store).top_actions(1) == [{"action": "page_visit", "count": 2}]


def test_count_since_trailing_window(store):
    r = Reporter(store)
    assert r.count_since(24, ACTIVITY, now=NOW) == 3
    assert r.count_since(24, INCIDENT, now=NOW) == 3


def test_recent_critical_newest_first(store):
    assert [d["id"] for d in Reporter(store).recent_critical()] == ["i2", "i3"]


def test_login_funnel_rate():
    s = MemoryStore()
    s.extend(ACTIVITY, [_activity("login_successful")] * 4 + [_activity("login_failed")] * 6)
    funnel = Reporter(s).login_funnel()
    assert funnel == {"attempts": 10, "successes": 4, "failures": 6, "success_rate": 40.0}
    assert f"{funnel['success_rate']:.2f}%" == "40.00%"


def test_login_funnel_with_no_attempts():
    funnel = Reporter(MemoryStore()).login_funnel()
    assert funnel["attempts"] == 0
    assert funnel["success_rate"] == 0.0


def test_logs_filter_and_order(store):
    r = Reporter(store)
    docs = r.logs(limit=10, action="API")
    assert [d["session_id"] for d in docs] == ["s3", "s2"]
    assert r.logs(limit=1) == [store.find(ACTIVITY)[-1]]


def test_summary_keys(store):
    summary = Reporter(store).summary(now=NOW)
    assert summary["total_incidents"] == 4
    assert summary["activities_24h"] == 3
    assert summary["login"]["success_rate"] == 0.0


def test_reporter_does_not_write(store):
    before = (store.count(ACTIVITY), store.count(INCIDENT))
    Reporter(store).summary(now=NOW)
    assert (store.count(ACTIVITY), store.count(INCIDENT)) == before


def test_login_attempt_markers_are_not_double_counted():
    s = MemoryStore()
    s.extend(ACTIVITY, [_activity("login_attempt"), _activity("login_successful")] * 2)
    funnel = Reporter(s).login_funnel()
    assert funnel["attempts"] == 2
    assert funnel["success_rate"] == 100.0
