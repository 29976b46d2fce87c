# backend/tests/test_honeypot.py

import pytest

from honeyward.models import Severity
from honeyward.services.honeypot import HoneypotTracker, is_suspicious_path


@pytest.fixture
def tracker(recorder):
    return HoneypotTracker(recorder)


@pytest.mark.parametrize("path, expected", [
    ("/wp-admin/install.php", True),
    ("/.env", True),
    ("/API/ADMIN/users", True),
    ("/departments/cardiology", False),
])
def test_suspicious_paths(path, expected):
    assert is_suspicious_path(path) is expected


def test_admin_access_goes_to_honeypot_log(tracker, log_store, context):
    incident = tracker.track_admin_panel_access("/admin", session_id="s1", context=context)
    assert incident.category == "honeypot_admin_access"
    assert incident.severity == Severity.HIGH
    assert log_store.honeypot.snapshot() == [incident]
    assert [e.action for e in log_store.activity.snapshot()] == ["honeypot_event"]


@pytest.mark.parametrize("attempt, severity, brute", [
    (1, Severity.HIGH, False),
    (4, Severity.CRITICAL, False),
    (6, Severity.CRITICAL, True),
])
def test_credential_attempt_severity(tracker, attempt, severity, brute):
    incident = tracker.track_credential_attempt("a@b.com", False, attempt)
    assert incident.severity == severity
    assert incident.metadata["potential_brute_force"] is brute


def test_injection_payload_is_capped(tracker):
    incident = tracker.track_injection_attempt("symptoms", "A" * 900, "sql_injection")
    assert len(incident.payload) == 500
    assert incident.metadata["attack_vector"] == "sql_injection"


def test_probe_carries_fingerprint(tracker, context):
    incident = tracker.track_vulnerability_probe("/api/admin/users/1", "sqli", "'" * 400, context=context)
    assert len(incident.payload) == 300
    assert incident.metadata["fingerprint"] == incident.fingerprint


def test_enumeration_marks_suspicious_path(tracker):
    incident = tracker.track_enumeration("/phpmyadmin", 404)
    assert incident.severity == Severity.MEDIUM
    assert incident.metadata["suspicious_path"] is True
