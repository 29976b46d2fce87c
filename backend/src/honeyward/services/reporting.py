# backend/src/honeyward/services/reporting.py
#
# Read-only summary queries over the record store, for the admin
# dashboard and the report CLI. Nothing here writes.

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from honeyward.db import ACTIVITY, INCIDENT
from honeyward.models import Category, Severity, utcnow

LOGIN_SUCCESS = "login_successful"
LOGIN_FAILED  = "login_failed"


def _parse_ts(value) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        ts = value
    else:
        try:
            ts = datetime.fromisoformat(str(value))
        except ValueError:
            return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def top_n(values, n: int) -> List[Tuple[Any, int]]:
    """
    Most frequent values, highest count first. Ties keep first-seen order:
    Counter preserves insertion order and sorted() is stable.
    """
    counts = Counter(v for v in values if v not in (None, ""))
    return sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:n]


class Reporter:
    def __init__(self, sink):
        self.sink = sink

    # --- Overall ---

    def distinct_sessions(self) -> int:
        return len({d.get("session_id") for d in self.sink.find(ACTIVITY) if d.get("session_id")})

    def distinct_ips(self) -> int:
        return len({d.get("ip_address") for d in self.sink.find(ACTIVITY) if d.get("ip_address")})

    def total_activities(self) -> int:
        return self.sink.count(ACTIVITY)

    # --- Incidents ---

    def incident_counts_by_severity(self) -> Dict[str, int]:
        counts = {s.value: 0 for s in Severity}
        for doc in self.sink.find(INCIDENT):
            counts[doc["severity"]] = counts.get(doc["severity"], 0) + 1
        return counts

    def incident_counts_by_category(self) -> Dict[str, int]:
        counts = {c.value: 0 for c in Category}
        for doc in self.sink.find(INCIDENT):
            counts[doc["category"]] = counts.get(doc["category"], 0) + 1
        return counts

    def top_offenders(self, n: int = 10) -> List[Dict[str, Any]]:
        return [
            {"ip_address": ip, "incidents": count}
            for ip, count in top_n((d.get("ip_address") for d in self.sink.find(INCIDENT)), n)
        ]

    def top_fingerprints(self, n: int = 10) -> List[Dict[str, Any]]:
        return [
            {"fingerprint": fp, "incidents": count}
            for fp, count in top_n((d.get("fingerprint") for d in self.sink.find(INCIDENT)), n)
        ]

    def unresolved_incidents(self) -> int:
        return len(self.sink.find(INCIDENT, lambda d: not d.get("resolved")))

    def recent_critical(self, n: int = 5) -> List[Dict[str, Any]]:
        critical = self.sink.find(INCIDENT, lambda d: d.get("severity") == Severity.CRITICAL.value)
        oldest   = datetime.min.replace(tzinfo=timezone.utc)
        critical.sort(key=lambda d: _parse_ts(d.get("timestamp")) or oldest, reverse=True)
        return critical[:n]

    # --- Activity ---

    def top_actions(self, n: int = 10) -> List[Dict[str, Any]]:
        return [
            {"action": action, "count": count}
            for action, count in top_n((d.get("action") for d in self.sink.find(ACTIVITY)), n)
        ]

    def count_since(
        self,
        hours: float = 24,
        kind:  str   = ACTIVITY,
        now:   Optional[datetime] = None,
    ) -> int:
        cutoff = (now or utcnow()) - timedelta(hours=hours)
        count  = 0
        for doc in self.sink.find(kind):
            ts = _parse_ts(doc.get("timestamp"))
            if ts is not None and ts >= cutoff:
                count += 1
        return count

    def login_funnel(self) -> Dict[str, Any]:
        """Attempts are logins with an outcome; "login_attempt" markers are not counted."""
        actions   = [d.get("action") for d in self.sink.find(ACTIVITY)]
        successes = sum(1 for a in actions if a == LOGIN_SUCCESS)
        failures  = sum(1 for a in actions if a == LOGIN_FAILED)
        attempts  = successes + failures
        rate      = round(successes / attempts * 100, 2) if attempts else 0.0
        return {
            "attempts":     attempts,
            "successes":    successes,
            "failures":     failures,
            "success_rate": rate,
        }

    def logs(
        self,
        limit:    int = 50,
        severity: Optional[str] = None,
        action:   Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Newest activity records first, optionally filtered."""
        def keep(d):
            if severity and d.get("severity") != severity:
                return False
            if action and action.lower() not in (d.get("action") or "").lower():
                return False
            return True

        docs = self.sink.find(ACTIVITY, keep)
        docs.reverse()
        return docs[:limit]

    # --- Everything ---

    def summary(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        return {
            "sessions":              self.distinct_sessions(),
            "unique_ips":            self.distinct_ips(),
            "total_activities":      self.total_activities(),
            "total_incidents":       self.sink.count(INCIDENT),
            "unresolved_incidents":  self.unresolved_incidents(),
            "incidents_by_severity": self.incident_counts_by_severity(),
            "incidents_by_category": self.incident_counts_by_category(),
            "top_offenders":         self.top_offenders(),
            "top_actions":           self.top_actions(),
            "activities_24h":        self.count_since(24, ACTIVITY, now),
            "incidents_24h":         self.count_since(24, INCIDENT, now),
            "login":                 self.login_funnel(),
        }
