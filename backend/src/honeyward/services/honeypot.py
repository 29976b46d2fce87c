# backend/src/honeyward/services/honeypot.py
#
# Honeypot-specific event producers: admin panel discovery, credential
# stuffing, enumeration, injection attempts and vulnerability probes.
# Each event lands in the honeypot ring buffer as an Incident and is
# mirrored into the activity log as "honeypot_event".

from typing import Any, Dict, Optional

from honeyward.models import ClientContext, Incident, Severity
from honeyward.services.fingerprint import fingerprint
from honeyward.services.log_store import HONEYPOT

SUSPICIOUS_PATHS = (
    "/admin", "/wp-admin", "/administrator", "/phpmyadmin", "/mysql",
    "/backup", "/config", "/.env", "/database", "/secret", "/hidden",
    "/test", "/debug", "/api/admin", "/robots.txt", "/sitemap.xml",
)

INJECTION_PAYLOAD_LENGTH = 500
PROBE_PAYLOAD_LENGTH     = 300


def is_suspicious_path(path: str) -> bool:
    lowered = (path or "").lower()
    return any(s in lowered for s in SUSPICIOUS_PATHS)


class HoneypotTracker:
    def __init__(self, recorder):
        self.recorder = recorder

    def _log_event(
        self,
        event_type:    str,
        severity:      Severity,
        details:       Dict[str, Any],
        session_id:    Optional[str],
        context:       Optional[ClientContext],
        location:      str,
        payload:       str = "",
        attack_vector: Optional[str] = None,
    ) -> Incident:
        metadata = dict(details)
        if attack_vector:
            metadata["attack_vector"] = attack_vector

        incident = self.recorder.record(
            category=    f"honeypot_{event_type}",
            severity=    severity,
            payload=     payload,
            location=    location,
            context=     context,
            session_id=  session_id,
            log=         HONEYPOT,
            description= f"Honeypot event: {event_type}",
            metadata=    metadata,
        )
        self.recorder.track_activity(
            action=     "honeypot_event",
            session_id= session_id,
            context=    context,
            page=       location,
            severity=   severity,
            data=       {"type": event_type, "details": metadata},
        )
        return incident

    def track_admin_panel_access(
        self,
        path:       str,
        method:     str = "GET",
        session_id: Optional[str] = None,
        context:    Optional[ClientContext] = None,
    ) -> Incident:
        context = context or ClientContext()
        return self._log_event(
            "admin_access", Severity.HIGH,
            {"path": path, "method": method, "referrer": context.referrer},
            session_id, context, location=path, payload=path,
        )

    def track_credential_attempt(
        self,
        email:      str,
        success:    bool,
        attempt:    int,
        session_id: Optional[str] = None,
        context:    Optional[ClientContext] = None,
    ) -> Incident:
        severity = Severity.CRITICAL if attempt > 3 else Severity.HIGH
        return self._log_event(
            "credential_stuffing", severity,
            {
                "email":                email,
                "success":              success,
                "attempt":              attempt,
                "potential_brute_force": attempt > 5,
            },
            session_id, context, location="login", payload=email,
        )

    def track_enumeration(
        self,
        path:        str,
        status_code: int,
        session_id:  Optional[str] = None,
        context:     Optional[ClientContext] = None,
    ) -> Incident:
        return self._log_event(
            "enumeration", Severity.MEDIUM,
            {
                "path":            path,
                "status_code":     status_code,
                "suspicious_path": is_suspicious_path(path),
            },
            session_id, context, location=path, payload=path,
        )

    def track_injection_attempt(
        self,
        input_field:    str,
        payload:        str,
        injection_type: str,
        session_id:     Optional[str] = None,
        context:        Optional[ClientContext] = None,
    ) -> Incident:
        return self._log_event(
            "injection_attempt", Severity.CRITICAL,
            {"input_field": input_field, "injection_type": injection_type},
            session_id, context, location=input_field,
            payload=(payload or "")[:INJECTION_PAYLOAD_LENGTH],
            attack_vector=injection_type,
        )

    def track_vulnerability_probe(
        self,
        target:     str,
        probe_type: str,
        payload:    Optional[str] = None,
        session_id: Optional[str] = None,
        context:    Optional[ClientContext] = None,
    ) -> Incident:
        return self._log_event(
            "vulnerability_probe", Severity.HIGH,
            {
                "target":      target,
                "probe_type":  probe_type,
                "fingerprint": fingerprint(context),
            },
            session_id, context, location=target,
            payload=(payload or "")[:PROBE_PAYLOAD_LENGTH],
        )
