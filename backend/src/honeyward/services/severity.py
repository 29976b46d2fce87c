# backend/src/honeyward/services/severity.py
#
# Severity policy: the one place where a signature's default severity is
# adjusted for where the input came from. Locations that front the
# deliberately exposed admin endpoints are escalated; nothing is ever
# de-escalated below the signature default.

from typing import Iterable, Optional

from honeyward.models import Severity, Signature

DEFAULT_SENSITIVE_LOCATIONS = frozenset({
    "admin_search",
    "search_query",
    "input_email",
    "input_password",
    "login_email",
    "login_password",
    "login_username",
})

DEFAULT_CRITICAL_LOCATIONS = frozenset({
    "admin_user_lookup",
    "direct_sql",
})


def max_severity(a: Severity, b: Severity) -> Severity:
    return a if a.rank >= b.rank else b


class SeverityPolicy:
    def __init__(
        self,
        sensitive_locations: Iterable[str] = DEFAULT_SENSITIVE_LOCATIONS,
        critical_locations:  Iterable[str] = DEFAULT_CRITICAL_LOCATIONS,
    ):
        self.sensitive_locations = frozenset(l.lower() for l in sensitive_locations)
        self.critical_locations  = frozenset(l.lower() for l in critical_locations)

    def resolve(
        self,
        signature: Signature,
        location:  str,
        override:  Optional[Severity] = None,
    ) -> Severity:
        """
        Final severity for one signature match.

        Order: explicit caller override, then critical locations (forced
        critical), then sensitive locations (at least high), then the
        signature default.
        """
        if override is not None:
            return Severity.coerce(override)

        loc = (location or "").lower()
        if loc in self.critical_locations:
            return Severity.CRITICAL
        if loc in self.sensitive_locations:
            return max_severity(signature.severity, Severity.HIGH)
        return signature.severity
