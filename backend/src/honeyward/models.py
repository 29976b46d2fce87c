# backend/src/honeyward/models.py
#
# Shared records flowing through HoneyWard: what the classifier matches,
# what the recorder stores, and what the heuristics emit.

import re
import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class HoneyWardError(Exception):
    """Base class for errors raised by the detection core."""


class InputValidationError(HoneyWardError, TypeError):
    """Raised when the classifier is handed something that is not a string."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Category(str, Enum):
    XSS               = "xss"
    SQL_INJECTION     = "sql_injection"
    PATH_TRAVERSAL    = "path_traversal"
    COMMAND_INJECTION = "command_injection"
    LDAP_INJECTION    = "ldap_injection"


class Severity(str, Enum):
    LOW      = "low"
    MEDIUM   = "medium"
    HIGH     = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def coerce(cls, value) -> "Severity":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown severity: {value!r}") from None


_SEVERITY_RANK = {
    Severity.LOW:      0,
    Severity.MEDIUM:   1,
    Severity.HIGH:     2,
    Severity.CRITICAL: 3,
}


# Finding types produced outside the signature catalog
RAPID_REQUESTS = "rapid_requests"
BOT_DETECTION  = "bot_detection"

HONEYPOT_EVENT_TYPES = (
    "vulnerability_probe",
    "admin_access",
    "credential_stuffing",
    "enumeration",
    "injection_attempt",
)

INCIDENT_CATEGORIES = (
    {c.value for c in Category}
    | {RAPID_REQUESTS, BOT_DETECTION}
    | {f"honeypot_{t}" for t in HONEYPOT_EVENT_TYPES}
)


# ---------------------------------------------------------------------------
# Signatures and classification
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Signature:
    category: Category
    name:     str
    pattern:  re.Pattern
    severity: Severity
    example:  str = ""                     # canonical payload this signature must catch

    def search(self, text: str) -> bool:
        return self.pattern.search(text) is not None


@dataclass(frozen=True)
class Match:
    category:       Category
    severity:       Severity
    signature:      str                    # first signature that matched
    all_signatures: Tuple[str, ...] = ()


@dataclass
class ClassificationResult:
    input:     str
    location:  str
    matches:   List[Match]
    timestamp: datetime = field(default_factory=utcnow)

    @property
    def matched(self) -> bool:
        return bool(self.matches)

    def categories(self) -> set:
        return {(m.category, m.severity) for m in self.matches}


# ---------------------------------------------------------------------------
# Client context
# ---------------------------------------------------------------------------

@dataclass
class ClientContext:
    user_agent: Optional[str]       = None
    ip_address: Optional[str]       = None
    language:   Optional[str]       = None
    languages:  Optional[List[str]] = None
    platform:   Optional[str]       = None
    screen:     Optional[str]       = None      # "1920x1080"
    timezone:   Optional[str]       = None
    canvas:     Optional[str]       = None      # rendering-surface signature
    webdriver:  Optional[bool]      = None
    referrer:   Optional[str]       = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ClientContext":
        if not data:
            return cls()
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Stored records
# ---------------------------------------------------------------------------

@dataclass
class Incident:
    session_id:  str
    category:    str
    severity:    Severity
    payload:     str
    location:    str
    fingerprint: str
    user_agent:  Optional[str]  = None
    ip_address:  Optional[str]  = None
    description: str            = ""
    metadata:    Dict[str, Any] = field(default_factory=dict)
    timestamp:   datetime       = field(default_factory=utcnow)
    resolved:    bool           = False
    id:          str            = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["severity"]  = self.severity.value
        data["timestamp"] = self.timestamp.isoformat()
        return data


@dataclass
class ActivityEvent:
    action:      str
    session_id:  str
    user_id:     Optional[str]  = None
    page:        Optional[str]  = None
    user_agent:  Optional[str]  = None
    ip_address:  Optional[str]  = None
    fingerprint: str            = ""
    severity:    Severity       = Severity.LOW
    data:        Dict[str, Any] = field(default_factory=dict)
    client:      ClientContext  = field(default_factory=ClientContext)
    timestamp:   datetime       = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["severity"]  = self.severity.value
        data["timestamp"] = self.timestamp.isoformat()
        return data


@dataclass
class Finding:
    type:     str
    severity: Severity
    payload:  str
    metadata: Dict[str, Any] = field(default_factory=dict)
