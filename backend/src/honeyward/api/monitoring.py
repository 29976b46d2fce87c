# backend/src/honeyward/api/monitoring.py
#
# Ingest endpoints called by the portal frontend:
#   POST /monitor/inspect           : classify a captured input
#   POST /monitor/activity          : track a user/system action
#   POST /monitor/honeypot/{event}  : honeypot-specific events
#
# None of these ever report a detection failure to the caller as an error;
# a bad request body is a 422 from FastAPI, everything else returns 200.

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from honeyward.api.deps import (
    client_context,
    get_classifier,
    get_honeypot,
    get_recorder,
    session_id,
)
from honeyward.models import Incident, Severity

router = APIRouter(prefix="/monitor", tags=["monitor"])


# ---------------------------------------------------------------------------
# Request / response schemas
# ---------------------------------------------------------------------------

class ClientInfo(BaseModel):
    user_agent: Optional[str]       = None
    language:   Optional[str]       = None
    languages:  Optional[List[str]] = None
    platform:   Optional[str]       = None
    screen:     Optional[str]       = None
    timezone:   Optional[str]       = None
    canvas:     Optional[str]       = None
    webdriver:  Optional[bool]      = None
    referrer:   Optional[str]       = None


class InspectRequest(BaseModel):
    input:    str
    location: str = Field(..., min_length=1)
    client:   Optional[ClientInfo] = None


class MatchResponse(BaseModel):
    category:   str
    severity:   str
    signature:  str
    signatures: List[str]


class IncidentResponse(BaseModel):
    id:          str
    session_id:  str
    category:    str
    severity:    str
    payload:     str
    location:    str
    fingerprint: str
    timestamp:   datetime

    @classmethod
    def from_incident(cls, incident: Incident) -> "IncidentResponse":
        return cls(
            id=          incident.id,
            session_id=  incident.session_id,
            category=    incident.category,
            severity=    incident.severity.value,
            payload=     incident.payload,
            location=    incident.location,
            fingerprint= incident.fingerprint,
            timestamp=   incident.timestamp,
        )


class InspectResponse(BaseModel):
    location:  str
    matched:   bool
    matches:   List[MatchResponse]
    incidents: List[IncidentResponse]


class ActivityRequest(BaseModel):
    action:   str = Field(..., min_length=1)
    page:     Optional[str]            = None
    user_id:  Optional[str]            = None
    severity: Severity                 = Severity.LOW
    data:     Optional[Dict[str, Any]] = None
    client:   Optional[ClientInfo]     = None


class ActivityResponse(BaseModel):
    action:      str
    session_id:  str
    fingerprint: str
    severity:    str
    timestamp:   datetime


class HoneypotRequest(BaseModel):
    # Fields used depend on the event type
    path:           Optional[str]  = None
    method:         str            = "GET"
    email:          Optional[str]  = None
    success:        bool           = False
    attempt:        int            = 1
    status_code:    int            = 200
    input_field:    Optional[str]  = None
    payload:        Optional[str]  = None
    injection_type: Optional[str]  = None
    target:         Optional[str]  = None
    probe_type:     Optional[str]  = None
    client:         Optional[ClientInfo] = None


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("/inspect", response_model=InspectResponse)
def inspect_input(
    body:       InspectRequest,
    request:    Request,
    classifier = Depends(get_classifier),
    recorder   = Depends(get_recorder),
):
    context = client_context(request, body.client.model_dump() if body.client else None)
    result  = classifier.classify(body.input, body.location)

    incidents = recorder.record_classification(result, context, session_id(request))

    return InspectResponse(
        location=  result.location,
        matched=   result.matched,
        matches=   [
            MatchResponse(
                category=   m.category.value,
                severity=   m.severity.value,
                signature=  m.signature,
                signatures= list(m.all_signatures),
            )
            for m in result.matches
        ],
        incidents= [IncidentResponse.from_incident(i) for i in incidents],
    )


@router.post("/activity", response_model=ActivityResponse)
def track_activity(
    body:     ActivityRequest,
    request:  Request,
    recorder = Depends(get_recorder),
):
    context = client_context(request, body.client.model_dump() if body.client else None)
    event   = recorder.track_activity(
        body.action,
        session_id= session_id(request),
        context=    context,
        page=       body.page,
        user_id=    body.user_id,
        severity=   body.severity,
        data=       body.data,
    )
    return ActivityResponse(
        action=      event.action,
        session_id=  event.session_id,
        fingerprint= event.fingerprint,
        severity=    event.severity.value,
        timestamp=   event.timestamp,
    )


def _require(value, name: str):
    if value is None:
        raise HTTPException(422, detail=f"'{name}' is required for this event")
    return value


@router.post("/honeypot/{event_type}", response_model=IncidentResponse)
def track_honeypot_event(
    event_type: str,
    body:       HoneypotRequest,
    request:    Request,
    honeypot   = Depends(get_honeypot),
):
    context = client_context(request, body.client.model_dump() if body.client else None)
    session = session_id(request)

    if event_type == "admin_access":
        incident = honeypot.track_admin_panel_access(
            _require(body.path, "path"), body.method, session, context
        )
    elif event_type == "credential_stuffing":
        incident = honeypot.track_credential_attempt(
            _require(body.email, "email"), body.success, body.attempt, session, context
        )
    elif event_type == "enumeration":
        incident = honeypot.track_enumeration(
            _require(body.path, "path"), body.status_code, session, context
        )
    elif event_type == "injection_attempt":
        incident = honeypot.track_injection_attempt(
            _require(body.input_field, "input_field"),
            body.payload or "",
            _require(body.injection_type, "injection_type"),
            session, context,
        )
    elif event_type == "vulnerability_probe":
        incident = honeypot.track_vulnerability_probe(
            _require(body.target, "target"),
            _require(body.probe_type, "probe_type"),
            body.payload, session, context,
        )
    else:
        raise HTTPException(404, detail=f"Unknown honeypot event '{event_type}'")

    return IncidentResponse.from_incident(incident)
