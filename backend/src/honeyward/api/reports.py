# backend/src/honeyward/api/reports.py
#
# Admin dashboard reads, plus the triage action that marks an incident
# resolved. All routes require a bearer token.

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from honeyward.api.auth import verify_token
from honeyward.api.deps import get_log_store, get_reporter, get_sink
from honeyward.db import INCIDENT
from honeyward.services.exporter import logs_to_csv

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/summary")
def summary(
    username: str = Depends(verify_token),
    reporter      = Depends(get_reporter),
) -> Dict[str, Any]:
    return reporter.summary()


@router.get("/logs")
def logs(
    limit:    int           = Query(50, ge=1, le=1000),
    severity: Optional[str] = None,
    action:   Optional[str] = None,
    username: str           = Depends(verify_token),
    reporter                = Depends(get_reporter),
) -> List[Dict[str, Any]]:
    return reporter.logs(limit=limit, severity=severity, action=action)


@router.get("/local")
def local_buffers(
    username: str = Depends(verify_token),
    store         = Depends(get_log_store),
) -> Dict[str, int]:
    """Current fill level of each ring buffer."""
    return store.sizes()


@router.get("/export")
def export(
    username: str = Depends(verify_token),
    reporter      = Depends(get_reporter),
):
    csv_text = logs_to_csv(reporter.logs(limit=10_000))
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=security_logs.csv"},
    )


@router.post("/incidents/{incident_id}/resolve")
def resolve_incident(
    incident_id: str,
    username:    str = Depends(verify_token),
    sink             = Depends(get_sink),
) -> Dict[str, Any]:
    doc = sink.update(INCIDENT, incident_id, resolved=True)
    if doc is None:
        raise HTTPException(404, detail=f"Incident {incident_id} not found")
    return doc
