# backend/src/honeyward/services/recorder.py
#
# Turns classifier matches, heuristic findings and honeypot events into
# Incident / ActivityEvent records.
#
# record() and track_activity() never block on the persistence sink:
# they append to the local ring buffer, enqueue a job and return. A single
# worker thread drains the queue, one create() attempt per record. Sink
# failures are logged and dropped; the ring buffer is the local backstop.

import logging
import queue
import threading
from typing import Any, Dict, List, Optional, Union

from honeyward.db import ACTIVITY as ACTIVITY_RECORD, INCIDENT as INCIDENT_RECORD
from honeyward.models import (
    INCIDENT_CATEGORIES,
    ActivityEvent,
    ClassificationResult,
    ClientContext,
    Finding,
    Incident,
    Severity,
)
from honeyward.services.fingerprint import fingerprint
from honeyward.services.log_store import ACTIVITY, ATTACK, LogStore

logger = logging.getLogger(__name__)

PAYLOAD_MAX_LENGTH = 500
ANONYMOUS_SESSION  = "anonymous"
SECURITY_INCIDENT  = "security_incident"

_STOP = object()


def truncate_payload(value, max_length: int = PAYLOAD_MAX_LENGTH) -> str:
    """Cap a payload at max_length characters. Idempotent."""
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    return value[:max_length]


def _category_value(category) -> str:
    value = getattr(category, "value", category)
    if not value or value not in INCIDENT_CATEGORIES:
        raise ValueError(f"Unknown incident category: {category!r}")
    return value


class IncidentRecorder:
    def __init__(
        self,
        store:              LogStore,
        sink,
        payload_max_length: int = PAYLOAD_MAX_LENGTH,
        queue_size:         int = 1000,
    ):
        self.store              = store
        self.sink               = sink
        self.payload_max_length = payload_max_length
        self._queue             = queue.Queue(maxsize=queue_size)
        self._worker: Optional[threading.Thread] = None
        self.dropped            = 0
        self.failed             = 0

    # -----------------------------------------------------------------------
    # Worker lifecycle
    # -----------------------------------------------------------------------

    def start(self) -> None:
        if self._worker and self._worker.is_alive():
            return
        self._worker = threading.Thread(
            target=self._drain, name="honeyward-sink", daemon=True
        )
        self._worker.start()
        logger.info("[recorder] Persistence worker started")

    def stop(self, timeout: float = 5.0) -> None:
        if not self._worker:
            return
        self._queue.put(_STOP)
        self._worker.join(timeout)
        self._worker = None
        logger.info("[recorder] Persistence worker stopped")

    def flush(self) -> None:
        """Block until every queued job has been attempted."""
        if self._worker and self._worker.is_alive():
            self._queue.join()
            return
        # No worker running: drain inline
        while True:
            try:
                job = self._queue.get_nowait()
            except queue.Empty:
                return
            self._process(job)
            self._queue.task_done()

    def _drain(self) -> None:
        while True:
            job = self._queue.get()
            try:
                if job is _STOP:
                    return
                self._process(job)
            finally:
                self._queue.task_done()

    def _process(self, job) -> None:
        if job is _STOP:
            return
        kind, record = job
        try:
            self.sink.create(kind, record)
        except Exception as e:
            self.failed += 1
            logger.warning("[recorder] Sink write failed for %s record: %s", kind, e)

    def _enqueue(self, kind: str, record) -> None:
        try:
            self._queue.put_nowait((kind, record))
        except queue.Full:
            self.dropped += 1
            logger.warning("[recorder] Sink queue full, dropped %s record", kind)

    # -----------------------------------------------------------------------
    # Recording
    # -----------------------------------------------------------------------

    def record(
        self,
        category,
        severity:    Union[Severity, str],
        payload,
        location:    str,
        context:     Optional[ClientContext] = None,
        session_id:  Optional[str]           = None,
        log:         str                     = ATTACK,
        description: Optional[str]           = None,
        metadata:    Optional[Dict[str, Any]] = None,
    ) -> Incident:
        context  = context or ClientContext()
        category = _category_value(category)
        severity = Severity.coerce(severity)

        incident = Incident(
            session_id=  session_id or ANONYMOUS_SESSION,
            category=    category,
            severity=    severity,
            payload=     truncate_payload(payload, self.payload_max_length),
            location=    location,
            fingerprint= fingerprint(context),
            user_agent=  context.user_agent,
            ip_address=  context.ip_address,
            description= description or f"Potential {category} detected at {location}",
            metadata=    dict(metadata or {}),
        )

        self.store.append(log, incident)
        self._enqueue(INCIDENT_RECORD, incident)

        logger.warning(
            "[recorder] %s %s at %s (session %s)",
            severity.value.upper(), category, location, incident.session_id,
        )
        return incident

    def record_classification(
        self,
        result:     ClassificationResult,
        context:    Optional[ClientContext] = None,
        session_id: Optional[str]           = None,
    ) -> List[Incident]:
        """
        One incident per matched category, each mirrored into the activity
        log as a "security_incident" so activity reports show the attack.
        """
        incidents = [
            self.record(
                category=   m.category,
                severity=   m.severity,
                payload=    result.input,
                location=   result.location,
                context=    context,
                session_id= session_id,
                metadata=   {"signature": m.signature, "signatures": list(m.all_signatures)},
            )
            for m in result.matches
        ]
        for incident in incidents:
            self.track_activity(
                SECURITY_INCIDENT,
                session_id= session_id,
                context=    context,
                page=       result.location,
                severity=   incident.severity,
                data=       {
                    "type":        incident.category,
                    "incident_id": incident.id,
                    "payload":     incident.payload,
                },
            )
        return incidents

    def record_finding(
        self,
        finding:    Finding,
        context:    Optional[ClientContext] = None,
        session_id: Optional[str]           = None,
        location:   str                     = "global",
    ) -> Incident:
        return self.record(
            category=   finding.type,
            severity=   finding.severity,
            payload=    finding.payload,
            location=   location,
            context=    context,
            session_id= session_id,
            metadata=   finding.metadata,
        )

    def track_activity(
        self,
        action:     str,
        session_id: Optional[str]            = None,
        context:    Optional[ClientContext]  = None,
        page:       Optional[str]            = None,
        user_id:    Optional[str]            = None,
        severity:   Union[Severity, str]     = Severity.LOW,
        data:       Optional[Dict[str, Any]] = None,
    ) -> ActivityEvent:
        context = context or ClientContext()
        event = ActivityEvent(
            action=      action,
            session_id=  session_id or ANONYMOUS_SESSION,
            user_id=     user_id,
            page=        page,
            user_agent=  context.user_agent,
            ip_address=  context.ip_address,
            fingerprint= fingerprint(context),
            severity=    Severity.coerce(severity),
            data=        dict(data or {}),
            client=      context,
        )
        self.store.append(ACTIVITY, event)
        self._enqueue(ACTIVITY_RECORD, event)
        return event
