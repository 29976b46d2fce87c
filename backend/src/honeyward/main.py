# backend/src/honeyward/main.py
#
# Composition root: builds exactly one of each service and hangs it on
# app.state. Routes reach them through honeyward.api.deps.

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from honeyward.config import Settings, settings as default_settings
from honeyward.db import MemoryStore
from honeyward.api.auth       import router as auth_router
from honeyward.api.monitoring import router as monitoring_router
from honeyward.api.reports    import router as reports_router
from honeyward.api.middleware import log_requests
from honeyward.services.classifier import Classifier
from honeyward.services.heuristics import AnomalyScanner
from honeyward.services.honeypot   import HoneypotTracker
from honeyward.services.log_store  import LogStore
from honeyward.services.recorder   import IncidentRecorder
from honeyward.services.reporting  import Reporter
from honeyward.services.severity   import SeverityPolicy

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


def create_app(settings: Settings = default_settings, sink=None) -> FastAPI:
    configure_logging(settings.log_level)

    sink       = sink if sink is not None else MemoryStore()
    log_store  = LogStore(
        activity_capacity= settings.activity_log_capacity,
        attack_capacity=   settings.attack_log_capacity,
        honeypot_capacity= settings.honeypot_log_capacity,
    )
    classifier = Classifier(
        policy=              SeverityPolicy(settings.sensitive_locations, settings.critical_locations),
        max_input_length=    settings.classify_max_length,
        result_input_length= settings.payload_max_length,
    )
    recorder   = IncidentRecorder(
        log_store,
        sink,
        payload_max_length= settings.payload_max_length,
        queue_size=         settings.sink_queue_size,
    )
    scanner    = AnomalyScanner(
        log_store,
        recorder,
        interval_s=     settings.scan_interval_s,
        window_seconds= settings.burst_window_seconds,
        threshold=      settings.burst_threshold,
        flagged_cap=    settings.flagged_session_cap,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        recorder.start()
        if settings.enable_scanner:
            scanner.start()
        logger.info("[main] HoneyWard monitoring active (%s)", settings.environment)
        try:
            yield
        finally:
            scanner.stop()
            recorder.stop()

    app = FastAPI(
        title="HoneyWard",
        description="Attack detection and incident logging for the portal honeypot.",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings   = settings
    app.state.sink       = sink
    app.state.log_store  = log_store
    app.state.classifier = classifier
    app.state.recorder   = recorder
    app.state.scanner    = scanner
    app.state.honeypot   = HoneypotTracker(recorder)
    app.state.reporter   = Reporter(sink)

    app.middleware("http")(log_requests)

    # CORS: allow the portal frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(monitoring_router)
    app.include_router(reports_router)

    @app.get("/health")
    def health():
        return {"status": "ok", "service": "HoneyWard", "buffers": log_store.sizes()}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=default_settings.host, port=default_settings.port)
