# backend/src/honeyward/services/heuristics.py
#
# Secondary checks that do not look at payloads:
#   - burst detection over the activity ring buffer
#   - automation / headless-client detection from client attributes
#
# AnomalyScanner runs both on a timer thread and records findings through
# the same IncidentRecorder the request path uses.

import logging
import re
import threading
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from honeyward.models import (
    BOT_DETECTION,
    RAPID_REQUESTS,
    ActivityEvent,
    ClientContext,
    Finding,
    Severity,
    utcnow,
)
from honeyward.services.log_store import LogStore

logger = logging.getLogger(__name__)

# Thresholds
BURST_WINDOW_S  = 60
BURST_THRESHOLD = 20
SCAN_INTERVAL_S = 30.0

# Sessions remembered as already flagged; oldest forgotten first
FLAGGED_SESSION_CAP = 10_000

AUTOMATION_UA = re.compile(
    r"HeadlessChrome|PhantomJS|Selenium|WebDriver|puppeteer|playwright",
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Burst detection
# ---------------------------------------------------------------------------

def detect_burst(
    events:         Iterable[ActivityEvent],
    now:            Optional[datetime] = None,
    window_seconds: int = BURST_WINDOW_S,
    threshold:      int = BURST_THRESHOLD,
) -> Optional[Finding]:
    """
    Count events inside the trailing window. One finding per call when the
    count exceeds the threshold, however many events are in the window.
    """
    now   = now or utcnow()
    start = now - timedelta(seconds=window_seconds)
    count = sum(1 for e in events if start <= e.timestamp <= now)

    if count <= threshold:
        return None

    return Finding(
        type=     RAPID_REQUESTS,
        severity= Severity.MEDIUM,
        payload=  f'{{"requestCount": {count}}}',
        metadata= {
            "request_count":  count,
            "window_seconds": window_seconds,
            "threshold":      threshold,
        },
    )


# ---------------------------------------------------------------------------
# Automation heuristic
# ---------------------------------------------------------------------------

def automation_signals(context: ClientContext) -> Dict[str, bool]:
    ua = context.user_agent or ""
    return {
        "no_languages":    context.languages is not None and len(context.languages) == 0,
        "automation_ua":   bool(AUTOMATION_UA.search(ua)),
        "webdriver_flag":  bool(context.webdriver),
    }


def detect_automation(context: ClientContext) -> Optional[Finding]:
    signals = automation_signals(context)
    if not any(signals.values()):
        return None

    return Finding(
        type=     BOT_DETECTION,
        severity= Severity.MEDIUM,
        payload=  context.user_agent or "",
        metadata= {
            "signals":   [name for name, fired in signals.items() if fired],
            "user_agent": context.user_agent,
            "languages": context.languages,
            "platform":  context.platform,
            "webdriver": context.webdriver,
        },
    )


# ---------------------------------------------------------------------------
# Periodic scanner
# ---------------------------------------------------------------------------

class AnomalyScanner:
    def __init__(
        self,
        store:          LogStore,
        recorder,
        interval_s:     float = SCAN_INTERVAL_S,
        window_seconds: int   = BURST_WINDOW_S,
        threshold:      int   = BURST_THRESHOLD,
        flagged_cap:    int   = FLAGGED_SESSION_CAP,
    ):
        self.store          = store
        self.recorder       = recorder
        self.interval_s     = interval_s
        self.window_seconds = window_seconds
        self.threshold      = threshold
        self.flagged_cap    = flagged_cap
        self._flagged_bots  = OrderedDict()
        self._stop          = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def scan(self, now: Optional[datetime] = None) -> List[Finding]:
        events   = self.store.activity.snapshot()
        findings = []

        burst = detect_burst(events, now, self.window_seconds, self.threshold)
        if burst:
            self.recorder.record_finding(burst)
            findings.append(burst)

        # Latest context per session, each session flagged at most once
        latest: Dict[str, ActivityEvent] = {}
        for event in events:
            latest[event.session_id] = event

        for session_id, event in latest.items():
            if session_id in self._flagged_bots:
                continue
            bot = detect_automation(event.client)
            if bot:
                self._remember(session_id)
                self.recorder.record_finding(bot, context=event.client, session_id=session_id)
                findings.append(bot)

        if findings:
            logger.info("[heuristics] Scan produced %d finding(s)", len(findings))
        return findings

    def _remember(self, session_id: str) -> None:
        self._flagged_bots[session_id] = None
        while len(self._flagged_bots) > self.flagged_cap:
            self._flagged_bots.popitem(last=False)

    def _run(self) -> None:
        while not self._stop.wait(self.interval_s):
            try:
                self.scan()
            except Exception:
                logger.exception("[heuristics] Scan failed")

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="honeyward-scanner", daemon=True
        )
        self._thread.start()
        logger.info("[heuristics] Scanner started, interval %.0fs", self.interval_s)

    def stop(self) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=5.0)
            self._thread = None
