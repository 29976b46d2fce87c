# backend/src/honeyward/services/exporter.py

import csv
import io
import json
import logging
import os
from typing import Dict, Iterable, List

logger = logging.getLogger(__name__)

# Column order of the dashboard "export logs" download
LOG_FIELDS = [
    "timestamp", "session_id", "user_id", "action", "page",
    "ip_address", "user_agent", "severity", "data",
]

INCIDENT_FIELDS = [
    "timestamp", "id", "session_id", "category", "severity", "location",
    "ip_address", "fingerprint", "resolved", "payload",
]

EXPORT_LIMIT = 10_000


def _row(doc: Dict, fields: List[str]) -> Dict:
    row = {}
    for name in fields:
        value = doc.get(name)
        if isinstance(value, (dict, list)):
            value = json.dumps(value, default=str)
        row[name] = "" if value is None else value
    return row


def logs_to_csv(docs: Iterable[Dict], fields: List[str] = LOG_FIELDS) -> str:
    """Render records as CSV text, at most EXPORT_LIMIT rows."""
    buf    = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=fields, extrasaction="ignore")
    writer.writeheader()
    for i, doc in enumerate(docs):
        if i >= EXPORT_LIMIT:
            break
        writer.writerow(_row(doc, fields))
    return buf.getvalue()


def export_logs(docs: List[Dict], filepath: str, fields: List[str] = LOG_FIELDS) -> int:
    """Write records to a CSV file. Returns the number of rows written."""
    os.makedirs(os.path.dirname(os.path.abspath(filepath)), exist_ok=True)
    text = logs_to_csv(docs, fields)
    with open(filepath, "w", newline="", encoding="utf-8") as f:
        f.write(text)

    rows = min(len(docs), EXPORT_LIMIT)
    logger.info("[exporter] Logs → %s (%s rows)", filepath, f"{rows:,}")
    return rows
