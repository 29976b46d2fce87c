# backend/src/honeyward/db.py
#
# In-memory record store: the persistence sink the recorder forwards to
# and the reporting queries read from. Records are kept as plain dicts,
# the same shape a document database would hand back.
# NOTE: records lost on server restart. Swap for a real database by
# implementing create() / find() / update() with the same signatures.

import json
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

INCIDENT = "incident"
ACTIVITY = "activity"

KINDS = (INCIDENT, ACTIVITY)


class MemoryStore:
    def __init__(self):
        self._records: Dict[str, List[Dict[str, Any]]] = {kind: [] for kind in KINDS}
        self._lock = threading.Lock()

    def create(self, kind: str, record) -> Dict[str, Any]:
        if kind not in self._records:
            raise ValueError(f"Unknown record kind: {kind}")
        doc = record.to_dict() if hasattr(record, "to_dict") else dict(record)
        with self._lock:
            self._records[kind].append(doc)
        return doc

    def find(
        self,
        kind:  str,
        where: Optional[Callable[[Dict[str, Any]], bool]] = None,
    ) -> List[Dict[str, Any]]:
        """Records of one kind in insertion order, optionally filtered."""
        with self._lock:
            docs = list(self._records[kind])
        if where is None:
            return docs
        return [d for d in docs if where(d)]

    def count(self, kind: str) -> int:
        with self._lock:
            return len(self._records[kind])

    def update(self, kind: str, record_id: str, **fields) -> Optional[Dict[str, Any]]:
        with self._lock:
            for doc in self._records[kind]:
                if doc.get("id") == record_id:
                    doc.update(fields)
                    return doc
        return None

    # -----------------------------------------------------------------------
    # JSON-lines dump / load: used by the report CLI
    # -----------------------------------------------------------------------

    def dump(self, filepath: str) -> int:
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        written = 0
        with open(path, "w", encoding="utf-8") as f:
            for kind in KINDS:
                for doc in self.find(kind):
                    f.write(json.dumps({"kind": kind, "record": doc}, default=str) + "\n")
                    written += 1
        return written

    @classmethod
    def load(cls, filepath: str) -> "MemoryStore":
        store = cls()
        with open(filepath, "r", encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    row = json.loads(line)
                except json.JSONDecodeError as e:
                    raise ValueError(f"{filepath}:{line_number}: invalid JSON ({e})") from e
                store.create(row["kind"], row["record"])
        return store

    def extend(self, kind: str, records: Iterable) -> None:
        for record in records:
            self.create(kind, record)
