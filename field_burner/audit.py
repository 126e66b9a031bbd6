"""
Audit sinks.

A sink receives one :class:`AuditRecord` per injection run and must only
ever append.  The engine treats ``append`` as fire-and-forget: whatever a
sink raises is logged by the engine and never reaches the caller.
"""

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Protocol

from .contracts import AuditRecord

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditSink(Protocol):
    def append(self, record: AuditRecord) -> None:
        ...


class MemoryAuditSink:
    """Keeps records in process memory; used when no audit log path is configured."""

    def __init__(self) -> None:
        self._records: List[AuditRecord] = []
        self._lock = threading.Lock()

    def append(self, record: AuditRecord) -> None:
        with self._lock:
            self._records.append(record)

    @property
    def records(self) -> List[AuditRecord]:
        with self._lock:
            return list(self._records)


class JsonlAuditSink:
    """Appends each record as one JSON line to ``path``."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def append(self, record: AuditRecord) -> None:
        line = json.dumps(record.to_dict(), ensure_ascii=False, sort_keys=True)
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open('a', encoding='utf-8') as f:
                f.write(line + '\n')
        logger.info('Audit record saved for %s', record.document_name)

    def read_all(self) -> List[dict]:
        if not self.path.exists():
            return []
        with self.path.open('r', encoding='utf-8') as f:
            return [json.loads(line) for line in f if line.strip()]
