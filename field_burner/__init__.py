"""
Burn typed fields (signature, text, date, image, radio) into PDF pages.

Placements are authored as fractions of a reference page, normalized onto
each target page's own point space and drawn permanently into the page
content.  Every run yields SHA-256 fingerprints of the input and output
documents and an append-only audit record.
"""

from .audit import AuditSink, JsonlAuditSink, MemoryAuditSink
from .contracts import (
    A4,
    AuditRecord,
    Box,
    FieldOutcome,
    FieldPlacement,
    FieldStatus,
    FieldType,
    InjectionSummary,
    PageTarget,
    ProcessResult,
    ReferenceFrame,
    SkipReason,
    parse_placements,
)
from .engine import FieldInjectionEngine
from .errors import (
    DocumentLoadError,
    DocumentSerializationError,
    FieldBurnerError,
    InvalidPlacementError,
)
from .hashing import content_hash
from .normalize import normalize

__all__ = [
    'A4',
    'AuditRecord',
    'AuditSink',
    'Box',
    'DocumentLoadError',
    'DocumentSerializationError',
    'FieldBurnerError',
    'FieldInjectionEngine',
    'FieldOutcome',
    'FieldPlacement',
    'FieldStatus',
    'FieldType',
    'InjectionSummary',
    'InvalidPlacementError',
    'JsonlAuditSink',
    'MemoryAuditSink',
    'PageTarget',
    'ProcessResult',
    'ReferenceFrame',
    'SkipReason',
    'content_hash',
    'normalize',
    'parse_placements',
]
