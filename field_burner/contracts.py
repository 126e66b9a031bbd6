"""
Typed data model shared by the normalizer, the renderers and the engine.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .errors import InvalidPlacementError


class FieldType(str, Enum):
    SIGNATURE = 'signature'
    TEXT = 'text'
    DATE = 'date'
    IMAGE = 'image'
    RADIO = 'radio'


class FieldStatus(str, Enum):
    DRAWN = 'drawn'
    SKIPPED = 'skipped'


class SkipReason(str, Enum):
    """
    Why a placement produced nothing on the page.

    None of these abort the batch.
    """

    PAGE_OUT_OF_RANGE = 'page_out_of_range'
    NO_VALUE = 'no_value'
    BAD_DATA_URI = 'bad_data_uri'
    BAD_BASE64 = 'bad_base64'
    UNSUPPORTED_MEDIA_TYPE = 'unsupported_media_type'
    UNDECODABLE_IMAGE = 'undecodable_image'
    RENDER_FAILED = 'render_failed'


@dataclass(frozen=True)
class ReferenceFrame:
    """
    Page size (points) the placement UI authors against.

    Authoring and normalization must agree on it; changing it breaks every
    in-flight placement.
    """

    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError('reference frame width and height must be positive')


A4 = ReferenceFrame(width=595.0, height=842.0)


_COORD_KEYS = ('xPct', 'yPct', 'wPct', 'hPct')


@dataclass(frozen=True)
class FieldPlacement:
    id: Any
    type: FieldType
    page_index: int
    x_pct: float  # left edge, fraction of reference width
    y_pct: float  # top edge measured from the top, fraction of reference height
    w_pct: float
    h_pct: float
    value: Any = None
    # The payload exactly as the authoring layer sent it, when parsed from one.
    submitted: Optional[Dict[str, Any]] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_dict(cls, payload: Any) -> 'FieldPlacement':
        """
        Parse one placement as sent by the authoring UI.

        ``pageIndex`` is preferred; ``pageNumber`` (zero-based as well) is
        accepted for older clients.  Unknown types and non-finite coordinates
        are rejected, never skipped.
        """
        if not isinstance(payload, dict):
            raise InvalidPlacementError(f'placement must be an object, got {type(payload).__name__}')

        if payload.get('id') is None:
            raise InvalidPlacementError('placement is missing an id')
        field_id = payload['id']

        raw_type = payload.get('type')
        try:
            field_type = FieldType(raw_type)
        except ValueError:
            raise InvalidPlacementError(f'unknown field type {raw_type!r} for field {field_id!r}') from None

        raw_page = payload.get('pageIndex')
        if raw_page is None:
            raw_page = payload.get('pageNumber')
        try:
            page_index = int(raw_page or 0)
        except (TypeError, ValueError):
            raise InvalidPlacementError(f'invalid page index {raw_page!r} for field {field_id!r}') from None

        coords: List[float] = []
        for key in _COORD_KEYS:
            try:
                coord = float(payload[key])
            except KeyError:
                raise InvalidPlacementError(f'field {field_id!r} is missing {key}') from None
            except (TypeError, ValueError):
                raise InvalidPlacementError(f'field {field_id!r} has non-numeric {key}: {payload[key]!r}') from None
            if not math.isfinite(coord):
                raise InvalidPlacementError(f'field {field_id!r} has non-finite {key}: {payload[key]!r}')
            coords.append(coord)

        x_pct, y_pct, w_pct, h_pct = coords
        return cls(
            id=field_id,
            type=field_type,
            page_index=page_index,
            x_pct=x_pct,
            y_pct=y_pct,
            w_pct=w_pct,
            h_pct=h_pct,
            value=payload.get('value'),
            submitted=dict(payload),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type.value,
            'pageIndex': self.page_index,
            'xPct': self.x_pct,
            'yPct': self.y_pct,
            'wPct': self.w_pct,
            'hPct': self.h_pct,
            'value': self.value,
        }

    def as_submitted(self) -> Dict[str, Any]:
        """The authoring payload if there was one, else the canonical form."""
        if self.submitted is not None:
            return dict(self.submitted)
        return self.to_dict()


def parse_placements(items: Any) -> List[FieldPlacement]:
    if not isinstance(items, list):
        raise InvalidPlacementError(f'placements must be a list, got {type(items).__name__}')
    return [FieldPlacement.from_dict(item) for item in items]


@dataclass(frozen=True)
class Box:
    """Absolute rectangle in a page's own point space, origin bottom-left."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class PageTarget:
    index: int  # 0-indexed
    page: Any  # PyPDF2 PageObject, owned by the current run
    width: float
    height: float
    left: float = 0.0
    bottom: float = 0.0

    @classmethod
    def from_page(cls, index: int, page: Any) -> 'PageTarget':
        box = page.mediabox
        return cls(
            index=index,
            page=page,
            width=float(box.width),
            height=float(box.height),
            left=float(box.left),
            bottom=float(box.bottom),
        )


@dataclass(frozen=True)
class FieldOutcome:
    field_id: Any
    field_type: FieldType
    status: FieldStatus
    skip_reason: Optional[SkipReason] = None
    primitives: Tuple[str, ...] = ()  # e.g. ('outline', 'marker') for a checked radio
    box: Optional[Box] = None

    @classmethod
    def drawn(cls, placement: FieldPlacement, box: Box, *primitives: str) -> 'FieldOutcome':
        return cls(placement.id, placement.type, FieldStatus.DRAWN, None, tuple(primitives), box)

    @classmethod
    def skipped(cls, placement: FieldPlacement, reason: SkipReason, box: Optional[Box] = None) -> 'FieldOutcome':
        return cls(placement.id, placement.type, FieldStatus.SKIPPED, reason, (), box)


@dataclass(frozen=True)
class InjectionSummary:
    outcomes: Tuple[FieldOutcome, ...] = ()

    @classmethod
    def of(cls, outcomes: Iterable[FieldOutcome]) -> 'InjectionSummary':
        return cls(outcomes=tuple(outcomes))

    @property
    def drawn(self) -> List[FieldOutcome]:
        return [o for o in self.outcomes if o.status == FieldStatus.DRAWN]

    @property
    def skipped(self) -> List[FieldOutcome]:
        return [o for o in self.outcomes if o.status == FieldStatus.SKIPPED]

    def outcome_for(self, field_id: Any) -> Optional[FieldOutcome]:
        for o in self.outcomes:
            if o.field_id == field_id:
                return o
        return None


@dataclass(frozen=True)
class AuditRecord:
    """
    Append-only audit entry for one injection run.

    Keyed by content hash, not document identity: identical inputs and
    outputs give identical records apart from ``timestamp``.
    """

    document_name: str
    original_content_hash: str
    signed_content_hash: str
    fields: List[Dict[str, Any]]
    timestamp: str  # ISO-8601, UTC

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp,
            'documentName': self.document_name,
            'originalContentHash': self.original_content_hash,
            'signedContentHash': self.signed_content_hash,
            'fields': list(self.fields),
        }


@dataclass(frozen=True)
class ProcessResult:
    output_bytes: bytes
    original_hash: str
    signed_hash: str
    summary: InjectionSummary
    audit_record: AuditRecord
    meta: Dict[str, Any] = field(default_factory=dict)
