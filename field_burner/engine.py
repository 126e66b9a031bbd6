"""
Field injection engine.

``process`` is the whole pipeline for one submission: hash the input, load
it with PyPDF2, draw every placement onto a per-page ReportLab overlay,
merge the overlays into their pages, write the document back out, hash the
output and hand an audit record to the sink.

Only a document that cannot be loaded or written back is an error.  Anything
wrong with an individual field is recorded as a skipped outcome in the
returned :class:`InjectionSummary` and the rest of the batch carries on.
"""

import logging
from io import BytesIO
from typing import Any, Dict, List, Optional, Sequence, Tuple

from PyPDF2 import PdfReader, PdfWriter
from reportlab.pdfgen import canvas as rl_canvas

from . import config
from .audit import AuditSink, MemoryAuditSink, utc_timestamp
from .contracts import (
    AuditRecord,
    FieldOutcome,
    FieldPlacement,
    InjectionSummary,
    PageTarget,
    ProcessResult,
    SkipReason,
)
from .errors import DocumentLoadError, DocumentSerializationError
from .hashing import content_hash
from .normalize import normalize
from .rendering import TextFont, acquire_text_font, render_field

logger = logging.getLogger(__name__)


class _PageOverlay:
    """A ReportLab canvas sized and positioned like one target page."""

    def __init__(self, target: PageTarget) -> None:
        self.target = target
        self.buffer = BytesIO()
        # invariant=1 keeps ReportLab from stamping dates and random ids,
        # so identical submissions serialize to identical bytes.
        self.canvas = rl_canvas.Canvas(self.buffer, pagesize=(target.width, target.height), invariant=1)
        if target.left or target.bottom:
            self.canvas.translate(target.left, target.bottom)

    def merge_into_page(self) -> None:
        self.canvas.showPage()
        self.canvas.save()
        self.buffer.seek(0)
        overlay_page = PdfReader(self.buffer).pages[0]
        self.target.page.merge_page(overlay_page)


class FieldInjectionEngine:
    """Burns field placements into PDF documents.

    One engine can serve any number of submissions; every call to
    :meth:`process` owns its own reader, writer, overlays and font handle.
    The audit sink is the only thing shared between runs.
    """

    def __init__(
        self,
        audit_sink: Optional[AuditSink] = None,
        font_name: str = config.TEXT_FONT_NAME,
        font_size: float = config.TEXT_FONT_SIZE,
    ) -> None:
        self.audit_sink = audit_sink if audit_sink is not None else MemoryAuditSink()
        self.font_name = font_name
        self.font_size = font_size

    def load(self, document_bytes: bytes) -> PdfReader:
        """Open ``document_bytes`` for editing, raising :class:`DocumentLoadError` on failure."""
        try:
            reader = PdfReader(BytesIO(document_bytes))
            encrypted = reader.is_encrypted
            page_count = 0 if encrypted else len(reader.pages)
        except Exception as e:
            raise DocumentLoadError(f'Failed to read PDF: {e}') from e
        if encrypted:
            raise DocumentLoadError('encrypted documents are not supported')
        if page_count == 0:
            raise DocumentLoadError('document has no pages')
        return reader

    def inject(
        self,
        document: PdfReader,
        placements: Sequence[FieldPlacement],
        font: Optional[TextFont] = None,
    ) -> Tuple[PdfWriter, InjectionSummary]:
        """
        Draw ``placements`` onto the pages of ``document`` in input order and
        return a writer holding the updated pages.

        Later placements are drawn on top of earlier ones on the same page.
        """
        if font is None:
            font = acquire_text_font(self.font_name, self.font_size)

        targets = [PageTarget.from_page(i, page) for i, page in enumerate(document.pages)]
        overlays: Dict[int, _PageOverlay] = {}
        outcomes: List[FieldOutcome] = []

        for placement in placements:
            if not 0 <= placement.page_index < len(targets):
                logger.info(
                    'Skipping field %r: page index %d outside document of %d pages',
                    placement.id,
                    placement.page_index,
                    len(targets),
                )
                outcomes.append(FieldOutcome.skipped(placement, SkipReason.PAGE_OUT_OF_RANGE))
                continue

            target = targets[placement.page_index]
            box = normalize(placement, target.width, target.height)
            overlay = overlays.get(target.index)
            if overlay is None:
                overlay = overlays[target.index] = _PageOverlay(target)
            try:
                outcome = render_field(overlay.canvas, placement, box, font)
            except Exception:
                logger.exception('Failed to render field %r on page %d', placement.id, target.index)
                outcome = FieldOutcome.skipped(placement, SkipReason.RENDER_FAILED, box)
            logger.debug('Field %r (%s) on page %d: %s %s', placement.id, placement.type.value,
                         target.index, outcome.status.value, outcome.skip_reason or '')
            outcomes.append(outcome)

        for index in sorted(overlays):
            overlays[index].merge_into_page()

        writer = PdfWriter()
        for page in document.pages:
            writer.add_page(page)
        return writer, InjectionSummary.of(outcomes)

    def serialize(self, writer: PdfWriter) -> bytes:
        out = BytesIO()
        try:
            writer.write(out)
        except Exception as e:
            raise DocumentSerializationError(f'Failed to write PDF: {e}') from e
        return out.getvalue()

    def process(
        self,
        document_bytes: bytes,
        placements: Sequence[FieldPlacement],
        document_name: str = 'document.pdf',
        submitted_fields: Optional[Sequence[Any]] = None,
    ) -> ProcessResult:
        """
        Burn ``placements`` into ``document_bytes`` and record the audit trail.

        The audit record keeps ``submitted_fields`` when given, so it shows
        the payload as the client sent it rather than what was drawn.
        """
        original_hash = content_hash(document_bytes)
        document = self.load(document_bytes)
        font = acquire_text_font(self.font_name, self.font_size)

        writer, summary = self.inject(document, placements, font=font)
        output_bytes = self.serialize(writer)
        signed_hash = content_hash(output_bytes)

        logger.info(
            'Burned %d of %d fields into %s (original=%s signed=%s)',
            len(summary.drawn),
            len(placements),
            document_name,
            original_hash,
            signed_hash,
        )

        record = AuditRecord(
            document_name=document_name,
            original_content_hash=original_hash,
            signed_content_hash=signed_hash,
            fields=self._audit_fields(placements, submitted_fields),
            timestamp=utc_timestamp(),
        )
        self._emit_audit(record)

        return ProcessResult(
            output_bytes=output_bytes,
            original_hash=original_hash,
            signed_hash=signed_hash,
            summary=summary,
            audit_record=record,
            meta={'page_count': len(document.pages)},
        )

    @staticmethod
    def _audit_fields(
        placements: Sequence[FieldPlacement],
        submitted_fields: Optional[Sequence[Any]],
    ) -> List[Any]:
        if submitted_fields is not None:
            return list(submitted_fields)
        return [p.as_submitted() for p in placements]

    def _emit_audit(self, record: AuditRecord) -> None:
        # Sink faults are logged, never raised.
        try:
            self.audit_sink.append(record)
        except Exception:
            logger.exception('Failed to save audit record for %s', record.document_name)

