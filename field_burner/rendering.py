"""
Per-type drawing rules applied to a page overlay.

Every renderer draws onto a ReportLab canvas the size of the target page and
returns a :class:`FieldOutcome`.  A renderer never raises for bad field data:
missing values, malformed data URLs and unsupported image types come back as
skipped outcomes so the rest of the batch still gets burned.
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Callable, Dict, Tuple

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen.canvas import Canvas

from .contracts import Box, FieldOutcome, FieldPlacement, FieldType, SkipReason

logger = logging.getLogger(__name__)

# Gap between the field's left/top edges and the drawn text.
TEXT_INSET = 2

RADIO_OUTLINE_RGB = (0.1, 0.4, 0.8)
RADIO_MARKER_FILL_RGB = (0.0, 0.0, 1.0)
RADIO_MARKER_STROKE_RGB = (0.0, 0.0, 0.8)

IMAGE_MEDIA_TYPES = {
    'image/png': 'PNG',
    'image/jpeg': 'JPEG',
    'image/jpg': 'JPEG',
}

_UNCHECKED_VALUES = {'false', '0', 'off', 'no', 'unchecked'}


@dataclass(frozen=True)
class TextFont:
    """Font handle shared by every text and date field of one run."""

    name: str
    size: float
    face: Any = None


def acquire_text_font(name: str = 'Helvetica', size: float = 10) -> TextFont:
    """Load ``name`` once so each field can reuse it."""
    return TextFont(name=name, size=size, face=pdfmetrics.getFont(name))


class DataUrlError(ValueError):
    def __init__(self, reason: SkipReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


def parse_data_url(data_url: Any) -> Tuple[str, bytes]:
    """
    Split ``data:<media type>;base64,<payload>`` into the media type and the
    decoded bytes.
    """
    if not isinstance(data_url, str) or not data_url.startswith('data:'):
        raise DataUrlError(SkipReason.BAD_DATA_URI, 'value is not a data URL')
    parts = data_url.split(';base64,')
    if len(parts) != 2:
        raise DataUrlError(SkipReason.BAD_DATA_URI, 'data URL is not base64 encoded')
    media_type = parts[0][len('data:'):].strip().lower()
    try:
        payload = base64.b64decode(parts[1], validate=True)
    except (binascii.Error, ValueError) as e:
        raise DataUrlError(SkipReason.BAD_BASE64, f'invalid base64 payload: {e}') from e
    return media_type, payload


def is_checked(value: Any) -> bool:
    if isinstance(value, str):
        return bool(value.strip()) and value.strip().lower() not in _UNCHECKED_VALUES
    return bool(value)


def _has_value(value: Any) -> bool:
    return value is not None and value != ''


def draw_image(canv: Canvas, placement: FieldPlacement, box: Box, font: TextFont) -> FieldOutcome:
    """Stretch a PNG/JPEG data URL over the whole box (aspect ratio is not kept)."""
    if not _has_value(placement.value):
        return FieldOutcome.skipped(placement, SkipReason.NO_VALUE, box)
    try:
        media_type, payload = parse_data_url(placement.value)
    except DataUrlError as e:
        logger.info('Skipping field %r: %s', placement.id, e)
        return FieldOutcome.skipped(placement, e.reason, box)
    if media_type not in IMAGE_MEDIA_TYPES:
        logger.info('Skipping field %r: unsupported media type %s', placement.id, media_type)
        return FieldOutcome.skipped(placement, SkipReason.UNSUPPORTED_MEDIA_TYPE, box)
    # PIL reports some corrupt PNG chunk streams as SyntaxError.
    try:
        img = Image.open(BytesIO(payload))
        img.load()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        logger.info('Skipping field %r: cannot decode %s image (%s)', placement.id, media_type, e)
        return FieldOutcome.skipped(placement, SkipReason.UNDECODABLE_IMAGE, box)
    # Palette and other exotic modes do not carry through ReportLab's alpha mask.
    if img.mode not in ('RGB', 'RGBA', 'L'):
        img = img.convert('RGBA')
    canv.drawImage(ImageReader(img), box.x, box.y, width=box.width, height=box.height, mask='auto')
    return FieldOutcome.drawn(placement, box, 'image')


def draw_text(canv: Canvas, placement: FieldPlacement, box: Box, font: TextFont) -> FieldOutcome:
    """Single line, left aligned, hanging from the top edge of the box.

    Date values arrive display-ready and are drawn the same way.
    """
    if not _has_value(placement.value):
        return FieldOutcome.skipped(placement, SkipReason.NO_VALUE, box)
    canv.saveState()
    try:
        canv.setFillColorRGB(0, 0, 0)
        canv.setFont(font.name, font.size)
        canv.drawString(box.x + TEXT_INSET, box.y + box.height - font.size - TEXT_INSET, str(placement.value))
    finally:
        canv.restoreState()
    return FieldOutcome.drawn(placement, box, 'text')


def draw_radio(canv: Canvas, placement: FieldPlacement, box: Box, font: TextFont) -> FieldOutcome:
    """Outline always; filled marker only when checked."""
    primitives = ['outline']
    canv.saveState()
    try:
        canv.setLineWidth(1)
        canv.setStrokeColorRGB(*RADIO_OUTLINE_RGB)
        canv.rect(box.x, box.y, box.width, box.height, stroke=1, fill=0)
        if is_checked(placement.value):
            canv.setFillColorRGB(*RADIO_MARKER_FILL_RGB)
            canv.setStrokeColorRGB(*RADIO_MARKER_STROKE_RGB)
            canv.circle(box.x + box.width / 2, box.y + box.height / 2, box.width / 4, stroke=1, fill=1)
            primitives.append('marker')
    finally:
        canv.restoreState()
    return FieldOutcome.drawn(placement, box, *primitives)


Renderer = Callable[[Canvas, FieldPlacement, Box, TextFont], FieldOutcome]

RENDERERS: Dict[FieldType, Renderer] = {
    FieldType.SIGNATURE: draw_image,
    FieldType.IMAGE: draw_image,
    FieldType.TEXT: draw_text,
    FieldType.DATE: draw_text,
    FieldType.RADIO: draw_radio,
}

if set(RENDERERS) != set(FieldType):  # pragma: no cover
    raise RuntimeError(f'missing renderers for {set(FieldType) - set(RENDERERS)}')


def render_field(canv: Canvas, placement: FieldPlacement, box: Box, font: TextFont) -> FieldOutcome:
    return RENDERERS[placement.type](canv, placement, box, font)
