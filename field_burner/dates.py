"""Authoring-side date formatting.

Date inputs are edited as ``YYYY-MM-DD`` (the HTML date input format) and
burned into the PDF as ``DD/MM/YYYY``.  The injection engine draws date
values verbatim, so this conversion must happen before placements reach it.
"""

from typing import Any

DISPLAY_SEPARATOR = '/'


def to_display_date(value: Any) -> Any:
    """Convert ``YYYY-MM-DD`` to ``DD/MM/YYYY``; return anything else unchanged."""
    if not isinstance(value, str) or not value:
        return value
    parts = value.split('-')
    if len(parts) != 3:
        return value
    year, month, day = parts
    return DISPLAY_SEPARATOR.join((day, month, year))
