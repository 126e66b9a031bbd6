"""
Coordinate normalization.

Placements are authored as fractions of a reference page with the origin
at the top-left and ``y_pct`` measuring the field's *top* edge.  PDF pages
put the origin at the bottom-left and want the field's *bottom* edge, so
the vertical position is flipped and shifted down by the field's height.
"""

from dataclasses import replace

from .contracts import Box, FieldPlacement, ReferenceFrame


def normalize(placement: FieldPlacement, target_page_width: float, target_page_height: float) -> Box:
    """Resolve ``placement`` to absolute points on a page of the given size.

    No clamping happens here: out-of-range fractions give out-of-range
    coordinates.
    """
    return Box(
        x=placement.x_pct * target_page_width,
        y=(1 - placement.y_pct - placement.h_pct) * target_page_height,
        width=placement.w_pct * target_page_width,
        height=placement.h_pct * target_page_height,
    )


def clamp_fraction(value: float) -> float:
    return min(1.0, max(0.0, value))


def clamp_placement(placement: FieldPlacement) -> FieldPlacement:
    """Pull a placement back inside the page, shrinking it if it overhangs."""
    x_pct = clamp_fraction(placement.x_pct)
    y_pct = clamp_fraction(placement.y_pct)
    w_pct = min(clamp_fraction(placement.w_pct), 1.0 - x_pct)
    h_pct = min(clamp_fraction(placement.h_pct), 1.0 - y_pct)
    return replace(placement, x_pct=x_pct, y_pct=y_pct, w_pct=w_pct, h_pct=h_pct)


def fractions_from_reference(
    frame: ReferenceFrame,
    x: float,
    y: float,
    width: float,
    height: float,
) -> tuple:
    """
    Convert an absolute top-left rectangle on ``frame`` into
    ``(x_pct, y_pct, w_pct, h_pct)``, the way the placement UI submits fields.
    """
    return (x / frame.width, y / frame.height, width / frame.width, height / frame.height)
