from __future__ import annotations

from typing import Any

from layered_layout.errors import DegenerateGeometryError
from layered_layout.layout.types import Point


def intersect_rect(rect: Any, point: Any) -> Point:
    """Where the segment from ``point`` to the centre of ``rect`` crosses its boundary.

    ``rect`` needs ``x``, ``y`` (centre), ``width`` and ``height``; ``point``
    needs ``x`` and ``y``.

    Raises:
        DegenerateGeometryError: If ``point`` is the rectangle's centre.
    """
    x = rect.x
    y = rect.y
    dx = point.x - x
    dy = point.y - y
    w = rect.width / 2
    h = rect.height / 2

    if not dx and not dy:
        raise DegenerateGeometryError("Not possible to find intersection inside of the rectangle")

    # Ties land on a corner either way; testing dy first keeps zero-size sides finite.
    if dy and abs(dy) * w >= abs(dx) * h:
        # Top or bottom side.
        if dy < 0:
            h = -h
        sx = h * dx / dy
        sy = h
    else:
        # Left or right side.
        if dx < 0:
            w = -w
        sx = w
        sy = w * dy / dx
    return Point(x + sx, y + sy)
