"""Unit-square border helpers: perimeter keys, corners, projection onto the edge.

The perimeter key of a border point is the clockwise distance travelled from
the top-left corner (0, 1): top edge 0..1, right edge 1..2, bottom edge 2..3,
left edge 3..4.
"""

from __future__ import annotations

import logging

from globeshape.errors import PerimeterKeyError

logger = logging.getLogger(__name__)

# Corner reached at each integral perimeter key
CORNERS: dict[int, complex] = {
    0: complex(0.0, 1.0),
    1: complex(1.0, 1.0),
    2: complex(1.0, 0.0),
    3: complex(0.0, 0.0),
}


def perimeter_key(uv: complex) -> float:
    """Clockwise border length from the top-left corner to ``uv``.

    ``uv`` must lie exactly on the border; anything else is an input error.
    """
    if uv.imag == 1.0:
        return 0.0 + uv.real
    if uv.real == 1.0:
        return 1.0 + (1.0 - uv.imag)
    if uv.imag == 0.0:
        return 2.0 + (1.0 - uv.real)
    if uv.real == 0.0:
        return 3.0 + uv.imag
    raise PerimeterKeyError(uv)


def clockwise_direction(key: float) -> complex:
    """Unit direction of clockwise travel along the border at ``key``."""
    if key < 1:
        return complex(1.0, 0.0)
    if key < 2:
        return complex(0.0, -1.0)
    return -clockwise_direction(key - 2)


def corners_between(first: float, last: float, clockwise: bool) -> list[int]:
    """Corner keys passed strictly between ``first`` and ``last``, in travel order."""
    if clockwise:
        span = (last - first) % 4

        def travelled(corner: int) -> float:
            return (corner - first) % 4

    else:
        span = (first - last) % 4

        def travelled(corner: int) -> float:
            return (first - corner) % 4

    passed = [(travelled(corner), corner) for corner in CORNERS if 0 < travelled(corner) < span]
    return [corner for _, corner in sorted(passed)]


def project_onto_square(point: complex, control: complex) -> complex:
    """Slide ``point`` along the line from ``control`` onto the nearest square edge.

    The coordinate fixed by the edge is set exactly (0.0 or 1.0) so the result
    has a well-defined perimeter key. If the line meets no edge inside the
    square, the point is returned unchanged.
    """
    direction = point - control
    candidates: list[complex] = []

    if direction.imag != 0:
        for v in (1.0, 0.0):
            s = (v - control.imag) / direction.imag
            u = control.real + s * direction.real
            if 0.0 <= u <= 1.0:
                candidates.append(complex(u, v))
    if direction.real != 0:
        for u in (1.0, 0.0):
            s = (u - control.real) / direction.real
            v = control.imag + s * direction.imag
            if 0.0 <= v <= 1.0:
                candidates.append(complex(u, v))

    if not candidates:
        logger.warning("Projection onto square failed for %s (control %s)", point, control)
        return point
    return min(candidates, key=lambda c: abs(c - point))
