"""Sphere → unit-square charts.

The export pipeline only needs ``project(point) -> complex``; which chart is
used is the caller's business. Two charts ship here: the octahedral map the
level atlases use, and a plain longitude/latitude map for debugging.
Both may be discontinuous along seams, which the pipeline detects itself.
"""

from __future__ import annotations

import math
from typing import Protocol, runtime_checkable

import numpy as np

from globeshape.utils.geometry import Vec3


@runtime_checkable
class SphereToPlaneProjector(Protocol):
    def project(self, point: Vec3) -> complex:
        """Map a unit-sphere point to ``u + 1j*v`` in [0, 1]²."""
        ...


class OctahedralProjector:
    """Octahedral map with +y up.

    The northern hemisphere fills the central diamond; the southern one is
    folded out to the four corners, so the lines x=0 and z=0 below the equator
    become seams on the square border.
    """

    name = "octahedral"

    def project(self, point: Vec3) -> complex:
        x, y, z = (float(c) for c in point)
        l1 = abs(x) + abs(y) + abs(z)
        if l1 == 0:
            return complex(0.5, 0.5)
        x, y, z = x / l1, y / l1, z / l1
        if y >= 0:
            u, v = x, z
        else:
            u = (1 - abs(z)) * math.copysign(1.0, x)
            v = (1 - abs(x)) * math.copysign(1.0, z)
        return complex((u + 1) / 2, (v + 1) / 2)


class EquirectangularProjector:
    """Longitude on u, latitude on v (+y is north). Seam on the antimeridian z=0, x<0."""

    name = "equirectangular"

    def project(self, point: Vec3) -> complex:
        x, y, z = (float(c) for c in point)
        u = 0.5 + math.atan2(z, x) / (2 * math.pi)
        v = 0.5 + math.asin(float(np.clip(y, -1.0, 1.0))) / math.pi
        return complex(u, v)


_PROJECTORS: dict[str, type] = {
    OctahedralProjector.name: OctahedralProjector,
    EquirectangularProjector.name: EquirectangularProjector,
}


def available_projections() -> list[str]:
    return sorted(_PROJECTORS)


def get_projector(name: str) -> SphereToPlaneProjector:
    try:
        return _PROJECTORS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown projection {name!r}; expected one of {available_projections()}"
        ) from None
