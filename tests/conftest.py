"""Shared test fixtures."""

from __future__ import annotations

import math

import numpy as np
import pytest

from globeshape.sphere.arc import SphericalArc
from globeshape.utils.geometry import Vec3


def ring_vertices(y: float, count: int = 4, start_deg: float = 45.0, reverse: bool = False) -> list[Vec3]:
    """``count`` unit vectors on the latitude circle at height ``y``.

    Listed with the longitude angle (x = cos, z = sin) increasing, which makes
    the enclosed block the cap on the +y side of the ring. ``reverse`` flips
    the winding so the block is the cap on the -y side instead.
    """
    r = math.sqrt(1.0 - y * y)
    vertices = []
    for i in range(count):
        theta = math.radians(start_deg + 360.0 * i / count)
        vertices.append(np.array([r * math.cos(theta), y, r * math.sin(theta)]))
    if reverse:
        vertices.reverse()
    return vertices


# Square around the north pole: stays inside the octahedral map's central
# diamond, crosses the equirectangular antimeridian once.
NORTH_CAP = ring_vertices(0.8)

# Square around the south pole, wound so the block is the south cap; under
# the octahedral map it is split into the four folded corners.
SOUTH_CAP = ring_vertices(-0.8, reverse=True)

# Small quad in the x>0, z>0 quadrant of the northern hemisphere.
UPPER_QUAD = [
    np.array([0.45, 0.85, 0.35]),
    np.array([0.35, 0.85, 0.45]),
    np.array([0.25, 0.85, 0.35]),
    np.array([0.35, 0.85, 0.25]),
]


@pytest.fixture
def equator_quarter() -> SphericalArc:
    """Quarter of the equator from +z to +x with +y up."""
    return SphericalArc.from_edges(
        np.array([0.0, 0.0, 1.0]),
        np.array([1.0, 0.0, 0.0]),
        np.array([0.0, 1.0, 0.0]),
    )


@pytest.fixture
def north_cap() -> list[Vec3]:
    return NORTH_CAP


@pytest.fixture
def south_cap() -> list[Vec3]:
    return SOUTH_CAP


@pytest.fixture
def upper_quad() -> list[Vec3]:
    return UPPER_QUAD
