"""Spherical arc primitives and arc loops."""

from globeshape.sphere.arc import ArcKind, SphericalArc, sphere_position
from globeshape.sphere.loop import ArcLoop
from globeshape.sphere.projection import (
    EquirectangularProjector,
    OctahedralProjector,
    SphereToPlaneProjector,
    get_projector,
)

__all__ = [
    "ArcKind",
    "SphericalArc",
    "sphere_position",
    "ArcLoop",
    "SphereToPlaneProjector",
    "OctahedralProjector",
    "EquirectangularProjector",
    "get_projector",
]
