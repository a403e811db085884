"""Error types raised by loop construction and shape export."""

from __future__ import annotations


class GlobeShapeError(Exception):
    """Base class for every error this package raises on purpose."""


class LoopError(GlobeShapeError):
    """An arc loop has broken links or does not close into a single cycle."""


class PerimeterKeyError(GlobeShapeError):
    """A point expected on the unit-square border is not on it."""

    def __init__(self, point: complex) -> None:
        super().__init__(f"point ({point.real!r}, {point.imag!r}) is not on the unit-square border")
        self.point = point


class TopologyError(GlobeShapeError):
    """Segments could not be stitched into closed shapes."""
