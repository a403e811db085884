"""ArcLoop — arena of SphericalArcs linked into closed circular loops.

Arcs live in a list; ``next`` / ``prev`` are indices into it. A loop is the
cycle reached by following ``next`` from any member. One arena can hold
several loops (one per block outline).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

import numpy as np

from globeshape.errors import LoopError
from globeshape.sphere.arc import HANDOFF_RADIUS, SphericalArc
from globeshape.utils.geometry import Vec3, normalize

logger = logging.getLogger(__name__)


class ArcLoop:
    """Owns the arcs and enforces the circular doubly-linked discipline."""

    def __init__(self) -> None:
        self._arcs: list[SphericalArc] = []

    def __len__(self) -> int:
        return len(self._arcs)

    def __getitem__(self, index: int) -> SphericalArc:
        return self._arcs[index]

    def __iter__(self) -> Iterator[SphericalArc]:
        return iter(self._arcs)

    # --- construction ---

    def _add(self, arc: SphericalArc) -> int:
        arc.index = len(self._arcs)
        arc.next = arc.index
        arc.prev = arc.index
        self._arcs.append(arc)
        return arc.index

    def spawn_arc(self, left_edge: Vec3, right_edge: Vec3, normal: Vec3) -> int:
        """Create a self-linked edge arc and return its index."""
        return self._add(SphericalArc.from_edges(left_edge, right_edge, normal))

    def spawn_corner(self, left: int, right: int) -> int:
        """Create a corner joint between ``left`` and ``right`` and link it in."""
        index = self._add(SphericalArc.corner(self._arcs[left], self._arcs[right]))
        return self.relink(index, left, right)

    def relink(self, index: int, left: int, right: int) -> int:
        """Insert arc ``index`` between ``left`` and ``right``."""
        arc = self._arcs[index]
        arc.next = right
        arc.prev = left
        self._arcs[left].next = index
        self._arcs[right].prev = index
        return index

    def link_left(self, index: int, point: Vec3) -> int:
        """Spawn an arc from ``point`` to the start of arc ``index`` and link it before it."""
        point = np.asarray(point, dtype=np.float64)
        left = self._arcs[index].evaluate(0.0)
        new = self.spawn_arc(point, left, np.cross(point, left))
        return self.relink(new, self._arcs[index].prev, index)

    def link_right(self, index: int, point: Vec3) -> int:
        """Spawn an arc from the end of arc ``index`` to ``point`` and link it after it."""
        point = np.asarray(point, dtype=np.float64)
        arc = self._arcs[index]
        right = arc.evaluate(arc.length)
        new = self.spawn_arc(right, point, np.cross(right, point))
        return self.relink(new, index, arc.next)

    @classmethod
    def from_polygon(cls, vertices: Sequence[Vec3], corners: bool = True) -> ArcLoop:
        """Great-circle loop through ``vertices`` (projected onto the unit sphere).

        Each edge runs from a vertex to the next with normal ``cross(a, b)``,
        so the block lies on the side the vertices wind around clockwise seen
        from outside. With ``corners`` a joint arc is inserted at every vertex.
        """
        points = [normalize(np.asarray(v, dtype=np.float64)) for v in vertices]
        if len(points) < 2:
            raise LoopError("a loop needs at least two vertices")
        for a, b in zip(points, points[1:] + points[:1]):
            if float(np.linalg.norm(np.cross(a, b))) < 1e-12:
                raise LoopError(f"edge {a} -> {b} does not define a great circle")

        loop = cls()
        first = loop.spawn_arc(points[0], points[1], np.cross(points[0], points[1]))
        last = first
        for point in points[2:]:
            last = loop.link_right(last, point)
        # Close the outline: the final edge returns to the first vertex.
        closing = loop.link_right(last, points[0])

        if corners:
            edges = list(loop.cycle(first))
            for left in edges:
                loop.spawn_corner(left, loop[left].next)
        logger.debug(
            "Built loop: %d vertices, %d arcs (closing arc %d)", len(points), len(loop), closing
        )
        return loop

    # --- traversal ---

    def cycle(self, start: int = 0) -> Iterator[int]:
        """Indices once around the loop containing ``start``."""
        index = start
        for _ in range(len(self._arcs)):
            yield index
            index = self._arcs[index].next
            if index == start:
                return
        raise LoopError(f"arc {start} does not lie on a closed cycle")

    def edges(self, start: int = 0) -> Iterator[SphericalArc]:
        """Non-corner arcs in loop order."""
        for index in self.cycle(start):
            arc = self._arcs[index]
            if not arc.is_corner:
                yield arc

    def validate(self, start: int = 0) -> int:
        """Check link symmetry and cycle closure; returns the cycle length."""
        count = 0
        for index in self.cycle(start):
            arc = self._arcs[index]
            if self._arcs[arc.next].prev != index or self._arcs[arc.prev].next != index:
                raise LoopError(f"arc {index} has asymmetric links")
            count += 1
        return count

    def evaluate(self, t: float, radius: float, index: int) -> tuple[Vec3, float, int]:
        """Evaluate at ``t`` on arc ``index``, walking onto neighbors when ``t`` leaves it.

        Returns the position and the re-rooted ``(t, index)``. Once control is
        handed to a neighbor the elevation is pinned to HANDOFF_RADIUS rather
        than the caller's ``radius``.
        """
        for _ in range(4 * len(self._arcs) + 1):
            arc = self._arcs[index]
            if t > arc.length:
                t -= arc.length
                index = arc.next
                radius = HANDOFF_RADIUS
            elif t < 0:
                index = arc.prev
                t += self._arcs[index].length
                radius = HANDOFF_RADIUS
            else:
                return arc.evaluate(t, radius), t, index
        raise LoopError(f"parameter {t} does not settle on any arc of the loop")
