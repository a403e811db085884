"""SphericalArc — one geodesic (great- or small-circle) arc on the unit sphere.

An arc is the ground path a character walks along. ``path_normal`` points "up"
(away from the block the arc bounds); passing a positive ``radius`` to the
evaluators raises the path toward the normal, which models the character's
center of mass riding above the ground.

Corner arcs are zero-length joints between two edge arcs. They keep the same
frame machinery so a character rounding a vertex still gets a position and
orientation, but their ``arc_radius`` is 0 and evaluation pins ``angle`` to 0.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field

import numpy as np

from globeshape.utils.geometry import Vec3, normalize, signed_sweep, vec3

# Sampling precision. The iteration counts and step sizes below are
# derived from it; change the dtype and they follow.
SAMPLE_DTYPE = np.float32

# Bisection steps per quadrant in max_gradient: bit width of SAMPLE_DTYPE.
GRADIENT_ITERATIONS = 8 * np.dtype(SAMPLE_DTYPE).itemsize

# AABB padding so tangent rays never miss the box.
AABB_PADDING = 1e-6

# Slack on the height band in contains; at radius 0 the band is a single
# plane and rounding puts on-arc points about 1e-17 to either side of it.
ELEVATION_TOLERANCE = 1e-12

# Elevation used for intersection / distance queries and for the neighbor
# an evaluation is handed to when it runs off the end of an arc.
HANDOFF_RADIUS = 0.01

_AXES: tuple[Vec3, ...] = (
    vec3(-1, 0, 0),
    vec3(1, 0, 0),
    vec3(0, -1, 0),
    vec3(0, 1, 0),
    vec3(0, 0, -1),
    vec3(0, 0, 1),
)


class ArcKind(enum.Enum):
    EDGE = "edge"
    CORNER = "corner"


def sphere_position(
    x_axis: Vec3,
    y_axis: Vec3,
    z_axis: Vec3,
    elevation: float,
    angle: float,
) -> Vec3:
    """Point at ``angle`` around ``z_axis`` on the circle ``elevation`` radians from it."""
    return (x_axis * math.cos(angle) + y_axis * math.sin(angle)) * math.sin(elevation) + (
        z_axis * math.cos(elevation)
    )


@dataclass(eq=False)
class SphericalArc:
    """A ground arc plus the frame needed to walk, collide and bound it."""

    kind: ArcKind = ArcKind.EDGE
    path_center: Vec3 = field(default_factory=lambda: np.zeros(3))
    path_normal: Vec3 = field(default_factory=lambda: vec3(0, 1, 0))
    arc_left: Vec3 = field(default_factory=lambda: vec3(1, 0, 0))
    arc_right: Vec3 = field(default_factory=lambda: vec3(1, 0, 0))
    arc_left_up: Vec3 = field(default_factory=lambda: np.zeros(3))
    arc_right_down: Vec3 = field(default_factory=lambda: np.zeros(3))
    arc_radius: float = 0.0
    arc_angle: float = 0.0
    angle_to_normal: float = 0.0
    # Axis-aligned bounds: (min corner, max corner)
    bounds: tuple[Vec3, Vec3] = field(default_factory=lambda: (np.zeros(3), np.zeros(3)))
    # Arena links, owned by ArcLoop
    index: int = 0
    next: int = 0
    prev: int = 0

    # --- construction ---

    @classmethod
    def from_edges(cls, left_edge: Vec3, right_edge: Vec3, normal: Vec3) -> SphericalArc:
        """Build the arc from ``left_edge`` to ``right_edge`` on the plane with ``normal``.

        ``left_edge`` is the first point when the block outline is enumerated
        clockwise, ``right_edge`` the second; both are ground (feet) positions.
        The sign of ``normal`` says which way is up. For a small circle it must
        point from the sphere center toward the plane of the circle.

        Example: ``from_edges((0,0,1), (1,0,0), (0,1,0))`` is a quarter of the
        equator, forward to right, with +y as up.
        """
        arc = cls(kind=ArcKind.EDGE)
        left_edge = np.asarray(left_edge, dtype=np.float64)
        right_edge = np.asarray(right_edge, dtype=np.float64)
        arc.path_normal = normalize(np.asarray(normal, dtype=np.float64))
        arc.path_center = arc.path_normal * float(np.dot(left_edge, arc.path_normal))
        arc.arc_left = normalize(left_edge - arc.path_center)
        arc.arc_right = normalize(right_edge - arc.path_center)
        arc.arc_radius = float(np.linalg.norm(left_edge - arc.path_center))
        arc._derive_frame()
        return arc

    @classmethod
    def corner(cls, left: SphericalArc, right: SphericalArc) -> SphericalArc:
        """Joint arc at the vertex where ``left`` ends and ``right`` begins.

        The frame sweeps from the surface normal at the end of ``left`` to the
        surface normal at the start of ``right``; links are set by the loop.
        """
        arc = cls(kind=ArcKind.CORNER)
        vertex = right.evaluate(0.0, 0.0)
        arc.path_center = vertex
        arc.path_normal = vertex
        arc.arc_left = left.evaluate_normal(left.length, 0.0)
        arc.arc_right = right.evaluate_normal(0.0, 0.0)
        arc.arc_radius = 0.0
        arc._derive_frame()
        return arc

    def _derive_frame(self) -> None:
        self.arc_left_up = -normalize(np.cross(self.arc_left, self.path_normal))
        self.arc_right_down = normalize(np.cross(self.arc_right, self.path_normal))

        # Sweep toward arc_left_up; obtuse and reflex sweeps fall out of atan2.
        self.arc_angle = signed_sweep(self.arc_left, self.arc_right, self.arc_left_up)
        if self.arc_angle <= 0.0 or np.array_equal(self.arc_left, self.arc_right):
            self.arc_angle = 2 * math.pi

        self.angle_to_normal = math.acos(
            float(np.clip(np.linalg.norm(self.path_center), -1.0, 1.0))
        )
        self.recalculate_aabb()

    # --- basic measures ---

    @property
    def is_corner(self) -> bool:
        return self.kind is ArcKind.CORNER

    @property
    def length(self) -> float:
        """Arc-length span of the ground path: ``arc_angle * arc_radius``."""
        return self.arc_angle * self.arc_radius

    def _angle(self, t: float) -> float:
        if self.arc_radius == 0.0:
            return 0.0
        return t / self.arc_radius

    def center(self, radius: float) -> Vec3:
        """Center of the circle traced at elevation ``radius``."""
        return self.path_normal * math.cos(self.angle_to_normal - radius)

    def radius_at(self, radius: float) -> float:
        """Radius of the circle traced at elevation ``radius``."""
        return float(np.linalg.norm(self.evaluate(0.0, radius) - self.center(radius)))

    # --- evaluation ---

    def evaluate(self, t: float, radius: float = 0.0) -> Vec3:
        """Position at arc length ``t``, raised toward the normal by ``radius``."""
        return sphere_position(
            self.arc_left,
            self.arc_left_up,
            self.path_normal,
            self.angle_to_normal - radius,
            self._angle(t),
        )

    def evaluate_right(self, t: float, radius: float = 0.0) -> Vec3:
        """Direction of travel at ``t`` (the position basis rotated by 90°)."""
        return sphere_position(
            self.arc_left_up,
            -self.arc_left,
            self.path_normal,
            self.angle_to_normal - radius,
            self._angle(t),
        )

    def evaluate_normal(self, t: float, radius: float = 0.0) -> Vec3:
        """Surface direction perpendicular to travel, pointing into the block."""
        return self.normal_from(self.evaluate(t, radius), self.evaluate_right(t, radius))

    @staticmethod
    def normal_from(position: Vec3, right: Vec3) -> Vec3:
        return normalize(np.cross(right, position))

    # --- collision ---

    def contains(self, pos: Vec3, radius: float) -> bool:
        """Is ``pos`` inside the trapezoid swept by this arc between ground and ``radius``?

        The wedge part is a 2-of-3 vote over the left half-plane, the right
        half-plane and whether the arc is obtuse. It is not a general
        point-in-wedge test; movement code is tuned against exactly this vote.
        """
        pos = np.asarray(pos, dtype=np.float64)
        ground_height = float(np.dot(pos - self.center(0.0), self.path_normal))
        com_height = float(np.dot(pos - self.center(radius), self.path_normal))
        above_ground = ground_height >= -ELEVATION_TOLERANCE
        below_com = com_height <= ELEVATION_TOLERANCE
        at_elevation = above_ground and below_com

        left_contains = float(np.dot(pos, self.arc_left_up)) >= 0
        right_contains = float(np.dot(pos, self.arc_right_down)) >= 0
        is_obtuse = float(np.dot(self.arc_left, self.arc_right)) <= 0
        votes = sum((left_contains, right_contains, is_obtuse))

        return at_elevation and votes >= 2

    def intersect(self, to: Vec3, frm: Vec3, radius: float) -> float | None:
        """Arc-length parameter where the great circle through ``frm``→``to`` meets this path.

        Returns None when the crossing falls outside ``[0, arc_angle]`` or the
        two directions do not define a plane.
        """
        right = np.cross(frm, to)
        secant = np.cross(self.path_normal, right)
        if float(np.linalg.norm(secant)) < 1e-12:
            return None
        if float(np.dot(secant, frm)) < 0:
            secant = -secant
        secant = normalize(secant)

        circle_radius = self.radius_at(radius)
        if circle_radius == 0.0:
            return None
        intersection = self.center(radius) + secant * circle_radius

        x = float(np.dot(intersection, self.arc_left)) / circle_radius
        y = float(np.dot(intersection, self.arc_left_up)) / circle_radius
        angle = math.atan2(y, x)
        if angle < 0:
            angle += 2 * math.pi

        if angle <= self.arc_angle:
            return angle * self.arc_radius
        return None

    def distance(self, to: Vec3, frm: Vec3) -> float | None:
        """Straight-line distance from ``frm`` to where it would hit this arc, if it does."""
        t = self.intersect(to, frm, HANDOFF_RADIUS)
        if t is None:
            return None
        hit = self.evaluate(t, HANDOFF_RADIUS)
        return float(np.linalg.norm(np.asarray(frm, dtype=np.float64) - hit))

    # --- bounds ---

    def max_gradient(self, direction: Vec3) -> Vec3:
        """Point on the arc with the largest dot product against ``direction``.

        Searched per quadrant so a full 2π sweep, whose two ends coincide, is
        not ambiguous. Within a quadrant the dot product is one piece of a
        sinusoid, so keeping the half whose endpoint scores higher converges
        on the quadrant maximum.
        """
        direction = np.asarray(direction, dtype=np.float64)
        best = np.zeros(3)
        best_product = -math.inf

        quadrants = max(1, math.ceil(self.arc_angle / (math.pi / 2)))
        for quadrant in range(quadrants):
            left = self.length * (quadrant / quadrants)
            right = self.length * ((quadrant + 1) / quadrants)
            left_product = float(np.dot(self.evaluate(left), direction))
            right_product = float(np.dot(self.evaluate(right), direction))

            for _ in range(GRADIENT_ITERATIONS):
                midpoint = (left + right) / 2
                if left_product < right_product:
                    left = midpoint
                    left_product = float(np.dot(self.evaluate(left), direction))
                else:
                    right = midpoint
                    right_product = float(np.dot(self.evaluate(right), direction))

            if best_product < right_product:
                best = self.evaluate(right)
                best_product = right_product
            if best_product < left_product:
                best = self.evaluate(left)
                best_product = left_product
        return best

    def recalculate_aabb(self) -> tuple[Vec3, Vec3]:
        x_min, x_max, y_min, y_max, z_min, z_max = (
            float(self.max_gradient(axis)[i // 2]) for i, axis in enumerate(_AXES)
        )
        lower = np.array([x_min, y_min, z_min]) - AABB_PADDING
        upper = np.array([x_max, y_max, z_max]) + AABB_PADDING
        self.bounds = (lower, upper)
        return self.bounds
