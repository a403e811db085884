"""Leaf-node geometry helpers. No engine imports.

3-D vectors are float64 arrays of shape (3,). Plane points are complex numbers
``u + 1j*v`` so they hash and compare exactly.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

Vec3 = NDArray[np.float64]


def vec3(x: float, y: float, z: float) -> Vec3:
    return np.array([x, y, z], dtype=np.float64)


def normalize(v: Vec3) -> Vec3:
    """Unit vector along v. Zero vectors come back as zeros instead of NaN."""
    n = float(np.linalg.norm(v))
    if n < 1e-300:
        return np.zeros(3)
    return v / n


def signed_sweep(a: Vec3, b: Vec3, up: Vec3) -> float:
    """Angle from a to b measured toward ``up``, wrapped to [0, 2π)."""
    angle = math.atan2(float(np.dot(b, up)), float(np.dot(b, a)))
    if angle < 0:
        angle += 2 * math.pi
    return angle


def cross2(a: complex, b: complex) -> float:
    """z component of the planar cross product."""
    return a.real * b.imag - a.imag * b.real


def dot2(a: complex, b: complex) -> float:
    return a.real * b.real + a.imag * b.imag


def point_line_distance(l1: complex, l2: complex, p: complex) -> float:
    """Perpendicular distance from p to the infinite line through l1, l2."""
    d = l2 - l1
    length = abs(d)
    if length == 0:
        return abs(p - l1)
    return abs(cross2(d, p - l1)) / length


def line_intersection(
    begin: complex,
    after_begin: complex,
    before_end: complex,
    end: complex,
) -> complex:
    """Intersection of line (begin, after_begin) with line (before_end, end).

    Falls back to the midpoint of ``begin`` and ``end`` when the lines are
    parallel and the division is NaN or infinite.
    """
    d1 = after_begin - begin
    d2 = end - before_end
    denominator = cross2(d1, d2)
    with np.errstate(divide="ignore", invalid="ignore"):
        s = np.float64(cross2(before_end - begin, d2)) / np.float64(denominator)
    if not math.isfinite(s):
        return (begin + end) / 2
    result = begin + float(s) * d1
    if not (math.isfinite(result.real) and math.isfinite(result.imag)):
        return (begin + end) / 2
    return result
