"""Export configuration: precision contracts and tolerances."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from globeshape.sphere.arc import SAMPLE_DTYPE

# 4 is the largest power of two below 2π (the longest parameter range);
# eps is the smallest relative step of the sampling dtype. Their product is
# the finest parameter step that still moves a sample.
DELTA = 4 * float(np.finfo(SAMPLE_DTYPE).eps)

# Max chordal error of an accepted span, in plane units.
THRESHOLD = 1e-5

# Offset of the tangent probes used for Bezier control points, in DELTAs.
TANGENT_PROBE_STEPS = 64


@dataclass
class PipelineConfig:
    """Tolerances for one shape export."""

    # Subdivision: max chordal deviation; spans shorter than this are dropped
    threshold: float = THRESHOLD
    # Parameter step for sign derivatives and bisection stopping width
    delta: float = DELTA
    # Endpoint gaps below this are welded; anything larger is a seam.
    # Looser than threshold because a dropped sub-threshold span leaves a gap
    # of up to threshold plus the bisection slack on each side.
    snap_threshold: float = 10 * THRESHOLD
    # Upper bound on seam searches within one arc
    max_discontinuities_per_arc: int = 64

    @property
    def tangent_probe(self) -> float:
        return TANGENT_PROBE_STEPS * self.delta
