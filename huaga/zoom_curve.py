"""Differential scroll-wheel zoom.

The zoom setpoint is an *anchor size*: the pixel length the image's reference
dimension (min of width/height) should be rendered at. Each wheel sample nudges
the anchor by a fraction of itself. The nudge is damped to zero as the
natural/anchor ratio approaches the bounds, except when the gesture pushes the
ratio back toward 1, which always runs at full speed.

Keep this module free of Qt dependencies.
"""

from __future__ import annotations

# natural/anchor ratio bounds
MIN_RATIO = 0.1
MAX_RATIO = 4.0

# Fraction of the anchor moved per wheel sample at full speed
ZOOM_SPEED = 0.03

# Below this the damping factor snaps to zero
HYPER_CUTOFF = 0.1

# Anchor sizes live in the toolkit's 32-bit int range
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1


def _sign(value: float) -> float:
    if value > 0:
        return 1.0
    if value < 0:
        return -1.0
    return 0.0


def clip(value: float, lo: float, hi: float) -> float:
    return lo if value < lo else hi if value > hi else value


def shape(ratio: float, dratio: float, lo: float, hi: float) -> float:
    """Return the signed speed factor in [-1, 1] for one wheel sample."""
    direction = _sign(dratio)
    span = (ratio - lo) * (hi - ratio)
    hyper = 1.0 - 1.0 / span if span > 0 else 0.0
    if hyper < HYPER_CUTOFF:
        hyper = 0.0
    if (ratio - 1.0) * dratio >= 0:
        # heading toward 1:1, never damped
        return direction
    return direction * hyper


def compute_zoom_delta(natural_size: float, anchor_size: float, raw_delta: float) -> float:
    """Return the change in anchor size for one raw scroll sample.

    ``natural_size`` is the loaded bitmap's reference dimension and
    ``anchor_size`` the current zoom setpoint. Raises ValueError when the
    anchor is uninitialized (0).
    """
    if anchor_size == 0:
        raise ValueError("anchor size is uninitialized")
    ratio = natural_size / anchor_size
    dratio = raw_delta / anchor_size
    lo = min(ratio, MIN_RATIO)
    hi = max(ratio, MAX_RATIO)
    dzoom = ZOOM_SPEED * shape(ratio, dratio, lo, hi)
    return anchor_size * dzoom


def next_anchor_size(natural_size: float, anchor_size: int, raw_delta: float) -> int:
    """Apply one scroll sample to ``anchor_size`` and return the new anchor.

    The result is clipped to the int range, then clamped so that a single
    sample never moves past MAX_RATIO/MIN_RATIO times the current anchor.
    A nonzero delta always moves the anchor by at least one pixel, so
    small anchors (16 px and below) do not lose every step to rounding.
    """
    delta = compute_zoom_delta(natural_size, anchor_size, raw_delta)
    proposed = clip(anchor_size + delta, INT_MIN + 1, INT_MAX)
    if delta >= 0:
        new_size = min(MAX_RATIO * anchor_size, proposed)
    else:
        new_size = max(MIN_RATIO * anchor_size, proposed)
    rounded = int(round(new_size))
    if rounded == anchor_size and delta != 0:
        if delta > 0 and anchor_size < INT_MAX:
            rounded = anchor_size + 1
        elif delta < 0 and anchor_size > 1:
            # never step down to the uninitialized anchor
            rounded = anchor_size - 1
    return rounded
