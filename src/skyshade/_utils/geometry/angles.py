"""
Circular arithmetic for azimuths.

Azimuths are degrees in [-180, 180), 0 at North and increasing clockwise.
This module is the only place where the +/-180 discontinuity is handled;
everything else compares azimuths through these helpers.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

FULL_TURN = 360.0
HALF_TURN = 180.0

AngleLike = float | npt.NDArray[np.float64]


def normalize_azimuth(angle: AngleLike) -> AngleLike:
    """
    Wrap an azimuth into [-180, 180).

    Parameters
    ----------
    angle
        Azimuth in degrees, a scalar or a numpy array.

    Returns
    -------
    azimuth
        The equivalent azimuth in [-180, 180). Scalars come back as float.
    """
    wrapped = np.mod(np.asarray(angle, dtype=float) + HALF_TURN, FULL_TURN) - HALF_TURN
    # np.mod can round up to exactly 360 for tiny negative inputs
    wrapped = np.where(wrapped >= HALF_TURN, wrapped - FULL_TURN, wrapped)
    if np.ndim(wrapped) == 0:
        return float(wrapped)
    return wrapped


def unwrap_near(angle: AngleLike, reference: float) -> AngleLike:
    """
    Shift an azimuth by whole turns so it lies within 180 degrees of a reference.

    Parameters
    ----------
    angle
        Azimuth in degrees, scalar or array.
    reference
        Azimuth the result should be close to. It is not normalized, so
        unwrapping toward an already-unwrapped value works as expected.

    Returns
    -------
    unwrapped
        ``angle + k * 360`` with ``reference - 180 <= result < reference + 180``.
    """
    offset = normalize_azimuth(np.asarray(angle, dtype=float) - reference)
    return offset + reference


def unwrap_sequence(angles: Sequence[float] | npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Unwrap every azimuth of a sequence relative to its first element."""
    values = np.asarray(angles, dtype=float)
    if values.size == 0:
        return values
    return np.atleast_1d(unwrap_near(values, float(values[0])))


def angular_span(angles: Sequence[float] | npt.NDArray[np.float64]) -> float:
    """
    Angular width covered by a set of azimuths.

    The azimuths are unwrapped relative to the first one before measuring, so
    a wall straddling South (+/-180) reports its true width instead of
    something close to 360.
    """
    unwrapped = unwrap_sequence(angles)
    if unwrapped.size == 0:
        return 0.0
    return float(unwrapped.max() - unwrapped.min())


def interval_contains(
    outer: tuple[float, float],
    inner: tuple[float, float],
    tolerance: float = 0.0,
) -> bool:
    """
    Check whether one azimuth interval lies inside another on the circle.

    Intervals are ``(start, end)`` pairs read clockwise from ``start`` to
    ``end``, so ``(170, -170)`` is the 20 degree interval around South.

    Parameters
    ----------
    outer
        The containing interval.
    inner
        The interval to test.
    tolerance
        Slack in degrees applied on both ends of ``outer``.

    Returns
    -------
    contained
        True if every azimuth of ``inner`` belongs to ``outer``.
    """
    outer_start, outer_end = outer
    outer_width = _clockwise_width(outer_start, outer_end)
    inner_width = _clockwise_width(inner[0], inner[1])
    if outer_width >= FULL_TURN - tolerance:
        return True
    if inner_width > outer_width + 2 * tolerance:
        return False

    start_offset = float(np.mod(inner[0] - outer_start + tolerance, FULL_TURN)) - tolerance
    return start_offset + inner_width <= outer_width + tolerance


def azimuth_in_sector(azimuth: float, start: float, end: float, tolerance: float = 0.0) -> bool:
    """Check whether an azimuth falls in the clockwise sector from ``start`` to ``end``."""
    return interval_contains((start, end), (azimuth, azimuth), tolerance=tolerance)


def _clockwise_width(start: float, end: float) -> float:
    width = float(np.mod(end - start, FULL_TURN))
    # Equal endpoints written as a full turn, e.g. (-180, 180)
    if width == 0.0 and end != start:
        return FULL_TURN
    return width
