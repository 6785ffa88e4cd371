"""Real intervals used as intersection windows and clamp ranges.

An Interval bounds the accepted ray parameter ``t`` during intersection
(open test, :func:`interval_surrounds`) and clamps colour channels during
output encoding (:func:`interval_clamp`). The default interval spans the
whole real line.

Host-side code works with the same semantics through the plain Python
helpers at the bottom of the module.
"""

import math

import taichi as ti

INFINITY = math.inf

# (lower, upper) pair spanning the real line, for host-side use
UNIVERSE = (-INFINITY, INFINITY)


@ti.dataclass
class Interval:
    """A range of real numbers.

    Attributes:
        lower: Lower bound.
        upper: Upper bound.
    """

    lower: ti.f64
    upper: ti.f64


@ti.func
def make_interval(lower: ti.f64, upper: ti.f64) -> Interval:
    """Create an interval from its bounds."""
    return Interval(lower=lower, upper=upper)


@ti.func
def interval_surrounds(interval: Interval, x: ti.f64) -> ti.i32:
    """Open containment test: lower < x < upper.

    Excluding the bounds keeps a scattered ray from re-hitting the surface it
    starts on.
    """
    return interval.lower < x and x < interval.upper


@ti.func
def interval_clamp(interval: Interval, x: ti.f64) -> ti.f64:
    """Clamp x into [lower, upper]."""
    return _clamp_scalar(x, interval.lower, interval.upper)


@ti.func
def _clamp_scalar(x: ti.f64, lower: ti.f64, upper: ti.f64) -> ti.f64:
    result = x
    if x <= lower:
        result = lower
    elif x >= upper:
        result = upper
    return result


# =============================================================================
# Host-side helpers
# =============================================================================


def contains(bounds: tuple[float, float], x: float) -> bool:
    """Closed containment test on a (lower, upper) pair."""
    lower, upper = bounds
    return lower <= x <= upper


def surrounds(bounds: tuple[float, float], x: float) -> bool:
    """Open containment test on a (lower, upper) pair."""
    lower, upper = bounds
    return lower < x < upper


def clamp(bounds: tuple[float, float], x: float) -> float:
    """Clamp x into a (lower, upper) pair."""
    lower, upper = bounds
    if x <= lower:
        return lower
    if x >= upper:
        return upper
    return x
