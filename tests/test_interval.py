"""Unit tests for intervals.

Tests cover:
- Closed containment vs open surrounding
- Clamping
- The universe interval
"""

import math

import pytest
import taichi as ti


class TestHostInterval:
    """Tests for the host-side (lower, upper) helpers."""

    def test_contains_is_closed(self):
        """Test that bounds are contained."""
        from bounce.core.interval import contains

        assert contains((0.0, 1.0), 0.0)
        assert contains((0.0, 1.0), 1.0)
        assert not contains((0.0, 1.0), 1.5)

    def test_surrounds_is_open(self):
        """Test that bounds are not surrounded."""
        from bounce.core.interval import surrounds

        assert surrounds((0.0, 1.0), 0.5)
        assert not surrounds((0.0, 1.0), 0.0)
        assert not surrounds((0.0, 1.0), 1.0)

    @pytest.mark.parametrize("x,expected", [(-1.0, 0.0), (0.25, 0.25), (2.0, 1.0)])
    def test_clamp(self, x, expected):
        """Test clamping into [0, 1]."""
        from bounce.core.interval import clamp

        assert clamp((0.0, 1.0), x) == expected

    def test_universe(self):
        """Test the universe contains every finite value."""
        from bounce.core.interval import UNIVERSE, contains

        assert contains(UNIVERSE, 1e300)
        assert UNIVERSE == (-math.inf, math.inf)


class TestTaichiInterval:
    """Tests for the Taichi-side Interval."""

    def test_interval_functions(self):
        """Test surrounds and clamp inside a kernel."""
        from bounce.core.interval import (
            interval_clamp,
            interval_surrounds,
            make_interval,
        )

        results = ti.field(dtype=ti.i32, shape=4)
        clamped = ti.field(dtype=ti.f64, shape=2)

        @ti.kernel
        def test_kernel():
            interval = make_interval(0.001, 10.0)
            results[0] = interval_surrounds(interval, 9.999)
            results[1] = interval_surrounds(interval, 10.0)
            results[2] = interval_surrounds(interval, 0.001)
            results[3] = interval_surrounds(interval, 5.0)
            clamped[0] = interval_clamp(interval, -3.0)
            clamped[1] = interval_clamp(interval, 30.0)

        test_kernel()
        assert results.to_numpy().tolist() == [1, 0, 0, 1]
        assert clamped[0] == pytest.approx(0.001)
        assert clamped[1] == pytest.approx(10.0)

    def test_unbounded_interval(self):
        """Test an interval with infinite bounds surrounds any finite value."""
        from bounce.core.interval import INFINITY, interval_surrounds, make_interval

        result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = interval_surrounds(make_interval(-INFINITY, INFINITY), -1e200)

        test_kernel()
        assert result[None] == 1
