"""Tests for the adaptive Runge-Kutta ponded depth integrator."""

import pytest
from pyrunoff.constants import MEXP
from pyrunoff.odesolve import OK, STEP_UNDERFLOW, TOO_MANY_STEPS, depth_derivative, integrate_depth


class TestDepthDerivative:
    """Tests for depth_derivative."""

    def test_no_outflow_below_storage(self) -> None:
        """Below depression storage only the net inflow changes depth."""
        assert depth_derivative(0.01, 1.0e-5, 0.5, 0.02) == pytest.approx(1.0e-5)

    def test_manning_outflow_above_storage(self) -> None:
        """Above storage outflow is alpha * excess^(5/3)."""
        expected = 1.0e-5 - 0.5 * 0.03**MEXP
        assert depth_derivative(0.05, 1.0e-5, 0.5, 0.02) == pytest.approx(expected)


class TestIntegrateDepth:
    """Tests for integrate_depth."""

    def test_linear_growth_without_outflow(self) -> None:
        """With alpha = 0 depth grows linearly at the net inflow rate."""
        depth, status = integrate_depth(0.0, 600.0, 2.0e-5, 0.0, 0.0, 1.0e-4, 10000)
        assert status == OK
        assert depth == pytest.approx(2.0e-5 * 600.0)

    def test_recession_matches_analytic_solution(self) -> None:
        """Draining with no inflow follows d(t) = (d0^(-2/3) + 2/3 alpha t)^(-3/2)."""
        d0, alpha, t = 0.1, 0.05, 600.0
        expected = (d0 ** (-2.0 / 3.0) + 2.0 / 3.0 * alpha * t) ** -1.5

        depth, status = integrate_depth(d0, t, 0.0, alpha, 0.0, 1.0e-4, 10000)

        assert status == OK
        assert depth == pytest.approx(expected, rel=2e-3)

    def test_equilibrium_depth_is_steady(self) -> None:
        """At equilibrium depth inflow balances outflow and depth does not change."""
        inflow, alpha, d_store = 2.0e-5, 0.05, 0.01
        d_eq = d_store + (inflow / alpha) ** (1.0 / MEXP)

        depth, status = integrate_depth(d_eq, 3600.0, inflow, alpha, d_store, 1.0e-4, 10000)

        assert status == OK
        assert depth == pytest.approx(d_eq, rel=1e-6)

    def test_rising_limb_stays_below_equilibrium(self) -> None:
        """Depth approaches equilibrium from below without overshoot."""
        inflow, alpha = 2.0e-5, 0.05
        d_eq = (inflow / alpha) ** (1.0 / MEXP)

        depth, status = integrate_depth(0.0, 300.0, inflow, alpha, 0.0, 1.0e-4, 10000)

        assert status == OK
        assert 0.0 < depth < d_eq

    def test_step_limit_reported(self) -> None:
        """A step budget too small to cover the interval is reported, not hidden."""
        depth, status = integrate_depth(1.0, 1000.0, 0.0, 1.0, 0.0, 1.0e-10, 1)
        assert status == TOO_MANY_STEPS
        assert depth > 0.0

    def test_status_codes_distinct(self) -> None:
        assert len({OK, TOO_MANY_STEPS, STEP_UNDERFLOW}) == 3
