from __future__ import annotations

import numpy as np
import pytest

from hollowprop.functions.maths import (
    cumtrapz,
    derivative,
    gauss,
    moment,
    planck_taper,
    polar_quadrature,
    rms_width,
)


@pytest.mark.unit
def test_planck_taper_is_zero_at_ends_and_one_in_band() -> None:
    x = np.linspace(-1.0, 1.0, 1001)
    win = planck_taper(x, -1.0, -0.5, 0.5, 1.0)

    assert win[0] == 0.0
    assert win[-1] == 0.0
    assert win[500] == 1.0
    assert np.all(win[(x >= -0.5) & (x <= 0.5)] == 1.0)
    assert np.all((win >= 0.0) & (win <= 1.0))


@pytest.mark.unit
def test_planck_taper_edges_are_monotonic() -> None:
    x = np.linspace(0.0, 10.0, 2001)
    win = planck_taper(x, 1.0, 3.0, 7.0, 9.0)

    rise = win[(x > 1.0) & (x < 3.0)]
    fall = win[(x > 7.0) & (x < 9.0)]
    assert np.all(np.diff(rise) >= 0)
    assert np.all(np.diff(fall) <= 0)
    assert rise[0] < 1e-6 < 1 - 1e-6 < rise[-1]
    assert fall[-1] < 1e-6 < 1 - 1e-6 < fall[0]
    assert np.all(win[x <= 1.0] == 0.0)
    assert np.all(win[x >= 9.0] == 0.0)


@pytest.mark.unit
def test_cumtrapz_reproduces_antiderivative_of_ramp() -> None:
    x = np.linspace(0.0, 3.0, 301)
    dx = x[1] - x[0]
    y = 2.0 * x + 1.0

    out = cumtrapz(y, dx)

    assert out[0] == 0.0
    np.testing.assert_allclose(out, x**2 + x, rtol=1e-12, atol=1e-12)


@pytest.mark.unit
def test_cumtrapz_works_in_place_and_column_wise() -> None:
    x = np.linspace(0.0, 1.0, 101)
    dx = x[1] - x[0]
    y = np.stack([x, 3.0 * x], axis=1)
    expected = np.stack([0.5 * x**2, 1.5 * x**2], axis=1)

    np.testing.assert_allclose(cumtrapz(y, dx), expected, atol=1e-13)

    buf = y.copy()
    cumtrapz(buf, dx, out=buf)
    np.testing.assert_allclose(buf, expected, atol=1e-13)


@pytest.mark.unit
def test_cumtrapz_rejects_three_dimensional_input() -> None:
    with pytest.raises(ValueError, match="1D or 2D"):
        cumtrapz(np.zeros((2, 2, 2)), 1.0)


@pytest.mark.unit
def test_derivative_matches_analytic_values() -> None:
    assert derivative(np.sin, 1.0) == pytest.approx(np.cos(1.0), rel=1e-9)
    assert derivative(np.exp, 0.5, order=2) == pytest.approx(np.exp(0.5), rel=1e-4)
    with pytest.raises(ValueError, match="Invalid derivative order"):
        derivative(np.sin, 1.0, order=3)


@pytest.mark.unit
def test_gauss_has_requested_fwhm() -> None:
    assert gauss(0.0, 2.0) == pytest.approx(1.0)
    assert gauss(1.0, 2.0) == pytest.approx(0.5)
    assert gauss(-1.0, 2.0, power=6) == pytest.approx(0.5)


@pytest.mark.unit
def test_moment_and_rms_width_of_gaussian() -> None:
    x = np.linspace(-20.0, 20.0, 4001)
    sigma = 1.5
    y = np.exp(-0.5 * ((x - 2.0) / sigma) ** 2)

    assert moment(x, y) == pytest.approx(2.0, rel=1e-10)
    assert rms_width(x, y) == pytest.approx(sigma, rel=1e-8)


@pytest.mark.unit
def test_polar_quadrature_integrates_disc_area_and_moments() -> None:
    radius = 2.5
    r, theta, weights = polar_quadrature(radius, nr=8, ntheta=12)

    assert r.shape == theta.shape == weights.shape == (96,)
    assert np.sum(weights) == pytest.approx(np.pi * radius**2, rel=1e-12)
    assert np.sum(weights * r**2) == pytest.approx(0.5 * np.pi * radius**4, rel=1e-12)
    assert np.sum(weights * np.cos(theta)) == pytest.approx(0.0, abs=1e-12)
