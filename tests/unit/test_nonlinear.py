from __future__ import annotations

import numpy as np
import pytest
from scipy.constants import epsilon_0 as eps_0

from hollowprop.errors import ConfigurationError
from hollowprop.physics.ionization import ADKIonization
from hollowprop.physics.media import ionization_potential
from hollowprop.physics.nonlinear import (
    KerrEnv,
    KerrEnvTHG,
    KerrField,
    PlasmaCumtrapz,
    ResponseAggregator,
)

GAMMA3 = 1e-49
IP_AR = ionization_potential("ar")


def constant_rate(value):
    def rate(field, out):
        out[:] = value
        return out

    return rate


@pytest.mark.unit
def test_kerr_field_adds_cubic_polarization() -> None:
    field = np.linspace(-1e10, 1e10, 7)
    out = np.zeros_like(field)
    kerr = KerrField(GAMMA3)

    kerr(out, field)
    np.testing.assert_allclose(out, eps_0 * GAMMA3 * field**3)
    kerr(out, field)
    np.testing.assert_allclose(out, 2 * eps_0 * GAMMA3 * field**3)


@pytest.mark.unit
def test_kerr_envelope_responses() -> None:
    t = np.linspace(-1e-13, 1e-13, 9)
    field = 1e10 * np.exp(1j * np.linspace(0.0, 2.0, 9))

    out = np.zeros_like(field)
    KerrEnv(GAMMA3)(out, field)
    np.testing.assert_allclose(out, 0.75 * eps_0 * GAMMA3 * np.abs(field) ** 2 * field)

    thg = KerrEnvTHG(GAMMA3, 2.0e15, t)
    thg.allocate(t.shape)
    out_thg = np.zeros_like(field)
    thg(out_thg, field)
    expected = eps_0 * GAMMA3 * (
        0.75 * np.abs(field) ** 2 * field + 0.25 * field**3 * np.exp(4j * 1.0e15 * t)
    )
    np.testing.assert_allclose(out_thg, expected)


@pytest.mark.unit
def test_kerr_thg_broadcasts_over_columns() -> None:
    t = np.linspace(-1e-13, 1e-13, 5)
    thg = KerrEnvTHG(GAMMA3, 2.0e15, t)
    thg.allocate((5, 3))

    field = np.ones((5, 3), dtype=np.complex128)
    out = np.zeros_like(field)
    thg(out, field)
    np.testing.assert_allclose(out[:, 0], out[:, 2])


@pytest.mark.unit
def test_plasma_fraction_with_constant_rate() -> None:
    t = np.linspace(0.0, 1e-13, 1001)
    plasma = PlasmaCumtrapz(t, constant_rate(1e13), IP_AR)

    frac = plasma.ionization_fraction(np.ones_like(t))
    np.testing.assert_allclose(frac, 1 - np.exp(-1e13 * t), rtol=1e-10, atol=1e-15)


@pytest.mark.unit
def test_plasma_vanishes_for_zero_field() -> None:
    t = np.linspace(0.0, 1e-13, 257)
    plasma = PlasmaCumtrapz(t, constant_rate(1e13), IP_AR)
    out = np.zeros_like(t)

    plasma(out, np.zeros_like(t))
    assert np.all(out == 0.0)


@pytest.mark.unit
def test_plasma_fraction_is_bounded_and_monotonic(real_grid) -> None:
    t = real_grid.to_grid
    field = 4e10 * np.exp(-((t / 20e-15) ** 2)) * np.cos(2.35e15 * t)
    plasma = PlasmaCumtrapz(t, ADKIonization(IP_AR), IP_AR)
    out = np.zeros_like(t)

    plasma(out, field)
    frac = plasma.fraction
    assert frac[0] == 0.0
    assert np.all(np.diff(frac) >= 0)
    assert 0.0 < frac[-1] <= 1.0
    assert np.all(np.isfinite(out))
    assert np.any(out != 0.0)


@pytest.mark.unit
def test_aggregator_rejects_mismatched_representation(real_grid, env_grid) -> None:
    with pytest.raises(ConfigurationError, match="PlasmaCumtrapz"):
        ResponseAggregator(
            [PlasmaCumtrapz(env_grid.to_grid, constant_rate(0.0), IP_AR)], 1.0, env_grid
        )
    with pytest.raises(ConfigurationError, match="KerrEnv"):
        ResponseAggregator([KerrEnv(GAMMA3)], 1.0, real_grid)


@pytest.mark.unit
def test_aggregator_scales_with_density(real_grid) -> None:
    field = np.linspace(-1e10, 1e10, real_grid.to_nodes)
    single = ResponseAggregator([KerrField(GAMMA3)], 1.0, real_grid)
    double = ResponseAggregator([KerrField(GAMMA3)], 2.0, real_grid)

    p1 = single.evaluate(field, 0.0).copy()
    p2 = double.evaluate(field, 0.0)
    np.testing.assert_allclose(p2, 2 * p1)
    np.testing.assert_allclose(single.evaluate(field, 0.0), p1)


@pytest.mark.unit
def test_aggregator_with_density_profile(env_grid) -> None:
    field = np.full(env_grid.to_nodes, 1e10 + 0j)
    agg = ResponseAggregator([KerrEnv(GAMMA3)], lambda z: 1e25 * (1 + z), env_grid)

    assert agg.density_at(1.0) == pytest.approx(2e25)
    p_end = agg.evaluate(field, 1.0).copy()
    p_start = agg.evaluate(field, 0.0).copy()
    np.testing.assert_allclose(p_end, 2 * p_start)


@pytest.mark.unit
def test_aggregator_without_responses_gives_zero(env_grid) -> None:
    agg = ResponseAggregator([], 1e25, env_grid)
    pol = agg.evaluate(np.ones(env_grid.to_nodes, dtype=np.complex128), 0.0)

    assert pol.shape == (env_grid.to_nodes,)
    assert np.all(pol == 0)
