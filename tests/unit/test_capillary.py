from __future__ import annotations

import numpy as np
import pytest
from scipy.constants import c as c_light

from hollowprop.errors import ConfigurationError
from hollowprop.physics.capillary import MarcatiliMode
from hollowprop.physics.media import GasFill

RADIUS = 125e-6
W_800 = 2 * np.pi * c_light / 800e-9


@pytest.mark.unit
@pytest.mark.parametrize(
    "kwargs",
    [
        {"kind": "EH"},
        {"model": "approximate"},
        {"kind": "TE", "n": 1, "m": 1},
        {"kind": "TM", "n": 0, "m": 2},
        {"kind": "HE", "n": 0, "m": 1},
        {"kind": "HE", "n": 1, "m": 0},
    ],
)
def test_invalid_modes_raise(kwargs) -> None:
    with pytest.raises(ConfigurationError):
        MarcatiliMode(RADIUS, 1.0, 1.45, **kwargs)


@pytest.mark.unit
def test_negative_radius_raises() -> None:
    with pytest.raises(ConfigurationError, match="radius"):
        MarcatiliMode(-RADIUS, 1.0, 1.45)


@pytest.mark.unit
def test_kind_and_model_are_case_insensitive() -> None:
    mode = MarcatiliMode(RADIUS, 1.0, 1.45, n=0, m=1, kind="te", model="Reduced")
    assert mode.kind == "TE"
    assert mode.model == "reduced"


@pytest.mark.unit
@pytest.mark.parametrize("kind, n", [("HE", 1), ("TE", 0), ("TM", 0)])
def test_full_and_reduced_models_agree_for_wide_core(kind: str, n: int) -> None:
    full = MarcatiliMode(RADIUS, 1.0, 1.45, n=n, m=1, kind=kind, model="full")
    reduced = MarcatiliMode(RADIUS, 1.0, 1.45, n=n, m=1, kind=kind, model="reduced")

    nf = full.neff(W_800)
    nr = reduced.neff(W_800)
    assert np.real(nf) == pytest.approx(np.real(nr), abs=1e-9)
    assert np.imag(nf) == pytest.approx(np.imag(nr), rel=1e-3)
    assert np.real(nf) < 1.0
    assert np.imag(nf) > 0.0


@pytest.mark.unit
def test_higher_order_modes_have_lower_index_and_higher_loss() -> None:
    he11 = MarcatiliMode(RADIUS, 1.0, 1.45)
    he12 = MarcatiliMode(RADIUS, 1.0, 1.45, m=2)

    assert np.real(he12.neff(W_800)) < np.real(he11.neff(W_800))
    assert he12.alpha(W_800) > he11.alpha(W_800)


@pytest.mark.unit
def test_lossless_mode_has_real_index() -> None:
    mode = MarcatiliMode(RADIUS, 1.0, 1.45, loss=False)
    omega = np.linspace(0.5, 2.0, 7) * W_800

    neff = mode.neff(omega)
    assert np.all(np.imag(neff) == 0.0)
    assert np.all(mode.alpha(omega) == 0.0)
    lossy = MarcatiliMode(RADIUS, 1.0, 1.45)
    np.testing.assert_allclose(mode.beta(omega), lossy.beta(omega))


@pytest.mark.unit
def test_he11_effective_area() -> None:
    mode = MarcatiliMode(RADIUS, 1.0, 1.45)
    assert 1.4 * RADIUS**2 < mode.aeff() < 1.6 * RADIUS**2
    assert mode.aeff() is mode.aeff()


@pytest.mark.unit
def test_he11_field_is_linearly_polarised() -> None:
    mode = MarcatiliMode(RADIUS, 1.0, 1.45)
    r = np.linspace(0.0, RADIUS, 9)
    theta = np.linspace(0.0, 2 * np.pi, 9)

    ex, ey = mode.field(r, theta)
    np.testing.assert_allclose(ex, 0.0, atol=1e-15)
    assert ey[0] == pytest.approx(1.0)
    assert abs(ey[-1]) < 1e-10


@pytest.mark.unit
def test_gas_filled_mode_follows_pressure_profile() -> None:
    def radius(z):
        return RADIUS * (1 - 0.1 * z)

    fill = GasFill("ar", lambda z: 1.0 + z)
    mode = MarcatiliMode.from_gas(radius, fill)

    assert mode.z_dependent
    assert mode.radius(1.0) == pytest.approx(0.9 * RADIUS)
    assert np.real(mode.neff(W_800, 1.0)) != np.real(mode.neff(W_800, 0.0))


@pytest.mark.unit
def test_constant_fill_gives_constant_mode() -> None:
    mode = MarcatiliMode.from_gas(RADIUS, GasFill("he", 2.0))
    assert not mode.z_dependent
    with pytest.raises(ConfigurationError, match="cladding"):
        MarcatiliMode.from_gas(RADIUS, GasFill("he", 2.0), clad="sapphire")
