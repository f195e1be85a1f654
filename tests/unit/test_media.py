from __future__ import annotations

import numpy as np
import pytest
from scipy.constants import c as c_light
from scipy.constants import e as e_charge

from hollowprop.errors import ConfigurationError
from hollowprop.functions.sellmeier import sellmeier_gas, sellmeier_silica
from hollowprop.physics.media import (
    GasFill,
    gamma3,
    get_gas,
    gradient,
    ionization_potential,
    number_density,
)

W_800 = 2 * np.pi * c_light / 800e-9


@pytest.mark.unit
def test_argon_and_silica_indices_at_800nm() -> None:
    n_ar, k_ar, dk_ar = sellmeier_gas("ar", W_800)
    assert 2.7e-4 < n_ar - 1 < 2.9e-4
    assert k_ar == pytest.approx(n_ar * W_800 / c_light)
    assert dk_ar > 1 / c_light

    n_si = sellmeier_silica(W_800)[0]
    assert 1.45 < n_si.real < 1.46
    assert n_si.imag == 0.0


@pytest.mark.unit
def test_number_density_follows_ideal_gas_law() -> None:
    assert number_density(1.0, 294.0) == pytest.approx(2.4636e25, rel=1e-4)
    assert number_density(2.0, 294.0) == pytest.approx(2 * number_density(1.0, 294.0))
    assert number_density(1.0, 588.0) == pytest.approx(0.5 * number_density(1.0, 294.0))


@pytest.mark.unit
def test_susceptibility_scales_with_pressure() -> None:
    n_1 = GasFill("ar", 1.0).ref_index(W_800)
    n_2 = GasFill("ar", 2.0).ref_index(W_800)
    vacuum = GasFill("ar", 0.0).ref_index(W_800)

    assert (n_2**2 - 1) / (n_1**2 - 1) == pytest.approx(2.0, rel=1e-12)
    assert vacuum == 1.0


@pytest.mark.unit
def test_gas_constants() -> None:
    assert get_gas("XE").name == "Xe"
    assert ionization_potential("ar") == pytest.approx(15.7596 * e_charge)
    assert gamma3("kr") > gamma3("ar") > gamma3("he") > 0
    assert GasFill("ne", 1.0).gamma3() == gamma3("ne")


@pytest.mark.unit
def test_unknown_gas_and_negative_pressure_raise() -> None:
    with pytest.raises(ConfigurationError, match="Invalid gas"):
        get_gas("hg")
    with pytest.raises(ConfigurationError):
        GasFill("ar", -1.0)


@pytest.mark.unit
def test_pressure_gradient_profile() -> None:
    fill = gradient("he", 2.0, 0.5, 3.0)

    assert fill.z_dependent
    assert fill.pressure(0.0) == pytest.approx(0.5)
    assert fill.pressure(2.0) == pytest.approx(3.0)
    assert fill.pressure(1.0) == pytest.approx(np.sqrt(0.5 * (0.5**2 + 3.0**2)))
    assert fill.pressure(-1.0) == pytest.approx(0.5)
    assert fill.pressure(5.0) == pytest.approx(3.0)
    assert fill.density(2.0) == pytest.approx(6 * fill.density(0.0))

    with pytest.raises(ConfigurationError):
        gradient("he", 0.0, 0.5, 3.0)
