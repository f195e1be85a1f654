from __future__ import annotations

import numpy as np
import pytest

from hollowprop.errors import ConfigurationError
from hollowprop.functions.ionization_rates import adk_rate
from hollowprop.physics.ionization import ADKIonization
from hollowprop.physics.media import ionization_potential

IP_AR = ionization_potential("ar")


@pytest.mark.unit
def test_adk_rate_is_zero_at_zero_field_and_increasing() -> None:
    rate = adk_rate([0.0, 1e10, 2e10, 4e10, 8e10], IP_AR)

    assert rate[0] == 0.0
    assert np.all(rate[1:] > 0)
    assert np.all(np.diff(rate) > 0)
    np.testing.assert_array_equal(adk_rate([-2e10], IP_AR), adk_rate([2e10], IP_AR))


@pytest.mark.unit
def test_adk_rate_is_lower_for_higher_potential() -> None:
    field = np.array([3e10])
    assert adk_rate(field, ionization_potential("he"))[0] < adk_rate(field, IP_AR)[0]


@pytest.mark.unit
def test_lookup_table_matches_exact_rate() -> None:
    field = np.array([2.345e10, 3.21e10, -5.5e10])
    table = ADKIonization(IP_AR)
    exact = ADKIonization(IP_AR, lookup=False)

    np.testing.assert_allclose(table(field), exact(field), rtol=1e-3)


@pytest.mark.unit
def test_lookup_outside_table_range() -> None:
    rate = ADKIonization(IP_AR, field_range=(1e9, 1e11), num_points=512)
    values = rate(np.array([1e7, 1e11, 5e11]))

    assert values[0] == 0.0
    assert values[2] == pytest.approx(values[1])


@pytest.mark.unit
def test_rate_fills_output_buffer() -> None:
    field = np.linspace(-4e10, 4e10, 33)
    out = np.empty_like(field)
    rate = ADKIonization(IP_AR, lookup=False)

    result = rate(field, out=out)
    assert result is out
    np.testing.assert_allclose(out, adk_rate(field, IP_AR))


@pytest.mark.unit
@pytest.mark.parametrize(
    "kwargs",
    [
        {"ion_pot": 0.0},
        {"ion_pot": IP_AR, "field_range": (0.0, 1e10)},
        {"ion_pot": IP_AR, "field_range": (1e10, 1e9)},
        {"ion_pot": IP_AR, "num_points": 1},
    ],
)
def test_invalid_rate_parameters_raise(kwargs) -> None:
    with pytest.raises(ConfigurationError):
        ADKIonization(**kwargs)
