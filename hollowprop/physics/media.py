"""
Gas properties module for the capillary filling.

The units used in the module are

============================  ======================
 ionization_energy             [eV]
 nonlinear_index               [m**2 / W] at 1 bar
 pressure                      [bar]
 temperature                   [K]
 density                       [m**(-3)]

How this works
--------------

1. Linear susceptibility scales with the number density. The Sellmeier
index at reference conditions (0 degrees Celsius, 1 atm) gives a
susceptibility per molecule, which is then multiplied by the density of
the actual fill.

2. The third-order susceptibility per molecule is obtained from the
nonlinear index at 1 bar and room temperature through
``chi3 = 4/3 eps_0 c n2``.

3. A `GasFill` has either a constant pressure or a pressure profile
``p(z)``. `gradient` builds the profile of a capillary filled from both
ends with different pressures, for which ``p(z)**2`` is linear in z.
"""

from dataclasses import dataclass

import numpy as np
from scipy.constants import c as c_light
from scipy.constants import epsilon_0 as eps_0
from scipy.constants import k as k_boltzmann
from scipy.constants import physical_constants

from ..errors import ConfigurationError
from ..functions.sellmeier import GAS_SELLMEIER, sellmeier_gas

ROOM_TEMPERATURE = 294.0
LOSCHMIDT = physical_constants["Loschmidt constant (273.15 K, 101.325 kPa)"][0]


@dataclass
class Gas:
    """Gas parameters available."""

    name: str
    ionization_energy: float
    nonlinear_index: float


# Gas instances defined
GASES = {
    "he": Gas(name="He", ionization_energy=24.5874, nonlinear_index=3.5e-25),
    "ne": Gas(name="Ne", ionization_energy=21.5645, nonlinear_index=8.5e-25),
    "ar": Gas(name="Ar", ionization_energy=15.7596, nonlinear_index=1.0e-23),
    "kr": Gas(name="Kr", ionization_energy=13.9996, nonlinear_index=2.2e-23),
    "xe": Gas(name="Xe", ionization_energy=12.1298, nonlinear_index=5.8e-23),
    "n2": Gas(name="N2", ionization_energy=15.581, nonlinear_index=7.4e-24),
}


def get_gas(gas):
    """Return the `Gas` entry for a gas name (case-insensitive)."""
    key = gas.lower()
    if key not in GASES or key not in GAS_SELLMEIER:
        raise ConfigurationError(
            f"Invalid gas: '{gas}'. Available gases are: {', '.join(GASES)}",
            component="media",
        )
    return GASES[key]


def number_density(pressure, temperature=ROOM_TEMPERATURE):
    """Ideal-gas number density for a pressure in bar."""
    return pressure * 1e5 / (k_boltzmann * temperature)


def chi1(gas, omega, density):
    """Linear susceptibility of the gas at the given number density."""
    n_ref, _, _ = sellmeier_gas(gas.lower(), omega)
    return (n_ref**2 - 1) * density / LOSCHMIDT


def gamma3(gas):
    """Third-order susceptibility per molecule, in m**5 / V**2."""
    entry = get_gas(gas)
    chi3 = 4 / 3 * eps_0 * c_light * entry.nonlinear_index
    return chi3 / number_density(1.0)


def ionization_potential(gas):
    """Ionization potential in joules."""
    return get_gas(gas).ionization_energy * physical_constants["electron volt"][0]


class GasFill:
    """
    Gas filling a capillary at a constant pressure or along a profile.

    Parameters
    ----------
    gas : str
        Gas name, see `GASES`.
    pressure : float or callable
        Pressure in bar, or a function of z returning it.
    temperature : float, default: 294.0
        Gas temperature in kelvin.

    """

    def __init__(self, gas, pressure, temperature=ROOM_TEMPERATURE):
        self.gas = get_gas(gas)
        self.key = gas.lower()
        self.temperature = temperature
        self.z_dependent = callable(pressure)
        self._pressure = pressure
        if not self.z_dependent and pressure < 0:
            raise ConfigurationError("pressure must be non-negative", component="GasFill")

    def pressure(self, z=0.0):
        if self.z_dependent:
            return self._pressure(z)
        return self._pressure

    def density(self, z=0.0):
        """Number density at position z."""
        return number_density(self.pressure(z), self.temperature)

    def ref_index(self, omega, z=0.0):
        """Refractive index of the fill at position z."""
        return np.sqrt(1 + chi1(self.key, omega, self.density(z)))

    def gamma3(self):
        return gamma3(self.key)

    def ionization_potential(self):
        return ionization_potential(self.key)


def gradient(gas, length, p0, p1, temperature=ROOM_TEMPERATURE):
    """
    Pressure gradient along a capillary of the given length.

    The pressure follows ``p(z) = sqrt(p0**2 + z / length (p1**2 - p0**2))``
    and is held at the end values outside ``[0, length]``.
    """
    if length <= 0:
        raise ConfigurationError("gradient length must be positive", component="media")
    if p0 < 0 or p1 < 0:
        raise ConfigurationError("pressures must be non-negative", component="media")

    def pressure(z):
        zc = min(max(z, 0.0), length)
        return np.sqrt(p0**2 + zc / length * (p1**2 - p0**2))

    return GasFill(gas, pressure, temperature)
