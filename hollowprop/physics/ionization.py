"""
Ammosov-Delone-Krainov (ADK) ionization rate for the filling gas.

How this works
--------------

1. The rate is a function of the instantaneous field strength, so it can
be tabulated once on a logarithmic grid of field values and interpolated
afterwards, which is much cheaper than evaluating the power law and the
exponential at every sample of every nonlinear evaluation.

2. Below the tabulated range the rate is zero, and above it the last
tabulated value is held. With ``lookup=False`` the rate is evaluated
exactly each time instead.

3. Instances are called as ``rate(field, out)``, which is the rate model
interface expected by the plasma response.
"""

import numpy as np
from scipy.interpolate import interp1d

from ..errors import ConfigurationError
from ..functions.ionization_rates import adk_rate


class ADKIonization:
    """ADK ionization rate model."""

    def __init__(self, ion_pot, field_range=(1e8, 1e12), num_points=4096, lookup=True):
        """
        Parameters
        ----------
        ion_pot : float
            Ionization potential in J.
        field_range : (float, float), default: (1e8, 1e12)
            Range of field strengths in V/m covered by the table.
        num_points : int, default: 4096
            Number of table points.
        lookup : bool, default: True
            Whether to interpolate from the table.

        """
        self.ion_pot = ion_pot
        self.field_range = field_range
        self.num_points = num_points
        self.lookup = lookup
        self.interpolator = None
        self._check_parameters()

    def _check_parameters(self) -> None:
        """Validate the rate model inputs."""
        checks = [
            (self.ion_pot <= 0, "ion_pot must be positive"),
            (self.field_range[0] <= 0, "field_range lower bound must be positive"),
            (
                self.field_range[1] <= self.field_range[0],
                "field_range upper bound must be greater than lower bound",
            ),
            (self.num_points < 2, "num_points must be at least 2"),
        ]
        for condition, message in checks:
            if condition:
                raise ConfigurationError(message, component="ADKIonization")

    def _ionization_rate(self):
        field = np.geomspace(*self.field_range, self.num_points)
        return field, adk_rate(field, self.ion_pot)

    @property
    def field_to_rate(self):
        """Interpolation function for ionization rate vs field strength."""
        if self.interpolator is None:
            field, rate = self._ionization_rate()
            self.interpolator = interp1d(
                field, rate, bounds_error=False, fill_value=(0.0, rate[-1])
            )
        return self.interpolator

    def __call__(self, field, out=None):
        strength = np.abs(field)
        if self.lookup:
            rate = self.field_to_rate(strength)
        else:
            rate = adk_rate(strength, self.ion_pot)
        if out is None:
            return rate
        out[:] = rate
        return out
