"""Input pulses and pulse energy functionals."""

import numpy as np
import scipy.fft
from scipy.constants import c as c_light

from ..errors import ConfigurationError
from ..functions.maths import gauss


def energy_functions(grid):
    """
    Pulse energy from a time-domain field or a coarse spectrum.

    The propagated field is normalized so that ``|E(t)|**2`` is the
    instantaneous power (cycle-resolved for real fields).

    Returns
    -------
    energy_t, energy_w : callable
        Energy in joules from ``E(t)`` and from ``E(w)``.

    """
    dt = grid.t_res
    n_t = grid.t_nodes

    def energy_t(field_t):
        return dt * np.sum(np.abs(field_t) ** 2, axis=0)

    if grid.representation == "real":

        def energy_w(field_w):
            power = np.abs(field_w) ** 2
            return dt / n_t * (
                power[0] + power[-1] + 2 * np.sum(power[1:-1], axis=0)
            )

    else:

        def energy_w(field_w):
            return dt / n_t * np.sum(np.abs(field_w) ** 2, axis=0)

    return energy_t, energy_w


class GaussField:
    """Transform-limited Gaussian pulse."""

    def __init__(self, wavelength, duration, energy, phase=0.0, delay=0.0):
        """
        Parameters
        ----------
        wavelength : float
            Central wavelength in meters.
        duration : float
            Full width at half maximum of the power profile, in seconds.
        energy : float
            Pulse energy in joules.
        phase : float, default: 0.0
            Carrier-envelope phase.
        delay : float, default: 0.0
            Peak position in the time window.

        """
        checks = [
            (wavelength <= 0, "wavelength must be positive"),
            (duration <= 0, "duration must be positive"),
            (energy <= 0, "energy must be positive"),
        ]
        for condition, message in checks:
            if condition:
                raise ConfigurationError(message, component="GaussField")

        self.wavelength = wavelength
        self.duration = duration
        self.energy = energy
        self.phase = phase
        self.delay = delay

        self._init_parameters()

    def _init_parameters(self):
        """Initialize derived pulse properties"""
        self.frequency_0 = 2 * np.pi * c_light / self.wavelength
        self.peak_power = self.energy / (
            self.duration * np.sqrt(np.pi / (4 * np.log(2)))
        )

    def time_field(self, grid):
        """Field on the coarse time grid, before energy rescaling."""
        t_grid = grid.t_grid
        power = self.peak_power * gauss(t_grid, self.duration, x0=self.delay)
        if grid.representation == "real":
            return np.sqrt(2 * power) * np.cos(
                self.frequency_0 * (t_grid - self.delay) + self.phase
            )
        detuning = self.frequency_0 - grid.w_0
        return np.sqrt(power) * np.exp(
            1j * (detuning * (t_grid - self.delay) + self.phase)
        )

    def __call__(self, grid):
        """
        Coarse spectrum of the pulse, windowed and scaled to its energy.

        Returns
        -------
        field_w : (n_w,) ndarray
            Complex spectrum on ``grid.w_grid``.

        """
        field_t = self.time_field(grid)
        if grid.representation == "real":
            field_w = scipy.fft.rfft(field_t)
        else:
            field_w = scipy.fft.fft(field_t)
        field_w = field_w * grid.w_window

        _, energy_w = energy_functions(grid)
        field_w *= np.sqrt(self.energy / energy_w(field_w))
        return field_w
