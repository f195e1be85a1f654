"""
Statistics of propagation snapshots.

Every factory takes the grid and returns a functor ``f(field_w, z)``
giving a dict of named values. `collect_stats` composes several of them
into the single statistics functor handed to the propagator.

Band-limited statistics (`arrival_time`, `energy_band`) multiply the
spectrum by a Planck-taper band-pass between two wavelengths before
evaluating. By default the edges of the band-pass are 128 frequency
samples wide.
"""

import numpy as np
import scipy.fft
from scipy.constants import c as c_light

from ..errors import ConfigurationError
from ..functions.maths import moment, planck_taper, rms_width
from ..physics.laser import energy_functions

ARRIVAL_METHODS = ("moment", "peak")


def collect_stats(grid, *funcs):
    """Combine statistics functors into one, always reporting ``z``."""

    def stats(field_w, z):
        values = {"z": z}
        for func in funcs:
            values.update(func(field_w, z))
        return values

    return stats


def band_window(grid, wavelength_limits, width=None):
    """
    Planck-taper band-pass on ``grid.w_grid``.

    Parameters
    ----------
    grid : RealGrid or EnvGrid
        Simulation grid.
    wavelength_limits : (float, float)
        Edges of the flat part of the window, in meters.
    width : float, optional
        Width of each taper in rad/s, 128 frequency samples by default.

    """
    if len(wavelength_limits) != 2 or min(wavelength_limits) <= 0:
        raise ConfigurationError(
            "wavelength_limits must be two positive wavelengths", component="stats"
        )
    w_low, w_high = sorted(2 * np.pi * c_light / np.asarray(wavelength_limits))
    if width is None:
        width = 128 * abs(grid.w_grid[1] - grid.w_grid[0])
    return planck_taper(grid.w_grid, w_low - width, w_low, w_high, w_high + width)


def _columns(window, field_w):
    return window.reshape((-1,) + (1,) * (np.ndim(field_w) - 1))


def power_envelope(grid, field_w, oversampling=1):
    """
    Cycle-averaged power against time.

    The spectrum is zero-padded by ``oversampling`` to sample the
    envelope more finely than the coarse time grid.

    Returns
    -------
    t, power : ndarray
        Time axis and power, the latter with the shape of ``field_w``
        along its trailing axes.

    """
    n_t = grid.t_nodes * oversampling
    spec = np.zeros((n_t,) + np.shape(field_w)[1:], dtype=np.complex128)
    if grid.representation == "real":
        n_w = grid.w_nodes
        spec[:n_w] = 2 * field_w
        spec[0] = field_w[0]
        spec[n_w - 1] = field_w[n_w - 1]
        analytic = oversampling * scipy.fft.ifft(spec, axis=0)
        power = 0.5 * np.abs(analytic) ** 2
    else:
        half = grid.t_nodes // 2
        spec[:half] = field_w[:half]
        spec[n_t - half :] = field_w[half:]
        power = np.abs(oversampling * scipy.fft.ifft(spec, axis=0)) ** 2
    t = grid.t_grid[0] + np.arange(n_t) * grid.t_res / oversampling
    return t, power


def energy(grid):
    _, energy_w = energy_functions(grid)

    def stat(field_w, z):
        return {"energy": energy_w(field_w)}

    return stat


def energy_band(grid, wavelength_limits, width=None, name="energy_band"):
    """Energy inside a wavelength band."""
    _, energy_w = energy_functions(grid)
    window = band_window(grid, wavelength_limits, width)

    def stat(field_w, z):
        return {name: energy_w(field_w * _columns(window, field_w))}

    return stat


def central_frequency(grid):
    """Power-weighted mean angular frequency."""
    w_grid = grid.w_grid

    def stat(field_w, z):
        return {"w_central": moment(w_grid, np.abs(field_w) ** 2, 1)}

    return stat


def rms_spectral_width(grid):
    """Root-mean-square width of the power spectrum in angular frequency."""
    w_grid = grid.w_grid

    def stat(field_w, z):
        return {"w_rms": rms_width(w_grid, np.abs(field_w) ** 2)}

    return stat


def peak_power(grid):
    """Peak of the cycle-averaged power envelope."""

    def stat(field_w, z):
        _, power = power_envelope(grid, field_w)
        return {"peak_power": np.max(power, axis=0)}

    return stat


def arrival_time(
    grid,
    wavelength_limits=None,
    method="moment",
    oversampling=1,
    width=None,
    name="arrival_time",
):
    """
    Arrival time of the pulse, optionally within a wavelength band.

    ``method`` is "moment" for the power-weighted mean time or "peak"
    for the time of peak power.
    """
    if method not in ARRIVAL_METHODS:
        raise ConfigurationError(
            f"Invalid arrival time method: '{method}'. "
            f"Available methods are: {', '.join(ARRIVAL_METHODS)}",
            component="stats",
        )
    if oversampling < 1:
        raise ConfigurationError("oversampling must be at least 1", component="stats")
    window = None
    if wavelength_limits is not None:
        window = band_window(grid, wavelength_limits, width)

    def stat(field_w, z):
        if window is not None:
            field_w = field_w * _columns(window, field_w)
        t, power = power_envelope(grid, field_w, oversampling)
        if method == "moment":
            return {name: moment(t, power, 1)}
        return {name: t[np.argmax(power, axis=0)]}

    return stat


def wavelength_spectrum(grid, field_w, wavelength_range, resolution, nsamples=4):
    """
    Spectral power on a wavelength scale.

    Every output wavelength collects ``|E(w)|**2`` through a Gaussian
    window of FWHM ``resolution`` in wavelength, sampled ``nsamples``
    times per resolution.

    Returns
    -------
    wavelength, power : ndarray
        Output wavelengths and the spectral power on them, shaped
        ``(n_out,) + field_w.shape[1:]``.

    """
    if resolution <= 0 or wavelength_range[1] <= wavelength_range[0]:
        raise ConfigurationError(
            "need an increasing wavelength range and a positive resolution",
            component="stats",
        )
    n_out = int(np.ceil((wavelength_range[1] - wavelength_range[0]) / resolution * nsamples))
    wavelength = np.linspace(wavelength_range[0], wavelength_range[1], n_out)

    w_grid = grid.w_grid
    valid = w_grid > 0
    lam = 2 * np.pi * c_light / w_grid[valid]
    spec = np.abs(np.asarray(field_w)[valid]) ** 2
    sigma = 0.42 * resolution
    # beyond 6 sigma the window is below 1e-8
    reach = 6 * sigma

    power = np.zeros((n_out,) + spec.shape[1:])
    for idx, lam_0 in enumerate(wavelength):
        near = np.abs(lam - lam_0) < reach
        weights = np.exp(-0.5 * ((lam[near] - lam_0) / sigma) ** 2)
        power[idx] = np.tensordot(weights, spec[near], axes=(0, 0))
    return wavelength, power


STATS = {
    "energy": energy,
    "energy_band": energy_band,
    "central_frequency": central_frequency,
    "rms_spectral_width": rms_spectral_width,
    "peak_power": peak_power,
    "arrival_time": arrival_time,
}

# statistics that need nothing but the grid
DEFAULT_STATS = (
    "energy",
    "central_frequency",
    "rms_spectral_width",
    "peak_power",
    "arrival_time",
)


def default_stats(grid):
    """Statistics functor with every statistic that needs only the grid."""
    return collect_stats(grid, *(STATS[name](grid) for name in DEFAULT_STATS))
