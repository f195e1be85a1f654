"""
Time and frequency grids for real-field and envelope propagation.

How this works
--------------

1. Every grid holds a coarse pair of axes (``t_grid``, ``w_grid``) on
which the field spectrum is propagated, and a fine pair (``to_grid``,
``wo_grid``) on which the nonlinear products are evaluated. The fine time
axis spans the same window with an integer power-of-two more samples, so
going from coarse to fine is plain spectral zero-padding.

2. `RealGrid` samples the real electric field. The fine time step is small
enough to resolve the third harmonic of the highest frequency in the
pass-band. The coarse frequency axis is then cropped from the fine one at
the first sample above ``w_max + 3 w_min`` (rounded up to ``2**k + 1``
samples), so the coarse time axis has ``2 (n_w - 1)`` samples.

3. `EnvGrid` samples a complex envelope around the reference frequency
``w_0``. The spectrum is stored in FFT order with absolute angular
frequencies, and the time step is chosen so that the pass-band plus its
taper fits in the spectral window. With third-harmonic generation the
upper edge of the pass-band is tripled.

4. Four Planck-taper windows are built, one per axis. They are exactly 1
inside the pass-band (frequency) or the requested time range (time), and
exactly 0 at the outermost samples of each axis.

All arrays are read-only once the grid is built.
"""

import numpy as np
from scipy.constants import c as c_light

from ..errors import ConfigurationError
from ..functions.maths import planck_taper
from ..log import get_logger

logger = get_logger(__name__)


def _freeze(*arrays):
    for array in arrays:
        array.flags.writeable = False


class Grid:
    """Common grid parameters and validation."""

    representation = None

    def __init__(self, z_max, ref_wavelength, wavelength_limits, time_range, dt=1.0):
        self.z_max = float(z_max)
        self.ref_wavelength = float(ref_wavelength)
        self.wavelength_limits = tuple(float(lam) for lam in wavelength_limits)
        self.time_range = float(time_range)
        self.dt = float(dt)

        self._check_parameters()

        self.w_0 = 2 * np.pi * c_light / self.ref_wavelength
        self.w_min = 2 * np.pi * c_light / max(self.wavelength_limits)
        self.w_max = 2 * np.pi * c_light / min(self.wavelength_limits)

    def _check_parameters(self):
        checks = [
            (self.z_max <= 0, "z_max must be positive"),
            (self.ref_wavelength <= 0, "ref_wavelength must be positive"),
            (len(self.wavelength_limits) != 2, "wavelength_limits must be a pair"),
            (
                any(lam <= 0 for lam in self.wavelength_limits),
                "wavelength_limits must be positive",
            ),
            (
                len(set(self.wavelength_limits)) != 2,
                "wavelength_limits must be two different values",
            ),
            (self.time_range <= 0, "time_range must be positive"),
            (self.dt <= 0, "dt must be positive"),
        ]
        for condition, message in checks:
            if condition:
                raise ConfigurationError(message, component=type(self).__name__)

    def _init_windows(self, w_left0, w_right0):
        """Set the four taper windows and the pass-band sample mask."""
        half_range = 0.5 * self.time_range
        self.w_window = planck_taper(
            self.w_grid, w_left0, self.w_min, self.w_band_max, w_right0
        )
        self.wo_window = planck_taper(
            self.wo_grid, w_left0, self.w_min, self.w_band_max, w_right0
        )
        self.t_window = planck_taper(
            self.t_grid,
            self.t_grid.min(),
            -half_range,
            half_range,
            self.t_grid.max(),
        )
        self.to_window = planck_taper(
            self.to_grid,
            self.to_grid.min(),
            -half_range,
            half_range,
            self.to_grid.max(),
        )
        self.sidx = self.w_window > 0

    def _finalize(self):
        self.t_nodes = self.t_grid.size
        self.w_nodes = self.w_grid.size
        self.to_nodes = self.to_grid.size
        self.wo_nodes = self.wo_grid.size
        self.oversampling = self.to_nodes // self.t_nodes
        _freeze(
            self.t_grid,
            self.w_grid,
            self.to_grid,
            self.wo_grid,
            self.t_window,
            self.w_window,
            self.to_window,
            self.wo_window,
            self.sidx,
        )
        logger.info(
            "%s: %d time samples (%d oversampled), %d frequency samples, "
            "dt = %.3e s",
            type(self).__name__,
            self.t_nodes,
            self.to_nodes,
            self.w_nodes,
            self.t_res,
        )


class RealGrid(Grid):
    """
    Grid for propagation of the real electric field.

    The following variables must be given in SI units,
    i.e., meters and seconds.

    Parameters
    ----------
    z_max : float
        Propagation distance.
    ref_wavelength : float
        Reference wavelength, sets ``w_0`` for the moving frame.
    wavelength_limits : (float, float)
        Pass-band of the simulation.
    time_range : float
        Width of the time window.
    dt : float, default: 1.0
        Upper bound for the fine time step.

    """

    representation = "real"

    def __init__(self, z_max, ref_wavelength, wavelength_limits, time_range, dt=1.0):
        super().__init__(z_max, ref_wavelength, wavelength_limits, time_range, dt)
        self.w_band_max = self.w_max
        self._init_grid_resolution()
        self._init_grid_arrays()
        self._init_windows(0.0, self.w_crop)
        self._finalize()

    def _init_grid_resolution(self):
        """Set fine and coarse sampling."""
        f_max = self.w_max / (2 * np.pi)
        self.to_res = min(1 / (6 * f_max), self.dt)
        self.to_nodes = int(2 ** np.ceil(np.log2(self.time_range / self.to_res)))
        self.w_crop = self.w_max + 3 * self.w_min

    def _init_grid_arrays(self):
        """Set 1D grid arrays."""
        n_to = self.to_nodes
        self.to_grid = (np.arange(n_to) - n_to / 2) * self.to_res
        self.wo_grid = 2 * np.pi * np.arange(n_to // 2 + 1) / (n_to * self.to_res)

        above = np.nonzero(self.wo_grid > self.w_crop)[0]
        if above.size == 0:
            raise ConfigurationError(
                "fine grid does not reach w_max + 3 w_min, "
                "widen the wavelength limits",
                component="RealGrid",
            )
        crop_idx = int(2 ** np.ceil(np.log2(above[0] + 1))) + 1
        if crop_idx > self.wo_grid.size:
            raise ConfigurationError(
                "time_range too short for the requested wavelength limits",
                component="RealGrid",
            )

        self.w_grid = self.wo_grid[:crop_idx].copy()
        self.t_res = np.pi / self.w_grid.max()
        n_t = 2 * (crop_idx - 1)
        self.t_grid = (np.arange(n_t) - n_t / 2) * self.t_res

        ratio = n_t / n_to
        if not (
            np.isclose(self.to_res / self.t_res, ratio)
            and np.isclose(self.w_grid.max() / self.wo_grid.max(), ratio)
        ):
            raise ConfigurationError(
                "inconsistent coarse/fine sampling", component="RealGrid"
            )


class EnvGrid(Grid):
    """
    Grid for propagation of the complex envelope around ``w_0``.

    Parameters are those of `RealGrid`, plus

    thg : bool, default: False
        Extend the pass-band up to the third harmonic.

    """

    representation = "env"

    def __init__(
        self, z_max, ref_wavelength, wavelength_limits, time_range, dt=1.0, thg=False
    ):
        super().__init__(z_max, ref_wavelength, wavelength_limits, time_range, dt)
        self.thg = bool(thg)
        self.w_band_max = 3 * self.w_max if self.thg else self.w_max
        self._init_grid_resolution()
        self._init_grid_arrays()
        self._init_windows(self.w_left0, self.w_right0)
        self._finalize()

    def _init_grid_resolution(self):
        """Set the spectral window, time step and oversampling."""
        taper = min(0.2 * (self.w_band_max - self.w_min), 0.5 * self.w_min)
        self.w_left0 = self.w_min - taper
        self.w_right0 = self.w_band_max + taper
        half_span = 1.1 * max(self.w_right0 - self.w_0, self.w_0 - self.w_left0)

        self.t_res = np.pi / half_span
        self.t_nodes = int(2 ** np.ceil(np.log2(self.time_range / self.t_res)))
        over = 4
        if self.dt < self.t_res:
            over = max(over, int(2 ** np.ceil(np.log2(self.t_res / self.dt))))
        self.to_res = self.t_res / over
        self.to_nodes = self.t_nodes * over

    def _init_grid_arrays(self):
        """Set 1D grid arrays, frequencies in FFT order."""
        n_t, n_to = self.t_nodes, self.to_nodes
        self.t_grid = (np.arange(n_t) - n_t / 2) * self.t_res
        self.to_grid = (np.arange(n_to) - n_to / 2) * self.to_res
        self.w_grid = self.w_0 + 2 * np.pi * np.fft.fftfreq(n_t, self.t_res)
        self.wo_grid = self.w_0 + 2 * np.pi * np.fft.fftfreq(n_to, self.to_res)
