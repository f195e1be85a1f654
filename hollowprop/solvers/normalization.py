"""
Normalization of the nonlinear polarization into the propagation equation.

How this works
--------------

1. The propagated variable is scaled so that ``|E|**2`` is power in
watts. The physical field is ``E / s`` with ``s = sqrt(k eps_0 c n0 A)``,
where ``k`` is 1 for real fields and 1/2 for envelopes, and ``A`` is the
effective area (mode-averaged) or the unit area of a power-normalized mode
profile (modal).

2. The nonlinear polarization spectrum enters the propagation equation as

    dE/dz = -i w s / (2 n0 c eps_0) P(w)

so that both normalizations leave a zero polarization at zero.

3. `NormModal` also maps the modal amplitudes to the field at a set of
quadrature points of the core cross-section, and projects the
polarization at those points back onto the mode profiles. Both maps are
linear and independent of time, so they are applied in the time domain,
before the transform to frequency.
"""

import numpy as np
from scipy.constants import c as c_light
from scipy.constants import epsilon_0 as eps_0

from ..errors import ConfigurationError
from ..functions.maths import polar_quadrature

POLARISATIONS = ("x", "y")


def _kappa(grid):
    return 1.0 if grid.representation == "real" else 0.5


class NormModeAverage:
    """
    Single-mode normalization with a possibly z-dependent effective area.

    Parameters
    ----------
    grid : RealGrid or EnvGrid
        Grid with the frequency axis.
    aeff : float or callable
        Effective area in m**2, or a function of z.
    n0 : float
        Refractive index at the reference frequency.

    """

    def __init__(self, grid, aeff, n0):
        if not callable(aeff) and aeff <= 0:
            raise ConfigurationError("aeff must be positive", component="NormModeAverage")
        self.grid = grid
        self.aeff = aeff
        self.n0 = n0
        self.kappa = _kappa(grid)
        self._factor = -1j * grid.w_grid / (2 * n0 * c_light * eps_0)

    def area(self, z):
        if callable(self.aeff):
            return self.aeff(z)
        return self.aeff

    def field_scale(self, z):
        """Ratio between the propagated variable and the field in V/m."""
        return np.sqrt(self.kappa * eps_0 * c_light * self.n0 * self.area(z))

    def apply(self, pol_w, z, out=None):
        """Scale a polarization spectrum into the right-hand side."""
        if out is None:
            out = np.empty_like(pol_w, dtype=np.complex128)
        np.multiply(pol_w, self._factor * self.field_scale(z), out=out)
        return out


class NormModal:
    """
    Multi-mode normalization through overlap integrals with the modes.

    Parameters
    ----------
    grid : RealGrid or EnvGrid
        Grid with the frequency axis.
    modes : sequence of modes
        Objects exposing ``field(r, theta, z)``, ``radius(z)`` and
        ``z_dependent``, all with the same core radius.
    polarisation : str, default: "y"
        Field component taking part in the nonlinear interaction.
    n0 : float, default: 1.0
        Refractive index at the reference frequency.
    nr, ntheta : int, default: 16
        Radial and azimuthal quadrature orders.

    """

    def __init__(self, grid, modes, polarisation="y", n0=1.0, nr=16, ntheta=16):
        self.modes = tuple(modes)
        if not self.modes:
            raise ConfigurationError("empty mode set", component="NormModal")
        polarisation = polarisation.lower()
        if polarisation not in POLARISATIONS:
            raise ConfigurationError(
                f"Invalid polarisation: '{polarisation}'. "
                f"Available components are: {', '.join(POLARISATIONS)}",
                component="NormModal",
            )
        radii = [mode.radius(0.0) for mode in self.modes]
        if not np.allclose(radii, radii[0]):
            raise ConfigurationError(
                "all modes must share the same core radius", component="NormModal"
            )

        self.grid = grid
        self.polarisation = polarisation
        self.n0 = n0
        self.nr = nr
        self.ntheta = ntheta
        self.n_points = nr * ntheta
        self.kappa = _kappa(grid)
        self.z_dependent = any(mode.z_dependent for mode in self.modes)

        self.field_scale = np.sqrt(self.kappa * eps_0 * c_light * n0)
        self._factor = (
            -1j * grid.w_grid / (2 * n0 * c_light * eps_0) * self.field_scale
        )[:, np.newaxis]
        self._profiles = None

    def profiles(self, z):
        """
        Mode profiles at the quadrature points.

        Returns
        -------
        weights : (n_points,) ndarray
            Quadrature weights.
        prof : (n_points, n_modes) ndarray
            Chosen field component of each mode, normalized to unit power.

        """
        if self._profiles is not None and not self.z_dependent:
            return self._profiles
        r, theta, weights = polar_quadrature(self.modes[0].radius(z), self.nr, self.ntheta)
        prof = np.empty((self.n_points, len(self.modes)))
        for idx, mode in enumerate(self.modes):
            ex, ey = mode.field(r, theta, z)
            norm = np.sqrt(np.sum(weights * (np.abs(ex) ** 2 + np.abs(ey) ** 2)))
            prof[:, idx] = np.real(ex if self.polarisation == "x" else ey) / norm
        self._profiles = (weights, prof)
        return self._profiles

    def to_points(self, field_t, z, out=None):
        """Field in V/m at the quadrature points from modal amplitudes."""
        _, prof = self.profiles(z)
        if out is None:
            return field_t @ prof.T / self.field_scale
        np.matmul(field_t, prof.T, out=out)
        out /= self.field_scale
        return out

    def project(self, pol_t, z, out=None):
        """Overlap integral of the polarization with every mode profile."""
        weights, prof = self.profiles(z)
        weighted = weights[:, np.newaxis] * prof
        if out is None:
            return pol_t @ weighted
        np.matmul(pol_t, weighted, out=out)
        return out

    def apply(self, pol_w, z, out=None):
        """Scale the projected polarization spectrum into the right-hand side."""
        if out is None:
            out = np.empty_like(pol_w, dtype=np.complex128)
        np.multiply(pol_w, self._factor, out=out)
        return out
