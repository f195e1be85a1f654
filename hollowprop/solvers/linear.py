"""
Linear propagation operator in the frame moving with the pulse.

How this works
--------------

1. For each mode and each frequency sample inside the pass-band the
operator is

    L = -i (beta - beta_0 - beta_1 (w - w_0)) - alpha / 2

with ``beta = w Re(neff) / c`` and ``alpha = 2 w Im(neff) / c``. Outside
the pass-band it is zero.

2. ``beta_1`` is the inverse group velocity of the first mode at the
reference frequency, so the time window moves with the pulse. ``beta_0``
is only removed for envelope grids without third-harmonic generation,
where the absolute phase of the envelope does not enter the nonlinear
terms.

3. Modes are independent columns, there is no linear coupling between
them. A single mode gives a vector, a sequence of modes a matrix with one
column per mode.

4. If no mode depends on z the operator is built once and cached.
"""

import numpy as np
from scipy.constants import c as c_light

from ..errors import ConfigurationError
from ..functions.maths import derivative


def _mode_tuple(modes):
    if isinstance(modes, (list, tuple)):
        return tuple(modes), True
    return (modes,), False


class LinearOperatorBuilder:
    """
    Builder of the per-mode linear operator.

    Parameters
    ----------
    grid : RealGrid or EnvGrid
        Grid with the frequency axis and pass-band mask.
    modes : mode or sequence of modes
        Objects exposing ``neff(omega, z)`` and ``z_dependent``.
    ref_wavelength : float, optional
        Wavelength of the moving frame, defaults to the grid reference.
    reference_phase : bool, optional
        Whether to remove ``beta_0``, defaults to ``True`` only for
        envelope grids without third-harmonic generation.

    """

    def __init__(self, grid, modes, ref_wavelength=None, reference_phase=None):
        self.modes, self.modal = _mode_tuple(modes)
        if not self.modes:
            raise ConfigurationError("empty mode set", component="LinearOperatorBuilder")
        radii = [mode.radius(0.0) for mode in self.modes if hasattr(mode, "radius")]
        if radii and not np.allclose(radii, radii[0]):
            raise ConfigurationError(
                "all modes must share the same core radius",
                component="LinearOperatorBuilder",
            )

        self.grid = grid
        if ref_wavelength is None:
            self.w_0 = grid.w_0
        else:
            self.w_0 = 2 * np.pi * c_light / ref_wavelength
        if reference_phase is None:
            reference_phase = grid.representation == "env" and not getattr(
                grid, "thg", False
            )
        self.reference_phase = bool(reference_phase)
        self.z_dependent = any(mode.z_dependent for mode in self.modes)

        self._w = grid.w_grid[grid.sidx]
        self._cache = None

    @property
    def shape(self):
        if self.modal:
            return (self.grid.w_nodes, len(self.modes))
        return (self.grid.w_nodes,)

    def beta_1(self, z=0.0):
        """Inverse group velocity of the first mode at the reference frequency."""
        mode = self.modes[0]
        return derivative(
            lambda w: np.real(mode.neff(w, z)) * w / c_light, self.w_0
        )

    def build(self, z=0.0):
        """
        Linear operator at position z.

        Returns
        -------
        out : (n_w,) or (n_w, n_modes) ndarray
            Complex operator, zero outside the pass-band.

        """
        if self._cache is not None:
            return self._cache

        w = self._w
        first = self.modes[0]
        beta_1 = self.beta_1(z)
        beta_0 = 0.0
        if self.reference_phase:
            beta_0 = np.real(first.neff(self.w_0, z)) * self.w_0 / c_light

        out = np.zeros((self.grid.w_nodes, len(self.modes)), dtype=np.complex128)
        for idx, mode in enumerate(self.modes):
            neff = mode.neff(w, z)
            beta = np.real(neff) * w / c_light
            alpha = 2 * np.imag(neff) * w / c_light
            out[self.grid.sidx, idx] = (
                -1j * (beta - beta_0 - beta_1 * (w - self.w_0)) - 0.5 * alpha
            )

        if not self.modal:
            out = out[:, 0]
        if not self.z_dependent:
            self._cache = out
        return out

    def __call__(self, z=0.0):
        return self.build(z)
