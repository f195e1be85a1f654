"""
Nonlinear polarization responses and their aggregator.

How this works
--------------

1. Every response is a callable ``resp(out, field_t)`` that adds its
polarization per molecule to ``out``, in the oversampled time grid. The
field is the real electric field for real-field grids and the complex
envelope for envelope grids, and each response declares which of the two
it accepts.

2. Responses that need scratch space get it once, through
``allocate(shape)``, when the aggregator is built. The buffers belong to
that response only and are reused at every evaluation.

3. The plasma response rebuilds its ionization history at each call,
starting from a neutral gas at the first sample of the time window:

    fraction = 1 - exp(-int W dt)
    J = int (e**2 / m_e) fraction E dt + Ip W (1 - fraction) / E
    P = int J dt

The loss current term is zero wherever the field vanishes.

4. `ResponseAggregator` zeroes its output, lets every response add to it
and multiplies the sum by the gas number density at z. Responses are
independent polarization sources and no cross terms are formed.
"""

import numpy as np
from scipy.constants import e as e_charge
from scipy.constants import epsilon_0 as eps_0
from scipy.constants import m_e

from ..errors import ConfigurationError
from ..functions.maths import cumtrapz


class Response:
    """Base class of the polarization responses."""

    representation = None

    def allocate(self, shape):
        """Allocate scratch buffers for fields of the given shape."""

    def __call__(self, out, field_t):
        raise NotImplementedError


class KerrField(Response):
    """Instantaneous Kerr response of the real field, ``eps_0 gamma3 E**3``."""

    representation = "real"

    def __init__(self, gamma3):
        self.gamma3 = gamma3

    def __call__(self, out, field_t):
        out += eps_0 * self.gamma3 * field_t**3


class KerrEnv(Response):
    """Kerr response of the envelope without third-harmonic generation."""

    representation = "env"

    def __init__(self, gamma3):
        self.gamma3 = gamma3

    def __call__(self, out, field_t):
        out += 0.75 * eps_0 * self.gamma3 * np.abs(field_t) ** 2 * field_t


class KerrEnvTHG(Response):
    """Kerr response of the envelope including third-harmonic generation."""

    representation = "env"

    def __init__(self, gamma3, w_0, t_grid):
        self.gamma3 = gamma3
        self.w_0 = w_0
        self.t_grid = np.asarray(t_grid)
        self._phase = np.exp(2j * w_0 * self.t_grid)

    def allocate(self, shape):
        self._phase = np.exp(2j * self.w_0 * self.t_grid).reshape(
            (-1,) + (1,) * (len(shape) - 1)
        )

    def __call__(self, out, field_t):
        out += (
            eps_0
            * self.gamma3
            * (
                0.75 * np.abs(field_t) ** 2 * field_t
                + 0.25 * field_t**3 * self._phase
            )
        )


class PlasmaCumtrapz(Response):
    """
    Plasma response driven by field ionization of the gas.

    Parameters
    ----------
    t_grid : (N,) array_like
        Oversampled time grid.
    ratefunc : callable
        Rate model called as ``ratefunc(field, out)``, in 1/s.
    ion_pot : float
        Ionization potential in J.

    """

    representation = "real"

    def __init__(self, t_grid, ratefunc, ion_pot):
        self.t_grid = np.asarray(t_grid)
        self.dt = self.t_grid[1] - self.t_grid[0]
        self.ratefunc = ratefunc
        self.ion_pot = ion_pot
        self.allocate(self.t_grid.shape)

    def allocate(self, shape):
        self.rate = np.zeros(shape)
        self.fraction = np.zeros(shape)
        self.current = np.zeros(shape)
        self._tmp = np.zeros(shape)

    def ionization_fraction(self, field_t):
        """Fill ``rate`` and ``fraction`` for the given field."""
        self.ratefunc(field_t, out=self.rate)
        cumtrapz(self.rate, self.dt, out=self.fraction)
        np.negative(self.fraction, out=self.fraction)
        np.expm1(self.fraction, out=self.fraction)
        np.negative(self.fraction, out=self.fraction)
        return self.fraction

    def __call__(self, out, field_t):
        frac = self.ionization_fraction(field_t)
        tmp = self._tmp

        np.multiply(frac, field_t, out=tmp)
        tmp *= e_charge**2 / m_e
        cumtrapz(tmp, self.dt, out=self.current)

        np.subtract(1.0, frac, out=tmp)
        tmp *= self.rate
        tmp *= self.ion_pot
        nonzero = field_t != 0
        np.divide(tmp, field_t, out=tmp, where=nonzero)
        tmp[~nonzero] = 0.0
        self.current += tmp

        cumtrapz(self.current, self.dt, out=tmp)
        out += tmp


class ResponseAggregator:
    """
    Sum of the nonlinear responses, scaled by the gas density.

    Parameters
    ----------
    responses : sequence of Response
        Responses, fixed for the lifetime of the aggregator.
    density : float or callable
        Number density in 1/m**3, or a function of z.
    grid : RealGrid or EnvGrid
        Grid the responses are evaluated on.
    shape : tuple of int, optional
        Shape of the time-domain fields, defaults to the oversampled
        time grid of a single mode.

    """

    def __init__(self, responses, density, grid, shape=None):
        self.responses = tuple(responses)
        self.density = density
        self.shape = shape if shape is not None else (grid.to_nodes,)
        self.dtype = np.float64 if grid.representation == "real" else np.complex128

        for resp in self.responses:
            if resp.representation not in (None, grid.representation):
                raise ConfigurationError(
                    f"{type(resp).__name__} needs a '{resp.representation}' grid, "
                    f"got a '{grid.representation}' grid",
                    component="ResponseAggregator",
                )
            resp.allocate(self.shape)

        self._pol = np.zeros(self.shape, dtype=self.dtype)

    def density_at(self, z):
        if callable(self.density):
            return self.density(z)
        return self.density

    def evaluate(self, field_t, z, out=None):
        """
        Total polarization in the time domain.

        Parameters
        ----------
        field_t : ndarray
            Field in the oversampled time grid.
        z : float
            Propagation position.
        out : ndarray, optional
            Output buffer, defaults to the aggregator's own buffer.

        """
        if out is None:
            out = self._pol
        out.fill(0)
        for resp in self.responses:
            resp(out, field_t)
        out *= self.density_at(z)
        return out
