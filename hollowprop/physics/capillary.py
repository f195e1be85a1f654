"""
Marcatili modes of a hollow dielectric capillary.

How this works
--------------

1. A mode is fixed by its family (HE, TE or TM), its azimuthal and radial
indices ``(n, m)``, the capillary radius and the core/cladding indices.
The family and the index model ("full" or "reduced") are looked up in
closed registries when the mode is built, so an invalid choice fails
right there and nothing branches on them during propagation.

2. The "full" model takes the complex square root of the dielectric
expression

    neff = sqrt(eps_co - (u_nm / (k a))**2 (1 - i v_n / (k a))**2)

while the "reduced" model keeps its leading terms for small loss,

    neff = 1 + (eps_co - 1) / 2 - c**2 u_nm**2 / (2 w**2 a**2)
             + i c**3 u_nm**2 v_n / (a**3 w**3)

where ``u_nm`` is a zero of a Bessel function of the first kind and
``v_n`` depends on the cladding permittivity and the mode family.

3. TE and TM modes only exist here as ``TE01`` and ``TM01``. HE modes take
any ``n >= 1`` and ``m >= 1``.

4. Radius and core index may depend on z (tapers, pressure gradients).
They are held as functions, and the mode itself never changes after
construction.
"""

import numpy as np
from scipy.constants import c as c_light
from scipy.special import jn_zeros, jv

from ..errors import ConfigurationError
from ..functions.maths import polar_quadrature
from ..functions.sellmeier import sellmeier_silica


class _ModeKind:
    """Mode family: Bessel zero, cladding factor and transverse field."""

    name = None

    def check_indices(self, n, m):
        raise NotImplementedError

    def unm(self, n, m):
        raise NotImplementedError

    def vn(self, eps_cl):
        raise NotImplementedError

    def field(self, r, theta, n, unm, radius, phi):
        raise NotImplementedError


class _HEKind(_ModeKind):
    name = "HE"

    def check_indices(self, n, m):
        if n < 1 or m < 1:
            raise ConfigurationError(
                f"HE modes need n >= 1 and m >= 1, got ({n}, {m})",
                component="MarcatiliMode",
            )

    def unm(self, n, m):
        return jn_zeros(n - 1, m)[m - 1]

    def vn(self, eps_cl):
        return (eps_cl + 1) / (2 * np.sqrt(eps_cl - 1 + 0j))

    def field(self, r, theta, n, unm, radius, phi):
        amp = jv(n - 1, r * unm / radius)
        ang = n * (theta + phi)
        ex = amp * (np.cos(theta) * np.sin(ang) - np.sin(theta) * np.cos(ang))
        ey = amp * (np.sin(theta) * np.sin(ang) + np.cos(theta) * np.cos(ang))
        return ex, ey


class _TEKind(_ModeKind):
    name = "TE"

    def check_indices(self, n, m):
        if (n, m) != (0, 1):
            raise ConfigurationError(
                f"TE modes need (n, m) = (0, 1), got ({n}, {m})",
                component="MarcatiliMode",
            )

    def unm(self, n, m):
        return jn_zeros(1, 1)[0]

    def vn(self, eps_cl):
        return 1 / np.sqrt(eps_cl - 1 + 0j)

    def field(self, r, theta, n, unm, radius, phi):
        amp = jv(1, r * unm / radius)
        return -amp * np.sin(theta), amp * np.cos(theta)


class _TMKind(_TEKind):
    name = "TM"

    def check_indices(self, n, m):
        if (n, m) != (0, 1):
            raise ConfigurationError(
                f"TM modes need (n, m) = (0, 1), got ({n}, {m})",
                component="MarcatiliMode",
            )

    def vn(self, eps_cl):
        return eps_cl / np.sqrt(eps_cl - 1 + 0j)

    def field(self, r, theta, n, unm, radius, phi):
        amp = jv(1, r * unm / radius)
        return amp * np.cos(theta), amp * np.sin(theta)


def _neff_full(eps_co, unm, vn, k_a):
    return np.sqrt(eps_co - (unm / k_a) ** 2 * (1 - 1j * vn / k_a) ** 2 + 0j)


def _neff_reduced(eps_co, unm, vn, k_a):
    return 1 + (eps_co - 1) / 2 - unm**2 / (2 * k_a**2) + 1j * unm**2 * vn / k_a**3


MODE_KINDS = {"he": _HEKind(), "te": _TEKind(), "tm": _TMKind()}
INDEX_MODELS = {"full": _neff_full, "reduced": _neff_reduced}


def _as_function(value, nargs):
    if callable(value):
        return value
    if nargs == 1:
        return lambda omega: value
    return lambda omega, z: value


class MarcatiliMode:
    """
    Hollow capillary mode in the Marcatili approximation.

    Parameters
    ----------
    radius : float or callable
        Core radius in meters, or a function of z.
    core_index : float or callable
        Core refractive index, or a function ``f(omega, z)``.
    clad_index : float or callable
        Cladding refractive index, or a function ``f(omega)``.
    n, m : int, default: 1
        Azimuthal and radial mode indices.
    kind : str, default: "HE"
        Mode family, "HE" | "TE" | "TM".
    phi : float, default: 0.0
        Azimuthal rotation of the mode pattern.
    model : str, default: "full"
        Index model, "full" | "reduced".
    loss : bool, default: True
        Whether the mode keeps its propagation loss.
    z_dependent : bool, optional
        Force the mode to be treated as z-dependent. Defaults to
        whether ``radius`` is callable.

    """

    def __init__(
        self,
        radius,
        core_index,
        clad_index,
        n=1,
        m=1,
        kind="HE",
        phi=0.0,
        model="full",
        loss=True,
        z_dependent=None,
    ):
        kind_key = str(kind).lower()
        model_key = str(model).lower()
        if kind_key not in MODE_KINDS:
            raise ConfigurationError(
                f"Invalid mode kind: '{kind}'. "
                f"Available kinds are: {', '.join(k.upper() for k in MODE_KINDS)}",
                component="MarcatiliMode",
            )
        if model_key not in INDEX_MODELS:
            raise ConfigurationError(
                f"Invalid index model: '{model}'. "
                f"Available models are: {', '.join(INDEX_MODELS)}",
                component="MarcatiliMode",
            )
        self._kind = MODE_KINDS[kind_key]
        self._kind.check_indices(n, m)
        self._neff_model = INDEX_MODELS[model_key]

        self.kind = self._kind.name
        self.model = model_key
        self.n = n
        self.m = m
        self.phi = phi
        self.loss = loss
        self.unm = self._kind.unm(n, m)

        self._radius = radius
        self._core = _as_function(core_index, 2)
        self._clad = _as_function(clad_index, 1)
        self.z_dependent = callable(radius) if z_dependent is None else z_dependent
        self._aeff_cache = None

        if not self.z_dependent and self.radius(0.0) <= 0:
            raise ConfigurationError("radius must be positive", component="MarcatiliMode")

    @classmethod
    def from_gas(cls, radius, fill, clad="silica", **kwargs):
        """
        Mode of a capillary filled with a `GasFill`.

        ``clad`` is either "silica" or a constant cladding index.
        """
        if isinstance(clad, str):
            if clad.lower() != "silica":
                raise ConfigurationError(
                    f"Invalid cladding: '{clad}'. Available claddings are: silica",
                    component="MarcatiliMode",
                )
            clad_index = lambda omega: sellmeier_silica(omega)[0]  # noqa: E731
        else:
            clad_index = clad
        kwargs.setdefault("z_dependent", callable(radius) or fill.z_dependent)
        return cls(radius, fill.ref_index, clad_index, **kwargs)

    def __repr__(self):
        return (
            f"MarcatiliMode({self.kind}{self.n}{self.m}, model={self.model!r}, "
            f"loss={self.loss})"
        )

    def radius(self, z=0.0):
        if callable(self._radius):
            return self._radius(z)
        return self._radius

    def neff(self, omega, z=0.0):
        """Complex effective index at angular frequency ``omega``."""
        omega = np.asarray(omega, dtype=np.float64)
        eps_co = self._core(omega, z) ** 2
        eps_cl = self._clad(omega) ** 2
        vn = self._kind.vn(eps_cl)
        k_a = omega / c_light * self.radius(z)
        neff = self._neff_model(eps_co, self.unm, vn, k_a)
        if not self.loss:
            return neff.real + 0j
        return neff

    def beta(self, omega, z=0.0):
        """Real propagation constant."""
        return np.real(self.neff(omega, z)) * omega / c_light

    def alpha(self, omega, z=0.0):
        """Power attenuation constant."""
        return 2 * np.imag(self.neff(omega, z)) * omega / c_light

    def field(self, r, theta, z=0.0):
        """Transverse field components ``(Ex, Ey)`` at polar coordinates."""
        return self._kind.field(r, theta, self.n, self.unm, self.radius(z), self.phi)

    def aeff(self, z=0.0, nr=64, ntheta=32):
        """Effective area ``(int |E|**2 dA)**2 / int |E|**4 dA``."""
        if not self.z_dependent and self._aeff_cache is not None:
            return self._aeff_cache
        r, theta, weights = polar_quadrature(self.radius(z), nr, ntheta)
        ex, ey = self.field(r, theta, z)
        inten = np.abs(ex) ** 2 + np.abs(ey) ** 2
        value = np.sum(weights * inten) ** 2 / np.sum(weights * inten**2)
        if not self.z_dependent:
            self._aeff_cache = value
        return value
