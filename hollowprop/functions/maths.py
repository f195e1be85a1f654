"""
Numerical helpers shared by the grid, the responses and the statistics.

How this works
--------------

1. `planck_taper` builds the smooth 0 -> 1 -> 0 apodization windows used
on every time and frequency axis. Outside the outer limits the window is
exactly 0 and inside the inner limits it is exactly 1, so the outermost
axis samples are zeroed to machine precision.

2. `cumtrapz` is the forward cumulative trapezoidal integral along the
first axis. It is compiled with Numba because it runs several times per
nonlinear evaluation for the plasma response. The running sum is kept in
a local accumulator, so the output array may alias the input.

3. `derivative` evaluates first or second derivatives of scalar functions
with five-point central differences, which is what the linear operator
needs for the group velocity at the reference frequency.

4. `polar_quadrature` returns Gauss-Legendre radial nodes combined with a
uniform azimuthal rule, used for the modal overlap integrals over the
capillary core.
"""

import numpy as np
from numba import njit
from scipy.special import expit


def planck_taper(x, left0, left1, right1, right0):
    """
    Planck-taper window.

    Parameters
    ----------
    x : array_like
        Axis values (any order).
    left0, left1 : float
        Start and end of the rising edge.
    right1, right0 : float
        Start and end of the falling edge.

    Returns
    -------
    win : ndarray
        Window values in [0, 1].

    """
    x = np.asarray(x, dtype=np.float64)
    win = np.zeros_like(x)

    rise = (x > left0) & (x < left1)
    flat = (x >= left1) & (x <= right1)
    fall = (x > right1) & (x < right0)

    xr = x[rise]
    d_rise = left1 - left0
    z_rise = d_rise / (xr - left0) + d_rise / (xr - left1)
    win[rise] = expit(-z_rise)

    win[flat] = 1.0

    xf = x[fall]
    d_fall = right1 - right0
    z_fall = d_fall / (xf - right0) + d_fall / (xf - right1)
    win[fall] = expit(-z_fall)

    return win


@njit
def _cumtrapz_kernel(y_a, dx_a, out_a):
    """
    Cumulative trapezoidal integral along the first axis.

    Parameters
    ----------
    y_a : (N, M) array_like
        Samples to integrate.
    dx_a : float
        Uniform sample spacing.
    out_a : (N, M) array_like
        Pre-allocated output, may be ``y_a`` itself.

    """
    n_x, n_c = y_a.shape
    half_dx = 0.5 * dx_a
    for jj in range(n_c):
        prev = y_a[0, jj]
        acc = prev * 0.0
        out_a[0, jj] = acc
        for ii in range(1, n_x):
            curr = y_a[ii, jj]
            acc += half_dx * (prev + curr)
            out_a[ii, jj] = acc
            prev = curr


def cumtrapz(y, dx, out=None):
    """
    Forward cumulative trapezoidal integral, starting from zero.

    Parameters
    ----------
    y : (N,) or (N, M) array_like
        Samples to integrate along the first axis.
    dx : float
        Uniform sample spacing.
    out : ndarray, optional
        Output buffer with the shape and dtype of ``y``.

    Returns
    -------
    out : ndarray
        ``out[0] = 0`` and ``out[i] = out[i-1] + dx (y[i-1] + y[i]) / 2``.

    """
    y = np.asarray(y)
    if out is None:
        out = np.empty_like(y)
    if y.ndim == 1:
        _cumtrapz_kernel(y[:, np.newaxis], float(dx), out[:, np.newaxis])
    elif y.ndim == 2:
        _cumtrapz_kernel(y, float(dx), out)
    else:
        raise ValueError(f"cumtrapz supports 1D or 2D arrays, got {y.ndim}D")
    return out


def gauss(x, fwhm, x0=0.0, power=2):
    """Super-Gaussian with the given full width at half maximum."""
    sigma = fwhm / (2 * (2 * np.log(2)) ** (1 / power))
    return np.exp(-0.5 * np.abs((x - x0) / sigma) ** power)


def moment(x, y, order=1):
    """Moment of ``x`` weighted by ``y`` along the first axis."""
    x = np.asarray(x)
    y = np.asarray(y)
    if y.ndim > 1:
        x = x.reshape((-1,) + (1,) * (y.ndim - 1))
    return np.sum(x**order * y, axis=0) / np.sum(y, axis=0)


def rms_width(x, y):
    """Root-mean-square width of ``y`` on the axis ``x``."""
    mean = moment(x, y, 1)
    return np.sqrt(np.maximum(moment(x, y, 2) - mean**2, 0.0))


def derivative(func, x, order=1, rel_step=1e-4):
    """
    Five-point central-difference derivative of a scalar function.

    Parameters
    ----------
    func : callable
        Function of one real variable.
    x : float
        Evaluation point.
    order : int, default: 1
        Derivative order, 1 or 2.
    rel_step : float, default: 1e-4
        Step relative to ``|x|`` (absolute when ``x`` is 0).

    """
    h = rel_step * abs(x) if x != 0 else rel_step
    f_m2, f_m1 = func(x - 2 * h), func(x - h)
    f_p1, f_p2 = func(x + h), func(x + 2 * h)
    if order == 1:
        return (f_m2 - 8 * f_m1 + 8 * f_p1 - f_p2) / (12 * h)
    if order == 2:
        f_0 = func(x)
        return (-f_m2 + 16 * f_m1 - 30 * f_0 + 16 * f_p1 - f_p2) / (12 * h**2)
    raise ValueError(f"Invalid derivative order: '{order}'. Available: 1, 2")


def polar_quadrature(radius, nr=32, ntheta=32):
    """
    Quadrature nodes and weights over a disc of the given radius.

    Returns
    -------
    r, theta, weights : (nr * ntheta,) ndarray
        Node coordinates and weights such that
        ``sum(weights * f(r, theta))`` approximates the area integral.

    """
    xg, wg = np.polynomial.legendre.leggauss(nr)
    r_nodes = 0.5 * radius * (xg + 1)
    r_weights = 0.5 * radius * wg * r_nodes
    theta_nodes = np.arange(ntheta) * 2 * np.pi / ntheta
    theta_weight = 2 * np.pi / ntheta

    r_2d, theta_2d = np.meshgrid(r_nodes, theta_nodes, indexing="ij")
    w_2d = np.repeat(r_weights[:, np.newaxis], ntheta, axis=1) * theta_weight
    return r_2d.ravel(), theta_2d.ravel(), w_2d.ravel()
