"""Helpers assembling the initial field, linear operator and nonlinear term."""

import numpy as np

from ..errors import ConfigurationError
from ..physics.nonlinear import ResponseAggregator
from .linear import LinearOperatorBuilder
from .normalization import NormModal, NormModeAverage
from .transforms import TransModal, TransModeAvg


def _initial_field(grid, inputs):
    if callable(inputs):
        field_w = inputs(grid)
    else:
        field_w = np.asarray(inputs, dtype=np.complex128)
    if field_w.shape != (grid.w_nodes,):
        raise ConfigurationError(
            f"initial spectrum has shape {field_w.shape}, "
            f"expected ({grid.w_nodes},)",
            component="setup",
        )
    return field_w


def setup_mode_average(
    grid, plan, mode, responses, density, inputs, aeff=None, n0=None, ref_wavelength=None
):
    """
    Build a single-mode propagation.

    Parameters
    ----------
    grid : RealGrid or EnvGrid
        Simulation grid.
    plan : FFTPlan
        Transform plan for ``grid``.
    mode : MarcatiliMode
        Propagating mode.
    responses : sequence of Response
        Nonlinear responses.
    density : float or callable
        Gas number density, or a function of z.
    inputs : callable or array_like
        Initial spectrum, or a pulse called as ``inputs(grid)``.
    aeff : float or callable, optional
        Effective area, defaults to that of ``mode``.
    n0 : float, optional
        Index at the reference frequency, defaults to that of ``mode``.
    ref_wavelength : float, optional
        Wavelength of the moving frame.

    Returns
    -------
    field_w, linop, transform
        Arguments for `run`.

    """
    field_w = _initial_field(grid, inputs)
    linop = LinearOperatorBuilder(grid, mode, ref_wavelength)
    if n0 is None:
        n0 = float(np.real(mode.neff(grid.w_0)))
    if aeff is None:
        aeff = mode.aeff if mode.z_dependent else mode.aeff(0.0)

    aggregator = ResponseAggregator(responses, density, grid)
    norm = NormModeAverage(grid, aeff, n0)
    transform = TransModeAvg(grid, plan, aggregator, norm)
    return field_w, linop, transform


def setup_modal(
    grid,
    plan,
    modes,
    responses,
    density,
    inputs,
    polarisation="y",
    n0=None,
    nr=16,
    ntheta=16,
    ref_wavelength=None,
):
    """
    Build a multi-mode propagation.

    ``inputs`` maps mode indices to initial spectra or pulses; a single
    spectrum or pulse is launched in the first mode. Other parameters are
    those of `setup_mode_average`, plus the polarisation component and the
    quadrature orders of the overlap integrals.

    """
    modes = tuple(modes)
    if not isinstance(inputs, dict):
        inputs = {0: inputs}
    field_w = np.zeros((grid.w_nodes, len(modes)), dtype=np.complex128)
    for idx, value in inputs.items():
        if not 0 <= idx < len(modes):
            raise ConfigurationError(
                f"input for mode {idx}, but only {len(modes)} modes given",
                component="setup",
            )
        field_w[:, idx] = _initial_field(grid, value)

    linop = LinearOperatorBuilder(grid, list(modes), ref_wavelength)
    if n0 is None:
        n0 = float(np.real(modes[0].neff(grid.w_0)))

    norm = NormModal(grid, modes, polarisation, n0, nr, ntheta)
    aggregator = ResponseAggregator(
        responses, density, grid, shape=(grid.to_nodes, norm.n_points)
    )
    transform = TransModal(grid, plan, aggregator, norm)
    return field_w, linop, transform
