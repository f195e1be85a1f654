"""Diagnosing tools module."""

import numpy as np

from ..errors import NumericalDivergenceError


def validate_step(field_w, z, component="propagator"):
    """
    Validate the numerical state of a trial step.

    Parameters
    ----------
    field_w : ndarray
        Field (or nonlinear term) computed by the step.
    z : float
        Position the step ends at.
    component : str, default: "propagator"
        Name reported with the error.

    Raises
    ------
    NumericalDivergenceError
        If any value is not finite.

    """
    if not np.all(np.isfinite(field_w)):
        raise NumericalDivergenceError(z, component)
