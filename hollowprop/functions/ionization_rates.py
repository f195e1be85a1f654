"""Helper module injected into "ionization.py" for computing ionization rates."""

import numpy as np
from scipy.constants import physical_constants
from scipy.special import gamma  # pylint: disable=no-name-in-module

E_HARTREE = physical_constants["Hartree energy"][0]
T_AU = physical_constants["atomic unit of time"][0]
F_AU = physical_constants["atomic unit of electric field"][0]

# below exp(-700) the rate underflows to zero
EXPONENT_LIMIT = 700.0


def adk_rate(field, ion_pot):
    """
    Compute the ADK tunnel ionization rate.

    Parameters
    ----------
    field : array_like
        Electric field in V/m (sign is ignored).
    ion_pot : float
        Ionization potential in J.

    Returns
    -------
    rate : ndarray
        Ionization rate in 1/s, zero where the field vanishes.

    """
    ip_au = ion_pot / E_HARTREE
    n_star = 1 / np.sqrt(2 * ip_au)
    c_nl2 = 2 ** (2 * n_star) / (n_star * gamma(2 * n_star))
    f_crit = 2 * (2 * ip_au) ** 1.5

    f_a = np.abs(np.asarray(field, dtype=np.float64)) / F_AU
    rate = np.zeros_like(f_a)
    mask = f_a > f_crit / (3 * EXPONENT_LIMIT)
    f_m = f_a[mask]
    rate[mask] = (
        c_nl2
        * ip_au
        * (f_crit / f_m) ** (2 * n_star - 1)
        * np.exp(-f_crit / (3 * f_m))
        / T_AU
    )
    return rate
