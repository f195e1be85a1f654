"""
Helper module injected into "media.py" for computing dispersion properties
of the filling gases and the capillary cladding. This is done using
Sellmeier semi-empirical equations for the refractive index.

Noble gas dispersion uses the formulas of A. Bideau-Mehu et al. (1981),
valid from the vacuum-UV to the near-IR at 0 degrees Celsius and 1 atm.
Argon uses the three-term fit of the same group (Peck-type expression).

Nitrogen dispersion uses the two-term formula of E. R. Peck and
B. N. Khanna (1966) at 0 degrees Celsius and 1 atm.

Silica dispersion uses a three-term dispersion formula, with six
parameters, from I. H. Malitson (1965). The wavelength validity range goes
from 0.21 microns (far-UV) to 3.71 microns (mid-IR) at 20 degrees Celsius.

How this works
--------------
Every function has the angular frequency (rad/s) as argument and returns
the refraction index, wavenumber, and its derivative at that frequency.

The gas formulas are written in terms of the vacuum wavenumber 'sigma',
in units of reciprocal microns, as

    n - 1 = A + sum_i B_i / (C_i - sigma**2)

so that the group index follows from the derivative with respect to
sigma**2. Gas indices returned here are those of the reference conditions;
scaling to a given number density is done in "media.py".
"""

import numpy as np
from scipy.constants import c

# Reference gas coefficients: (A, ((B_1, C_1), (B_2, C_2), ...))
GAS_SELLMEIER = {
    "he": (0.0, ((0.01470091, 423.98),)),
    "ne": (0.0, ((0.00128145, 184.661), (0.0220486, 376.840))),
    "ar": (
        0.0,
        ((2.50141e-3, 91.012), (5.00283e-4, 87.892), (5.22343e-2, 214.02)),
    ),
    "kr": (
        0.0,
        ((0.00253637, 65.4742), (0.00273649, 73.698), (0.0620802, 181.08)),
    ),
    "xe": (
        0.0,
        ((0.00322869, 46.301), (0.00355393, 50.578), (0.0606764, 112.74)),
    ),
    "n2": (6.8552e-5, ((3.243157e-2, 144.0),)),
}


def sellmeier_gas(gas, omega):
    """Return gas n(w), k(w), and dk/dω at reference conditions.

    Parameters
    ----------
    gas : str
        Key of `GAS_SELLMEIER`.
    omega : float or array_like
        Angular frequency in rad/s.

    """
    coeff_a, terms = GAS_SELLMEIER[gas]
    omega = np.asarray(omega, dtype=np.float64)

    wavenumber = 1e-6 * omega / (2 * np.pi * c)
    k2 = wavenumber**2

    p1 = np.full_like(k2, coeff_a)
    p2 = np.zeros_like(k2)
    for coeff_b, coeff_c in terms:
        d1 = coeff_c - k2
        p1 = p1 + coeff_b / d1
        p2 = p2 + coeff_b / d1**2

    n = 1 + p1
    ng = n + 2 * k2 * p2
    k_w = n * omega / c
    dk = ng / c

    return n, k_w, dk


def sellmeier_silica(omega):
    """Return silica n(w), k(w), and dk/dω from Malitson's model.

    Validity range: 0.21-3.71 µm (20 °C). Outside of it the formula is
    continued analytically: below the 9.9 µm resonance the permittivity
    turns negative and n becomes imaginary, so n is always complex.
    """
    coeff_b1, coeff_b2, coeff_b3 = 0.6961663, 0.4079426, 0.8974794
    coeff_c1, coeff_c2, coeff_c3 = 0.0684043**2, 0.1162414**2, 9.896161**2

    wavelength = 1e6 * 2 * np.pi * c / omega
    l2 = wavelength**2

    d1 = l2 - coeff_c1
    d2 = l2 - coeff_c2
    d3 = l2 - coeff_c3

    p1 = l2 * (coeff_b1 / d1 + coeff_b2 / d2 + coeff_b3 / d3)
    p2 = (
        coeff_b1 * coeff_c1 / d1**2
        + coeff_b2 * coeff_c2 / d2**2
        + coeff_b3 * coeff_c3 / d3**2
    )

    n = np.sqrt(1 + p1 + 0j)
    ng = n + l2 * p2 / n
    k_w = n * omega / c
    dk = ng / c

    return n, k_w, dk
