"""
Interaction-picture Runge-Kutta stepper with adaptive step size.

How this works
--------------

1. The linear part of the equation is applied through the elementwise
exponentials ``H1 = exp(P(z, z + h/2))``, ``H2 = exp(P(z + h/2, z + h))``
and ``F = H1 H2``, where ``P(a, b)`` is the integral of the linear
operator from ``a`` to ``b``. A constant operator gives ``P = L (b - a)``
exactly. Only the nonlinear term ``N(z, E)`` is integrated numerically,
with the classical fourth-order interaction-picture scheme written in the
lab frame:

    E2 = H1 (E + h/2 N1)                N2 = N(z + h/2, E2)
    E3 = H1 E + h/2 N2                  N3 = N(z + h/2, E3)
    E4 = F E + h H2 N3                  N4 = N(z + h, E4)
    E' = F E + h/6 (F N1 + 2 H2 (N2 + N3) + N4)

A z-dependent operator is integrated with two-point Gauss-Legendre rules
on each half step. The same rule over the whole step differs from the sum
of the halves by roughly its own quadrature error, which exceeds that of
the halves. That difference, applied to ``E'``, is added to the error
estimate below.

2. The nonlinear term at the new point, ``N5 = N(z + h, E')``, gives the
embedded third-order estimate, whose difference with the fourth-order
result is ``h/6 (N4 - N5)``. If the step is accepted ``N5`` is the first
stage of the next step, so each accepted step costs four nonlinear
evaluations.

3. The error norm is ``||err|| / (atol + rtol max(||E||, ||E'||))`` and a
step is accepted when it is at most 1. The next step size is scaled by
``safety * error**(-1/order)``, bounded by the shrink and growth limits
and by the maximum step.

4. A rejected step raises `ToleranceViolation` with the proposed retry
step, and leaves the field and the first stage untouched.
"""

from dataclasses import dataclass

import numpy as np

from ..data.diagnostics import validate_step
from ..errors import ConfigurationError, ToleranceViolation

# two-point Gauss-Legendre nodes on [0, 1]
GAUSS_NODES = (0.5 - np.sqrt(3) / 6, 0.5 + np.sqrt(3) / 6)


@dataclass
class StepController:
    """Error-based step-size controller."""

    rtol: float = 1e-6
    atol: float = 0.0
    safety: float = 0.9
    max_grow: float = 5.0
    min_shrink: float = 0.2
    order: int = 4
    min_step: float = 0.0
    max_step: float = np.inf

    def __post_init__(self):
        checks = [
            (self.rtol < 0, "rtol must be non-negative"),
            (self.atol < 0, "atol must be non-negative"),
            (self.rtol == 0 and self.atol == 0, "rtol and atol cannot both be zero"),
            (not 0 < self.safety <= 1, "safety must be in (0, 1]"),
            (self.max_grow <= 1, "max_grow must be greater than 1"),
            (not 0 < self.min_shrink < 1, "min_shrink must be in (0, 1)"),
            (self.order <= 0, "order must be positive"),
            (self.min_step < 0, "min_step must be non-negative"),
            (self.max_step <= self.min_step, "max_step must be greater than min_step"),
        ]
        for condition, message in checks:
            if condition:
                raise ConfigurationError(message, component="StepController")

    def error_norm(self, err, field_old, field_new):
        """Scaled error, a step is acceptable when this is at most 1."""
        scale = self.atol + self.rtol * max(
            np.linalg.norm(field_old), np.linalg.norm(field_new)
        )
        err_norm = np.linalg.norm(err)
        if scale == 0:
            return 0.0 if err_norm == 0 else np.inf
        return err_norm / scale

    def next_step(self, step, error):
        """Step size to try after a step of size ``step`` with ``error``."""
        if error == 0:
            factor = self.max_grow
        else:
            factor = self.safety * error ** (-1 / self.order)
            factor = min(self.max_grow, max(self.min_shrink, factor))
        return min(step * factor, self.max_step)


class RK43Stepper:
    """
    Embedded fourth/third-order interaction-picture Runge-Kutta stepper.

    Parameters
    ----------
    field_w : ndarray
        Initial spectrum, copied.
    linop : ndarray or callable
        Linear operator, or a function of z returning it.
    rhs : callable
        Nonlinear term, called as ``rhs(out, field_w, z)``.
    controller : StepController
        Error test and step-size policy.
    z : float, default: 0.0
        Initial position.

    """

    def __init__(self, field_w, linop, rhs, controller, z=0.0):
        self.field = np.array(field_w, dtype=np.complex128, copy=True)
        self.rhs = rhs
        self.controller = controller
        self.z = z

        if callable(linop):
            self._linop_fun = linop
            self._linop = None
        else:
            self._linop_fun = None
            self._linop = np.asarray(linop)
            self._check_shape(self._linop)

        shape = self.field.shape
        self._n1 = np.zeros(shape, dtype=np.complex128)
        self._n2 = np.zeros(shape, dtype=np.complex128)
        self._n3 = np.zeros(shape, dtype=np.complex128)
        self._n4 = np.zeros(shape, dtype=np.complex128)
        self._n5 = np.zeros(shape, dtype=np.complex128)
        self._stage = np.zeros(shape, dtype=np.complex128)
        self._new = np.zeros(shape, dtype=np.complex128)
        self._first_stage_ready = False
        self.n_evaluations = 0

    def _check_shape(self, linop):
        try:
            shape = np.broadcast_shapes(linop.shape, self.field.shape)
        except ValueError as err:
            raise ConfigurationError(
                f"linear operator shape {linop.shape} does not match "
                f"field shape {self.field.shape}",
                component="RK43Stepper",
            ) from err
        if shape != self.field.shape:
            raise ConfigurationError(
                f"linear operator shape {linop.shape} does not match "
                f"field shape {self.field.shape}",
                component="RK43Stepper",
            )

    def _evaluate(self, out, field_w, z):
        self.rhs(out, field_w, z)
        self.n_evaluations += 1
        return out

    def linear_operator(self, z):
        if self._linop is not None:
            return self._linop
        linop = np.asarray(self._linop_fun(z))
        self._check_shape(linop)
        return linop

    def integrated_operator(self, z, h):
        """Integral of the linear operator from z to z + h."""
        if self._linop is not None:
            return self._linop * h
        left, right = (self.linear_operator(z + node * h) for node in GAUSS_NODES)
        return 0.5 * h * (left + right)

    def _propagators(self, z, h):
        """Half-step and full-step exponentials, and the quadrature error."""
        if self._linop is not None:
            half = np.exp(self._linop * (0.5 * h))
            return half, half, half * half, None
        first = self.integrated_operator(z, 0.5 * h)
        second = self.integrated_operator(z + 0.5 * h, 0.5 * h)
        quad_error = first + second
        quad_error -= self.integrated_operator(z, h)
        return np.exp(first), np.exp(second), np.exp(first + second), quad_error

    def step(self, step):
        """
        Try one step of size ``step`` from the current position.

        Returns
        -------
        error : float
            Scaled error norm of the accepted step.
        next_step : float
            Proposed size of the next step.

        Raises
        ------
        ToleranceViolation
            If the error test fails; the state is left unchanged.
        NumericalDivergenceError
            If the trial step produces non-finite values.

        """
        z, h, y = self.z, step, self.field
        n1, n2, n3, n4, n5 = self._n1, self._n2, self._n3, self._n4, self._n5
        stage, new = self._stage, self._new

        if not self._first_stage_ready:
            self._evaluate(n1, y, z)
            self._first_stage_ready = True

        half_1, half_2, full, quad_error = self._propagators(z, h)

        np.multiply(n1, 0.5 * h, out=stage)
        stage += y
        stage *= half_1
        self._evaluate(n2, stage, z + 0.5 * h)

        np.multiply(half_1, y, out=stage)
        stage += 0.5 * h * n2
        self._evaluate(n3, stage, z + 0.5 * h)

        np.multiply(half_2, n3, out=stage)
        stage *= h
        stage += full * y
        self._evaluate(n4, stage, z + h)

        np.add(n2, n3, out=new)
        new *= 2 * half_2
        new += full * n1
        new += n4
        new *= h / 6
        new += full * y

        validate_step(new, z + h)
        self._evaluate(n5, new, z + h)
        validate_step(n5, z + h)

        np.subtract(n4, n5, out=stage)
        stage *= h / 6
        if quad_error is not None:
            stage += quad_error * new
        error = self.controller.error_norm(stage, y, new)
        next_step = self.controller.next_step(h, error)

        if error > 1:
            raise ToleranceViolation(z, h, error, next_step)

        y[:] = new
        n1[:] = n5
        self.z = z + h
        return error, next_step
