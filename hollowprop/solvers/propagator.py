"""
Propagation of the field spectrum from z = 0 to the end of the grid.

How this works
--------------

1. The `Propagator` is a small state machine. It starts in
``INITIALIZING``, where the initial spectrum is copied, the output points
are validated and the snapshot at z = 0 is stored if requested. It then
alternates between ``STEPPING`` and ``ACCEPTED`` or ``REJECTED`` until it
reaches ``DONE``, or stops in ``FAILED`` with a fatal error.

2. Steps are clipped so that they land exactly on every requested output
point and on ``z_max``; the position is assigned, not accumulated, so
snapshots are stored at the requested z-values. The step after a clipped
one starts from the larger of the controller proposal and the step
that was clipped.

3. A rejected step is logged, counted and retried from the same position
with the smaller step proposed by the controller. Rejecting a step that
is already at the minimum step size ends the run with
`StepSizeUnderflowError`.

4. Every stored snapshot is a copy of the field, passed to the output
sink together with the statistics computed from it, in increasing z.
"""

from enum import Enum

import numpy as np

from ..errors import (
    ConfigurationError,
    NumericalDivergenceError,
    StepSizeUnderflowError,
    ToleranceViolation,
)
from ..log import get_logger
from .stepper import RK43Stepper, StepController

logger = get_logger(__name__)

# distances below this fraction of z_max count as reached
Z_EPS = 1e-12


class PropagationState(Enum):
    INITIALIZING = "initializing"
    STEPPING = "stepping"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    DONE = "done"
    FAILED = "failed"


class Propagator:
    """
    Adaptive-step propagation of a field spectrum.

    Parameters
    ----------
    field_w : ndarray
        Initial spectrum, ``(n_w,)`` or ``(n_w, n_modes)``.
    grid : RealGrid or EnvGrid
        Grid, provides ``z_max``.
    linop : ndarray or callable
        Linear operator, its builder, or a function of z.
    transform : callable
        Nonlinear term, called as ``transform(out, field_w, z)``.
    output : object
        Sink called as ``output(z, field_w, stats)`` and exposing
        ``save_points``.
    stats_fun : callable, optional
        Statistics of a snapshot, called as ``stats_fun(field_w, z)``.
    rtol, atol : float
        Relative and absolute tolerance of the error test.
    min_step, max_step, init_step : float, optional
        Step bounds and first trial step.
    safety, max_grow, min_shrink, order :
        Step-size controller parameters, see `StepController`.

    """

    def __init__(
        self,
        field_w,
        grid,
        linop,
        transform,
        output,
        stats_fun=None,
        rtol=1e-6,
        atol=0.0,
        min_step=None,
        max_step=None,
        init_step=None,
        safety=0.9,
        max_grow=5.0,
        min_shrink=0.2,
        order=4,
    ):
        self.state = PropagationState.INITIALIZING
        self.grid = grid
        self.z_max = grid.z_max
        self.output = output
        self.stats_fun = stats_fun
        self.z_eps = Z_EPS * self.z_max

        min_step = 1e-9 * self.z_max if min_step is None else min_step
        max_step = self.z_max if max_step is None else max_step
        self.controller = StepController(
            rtol=rtol,
            atol=atol,
            safety=safety,
            max_grow=max_grow,
            min_shrink=min_shrink,
            order=order,
            min_step=min_step,
            max_step=max_step,
        )
        if init_step is None:
            init_step = self.z_max / 1000
        self.step_size = min(max(init_step, min_step), max_step)

        self.linop = self._resolve_linop(linop)
        self.stepper = RK43Stepper(field_w, self.linop, transform, self.controller)
        self.save_points = self._check_save_points(output.save_points)
        self._save_idx = 0

        self.n_accepted = 0
        self.n_rejected = 0
        self.step_history = []

    @staticmethod
    def _resolve_linop(linop):
        if not callable(linop):
            return np.asarray(linop)
        if getattr(linop, "z_dependent", True):
            return linop
        return np.asarray(linop(0.0))

    def _check_save_points(self, save_points):
        points = np.sort(np.asarray(save_points, dtype=np.float64))
        if points.size and (
            points[0] < -self.z_eps or points[-1] > self.z_max + self.z_eps
        ):
            raise ConfigurationError(
                f"output points must lie in [0, {self.z_max}]", component="Propagator"
            )
        return np.clip(points, 0.0, self.z_max)

    @property
    def z(self):
        return self.stepper.z

    @property
    def field(self):
        return self.stepper.field

    def _store(self, z):
        snapshot = self.field.copy()
        stats = self.stats_fun(snapshot, z) if self.stats_fun is not None else {}
        self.output(z, snapshot, stats)

    def _store_reached(self):
        points = self.save_points
        while self._save_idx < points.size and points[self._save_idx] <= self.z + self.z_eps:
            self._store(points[self._save_idx])
            self._save_idx += 1

    def _target(self):
        """Next position a step must land on."""
        if self._save_idx < self.save_points.size:
            return min(self.save_points[self._save_idx], self.z_max)
        return self.z_max

    def propagate(self):
        """
        Run the propagation up to ``z_max``.

        Returns
        -------
        field_w : ndarray
            Final spectrum.

        """
        logger.info(
            "Propagating to z = %.4g m with rtol = %.1e, atol = %.1e",
            self.z_max,
            self.controller.rtol,
            self.controller.atol,
        )
        self._store_reached()
        report_at = 0.1 * self.z_max

        try:
            while self.z < self.z_max - self.z_eps:
                self.state = PropagationState.STEPPING
                target = self._target()
                step = self.step_size
                landing = target - self.z <= step
                if landing:
                    step = target - self.z

                try:
                    error, next_step = self.stepper.step(step)
                except ToleranceViolation as violation:
                    self.state = PropagationState.REJECTED
                    self.n_rejected += 1
                    logger.debug("%s", violation)
                    if step <= self.controller.min_step * (1 + 1e-9):
                        raise StepSizeUnderflowError(
                            violation.z, step, self.controller.min_step
                        ) from violation
                    self.step_size = max(violation.next_step, self.controller.min_step)
                    continue

                self.state = PropagationState.ACCEPTED
                if landing:
                    self.stepper.z = target
                    next_step = max(next_step, self.step_size)
                self.step_size = min(
                    max(next_step, self.controller.min_step), self.controller.max_step
                )
                self.n_accepted += 1
                self.step_history.append((self.z, step))
                self._store_reached()

                if self.z >= report_at:
                    logger.info(
                        "z = %.4g m (%3.0f%%), step %.3e m, error %.2e",
                        self.z,
                        100 * self.z / self.z_max,
                        step,
                        error,
                    )
                    report_at += 0.1 * self.z_max
        except (NumericalDivergenceError, StepSizeUnderflowError) as err:
            self.state = PropagationState.FAILED
            logger.error("Propagation failed: %s", err)
            raise

        self.state = PropagationState.DONE
        logger.info(
            "Propagation finished: %d accepted steps, %d rejected steps, "
            "%d nonlinear evaluations",
            self.n_accepted,
            self.n_rejected,
            self.stepper.n_evaluations,
        )
        return self.field.copy()


def run(field_w, grid, linop, transform, output, plan=None, stats_fun=None, **kwargs):
    """
    Propagate ``field_w`` through ``grid`` and store snapshots in ``output``.

    If ``plan`` is given and not yet acquired, it is held for the whole
    run and released at the end. Remaining keyword arguments are passed to
    `Propagator`.

    Returns
    -------
    field_w : ndarray
        Final spectrum.

    """
    prop = Propagator(field_w, grid, linop, transform, output, stats_fun, **kwargs)
    if plan is None or plan.active:
        return prop.propagate()
    with plan:
        return prop.propagate()
