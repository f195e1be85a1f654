"""
Exception types raised by hollowprop.

How this works
--------------

1. ``ConfigurationError`` is raised while objects are being built
(grids, modes, responses, operators, configuration dictionaries).
It is never raised once the propagation loop has started.

2. ``NumericalDivergenceError`` and ``StepSizeUnderflowError`` are
the two fatal errors of a running propagation. Both carry the
position ``z`` where the run stopped and the name of the component
responsible for it.

3. ``ToleranceViolation`` marks a single rejected trial step. The
propagator catches it, counts it and retries with a smaller step,
so it only reaches the caller through a ``StepSizeUnderflowError``.
"""


class HollowpropError(Exception):
    """Base class for all hollowprop errors."""


class ConfigurationError(HollowpropError, ValueError):
    """Invalid construction-time input."""

    def __init__(self, message, component=None):
        self.component = component
        if component:
            message = f"{component}: {message}"
        super().__init__(message)


class PropagationError(HollowpropError, RuntimeError):
    """Fatal error raised while stepping along z."""

    def __init__(self, message, z, component="propagator"):
        self.z = z
        self.component = component
        super().__init__(f"{component}: {message} (z = {z:.6e} m)")


class NumericalDivergenceError(PropagationError):
    """Non-finite values detected in the field state."""

    def __init__(self, z, component="propagator"):
        super().__init__("non-finite values in the field", z, component)


class StepSizeUnderflowError(PropagationError):
    """The step controller cannot meet the tolerance above the minimum step."""

    def __init__(self, z, step, min_step, component="step controller"):
        self.step = step
        self.min_step = min_step
        super().__init__(
            f"step {step:.3e} m rejected at the minimum step size "
            f"{min_step:.3e} m, last good position",
            z,
            component,
        )


class ToleranceViolation(HollowpropError):
    """A single trial step whose error estimate exceeds the tolerance."""

    def __init__(self, z, step, error, next_step):
        self.z = z
        self.step = step
        self.error = error
        self.next_step = next_step
        super().__init__(
            f"step {step:.3e} m at z = {z:.6e} m rejected "
            f"(error {error:.3e}), retrying with {next_step:.3e} m"
        )
