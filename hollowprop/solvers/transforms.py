"""
Nonlinear right-hand side of the propagation equation.

Each transform is called as ``transform(out, field_w, z)`` and fills
``out`` with the nonlinear term for the coarse spectrum ``field_w``:

1. zero-pad the spectrum onto the oversampled time grid,
2. convert to the physical field (and to quadrature points for modal
   propagation),
3. evaluate the aggregated polarization and apply the time window,
4. project onto the modes (modal propagation only),
5. transform back, apply the frequency window and normalize.
"""

import numpy as np


class TransModeAvg:
    """Nonlinear term for single-mode (mode-averaged) propagation."""

    def __init__(self, grid, plan, aggregator, norm):
        self.grid = grid
        self.plan = plan
        self.aggregator = aggregator
        self.norm = norm
        dtype = np.float64 if grid.representation == "real" else np.complex128
        self._field_t = np.zeros(grid.to_nodes, dtype=dtype)

    def __call__(self, out, field_w, z):
        field_t = self.plan.to_time(field_w, out=self._field_t)
        field_t /= self.norm.field_scale(z)
        pol_t = self.aggregator.evaluate(field_t, z)
        pol_t *= self.grid.to_window
        self.plan.to_freq(pol_t, out=out)
        out *= self.grid.w_window
        self.norm.apply(out, z, out=out)
        return out


class TransModal:
    """Nonlinear term for multi-mode propagation."""

    def __init__(self, grid, plan, aggregator, norm):
        self.grid = grid
        self.plan = plan
        self.aggregator = aggregator
        self.norm = norm
        n_modes = len(norm.modes)
        dtype = np.float64 if grid.representation == "real" else np.complex128
        self._field_t = np.zeros((grid.to_nodes, n_modes), dtype=dtype)
        self._points_t = np.zeros((grid.to_nodes, norm.n_points), dtype=dtype)
        self._modes_t = np.zeros((grid.to_nodes, n_modes), dtype=dtype)
        self._to_window = grid.to_window[:, np.newaxis]
        self._w_window = grid.w_window[:, np.newaxis]

    def __call__(self, out, field_w, z):
        field_t = self.plan.to_time(field_w, out=self._field_t)
        points_t = self.norm.to_points(field_t, z, out=self._points_t)
        pol_t = self.aggregator.evaluate(points_t, z)
        pol_t *= self._to_window
        modes_t = self.norm.project(pol_t, z, out=self._modes_t)
        self.plan.to_freq(modes_t, out=out)
        out *= self._w_window
        self.norm.apply(out, z, out=out)
        return out
