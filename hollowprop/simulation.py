"""
Complete simulation from a `ConfigOptions` instance.

How this works
--------------

1. The grid is built from the capillary length and the grid options,
with the pulse wavelength as reference unless another one is given.

2. The gas fill has a constant pressure, or a gradient when an exit
pressure is given. Modes are Marcatili modes of a capillary filled with
that gas, and responses are picked to match the grid representation.

3. A single mode runs the mode-averaged propagation, several modes the
modal one. The FFT plan is held for the whole run and the HDF5 output,
if any, is closed afterwards.
"""

from dataclasses import dataclass

import numpy as np

from .config import parse_mode_label
from .data.stats import default_stats
from .data.store import HDF5Output, MemoryOutput
from .functions.fft_manager import FFTPlan
from .log import get_logger
from .mesh.grid import EnvGrid, RealGrid
from .physics.capillary import MarcatiliMode
from .physics.ionization import ADKIonization
from .physics.laser import GaussField
from .physics.media import GasFill, gradient
from .physics.nonlinear import KerrEnv, KerrEnvTHG, KerrField, PlasmaCumtrapz
from .solvers.builders import setup_mode_average, setup_modal
from .solvers.propagator import run

logger = get_logger(__name__)


@dataclass
class SimulationResult:
    grid: object
    modes: tuple
    output: object
    field_w: np.ndarray


def build_grid(config):
    """Grid for the configured capillary and pulse."""
    par = config.grid_par
    z_max = config.capillary_par.length
    ref_wavelength = par.ref_wavelength or config.pulse_par.wavelength
    if config.grid_name == "real":
        return RealGrid(z_max, ref_wavelength, par.wavelength_limits, par.time_range, par.dt)
    return EnvGrid(
        z_max, ref_wavelength, par.wavelength_limits, par.time_range, par.dt, par.thg
    )


def build_fill(config):
    """Gas fill, with a pressure gradient if an exit pressure is set."""
    par = config.gas_par
    if par.pressure_end is None:
        return GasFill(config.gas_name, par.pressure, par.temperature)
    return gradient(
        config.gas_name,
        config.capillary_par.length,
        par.pressure,
        par.pressure_end,
        par.temperature,
    )


def build_modes(config, fill):
    cap = config.capillary_par
    modes = []
    for label in cap.modes:
        kind, n, m = parse_mode_label(label)
        modes.append(
            MarcatiliMode.from_gas(
                cap.radius,
                fill,
                clad=cap.clad,
                n=n,
                m=m,
                kind=kind,
                model=cap.model,
                loss=cap.loss,
            )
        )
    return tuple(modes)


def build_responses(config, grid, fill):
    """Nonlinear responses matching the grid representation."""
    responses = []
    if "kerr" in config.responses:
        gamma3 = fill.gamma3()
        if grid.representation == "real":
            responses.append(KerrField(gamma3))
        elif grid.thg:
            responses.append(KerrEnvTHG(gamma3, grid.w_0, grid.to_grid))
        else:
            responses.append(KerrEnv(gamma3))
    if "plasma" in config.responses:
        par = config.responses["plasma"]
        ion_pot = fill.ionization_potential()
        rate = ADKIonization(ion_pot, par.field_range, par.num_points, par.lookup)
        responses.append(PlasmaCumtrapz(grid.to_grid, rate, ion_pot))
    return responses


def build_output(config, grid):
    par = config.output_par
    if config.output_name == "hdf5":
        return HDF5Output(
            par.path,
            0.0,
            grid.z_max,
            par.n_save,
            grid=grid,
            flush_every=par.flush_every,
            compression_opts=par.compression_opts,
        )
    return MemoryOutput(0.0, grid.z_max, par.n_save)


def simulate(config):
    """
    Run the simulation described by ``config``.

    Returns
    -------
    result : SimulationResult
        Grid, modes, filled output sink and final spectrum.

    """
    grid = build_grid(config)
    fill = build_fill(config)
    modes = build_modes(config, fill)
    responses = build_responses(config, grid, fill)
    output = build_output(config, grid)

    pulse = config.pulse_par
    inputs = GaussField(
        pulse.wavelength, pulse.duration, pulse.energy, pulse.phase, pulse.delay
    )
    density = fill.density if fill.z_dependent else fill.density(0.0)
    stepper = config.stepper_par
    plan = FFTPlan(grid, backend=config.fft_backend)

    logger.info(
        "Simulating %s in %s at %.3g bar, %d mode(s), responses: %s",
        config.pulse_name,
        fill.gas.name,
        fill.pressure(0.0),
        len(modes),
        ", ".join(config.responses) or "none",
    )

    with plan:
        if len(modes) == 1:
            field_w, linop, transform = setup_mode_average(
                grid, plan, modes[0], responses, density, inputs
            )
        else:
            nr, ntheta = config.capillary_par.quadrature
            field_w, linop, transform = setup_modal(
                grid,
                plan,
                modes,
                responses,
                density,
                {pulse.mode: inputs},
                polarisation=config.capillary_par.polarisation,
                nr=nr,
                ntheta=ntheta,
            )
        try:
            final = run(
                field_w,
                grid,
                linop,
                transform,
                output,
                stats_fun=default_stats(grid),
                rtol=stepper.rtol,
                atol=stepper.atol,
                min_step=stepper.min_step,
                max_step=stepper.max_step,
                init_step=stepper.init_step,
                safety=stepper.safety,
                max_grow=stepper.max_grow,
                min_shrink=stepper.min_shrink,
                order=stepper.order,
            )
        finally:
            if isinstance(output, HDF5Output):
                output.close()

    return SimulationResult(grid=grid, modes=modes, output=output, field_w=final)
