"""
Root initialization file for importing Hollowprop package and modules.
"""

from ._version import __version__
from .config import ConfigOptions
from .data.stats import collect_stats, default_stats
from .data.store import HDF5Output, MemoryOutput, read_output
from .errors import (
    ConfigurationError,
    NumericalDivergenceError,
    StepSizeUnderflowError,
    ToleranceViolation,
)
from .functions.fft_manager import FFTPlan
from .mesh.grid import EnvGrid, RealGrid
from .physics.capillary import MarcatiliMode
from .physics.ionization import ADKIonization
from .physics.laser import GaussField
from .physics.media import GasFill, gradient
from .physics.nonlinear import (
    KerrEnv,
    KerrEnvTHG,
    KerrField,
    PlasmaCumtrapz,
    ResponseAggregator,
)
from .simulation import simulate
from .solvers.builders import setup_modal, setup_mode_average
from .solvers.linear import LinearOperatorBuilder
from .solvers.normalization import NormModal, NormModeAverage
from .solvers.propagator import PropagationState, Propagator, run

__all__ = [
    "__version__",
    "ConfigOptions",
    "ConfigurationError",
    "NumericalDivergenceError",
    "StepSizeUnderflowError",
    "ToleranceViolation",
    "RealGrid",
    "EnvGrid",
    "FFTPlan",
    "MarcatiliMode",
    "GasFill",
    "gradient",
    "ADKIonization",
    "GaussField",
    "KerrField",
    "KerrEnv",
    "KerrEnvTHG",
    "PlasmaCumtrapz",
    "ResponseAggregator",
    "LinearOperatorBuilder",
    "NormModeAverage",
    "NormModal",
    "setup_mode_average",
    "setup_modal",
    "Propagator",
    "PropagationState",
    "run",
    "MemoryOutput",
    "HDF5Output",
    "read_output",
    "collect_stats",
    "default_stats",
    "simulate",
]
