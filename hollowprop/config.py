"""Hollowprop configuration file module."""

import re
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Type

from .errors import ConfigurationError
from .physics.media import GASES


@dataclass
class GasConfig:
    pressure: float = 1.0 # [bar]
    pressure_end: Optional[float] = None # [bar], gradient towards the exit
    temperature: float = 294.0 # [K]

@dataclass
class CapillaryConfig:
    radius: float # [m]
    length: float # [m]
    clad: str = "silica"
    model: str = "full"
    loss: bool = True
    modes: Tuple[str, ...] = ("HE11",)
    polarisation: str = "y"
    quadrature: Tuple[int, int] = (16, 16)

@dataclass
class RealGridConfig:
    wavelength_limits: Tuple[float, float] # [m]
    time_range: float # [s]
    ref_wavelength: Optional[float] = None # [m], pulse wavelength by default
    dt: float = 1.0 # [s]

@dataclass
class EnvGridConfig:
    wavelength_limits: Tuple[float, float] # [m]
    time_range: float # [s]
    ref_wavelength: Optional[float] = None # [m]
    dt: float = 1.0 # [s]
    thg: bool = False

@dataclass
class GaussianPulseConfig:
    wavelength: float # [m]
    duration: float # FWHM of the power profile [s]
    energy: float # [J]
    phase: float = 0.0 # [rad]
    delay: float = 0.0 # [s]
    mode: int = 0 # index of the launch mode

@dataclass
class KerrConfig:
    pass

@dataclass
class PlasmaConfig:
    field_range: Tuple[float, float] = (1e8, 1e12) # [V/m]
    num_points: int = 4096
    lookup: bool = True

@dataclass
class StepperConfig:
    rtol: float = 1e-6
    atol: float = 0.0
    safety: float = 0.9
    max_grow: float = 5.0
    min_shrink: float = 0.2
    order: int = 4
    min_step: Optional[float] = None # [m]
    max_step: Optional[float] = None # [m]
    init_step: Optional[float] = None # [m]

@dataclass
class MemoryOutputConfig:
    n_save: int = 51

@dataclass
class HDF5OutputConfig:
    n_save: int = 51
    path: Optional[str] = None
    flush_every: int = 16
    compression_opts: int = 4

GAS_CONFIG_CLASSES: Dict[str, Type] = {name: GasConfig for name in GASES}

GRID_CONFIG_CLASSES: Dict[str, Type] = {
    "real": RealGridConfig,
    "envelope": EnvGridConfig,
}

PULSE_CONFIG_CLASSES: Dict[str, Type] = {
    "gaussian": GaussianPulseConfig,
}

RESPONSE_CONFIG_CLASSES: Dict[str, Type] = {
    "kerr": KerrConfig,
    "plasma": PlasmaConfig,
}

OUTPUT_CONFIG_CLASSES: Dict[str, Type] = {
    "memory": MemoryOutputConfig,
    "hdf5": HDF5OutputConfig,
}

FFT_BACKENDS = ("scipy", "fftw")

MODE_LABEL = re.compile(r"^(HE|TE|TM)(\d)(\d+)$", re.IGNORECASE)


def parse_mode_label(label: str):
    """Split a mode label such as "HE11" into ``(kind, n, m)``."""
    match = MODE_LABEL.match(label.strip())
    if match is None:
        raise ConfigurationError(
            f"Invalid mode label: '{label}'. Expected e.g. 'HE11', 'TE01'",
            component="config",
        )
    kind, n, m = match.groups()
    return kind.upper(), int(n), int(m)


def _lowercase_dict(d: Dict) -> Dict:
    new_dict = {}
    for k, v in d.items():
        lower_key = k.lower()
        if isinstance(v, dict):
            new_dict[lower_key] = _lowercase_dict(v)
        else:
            new_dict[lower_key] = v
    return new_dict


def _single_option(options: Dict, registry: Dict[str, Type], what: str):
    if len(options) != 1:
        raise ConfigurationError(
            f"exactly one {what} must be given, got {len(options)}", component="config"
        )
    name = next(iter(options))
    return name, _make_option(name, options[name], registry, what)


def _make_option(name: str, params: Dict, registry: Dict[str, Type], what: str):
    if name not in registry:
        raise ConfigurationError(
            f"Invalid {what}: '{name}'. Available options are: {', '.join(registry)}",
            component="config",
        )
    try:
        return registry[name](**(params or {}))
    except TypeError as err:
        raise ConfigurationError(f"invalid {what} parameters: {err}", component="config") from err


@dataclass
class ConfigOptions:
    """
    Validated choices for one capillary simulation.

    Use `ConfigOptions.build` rather than the constructor: it
    lower-cases the option names, checks them against the registries
    above and fills in every default. The options are

    Parameters                          Choice
    =============================       ======================================
     gas_name : str                     "he" | "ne" | "ar" | "kr" | "xe" | "n2"
     gas_par : GasConfig                see "classes" above for the list
     capillary_par : CapillaryConfig    see "classes" above for the list
     grid_name : str                    "real" | "envelope"
     grid_par : object                  see "classes" above for the list
     pulse_name : str                   "gaussian"
     pulse_par : object                 see "classes" above for the list
     responses : Dict                   "kerr" and/or "plasma"
     stepper_par : StepperConfig        see "classes" above for the list
     output_name : str                  "memory" | "hdf5"
     output_par : object                see "classes" above for the list
     fft_backend : str                  "scipy" | "fftw"
    =============================       ======================================

    """
    gas_name: str
    gas_par: object
    capillary_par: object
    grid_name: str
    grid_par: object
    pulse_name: str
    pulse_par: object
    responses: Dict[str, object] = field(default_factory=dict)
    stepper_par: object = field(default_factory=StepperConfig)
    output_name: str = "memory"
    output_par: object = field(default_factory=MemoryOutputConfig)
    fft_backend: str = "scipy"

    @staticmethod
    def build(
        gas_parameters: Dict[str, Dict],
        capillary_parameters: Dict,
        grid_parameters: Dict[str, Dict],
        pulse_parameters: Dict[str, Dict],
        response_parameters: Optional[Dict[str, Dict]] = None,
        stepper_parameters: Optional[Dict] = None,
        output_parameters: Optional[Dict[str, Dict]] = None,
        fft_backend: str = "scipy",
    ) -> "ConfigOptions":

        gas_parameters = _lowercase_dict(gas_parameters)
        grid_parameters = _lowercase_dict(grid_parameters)
        pulse_parameters = _lowercase_dict(pulse_parameters)
        response_parameters = _lowercase_dict(response_parameters or {})
        output_parameters = _lowercase_dict(output_parameters or {"memory": {}})

        gas_name, gas_config = _single_option(gas_parameters, GAS_CONFIG_CLASSES, "gas")
        grid_name, grid_config = _single_option(grid_parameters, GRID_CONFIG_CLASSES, "grid")
        pulse_name, pulse_config = _single_option(
            pulse_parameters, PULSE_CONFIG_CLASSES, "pulse type"
        )
        output_name, output_config = _single_option(
            output_parameters, OUTPUT_CONFIG_CLASSES, "output"
        )

        try:
            capillary_config = CapillaryConfig(**capillary_parameters)
            stepper_config = StepperConfig(**(stepper_parameters or {}))
        except TypeError as err:
            raise ConfigurationError(f"invalid parameters: {err}", component="config") from err
        capillary_config.modes = tuple(capillary_config.modes)
        for label in capillary_config.modes:
            parse_mode_label(label)

        responses = {}
        for response_name, response_params in response_parameters.items():
            responses[response_name] = _make_option(
                response_name, response_params, RESPONSE_CONFIG_CLASSES, "response"
            )

        backend = fft_backend.lower()
        if backend not in FFT_BACKENDS:
            raise ConfigurationError(
                f"Invalid FFT backend: '{fft_backend}'. "
                f"Available backends are: {', '.join(FFT_BACKENDS)}",
                component="config",
            )

        return ConfigOptions(
            gas_name=gas_name,
            gas_par=gas_config,
            capillary_par=capillary_config,
            grid_name=grid_name,
            grid_par=grid_config,
            pulse_name=pulse_name,
            pulse_par=pulse_config,
            responses=responses,
            stepper_par=stepper_config,
            output_name=output_name,
            output_par=output_config,
            fft_backend=backend,
        )
