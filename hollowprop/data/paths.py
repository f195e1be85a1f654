"""Location of the simulation results on disk."""

import os
from pathlib import Path

DEFAULT_BASE_DIR = Path("./results")
BASE_DIR_VARIABLE = "HOLLOWPROP_BASE_DIR"
DEFAULT_OUTPUT_NAME = "hollowprop_output.h5"


def set_base_dir(path) -> Path:
    """Set the results directory for this process and its children."""
    base_path = Path(path)
    os.environ[BASE_DIR_VARIABLE] = str(base_path)
    return base_path


def get_base_dir(base_path=None) -> Path:
    """Explicit path first, then ``HOLLOWPROP_BASE_DIR``, then ``./results``."""
    if base_path is not None:
        return Path(base_path)
    return Path(os.environ.get(BASE_DIR_VARIABLE, str(DEFAULT_BASE_DIR)))


def get_sim_dir(base_path=None) -> Path:
    return get_base_dir(base_path) / "simulations"


def default_output_path(name=DEFAULT_OUTPUT_NAME, base_path=None) -> Path:
    """HDF5 file in the simulation directory, creating the directory."""
    sim_dir = get_sim_dir(base_path)
    sim_dir.mkdir(parents=True, exist_ok=True)
    return sim_dir / name


__all__ = [
    "DEFAULT_BASE_DIR",
    "BASE_DIR_VARIABLE",
    "DEFAULT_OUTPUT_NAME",
    "set_base_dir",
    "get_base_dir",
    "get_sim_dir",
    "default_output_path",
]
