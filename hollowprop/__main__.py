"""Entry point for running the package with 'python -m hollowprop'."""

from ._version import __version__
from .config import ConfigOptions
from .log import setup
from .simulation import simulate


def main():
    """Main function."""
    print(f"Running Hollowprop v{__version__} for Python")
    setup()

    config = ConfigOptions.build(
        gas_parameters={
            "AR": {"pressure": 5.0},
        },
        capillary_parameters={
            "radius": 13e-6,
            "length": 15e-2,
            "model": "full",
            "loss": True,
            "modes": ("HE11",),
        },
        grid_parameters={
            "REAL": {
                "wavelength_limits": (160e-9, 3000e-9),
                "time_range": 1e-12,
            },
        },
        pulse_parameters={
            "GAUSSIAN": {
                "wavelength": 800e-9,
                "duration": 30e-15,
                "energy": 1e-6,
            },
        },
        response_parameters={
            "KERR": {},
            "PLASMA": {},
        },
        stepper_parameters={"rtol": 1e-6},
        output_parameters={
            "HDF5": {"n_save": 201},
        },
        fft_backend="SCIPY",
    )

    result = simulate(config)
    print(f"Results saved to {result.output.path}")


if __name__ == "__main__":
    main()
