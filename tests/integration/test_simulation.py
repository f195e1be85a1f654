from __future__ import annotations

import numpy as np
import pytest

from hollowprop.config import ConfigOptions
from hollowprop.data.store import HDF5Output, MemoryOutput, read_output
from hollowprop.mesh.grid import EnvGrid, RealGrid
from hollowprop.simulation import simulate

PULSE = {"gaussian": {"wavelength": 800e-9, "duration": 30e-15, "energy": 50e-6}}
ENV_GRID = {"envelope": {"wavelength_limits": (400e-9, 2000e-9), "time_range": 0.5e-12}}


@pytest.mark.integration
def test_envelope_simulation_writes_hdf5(tmp_path) -> None:
    path = tmp_path / "hcf.h5"
    config = ConfigOptions.build(
        gas_parameters={"ar": {"pressure": 1.0}},
        capillary_parameters={"radius": 100e-6, "length": 0.05},
        grid_parameters=ENV_GRID,
        pulse_parameters=PULSE,
        response_parameters={"kerr": {}},
        stepper_parameters={"rtol": 1e-7},
        output_parameters={"hdf5": {"n_save": 3, "path": str(path), "flush_every": 2}},
    )

    result = simulate(config)

    assert isinstance(result.grid, EnvGrid)
    assert isinstance(result.output, HDF5Output)
    assert result.field_w.shape == (result.grid.w_nodes,)

    data = read_output(path)
    np.testing.assert_allclose(data["z"], [0.0, 0.025, 0.05])
    energy = data["stats"]["energy"]
    assert energy[0] == pytest.approx(50e-6, rel=1e-12)
    assert np.all(np.diff(energy) < 0)
    assert energy[-1] > 0.8 * energy[0]
    np.testing.assert_allclose(data["field_w"][-1], result.field_w)


@pytest.mark.integration
def test_modal_simulation_in_memory() -> None:
    config = ConfigOptions.build(
        gas_parameters={"he": {"pressure": 2.0}},
        capillary_parameters={
            "radius": 100e-6,
            "length": 0.02,
            "modes": ("HE11", "HE12"),
            "quadrature": (6, 6),
        },
        grid_parameters=ENV_GRID,
        pulse_parameters=PULSE,
        response_parameters={"kerr": {}},
        output_parameters={"memory": {"n_save": 2}},
    )

    result = simulate(config)

    assert len(result.modes) == 2
    assert isinstance(result.output, MemoryOutput)
    assert result.output.field_w.shape == (2, result.grid.w_nodes, 2)
    assert result.output.stats("energy").shape == (2, 2)


@pytest.mark.integration
def test_real_field_simulation_with_plasma() -> None:
    config = ConfigOptions.build(
        gas_parameters={"ar": {"pressure": 1.0, "pressure_end": 2.0}},
        capillary_parameters={"radius": 50e-6, "length": 0.01},
        grid_parameters={
            "real": {"wavelength_limits": (200e-9, 4000e-9), "time_range": 0.3e-12}
        },
        pulse_parameters=PULSE,
        response_parameters={"kerr": {}, "plasma": {"num_points": 1024}},
        output_parameters={"memory": {"n_save": 3}},
    )

    result = simulate(config)

    assert isinstance(result.grid, RealGrid)
    assert result.modes[0].z_dependent
    energy = result.output.stats("energy")
    assert np.all(np.isfinite(result.field_w))
    assert energy[-1] < energy[0]
    assert energy[-1] > 0.5 * energy[0]
