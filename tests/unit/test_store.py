from __future__ import annotations

import numpy as np
import pytest
from h5py import File

from hollowprop.data.diagnostics import validate_step
from hollowprop.data.paths import (
    BASE_DIR_VARIABLE,
    default_output_path,
    get_sim_dir,
    set_base_dir,
)
from hollowprop.data.store import HDF5Output, MemoryOutput, read_output
from hollowprop.errors import ConfigurationError, NumericalDivergenceError


def _snapshots(rng, n, n_w=8):
    for idx in range(n):
        z = 0.25 * idx
        field = rng.standard_normal(n_w) + 1j * rng.standard_normal(n_w)
        stats = {"z": z, "energy": float(idx), "peak_power": np.array([idx, 2.0 * idx])}
        yield z, field, stats


@pytest.mark.unit
def test_save_points_from_count_or_list() -> None:
    points = MemoryOutput(0.0, 1.0, 5).save_points
    np.testing.assert_allclose(points, [0, 0.25, 0.5, 0.75, 1])
    np.testing.assert_allclose(MemoryOutput(save_points=[0.5, 0.1]).save_points, [0.1, 0.5])

    with pytest.raises(ConfigurationError, match="distinct"):
        MemoryOutput(save_points=[0.1, 0.1])
    with pytest.raises(ConfigurationError):
        MemoryOutput(0.0, None, 5)
    with pytest.raises(ConfigurationError):
        MemoryOutput(0.0, 1.0, 0)


@pytest.mark.unit
def test_memory_output_keeps_copies(rng) -> None:
    out = MemoryOutput(0.0, 0.5, 3)
    fields = []
    for z, field, stats in _snapshots(rng, 3):
        out(z, field, stats)
        fields.append(field.copy())
        field[:] = 0

    assert len(out) == 3
    np.testing.assert_allclose(out.z, [0.0, 0.25, 0.5])
    np.testing.assert_allclose(out.field_w, np.stack(fields))
    np.testing.assert_allclose(out.stats("energy"), [0.0, 1.0, 2.0])
    assert out.stats("peak_power").shape == (3, 2)
    assert set(out.data) == {"z", "field_w", "stats"}


@pytest.mark.unit
def test_memory_output_rejects_decreasing_z() -> None:
    out = MemoryOutput(save_points=[0.0, 1.0])
    out(0.5, np.zeros(2), {})
    with pytest.raises(ValueError, match="increasing"):
        out(0.5, np.zeros(2), {})


@pytest.mark.unit
def test_hdf5_output_round_trip(tmp_path, rng, env_grid) -> None:
    path = tmp_path / "run.h5"
    snapshots = list(_snapshots(rng, 5))

    with HDF5Output(path, 0.0, 1.0, 5, grid=env_grid, flush_every=2) as out:
        out(*snapshots[0])
        assert not path.exists()
        assert len(out) == 1
        for snap in snapshots[1:]:
            out(*snap)
        assert len(out) == 5

    data = read_output(path)
    np.testing.assert_allclose(data["z"], [s[0] for s in snapshots])
    np.testing.assert_allclose(data["field_w"], np.stack([s[1] for s in snapshots]))
    np.testing.assert_allclose(data["stats"]["energy"], np.arange(5.0))
    assert data["stats"]["peak_power"].shape == (5, 2)
    np.testing.assert_allclose(data["coordinates"]["w_grid"], env_grid.w_grid)

    with File(path, "r") as f:
        assert f["metadata/n_saved"][()] == 5
        assert f["coordinates"].attrs["representation"] == "env"
        np.testing.assert_allclose(f["save_points"][()], np.linspace(0.0, 1.0, 5))


@pytest.mark.unit
def test_hdf5_output_default_location(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv(BASE_DIR_VARIABLE, str(tmp_path))
    out = HDF5Output(z_max=1.0, n_save=2)

    assert out.path == tmp_path / "simulations" / "hollowprop_output.h5"
    assert out.path.parent.is_dir()
    out.close()
    assert not out.path.exists()


@pytest.mark.unit
def test_base_dir_can_be_set(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv(BASE_DIR_VARIABLE, str(tmp_path))
    set_base_dir(tmp_path / "base")
    assert get_sim_dir() == tmp_path / "base" / "simulations"
    assert get_sim_dir(tmp_path) == tmp_path / "simulations"

    path = default_output_path("run.h5", tmp_path)
    assert path == tmp_path / "simulations" / "run.h5"
    assert path.parent.is_dir()


@pytest.mark.unit
def test_validate_step_flags_non_finite_values() -> None:
    validate_step(np.ones(3, dtype=complex), 0.1)
    with pytest.raises(NumericalDivergenceError, match="non-finite") as excinfo:
        validate_step(np.array([1.0, np.nan]), 0.2, component="stepper")
    assert excinfo.value.z == 0.2
    assert excinfo.value.component == "stepper"
