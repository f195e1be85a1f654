"""
Output sinks for propagation snapshots.

Both sinks expose ``save_points``, the sorted z-values where the
propagator must store a snapshot, and are called as
``output(z, field_w, stats)`` once per point, in increasing z.

`MemoryOutput` keeps everything in memory. `HDF5Output` buffers the
snapshots and writes them in blocks to resizable, compressed datasets,
so no file access happens at every snapshot.
"""

from pathlib import Path

import numpy as np
from h5py import File

from ..errors import ConfigurationError
from ..log import get_logger
from .paths import default_output_path

logger = get_logger(__name__)

FLUSH_SNAPSHOTS = 16


def _save_points(z_min, z_max, n_save, save_points):
    if save_points is not None:
        points = np.sort(np.asarray(save_points, dtype=np.float64))
    else:
        if z_max is None or n_save is None:
            raise ConfigurationError(
                "give either save_points or z_max and n_save", component="output"
            )
        if n_save < 1:
            raise ConfigurationError("n_save must be at least 1", component="output")
        points = np.linspace(z_min, z_max, n_save)
    if points.size and np.any(np.diff(points) <= 0):
        raise ConfigurationError("save points must be distinct", component="output")
    return points


class MemoryOutput:
    """
    In-memory record of the propagation.

    Parameters
    ----------
    z_min, z_max : float
        First and last output position.
    n_save : int
        Number of equally spaced output positions.
    save_points : array_like, optional
        Explicit output positions, overrides the three above.

    """

    def __init__(self, z_min=0.0, z_max=None, n_save=None, save_points=None):
        self.save_points = _save_points(z_min, z_max, n_save, save_points)
        self.data = {"z": [], "field_w": [], "stats": {}}

    def __len__(self):
        return len(self.data["z"])

    def __call__(self, z, field_w, stats):
        if self.data["z"] and z <= self.data["z"][-1]:
            raise ValueError(f"snapshots must arrive in increasing z, got z = {z}")
        self.data["z"].append(z)
        self.data["field_w"].append(np.array(field_w, copy=True))
        for key, value in stats.items():
            self.data["stats"].setdefault(key, []).append(value)

    @property
    def z(self):
        return np.asarray(self.data["z"])

    @property
    def field_w(self):
        return np.stack(self.data["field_w"])

    def stats(self, key):
        """Stacked values of one statistic."""
        return np.asarray(self.data["stats"][key])


class HDF5Output:
    """Handles snapshot storage in an HDF5 file."""

    def __init__(
        self,
        path=None,
        z_min=0.0,
        z_max=None,
        n_save=None,
        save_points=None,
        grid=None,
        flush_every=FLUSH_SNAPSHOTS,
        compression="gzip",
        compression_opts=4,
    ):
        """Initialize output manager.

        Parameters
        ----------
        path : str, optional
            File to write, defaults to ``hollowprop_output.h5`` in the
            simulation directory.
        z_min, z_max, n_save, save_points :
            Output positions, as in `MemoryOutput`.
        grid : RealGrid or EnvGrid, optional
            Grid whose axes are stored with the data.
        flush_every : int, default: 16
            Number of buffered snapshots written at once.
        compression : str, default: "gzip"
            Compression method for HDF5 files.
        compression_opts : integer, default: 4
            Compression level chosen.

        """
        self.save_points = _save_points(z_min, z_max, n_save, save_points)
        self.path = Path(path) if path is not None else default_output_path()
        self.grid = grid
        self.flush_every = max(1, int(flush_every))
        self.compression = compression
        self.compression_opts = compression_opts

        self._buffer = []
        self._created = False
        self._count = 0
        self._last_z = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
        return False

    def __len__(self):
        return self._count + len(self._buffer)

    def __call__(self, z, field_w, stats):
        if self._last_z is not None and z <= self._last_z:
            raise ValueError(f"snapshots must arrive in increasing z, got z = {z}")
        self._last_z = z
        self._buffer.append((z, np.array(field_w, copy=True), dict(stats)))
        if len(self._buffer) >= self.flush_every:
            self.flush()

    def _create(self, field_w):
        n_total = self.save_points.size
        with File(self.path, "w") as f:
            f.create_dataset(
                "field_w",
                shape=(0,) + field_w.shape,
                maxshape=(n_total,) + field_w.shape,
                dtype=np.complex128,
                compression=self.compression,
                compression_opts=self.compression_opts,
                chunks=(1,) + field_w.shape,
                shuffle=True,
            )
            f.create_dataset("z", shape=(0,), maxshape=(n_total,), dtype=np.float64)
            f.create_dataset("save_points", data=self.save_points)
            f.create_group("stats")

            if self.grid is not None:
                coords = f.create_group("coordinates")
                coords.create_dataset("t_grid", data=self.grid.t_grid)
                coords.create_dataset("w_grid", data=self.grid.w_grid)
                coords.create_dataset("w_window", data=self.grid.w_window)
                coords.create_dataset("z_max", data=self.grid.z_max)
                coords.create_dataset("w_0", data=self.grid.w_0)
                coords.attrs["representation"] = self.grid.representation

            meta = f.create_group("metadata")
            meta.create_dataset("n_saved", data=0, dtype="uint32")
        self._created = True

    def flush(self):
        """Write buffered snapshots to the file."""
        if not self._buffer:
            return
        if not self._created:
            self._create(self._buffer[0][1])

        z_new = np.array([item[0] for item in self._buffer])
        fields = np.stack([item[1] for item in self._buffer])
        start, stop = self._count, self._count + len(self._buffer)

        with File(self.path, "r+") as f:
            f["field_w"].resize(stop, axis=0)
            f["field_w"][start:stop] = fields
            f["z"].resize(stop, axis=0)
            f["z"][start:stop] = z_new

            stats_grp = f["stats"]
            for key in self._buffer[0][2]:
                values = np.stack([np.asarray(item[2][key]) for item in self._buffer])
                if key not in stats_grp:
                    stats_grp.create_dataset(
                        key,
                        shape=(0,) + values.shape[1:],
                        maxshape=(self.save_points.size,) + values.shape[1:],
                        dtype=values.dtype,
                    )
                stats_grp[key].resize(stop, axis=0)
                stats_grp[key][start:stop] = values

            f["metadata/n_saved"][()] = stop

        logger.debug("Wrote snapshots %d to %d into %s", start, stop, self.path)
        self._count = stop
        self._buffer.clear()

    def close(self):
        """Flush the remaining snapshots."""
        self.flush()
        if self._created:
            logger.info("Saved %d snapshots to %s", self._count, self.path)


def read_output(path):
    """
    Read an HDF5 output file back into memory.

    Returns
    -------
    data : dict
        ``"z"``, ``"field_w"`` and ``"stats"`` (dict of arrays), plus
        ``"coordinates"`` if the grid was stored.

    """
    with File(path, "r") as f:
        data = {
            "z": f["z"][()],
            "field_w": f["field_w"][()],
            "stats": {key: f["stats"][key][()] for key in f["stats"]},
        }
        if "coordinates" in f:
            data["coordinates"] = {
                key: f["coordinates"][key][()] for key in f["coordinates"]
            }
    return data
