from __future__ import annotations

import numpy as np
import pytest

from hollowprop.mesh.grid import EnvGrid, RealGrid


@pytest.fixture(scope="session")
def real_grid() -> RealGrid:
    return RealGrid(0.1, 800e-9, (160e-9, 3000e-9), 1e-12)


@pytest.fixture(scope="session")
def env_grid() -> EnvGrid:
    return EnvGrid(0.1, 800e-9, (400e-9, 2000e-9), 0.5e-12)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)
