import pytest

from newton_fractal import FractalParameters, compute_basins


@pytest.fixture(scope="session")
def cubic_params():
    return FractalParameters(width=256, height=256, n=3, max_iter=60)


@pytest.fixture(scope="session")
def cubic_basins(cubic_params):
    return compute_basins(cubic_params)
