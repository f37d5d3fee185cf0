"""
Shared test fixtures for Voronoi tessellation tests.
"""
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from convex_polyhedron import ConvexPolyhedron
from point_distributions import SeedPoint
from voronoi import Bounds


@pytest.fixture
def unit_box():
    """The box [-0.5, 0.5]^3."""
    return ConvexPolyhedron.create_box(-0.5, -0.5, -0.5, 0.5, 0.5, 0.5)


@pytest.fixture
def two_seeds():
    """Two seeds on the x axis, mirror images across x = 0."""
    return [{"x": -1.0, "y": 0.0, "z": 0.0}, {"x": 1.0, "y": 0.0, "z": 0.0}]


@pytest.fixture
def cube_bounds():
    """The box [-2, 2]^3 as a Bounds."""
    return Bounds(min=np.array([-2.0, -2.0, -2.0]), max=np.array([2.0, 2.0, 2.0]))


@pytest.fixture
def random_seeds():
    """25 reproducible seeds in [-1, 1]^3 with id/layer metadata."""
    rng = np.random.default_rng(7)
    xyz = rng.uniform(-1.0, 1.0, size=(25, 3))
    return [
        SeedPoint(float(p[0]), float(p[1]), float(p[2]), layer="A", id=f"S-{i}")
        for i, p in enumerate(xyz)
    ]


@pytest.fixture
def random_bounds(random_seeds):
    return Bounds.from_points(random_seeds)
