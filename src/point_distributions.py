"""
Seed point generators for Voronoi tessellations.

Each generator returns a PointSet: the seeds plus their tight bounding box.
Lattices (simple cubic, BCC, FCC, diamond, honeycomb) give regular
space-filling cells; spirals, shells and random clouds give irregular ones.
Generators that use randomness take an optional numpy Generator or integer
seed so results are reproducible.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

import numpy as np

from voronoi import Bounds

RngLike = Optional[Union[int, np.random.Generator]]

GOLDEN_ANGLE = math.pi * (3.0 - math.sqrt(5.0))


@dataclass
class SeedPoint:
    """A seed position with a layer tag and a stable id."""
    x: float
    y: float
    z: float
    layer: str = "A"
    id: str = ""

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    def to_dict(self) -> Dict:
        return {"x": self.x, "y": self.y, "z": self.z, "layer": self.layer, "id": self.id}


@dataclass
class PointSet:
    """Generated seeds and their bounding box."""
    points: List[SeedPoint]
    bounding_box: Bounds
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class DistributionInfo:
    id: str
    name: str
    description: str
    category: str  # "crystalline", "organic" or "chaotic"


DISTRIBUTIONS: Dict[str, DistributionInfo] = {
    info.id: info for info in (
        DistributionInfo("honeycomb", "Honeycomb", "Two hexagonal layers with ABAB stacking", "crystalline"),
        DistributionInfo("random", "Random", "Uniformly distributed random points", "chaotic"),
        DistributionInfo("bcc", "BCC Lattice", "Body-centered cubic - creates truncated octahedra", "crystalline"),
        DistributionInfo("fcc", "FCC Lattice", "Face-centered cubic - creates rhombic dodecahedra", "crystalline"),
        DistributionInfo("simple_cubic", "Cubic Grid", "Simple cubic lattice - creates cube cells", "crystalline"),
        DistributionInfo("fibonacci_sphere", "Fibonacci Sphere", "Golden angle distribution on a sphere", "organic"),
        DistributionInfo("double_helix", "Double Helix", "Two intertwined spirals", "organic"),
        DistributionInfo("galaxy", "Galaxy Clusters", "Spiral arms around a clustered core", "chaotic"),
        DistributionInfo("concentric_shells", "Concentric Shells", "Points on nested spherical shells", "organic"),
        DistributionInfo("jittered_grid", "Jittered Grid", "Perturbed cubic grid - semi-regular cells", "chaotic"),
        DistributionInfo("spiral_tower", "Spiral Tower", "Tapering rings rising around a center column", "organic"),
        DistributionInfo("diamond_lattice", "Diamond Lattice", "Two interpenetrating FCC lattices", "crystalline"),
    )
}


def _rng(rng: RngLike) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def bounding_box_of(points: List[SeedPoint]) -> Bounds:
    return Bounds.from_points(points)


def _point_set(points: List[SeedPoint], **metadata) -> PointSet:
    metadata.setdefault("total_points", len(points))
    return PointSet(points=points, bounding_box=bounding_box_of(points), metadata=metadata)


# ─── Lattices ────────────────────────────────────────────────────────────────

def generate_simple_cubic_points(grid_size: int = 5, spacing: float = 1.0) -> PointSet:
    """Simple cubic lattice; every interior cell is a cube."""
    half = (grid_size - 1) / 2.0
    points = []
    for x in range(grid_size):
        for y in range(grid_size):
            for z in range(grid_size):
                points.append(SeedPoint(
                    (x - half) * spacing, (y - half) * spacing, (z - half) * spacing,
                    layer="A", id=f"SC-{len(points)}",
                ))
    return _point_set(points, grid_size=grid_size, spacing=spacing)


def generate_bcc_points(grid_size: int = 4, spacing: float = 1.0) -> PointSet:
    """Body-centered cubic lattice; interior cells are truncated octahedra."""
    half = (grid_size - 1) / 2.0
    points = []
    for x in range(grid_size):
        for y in range(grid_size):
            for z in range(grid_size):
                points.append(SeedPoint(
                    (x - half) * spacing, (y - half) * spacing, (z - half) * spacing,
                    layer="A", id=f"BCC-A-{len(points)}",
                ))
    for x in range(grid_size - 1):
        for y in range(grid_size - 1):
            for z in range(grid_size - 1):
                points.append(SeedPoint(
                    (x - half + 0.5) * spacing,
                    (y - half + 0.5) * spacing,
                    (z - half + 0.5) * spacing,
                    layer="B", id=f"BCC-B-{len(points)}",
                ))
    return _point_set(points, grid_size=grid_size, spacing=spacing)


def generate_fcc_points(grid_size: int = 4, spacing: float = 1.0) -> PointSet:
    """Face-centered cubic lattice; interior cells are rhombic dodecahedra."""
    half = (grid_size - 1) / 2.0
    points = []

    def emit(ix, iy, iz, layer):
        points.append(SeedPoint(
            (ix - half) * spacing, (iy - half) * spacing, (iz - half) * spacing,
            layer=layer, id=f"FCC-{layer}-{len(points)}",
        ))

    n, m = grid_size, grid_size - 1
    for x in range(n):
        for y in range(n):
            for z in range(n):
                emit(x, y, z, "A")
    # Face centers on XY, XZ and YZ faces.
    for x in range(m):
        for y in range(m):
            for z in range(n):
                emit(x + 0.5, y + 0.5, z, "B")
    for x in range(m):
        for y in range(n):
            for z in range(m):
                emit(x + 0.5, y, z + 0.5, "C")
    for x in range(n):
        for y in range(m):
            for z in range(m):
                emit(x, y + 0.5, z + 0.5, "D")
    return _point_set(points, grid_size=grid_size, spacing=spacing)


def generate_diamond_lattice_points(grid_size: int = 3, spacing: float = 1.5) -> PointSet:
    """Diamond cubic structure: an FCC lattice plus a quarter-offset copy."""
    half = (grid_size - 1) / 2.0
    points = []

    def emit(fx, fy, fz, layer):
        points.append(SeedPoint(
            (fx - half) * spacing, (fy - half) * spacing, (fz - half) * spacing,
            layer=layer, id=f"DIA-{layer}-{len(points)}",
        ))

    last = grid_size - 1
    for x in range(grid_size):
        for y in range(grid_size):
            for z in range(grid_size):
                emit(x, y, z, "A")
                if x < last and y < last:
                    emit(x + 0.5, y + 0.5, z, "B")
                if x < last and z < last:
                    emit(x + 0.5, y, z + 0.5, "C")
                if y < last and z < last:
                    emit(x, y + 0.5, z + 0.5, "D")

    for x in range(last):
        for y in range(last):
            for z in range(last):
                emit(x + 0.25, y + 0.25, z + 0.25, "E")
                emit(x + 0.75, y + 0.75, z + 0.25, "F")
                emit(x + 0.75, y + 0.25, z + 0.75, "G")
                emit(x + 0.25, y + 0.75, z + 0.75, "H")
    return _point_set(points, grid_size=grid_size, spacing=spacing)


def _hex_lattice_2d(rows: int, cols: int, spacing: float, offset_x: float, offset_y: float):
    row_height = spacing * math.sqrt(3.0) / 2.0
    for row in range(rows):
        x_shift = (row % 2) * (spacing / 2.0)
        for col in range(cols):
            yield (col * spacing + x_shift + offset_x, row * row_height + offset_y)


def generate_honeycomb_points(
    grid_size: int = 3,
    spacing: float = 1.0,
    layer_spacing_factor: float = 1.0,
) -> PointSet:
    """Two hexagonally packed layers with ABAB (HCP) stacking, centered on the origin.

    Layer separation is spacing * sqrt(2/3) * layer_spacing_factor; each B
    point sits above the centroid of three A points.
    """
    layer_height = spacing * math.sqrt(2.0 / 3.0) * layer_spacing_factor
    b_offset_x = spacing / 2.0
    b_offset_y = spacing * math.sqrt(3.0) / 6.0

    grid_width = (grid_size - 1) * spacing + spacing / 2.0
    grid_height = (grid_size - 1) * spacing * math.sqrt(3.0) / 2.0
    cx, cy, cz = -grid_width / 2.0, -grid_height / 2.0, -layer_height / 2.0

    layer_a = [
        SeedPoint(x, y, cz, layer="A", id=f"A-{i}")
        for i, (x, y) in enumerate(_hex_lattice_2d(grid_size, grid_size, spacing, cx, cy))
    ]
    layer_b = [
        SeedPoint(x, y, cz + layer_height, layer="B", id=f"B-{i}")
        for i, (x, y) in enumerate(
            _hex_lattice_2d(grid_size, grid_size, spacing, cx + b_offset_x, cy + b_offset_y)
        )
    ]
    return _point_set(
        layer_a + layer_b,
        grid_size=grid_size,
        spacing=spacing,
        layer_height=layer_height,
        layer_a_count=len(layer_a),
        layer_b_count=len(layer_b),
    )


# ─── Organic ─────────────────────────────────────────────────────────────────

def _fibonacci_directions(count: int):
    for i in range(count):
        y = 1.0 - (i / (count - 1)) * 2.0 if count > 1 else 0.0
        r = math.sqrt(max(0.0, 1.0 - y * y))
        theta = GOLDEN_ANGLE * i
        yield i, math.cos(theta) * r, y, math.sin(theta) * r


def generate_fibonacci_sphere_points(count: int = 50, radius: float = 2.0) -> PointSet:
    """Golden-angle spiral on a sphere, pole to pole."""
    points = [
        SeedPoint(x * radius, y * radius, z * radius,
                  layer="A" if i % 2 == 0 else "B", id=f"FIB-{i}")
        for i, x, y, z in _fibonacci_directions(count)
    ]
    return _point_set(points, count=count, radius=radius)


def generate_concentric_shells_points(
    shells: int = 3,
    points_per_shell: int = 20,
    max_radius: float = 2.0,
) -> PointSet:
    """Fibonacci spheres nested at evenly spaced radii; outer shells are denser."""
    points = []
    for shell in range(shells):
        radius = (shell + 1) / shells * max_radius
        n = int(math.floor(points_per_shell * (shell + 1) / shells)) + 8
        for i, x, y, z in _fibonacci_directions(n):
            points.append(SeedPoint(
                x * radius, y * radius, z * radius,
                layer=f"shell-{shell}", id=f"SHELL-{shell}-{i}",
            ))
    return _point_set(points, shells=shells, max_radius=max_radius)


def generate_double_helix_points(
    turns: int = 3,
    points_per_turn: int = 10,
    radius: float = 1.5,
    height: float = 4.0,
) -> PointSet:
    """Two helices half a turn apart, rising along y."""
    total = turns * points_per_turn
    height_step = height / total
    points = []
    for layer, phase in (("A", 0.0), ("B", math.pi)):
        for i in range(total):
            theta = i / points_per_turn * 2.0 * math.pi + phase
            points.append(SeedPoint(
                math.cos(theta) * radius,
                i * height_step - height / 2.0,
                math.sin(theta) * radius,
                layer=layer, id=f"HELIX-{layer}-{i}",
            ))
    return _point_set(points, turns=turns, radius=radius, height=height)


def generate_spiral_tower_points(
    levels: int = 8,
    points_per_level: int = 8,
    height: float = 4.0,
    radius: float = 1.5,
) -> PointSet:
    """Rotating, tapering rings stacked along y plus a center column."""
    level_height = height / levels
    points = []
    for level in range(levels):
        y = level * level_height - height / 2.0
        level_radius = radius * (1.0 - level / levels * 0.3)
        rotation = level / levels * math.pi
        for i in range(points_per_level):
            theta = i / points_per_level * 2.0 * math.pi + rotation
            points.append(SeedPoint(
                math.cos(theta) * level_radius, y, math.sin(theta) * level_radius,
                layer="A" if level % 2 == 0 else "B", id=f"TOWER-{level}-{i}",
            ))
    for level in range(levels):
        points.append(SeedPoint(
            0.0, level * level_height - height / 2.0, 0.0,
            layer="center", id=f"TOWER-CENTER-{level}",
        ))
    return _point_set(points, levels=levels, height=height, radius=radius)


# ─── Random ──────────────────────────────────────────────────────────────────

def generate_random_points(grid_size: int = 6, rng: RngLike = None) -> PointSet:
    """2 * grid_size^2 uniform points in a slab flattened along z."""
    gen = _rng(rng)
    count = grid_size * grid_size * 2
    spread = grid_size * 0.6
    z_spread = spread * 0.4
    xyz = (gen.random((count, 3)) - 0.5) * 2.0 * np.array([spread, spread, z_spread])
    layers = gen.random(count)
    points = [
        SeedPoint(float(p[0]), float(p[1]), float(p[2]),
                  layer="A" if layers[i] > 0.5 else "B", id=f"R-{i}")
        for i, p in enumerate(xyz)
    ]
    return _point_set(points, grid_size=grid_size)


def generate_jittered_grid_points(
    grid_size: int = 4,
    spacing: float = 1.0,
    jitter_amount: float = 0.3,
    rng: RngLike = None,
) -> PointSet:
    """Cubic grid with each point displaced by up to jitter_amount * spacing per axis."""
    gen = _rng(rng)
    half = (grid_size - 1) / 2.0
    max_jitter = spacing * jitter_amount
    points = []
    for x in range(grid_size):
        for y in range(grid_size):
            for z in range(grid_size):
                jx, jy, jz = (gen.random(3) - 0.5) * 2.0 * max_jitter
                points.append(SeedPoint(
                    (x - half) * spacing + float(jx),
                    (y - half) * spacing + float(jy),
                    (z - half) * spacing + float(jz),
                    layer="A" if (x + y + z) % 2 == 0 else "B",
                    id=f"JITTER-{len(points)}",
                ))
    return _point_set(points, grid_size=grid_size, spacing=spacing, jitter_amount=jitter_amount)


def generate_galaxy_points(
    arms: int = 4,
    points_per_arm: int = 15,
    core_points: int = 20,
    rng: RngLike = None,
) -> PointSet:
    """A flattened random core plus noisy spiral arms in the xz plane."""
    gen = _rng(rng)
    points = []
    for i in range(core_points):
        r = gen.random() * 0.5
        theta = gen.random() * 2.0 * math.pi
        phi = gen.random() * math.pi
        points.append(SeedPoint(
            r * math.sin(phi) * math.cos(theta),
            r * math.sin(phi) * math.sin(theta) * 0.3,
            r * math.cos(phi),
            layer="core", id=f"GAL-CORE-{i}",
        ))
    for arm in range(arms):
        arm_offset = arm / arms * 2.0 * math.pi
        for i in range(points_per_arm):
            t = i / points_per_arm
            r = 0.5 + t * 2.0
            theta = arm_offset + t * 2.0 * math.pi
            noise = (gen.random() - 0.5) * 0.3
            vertical_noise = (gen.random() - 0.5) * 0.2
            points.append(SeedPoint(
                (r + noise) * math.cos(theta),
                vertical_noise,
                (r + noise) * math.sin(theta),
                layer=f"arm-{arm}", id=f"GAL-ARM{arm}-{i}",
            ))
    return _point_set(points, arms=arms)


# ─── Registry ────────────────────────────────────────────────────────────────

def _routes(grid_size: int, layer_spacing: float, rng: RngLike) -> Dict[str, Callable[[], PointSet]]:
    g = grid_size
    return {
        "honeycomb": lambda: generate_honeycomb_points(g, 1.0, layer_spacing),
        "bcc": lambda: generate_bcc_points(max(2, int(g * 0.6)), layer_spacing),
        "fcc": lambda: generate_fcc_points(max(2, int(g * 0.5)), layer_spacing),
        "simple_cubic": lambda: generate_simple_cubic_points(max(2, int(g * 0.7)), layer_spacing),
        "fibonacci_sphere": lambda: generate_fibonacci_sphere_points(g * g, g * 0.35),
        "double_helix": lambda: generate_double_helix_points(
            max(2, int(g * 0.5)), max(6, g), g * 0.25, g * 0.6 * layer_spacing,
        ),
        "galaxy": lambda: generate_galaxy_points(4, max(8, g * 2), max(10, g * 3), rng=rng),
        "concentric_shells": lambda: generate_concentric_shells_points(
            max(2, int(g * 0.5)), g * 3, g * 0.35,
        ),
        "jittered_grid": lambda: generate_jittered_grid_points(
            max(2, int(g * 0.6)), layer_spacing, 0.35, rng=rng,
        ),
        "spiral_tower": lambda: generate_spiral_tower_points(
            max(4, g), max(6, g), g * 0.5 * layer_spacing, g * 0.25,
        ),
        "diamond_lattice": lambda: generate_diamond_lattice_points(
            max(2, int(g * 0.4)), layer_spacing * 1.2,
        ),
        "random": lambda: generate_random_points(g, rng=rng),
    }


def generate_points(
    distribution_id: str,
    grid_size: int = 6,
    layer_spacing: float = 1.0,
    rng: RngLike = None,
) -> PointSet:
    """Generate seeds for a registered distribution, scaled by grid_size.

    Raises:
        ValueError: if distribution_id is not in DISTRIBUTIONS.
    """
    if distribution_id not in DISTRIBUTIONS:
        raise ValueError(
            f"Unknown distribution: {distribution_id}. "
            f"Available: {', '.join(sorted(DISTRIBUTIONS))}"
        )
    point_set = _routes(grid_size, layer_spacing, rng)[distribution_id]()
    point_set.metadata["distribution"] = distribution_id
    return point_set
