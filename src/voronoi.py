"""
3D Voronoi tessellation by plane cutting.

Each seed's cell starts as the padded bounding box and is clipped against
the perpendicular bisector to every other seed, nearest seeds first. The
result is one convex polyhedron per seed.

Cost is O(n^2) cuts overall with no neighbor culling beyond the
nearest-first ordering; intended for tens to low hundreds of seeds.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np

from convex_polyhedron import ConvexPolyhedron
from geometry_primitives import EPSILON, Plane

logger = logging.getLogger(__name__)

DEFAULT_PADDING = 0.5


@dataclass
class VoronoiConfig:
    """Configuration for the tessellation driver."""
    padding: float = DEFAULT_PADDING
    epsilon: float = EPSILON
    # Skip bisectors whose every cell vertex is already strictly inside.
    skip_noncutting_planes: bool = True


def seed_position(seed: Any) -> np.ndarray:
    """Read x, y, z from an attribute-style object or a mapping."""
    try:
        if isinstance(seed, Mapping):
            return np.array([seed["x"], seed["y"], seed["z"]], dtype=float)
        return np.array([seed.x, seed.y, seed.z], dtype=float)
    except (KeyError, AttributeError) as e:
        raise ValueError(f"Seed has no x/y/z coordinates: {seed!r}") from e


@dataclass
class Bounds:
    """Axis-aligned box given by its min and max corners."""
    min: np.ndarray  # (3,)
    max: np.ndarray  # (3,)

    def __post_init__(self):
        self.min = np.asarray(self.min, dtype=float).reshape(3)
        self.max = np.asarray(self.max, dtype=float).reshape(3)

    @classmethod
    def from_mapping(cls, bounds: Mapping) -> "Bounds":
        """Accept the {"min": {x, y, z}, "max": {x, y, z}} form."""
        try:
            corners = bounds["min"], bounds["max"]
        except KeyError as e:
            raise ValueError(f"Bounds mapping needs 'min' and 'max': {bounds!r}") from e
        try:
            return cls(min=seed_position(corners[0]), max=seed_position(corners[1]))
        except ValueError as e:
            raise ValueError(f"Bounds corner has no x/y/z coordinates: {bounds!r}") from e

    @classmethod
    def from_points(cls, points: Sequence[Any]) -> "Bounds":
        """Tight box around the given seeds; a zero box if there are none."""
        if len(points) == 0:
            return cls(min=np.zeros(3), max=np.zeros(3))
        positions = np.array([seed_position(p) for p in points])
        return cls(min=positions.min(axis=0), max=positions.max(axis=0))

    def padded(self, padding: float) -> "Bounds":
        return Bounds(min=self.min - padding, max=self.max + padding)

    @property
    def extents(self) -> np.ndarray:
        return self.max - self.min

    @property
    def volume(self) -> float:
        return float(np.prod(np.clip(self.extents, 0.0, None)))

    def to_box(self) -> ConvexPolyhedron:
        return ConvexPolyhedron.create_box(*self.min, *self.max)

    def to_dict(self) -> Dict:
        return {
            "min": dict(zip("xyz", self.min.tolist())),
            "max": dict(zip("xyz", self.max.tolist())),
        }


def coerce_bounds(bounds: Any) -> Bounds:
    if isinstance(bounds, Bounds):
        return bounds
    if isinstance(bounds, Mapping):
        return Bounds.from_mapping(bounds)
    raise ValueError(f"Unsupported bounds object: {type(bounds)}")


@dataclass
class VoronoiCell:
    """A seed paired with its finished convex cell."""
    seed: Any
    cell: ConvexPolyhedron

    @property
    def position(self) -> np.ndarray:
        return seed_position(self.seed)


def compute_voronoi_cells(
    seeds: Sequence[Any],
    bounds: Any,
    padding: Optional[float] = None,
    config: Optional[VoronoiConfig] = None,
) -> List[VoronoiCell]:
    """Compute the Voronoi cell of every seed inside the padded bounds.

    Args:
        seeds: Objects exposing x, y, z (attributes or mapping keys).
            Passed through unchanged into each VoronoiCell.
        bounds: Bounds, or a {"min": {...}, "max": {...}} mapping.
        padding: Expansion of the bounds on every side. Overrides
            config.padding when given.
        config: Driver parameters.

    Returns:
        One VoronoiCell per seed whose cell is non-empty, in input order.
    """
    if config is None:
        config = VoronoiConfig()
    if padding is None:
        padding = config.padding

    if len(seeds) == 0:
        return []

    box = coerce_bounds(bounds).padded(padding)
    positions = np.array([seed_position(s) for s in seeds])
    eps = config.epsilon

    cells: List[VoronoiCell] = []
    skipped_total = 0
    cut_total = 0

    for i, seed in enumerate(seeds):
        cell = box.to_box()
        here = positions[i]

        # Nearest neighbors first: they shrink the cell fastest.
        distances = np.linalg.norm(positions - here, axis=1)
        order = [j for j in np.argsort(distances, kind="stable") if j != i]

        for j in order:
            if cell.is_empty:
                break
            bisector = Plane.perpendicular_bisector(here, positions[j])

            if config.skip_noncutting_planes:
                max_dist = float(np.max(bisector.signed_distance(cell.vertices)))
                if max_dist < -eps:
                    skipped_total += 1
                    continue

            cell.cut_with_plane(bisector, epsilon=eps)
            cut_total += 1

        if cell.is_empty:
            logger.debug("Seed %d produced an empty cell; omitted", i)
            continue

        logger.debug(
            "Seed %d: %d vertices, %d faces",
            i, cell.vertex_count, cell.face_count,
        )
        cells.append(VoronoiCell(seed=seed, cell=cell))

    logger.info(
        "Computed %d/%d Voronoi cells (%d cuts, %d skipped bisectors)",
        len(cells), len(seeds), cut_total, skipped_total,
    )
    return cells


@dataclass
class TessellationSummary:
    """Aggregate statistics for a set of cells."""
    cell_count: int
    total_volume: float
    box_volume: float
    coverage_ratio: float          # total_volume / box_volume
    mean_faces: float
    min_faces: int
    max_faces: int
    mean_vertices: float
    volumes: List[float] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "cell_count": self.cell_count,
            "total_volume": self.total_volume,
            "box_volume": self.box_volume,
            "coverage_ratio": self.coverage_ratio,
            "mean_faces": self.mean_faces,
            "min_faces": self.min_faces,
            "max_faces": self.max_faces,
            "mean_vertices": self.mean_vertices,
        }


def summarize_cells(
    cells: Sequence[VoronoiCell],
    bounds: Any,
    padding: float = DEFAULT_PADDING,
) -> TessellationSummary:
    """Volume coverage and face/vertex statistics over finished cells."""
    box_volume = coerce_bounds(bounds).padded(padding).volume
    volumes = [c.cell.get_volume() for c in cells]
    face_counts = [c.cell.face_count for c in cells]
    vertex_counts = [c.cell.vertex_count for c in cells]
    total = float(sum(volumes))

    return TessellationSummary(
        cell_count=len(cells),
        total_volume=total,
        box_volume=box_volume,
        coverage_ratio=total / box_volume if box_volume > 0 else 0.0,
        mean_faces=float(np.mean(face_counts)) if face_counts else 0.0,
        min_faces=min(face_counts) if face_counts else 0,
        max_faces=max(face_counts) if face_counts else 0,
        mean_vertices=float(np.mean(vertex_counts)) if vertex_counts else 0.0,
        volumes=volumes,
    )
