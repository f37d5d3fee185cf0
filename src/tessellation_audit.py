"""
Audit a finished tessellation against the properties a Voronoi partition
must have.

Three checks, each reported as a pass/fail AuditCheck:
1. Partition: cell volumes sum to the padded box volume
2. Nearest seed: sampled points inside each cell are closest to that
   cell's own seed (KDTree over all seed positions)
3. Convexity: each cell's volume matches the convex hull of its vertices
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from scipy.spatial import ConvexHull, KDTree, QhullError

from voronoi import DEFAULT_PADDING, VoronoiCell, coerce_bounds, seed_position

logger = logging.getLogger(__name__)


@dataclass
class AuditConfig:
    """Tolerances and sampling parameters for the audit."""
    samples_per_cell: int = 32
    dirichlet_alpha: float = 0.3
    volume_rel_tolerance: float = 1e-6
    distance_tolerance: float = 1e-7
    hull_rel_tolerance: float = 1e-6
    rng_seed: int = 0


@dataclass
class AuditCheck:
    """A single pass/fail check."""
    name: str
    status: str  # "pass" | "fail"
    metric_value: float
    threshold: float
    message: str


@dataclass
class AuditReport:
    """Outcome of all checks on one tessellation."""
    checks: List[AuditCheck] = field(default_factory=list)
    issues: List[str] = field(default_factory=list)
    cell_count: int = 0
    seed_count: int = 0

    @property
    def passed(self) -> bool:
        return all(c.status == "pass" for c in self.checks)

    def to_dict(self) -> Dict:
        return {
            "passed": self.passed,
            "cell_count": self.cell_count,
            "seed_count": self.seed_count,
            "checks": [
                {
                    "name": c.name,
                    "status": c.status,
                    "metric_value": c.metric_value,
                    "threshold": c.threshold,
                    "message": c.message,
                }
                for c in self.checks
            ],
            "issues": list(self.issues),
        }


def sample_points_in_cell(
    vertices: np.ndarray,
    n: int,
    rng: np.random.Generator,
    alpha: float = 1.0,
) -> np.ndarray:
    """Sample points inside a convex cell.

    Returns the vertices themselves followed by *n* random convex
    combinations of them. Dirichlet weights with alpha < 1 are sparse, which
    pushes samples out toward faces and corners instead of the vertex mean.
    """
    weights = rng.dirichlet(np.full(len(vertices), alpha), size=n)
    return np.vstack([vertices, weights @ vertices])


def audit_tessellation(
    cells: Sequence[VoronoiCell],
    seeds: Sequence[Any],
    bounds: Any,
    padding: float = DEFAULT_PADDING,
    config: Optional[AuditConfig] = None,
) -> AuditReport:
    """Check partition, nearest-seed and convexity properties of *cells*.

    Args:
        cells: Output of compute_voronoi_cells.
        seeds: The full seed list the cells were computed from.
        bounds: The unpadded bounds passed to compute_voronoi_cells.
        padding: The padding passed to compute_voronoi_cells.
        config: Audit parameters.

    Returns:
        AuditReport; ``passed`` is True when every check passes.
    """
    if config is None:
        config = AuditConfig()

    report = AuditReport(cell_count=len(cells), seed_count=len(seeds))
    if len(seeds) == 0:
        return report

    report.checks.append(_check_partition(cells, bounds, padding, config, report))
    report.checks.append(_check_nearest_seed(cells, seeds, config, report))
    report.checks.append(_check_hull_volume(cells, config, report))

    logger.info(
        "Audit %s: %s",
        "passed" if report.passed else "FAILED",
        ", ".join(f"{c.name}={c.status}" for c in report.checks),
    )
    return report


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

def _check_partition(cells, bounds, padding, config, report) -> AuditCheck:
    box_volume = coerce_bounds(bounds).padded(padding).volume
    total = float(sum(c.cell.get_volume() for c in cells))
    rel_error = abs(total - box_volume) / box_volume if box_volume > 0 else 0.0
    status = "pass" if rel_error <= config.volume_rel_tolerance else "fail"
    if status == "fail":
        report.issues.append(
            f"Cell volumes sum to {total:.6g}, box volume is {box_volume:.6g}"
        )
    return AuditCheck(
        name="partition",
        status=status,
        metric_value=rel_error,
        threshold=config.volume_rel_tolerance,
        message=f"Volume coverage error {rel_error:.2e}",
    )


def _check_nearest_seed(cells, seeds, config, report) -> AuditCheck:
    positions = np.array([seed_position(s) for s in seeds])
    tree = KDTree(positions)
    rng = np.random.default_rng(config.rng_seed)

    worst = 0.0
    violations = 0
    for idx, cell in enumerate(cells):
        own = seed_position(cell.seed)
        samples = sample_points_in_cell(
            cell.cell.vertices, config.samples_per_cell, rng,
            alpha=config.dirichlet_alpha,
        )
        nearest, _ = tree.query(samples)
        own_dist = np.linalg.norm(samples - own, axis=1)
        excess = own_dist - nearest
        cell_worst = float(np.max(excess))
        worst = max(worst, cell_worst)
        if cell_worst > config.distance_tolerance:
            violations += 1
            report.issues.append(
                f"Cell {idx}: sample is {cell_worst:.3g} closer to another seed"
            )

    return AuditCheck(
        name="nearest_seed",
        status="pass" if violations == 0 else "fail",
        metric_value=worst,
        threshold=config.distance_tolerance,
        message=f"{violations} cells with samples nearer another seed",
    )


def _check_hull_volume(cells, config, report) -> AuditCheck:
    worst = 0.0
    failures = 0
    for idx, cell in enumerate(cells):
        volume = cell.cell.get_volume()
        try:
            hull_volume = float(ConvexHull(cell.cell.vertices).volume)
        except QhullError as e:
            failures += 1
            report.issues.append(f"Cell {idx}: convex hull failed ({e})")
            continue
        rel = abs(volume - hull_volume) / hull_volume if hull_volume > 0 else 0.0
        worst = max(worst, rel)
        if rel > config.hull_rel_tolerance:
            failures += 1
            report.issues.append(
                f"Cell {idx}: volume {volume:.6g} differs from hull {hull_volume:.6g}"
            )

    return AuditCheck(
        name="hull_volume",
        status="pass" if failures == 0 else "fail",
        metric_value=worst,
        threshold=config.hull_rel_tolerance,
        message=f"{failures} cells disagree with their convex hull",
    )
