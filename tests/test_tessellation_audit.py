"""Tests for tessellation_audit."""
import numpy as np
import pytest

from convex_polyhedron import ConvexPolyhedron
from point_distributions import generate_points
from tessellation_audit import AuditConfig, audit_tessellation, sample_points_in_cell
from voronoi import VoronoiCell, compute_voronoi_cells


class TestAudit:

    def test_random_tessellation_passes(self, random_seeds, random_bounds):
        cells = compute_voronoi_cells(random_seeds, random_bounds, padding=0.5)
        report = audit_tessellation(cells, random_seeds, random_bounds, padding=0.5)
        assert report.passed, report.issues
        assert [c.name for c in report.checks] == ["partition", "nearest_seed", "hull_volume"]
        assert report.to_dict()["passed"] is True

    @pytest.mark.parametrize("distribution_id", ["honeycomb", "bcc", "jittered_grid"])
    def test_generated_distributions_pass(self, distribution_id):
        ps = generate_points(distribution_id, grid_size=3, rng=4)
        cells = compute_voronoi_cells(ps.points, ps.bounding_box, padding=1.0)
        report = audit_tessellation(
            cells, ps.points, ps.bounding_box, padding=1.0,
            config=AuditConfig(samples_per_cell=8),
        )
        assert report.passed, report.issues

    def test_missing_cell_fails_partition(self, two_seeds, cube_bounds):
        cells = compute_voronoi_cells(two_seeds, cube_bounds, padding=0)
        report = audit_tessellation(cells[:1], two_seeds, cube_bounds, padding=0)
        assert not report.passed
        partition = report.checks[0]
        assert partition.status == "fail"
        assert partition.metric_value == pytest.approx(0.5)

    def test_wrong_seed_fails_nearest(self, two_seeds, cube_bounds):
        cells = compute_voronoi_cells(two_seeds, cube_bounds, padding=0)
        swapped = [
            VoronoiCell(seed=cells[1].seed, cell=cells[0].cell),
            VoronoiCell(seed=cells[0].seed, cell=cells[1].cell),
        ]
        report = audit_tessellation(swapped, two_seeds, cube_bounds, padding=0)
        nearest = next(c for c in report.checks if c.name == "nearest_seed")
        assert nearest.status == "fail"

    def test_no_seeds(self, cube_bounds):
        report = audit_tessellation([], [], cube_bounds)
        assert report.passed
        assert report.checks == []


class TestSampling:

    def test_samples_inside_box(self):
        box = ConvexPolyhedron.create_box(0, 0, 0, 1, 2, 3)
        pts = sample_points_in_cell(box.vertices, 50, np.random.default_rng(0))
        assert pts.shape == (58, 3)
        assert np.all(pts >= 0)
        assert np.all(pts <= [1, 2, 3])

    def test_vertices_are_sampled(self):
        box = ConvexPolyhedron.create_box(0, 0, 0, 1, 2, 3)
        pts = sample_points_in_cell(box.vertices, 0, np.random.default_rng(0))
        assert np.array_equal(pts, box.vertices)

    def test_sparse_weights_reach_toward_corners(self):
        box = ConvexPolyhedron.create_box(-1, -1, -1, 1, 1, 1)
        rng = np.random.default_rng(0)
        dense = sample_points_in_cell(box.vertices, 400, rng, alpha=1.0)[8:]
        sparse = sample_points_in_cell(box.vertices, 400, rng, alpha=0.3)[8:]
        assert np.all(np.abs(sparse) <= 1.0)
        assert (
            np.linalg.norm(sparse, axis=1).mean()
            > np.linalg.norm(dense, axis=1).mean()
        )

    def test_sliver_near_vertex_fails_nearest(self, two_seeds, cube_bounds):
        # The left cell overshoots the bisector by a thin slab at x in (0, 0.05].
        left = ConvexPolyhedron.create_box(-2, -2, -2, 0.05, 2, 2)
        right = ConvexPolyhedron.create_box(0.05, -2, -2, 2, 2, 2)
        cells = [
            VoronoiCell(seed=two_seeds[0], cell=left),
            VoronoiCell(seed=two_seeds[1], cell=right),
        ]
        report = audit_tessellation(
            cells, two_seeds, cube_bounds, padding=0,
            config=AuditConfig(samples_per_cell=4),
        )
        nearest = next(c for c in report.checks if c.name == "nearest_seed")
        assert nearest.status == "fail"
        assert nearest.metric_value > 0.03
        assert report.issues[0].startswith("Cell 0:")
