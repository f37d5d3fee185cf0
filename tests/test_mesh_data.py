"""Tests for mesh/metrics extraction and trimesh export."""
import json

import numpy as np
import pytest
import trimesh

from convex_polyhedron import ConvexPolyhedron
from geometry_primitives import Plane, vec3
from mesh_data import (
    cell_to_mesh_data,
    cells_to_trimesh,
    export_cells,
    fan_triangulate,
    mesh_data_to_trimesh,
)
from voronoi import compute_voronoi_cells


def expected_index_count(poly):
    total = sum(len(f) for f in poly.faces)
    return 3 * (total - 2 * poly.face_count)


class TestCellToMeshData:

    def test_box(self, unit_box):
        data = cell_to_mesh_data(unit_box)
        assert data.vertex_count == 8
        assert data.face_count == 6
        assert data.vertices.shape == (24,)
        assert len(data.indices) == 36
        assert len(data.edges) == 12
        assert data.volume == pytest.approx(1.0)
        assert np.allclose(data.centroid, [0, 0, 0])

    def test_index_buffer_length_and_unique_edges(self, unit_box):
        unit_box.cut_with_plane(Plane.from_point_and_normal(vec3(0.1, 0, 0), vec3(1, 1, 1)))
        data = cell_to_mesh_data(unit_box)
        assert len(data.indices) == expected_index_count(unit_box)
        keys = [tuple(sorted(e)) for e in data.edges]
        assert len(keys) == len(set(keys))
        assert all(a < b for a, b in data.edges)

    def test_face_centers(self, unit_box):
        data = cell_to_mesh_data(unit_box)
        bottom = data.face_data[0]
        assert bottom.vertices == [0, 3, 2, 1]
        assert np.allclose(bottom.center, [0, 0, -0.5])

    def test_does_not_modify_cell(self, unit_box):
        before = unit_box.vertices.copy()
        data = cell_to_mesh_data(unit_box)
        data.vertices[:] = 0.0
        assert np.array_equal(unit_box.vertices, before)

    def test_empty_cell(self):
        data = cell_to_mesh_data(ConvexPolyhedron.empty())
        assert data.vertex_count == 0
        assert len(data.indices) == 0
        assert data.edges == []
        assert data.volume == 0.0
        assert np.array_equal(data.centroid, np.zeros(3))

    def test_to_dict_is_json_serializable(self, unit_box):
        payload = json.dumps(cell_to_mesh_data(unit_box).to_dict())
        decoded = json.loads(payload)
        assert decoded["vertex_count"] == 8
        assert len(decoded["faces"]) == 6

    def test_fan_triangulate_skips_short_faces(self):
        assert list(fan_triangulate([[0, 1], [0, 1, 2, 3]])) == [0, 1, 2, 0, 2, 3]


class TestTrimeshConversion:

    def test_cell_is_watertight(self, unit_box):
        unit_box.cut_with_plane(Plane.from_point_and_normal(vec3(0.2, 0, 0), vec3(1, 0.5, -0.3)))
        mesh = mesh_data_to_trimesh(cell_to_mesh_data(unit_box))
        assert mesh.is_watertight
        assert mesh.is_winding_consistent
        assert mesh.volume == pytest.approx(unit_box.get_volume())
        assert mesh.volume > 0

    def test_cells_concatenate(self, two_seeds, cube_bounds):
        cells = compute_voronoi_cells(two_seeds, cube_bounds, padding=0)
        mesh = cells_to_trimesh(cells)
        assert len(mesh.faces) == 24
        assert mesh.volume == pytest.approx(64.0)

    @pytest.mark.parametrize("ext", ["stl", "obj", "ply"])
    def test_export_roundtrip(self, two_seeds, cube_bounds, tmp_path, ext):
        cells = compute_voronoi_cells(two_seeds, cube_bounds, padding=0)
        path = export_cells(cells, str(tmp_path / f"cells.{ext}"))
        loaded = trimesh.load(path, force="mesh")
        assert len(loaded.faces) == 24

    def test_export_rejects_unknown_format(self, two_seeds, cube_bounds, tmp_path):
        cells = compute_voronoi_cells(two_seeds, cube_bounds, padding=0)
        with pytest.raises(ValueError):
            export_cells(cells, str(tmp_path / "cells.xyz"))
