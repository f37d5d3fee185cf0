"""
Mesh and metrics extraction for finished Voronoi cells.

Converts a ConvexPolyhedron into flat render buffers (vertices, fan-triangle
indices, unique edges), per-face centers, volume and centroid. Also builds
trimesh objects from cells and writes them to mesh files.
"""
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import trimesh

from convex_polyhedron import ConvexPolyhedron

logger = logging.getLogger(__name__)

SUPPORTED_EXPORT_FORMATS = ("stl", "obj", "ply", "glb")


@dataclass
class FaceData:
    """One polygon face: its vertex indices and the mean of its vertices."""
    vertices: List[int]
    center: np.ndarray  # (3,)


@dataclass
class MeshData:
    """Render-ready view of a single cell."""
    vertices: np.ndarray            # (3V,) flat [x0, y0, z0, x1, ...]
    indices: np.ndarray             # (3T,) fan-triangle vertex indices
    edges: List[Tuple[int, int]]    # unique undirected (min, max) pairs
    face_data: List[FaceData]
    vertex_count: int
    face_count: int
    volume: float
    centroid: np.ndarray            # (3,) mean vertex position

    @property
    def triangles(self) -> np.ndarray:
        """Triangle indices reshaped to (T, 3)."""
        return self.indices.reshape(-1, 3)

    @property
    def positions(self) -> np.ndarray:
        """Vertex positions reshaped to (V, 3)."""
        return self.vertices.reshape(-1, 3)

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            "vertices": self.vertices.tolist(),
            "indices": self.indices.tolist(),
            "edges": [list(e) for e in self.edges],
            "faces": [
                {"vertices": list(f.vertices), "center": f.center.tolist()}
                for f in self.face_data
            ],
            "vertex_count": self.vertex_count,
            "face_count": self.face_count,
            "volume": self.volume,
            "centroid": self.centroid.tolist(),
        }


def fan_triangulate(faces: Sequence[Sequence[int]]) -> np.ndarray:
    """Fan-triangulate convex faces from their first vertex, flat index array."""
    indices: List[int] = []
    for face in faces:
        if len(face) < 3:
            continue
        for k in range(1, len(face) - 1):
            indices.extend((face[0], face[k], face[k + 1]))
    return np.array(indices, dtype=np.int64)


def cell_to_mesh_data(cell: ConvexPolyhedron) -> MeshData:
    """Flatten a polyhedron into buffers plus volume and centroid.

    Read-only: the polyhedron is not modified.
    """
    return MeshData(
        vertices=np.asarray(cell.vertices, dtype=float).reshape(-1).copy(),
        indices=fan_triangulate(cell.faces),
        edges=cell.get_edges(),
        face_data=[
            FaceData(vertices=list(face), center=center)
            for face, center in zip(cell.faces, cell.face_centers())
        ],
        vertex_count=cell.vertex_count,
        face_count=cell.face_count,
        volume=cell.get_volume(),
        centroid=cell.get_centroid(),
    )


# ─── trimesh conversion ──────────────────────────────────────────────────────

def mesh_data_to_trimesh(mesh_data: MeshData) -> trimesh.Trimesh:
    """Build an unprocessed trimesh so vertex indices stay aligned."""
    return trimesh.Trimesh(
        vertices=mesh_data.positions,
        faces=mesh_data.triangles,
        process=False,
    )


def cell_to_trimesh(cell: ConvexPolyhedron) -> trimesh.Trimesh:
    return mesh_data_to_trimesh(cell_to_mesh_data(cell))


def cells_to_trimesh(cells: Sequence[Any]) -> trimesh.Trimesh:
    """Concatenate the cells of VoronoiCell-like objects into one mesh."""
    meshes = [cell_to_trimesh(c.cell) for c in cells if not c.cell.is_empty]
    if not meshes:
        return trimesh.Trimesh()
    return trimesh.util.concatenate(meshes)


def export_cells(
    cells: Sequence[Any],
    path: str,
    file_type: Optional[str] = None,
) -> str:
    """Write all cells to a single mesh file.

    Args:
        cells: VoronoiCell-like objects with a ``cell`` polyhedron.
        path: Output file path.
        file_type: One of SUPPORTED_EXPORT_FORMATS; inferred from the
            extension when omitted.

    Returns:
        The absolute path written.
    """
    if file_type is None:
        file_type = os.path.splitext(path)[1].lstrip(".").lower()
    if file_type not in SUPPORTED_EXPORT_FORMATS:
        raise ValueError(
            f"Unsupported export format {file_type!r}; "
            f"expected one of {SUPPORTED_EXPORT_FORMATS}"
        )

    mesh = cells_to_trimesh(cells)
    out_path = os.path.abspath(path)
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    mesh.export(out_path, file_type=file_type)
    logger.info(
        "Exported %d cells (%d faces) to %s",
        len(cells), len(mesh.faces), out_path,
    )
    return out_path
