"""
Convex polyhedron stored as an index arena, with half-space clipping.

Vertices live in an (N, 3) array; each face is a list of vertex indices
wound counter-clockwise when viewed from outside the solid. Clipping
rebuilds both lists in a single pass:

1. Classify every vertex against the plane (inside / on / outside)
2. Keep inside and on vertices, remapping their indices
3. Walk each face, inserting one shared intersection vertex per cut edge
4. Close the hole with a cap face lying in the cutting plane
"""
import logging
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

import numpy as np

from geometry_primitives import EPSILON, Plane, make_plane_basis

logger = logging.getLogger(__name__)

# Canonical box topology. Vertex order is
# (min,min,min) (max,min,min) (max,max,min) (min,max,min) then the same at max z.
_BOX_FACES: Tuple[Tuple[int, ...], ...] = (
    (0, 3, 2, 1),  # bottom (z = min)
    (4, 5, 6, 7),  # top (z = max)
    (0, 1, 5, 4),  # front (y = min)
    (2, 3, 7, 6),  # back (y = max)
    (0, 4, 7, 3),  # left (x = min)
    (1, 2, 6, 5),  # right (x = max)
)


class VertexSide(Enum):
    """Position of a vertex relative to a cutting plane."""
    INSIDE = -1
    ON = 0
    OUTSIDE = 1


def classify_distance(d: float, epsilon: float = EPSILON) -> VertexSide:
    if d < -epsilon:
        return VertexSide.INSIDE
    if d > epsilon:
        return VertexSide.OUTSIDE
    return VertexSide.ON


def edge_key(i: int, j: int) -> Tuple[int, int]:
    """Order-independent key for the undirected edge (i, j)."""
    return (i, j) if i < j else (j, i)


class ConvexPolyhedron:
    """A closed convex solid described by vertices and CCW index faces."""

    def __init__(
        self,
        vertices: Optional[np.ndarray] = None,
        faces: Optional[List[List[int]]] = None,
    ):
        if vertices is None:
            vertices = np.zeros((0, 3))
        self.vertices = np.asarray(vertices, dtype=float).reshape(-1, 3)
        self.faces: List[List[int]] = [list(f) for f in (faces or [])]

    @classmethod
    def empty(cls) -> "ConvexPolyhedron":
        return cls()

    @classmethod
    def create_box(
        cls,
        min_x: float, min_y: float, min_z: float,
        max_x: float, max_y: float, max_z: float,
    ) -> "ConvexPolyhedron":
        """Axis-aligned box with 8 vertices and 6 outward-wound quad faces."""
        vertices = np.array([
            [min_x, min_y, min_z],
            [max_x, min_y, min_z],
            [max_x, max_y, min_z],
            [min_x, max_y, min_z],
            [min_x, min_y, max_z],
            [max_x, min_y, max_z],
            [max_x, max_y, max_z],
            [min_x, max_y, max_z],
        ], dtype=float)
        return cls(vertices, [list(f) for f in _BOX_FACES])

    def copy(self) -> "ConvexPolyhedron":
        return ConvexPolyhedron(self.vertices.copy(), [list(f) for f in self.faces])

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def face_count(self) -> int:
        return len(self.faces)

    @property
    def is_empty(self) -> bool:
        return len(self.vertices) == 0

    def clear(self) -> None:
        self.vertices = np.zeros((0, 3))
        self.faces = []

    # ─── Clipping ────────────────────────────────────────────────────────────

    def cut_with_plane(self, plane: Plane, epsilon: float = EPSILON) -> None:
        """Clip in place, keeping the half-space where signed distance <= 0.

        A plane with no vertex outside leaves the solid untouched. A plane
        with no vertex inside removes it entirely.
        """
        if self.is_empty:
            return

        distances = plane.signed_distance(self.vertices)
        sides = [classify_distance(float(d), epsilon) for d in distances]

        if VertexSide.OUTSIDE not in sides:
            return
        if VertexSide.INSIDE not in sides:
            self.clear()
            return

        new_vertices: List[np.ndarray] = []
        vertex_map: Dict[int, int] = {}
        for i, side in enumerate(sides):
            if side is not VertexSide.OUTSIDE:
                vertex_map[i] = len(new_vertices)
                new_vertices.append(self.vertices[i].copy())

        edge_intersections: Dict[Tuple[int, int], int] = {}

        def intersection_index(i: int, j: int) -> int:
            key = edge_key(i, j)
            if key in edge_intersections:
                return edge_intersections[key]
            d1, d2 = float(distances[i]), float(distances[j])
            t = d1 / (d1 - d2)
            v1, v2 = self.vertices[i], self.vertices[j]
            new_vertices.append(v1 + t * (v2 - v1))
            edge_intersections[key] = len(new_vertices) - 1
            return edge_intersections[key]

        new_faces: List[List[int]] = []
        # (cap vertex, inside original index, outside original index)
        cap_edges: List[Tuple[int, int, int]] = []

        for face in self.faces:
            new_face: List[int] = []
            n = len(face)
            for k in range(n):
                curr = face[k]
                nxt = face[(k + 1) % n]
                curr_side = sides[curr]
                next_side = sides[nxt]

                if curr_side is not VertexSide.OUTSIDE:
                    new_face.append(vertex_map[curr])

                if curr_side is VertexSide.INSIDE and next_side is VertexSide.OUTSIDE:
                    idx = intersection_index(curr, nxt)
                    new_face.append(idx)
                    cap_edges.append((idx, curr, nxt))
                elif curr_side is VertexSide.OUTSIDE and next_side is VertexSide.INSIDE:
                    idx = intersection_index(curr, nxt)
                    new_face.append(idx)
                    cap_edges.append((idx, nxt, curr))
                elif curr_side is VertexSide.ON and next_side is VertexSide.OUTSIDE:
                    cap_edges.append((vertex_map[curr], curr, nxt))
                elif curr_side is VertexSide.OUTSIDE and next_side is VertexSide.ON:
                    cap_edges.append((vertex_map[nxt], nxt, curr))

            if len(new_face) >= 3:
                new_faces.append(new_face)

        vertices_arr = np.array(new_vertices, dtype=float).reshape(-1, 3)

        cap = _build_cap_face(cap_edges, vertices_arr, plane)
        if cap is not None:
            new_faces.append(cap)
        else:
            logger.debug("Cut produced no cap face (%d cap edges)", len(cap_edges))

        self.vertices = vertices_arr
        self.faces = new_faces

    # ─── Topology and metrics ────────────────────────────────────────────────

    def get_edges(self) -> List[Tuple[int, int]]:
        """Unique undirected edges as (min, max) pairs, in first-seen order."""
        seen: Set[Tuple[int, int]] = set()
        edges: List[Tuple[int, int]] = []
        for face in self.faces:
            n = len(face)
            for k in range(n):
                key = edge_key(face[k], face[(k + 1) % n])
                if key not in seen:
                    seen.add(key)
                    edges.append(key)
        return edges

    def get_volume(self) -> float:
        """Enclosed volume via the divergence theorem over fan triangles."""
        if len(self.vertices) < 4 or len(self.faces) < 4:
            return 0.0
        total = 0.0
        for face in self.faces:
            if len(face) < 3:
                continue
            v0 = self.vertices[face[0]]
            for k in range(1, len(face) - 1):
                v1 = self.vertices[face[k]]
                v2 = self.vertices[face[k + 1]]
                total += float(np.dot(v0, np.cross(v1, v2))) / 6.0
        return abs(total)

    def get_centroid(self) -> np.ndarray:
        """Mean vertex position (not the volumetric centroid)."""
        if self.is_empty:
            return np.zeros(3)
        return self.vertices.mean(axis=0)

    def face_centers(self) -> List[np.ndarray]:
        return [self.vertices[face].mean(axis=0) for face in self.faces]

    def __repr__(self) -> str:
        return f"ConvexPolyhedron(vertices={self.vertex_count}, faces={self.face_count})"


def _build_cap_face(
    cap_edges: List[Tuple[int, int, int]],
    vertices: np.ndarray,
    plane: Plane,
) -> Optional[List[int]]:
    """Order the unique cap vertices into a polygon lying in the cut plane.

    The cap's outward normal is the cutting plane's normal, so sorting by
    polar angle in a right-handed basis around it winds the cap CCW from
    outside like every other face.
    """
    if len(cap_edges) < 3:
        return None

    cap_indices: List[int] = []
    for idx, _, _ in cap_edges:
        if idx not in cap_indices:
            cap_indices.append(idx)
    if len(cap_indices) < 3:
        return None

    points = vertices[cap_indices]
    center = points.mean(axis=0)
    tangent, bitangent = make_plane_basis(plane.normal)
    rel = points - center
    angles = np.arctan2(rel @ bitangent, rel @ tangent)
    order = np.argsort(angles, kind="stable")
    return [cap_indices[k] for k in order]
