"""
Core geometry types for plane-cutting Voronoi construction.

Vectors are plain numpy (3,) float arrays. Every helper returns a new array
and never mutates its arguments. Provides Plane (unit normal + offset, with
perpendicular-bisector construction) and the in-plane basis used to order
cap-face vertices.
"""
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np

# Single tolerance for every inside/outside/on classification.
EPSILON = 1e-10

ArrayLike3 = Union[np.ndarray, Sequence[float]]


def vec3(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> np.ndarray:
    """Build a (3,) float vector."""
    return np.array([x, y, z], dtype=float)


def as_vec3(v: ArrayLike3) -> np.ndarray:
    return np.asarray(v, dtype=float).reshape(3)


def add(a: ArrayLike3, b: ArrayLike3) -> np.ndarray:
    return as_vec3(a) + as_vec3(b)


def sub(a: ArrayLike3, b: ArrayLike3) -> np.ndarray:
    return as_vec3(a) - as_vec3(b)


def scale(v: ArrayLike3, s: float) -> np.ndarray:
    return as_vec3(v) * float(s)


def dot(a: ArrayLike3, b: ArrayLike3) -> float:
    return float(np.dot(as_vec3(a), as_vec3(b)))


def cross(a: ArrayLike3, b: ArrayLike3) -> np.ndarray:
    return np.cross(as_vec3(a), as_vec3(b))


def length(v: ArrayLike3) -> float:
    return float(np.linalg.norm(as_vec3(v)))


def normalize(v: ArrayLike3) -> np.ndarray:
    """Unit vector in the direction of *v*, or the zero vector if degenerate."""
    v = as_vec3(v)
    n = float(np.linalg.norm(v))
    if n < EPSILON:
        return np.zeros(3)
    return v / n


def vectors_equal(a: ArrayLike3, b: ArrayLike3) -> bool:
    """Componentwise equality within EPSILON."""
    return bool(np.all(np.abs(as_vec3(a) - as_vec3(b)) < EPSILON))


def midpoint(a: ArrayLike3, b: ArrayLike3) -> np.ndarray:
    return (as_vec3(a) + as_vec3(b)) * 0.5


@dataclass
class Plane:
    """An oriented plane: points p with normal . p + offset = 0.

    Signed distance is positive on the side the normal points to.
    """
    normal: np.ndarray    # (3,) unit normal, or zero for a degenerate plane
    offset: float

    def __post_init__(self):
        self.normal = normalize(self.normal)
        self.offset = float(self.offset)

    @classmethod
    def from_point_and_normal(cls, point: ArrayLike3, normal: ArrayLike3) -> "Plane":
        """Plane through *point*; *normal* need not be unit length."""
        n = normalize(normal)
        return cls(normal=n, offset=-float(np.dot(n, as_vec3(point))))

    @classmethod
    def perpendicular_bisector(cls, p1: ArrayLike3, p2: ArrayLike3) -> "Plane":
        """Plane through the midpoint of p1-p2 with normal pointing toward p2.

        Coincident points give a zero-normal plane (distance 0 everywhere).
        """
        return cls.from_point_and_normal(midpoint(p1, p2), sub(p2, p1))

    def signed_distance(self, points):
        """Signed distance of a (3,) point, or of each row of an (N, 3) array."""
        pts = np.asarray(points, dtype=float)
        if pts.ndim == 1:
            return float(pts @ self.normal + self.offset)
        return pts @ self.normal + self.offset

    @property
    def is_degenerate(self) -> bool:
        return not np.any(self.normal)


# ─── Plane basis ─────────────────────────────────────────────────────────────

def make_plane_basis(normal: ArrayLike3) -> Tuple[np.ndarray, np.ndarray]:
    """Build an orthonormal (tangent, bitangent) basis perpendicular to normal.

    The tangent is seeded from the world axis least parallel to the normal.
    (tangent, bitangent, normal) is right-handed, so increasing polar angle
    in this basis runs counter-clockwise when viewed from the normal's tip.
    """
    n = normalize(normal)
    if abs(n[0]) < 0.9:
        ref = np.array([1.0, 0.0, 0.0])
    else:
        ref = np.array([0.0, 1.0, 0.0])
    tangent = normalize(np.cross(ref, n))
    bitangent = np.cross(n, tangent)
    return tangent, bitangent
