"""
ErgoReach Kinematics.
Vector geometry shared by the calibration, amplification and posture layers.
All angles are in degrees.
"""
from typing import Optional

import numpy as np
from scipy.spatial.transform import Rotation

# Below this squared-length product two directions are considered undefined
ANGLE_EPSILON = 1e-15


def distance(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.linalg.norm(np.asarray(b, dtype=np.float64) - np.asarray(a, dtype=np.float64)))


def normalize(v: np.ndarray, eps: float = 1e-9) -> Optional[np.ndarray]:
    """Unit vector along `v`, or None when `v` is too short to have a direction."""
    v = np.asarray(v, dtype=np.float64)
    norm = np.linalg.norm(v)
    if not np.isfinite(norm) or norm <= eps:
        return None
    return v / norm


def angle(a: np.ndarray, b: np.ndarray) -> float:
    """
    Unsigned angle between two vectors in [0, 180].
    Returns 0 when either vector is degenerate.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if np.sqrt(np.dot(a, a) * np.dot(b, b)) < ANGLE_EPSILON:
        return 0.0
    # atan2 form: accurate near 0 and 180 degrees
    return float(np.degrees(np.arctan2(np.linalg.norm(np.cross(a, b)), np.dot(a, b))))


def signed_angle(a: np.ndarray, b: np.ndarray, axis: np.ndarray) -> float:
    """
    Angle from `a` to `b`, negative when the rotation runs clockwise about `axis`.
    A rotation exactly perpendicular to the sign test counts as positive.
    """
    unsigned = angle(a, b)
    sign = np.dot(np.asarray(axis, dtype=np.float64), np.cross(a, b))
    return -unsigned if sign < 0 else unsigned


def project_on_plane(v: np.ndarray, normal: np.ndarray) -> np.ndarray:
    v = np.asarray(v, dtype=np.float64)
    n = normalize(normal)
    if n is None:
        return v
    return v - np.dot(v, n) * n


def planar_signed_angle(a: np.ndarray, b: np.ndarray, axis: np.ndarray) -> float:
    """Signed angle between `a` and `b` measured only in the plane normal to `axis`."""
    return signed_angle(project_on_plane(a, axis), project_on_plane(b, axis), axis)


def look_rotation(forward: np.ndarray, up: np.ndarray) -> Optional[Rotation]:
    """
    Orientation whose +Z points along `forward` and whose +Y leans toward `up`.
    None when `forward` is degenerate or parallel to `up`.
    """
    z = normalize(forward)
    if z is None:
        return None
    x = normalize(np.cross(up, z))
    if x is None:
        return None
    y = np.cross(z, x)
    return Rotation.from_matrix(np.column_stack([x, y, z]))


def ray_sphere_exit(origin: np.ndarray,
                    direction: np.ndarray,
                    center: np.ndarray,
                    radius: float,
                    eps: float = 1e-9) -> Optional[np.ndarray]:
    """
    Far intersection of a ray with a sphere (the sphere is hit from the inside,
    like an inverted-normal collider). `direction` must be unit length.
    Returns None when the ray misses or the sphere lies behind the origin.
    """
    origin = np.asarray(origin, dtype=np.float64)
    oc = origin - np.asarray(center, dtype=np.float64)
    b = np.dot(oc, direction)
    c = np.dot(oc, oc) - radius * radius
    disc = b * b - c
    if disc < 0:
        return None
    t = -b + np.sqrt(disc)
    if t <= eps:
        return None
    return origin + t * direction
