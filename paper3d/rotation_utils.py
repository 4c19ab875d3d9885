"""
Quaternion helpers for shape transforms.

Conventions:
- Quaternions are stored as [w, x, y, z] with w >= 0
- Euler angles are radians with an explicit axis order (older project files
  store rotations as [x, y, z, 'XYZ'])
"""

from typing import List, Sequence

import numpy as np
from scipy.spatial.transform import Rotation

IDENTITY_QUATERNION = (1.0, 0.0, 0.0, 0.0)

# Intrinsic rotation order used by older project files
EULER_ORDER = 'XYZ'


def basis_to_quaternion(
    x_axis: Sequence[float],
    y_axis: Sequence[float],
    z_axis: Sequence[float]
) -> List[float]:
    """
    Convert an orthonormal basis to a quaternion [w, x, y, z].

    The axes become the columns of the rotation matrix, so the quaternion
    rotates local +X onto ``x_axis`` and so on.
    """
    matrix = np.column_stack([x_axis, y_axis, z_axis]).astype(float)
    x, y, z, w = Rotation.from_matrix(matrix).as_quat()
    return _normalize_quaternion([w, x, y, z])


def euler_to_quaternion(euler: Sequence[float], order: str = EULER_ORDER) -> List[float]:
    """
    Convert Euler angles in radians to a quaternion [w, x, y, z].

    Args:
        euler: Angles [x, y, z] in radians
        order: Axis order; upper case means intrinsic rotations

    Returns:
        Normalized quaternion with w >= 0
    """
    angles = {axis: angle for axis, angle in zip('XYZ', euler)}
    ordered = [angles[axis] for axis in order.upper()]
    # scipy returns [x, y, z, w], we want [w, x, y, z]
    x, y, z, w = Rotation.from_euler(order.upper(), ordered).as_quat()
    return _normalize_quaternion([w, x, y, z])


def rotate_points(quat: Sequence[float], points: np.ndarray) -> np.ndarray:
    """Rotate an (N, 3) array of points by quaternion [w, x, y, z]."""
    w, x, y, z = quat
    return Rotation.from_quat([x, y, z, w]).apply(points)


def _normalize_quaternion(quat: Sequence[float]) -> List[float]:
    """Normalize quaternion and ensure consistent sign (w >= 0)."""
    q = np.asarray(quat, dtype=float)
    norm = np.linalg.norm(q)
    if norm == 0:
        return list(IDENTITY_QUATERNION)
    q = q / norm
    if q[0] < 0:
        q = -q
    return [float(c) for c in q]
