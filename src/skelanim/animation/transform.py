"""
Transform Utilities

Translation/rotation/scale composition and decomposition of 4x4 transforms.

Matrices are row-major with row vectors (pyrr layout): basis vectors in
rows 0-2, translation in row 3, points transformed as ``p @ M``.
Rotation matrices built here turn points counter-clockwise about the
quaternion axis (right-hand rule).
"""

from typing import Tuple

import numpy as np
from pyrr import matrix33, matrix44, quaternion

_UNIT_AXES = np.eye(3, dtype=np.float64)

# Below this w^2 the rotation is treated as a half turn
_HALF_TURN_W_SQ = 1e-6


def rotation_from_quaternion(q) -> np.ndarray:
    """Row-major 3x3 rotation for a unit quaternion [x, y, z, w]."""
    q = np.asarray(q, dtype=np.float64)
    return matrix33.create_from_quaternion(quaternion.conjugate(q), dtype=np.float64)


def quaternion_from_rotation(rotation) -> np.ndarray:
    """
    Convert a row-major 3x3 rotation into a unit quaternion [x, y, z, w].

    Inverse of rotation_from_quaternion (up to the sign of the quaternion).
    """
    rotation = np.asarray(rotation, dtype=np.float64)
    q = quaternion.conjugate(quaternion.create_from_matrix(rotation, dtype=np.float64))

    if q[3] * q[3] < _HALF_TURN_W_SQ:
        # create_from_matrix signs the axis from the antisymmetric part,
        # which vanishes for half turns; take the signs from the symmetric part
        axis = np.sqrt(np.maximum(0.0, 1.0 + 2.0 * np.diag(rotation) - np.trace(rotation))) / 2.0
        k = int(np.argmax(axis))
        signs = np.where((rotation + rotation.T)[k] < 0.0, -1.0, 1.0)
        signs[k] = 1.0
        antisymmetric = (
            rotation[1, 2] - rotation[2, 1],
            rotation[2, 0] - rotation[0, 2],
            rotation[0, 1] - rotation[1, 0],
        )
        w = np.copysign(abs(q[3]), antisymmetric[k])
        q = np.append(axis * signs, w)

    return quaternion.normalize(q)


def compose_transform(translation, rotation, scale) -> np.ndarray:
    """
    Build a transform from translation, rotation quaternion and scale.

    Row-major scale @ rotation @ translation, equivalent to T * R * S in
    column-major: points are scaled, then rotated, then translated.
    """
    scale_matrix = matrix44.create_from_scale(np.asarray(scale, dtype=np.float64), dtype=np.float64)
    rotation_matrix = matrix44.create_from_matrix33(rotation_from_quaternion(rotation), dtype=np.float64)
    translation_matrix = matrix44.create_from_translation(
        np.asarray(translation, dtype=np.float64), dtype=np.float64
    )
    return scale_matrix @ rotation_matrix @ translation_matrix


def decompose_transform(matrix) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Split a transform into translation, rotation and scale.

    The rotation comes from the normalized basis vectors and the scale
    from their lengths, so any skew or shear is discarded.

    Args:
        matrix: Row-major 4x4 transform

    Returns:
        (translation, quaternion [x, y, z, w], scale)
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    basis = matrix[:3, :3]
    translation = matrix[3, :3].copy()

    scale = np.linalg.norm(basis, axis=1)
    rotation = np.empty((3, 3), dtype=np.float64)
    for axis in range(3):
        # Collapsed axes fall back to the unit axis so the result stays finite
        if scale[axis] > 1e-12:
            rotation[axis] = basis[axis] / scale[axis]
        else:
            rotation[axis] = _UNIT_AXES[axis]

    return translation, quaternion_from_rotation(rotation), scale
