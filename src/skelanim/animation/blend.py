"""
Pose Blending

Per-bone crossfade between two sets of global poses.

Each transform is decomposed (see transform.decompose_transform),
translation and scale are lerped, rotation is slerped, and the result is
recomposed. Skew is lost in the process; bind-pose bones carry none.
"""

import numpy as np
from pyrr import quaternion

from .sampler import lerp
from .transform import compose_transform, decompose_transform


def blend_transforms(a, b, factor: float) -> np.ndarray:
    """
    Blend two transforms component-wise.

    Translation and scale are lerped, rotation is slerped along the
    shortest arc.
    """
    translation_a, rotation_a, scale_a = decompose_transform(a)
    translation_b, rotation_b, scale_b = decompose_transform(b)

    if np.dot(rotation_a, rotation_b) < 0.0:
        rotation_b = -rotation_b
    rotation = quaternion.slerp(rotation_a, rotation_b, factor)
    rotation = rotation / np.linalg.norm(rotation)

    return compose_transform(
        lerp(translation_a, translation_b, factor),
        rotation,
        lerp(scale_a, scale_b, factor),
    )


def blend_global_poses(current_poses, target_poses, factor: float) -> np.ndarray:
    """
    Blend two sets of global poses bone by bone.

    Args:
        current_poses: (N, 4, 4) poses of the clip being faded out
        target_poses: (N, 4, 4) poses of the clip being faded in
        factor: Blend weight in [0, 1]; 0 keeps current_poses

    Returns:
        (N, 4, 4) blended poses
    """
    current_poses = np.asarray(current_poses, dtype=np.float64)
    target_poses = np.asarray(target_poses, dtype=np.float64)
    blended = np.empty_like(current_poses)
    for i in range(len(current_poses)):
        blended[i] = blend_transforms(current_poses[i], target_poses[i], factor)
    return blended
