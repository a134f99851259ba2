"""
Pose Evaluator

Turns a clip's keyframe tracks into per-bone local and global transforms.
"""

import numpy as np

from .animation import Animation
from .sampler import sample_position, sample_rotation, sample_scale, IDENTITY_QUATERNION
from .skeleton import Skeleton, resolve_global_poses
from .transform import compose_transform

ZERO_TRANSLATION = np.zeros(3, dtype=np.float64)
UNIT_SCALE = np.ones(3, dtype=np.float64)


def seconds_to_ticks(animation: Animation, seconds: float) -> float:
    return seconds * animation.ticks_per_second


def evaluate_local_pose(animation: Animation, bone_name: str, time_in_ticks: float,
                        bind_transform) -> np.ndarray:
    """
    Evaluate one bone's local transform for one clip.

    Args:
        animation: Clip to sample
        bone_name: Bone to evaluate
        time_in_ticks: Sample time
        bind_transform: Returned unchanged when no channel targets the bone

    Returns:
        4x4 local transform
    """
    channel = animation.channel_for(bone_name)
    if channel is None:
        return bind_transform

    duration = animation.duration
    position = sample_position(channel.position_keys, time_in_ticks, duration)
    rotation = sample_rotation(channel.rotation_keys, time_in_ticks, duration)
    scale = sample_scale(channel.scale_keys, time_in_ticks, duration)

    return compose_transform(
        ZERO_TRANSLATION if position is None else position,
        IDENTITY_QUATERNION if rotation is None else rotation,
        UNIT_SCALE if scale is None else scale,
    )


def evaluate_local_poses(skeleton: Skeleton, animation: Animation, time_in_ticks: float) -> np.ndarray:
    """Local transform of every bone, shape (N, 4, 4)."""
    local_poses = np.empty((len(skeleton), 4, 4), dtype=np.float64)
    for i, bone in enumerate(skeleton.bones):
        local_poses[i] = evaluate_local_pose(animation, bone.name, time_in_ticks, bone.transform)
    return local_poses


def evaluate_global_poses(skeleton: Skeleton, animation: Animation, time_in_ticks: float) -> np.ndarray:
    """Model-space transform of every bone for a clip at a time in ticks."""
    return resolve_global_poses(skeleton, evaluate_local_poses(skeleton, animation, time_in_ticks))
