"""
Animation System

Skeletal animation evaluation: keyframe sampling, pose evaluation,
hierarchy resolution, crossfades and skinning matrices.
"""

from .errors import AnimationError, AnimationDataError, InvariantViolation
from .animation import Keyframe, KeyframeTrack, AnimationChannel, Animation
from .skeleton import Bone, Skeleton, resolve_global_poses
from .sampler import (
    sample,
    sample_position,
    sample_rotation,
    sample_scale,
    interpolate_rotation,
    sanitize_quaternion,
)
from .transform import compose_transform, decompose_transform
from .pose import evaluate_local_pose, evaluate_local_poses, evaluate_global_poses
from .blend import blend_transforms, blend_global_poses
from .skin import BoneMatrices, build_skinning_matrices
from .animation_controller import (
    AnimationPlayer,
    BlendState,
    AnimationController,
    advance,
    start_blend,
    select_clip,
    evaluate_pose,
)
from .library import AnimationLibrary
from .system import AnimatedInstance, AnimationSystem
from .validation import validate_skeleton, validate_animation, report_numeric_anomalies

__all__ = [
    'AnimationError',
    'AnimationDataError',
    'InvariantViolation',
    'Keyframe',
    'KeyframeTrack',
    'AnimationChannel',
    'Animation',
    'Bone',
    'Skeleton',
    'resolve_global_poses',
    'sample',
    'sample_position',
    'sample_rotation',
    'sample_scale',
    'interpolate_rotation',
    'sanitize_quaternion',
    'compose_transform',
    'evaluate_local_pose',
    'evaluate_local_poses',
    'evaluate_global_poses',
    'decompose_transform',
    'blend_transforms',
    'blend_global_poses',
    'BoneMatrices',
    'build_skinning_matrices',
    'AnimationPlayer',
    'BlendState',
    'AnimationController',
    'advance',
    'start_blend',
    'select_clip',
    'evaluate_pose',
    'AnimationLibrary',
    'AnimatedInstance',
    'AnimationSystem',
    'validate_skeleton',
    'validate_animation',
    'report_numeric_anomalies',
]
