"""
skelanim - Skeletal Animation Evaluation Core

Turns keyframed clips and a bone hierarchy into per-bone skinning
matrices every frame, with crossfades between clips.
"""

# Configuration
from .config.settings import *

# Animation
from .animation import (
    Animation,
    AnimationChannel,
    AnimationController,
    AnimationDataError,
    AnimationError,
    AnimationLibrary,
    AnimationPlayer,
    AnimatedInstance,
    AnimationSystem,
    BlendState,
    Bone,
    BoneMatrices,
    InvariantViolation,
    Keyframe,
    KeyframeTrack,
    Skeleton,
)

__version__ = "0.1.0"
__all__ = [
    # Config (exported via *)
    # Data
    "Keyframe",
    "KeyframeTrack",
    "AnimationChannel",
    "Animation",
    "Bone",
    "Skeleton",
    "AnimationLibrary",
    # Playback
    "AnimationPlayer",
    "BlendState",
    "AnimationController",
    "AnimatedInstance",
    "AnimationSystem",
    "BoneMatrices",
    # Errors
    "AnimationError",
    "AnimationDataError",
    "InvariantViolation",
]
