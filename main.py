#!/usr/bin/env python3
"""
Headless animation demo.

Builds a three-bone arm with two procedural clips, plays one, crossfades
into the other and prints where each bone ends up.
"""

import argparse
import logging
import math
import sys

import numpy as np
from pyrr import matrix44, quaternion

from src.skelanim.animation import (
    Animation,
    AnimationChannel,
    AnimationController,
    AnimationLibrary,
    AnimationPlayer,
    AnimatedInstance,
    AnimationSystem,
    Bone,
    Skeleton,
    report_numeric_anomalies,
    validate_animation,
)
from src.skelanim.config.settings import DEFAULT_BLEND_DURATION, DEFAULT_WORKER_COUNT


logger = logging.getLogger(__name__)

MODEL_NAME = "arm"


def build_arm_skeleton() -> Skeleton:
    """Shoulder -> elbow -> wrist, one unit apart along +Y."""
    offset = matrix44.create_from_translation([0.0, 1.0, 0.0], dtype=np.float64)
    bones = [
        Bone("shoulder"),
        Bone("elbow", transform=offset, parent_index=0),
        Bone("wrist", transform=offset, parent_index=1),
    ]
    skeleton = Skeleton(bones, name=MODEL_NAME)
    inverse_binds = skeleton.compute_inverse_bind_poses()
    bones = [
        Bone(bone.name, bone.transform, inverse_binds[i], bone.parent_index)
        for i, bone in enumerate(skeleton.bones)
    ]
    return Skeleton(bones, name=MODEL_NAME)


def _swing(bone_name: str, axis, amplitude: float, duration: float, steps: int = 8) -> AnimationChannel:
    rotation_keys = []
    for step in range(steps):
        time = duration * step / steps
        angle = amplitude * math.sin(2.0 * math.pi * step / steps)
        rotation_keys.append((time, quaternion.create_from_axis_rotation(axis, angle, dtype=np.float64)))
    return AnimationChannel(
        bone_name,
        position_keys=[(0.0, [0.0, 1.0, 0.0])],
        rotation_keys=rotation_keys,
    )


def build_clips():
    wave = Animation("wave", duration=48.0, ticks_per_second=24.0, channels=[
        _swing("elbow", [0.0, 0.0, 1.0], 0.8, 48.0),
        _swing("wrist", [0.0, 0.0, 1.0], 0.4, 48.0),
    ])
    bend = Animation("bend", duration=30.0, ticks_per_second=30.0, channels=[
        _swing("elbow", [1.0, 0.0, 0.0], 1.2, 30.0),
    ])
    return [wave, bend]


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Play and crossfade procedural clips on a three-bone arm.")
    parser.add_argument("--frames", type=int, default=90, help="Number of frames to simulate.")
    parser.add_argument("--dt", type=float, default=1.0 / 30.0, help="Frame time in seconds.")
    parser.add_argument("--blend-at", type=int, default=30, help="Frame at which to crossfade to 'bend'.")
    parser.add_argument("--blend-duration", type=float, default=DEFAULT_BLEND_DURATION,
                        help="Crossfade length in seconds.")
    parser.add_argument("--instances", type=int, default=1, help="Number of arms to animate.")
    parser.add_argument("--workers", type=int, default=DEFAULT_WORKER_COUNT,
                        help="Worker threads (0 = sequential).")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    skeleton = build_arm_skeleton()
    library = AnimationLibrary()
    library.add_skeleton(MODEL_NAME, skeleton)
    for clip in build_clips():
        validate_animation(clip, skeleton)
        report_numeric_anomalies(clip)
        library.add_animation(clip)
    logger.info("Loaded %s", library)

    instances = []
    for i in range(args.instances):
        world = matrix44.create_from_translation([3.0 * i, 0.0, 0.0], dtype=np.float64)
        instances.append(AnimatedInstance(MODEL_NAME, AnimationPlayer("wave"), world_transform=world))

    with AnimationSystem(library, max_workers=args.workers) as system:
        for frame in range(args.frames):
            if frame == args.blend_at:
                for instance in instances:
                    AnimationController(instance).crossfade("bend", args.blend_duration)
                logger.info("Frame %d: crossfading to 'bend'", frame)

            system.update(instances, args.dt)

            player = instances[0].player
            # Bone matrices map bind-pose points into the world; the wrist sits at (0, 2, 0) at rest
            wrist = np.array([0.0, 2.0, 0.0, 1.0]) @ instances[0].bone_matrices.as_array()[2]
            print(
                f"frame {frame:3d}  clip={player.clip_name:<5s} "
                f"t={player.current_time:5.2f}s blend={player.blend_factor:4.2f}  "
                f"wrist=({wrist[0]:6.3f}, {wrist[1]:6.3f}, {wrist[2]:6.3f})"
            )
    return 0


if __name__ == "__main__":
    sys.exit(main())
