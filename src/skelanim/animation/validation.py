"""
Validation

Load-time checks for skeleton and animation data.

Structural problems raise InvariantViolation so bad data is rejected once,
before any instance evaluates it. Numeric oddities that evaluation can
survive (degenerate quaternions, huge rotation jumps, collapsed scales)
are only reported as warnings; the sampler handles them at runtime.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from ..config.settings import (
    DEGENERATE_QUATERNION_LENGTH_SQ,
    QUATERNION_NORMALIZE_TOLERANCE,
    LARGE_ROTATION_ANGLE,
    NEAR_ZERO_SCALE_LENGTH_SQ,
    VELOCITY_SPIKE_THRESHOLD,
)
from .animation import Animation, AnimationChannel
from .errors import InvariantViolation
from .sampler import rotation_angle, sanitize_quaternion
from .skeleton import Bone, Skeleton, validate_bone_order

logger = logging.getLogger(__name__)

_MIN_KEY_SPACING = 1e-4


def validate_skeleton(bones: Sequence[Bone]):
    """
    Check a bone list before building a Skeleton from it.

    Raises:
        InvariantViolation: on forward or cyclic parent references,
            duplicate names or too many bones
    """
    validate_bone_order(bones)


def validate_animation(animation: Animation, skeleton: Optional[Skeleton] = None):
    """
    Check that a clip can be played on a skeleton.

    Duration, rate and keyframe ordering are already enforced when the
    Animation is built; this adds the cross-check against the skeleton.

    Raises:
        InvariantViolation: if a channel targets a bone the skeleton lacks
    """
    if skeleton is None:
        return
    for channel in animation.channels:
        if skeleton.get_bone(channel.bone_name) is None:
            raise InvariantViolation(
                f"Animation '{animation.name}' targets a non-existent bone: '{channel.bone_name}'"
            )


def _channel_anomalies(animation: Animation, channel: AnimationChannel) -> List[str]:
    findings = []
    where = f"animation '{animation.name}', bone '{channel.bone_name}'"

    rotations = []
    for i, key in enumerate(channel.rotation_keys):
        length_sq = float(np.dot(key.value, key.value))
        if length_sq < DEGENERATE_QUATERNION_LENGTH_SQ:
            findings.append(f"{where}: degenerate rotation key {i} (t={key.time:.2f}) treated as identity")
        elif abs(length_sq - 1.0) > QUATERNION_NORMALIZE_TOLERANCE:
            findings.append(f"{where}: non-unit rotation key {i} (t={key.time:.2f}) will be normalized")
        rotations.append(sanitize_quaternion(key.value))

    for i in range(1, len(rotations)):
        angle = rotation_angle(rotations[i - 1], rotations[i])
        if angle > LARGE_ROTATION_ANGLE:
            findings.append(
                f"{where}: large rotation difference ({np.degrees(angle):.1f} deg) "
                f"between keys {i - 1} and {i}"
            )

    if len(rotations) > 2:
        velocities = []
        for i in range(len(rotations) - 1):
            dt = channel.rotation_keys[i + 1].time - channel.rotation_keys[i].time
            if dt > _MIN_KEY_SPACING:
                velocities.append(rotation_angle(rotations[i], rotations[i + 1]) / dt)
        if velocities:
            average = sum(velocities) / len(velocities)
            for i, velocity in enumerate(velocities):
                if average > 0.0 and velocity > average * VELOCITY_SPIKE_THRESHOLD:
                    findings.append(
                        f"{where}: potential velocity spike after key {i} ({velocity / average:.1f}x avg)"
                    )

    for i, key in enumerate(channel.scale_keys):
        if float(np.dot(key.value, key.value)) < NEAR_ZERO_SCALE_LENGTH_SQ:
            findings.append(f"{where}: near-zero scale key {i} (t={key.time:.2f}): {key.value}")

    return findings


def report_numeric_anomalies(animation: Animation) -> List[str]:
    """
    Scan a clip for data the sampler will have to work around.

    Each finding is logged as a warning and returned.

    Args:
        animation: Clip to scan

    Returns:
        Human-readable findings, empty if the clip is clean
    """
    findings = []
    for channel in animation.channels:
        findings.extend(_channel_anomalies(animation, channel))
    for finding in findings:
        logger.warning("Numeric anomaly in %s", finding)
    return findings
