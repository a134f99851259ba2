"""
Keyframe Sampler

Interpolates a single position, rotation or scale track at a query time.

Rotations go through a defensive policy rather than the textbook
shortest-arc slerp: keys are sanitized, keys on opposite hemispheres and
keys more than LARGE_ROTATION_ANGLE apart snap to the nearest key, and
wide (but not huge) arcs use a smoothstep-weighted slerp. This keeps
evaluation away from near-zero intermediate rotations at the cost of a
visible step on bad data.
"""

import logging
from typing import Callable, Optional, Set, Tuple

import numpy as np
from pyrr import quaternion

from ..config.settings import (
    QUATERNION_NORMALIZE_TOLERANCE,
    DEGENERATE_QUATERNION_LENGTH_SQ,
    LARGE_ROTATION_ANGLE,
    MEDIUM_ROTATION_ANGLE,
)
from .animation import KeyframeTrack

logger = logging.getLogger(__name__)

IDENTITY_QUATERNION = quaternion.create(dtype=np.float64)
IDENTITY_QUATERNION.flags.writeable = False

Interpolator = Callable[[np.ndarray, np.ndarray, float], np.ndarray]

# Bad key data already reported; sampling runs every frame
_reported: Set[Tuple[str, bytes]] = set()


def _warn_once(kind: str, data: np.ndarray, message: str, *args):
    key = (kind, np.ascontiguousarray(data).tobytes())
    if key not in _reported:
        _reported.add(key)
        logger.warning(message, *args)


def lerp(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    """Linear interpolation between two vectors."""
    return a * (1.0 - t) + b * t


def smoothstep(t: float) -> float:
    return t * t * (3.0 - 2.0 * t)


def sanitize_quaternion(q: np.ndarray) -> np.ndarray:
    """
    Bring a stored quaternion back to unit length.

    Quaternions with a squared length below DEGENERATE_QUATERNION_LENGTH_SQ
    carry no usable orientation and become identity. Others are normalized
    only when their squared length is off by more than the tolerance, so
    well-formed keys are returned untouched.
    """
    length_sq = float(np.dot(q, q))
    if length_sq < DEGENERATE_QUATERNION_LENGTH_SQ:
        _warn_once("degenerate", q, "Degenerate quaternion %s replaced with identity", q)
        return IDENTITY_QUATERNION
    if abs(length_sq - 1.0) > QUATERNION_NORMALIZE_TOLERANCE:
        return q / np.sqrt(length_sq)
    return q


def rotation_angle(q0: np.ndarray, q1: np.ndarray) -> float:
    """Angle in radians of the rotation taking q0 to q1 (unit quaternions)."""
    dot = abs(float(np.dot(q0, q1)))
    return 2.0 * float(np.arccos(min(dot, 1.0)))


def interpolate_rotation(prev: np.ndarray, next_: np.ndarray, t: float) -> np.ndarray:
    """
    Interpolate two rotation keys with the defensive rotation policy.

    Args:
        prev: Quaternion [x, y, z, w] at the earlier key
        next_: Quaternion [x, y, z, w] at the later key
        t: Interpolation factor in [0, 1]

    Returns:
        Unit quaternion. Exactly prev or next_ when the pair is stepped.
    """
    prev = sanitize_quaternion(prev)
    next_ = sanitize_quaternion(next_)

    dot = float(np.dot(prev, next_))
    if dot < 0.0:
        # Opposite hemispheres: step instead of negating one side
        _warn_once(
            "hemisphere", np.concatenate((prev, next_)),
            "Rotation keys on opposite hemispheres (dot=%.3f); stepping", dot,
        )
        return prev if t < 0.5 else next_

    angle = rotation_angle(prev, next_)
    if angle > LARGE_ROTATION_ANGLE:
        _warn_once(
            "large", np.concatenate((prev, next_)),
            "Rotation keys %.1f degrees apart; stepping", np.degrees(angle),
        )
        return prev if t < 0.5 else next_
    if angle > MEDIUM_ROTATION_ANGLE:
        t = smoothstep(t)

    result = quaternion.slerp(prev, next_, t)
    return result / np.linalg.norm(result)


def sample(keys: KeyframeTrack, query_time: float, duration: float,
           interpolate: Interpolator) -> Optional[np.ndarray]:
    """
    Sample a keyframe track at a given time.

    Args:
        keys: Time-sorted keyframes
        query_time: Time in ticks
        duration: Clip duration in ticks, used to wrap from the last key
            back to the first
        interpolate: Function (prev_value, next_value, factor) -> value

    Returns:
        Interpolated value, or None if the track has no keys
    """
    count = len(keys)
    if count == 0:
        return None
    if count == 1:
        return keys[0].value

    first = keys.first
    last = keys.last

    # Past the last key: interpolate toward the first key across the loop seam
    if query_time >= last.time:
        total_span = first.time + (duration - last.time)
        factor = (query_time - last.time) / total_span if total_span > 0.0 else 0.0
        factor = min(max(factor, 0.0), 1.0)
        return interpolate(last.value, first.value, factor)

    if query_time <= first.time:
        return first.value

    next_index = int(np.searchsorted(keys.times, query_time, side="left"))
    prev_key = keys[next_index - 1]
    next_key = keys[next_index]

    total_time = next_key.time - prev_key.time
    factor = (query_time - prev_key.time) / total_time if total_time > 0.0 else 0.0
    return interpolate(prev_key.value, next_key.value, factor)


def sample_position(keys: KeyframeTrack, query_time: float, duration: float) -> Optional[np.ndarray]:
    return sample(keys, query_time, duration, lerp)


def sample_scale(keys: KeyframeTrack, query_time: float, duration: float) -> Optional[np.ndarray]:
    return sample(keys, query_time, duration, lerp)


def sample_rotation(keys: KeyframeTrack, query_time: float, duration: float) -> Optional[np.ndarray]:
    return sample(keys, query_time, duration, interpolate_rotation)
