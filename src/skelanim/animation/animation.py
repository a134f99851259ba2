"""
Animation

Keyframe animation data: keyframes, per-bone channels and clips.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional

import numpy as np

from .errors import InvariantViolation

logger = logging.getLogger(__name__)


def _frozen_array(value, size: int, what: str) -> np.ndarray:
    """Copy a value into a read-only float64 array of the given length."""
    array = np.array(value, dtype=np.float64).reshape(-1)
    if array.shape != (size,):
        raise InvariantViolation(f"{what} must have {size} components, got {array.shape[0]}")
    array.flags.writeable = False
    return array


class Keyframe:
    """
    Single keyframe in an animation.

    Stores time (in ticks) and value for a specific property.
    """

    __slots__ = ("time", "value")

    def __init__(self, time: float, value):
        """
        Initialize keyframe.

        Args:
            time: Time in ticks (non-negative)
            value: Vector3 for position/scale, Quaternion [x, y, z, w] for rotation
        """
        self.time = float(time)
        value = np.array(value, dtype=np.float64)
        value.flags.writeable = False
        self.value = value

    def __repr__(self):
        return f"Keyframe(t={self.time:.3f}, v={self.value})"


class KeyframeTrack:
    """
    Time-sorted keyframes for one property of one channel.

    The keyframe times are cached as a numpy array so samplers can
    binary-search them.
    """

    def __init__(self, keyframes: Iterable = (), size: int = 3, what: str = "keyframe"):
        """
        Initialize track.

        Args:
            keyframes: Keyframe objects or (time, value) pairs, sorted by time
            size: Number of components every value must have
            what: Label used in error messages
        """
        keys: List[Keyframe] = []
        for key in keyframes:
            if isinstance(key, Keyframe):
                time, value = key.time, key.value
            else:
                time, value = key
            keys.append(Keyframe(time, _frozen_array(value, size, what)))

        times = np.array([key.time for key in keys], dtype=np.float64)
        if times.size:
            if not np.all(np.isfinite(times)) or times[0] < 0.0:
                raise InvariantViolation(f"{what} times must be finite and non-negative")
            if np.any(np.diff(times) < 0.0):
                raise InvariantViolation(f"{what} times are not sorted ascending")
        times.flags.writeable = False

        self._keys = tuple(keys)
        self.times = times
        self.size = size

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[Keyframe]:
        return iter(self._keys)

    def __getitem__(self, index) -> Keyframe:
        return self._keys[index]

    @property
    def first(self) -> Keyframe:
        return self._keys[0]

    @property
    def last(self) -> Keyframe:
        return self._keys[-1]

    def __repr__(self):
        return f"KeyframeTrack(keys={len(self._keys)})"


class AnimationChannel:
    """
    Animation channel drives a single bone.

    Holds three independently sized keyframe tracks: position, rotation
    and scale. Any of them may be empty.
    """

    def __init__(self, bone_name: str, position_keys=(), rotation_keys=(), scale_keys=()):
        """
        Initialize animation channel.

        Args:
            bone_name: Name of the bone this channel animates
            position_keys: Keyframes with Vector3 translations
            rotation_keys: Keyframes with unit quaternions [x, y, z, w]
            scale_keys: Keyframes with Vector3 scales (components > 0)
        """
        self.bone_name = bone_name
        self.position_keys = KeyframeTrack(position_keys, 3, f"'{bone_name}' position")
        self.rotation_keys = KeyframeTrack(rotation_keys, 4, f"'{bone_name}' rotation")
        self.scale_keys = KeyframeTrack(scale_keys, 3, f"'{bone_name}' scale")

        for i, key in enumerate(self.scale_keys):
            if np.any(key.value <= 0.0):
                raise InvariantViolation(
                    f"'{bone_name}' scale keyframe {i} has zero or negative components: {key.value}"
                )

    def is_empty(self) -> bool:
        return not (self.position_keys or self.rotation_keys or self.scale_keys)

    def __repr__(self):
        return (
            f"AnimationChannel(bone='{self.bone_name}', positions={len(self.position_keys)}, "
            f"rotations={len(self.rotation_keys)}, scales={len(self.scale_keys)})"
        )


class Animation:
    """
    Complete animation clip with multiple channels.

    Duration and keyframe times are expressed in ticks; ticks_per_second
    converts playback time in seconds into ticks. Clips are immutable once
    built and may be shared between any number of instances.
    """

    def __init__(self, name: str, duration: float, ticks_per_second: float,
                 channels: Iterable[AnimationChannel] = ()):
        """
        Initialize animation.

        Args:
            name: Animation name
            duration: Clip length in ticks (> 0)
            ticks_per_second: Playback rate (> 0)
            channels: One channel per animated bone
        """
        duration = float(duration)
        ticks_per_second = float(ticks_per_second)
        if not duration > 0.0:
            raise InvariantViolation(f"Animation '{name}' has a non-positive duration: {duration}")
        if not ticks_per_second > 0.0:
            raise InvariantViolation(
                f"Animation '{name}' has non-positive ticks_per_second: {ticks_per_second}"
            )

        self.name = name
        self.duration = duration
        self.ticks_per_second = ticks_per_second
        self.channels = tuple(channels)

        # Bone name -> channel, built once instead of scanning per bone per frame
        self._channel_by_bone: Dict[str, AnimationChannel] = {}
        for channel in self.channels:
            if channel.bone_name in self._channel_by_bone:
                logger.warning(
                    "Animation '%s' has more than one channel for bone '%s'; using the first",
                    name, channel.bone_name,
                )
                continue
            self._channel_by_bone[channel.bone_name] = channel

    @property
    def duration_in_seconds(self) -> float:
        return self.duration / self.ticks_per_second

    def channel_for(self, bone_name: str) -> Optional[AnimationChannel]:
        """Return the channel driving a bone, or None if the bone is not animated."""
        return self._channel_by_bone.get(bone_name)

    def bone_names(self) -> List[str]:
        return list(self._channel_by_bone)

    def __repr__(self):
        return (
            f"Animation(name='{self.name}', duration={self.duration:.2f} ticks, "
            f"tps={self.ticks_per_second:g}, channels={len(self.channels)})"
        )
