"""
Animation Controller

Manages animation playback, blending, and state.

Per-instance playback state lives in an AnimationPlayer record. Every
transition (frame tick, clip selection, crossfade request) is a pure
function that returns a new record, so evaluation never touches shared
or ambient state.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from ..config.settings import DEFAULT_BLEND_DURATION, DEFAULT_LOOPING, DEFAULT_PLAYBACK_SPEED
from .animation import Animation
from .blend import blend_global_poses
from .pose import evaluate_global_poses, seconds_to_ticks
from .skeleton import Skeleton

logger = logging.getLogger(__name__)


class BlendState(Enum):
    """Crossfade state of a player."""
    IDLE = "idle"          # No target clip
    BLENDING = "blending"  # Fading from the current clip into the target clip


@dataclass
class AnimationPlayer:
    """Playback state of one animated instance. Times are in seconds."""

    clip_name: str
    target_clip_name: Optional[str] = None
    current_time: float = 0.0
    target_time: float = 0.0
    blend_factor: float = 0.0
    blend_duration: float = DEFAULT_BLEND_DURATION
    speed: float = DEFAULT_PLAYBACK_SPEED
    looping: bool = DEFAULT_LOOPING
    playing: bool = True

    @property
    def state(self) -> BlendState:
        return BlendState.IDLE if self.target_clip_name is None else BlendState.BLENDING

    @property
    def is_blending(self) -> bool:
        return self.target_clip_name is not None


def _advance_time(time: float, delta: float, duration: float, looping: bool) -> Tuple[float, bool]:
    """
    Move a playback time and apply looping or clamping.

    Returns:
        (new_time, still_playing)
    """
    time += delta
    if looping:
        return time % duration, True
    if time >= duration:
        return duration, False
    if time < 0.0:
        return 0.0, False
    return time, True


def select_clip(player: AnimationPlayer, clip_name: str) -> AnimationPlayer:
    """Switch to another clip from its start, cancelling any crossfade."""
    return replace(
        player,
        clip_name=clip_name,
        current_time=0.0,
        target_clip_name=None,
        target_time=0.0,
        blend_factor=0.0,
    )


def start_blend(player: AnimationPlayer, target_clip_name: str,
                blend_duration: Optional[float] = None) -> AnimationPlayer:
    """
    Begin a crossfade into another clip.

    Restarting while already blending discards the progress toward the
    previous target; the fade starts over from the current clip.

    Args:
        player: Current state
        target_clip_name: Clip to fade in, played from its start
        blend_duration: Fade length in seconds (keeps the player's if None)
    """
    if player.is_blending:
        logger.debug(
            "Crossfade to '%s' replaces in-flight crossfade to '%s' at %.2f",
            target_clip_name, player.target_clip_name, player.blend_factor,
        )
    return replace(
        player,
        target_clip_name=target_clip_name,
        target_time=0.0,
        blend_factor=0.0,
        blend_duration=player.blend_duration if blend_duration is None else blend_duration,
    )


def advance(player: AnimationPlayer, dt: float, clip: Animation,
            target_clip: Optional[Animation] = None) -> AnimationPlayer:
    """
    Advance playback by one frame.

    A non-looping current clip that reaches its end during a crossfade
    holds its final frame while the fade finishes; the player keeps
    playing until the target clip is committed.

    Args:
        player: Current state
        dt: Frame time in seconds
        clip: The player's current clip
        target_clip: The crossfade target (required while blending)

    Returns:
        New state. Unchanged if the player is not playing.
    """
    if not player.playing:
        return player

    delta = dt * player.speed
    current_time, playing = _advance_time(
        player.current_time, delta, clip.duration_in_seconds, player.looping
    )
    if not player.is_blending:
        return replace(player, current_time=current_time, playing=playing)
    updated = replace(player, current_time=current_time)
    if target_clip is None:
        raise ValueError(f"Player is blending into '{player.target_clip_name}' but no target clip was given")

    if player.blend_duration > 0.0:
        blend_factor = player.blend_factor + dt / player.blend_duration
    else:
        blend_factor = 1.0
    target_time, target_playing = _advance_time(
        player.target_time, delta, target_clip.duration_in_seconds, player.looping
    )

    if blend_factor >= 1.0:
        logger.debug("Crossfade '%s' -> '%s' committed", player.clip_name, player.target_clip_name)
        return replace(
            updated,
            clip_name=player.target_clip_name,
            current_time=target_time,
            playing=target_playing,
            target_clip_name=None,
            target_time=0.0,
            blend_factor=0.0,
        )

    return replace(updated, blend_factor=blend_factor, target_time=target_time)


def evaluate_pose(skeleton: Skeleton, player: AnimationPlayer, clip: Animation,
                  target_clip: Optional[Animation] = None) -> np.ndarray:
    """
    Global poses for a player's current state.

    Idle players sample their current clip. Blending players resolve both
    clips independently and blend the two hierarchies bone by bone.

    Returns:
        (N, 4, 4) model-space bone transforms
    """
    current = evaluate_global_poses(skeleton, clip, seconds_to_ticks(clip, player.current_time))
    if not player.is_blending:
        return current
    if target_clip is None:
        raise ValueError(f"Player is blending into '{player.target_clip_name}' but no target clip was given")

    target = evaluate_global_poses(skeleton, target_clip, seconds_to_ticks(target_clip, player.target_time))
    return blend_global_poses(current, target, player.blend_factor)


class AnimationController:
    """
    External control surface for one animated instance.

    Manages:
    - Clip selection and crossfades
    - Play/pause/loop states
    - Playback speed

    Each call swaps a new AnimationPlayer into the instance.
    """

    def __init__(self, instance):
        """
        Initialize animation controller.

        Args:
            instance: Object with a mutable ``player`` attribute (AnimatedInstance)
        """
        self.instance = instance

    @property
    def player(self) -> AnimationPlayer:
        return self.instance.player

    def _set(self, player: AnimationPlayer):
        self.instance.player = player

    def play(self, clip_name: str, loop: Optional[bool] = None):
        """
        Start playing a clip from its beginning.

        Args:
            clip_name: Clip to play
            loop: Whether to loop the clip (keeps the current setting if None)
        """
        player = select_clip(self.player, clip_name)
        looping = player.looping if loop is None else loop
        self._set(replace(player, looping=looping, playing=True))

    def crossfade(self, clip_name: str, duration: Optional[float] = None):
        """Fade from the current clip into another one."""
        self._set(replace(start_blend(self.player, clip_name, duration), playing=True))

    def pause(self):
        """Pause animation playback."""
        self._set(replace(self.player, playing=False))

    def resume(self):
        """Resume animation playback."""
        self._set(replace(self.player, playing=True))

    def stop(self):
        """Stop playback and rewind the current clip."""
        self._set(replace(select_clip(self.player, self.player.clip_name), playing=False))

    def set_speed(self, speed: float):
        self._set(replace(self.player, speed=speed))

    def set_looping(self, looping: bool):
        self._set(replace(self.player, looping=looping))

    def __repr__(self):
        player = self.player
        return (
            f"AnimationController(animation='{player.clip_name}', time={player.current_time:.2f}s, "
            f"playing={player.playing}, state={player.state.value})"
        )
