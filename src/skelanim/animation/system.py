"""
Animation System

Per-frame evaluation of every animated instance.

Skeletons and clips are shared and read-only; each instance exclusively
owns its player state and bone matrices. Instances can therefore be
evaluated in any order, sequentially or on a worker pool.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Optional, Set, Tuple

import numpy as np
from pyrr import matrix44

from ..config.settings import DEFAULT_WORKER_COUNT
from .animation_controller import AnimationPlayer, advance, evaluate_pose
from .errors import AnimationDataError
from .library import AnimationLibrary
from .skin import BoneMatrices

logger = logging.getLogger(__name__)


def _identity():
    return matrix44.create_identity(dtype=np.float64)


@dataclass
class AnimatedInstance:
    """An animated model placed in the world."""
    model_name: str
    player: AnimationPlayer
    world_transform: np.ndarray = field(default_factory=_identity)
    bone_matrices: BoneMatrices = field(default_factory=BoneMatrices)


class AnimationSystem:
    """
    Advances players and rebuilds skinning matrices once per frame.

    An instance whose skeleton or clip cannot be found is skipped for the
    frame: its player state and bone matrices keep their last values.
    """

    def __init__(self, library: AnimationLibrary, max_workers: int = DEFAULT_WORKER_COUNT):
        """
        Initialize animation system.

        Args:
            library: Shared skeletons and clips
            max_workers: Worker threads for update(); 0 or 1 evaluates sequentially
        """
        self.library = library
        self.max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self._reported: Set[Tuple[str, str]] = set()

    def _warn_once(self, key: Tuple[str, str], message: str, *args):
        if key not in self._reported:
            self._reported.add(key)
            logger.warning(message, *args)

    def _report_missing(self, error: AnimationDataError):
        self._warn_once((error.kind, error.name), "%s; affected instances keep their last pose", error)

    def update_instance(self, instance: AnimatedInstance, dt: float) -> bool:
        """
        Advance one instance and rebuild its bone matrices.

        Args:
            instance: Instance to update
            dt: Frame time in seconds

        Returns:
            True if the instance was evaluated, False if it was skipped
        """
        player = instance.player
        try:
            skeleton = self.library.skeleton(instance.model_name)
            clip = self.library.animation(player.clip_name)
            target_clip = None
            if player.is_blending:
                target_clip = self.library.animation(player.target_clip_name)
        except AnimationDataError as e:
            self._report_missing(e)
            return False

        player = advance(player, dt, clip, target_clip)
        if target_clip is not None and not player.is_blending:
            # Crossfade committed this frame
            clip, target_clip = target_clip, None

        if len(skeleton) > instance.bone_matrices.capacity:
            self._warn_once(
                ("Capacity", instance.model_name),
                "Skeleton of '%s' has %d bones but its bone matrices hold %d; extra bones are not skinned",
                instance.model_name, len(skeleton), instance.bone_matrices.capacity,
            )

        global_poses = evaluate_pose(skeleton, player, clip, target_clip)
        instance.bone_matrices.update(instance.world_transform, global_poses, skeleton.inverse_bind_poses)
        instance.player = player
        return True

    def update(self, instances: Iterable[AnimatedInstance], dt: float) -> int:
        """
        Update all instances for one frame.

        Args:
            instances: Instances to evaluate
            dt: Frame time in seconds

        Returns:
            Number of instances evaluated
        """
        instances = list(instances)
        if self.max_workers and self.max_workers > 1 and len(instances) > 1:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers, thread_name_prefix="animation"
                )
            results = self._executor.map(lambda instance: self.update_instance(instance, dt), instances)
        else:
            results = (self.update_instance(instance, dt) for instance in instances)
        return sum(1 for updated in results if updated)

    def close(self):
        """Shut down the worker pool, if one was started."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self):
        return f"AnimationSystem(workers={self.max_workers}, library={self.library!r})"
