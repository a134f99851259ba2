"""
Animation Library

Name-addressed store of shared skeletons and animation clips.
"""

from typing import Dict, List

from .animation import Animation
from .errors import AnimationDataError
from .skeleton import Skeleton


class AnimationLibrary:
    """
    Read-only lookup of skeletons (by model name) and clips (by name).

    Populated once by a loader; every animated instance holds references
    into it and never copies or mutates the stored data.
    """

    def __init__(self):
        self._skeletons: Dict[str, Skeleton] = {}
        self._animations: Dict[str, Animation] = {}

    def add_skeleton(self, model_name: str, skeleton: Skeleton):
        """
        Register the skeleton of a model.

        Args:
            model_name: Model the skeleton belongs to
            skeleton: Validated skeleton
        """
        self._skeletons[model_name] = skeleton

    def add_animation(self, animation: Animation):
        """Register a clip under its own name, replacing any previous clip of that name."""
        self._animations[animation.name] = animation

    def skeleton(self, model_name: str) -> Skeleton:
        """
        Get a model's skeleton.

        Raises:
            AnimationDataError: if the model has no registered skeleton
        """
        try:
            return self._skeletons[model_name]
        except KeyError:
            raise AnimationDataError("Skeleton", model_name) from None

    def animation(self, name: str) -> Animation:
        """
        Get a clip by name.

        Raises:
            AnimationDataError: if no clip has this name
        """
        try:
            return self._animations[name]
        except KeyError:
            raise AnimationDataError("Animation", name) from None

    def has_animation(self, name: str) -> bool:
        return name in self._animations

    def animation_names(self) -> List[str]:
        return sorted(self._animations)

    def model_names(self) -> List[str]:
        return sorted(self._skeletons)

    def __repr__(self):
        return f"AnimationLibrary(skeletons={len(self._skeletons)}, animations={len(self._animations)})"
