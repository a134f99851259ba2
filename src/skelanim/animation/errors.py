"""
Animation Errors

Exception types raised by the animation core.
"""


class AnimationError(Exception):
    """Base class for animation errors."""


class AnimationDataError(AnimationError, KeyError):
    """A clip or skeleton referenced by name is not in the library."""

    def __init__(self, kind: str, name: str):
        super().__init__(kind, name)
        self.kind = kind
        self.name = name

    def __str__(self):
        return f"{self.kind} '{self.name}' not found"


class InvariantViolation(AnimationError, ValueError):
    """Skeleton or animation data that breaks a construction-time invariant."""
