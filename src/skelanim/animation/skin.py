"""
Skin

Builds the per-instance skinning matrix array consumed by the renderer.
"""

from typing import Optional

import numpy as np

from ..config.settings import MAX_BONES


def build_skinning_matrices(
    world_transform,
    global_poses,
    inverse_bind_poses,
    capacity: int = MAX_BONES,
    out: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Compute skinning matrices for shader upload.

    Skinning matrix formula (column-major):
    skinMatrix = worldTransform * globalPose * inverseBindPose

    Computed here in row-major form as inverse_bind @ global @ world.
    Slots beyond the active bone count hold identity. Bones past the
    capacity of the output array are dropped.

    Args:
        world_transform: Instance world transform (4x4)
        global_poses: (N, 4, 4) model-space bone transforms
        inverse_bind_poses: (N, 4, 4) inverse bind matrices
        capacity: Number of slots in the output array
        out: Optional (capacity, 4, 4) array to fill instead of allocating

    Returns:
        Array of shape (capacity, 4, 4)
    """
    global_poses = np.asarray(global_poses, dtype=np.float64)
    inverse_bind_poses = np.asarray(inverse_bind_poses, dtype=np.float64)
    world_transform = np.asarray(world_transform, dtype=np.float64)
    if out is None:
        out = np.empty((capacity, 4, 4), dtype='f4')
    bone_count = min(len(global_poses), len(out))

    out[bone_count:] = np.eye(4, dtype=out.dtype)
    if bone_count:
        out[:bone_count] = inverse_bind_poses[:bone_count] @ global_poses[:bone_count] @ world_transform
    return out


class BoneMatrices:
    """
    Fixed-capacity skinning matrix array owned by one instance.

    Fully recomputed every frame the instance is evaluated. Unused slots
    hold identity.
    """

    def __init__(self, capacity: int = MAX_BONES):
        """
        Initialize bone matrices.

        Args:
            capacity: Number of matrix slots (maximum supported bone count)
        """
        self.capacity = capacity
        self.matrices = np.tile(np.eye(4, dtype='f4'), (capacity, 1, 1))
        self.bone_count = 0

    def update(self, world_transform, global_poses, inverse_bind_poses):
        """Recompute every slot in place."""
        build_skinning_matrices(
            world_transform, global_poses, inverse_bind_poses,
            capacity=self.capacity, out=self.matrices,
        )
        self.bone_count = min(len(global_poses), self.capacity)

    def as_array(self) -> np.ndarray:
        """
        Get skinning matrices for shader upload.

        Returns:
            Numpy array of shape (capacity, 4, 4) with dtype float32
        """
        return self.matrices

    def tobytes(self) -> bytes:
        return self.matrices.tobytes()

    def __repr__(self):
        return f"BoneMatrices(bones={self.bone_count}, capacity={self.capacity})"
