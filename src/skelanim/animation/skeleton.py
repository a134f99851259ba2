"""
Skeleton

Represents a hierarchical skeleton as an index-addressed forest of bones.

Bones are stored in topological order (every parent before its children),
which lets the hierarchy be resolved in a single forward pass.
"""

from typing import Dict, List, Optional, Sequence, Union

import numpy as np
from pyrr import matrix44

from ..config.settings import MAX_BONES
from .errors import InvariantViolation


def _frozen_matrix(value, what: str) -> np.ndarray:
    matrix = np.array(value, dtype=np.float64)
    if matrix.shape != (4, 4):
        raise InvariantViolation(f"{what} must be a 4x4 matrix, got shape {matrix.shape}")
    matrix.flags.writeable = False
    return matrix


class Bone:
    """
    Represents a single bone in a skeleton hierarchy.

    Each bone has:
    - Bind-pose local transform (relative to parent)
    - Inverse bind pose (model space to bone space)
    - Optional parent index (None for root bones)
    """

    __slots__ = ("name", "transform", "inverse_bind_pose", "parent_index")

    def __init__(
        self,
        name: str,
        transform=None,
        inverse_bind_pose=None,
        parent_index: Optional[int] = None
    ):
        """
        Initialize a bone.

        Args:
            name: Bone name (channels target bones by name)
            transform: Bind-pose local transform, identity if omitted
            inverse_bind_pose: Inverse bind matrix, identity if omitted
            parent_index: Index of the parent bone in the skeleton
        """
        self.name = name
        self.transform = _frozen_matrix(
            matrix44.create_identity(dtype=np.float64) if transform is None else transform,
            f"Bone '{name}' transform",
        )
        self.inverse_bind_pose = _frozen_matrix(
            matrix44.create_identity(dtype=np.float64) if inverse_bind_pose is None else inverse_bind_pose,
            f"Bone '{name}' inverse bind pose",
        )
        self.parent_index = None if parent_index is None else int(parent_index)

    def __repr__(self):
        return f"Bone(name='{self.name}', parent={self.parent_index})"


def validate_bone_order(bones: Sequence[Bone], max_bones: int = MAX_BONES):
    """
    Check the structural invariants of a bone list.

    Raises:
        InvariantViolation: forward/self parent references, negative parents,
            duplicate names, or more bones than the skinning output can hold
    """
    if len(bones) > max_bones:
        raise InvariantViolation(f"Skeleton has {len(bones)} bones; at most {max_bones} are supported")

    seen = set()
    for index, bone in enumerate(bones):
        if bone.name in seen:
            raise InvariantViolation(f"Duplicate bone name '{bone.name}' at index {index}")
        seen.add(bone.name)

        parent = bone.parent_index
        if parent is not None and not 0 <= parent < index:
            raise InvariantViolation(
                f"Bone '{bone.name}' (index {index}) has parent index {parent}; "
                f"parents must come before their children"
            )


class Skeleton:
    """
    Hierarchical skeleton structure.

    Immutable after construction and shared by every instance of a model.
    Provides:
    - Lookup of bones by name/index
    - Stacked bind and inverse bind matrices
    - Global pose resolution (see resolve_global_poses)
    """

    def __init__(self, bones: Sequence[Bone], name: str = "Skeleton"):
        """
        Initialize skeleton.

        Args:
            bones: Bones in topological order
            name: Skeleton name for debugging

        Raises:
            InvariantViolation: if the bone order or names are invalid
        """
        bones = tuple(bones)
        validate_bone_order(bones)

        self.name = name
        self.bones = bones
        self._index_by_name: Dict[str, int] = {bone.name: i for i, bone in enumerate(bones)}

        self.parent_indices: List[Optional[int]] = [bone.parent_index for bone in bones]
        self.bind_transforms = self._stack([bone.transform for bone in bones])
        self.inverse_bind_poses = self._stack([bone.inverse_bind_pose for bone in bones])

    @staticmethod
    def _stack(matrices: List[np.ndarray]) -> np.ndarray:
        stacked = np.array(matrices, dtype=np.float64).reshape(len(matrices), 4, 4)
        stacked.flags.writeable = False
        return stacked

    def __len__(self) -> int:
        return len(self.bones)

    def bone_index(self, name: str) -> Optional[int]:
        return self._index_by_name.get(name)

    def get_bone(self, name: str) -> Optional[Bone]:
        """
        Find a bone by name.

        Args:
            name: Bone name

        Returns:
            Bone if found, None otherwise
        """
        index = self._index_by_name.get(name)
        return None if index is None else self.bones[index]

    def root_indices(self) -> List[int]:
        return [i for i, parent in enumerate(self.parent_indices) if parent is None]

    def bind_global_poses(self) -> np.ndarray:
        """Model-space bind pose of every bone."""
        return resolve_global_poses(self, self.bind_transforms)

    def compute_inverse_bind_poses(self) -> np.ndarray:
        """
        Invert the resolved bind pose.

        For sources that carry bind transforms but no explicit inverse bind
        matrices. Skinning with these yields identity matrices at rest.
        """
        return np.linalg.inv(self.bind_global_poses())

    def __repr__(self):
        return f"Skeleton(name='{self.name}', bones={len(self.bones)}, roots={len(self.root_indices())})"


def resolve_global_poses(bones: Union[Skeleton, Sequence[Bone]], local_poses) -> np.ndarray:
    """
    Propagate local transforms through the bone hierarchy.

    Single forward pass in index order. Row-major form:
    global = local @ parent_global (equivalent to parent * local in
    column-major).

    Args:
        bones: Skeleton or bones in topological order
        local_poses: (N, 4, 4) local transforms, one per bone

    Returns:
        (N, 4, 4) model-space transforms
    """
    if isinstance(bones, Skeleton):
        parents = bones.parent_indices
    else:
        parents = [bone.parent_index for bone in bones]

    local_poses = np.asarray(local_poses, dtype=np.float64)
    global_poses = np.empty((len(parents), 4, 4), dtype=np.float64)
    for i, parent in enumerate(parents):
        if parent is None:
            global_poses[i] = local_poses[i]
        else:
            global_poses[i] = local_poses[i] @ global_poses[parent]
    return global_poses
