"""Shared fixtures for animation tests"""

import numpy as np
import pytest
from pyrr import matrix44, quaternion

from src.skelanim.animation import (
    Animation,
    AnimationChannel,
    AnimationLibrary,
    Bone,
    Skeleton,
)


@pytest.fixture
def y_quarter_turn():
    """90 degree rotation about +Y"""
    return quaternion.create_from_axis_rotation(np.array([0.0, 1.0, 0.0]), np.pi / 2, dtype=np.float64)


@pytest.fixture
def two_bone_skeleton():
    """Root and one child, identity bind poses"""
    return Skeleton([Bone("root"), Bone("child", parent_index=0)], name="pair")


@pytest.fixture
def chain_skeleton():
    """root -> mid -> tip, each one unit up from its parent"""
    offset = matrix44.create_from_translation(np.array([0.0, 1.0, 0.0]), dtype=np.float64)
    return Skeleton([
        Bone("root"),
        Bone("mid", transform=offset, parent_index=0),
        Bone("tip", transform=offset, parent_index=1),
    ], name="chain")


@pytest.fixture
def slide_clip():
    """2 second looping clip moving the root from x=0 to x=2 and back"""
    return Animation("slide", duration=20.0, ticks_per_second=10.0, channels=[
        AnimationChannel("root", position_keys=[
            (0.0, [0.0, 0.0, 0.0]),
            (10.0, [2.0, 0.0, 0.0]),
        ]),
    ])


@pytest.fixture
def lift_clip():
    """1 second clip moving the root up by 3 units"""
    return Animation("lift", duration=10.0, ticks_per_second=10.0, channels=[
        AnimationChannel("root", position_keys=[
            (0.0, [0.0, 3.0, 0.0]),
        ]),
    ])


@pytest.fixture
def library(chain_skeleton, slide_clip, lift_clip):
    """Library with the chain skeleton and both clips"""
    lib = AnimationLibrary()
    lib.add_skeleton("chain", chain_skeleton)
    lib.add_animation(slide_clip)
    lib.add_animation(lift_clip)
    return lib
