"""Tests for load-time validation and anomaly reporting"""

import logging

import numpy as np
import pytest
from pyrr import quaternion

from src.skelanim.animation import (
    Animation,
    AnimationChannel,
    Bone,
    InvariantViolation,
    KeyframeTrack,
    report_numeric_anomalies,
    validate_animation,
    validate_skeleton,
)

Y_AXIS = np.array([0.0, 1.0, 0.0])


def y_rotation(angle):
    return quaternion.create_from_axis_rotation(Y_AXIS, angle, dtype=np.float64)


@pytest.mark.parametrize("duration,ticks_per_second", [(0.0, 24.0), (-1.0, 24.0), (10.0, 0.0)])
def test_clip_rejects_non_positive_timing(duration, ticks_per_second):
    """Duration and tick rate must be positive"""
    with pytest.raises(InvariantViolation):
        Animation("bad", duration, ticks_per_second)


def test_track_rejects_unsorted_times():
    """Keyframe times must be ascending"""
    with pytest.raises(InvariantViolation):
        KeyframeTrack([(2.0, [0.0, 0.0, 0.0]), (1.0, [0.0, 0.0, 0.0])])


def test_track_rejects_negative_times():
    """Keyframe times must be non-negative"""
    with pytest.raises(InvariantViolation):
        KeyframeTrack([(-0.5, [0.0, 0.0, 0.0])])


def test_track_rejects_wrong_component_count():
    """Rotation keys need four components"""
    with pytest.raises(InvariantViolation):
        AnimationChannel("bone", rotation_keys=[(0.0, [0.0, 0.0, 1.0])])


def test_channel_rejects_non_positive_scale():
    """Scale keys must be strictly positive"""
    with pytest.raises(InvariantViolation):
        AnimationChannel("bone", scale_keys=[(0.0, [1.0, 0.0, 1.0])])


def test_skeleton_rejects_forward_parent():
    """validate_skeleton rejects parents that come after the child"""
    with pytest.raises(InvariantViolation):
        validate_skeleton([Bone("a", parent_index=1), Bone("b")])


def test_animation_targeting_unknown_bone(two_bone_skeleton):
    """Channels must target bones that exist"""
    clip = Animation("clip", 10.0, 10.0, [AnimationChannel("tail", position_keys=[(0.0, [0.0, 0.0, 0.0])])])
    with pytest.raises(InvariantViolation):
        validate_animation(clip, two_bone_skeleton)
    validate_animation(clip)


def test_duplicate_channel_keeps_first(caplog):
    """A second channel for the same bone is ignored with a warning"""
    caplog.set_level(logging.WARNING)
    first = AnimationChannel("bone", position_keys=[(0.0, [1.0, 0.0, 0.0])])
    second = AnimationChannel("bone", position_keys=[(0.0, [2.0, 0.0, 0.0])])

    clip = Animation("dupe", 10.0, 10.0, [first, second])

    assert clip.channel_for("bone") is first
    assert "more than one channel" in caplog.text


def test_clean_clip_has_no_anomalies(slide_clip):
    """Well-formed clips report nothing"""
    assert report_numeric_anomalies(slide_clip) == []


def test_degenerate_rotation_reported(caplog):
    """Near-zero quaternions are flagged"""
    caplog.set_level(logging.WARNING)
    clip = Animation("clip", 10.0, 10.0, [
        AnimationChannel("bone", rotation_keys=[(0.0, [0.0, 0.0, 0.0, 0.01])]),
    ])

    findings = report_numeric_anomalies(clip)

    assert len(findings) == 1
    assert "degenerate rotation key 0" in findings[0]
    assert "Numeric anomaly" in caplog.text


def test_non_unit_rotation_reported():
    """Quaternions that need normalizing are flagged"""
    clip = Animation("clip", 10.0, 10.0, [
        AnimationChannel("bone", rotation_keys=[(0.0, [0.0, 0.0, 0.0, 2.0])]),
    ])
    assert "non-unit rotation key 0" in report_numeric_anomalies(clip)[0]


def test_large_rotation_jump_reported():
    """Half turns between neighbouring keys are flagged"""
    clip = Animation("clip", 10.0, 10.0, [
        AnimationChannel("bone", rotation_keys=[(0.0, y_rotation(0.0)), (5.0, y_rotation(np.pi))]),
    ])
    findings = report_numeric_anomalies(clip)
    assert any("large rotation difference" in finding for finding in findings)


def test_velocity_spike_reported():
    """One step much faster than the rest is flagged"""
    angles = [0.01 * i for i in range(11)] + [0.1 + 1.5]
    keys = [(float(i), y_rotation(angle)) for i, angle in enumerate(angles)]
    clip = Animation("clip", 20.0, 10.0, [AnimationChannel("bone", rotation_keys=keys)])

    findings = report_numeric_anomalies(clip)

    assert len(findings) == 1
    assert "velocity spike after key 10" in findings[0]


def test_near_zero_scale_reported():
    """Tiny but positive scales are flagged"""
    clip = Animation("clip", 10.0, 10.0, [
        AnimationChannel("bone", scale_keys=[(0.0, [0.01, 0.01, 0.01])]),
    ])
    assert "near-zero scale key 0" in report_numeric_anomalies(clip)[0]
