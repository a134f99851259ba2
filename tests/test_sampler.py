"""Tests for the keyframe sampler"""

import logging

import numpy as np
import pytest
from pyrr import quaternion

from src.skelanim.animation.animation import KeyframeTrack
from src.skelanim.animation.sampler import (
    IDENTITY_QUATERNION,
    interpolate_rotation,
    sample_position,
    sample_rotation,
    sanitize_quaternion,
    smoothstep,
)

Y_AXIS = np.array([0.0, 1.0, 0.0])


def axis_rotation(angle):
    return quaternion.create_from_axis_rotation(Y_AXIS, angle, dtype=np.float64)


@pytest.fixture
def three_keys():
    return KeyframeTrack([
        (0.0, [0.0, 0.0, 0.0]),
        (10.0, [10.0, 0.0, 0.0]),
        (20.0, [10.0, 10.0, 0.0]),
    ])


def test_empty_track_returns_none():
    """Empty keyframe list has no value"""
    assert sample_position(KeyframeTrack([]), 3.0, 10.0) is None
    assert sample_rotation(KeyframeTrack([], size=4), 3.0, 10.0) is None


@pytest.mark.parametrize("time", [0.0, 0.5, 7.0, 10.0, 250.0])
def test_single_key_is_constant(time):
    """A single keyframe is returned for any query time"""
    track = KeyframeTrack([(4.0, [1.0, 2.0, 3.0])])
    assert np.array_equal(sample_position(track, time, 10.0), [1.0, 2.0, 3.0])


def test_exact_at_keyframes(three_keys):
    """Sampling at a key time returns that key's value"""
    for key in three_keys:
        assert np.allclose(sample_position(three_keys, key.time, 30.0), key.value)


def test_before_first_key_clamps():
    """No backward extrapolation before the first key"""
    track = KeyframeTrack([(5.0, [1.0, 0.0, 0.0]), (10.0, [2.0, 0.0, 0.0])])
    assert np.array_equal(sample_position(track, 0.0, 20.0), [1.0, 0.0, 0.0])


def test_linear_between_keys(three_keys):
    """Positions are lerped between surrounding keys"""
    assert np.allclose(sample_position(three_keys, 5.0, 30.0), [5.0, 0.0, 0.0])
    assert np.allclose(sample_position(three_keys, 12.5, 30.0), [10.0, 2.5, 0.0])


def test_wraps_from_last_to_first(three_keys):
    """Past the last key the value heads back toward the first key"""
    # Loop span = first.time + (duration - last.time) = 0 + (30 - 20) = 10
    assert np.allclose(sample_position(three_keys, 25.0, 30.0), [5.0, 5.0, 0.0])


def test_wraparound_has_no_jump(three_keys):
    """Values just past the last key stay between the last and first values"""
    last = three_keys.last.value
    first = three_keys.first.value
    low = np.minimum(last, first) - 1e-9
    high = np.maximum(last, first) + 1e-9
    for time in (20.0, 20.0 + 1e-6, 20.01):
        value = sample_position(three_keys, time, 30.0)
        assert np.all(value >= low) and np.all(value <= high)
    assert np.allclose(sample_position(three_keys, 20.0, 30.0), last)


def test_wrap_factor_is_clamped(three_keys):
    """Times beyond the clip duration settle on the first key"""
    assert np.allclose(sample_position(three_keys, 500.0, 30.0), [0.0, 0.0, 0.0])


def test_zero_loop_span_holds_last_key():
    """A last key at the clip end with a first key at 0 leaves no wrap span"""
    track = KeyframeTrack([(0.0, [0.0, 0.0, 0.0]), (10.0, [4.0, 0.0, 0.0])])
    assert np.allclose(sample_position(track, 10.0, 10.0), [4.0, 0.0, 0.0])


def test_duplicate_key_times_do_not_divide_by_zero():
    """Keys sharing a time use a zero factor"""
    track = KeyframeTrack([
        (0.0, [0.0, 0.0, 0.0]),
        (5.0, [1.0, 0.0, 0.0]),
        (5.0, [2.0, 0.0, 0.0]),
        (10.0, [3.0, 0.0, 0.0]),
    ])
    value = sample_position(track, 5.0, 20.0)
    assert np.all(np.isfinite(value))


def test_sanitize_leaves_unit_quaternions_untouched():
    """Well-formed keys are returned as-is"""
    q = axis_rotation(0.3)
    assert sanitize_quaternion(q) is q


def test_sanitize_normalizes_long_quaternions():
    """Quaternions off unit length are renormalized"""
    assert np.allclose(sanitize_quaternion(np.array([0.0, 0.0, 0.0, 2.0])), [0.0, 0.0, 0.0, 1.0])


def test_sanitize_replaces_degenerate_quaternions():
    """Near-zero quaternions become identity"""
    result = sanitize_quaternion(np.array([0.0, 0.05, 0.0, 0.05]))
    assert np.array_equal(result, IDENTITY_QUATERNION)
    assert np.array_equal(sanitize_quaternion(np.zeros(4)), IDENTITY_QUATERNION)


def test_degenerate_quaternion_warns_once_per_value(caplog):
    """Runtime repairs are reported as warnings without repeating every frame"""
    caplog.set_level(logging.WARNING)
    bad = np.array([0.0, 0.0371, 0.0, 0.0])

    for _ in range(3):
        sanitize_quaternion(bad)

    warnings = [
        r for r in caplog.records
        if r.levelno == logging.WARNING and "Degenerate quaternion" in r.getMessage()
    ]
    assert len(warnings) == 1


def test_large_rotation_step_is_reported(caplog):
    """Stepping across a huge rotation gap is logged as a warning"""
    caplog.set_level(logging.WARNING)
    interpolate_rotation(axis_rotation(0.0), axis_rotation(2.6789), 0.5)
    assert "degrees apart; stepping" in caplog.text


def test_antipodal_quaternions_step():
    """Opposite-sign keys return exactly prev below 0.5 and exactly next from 0.5"""
    q = axis_rotation(0.4)
    track = KeyframeTrack([(0.0, q), (10.0, -q)], size=4)

    assert np.array_equal(sample_rotation(track, 2.0, 20.0), track[0].value)
    assert np.array_equal(sample_rotation(track, 4.99, 20.0), track[0].value)
    assert np.array_equal(sample_rotation(track, 5.0, 20.0), track[1].value)
    assert np.array_equal(sample_rotation(track, 9.0, 20.0), track[1].value)


def test_large_rotation_steps():
    """Keys more than 2 radians apart snap to the nearest key"""
    prev = axis_rotation(0.0)
    next_ = axis_rotation(2.5)

    assert np.array_equal(interpolate_rotation(prev, next_, 0.3), prev)
    assert np.array_equal(interpolate_rotation(prev, next_, 0.5), next_)


def test_medium_rotation_uses_smoothstep():
    """Keys between 1 and 2 radians apart are slerped with a smoothstep factor"""
    result = interpolate_rotation(axis_rotation(0.0), axis_rotation(1.5), 0.25)
    assert np.allclose(result, axis_rotation(1.5 * smoothstep(0.25)))


def test_small_rotation_uses_slerp():
    """Keys under 1 radian apart are slerped directly"""
    result = interpolate_rotation(axis_rotation(0.0), axis_rotation(0.9), 0.25)
    assert np.allclose(result, axis_rotation(0.225))
    assert np.isclose(np.linalg.norm(result), 1.0)


def test_rotation_exact_at_keyframes():
    """Rotation samples match the key values at key times"""
    track = KeyframeTrack([
        (0.0, axis_rotation(0.0)),
        (10.0, axis_rotation(0.6)),
        (20.0, axis_rotation(1.2)),
    ], size=4)
    for key in track:
        assert np.allclose(sample_rotation(track, key.time, 30.0), key.value)


def test_degenerate_rotation_key_interpolates_from_identity():
    """A zero quaternion key is handled as identity"""
    track = KeyframeTrack([(0.0, [0.0, 0.0, 0.0, 0.0]), (10.0, axis_rotation(0.5))], size=4)
    result = sample_rotation(track, 5.0, 20.0)
    assert np.allclose(result, axis_rotation(0.25))
