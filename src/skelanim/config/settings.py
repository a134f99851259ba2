"""
Animation Configuration Settings

All configuration constants for the animation evaluation core.
Modify these values to change evaluation behavior.
"""

# ============================================================================
# Skinning Output
# ============================================================================

MAX_BONES = 256  # Capacity of every per-instance bone matrix array

# ============================================================================
# Rotation Interpolation
# ============================================================================

# Quaternions whose squared length drifts further than this from 1 are renormalized
QUATERNION_NORMALIZE_TOLERANCE = 1e-4

# Quaternions with a squared length below this are treated as identity
DEGENERATE_QUATERNION_LENGTH_SQ = 0.01

# Angular difference between two keys (radians)
LARGE_ROTATION_ANGLE = 2.0   # Above this: step to the nearest key (~115 degrees)
MEDIUM_ROTATION_ANGLE = 1.0  # Above this: smoothstep-weighted slerp (~57 degrees)

# ============================================================================
# Load-time Anomaly Scan
# ============================================================================

NEAR_ZERO_SCALE_LENGTH_SQ = 0.01  # Scale keys shorter than this are reported
VELOCITY_SPIKE_THRESHOLD = 10.0   # Rotational speed relative to channel average

# ============================================================================
# Playback Defaults
# ============================================================================

DEFAULT_PLAYBACK_SPEED = 1.0
DEFAULT_LOOPING = True
DEFAULT_BLEND_DURATION = 0.2  # Seconds for a crossfade to commit

# ============================================================================
# Evaluation
# ============================================================================

DEFAULT_WORKER_COUNT = 0  # 0 or 1 = evaluate instances sequentially
