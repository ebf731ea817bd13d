"""Pose builders shared by the posture and controller tests."""
import numpy as np

from ergoreach.core.types import Joint, PoseSnapshot, TrackedPoint

# Upright operator facing +Z: upper arms hanging, forearms level and pointing forward
NEUTRAL = {
    Joint.HEAD: (0.0, 1.7, 0.0),
    Joint.WAIST: (0.0, 1.0, 0.0),
    Joint.LEFT_SHOULDER: (-0.2, 1.4, 0.0),
    Joint.RIGHT_SHOULDER: (0.2, 1.4, 0.0),
    Joint.LEFT_ELBOW: (-0.2, 1.1, 0.0),
    Joint.RIGHT_ELBOW: (0.2, 1.1, 0.0),
    Joint.LEFT_WRIST: (-0.2, 1.1, 0.25),
    Joint.RIGHT_WRIST: (0.2, 1.1, 0.25),
    Joint.LEFT_HAND: (-0.2, 1.1, 0.3),
    Joint.RIGHT_HAND: (0.2, 1.1, 0.3),
}


def make_pose(positions=None, rotations=None, tracking_valid=True, drop=()):
    """
    Neutral pose with selected joints moved / rotated / removed.

    Args:
        positions: {Joint: (x, y, z)} overrides.
        rotations: {Joint: scipy Rotation} overrides (identity otherwise).
        drop: joints to leave out of the snapshot.
    """
    merged = dict(NEUTRAL)
    merged.update(positions or {})
    rotations = rotations or {}
    joints = {}
    for joint, pos in merged.items():
        if joint in drop:
            continue
        if joint in rotations:
            joints[joint] = TrackedPoint(np.array(pos), rotations[joint])
        else:
            joints[joint] = TrackedPoint(np.array(pos))
    for joint, rot in rotations.items():
        if joint not in joints and joint not in drop:
            joints[joint] = TrackedPoint(np.zeros(3), rot)
    return PoseSnapshot(joints, tracking_valid=tracking_valid)
