"""
ErgoReach Posture Sampler (The Anchor).
======================================

Turns a pose snapshot into the scalar joint angles the RULA referee needs.

Key Concept: "Last Known Good"
Body trackers drop joints now and then. Instead of crashing or scoring a
half-empty skeleton, the sampler keeps the most recent complete snapshot and
hands it back until tracking recovers, so every downstream output freezes
at its last valid value.
"""
import logging
from typing import Optional, Union

import numpy as np

from ergoreach.config import CONFIG
from ergoreach.core.kinematics import angle, look_rotation, normalize, planar_signed_angle, signed_angle
from ergoreach.core.types import (
    AXIS_UP, CONTROLLER_JOINTS, REQUIRED_JOINTS, ArmAngles, Joint, JointSource, PoseSnapshot, PostureAngles, Side,
)

logger = logging.getLogger(__name__)


class PostureSampler:
    def __init__(self,
                 source: Union[JointSource, str, None] = None,
                 controller_offset: Optional[float] = None,
                 body_flush_drop: Optional[float] = None,
                 config: Optional[dict] = None):
        self.config = config or CONFIG
        self.source = JointSource(source or self.config["JOINT_SOURCE"])
        self.controller_offset = controller_offset if controller_offset is not None else self.config["CONTROLLER_ANGLE_OFFSET"]
        self.body_flush_drop = body_flush_drop if body_flush_drop is not None else self.config["BODY_FLUSH_DROP"]

        # Skeletal trackers give no hand orientation; the controllers supply it
        self.required = REQUIRED_JOINTS
        if self.source == JointSource.SKELETAL:
            self.required = REQUIRED_JOINTS | CONTROLLER_JOINTS

        self.last_good: Optional[PoseSnapshot] = None
        self.degraded = False

    @classmethod
    def for_controller(cls, model: str, **kwargs) -> "PostureSampler":
        """Sampler whose wrist offset matches a known controller model ("vive", "oculus")."""
        offsets = (kwargs.get("config") or CONFIG)["CONTROLLER_OFFSETS"]
        if model not in offsets:
            raise ValueError(f"Unknown controller model: {model!r} (known: {', '.join(sorted(offsets))})")
        return cls(controller_offset=offsets[model], **kwargs)

    # --- SNAPSHOT GATE ---
    def is_usable(self, snapshot: Optional[PoseSnapshot]) -> bool:
        return snapshot is not None and snapshot.is_valid(self.required)

    def resolve(self, snapshot: Optional[PoseSnapshot]) -> Optional[PoseSnapshot]:
        """
        Returns the snapshot to compute with this tick: the live one when it is
        complete, otherwise the last known good one (None before the first).
        """
        if self.is_usable(snapshot):
            if self.degraded:
                logger.info("Body tracking restored")
            self.degraded = False
            self.last_good = self.prepare(snapshot)
            return self.last_good

        if not self.degraded:
            if snapshot is None:
                reason = "no snapshot"
            else:
                missing = sorted(j.value for j in snapshot.missing(self.required))
                reason = ", ".join(missing) if missing else "provider flagged invalid"
            logger.warning(f"Lost body tracking ({reason}), holding last known good pose")
            self.degraded = True
        return self.last_good

    def prepare(self, snapshot: PoseSnapshot) -> PoseSnapshot:
        """
        Skeletal trackers report positions only: rebuild the waist frame from the
        torso triangle and let the hands inherit the controller orientations.
        IK-model orientations are already correct and are left untouched.
        """
        if self.source != JointSource.SKELETAL:
            return snapshot

        ls = snapshot.position(Joint.LEFT_SHOULDER)
        rs = snapshot.position(Joint.RIGHT_SHOULDER)
        waist = snapshot.position(Joint.WAIST)
        head = snapshot.position(Joint.HEAD)

        updates = {}
        forward = normalize(np.cross(ls - rs, waist - ls))
        rotation = look_rotation(forward, head - waist) if forward is not None else None
        if rotation is not None:
            updates[Joint.WAIST] = snapshot[Joint.WAIST].with_rotation(rotation)

        for side in Side:
            controller = snapshot.get(Joint.for_side("controller", side))
            hand = Joint.for_side("hand", side)
            if controller is not None and controller.is_finite:
                updates[hand] = snapshot[hand].with_rotation(controller.rotation)

        return snapshot.replace(updates)

    # --- ANGLES ---
    def sample(self, snapshot: PoseSnapshot) -> PostureAngles:
        waist = snapshot[Joint.WAIST]
        head = snapshot[Joint.HEAD]
        ls = snapshot.position(Joint.LEFT_SHOULDER)
        rs = snapshot.position(Joint.RIGHT_SHOULDER)

        lateral = self.lateral_axis(snapshot)
        shoulder_line = rs - ls

        return PostureAngles(
            left=self._arm(snapshot, Side.LEFT, lateral),
            right=self._arm(snapshot, Side.RIGHT, lateral),
            # Flexion positive: head ahead of the waist reads > 0, matching the RULA trunk ladder
            trunk=planar_signed_angle(AXIS_UP, head.position - waist.position, lateral),
            trunk_twist=planar_signed_angle(shoulder_line, lateral, AXIS_UP),
            trunk_side_bend=planar_signed_angle(shoulder_line, lateral, waist.forward),
            neck=signed_angle(waist.up, head.up, lateral),
            neck_twist=planar_signed_angle(waist.forward, head.forward, waist.up),
            neck_roll=signed_angle(waist.up, head.up, waist.up),
        )

    def lateral_axis(self, snapshot: PoseSnapshot) -> np.ndarray:
        """Waist right axis, flipped if needed so it points toward the right shoulder."""
        waist = snapshot[Joint.WAIST]
        right = waist.right
        if np.dot(snapshot.position(Joint.RIGHT_SHOULDER) - waist.position, right) < 0:
            right = -right
        return right

    def _arm(self, snapshot: PoseSnapshot, side: Side, lateral: np.ndarray) -> ArmAngles:
        shoulder = snapshot.position(Joint.for_side("shoulder", side))
        elbow = snapshot.position(Joint.for_side("elbow", side))
        wrist = snapshot.position(Joint.for_side("wrist", side))
        hand = snapshot[Joint.for_side("hand", side)]
        waist = snapshot.position(Joint.WAIST)

        # Synthetic point straight below the shoulder: arm hanging at the side reads 0
        body_flush = shoulder - AXIS_UP * self.body_flush_drop
        forearm = wrist - elbow

        # Positive offsets point away from the midline on this arm's own side
        outward = lateral if side is Side.RIGHT else -lateral

        return ArmAngles(
            shoulder=180.0 - angle(elbow - shoulder, shoulder - body_flush),
            elbow=angle(forearm, elbow - shoulder),
            wrist=abs(angle(hand.forward, forearm) - self.controller_offset),
            midline_offset=float(np.dot(outward, hand.position - waist)),
            lateral_offset=float(np.dot(hand.position - shoulder, outward)),
        )
