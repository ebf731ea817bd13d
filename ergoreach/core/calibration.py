"""
ErgoReach Calibration State Machine.
One instance per hand: inactive -> calibrate comfort -> calibrate max -> active.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ergoreach.config import CONFIG
from ergoreach.core.kinematics import distance
from ergoreach.core.types import CalibrationStatus, Joint, PoseSnapshot, Side

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComfortPoint:
    """Neutral hand position, stored in the shoulder's local frame so it follows the shoulder."""
    local_offset: np.ndarray

    def world(self, snapshot: PoseSnapshot, shoulder: Joint) -> np.ndarray:
        s = snapshot[shoulder]
        # Rotation.apply rejects read-only buffers
        return s.position + s.rotation.apply(np.array(self.local_offset))


@dataclass(frozen=True)
class ReachBoundary:
    """Sphere around the shoulder that the amplification ray is cast against."""
    radius: float

    def center(self, snapshot: PoseSnapshot, shoulder: Joint) -> np.ndarray:
        return snapshot.position(shoulder)


class CalibrationStateMachine:
    def __init__(self, side: Side, radius_scale: Optional[float] = None, config: Optional[dict] = None):
        self.config = config or CONFIG
        self.side = side
        self.shoulder = Joint.for_side("shoulder", side)
        self.hand = Joint.for_side("hand", side)
        self.radius_scale = radius_scale if radius_scale is not None else self.config["REACH_RADIUS_SCALE"]

        self.status = CalibrationStatus.INACTIVE
        self.max_reach_distance = self.config["DEFAULT_MAX_REACH"]
        self._comfort: Optional[ComfortPoint] = None
        self._boundary: Optional[ReachBoundary] = None

    @property
    def prompt(self) -> str:
        return self.config["PROMPTS"][self.status.value]

    @property
    def is_active(self) -> bool:
        return self.status == CalibrationStatus.ACTIVE

    def begin(self) -> None:
        """Starts (or restarts) calibration; any previous calibration is discarded."""
        if self.status != CalibrationStatus.INACTIVE:
            logger.info(f"{self.side.value} hand: recalibrating from {self.status.value}")
        self._comfort = None
        self._boundary = None
        self.status = CalibrationStatus.CALIBRATE_COMFORT

    def confirm(self, snapshot: PoseSnapshot) -> bool:
        """
        Captures the current calibration step from `snapshot`.
        Returns False when there is no step waiting for confirmation.
        """
        if self.status == CalibrationStatus.CALIBRATE_COMFORT:
            shoulder = snapshot[self.shoulder]
            offset = snapshot.position(self.hand) - shoulder.position
            local = shoulder.rotation.inv().apply(offset)
            local.flags.writeable = False
            self._comfort = ComfortPoint(local)
            self.status = CalibrationStatus.CALIBRATE_MAX
            logger.info(f"{self.side.value} hand: comfort point set")
            return True

        if self.status == CalibrationStatus.CALIBRATE_MAX:
            if self._comfort is None:
                return False
            self.max_reach_distance = distance(snapshot.position(self.shoulder), snapshot.position(self.hand))
            self._boundary = ReachBoundary(self.max_reach_distance * self.radius_scale)
            self.status = CalibrationStatus.ACTIVE
            logger.info(f"{self.side.value} hand: max reach {self.max_reach_distance:.3f} m, amplification active")
            return True

        return False

    def comfort_point(self, snapshot: PoseSnapshot) -> Optional[np.ndarray]:
        """World position of the comfort point for this tick."""
        if self._comfort is None:
            return None
        return self._comfort.world(snapshot, self.shoulder)

    def reach_boundary(self, snapshot: PoseSnapshot) -> Optional[tuple]:
        """(center, radius) of the reach sphere for this tick."""
        if self._boundary is None:
            return None
        return self._boundary.center(snapshot, self.shoulder), self._boundary.radius
