"""
ErgoReach RULA Referee.
======================

Discretizes joint angles into RULA bins, applies the postural adjustments,
and looks the result up in the reference tables.

Every lookup is range-checked against the table dimensions first: an
out-of-range bin yields INVALID_SCORE and a warning, never an exception.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from ergoreach.config import CONFIG
from ergoreach.core import rula_tables
from ergoreach.core.types import (
    ArmAngles, LookupStatus, PostureAngles, RulaScores, ScoreResult, Side,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArmBins:
    shoulder: int
    wrist: int
    wrist_twist: int
    lower_arm: int

    def as_index(self):
        return (self.shoulder, self.wrist, self.wrist_twist, self.lower_arm)


@dataclass(frozen=True)
class RulaBins:
    left: ArmBins
    right: ArmBins
    trunk: int
    neck: int

    def arm(self, side: Side) -> ArmBins:
        return self.left if side is Side.LEFT else self.right


# --- DISCRETIZATION ---
def shoulder_bin(angle: float, limits=None) -> int:
    first, second, third = limits or CONFIG["SHOULDER_LIMITS"]
    angle = abs(angle)
    if angle < first:
        return 1
    if angle < second:
        return 2
    if angle < third:
        return 3
    return 4


def lower_arm_bin(elbow: float, neutral=None) -> int:
    low, high = neutral or CONFIG["ELBOW_NEUTRAL_RANGE"]
    return 1 if low <= abs(elbow) <= high else 2


def wrist_bin(angle: float, side: Side, limits=None) -> int:
    first, second = limits or CONFIG["WRIST_LIMITS"][side.value]
    angle = abs(angle)
    if angle < first:
        return 1
    if angle < second:
        return 2
    return 3


def trunk_bin(lean: float, limits=None) -> int:
    upright, slight, strong = limits or CONFIG["TRUNK_LIMITS"]
    if lean <= upright:
        return 1
    if lean <= slight:
        return 2
    if lean <= strong:
        return 3
    return 4


def neck_bin(tilt: float, limits=None) -> int:
    # Extension (negative tilt) is its own, worst category
    slight, strong = limits or CONFIG["NECK_LIMITS"]
    if tilt < 0:
        return 4
    if tilt < slight:
        return 1
    if tilt < strong:
        return 2
    return 3


class RulaScorer:
    def __init__(self, config: Optional[dict] = None):
        self.config = config or CONFIG

    def bins(self, angles: PostureAngles) -> RulaBins:
        cfg = self.config

        trunk = trunk_bin(angles.trunk, cfg["TRUNK_LIMITS"])
        if abs(angles.trunk_twist) > cfg["TRUNK_TWIST_LIMIT"]:
            logger.debug(f"Trunk twist {angles.trunk_twist:.1f} deg")
            trunk += 1
        if abs(angles.trunk_side_bend) > cfg["TRUNK_SIDE_BEND_LIMIT"]:
            logger.debug(f"Trunk side bend {angles.trunk_side_bend:.1f} deg")
            trunk += 1

        neck = neck_bin(angles.neck, cfg["NECK_LIMITS"])
        if abs(angles.neck_twist) > cfg["NECK_TWIST_LIMIT"]:
            logger.debug(f"Neck twist {angles.neck_twist:.1f} deg")
            neck += 1
        if abs(angles.neck_roll) > cfg["NECK_ROLL_LIMIT"]:
            logger.debug(f"Neck roll {angles.neck_roll:.1f} deg")
            neck += 1

        return RulaBins(
            left=self._arm_bins(angles.left, Side.LEFT),
            right=self._arm_bins(angles.right, Side.RIGHT),
            trunk=trunk,
            neck=neck,
        )

    def _arm_bins(self, arm: ArmAngles, side: Side) -> ArmBins:
        cfg = self.config
        lower = lower_arm_bin(arm.elbow, cfg["ELBOW_NEUTRAL_RANGE"])

        # Only one of the two adjustments can fire per arm
        if arm.midline_offset < 0:
            logger.debug(f"{side.value} hand crossed body midline")
            lower += 1
        elif arm.lateral_offset > 0:
            logger.debug(f"{side.value} hand out to side")
            lower += 1

        return ArmBins(
            shoulder=shoulder_bin(arm.shoulder, cfg["SHOULDER_LIMITS"]),
            wrist=wrist_bin(arm.wrist, side, cfg["WRIST_LIMITS"][side.value]),
            wrist_twist=cfg["WRIST_TWIST_BIN"],
            lower_arm=lower,
        )

    # --- LOOKUP ---
    def upper_score(self, side: Side, bins: ArmBins) -> ScoreResult:
        index = bins.as_index()
        if not rula_tables.in_bounds(index, rula_tables.UPPER_SHAPE):
            logger.warning(f"INVALID UPPER RULA ({side.value}): bins {index} outside {rula_tables.UPPER_SHAPE}")
            return ScoreResult.invalid()
        return ScoreResult(int(rula_tables.UPPER[tuple(b - 1 for b in index)]))

    def lower_score(self, trunk: int, neck: int) -> ScoreResult:
        if not rula_tables.in_bounds((trunk, neck), rula_tables.LOWER_SHAPE):
            logger.warning(f"INVALID LOWER RULA: bins {(trunk, neck)} outside {rula_tables.LOWER_SHAPE}")
            return ScoreResult.invalid()
        return ScoreResult(int(rula_tables.LOWER[trunk - 1, neck - 1]))

    def score(self, angles: Optional[PostureAngles]) -> RulaScores:
        if angles is None:
            missing = ScoreResult.invalid(LookupStatus.NO_DATA)
            return RulaScores(missing, missing, missing)

        bins = self.bins(angles)
        scores = RulaScores(
            left=self.upper_score(Side.LEFT, bins.left),
            right=self.upper_score(Side.RIGHT, bins.right),
            lower=self.lower_score(bins.trunk, bins.neck),
        )
        logger.debug(f"RULA - left: {scores.left.score} | right: {scores.right.score} | lower: {scores.lower.score}")
        return scores
