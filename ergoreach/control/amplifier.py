"""
ErgoReach Amplification Engine.
==============================

This module maps the raw hand position to the amplified virtual hand position.

Key Concept: "Ray to the Reach Sphere"
1. A ray is cast from the comfort point through the real hand.
2. Where it exits the reach sphere around the shoulder is the max-reach point
   for this direction.
3. How far along that ray the hand is (0 = comfort, 1 = max reach) is fed to
   the amplification curve, and the curve's answer places the virtual hand on
   the same ray.

Nothing is smoothed or remembered between ticks: the output is a pure function
of the current pose, calibration and curve.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ergoreach.config import CONFIG
from ergoreach.core.curve import CurveModel
from ergoreach.core.kinematics import distance, normalize, ray_sphere_exit

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Amplification:
    position: np.ndarray
    applied: bool = True
    reason: str = ""        # Why the raw position was passed through
    percent_reach: float = 0.0


class AmplificationTransform:
    """
    Manages the comfort-point -> max-reach interpolation for one or both hands.
    """
    def __init__(self, curve: CurveModel, eps: Optional[float] = None):
        self.curve = curve
        self.eps = eps if eps is not None else CONFIG["GEOMETRY_EPSILON"]

    def amplify(self,
                hand: np.ndarray,
                comfort: np.ndarray,
                boundary_center: np.ndarray,
                boundary_radius: float) -> Amplification:
        """
        Args:
            hand: Raw world position of the hand.
            comfort: World position of the calibrated comfort point.
            boundary_center, boundary_radius: The reach sphere for this tick.

        Returns:
            Amplification with the virtual hand position. On degenerate geometry
            the raw hand position is returned with `applied=False`.
        """
        hand = np.asarray(hand, dtype=np.float64)
        comfort = np.asarray(comfort, dtype=np.float64)

        # 1. Direction through the hand
        direction = normalize(hand - comfort, self.eps)
        if direction is None:
            return self._passthrough(hand, "hand at comfort point")

        # 2. Max-reach point along that direction
        max_hit = ray_sphere_exit(comfort, direction, boundary_center, boundary_radius, self.eps)
        if max_hit is None:
            return self._passthrough(hand, "no reach boundary hit")

        # 3. Reach fractions
        max_reach = distance(comfort, max_hit)
        if max_reach <= self.eps:
            return self._passthrough(hand, "zero max reach")
        percent_reach = distance(comfort, hand) / max_reach

        # 4. Curve -> magnitude along the ray
        magnitude = self.curve.evaluate(percent_reach) * max_reach
        return Amplification(self.interpolate(comfort, max_hit, magnitude), percent_reach=percent_reach)

    @staticmethod
    def interpolate(comfort: np.ndarray, max_hit: np.ndarray, magnitude: float) -> np.ndarray:
        """Point `magnitude` metres from the comfort point toward the max-reach point."""
        return comfort + normalize(max_hit - comfort) * magnitude

    def _passthrough(self, hand: np.ndarray, reason: str) -> Amplification:
        logger.debug(f"Amplification skipped: {reason}")
        return Amplification(hand.copy(), applied=False, reason=reason)
