"""
ErgoReach - Main Entry Point.
============================

This module serves as the host loop for the ErgoReach core.
It orchestrates the layers by:
1. Polling the Perception Layer (a pose provider) once per frame.
2. Feeding the snapshot and this frame's commands to the Controller.
3. Publishing the amplified hands and RULA scores (here: to the log).

The VR runtime is not part of this repository, so the loop is driven by a
SyntheticPoseProvider: a seated operator reaching forward and back, with a
short tracking dropout in the middle of the session.

Usage:
    $ python -m ergoreach.main
"""
import logging
import math
import time
from typing import Dict

import numpy as np

from ergoreach.config import CONFIG
from ergoreach.control.controller import ErgoController
from ergoreach.core.interfaces import IPoseProvider
from ergoreach.core.types import Joint, PoseSnapshot, Side, TickCommands, TrackedPoint
from ergoreach.logging_config import setup_logging

logger = logging.getLogger("ergoreach.main")

# Scripted session (tick indices)
BEGIN_TICK = 10
CONFIRM_COMFORT_TICK = 20
CONFIRM_MAX_TICK = 60
DROPOUT = range(180, 200)
SESSION_TICKS = 270
REPORT_EVERY = 30


class SyntheticPoseProvider(IPoseProvider):
    """
    Generates a seated operator whose hands reach forward and back.

    Tick `CONFIRM_MAX_TICK` lands on full extension so the scripted
    calibration captures a realistic max reach.
    """
    SHOULDER_HEIGHT = 1.4
    SHOULDER_HALF_WIDTH = 0.2

    def __init__(self, period_ticks: int = 80, dropout=DROPOUT):
        self.period = period_ticks
        self.dropout = dropout
        self.tick = 0

    def _reach(self) -> float:
        # 0.25 m at rest, 0.6 m at full extension
        phase = 2 * math.pi * (self.tick - CONFIRM_MAX_TICK) / self.period
        return 0.25 + 0.35 * (1 + math.cos(phase)) / 2

    def poll(self) -> PoseSnapshot:
        reach = self._reach()
        joints: Dict[Joint, TrackedPoint] = {
            Joint.HEAD: TrackedPoint.at(0.0, 1.7, 0.0),
            Joint.WAIST: TrackedPoint.at(0.0, 1.0, 0.0),
        }
        for side in Side:
            x = self.SHOULDER_HALF_WIDTH * (1 if side is Side.RIGHT else -1)
            shoulder = np.array([x, self.SHOULDER_HEIGHT, 0.0])
            hand = shoulder + np.array([0.0, -0.15, reach])
            wrist = hand - np.array([0.0, 0.0, 0.05])
            elbow = shoulder + np.array([0.0, -0.25, reach / 3])
            joints[Joint.for_side("shoulder", side)] = TrackedPoint(shoulder)
            joints[Joint.for_side("elbow", side)] = TrackedPoint(elbow)
            joints[Joint.for_side("wrist", side)] = TrackedPoint(wrist)
            joints[Joint.for_side("hand", side)] = TrackedPoint(hand)

        valid = self.tick not in self.dropout
        self.tick += 1
        return PoseSnapshot(joints, tracking_valid=valid)


def scripted_commands(tick: int) -> TickCommands:
    both = frozenset(Side)
    if tick == BEGIN_TICK:
        return TickCommands(begin_calibration=both)
    if tick in (CONFIRM_COMFORT_TICK, CONFIRM_MAX_TICK):
        return TickCommands(confirm=both)
    return TickCommands()


def main(realtime: bool = True):
    """
    Main Event Loop.
    """
    # 1. Boot Sequence
    setup_logging()
    print("🚀 ERGOREACH: ONLINE")
    print(f"   -> Tick rate {CONFIG['TARGET_HZ']} Hz, {SESSION_TICKS} ticks")

    # 2. Initialize Subsystems
    provider = SyntheticPoseProvider()
    pilot = ErgoController()
    frame_budget = 1.0 / CONFIG["TARGET_HZ"]

    try:
        for tick in range(SESSION_TICKS):
            start = time.perf_counter()

            out = pilot.step(provider, scripted_commands(tick))

            if tick % REPORT_EVERY == 0 or out.errors:
                right = out.amplified.get(Side.RIGHT)
                logger.info(
                    f"tick {tick:3d} | {'LIVE' if out.live else 'HELD'} | "
                    f"right {out.status[Side.RIGHT].value} -> {np.round(right, 3) if right is not None else '-'} | "
                    f"RULA L {out.left_rula} R {out.right_rula} lower {out.lower_rula}"
                )

            # Pace to the frame budget
            if realtime:
                spare = frame_budget - (time.perf_counter() - start)
                if spare > 0:
                    time.sleep(spare)
    finally:
        print("🔴 ERGOREACH OFFLINE")


if __name__ == "__main__":
    main()
