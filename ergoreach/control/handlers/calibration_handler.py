"""ErgoReach Calibration Handler (Begin / Confirm)."""
import logging
from typing import Dict

from ergoreach.control.handlers import TickContext
from ergoreach.core.calibration import CalibrationStateMachine
from ergoreach.core.types import Side

logger = logging.getLogger(__name__)


class CalibrationHandler:
    def __init__(self, machines: Dict[Side, CalibrationStateMachine]):
        self.machines = machines

    def handle(self, ctx: TickContext):
        for side, machine in self.machines.items():
            # Begin first: begin + confirm in one tick captures the comfort point right away
            if side in ctx.commands.begin_calibration:
                machine.begin()

            if side in ctx.commands.confirm:
                if not ctx.has_pose:
                    logger.warning(f"{side.value} hand: confirm ignored, no valid pose yet")
                    ctx.report(f"calibration: {side.value} confirm without a valid pose")
                    continue
                # A held pose is where the hand was, not where it is
                if not ctx.live:
                    logger.warning(f"{side.value} hand: confirm ignored, body tracking lost")
                    ctx.report(f"calibration: {side.value} confirm while tracking is lost")
                    continue
                machine.confirm(ctx.snapshot)
