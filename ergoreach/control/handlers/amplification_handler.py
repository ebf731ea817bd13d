"""ErgoReach Amplification Handler."""
from typing import Dict

from ergoreach.control.amplifier import AmplificationTransform
from ergoreach.control.handlers import TickContext
from ergoreach.core.calibration import CalibrationStateMachine
from ergoreach.core.types import Joint, Side


class AmplificationHandler:
    def __init__(self, amplifier: AmplificationTransform, machines: Dict[Side, CalibrationStateMachine]):
        self.amplifier = amplifier
        self.machines = machines

    def handle(self, ctx: TickContext):
        if not ctx.has_pose:
            return

        for side, machine in self.machines.items():
            hand = ctx.snapshot.position(Joint.for_side("hand", side))

            # Uncalibrated hands are shown where they really are
            if not machine.is_active:
                ctx.amplified[side] = hand.copy()
                continue

            center, radius = machine.reach_boundary(ctx.snapshot)
            result = self.amplifier.amplify(hand, machine.comfort_point(ctx.snapshot), center, radius)
            ctx.amplified[side] = result.position
