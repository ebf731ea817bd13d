"""ErgoReach Curve Handler (Experiment Conditions / Tuning)."""
import logging

from ergoreach.control.handlers import TickContext
from ergoreach.core.curve import CurveError, CurveModel
from ergoreach.core.types import SelectPreset, SetControlPoint, SetIntensity, ShiftControlPoint

logger = logging.getLogger(__name__)


class CurveHandler:
    def __init__(self, curve: CurveModel):
        self.curve = curve

    def handle(self, ctx: TickContext):
        # Commands apply in order; a rejected one leaves the curve as the previous one left it
        for command in ctx.commands.curve:
            try:
                self._apply(command)
            except CurveError as e:
                logger.warning(f"Curve command rejected: {command} ({e})")
                ctx.report(f"curve: {e}")

    def _apply(self, command):
        if isinstance(command, SelectPreset):
            self.curve.select_preset(command.index)
        elif isinstance(command, ShiftControlPoint):
            self.curve.shift_control_point(command.index, command.delta)
        elif isinstance(command, SetControlPoint):
            self.curve.set_control_point(command.index, command.input, command.output)
        elif isinstance(command, SetIntensity):
            self.curve.set_intensity(command.amount)
        else:
            raise CurveError(f"Unknown curve command: {command!r}")
