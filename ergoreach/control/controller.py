"""
ErgoReach Controller.
Acts as the central nervous system: one explicit tick per rendered frame.
"""
from types import MappingProxyType
from typing import Optional

from ergoreach.config import CONFIG
from ergoreach.control.amplifier import AmplificationTransform
from ergoreach.control.handlers import TickContext
from ergoreach.core.calibration import CalibrationStateMachine
from ergoreach.core.curve import CurveModel
from ergoreach.core.interfaces import IPoseProvider
from ergoreach.core.posture import PostureSampler
from ergoreach.core.rula import RulaScorer
from ergoreach.core.types import NO_COMMANDS, PoseSnapshot, Side, TickCommands, TickOutputs

# HANDLERS
from ergoreach.control.handlers.amplification_handler import AmplificationHandler
from ergoreach.control.handlers.calibration_handler import CalibrationHandler
from ergoreach.control.handlers.curve_handler import CurveHandler
from ergoreach.control.handlers.posture_handler import PostureHandler


class ErgoController:
    def __init__(self,
                 curve: Optional[CurveModel] = None,
                 sampler: Optional[PostureSampler] = None,
                 scorer: Optional[RulaScorer] = None,
                 config: Optional[dict] = None):
        self.config = config or CONFIG
        self.curve = curve or CurveModel.from_preset(config=self.config)
        self.sampler = sampler or PostureSampler(config=self.config)
        self.scorer = scorer or RulaScorer(self.config)

        # One independent state machine per hand
        self.calibration = {side: CalibrationStateMachine(side, config=self.config) for side in Side}
        self.amplifier = AmplificationTransform(self.curve, eps=self.config["GEOMETRY_EPSILON"])

        # Handlers
        self.curve_handler = CurveHandler(self.curve)
        self.calibration_handler = CalibrationHandler(self.calibration)
        self.amplification_handler = AmplificationHandler(self.amplifier, self.calibration)
        self.posture_handler = PostureHandler(self.sampler, self.scorer)

    def step(self, provider: IPoseProvider, commands: TickCommands = NO_COMMANDS) -> TickOutputs:
        """Polls the pose provider and runs one tick on what it returned."""
        return self.tick(provider.poll(), commands)

    def tick(self, snapshot: Optional[PoseSnapshot], commands: TickCommands = NO_COMMANDS) -> TickOutputs:
        # 1. Gate: live snapshot, or the last known good one while tracking is lost
        effective = self.sampler.resolve(snapshot)
        live = effective is not None and not self.sampler.degraded

        # 2. Context Creation
        ctx = TickContext(effective, commands, live)

        # 3. Execution Pipeline
        self.curve_handler.handle(ctx)
        self.calibration_handler.handle(ctx)
        self.amplification_handler.handle(ctx)
        self.posture_handler.handle(ctx)

        # 4. Publish
        return TickOutputs(
            amplified=MappingProxyType(dict(ctx.amplified)),
            status=MappingProxyType({side: m.status for side, m in self.calibration.items()}),
            prompts=MappingProxyType({side: m.prompt for side, m in self.calibration.items()}),
            rula=ctx.rula,
            angles=ctx.angles,
            live=live,
            errors=tuple(ctx.errors),
        )
