"""
ErgoReach Posture Handler.
Samples joint angles and scores RULA; while tracking is lost the last
valid results are republished unchanged.
"""
from typing import Optional

from ergoreach.control.handlers import TickContext
from ergoreach.core.posture import PostureSampler
from ergoreach.core.rula import RulaScorer
from ergoreach.core.types import PostureAngles, RulaScores


class PostureHandler:
    def __init__(self, sampler: PostureSampler, scorer: RulaScorer):
        self.sampler = sampler
        self.scorer = scorer
        self.last_angles: Optional[PostureAngles] = None
        self.last_rula: Optional[RulaScores] = None

    def handle(self, ctx: TickContext):
        if not ctx.has_pose:
            ctx.rula = self.scorer.score(None)
            return

        if ctx.live or self.last_rula is None:
            self.last_angles = self.sampler.sample(ctx.snapshot)
            self.last_rula = self.scorer.score(self.last_angles)

        ctx.angles = self.last_angles
        ctx.rula = self.last_rula
