"""
Handler Context Definition.
Defines the Data Transfer Object (DTO) for the Control Layer.
"""
from typing import Dict, List, Optional

import numpy as np

from ergoreach.core.types import PoseSnapshot, PostureAngles, RulaScores, Side, TickCommands


class TickContext:
    """
    A unified context object containing all data required for a Handler to make decisions.
    Wraps the effective Pose Snapshot and this tick's Commands, plus the
    outputs the handlers fill in as the pipeline runs.
    """
    def __init__(self, snapshot: Optional[PoseSnapshot], commands: TickCommands, live: bool):
        # 1. Inputs
        self.snapshot = snapshot   # Live or last known good; None before first valid frame
        self.commands = commands
        self.live = live

        # 2. Outputs (Populated by Handlers)
        self.amplified: Dict[Side, np.ndarray] = {}
        self.angles: Optional[PostureAngles] = None
        self.rula: Optional[RulaScores] = None
        self.errors: List[str] = []

    @property
    def has_pose(self) -> bool:
        return self.snapshot is not None

    def report(self, message: str) -> None:
        self.errors.append(message)
