"""
ErgoReach Core Interfaces.
Defines the abstract contracts for system interaction.
"""

from abc import ABC, abstractmethod

from ergoreach.core.types import PoseSnapshot


class IPoseProvider(ABC):
    """
    Abstract Protocol for the VR runtime / body tracker.
    Every call hands back a fresh, immutable snapshot; the core never keeps
    references to the runtime's own scene objects.
    """

    @abstractmethod
    def poll(self) -> PoseSnapshot: pass
