"""
ErgoReach Types.
Central definition of Data Contracts to prevent circular imports.
"""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional, Tuple, Union

import numpy as np
from scipy.spatial.transform import Rotation

# Local axes of every tracked transform (Y-up world)
AXIS_RIGHT = np.array([1.0, 0.0, 0.0])
AXIS_UP = np.array([0.0, 1.0, 0.0])
AXIS_FORWARD = np.array([0.0, 0.0, 1.0])

# Score reported whenever a RULA lookup cannot be resolved
INVALID_SCORE = -1


# --- BODY TYPES ---
class Side(Enum):
    LEFT = "left"
    RIGHT = "right"


class Joint(Enum):
    HEAD = "head"
    WAIST = "waist"
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    LEFT_ELBOW = "left_elbow"
    RIGHT_ELBOW = "right_elbow"
    LEFT_WRIST = "left_wrist"
    RIGHT_WRIST = "right_wrist"
    LEFT_HAND = "left_hand"
    RIGHT_HAND = "right_hand"
    LEFT_CONTROLLER = "left_controller"
    RIGHT_CONTROLLER = "right_controller"

    @classmethod
    def for_side(cls, kind: str, side: Side) -> "Joint":
        """Resolves e.g. ('hand', Side.LEFT) -> Joint.LEFT_HAND."""
        return cls(f"{side.value}_{kind}")


REQUIRED_JOINTS: FrozenSet[Joint] = frozenset({
    Joint.HEAD, Joint.WAIST,
    Joint.LEFT_SHOULDER, Joint.RIGHT_SHOULDER,
    Joint.LEFT_ELBOW, Joint.RIGHT_ELBOW,
    Joint.LEFT_WRIST, Joint.RIGHT_WRIST,
    Joint.LEFT_HAND, Joint.RIGHT_HAND,
})

# Required on top of REQUIRED_JOINTS when the hands get their orientation from the controllers
CONTROLLER_JOINTS: FrozenSet[Joint] = frozenset({Joint.LEFT_CONTROLLER, Joint.RIGHT_CONTROLLER})


class CalibrationStatus(Enum):
    INACTIVE = "inactive"
    CALIBRATE_COMFORT = "calibrate_comfort"
    CALIBRATE_MAX = "calibrate_max"
    ACTIVE = "active"


class JointSource(Enum):
    IK_MODEL = "ik_model"   # Orientations come from the avatar solver and are authoritative
    SKELETAL = "skeletal"   # External body tracking, positions only
    NONE = "none"


# --- POSE TYPES ---
def _frozen_vector(values) -> np.ndarray:
    vec = np.array(values, dtype=np.float64).reshape(3)
    vec.flags.writeable = False
    return vec


@dataclass(frozen=True, eq=False)
class TrackedPoint:
    """World-space position + orientation of one joint, copied out of the pose provider."""
    position: np.ndarray
    rotation: Rotation = field(default_factory=Rotation.identity)

    def __post_init__(self):
        object.__setattr__(self, "position", _frozen_vector(self.position))

    @classmethod
    def at(cls, x: float, y: float, z: float, rotation: Optional[Rotation] = None) -> "TrackedPoint":
        return cls(np.array([x, y, z]), rotation if rotation is not None else Rotation.identity())

    @property
    def forward(self) -> np.ndarray:
        return self.rotation.apply(AXIS_FORWARD)

    @property
    def up(self) -> np.ndarray:
        return self.rotation.apply(AXIS_UP)

    @property
    def right(self) -> np.ndarray:
        return self.rotation.apply(AXIS_RIGHT)

    @property
    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self.position)) and np.all(np.isfinite(self.rotation.as_quat())))

    def with_rotation(self, rotation: Rotation) -> "TrackedPoint":
        return TrackedPoint(self.position, rotation)


@dataclass(frozen=True, eq=False)
class PoseSnapshot:
    """
    Immutable per-tick copy of every joint the provider reported.
    The core never holds on to provider objects, only these snapshots.
    """
    joints: Mapping[Joint, TrackedPoint]
    tracking_valid: bool = True

    def __post_init__(self):
        object.__setattr__(self, "joints", MappingProxyType(dict(self.joints)))

    def __getitem__(self, joint: Joint) -> TrackedPoint:
        return self.joints[joint]

    def __contains__(self, joint: Joint) -> bool:
        return joint in self.joints

    def get(self, joint: Joint) -> Optional[TrackedPoint]:
        return self.joints.get(joint)

    def position(self, joint: Joint) -> np.ndarray:
        return self.joints[joint].position

    def missing(self, required: Iterable[Joint] = REQUIRED_JOINTS) -> FrozenSet[Joint]:
        """Required joints that are absent or carry non-finite data."""
        return frozenset(
            j for j in required
            if j not in self.joints or not self.joints[j].is_finite
        )

    def is_valid(self, required: Iterable[Joint] = REQUIRED_JOINTS) -> bool:
        return self.tracking_valid and not self.missing(required)

    def replace(self, updates: Mapping[Joint, TrackedPoint]) -> "PoseSnapshot":
        merged = dict(self.joints)
        merged.update(updates)
        return PoseSnapshot(merged, self.tracking_valid)


# --- POSTURE TYPES ---
@dataclass(frozen=True)
class ArmAngles:
    shoulder: float = 0.0
    elbow: float = 0.0
    wrist: float = 0.0
    midline_offset: float = 0.0   # > 0 while the hand stays on its own side of the body midline
    lateral_offset: float = 0.0   # > 0 while the hand is outboard of its shoulder


@dataclass(frozen=True)
class PostureAngles:
    left: ArmAngles
    right: ArmAngles
    trunk: float = 0.0            # Signed forward lean (deg)
    trunk_twist: float = 0.0
    trunk_side_bend: float = 0.0
    neck: float = 0.0             # Signed forward tilt (deg)
    neck_twist: float = 0.0
    neck_roll: float = 0.0

    def arm(self, side: Side) -> ArmAngles:
        return self.left if side is Side.LEFT else self.right


# --- SCORING TYPES ---
class LookupStatus(Enum):
    OK = "ok"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    NO_DATA = "no_data"


@dataclass(frozen=True)
class ScoreResult:
    score: int
    status: LookupStatus = LookupStatus.OK

    @classmethod
    def invalid(cls, status: LookupStatus = LookupStatus.INDEX_OUT_OF_RANGE) -> "ScoreResult":
        return cls(INVALID_SCORE, status)

    @property
    def is_valid(self) -> bool:
        return self.status == LookupStatus.OK


@dataclass(frozen=True)
class RulaScores:
    left: ScoreResult
    right: ScoreResult
    lower: ScoreResult

    def upper(self, side: Side) -> ScoreResult:
        return self.left if side is Side.LEFT else self.right


# --- COMMAND TYPES ---
@dataclass(frozen=True)
class SelectPreset:
    index: int


@dataclass(frozen=True)
class ShiftControlPoint:
    index: int
    delta: float


@dataclass(frozen=True)
class SetControlPoint:
    index: int
    input: float
    output: float


@dataclass(frozen=True)
class SetIntensity:
    amount: float


CurveCommand = Union[SelectPreset, ShiftControlPoint, SetControlPoint, SetIntensity]


@dataclass(frozen=True)
class TickCommands:
    begin_calibration: FrozenSet[Side] = frozenset()
    confirm: FrozenSet[Side] = frozenset()
    curve: Tuple[CurveCommand, ...] = ()


NO_COMMANDS = TickCommands()


# --- OUTPUT TYPES ---
@dataclass(frozen=True, eq=False)
class TickOutputs:
    amplified: Mapping[Side, np.ndarray]
    status: Mapping[Side, CalibrationStatus]
    prompts: Mapping[Side, str]
    rula: Optional[RulaScores]
    angles: Optional[PostureAngles]
    live: bool                      # False while running on the last known good snapshot
    errors: Tuple[str, ...] = ()

    @property
    def left_rula(self) -> int:
        return self.rula.left.score if self.rula else INVALID_SCORE

    @property
    def right_rula(self) -> int:
        return self.rula.right.score if self.rula else INVALID_SCORE

    @property
    def lower_rula(self) -> int:
        return self.rula.lower.score if self.rula else INVALID_SCORE
