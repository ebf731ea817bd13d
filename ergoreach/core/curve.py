"""
ErgoReach Amplification Curve.
=============================

Maps "fraction of max reach" to "fraction of max reach shown to the user".
The curve is stored as ordered control points and evaluated either
piecewise-linearly or as a cubic Hermite spline through the points.

Key Concept: "Reach Non-Linearity"
A curve that stays on the diagonal near the body and bends upward past a
knee lets small physical motion near full extension cover more virtual
distance, while fine motion close to the comfort point stays 1:1.
"""
import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from scipy.interpolate import CubicHermiteSpline

from ergoreach.config import CONFIG

logger = logging.getLogger(__name__)


class CurveError(ValueError):
    """A curve edit was rejected; the curve is unchanged."""


class CurveOrderError(CurveError):
    """The edit would leave control-point inputs unsorted."""


class ControlPointIndexError(CurveError):
    """The control point does not exist."""


class PresetIndexError(CurveError):
    """The preset bank has no entry at that index."""


@dataclass(frozen=True)
class ControlPoint:
    input: float
    output: float
    tangent: Optional[float] = None   # None = automatic slope from the neighbours


PointLike = Union[ControlPoint, Tuple[float, float], Tuple[float, float, Optional[float]]]


class CurveModel:
    SHAPES = ("linear", "smooth")
    EXTRAPOLATIONS = ("clamp", "linear")

    def __init__(self,
                 points: Sequence[PointLike],
                 shape: Optional[str] = None,
                 extrapolation: Optional[str] = None,
                 presets: Optional[Sequence[Sequence[PointLike]]] = None,
                 config: Optional[dict] = None):
        self.config = config or CONFIG
        self.shape = shape or self.config["CURVE_SHAPE"]
        self.extrapolation = extrapolation or self.config["CURVE_EXTRAPOLATION"]
        if self.shape not in self.SHAPES:
            raise ValueError(f"Unknown curve shape: {self.shape!r}")
        if self.extrapolation not in self.EXTRAPOLATIONS:
            raise ValueError(f"Unknown curve extrapolation: {self.extrapolation!r}")

        self.presets = list(presets) if presets is not None else list(self.config["CURVE_PRESETS"])
        self.preset_index = -1
        self._points: Tuple[ControlPoint, ...] = self._validated(points)
        self._spline: Optional[CubicHermiteSpline] = None

    @classmethod
    def from_preset(cls, index: Optional[int] = None, **kwargs) -> "CurveModel":
        """Builds a curve straight from the preset bank (default preset if no index)."""
        config = kwargs.get("config") or CONFIG
        presets = kwargs.get("presets")
        bank = list(presets) if presets is not None else list(config["CURVE_PRESETS"])
        if index is None:
            index = config["CURVE_DEFAULT_PRESET"]
        if not 0 <= index < len(bank):
            raise PresetIndexError(f"Preset {index} out of range (0..{len(bank) - 1})")
        model = cls(bank[index], **kwargs)
        model.preset_index = index
        return model

    # --- STATE ---
    @property
    def points(self) -> Tuple[ControlPoint, ...]:
        return self._points

    def __len__(self) -> int:
        return len(self._points)

    # --- EVALUATION ---
    def evaluate(self, x: float) -> float:
        """
        Returns f(x) for any real x. Outside the control-point range the
        curve is clamped to its end values or continued along its end slopes.
        """
        xs = np.array([p.input for p in self._points])
        ys = np.array([p.output for p in self._points])
        if len(xs) == 1:
            return float(ys[0])

        x = float(x)
        if x < xs[0] or x > xs[-1]:
            end = 0 if x < xs[0] else -1
            if self.extrapolation == "clamp":
                return float(ys[end])
            return float(ys[end] + self._end_slope(end) * (x - xs[end]))

        if self.shape == "linear":
            return float(np.interp(x, xs, ys))
        return float(self._hermite()(x))

    def _tangents(self) -> np.ndarray:
        xs = np.array([p.input for p in self._points])
        ys = np.array([p.output for p in self._points])
        slopes = np.gradient(ys, xs)
        for i, p in enumerate(self._points):
            if p.tangent is not None:
                slopes[i] = p.tangent
        return slopes

    def _hermite(self) -> CubicHermiteSpline:
        if self._spline is None:
            xs = np.array([p.input for p in self._points])
            ys = np.array([p.output for p in self._points])
            self._spline = CubicHermiteSpline(xs, ys, self._tangents())
        return self._spline

    def _end_slope(self, end: int) -> float:
        if self.shape == "smooth":
            return float(self._tangents()[end])
        a, b = (self._points[0], self._points[1]) if end == 0 else (self._points[-2], self._points[-1])
        return (b.output - a.output) / (b.input - a.input)

    # --- EDITING ---
    def shift_control_point(self, index: int, delta: float) -> None:
        """Moves a control point along the input axis by `delta`."""
        point = self._point_at(index)
        self.set_control_point(index, point.input + delta, point.output)

    def set_control_point(self, index: int, input: float, output: float) -> None:
        point = self._point_at(index)
        edited = list(self._points)
        edited[index] = replace(point, input=float(input), output=float(output))
        self._commit(edited)
        logger.debug(f"Control point {index} -> ({input:.3f}, {output:.3f})")

    def select_preset(self, index: int) -> None:
        if not 0 <= index < len(self.presets):
            raise PresetIndexError(f"Preset {index} out of range (0..{len(self.presets) - 1})")
        self._commit(self.presets[index])
        self.preset_index = index
        logger.info(f"Amplification curve -> preset {index}")

    def set_intensity(self, amount: float) -> None:
        """
        Tunes the reach non-linearity: pulls the knee point `amount` closer to
        the body than the base key time and lifts the end point to match.
        Needs a curve with a knee (at least three points).
        """
        knee = self.config["CURVE_KNEE_INDEX"]
        if len(self._points) < 3 or knee >= len(self._points) - 1:
            raise ControlPointIndexError("Intensity needs a knee point before the end point")
        edited = list(self._points)
        edited[knee] = replace(edited[knee], input=self.config["CURVE_BASE_KEY_TIME"] - amount)
        edited[-1] = replace(edited[-1], output=1.0 + self.config["CURVE_INTENSITY_LIFT"] * amount)
        self._commit(edited)
        logger.debug(f"Curve intensity -> {amount:.3f}")

    def _point_at(self, index: int) -> ControlPoint:
        if not 0 <= index < len(self._points):
            raise ControlPointIndexError(f"Control point {index} out of range (0..{len(self._points) - 1})")
        return self._points[index]

    def _commit(self, points: Sequence[PointLike]) -> None:
        # Validation raises before anything is swapped in
        self._points = self._validated(points)
        self._spline = None

    @staticmethod
    def _validated(points: Sequence[PointLike]) -> Tuple[ControlPoint, ...]:
        parsed: List[ControlPoint] = [
            p if isinstance(p, ControlPoint) else ControlPoint(*p) for p in points
        ]
        if not parsed:
            raise CurveError("A curve needs at least one control point")
        for p in parsed:
            if not (np.isfinite(p.input) and np.isfinite(p.output)):
                raise CurveError(f"Non-finite control point: {p}")
        for a, b in zip(parsed, parsed[1:]):
            if not b.input > a.input:
                raise CurveOrderError(f"Control point inputs must increase: {a.input} !< {b.input}")
        return tuple(ControlPoint(float(p.input), float(p.output), p.tangent) for p in parsed)
