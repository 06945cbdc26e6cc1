from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

import numpy as np


class TrackingState(Enum):
    NOT_TRACKING = "not_tracking"
    PAUSED = "paused"
    TRACKING = "tracking"
    STOPPED = "stopped"


class TrackingMethod(Enum):
    NOT_TRACKING = "not_tracking"
    LAST_KNOWN_POSE = "last_known_pose"
    FULL_TRACKING = "full_tracking"


@dataclass(frozen=True, eq=False)
class Pose:
    """World-space pose as a Rodrigues rotation vector plus translation (m)."""

    rvec: np.ndarray
    tvec: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "rvec", np.asarray(self.rvec, dtype=float).reshape(3))
        object.__setattr__(self, "tvec", np.asarray(self.tvec, dtype=float).reshape(3))

    @property
    def position(self) -> np.ndarray:
        return self.tvec

    @classmethod
    def identity(cls) -> "Pose":
        return cls(np.zeros(3), np.zeros(3))

    def matrix(self) -> np.ndarray:
        from .transforms import rvec_tvec_to_matrix

        return rvec_tvec_to_matrix(self.rvec, self.tvec)

    @classmethod
    def from_matrix(cls, T: np.ndarray) -> "Pose":
        from .transforms import matrix_to_rvec_tvec

        rvec, tvec = matrix_to_rvec_tvec(T)
        return cls(rvec, tvec)


@dataclass(frozen=True)
class MarkerObservation:
    marker_id: int
    tracking_state: TrackingState
    tracking_method: TrackingMethod
    extent_width: float
    extent_height: float
    center_pose: Pose

    @property
    def fully_tracked(self) -> bool:
        return (
            self.tracking_state is TrackingState.TRACKING
            and self.tracking_method is TrackingMethod.FULL_TRACKING
        )


@dataclass(frozen=True, eq=False)
class CalibrationRecord:
    marker_id: int
    projection: np.ndarray  # (3,3), read-only
    target: tuple[float, float]  # (lat, lon)
    reference_size: tuple[int, int] = (640, 480)


@dataclass
class AnchorState:
    marker_id: int
    pose: Pose


class RenderItem(NamedTuple):
    marker_id: int
    pose: Pose


@dataclass
class FrameResult:
    frame_idx: int
    render: list[RenderItem] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    errors: int = 0
