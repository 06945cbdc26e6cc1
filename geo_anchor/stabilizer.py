"""Hysteresis decision for a marker's anchor: create, replace, keep or drop."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from .errors import DegenerateProjection
from .transforms import compose_pose, translation_distance, translation_pose
from .types import AnchorState, MarkerObservation, Pose, TrackingState

JITTER_THRESHOLD_M = 0.03


class Action(Enum):
    IGNORE = "ignore"  # paused: detected but not yet tracked
    CREATE = "create"
    REPLACE = "replace"
    KEEP = "keep"
    REMOVE = "remove"


@dataclass(frozen=True)
class Decision:
    marker_id: int
    action: Action
    pose: Optional[Pose] = None
    distance: Optional[float] = None


class AnchorStabilizer:
    def __init__(self, threshold_m: float = JITTER_THRESHOLD_M):
        if threshold_m <= 0:
            raise ValueError("threshold_m must be positive")
        self.threshold_m = float(threshold_m)

    @staticmethod
    def candidate_pose(center_pose: Pose, offset: Tuple[float, float]) -> Pose:
        """Apply the in-plane offset in the marker frame, then move to world."""
        return compose_pose(center_pose, translation_pose(offset[0], offset[1], 0.0))

    def decide(
        self,
        obs: MarkerObservation,
        offset: Optional[Tuple[float, float]],
        current: Optional[AnchorState],
    ) -> Decision:
        if obs.tracking_state is TrackingState.PAUSED:
            return Decision(obs.marker_id, Action.IGNORE)

        if not obs.fully_tracked:
            return Decision(obs.marker_id, Action.REMOVE)

        if offset is None:
            raise ValueError(f"marker {obs.marker_id}: fully tracked observation needs an offset")

        candidate = self.candidate_pose(obs.center_pose, offset)
        if not np.all(np.isfinite(candidate.position)):
            raise DegenerateProjection(f"marker {obs.marker_id}: candidate pose is not finite")
        if current is None:
            return Decision(obs.marker_id, Action.CREATE, candidate)

        distance = translation_distance(current.pose, candidate)
        if distance > self.threshold_m:
            return Decision(obs.marker_id, Action.REPLACE, candidate, distance)
        return Decision(obs.marker_id, Action.KEEP, current.pose, distance)
