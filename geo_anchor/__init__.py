"""Stable world anchors for geographic points of interest on tracked markers."""

from .calibration import CalibrationStore, load_calibration
from .config import EngineConfig, load_config
from .engine import AnchorEngine, ConfigureResult, configure
from .errors import CalibrationError, DegenerateProjection, GeoAnchorError, MalformedObservation
from .projector import project
from .registry import AnchorRegistry, feed
from .stabilizer import AnchorStabilizer
from .types import (
    AnchorState,
    CalibrationRecord,
    FrameResult,
    MarkerObservation,
    Pose,
    RenderItem,
    TrackingMethod,
    TrackingState,
)

__all__ = [
    "AnchorEngine",
    "AnchorRegistry",
    "AnchorStabilizer",
    "AnchorState",
    "CalibrationError",
    "CalibrationRecord",
    "CalibrationStore",
    "ConfigureResult",
    "DegenerateProjection",
    "EngineConfig",
    "FrameResult",
    "GeoAnchorError",
    "MalformedObservation",
    "MarkerObservation",
    "Pose",
    "RenderItem",
    "TrackingMethod",
    "TrackingState",
    "configure",
    "feed",
    "load_calibration",
    "load_config",
    "project",
]
