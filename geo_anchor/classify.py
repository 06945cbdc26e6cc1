"""Normalize raw per-frame marker observations."""

from __future__ import annotations

import math
import re
from typing import Any, Mapping, Type, TypeVar

import numpy as np

from .errors import MalformedObservation
from .types import MarkerObservation, Pose, TrackingMethod, TrackingState

E = TypeVar("E", TrackingState, TrackingMethod)

_CAMEL = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _enum_value(enum_cls: Type[E], value: Any, field: str) -> E:
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        raise MalformedObservation(f"{field}: expected a name, got {value!r}")
    key = _CAMEL.sub("_", value.strip()).replace("-", "_").replace(" ", "_").upper()
    try:
        return enum_cls[key]
    except KeyError:
        raise MalformedObservation(f"{field}: unknown value {value!r}") from None


def _finite_float(value: Any, field: str) -> float:
    try:
        out = float(value)
    except (TypeError, ValueError):
        raise MalformedObservation(f"{field}: not a number: {value!r}") from None
    if not math.isfinite(out):
        raise MalformedObservation(f"{field}: not finite: {value!r}")
    return out


def _vec3(value: Any, field: str) -> np.ndarray:
    try:
        arr = np.asarray(value, dtype=float).reshape(-1)
    except (TypeError, ValueError):
        raise MalformedObservation(f"{field}: not numeric") from None
    if arr.size != 3:
        raise MalformedObservation(f"{field}: expected 3 values, got {arr.size}")
    if not np.all(np.isfinite(arr)):
        raise MalformedObservation(f"{field}: not finite")
    return arr


def _pose(value: Any) -> Pose:
    if isinstance(value, Pose):
        _vec3(value.rvec, "center_pose.rvec")
        _vec3(value.tvec, "center_pose.tvec")
        return value
    if not isinstance(value, Mapping):
        raise MalformedObservation("center_pose: expected {rvec, tvec} or {matrix}")
    if "matrix" in value:
        try:
            T = np.asarray(value["matrix"], dtype=float).reshape(4, 4)
        except (TypeError, ValueError):
            raise MalformedObservation("center_pose.matrix: expected 4x4 values") from None
        if not np.all(np.isfinite(T)):
            raise MalformedObservation("center_pose.matrix: not finite")
        return Pose.from_matrix(T)
    if "rvec" not in value or "tvec" not in value:
        raise MalformedObservation("center_pose: missing rvec/tvec")
    return Pose(_vec3(value["rvec"], "center_pose.rvec"), _vec3(value["tvec"], "center_pose.tvec"))


def classify_observation(raw: Any) -> MarkerObservation:
    """
    Map a raw tracker observation to a MarkerObservation.

    Accepts an existing MarkerObservation or a mapping with the keys
    ``id``, ``tracking_state``, ``tracking_method``, ``extent_width``,
    ``extent_height`` and ``center_pose``. Raises MalformedObservation
    instead of returning a partial record.
    """
    if isinstance(raw, MarkerObservation):
        _finite_float(raw.extent_width, "extent_width")
        _finite_float(raw.extent_height, "extent_height")
        _vec3(raw.center_pose.rvec, "center_pose.rvec")
        _vec3(raw.center_pose.tvec, "center_pose.tvec")
        return raw
    if not isinstance(raw, Mapping):
        raise MalformedObservation(f"observation must be a mapping, got {type(raw).__name__}")

    missing = [
        k for k in ("id", "tracking_state", "tracking_method", "extent_width", "extent_height", "center_pose")
        if k not in raw
    ]
    if missing:
        raise MalformedObservation(f"observation missing keys: {', '.join(missing)}")

    marker_id = raw["id"]
    if isinstance(marker_id, bool) or not isinstance(marker_id, (int, np.integer)):
        raise MalformedObservation(f"id: expected an integer, got {marker_id!r}")

    return MarkerObservation(
        marker_id=int(marker_id),
        tracking_state=_enum_value(TrackingState, raw["tracking_state"], "tracking_state"),
        tracking_method=_enum_value(TrackingMethod, raw["tracking_method"], "tracking_method"),
        extent_width=_finite_float(raw["extent_width"], "extent_width"),
        extent_height=_finite_float(raw["extent_height"], "extent_height"),
        center_pose=_pose(raw["center_pose"]),
    )
