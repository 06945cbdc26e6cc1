from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from .calibration import CalibrationStore, load_calibration
from .classify import classify_observation
from .config import EngineConfig
from .errors import CalibrationError, DegenerateProjection, MalformedObservation
from .projector import project
from .registry import AnchorRegistry, feed
from .stabilizer import Action, AnchorStabilizer, Decision
from .types import FrameResult, MarkerObservation, TrackingState

Notice = Callable[[str], None]


@dataclass
class ConfigureResult:
    ok: bool
    engine: Optional["AnchorEngine"] = None
    error: Optional[str] = None


class AnchorEngine:
    """
    Per-frame driver: classify -> project -> stabilize -> feed.

    Not thread-safe; call ``process_frame`` from the tracking callback only.
    """

    def __init__(
        self,
        store: CalibrationStore,
        config: Optional[EngineConfig] = None,
        logger: Optional[logging.Logger] = None,
        notice: Optional[Notice] = None,
    ):
        self.config = config or EngineConfig()
        self.logger = logger or logging.getLogger("geo_anchor.engine")
        self.notice = notice
        self.store: Optional[CalibrationStore] = store
        self.stabilizer = AnchorStabilizer(self.config.jitter_threshold_m)
        self._registry = AnchorRegistry()
        self._frame_idx = 0

    @classmethod
    def from_config(
        cls,
        config: EngineConfig,
        logger: Optional[logging.Logger] = None,
        notice: Optional[Notice] = None,
    ) -> "AnchorEngine":
        store = load_calibration(config.calibration_path)
        return cls(store, config, logger=logger, notice=notice)

    @property
    def registry(self) -> AnchorRegistry:
        return self._registry

    @property
    def closed(self) -> bool:
        return self.store is None

    def close(self) -> None:
        self._registry.clear()
        self.store = None

    def _notify(self, message: str) -> None:
        self.logger.info(message)
        if self.notice is not None:
            try:
                self.notice(message)
            except Exception as e:
                self.logger.warning("notice callback failed: %s", e)

    def _decide(self, obs: MarkerObservation, result: FrameResult) -> Optional[Decision]:
        if obs.tracking_state is TrackingState.PAUSED:
            self._notify(f"Detected marker {obs.marker_id}")
            return Decision(obs.marker_id, Action.IGNORE)

        offset = None
        if obs.fully_tracked:
            record = self.store.lookup(obs.marker_id)
            if record is None:
                self.logger.debug("marker %d has no calibration, skipped", obs.marker_id)
                result.skipped.append(obs.marker_id)
                return None
            offset = project(
                record, obs.extent_width, obs.extent_height, self.config.degenerate_eps
            )

        return self.stabilizer.decide(obs, offset, self._registry.get(obs.marker_id))

    def _apply(self, decisions: list[Decision]) -> None:
        removals = []
        for d in decisions:
            if d.action is Action.CREATE:
                self._registry.upsert(d.marker_id, d.pose)
                self.logger.info("anchor created marker=%d pos=%s", d.marker_id, d.pose.position.round(4))
            elif d.action is Action.REPLACE:
                self._registry.upsert(d.marker_id, d.pose)
                self.logger.info(
                    "anchor moved marker=%d dist=%.4f pos=%s",
                    d.marker_id,
                    d.distance,
                    d.pose.position.round(4),
                )
            elif d.action is Action.KEEP:
                self.logger.debug("anchor kept marker=%d dist=%.4f", d.marker_id, d.distance)
            elif d.action is Action.REMOVE:
                removals.append(d.marker_id)

        for marker_id in self._registry.remove_many(removals):
            self.logger.info("anchor removed marker=%d", marker_id)

    def process_frame(self, raw_observations: Iterable, frame_idx: Optional[int] = None) -> FrameResult:
        if self.closed:
            raise RuntimeError("engine is closed")

        self._frame_idx = self._frame_idx + 1 if frame_idx is None else int(frame_idx)
        result = FrameResult(self._frame_idx)

        observations: list[MarkerObservation] = []
        for raw in raw_observations:
            try:
                observations.append(classify_observation(raw))
            except MalformedObservation as e:
                result.errors += 1
                self.logger.warning("frame=%d malformed observation: %s", result.frame_idx, e)

        decisions: list[Decision] = []
        for obs in observations:
            try:
                decision = self._decide(obs, result)
            except DegenerateProjection as e:
                result.skipped.append(obs.marker_id)
                self.logger.warning("frame=%d %s", result.frame_idx, e)
                continue
            except Exception:
                result.errors += 1
                self.logger.exception(
                    "frame=%d failed to process marker %d", result.frame_idx, obs.marker_id
                )
                continue
            if decision is not None:
                decisions.append(decision)

        self._apply(decisions)
        result.render = feed(self._registry, observations)
        return result


def configure(
    config: EngineConfig,
    logger: Optional[logging.Logger] = None,
    notice: Optional[Notice] = None,
) -> ConfigureResult:
    """Build an engine or report why the session cannot start."""
    try:
        engine = AnchorEngine.from_config(config, logger=logger, notice=notice)
    except (CalibrationError, ValueError) as e:
        if logger is not None:
            logger.error("engine configuration failed: %s", e)
        return ConfigureResult(False, error=str(e))
    return ConfigureResult(True, engine=engine)
