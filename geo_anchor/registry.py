from __future__ import annotations

from typing import Callable, Iterable, Optional, Sequence

from .types import AnchorState, MarkerObservation, Pose, RenderItem


class AnchorRegistry:
    """Last stable anchor per marker id."""

    def __init__(self):
        self._anchors: dict[int, AnchorState] = {}

    def get(self, marker_id: int) -> Optional[AnchorState]:
        return self._anchors.get(marker_id)

    def upsert(self, marker_id: int, pose: Pose) -> AnchorState:
        state = AnchorState(marker_id, pose)
        self._anchors[marker_id] = state
        return state

    def remove(self, marker_id: int) -> bool:
        return self._anchors.pop(marker_id, None) is not None

    def entries(self) -> list[AnchorState]:
        """Snapshot; safe to hold while the registry changes."""
        return list(self._anchors.values())

    def remove_many(self, marker_ids: Iterable[int]) -> list[int]:
        removed = []
        for marker_id in list(marker_ids):
            if self.remove(marker_id):
                removed.append(marker_id)
        return removed

    def prune(self, predicate: Callable[[AnchorState], bool]) -> list[int]:
        """Drop every entry matching ``predicate``; ids are collected first."""
        doomed = [state.marker_id for state in self.entries() if predicate(state)]
        return self.remove_many(doomed)

    def clear(self) -> None:
        self._anchors.clear()

    def __contains__(self, marker_id: object) -> bool:
        return marker_id in self._anchors

    def __len__(self) -> int:
        return len(self._anchors)


def feed(registry: AnchorRegistry, observations: Sequence[MarkerObservation]) -> list[RenderItem]:
    """
    Anchors to draw this frame, in observation order.

    An anchor is drawn only if its marker is fully tracked in this frame;
    anchors of markers missing from ``observations`` stay in the registry.
    """
    latest: dict[int, MarkerObservation] = {}
    order: list[int] = []
    for obs in observations:
        if obs.marker_id not in latest:
            order.append(obs.marker_id)
        latest[obs.marker_id] = obs

    items = []
    for marker_id in order:
        state = registry.get(marker_id)
        if state is not None and latest[marker_id].fully_tracked:
            items.append(RenderItem(marker_id, state.pose))
    return items
