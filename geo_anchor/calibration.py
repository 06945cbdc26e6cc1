"""Per-marker calibration table: marker id -> projection matrix + POI."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Optional

import numpy as np

from .config import read_document
from .errors import CalibrationError
from .types import CalibrationRecord

DEFAULT_REFERENCE_SIZE = (640, 480)


def _parse_matrix(raw: Any, marker_id: int) -> np.ndarray:
    try:
        H = np.array(raw, dtype=float)
    except (TypeError, ValueError) as exc:
        raise CalibrationError(f"marker {marker_id}: matrix is not numeric") from exc
    if H.size != 9 or H.ndim not in (1, 2) or (H.ndim == 2 and H.shape != (3, 3)):
        raise CalibrationError(
            f"marker {marker_id}: matrix must be 3x3 or 9 flat values, got shape {H.shape}"
        )
    H = H.reshape(3, 3)
    if not np.all(np.isfinite(H)):
        raise CalibrationError(f"marker {marker_id}: matrix has non-finite values")
    H.setflags(write=False)
    return H


def _parse_target(raw: Any, marker_id: int) -> tuple[float, float]:
    if isinstance(raw, Mapping):
        raw = (raw.get("lat", raw.get("latitude")), raw.get("lon", raw.get("longitude")))
    if isinstance(raw, (str, bytes)):
        raise CalibrationError(f"marker {marker_id}: target must be two numbers, got {raw!r}")
    try:
        values = list(raw)
        if any(isinstance(v, (bool, str, bytes)) for v in values):
            raise TypeError(f"non-numeric target component in {values!r}")
        lat, lon = (float(v) for v in values)
    except (TypeError, ValueError) as exc:
        raise CalibrationError(
            f"marker {marker_id}: target must be a (latitude, longitude) pair"
        ) from exc
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise CalibrationError(f"marker {marker_id}: target has non-finite values")
    return lat, lon


def _parse_id(raw: Any, index: int) -> int:
    if isinstance(raw, bool) or not isinstance(raw, (int, float, np.integer, np.floating)):
        raise CalibrationError(f"calibration entry #{index} has a non-integer id: {raw!r}")
    if not float(raw).is_integer():
        raise CalibrationError(f"calibration entry #{index} has a non-integral id: {raw!r}")
    return int(raw)


def _parse_reference(raw: Any) -> tuple[int, int]:
    if raw is None:
        return DEFAULT_REFERENCE_SIZE
    if not isinstance(raw, Mapping):
        raise CalibrationError("reference_frame must be a mapping with width/height")
    try:
        w = int(raw.get("width", DEFAULT_REFERENCE_SIZE[0]))
        h = int(raw.get("height", DEFAULT_REFERENCE_SIZE[1]))
    except (TypeError, ValueError) as exc:
        raise CalibrationError("reference_frame width/height must be integers") from exc
    if w <= 0 or h <= 0:
        raise CalibrationError("reference_frame width/height must be positive")
    return w, h


class CalibrationStore:
    """Immutable lookup of calibration records, keyed by marker id."""

    def __init__(self, records: Iterable[CalibrationRecord]):
        table: dict[int, CalibrationRecord] = {}
        for rec in records:
            if rec.marker_id in table:
                raise CalibrationError(f"duplicate calibration for marker {rec.marker_id}")
            table[rec.marker_id] = rec
        self._records = table

    def lookup(self, marker_id: int) -> Optional[CalibrationRecord]:
        return self._records.get(marker_id)

    def ids(self) -> list[int]:
        return sorted(self._records)

    def __contains__(self, marker_id: object) -> bool:
        return marker_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[CalibrationRecord]:
        return iter(self._records.values())

    @classmethod
    def from_records(cls, data: Any) -> "CalibrationStore":
        """
        Build a store from a parsed calibration document.

        ``data`` is either a mapping with ``markers`` (and optionally
        ``reference_frame``) or a plain list of marker entries.
        """
        if isinstance(data, Mapping):
            reference = _parse_reference(data.get("reference_frame"))
            entries = data.get("markers")
        elif isinstance(data, list):
            reference = DEFAULT_REFERENCE_SIZE
            entries = data
        else:
            raise CalibrationError("calibration root must be a mapping or a list")

        if not isinstance(entries, list):
            raise CalibrationError("calibration 'markers' must be a list")

        records = []
        for i, entry in enumerate(entries):
            if not isinstance(entry, Mapping):
                raise CalibrationError(f"calibration entry #{i} is not a mapping")
            for key in ("id", "target", "matrix"):
                if key not in entry:
                    raise CalibrationError(f"calibration entry #{i} is missing '{key}'")
            marker_id = _parse_id(entry["id"], i)
            records.append(
                CalibrationRecord(
                    marker_id=marker_id,
                    projection=_parse_matrix(entry["matrix"], marker_id),
                    target=_parse_target(entry["target"], marker_id),
                    reference_size=reference,
                )
            )
        return cls(records)


def load_calibration(path: str | Path) -> CalibrationStore:
    """Load the whole table or fail; a partial store is never returned."""
    try:
        data = read_document(path)
    except Exception as exc:
        raise CalibrationError(f"cannot read calibration table {path}: {exc}") from exc
    return CalibrationStore.from_records(data)
