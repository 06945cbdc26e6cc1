from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from .csv_writer import CsvWriter
from .types import Pose


class OutputSink(ABC):
    """Receives the render feed, one call per drawable anchor."""

    @abstractmethod
    def open(self, session_dir: Path) -> None: ...

    @abstractmethod
    def write_anchor(self, frame_idx: int, marker_id: int, pose: Pose) -> None: ...

    @abstractmethod
    def close(self) -> None: ...


class CsvOutput(OutputSink):
    def __init__(self, filename: str = "anchors.csv"):
        self.filename = filename
        self._writer: Optional[CsvWriter] = None

    def open(self, session_dir: Path) -> None:
        path = Path(session_dir) / self.filename
        self._writer = CsvWriter(str(path))
        self._writer.open()

    def write_anchor(self, frame_idx: int, marker_id: int, pose: Pose) -> None:
        if self._writer is None:
            return
        self._writer.append(frame_idx, marker_id, pose.rvec, pose.tvec)

    def close(self) -> None:
        if self._writer is not None:
            self._writer.close()
            self._writer = None


class NullOutput(OutputSink):
    def open(self, session_dir: Path) -> None:
        return None

    def write_anchor(self, frame_idx: int, marker_id: int, pose: Pose) -> None:
        return None

    def close(self) -> None:
        return None
