from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Optional

from .config import EngineConfig
from .engine import AnchorEngine
from .logging_utils import add_file_handler, session_context, setup_logger
from .output import CsvOutput, OutputSink
from .storage import SessionStorage


@dataclass
class ReplaySummary:
    session_path: str
    frames_processed: int
    anchors_written: int
    csv_path: str
    log_path: Optional[str]
    avg_fps: float
    errors: int


def read_frames(path: str | Path) -> Iterator[tuple[Optional[int], list[Any]]]:
    """
    Yield ``(frame_idx, observations)`` from a JSON Lines recording.

    Blank lines are skipped; a line that is not a frame object raises
    ValueError with its line number.
    """
    with Path(path).open("r", encoding="utf-8") as fp:
        for lineno, line in enumerate(fp, 1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as exc:
                raise ValueError(f"{path}:{lineno}: invalid JSON: {exc}") from exc
            if not isinstance(record, dict) or not isinstance(record.get("observations"), list):
                raise ValueError(f"{path}:{lineno}: expected {{'frame', 'observations': [...]}}")
            frame = record.get("frame")
            yield (int(frame) if frame is not None else None), record["observations"]


class ReplayRunner:
    def __init__(
        self,
        config: EngineConfig,
        engine: AnchorEngine,
        logger=None,
        outputs: Optional[list[OutputSink]] = None,
    ):
        self.config = config
        self.engine = engine
        self.logger = logger or setup_logger(config.session_name, config.log_level)
        self.outputs = outputs if outputs is not None else [CsvOutput()]
        self._stop_event = threading.Event()

    def stop(self) -> None:
        self._stop_event.set()

    def run(self, recording: str | Path) -> ReplaySummary:
        storage = SessionStorage(self.config.output_root, name=self.config.session_name)
        session_path = storage.begin()
        storage.write_manifest({**self.config.as_dict(), "recording": str(recording)})

        log_file = None
        file_handler = None
        if self.config.save_log:
            log_file = str(Path(storage.logs_dir) / "session.log")
            file_handler = add_file_handler(self.logger, self.config.session_name, log_file)

        t0 = time.time()
        frames = 0
        written = 0
        errors = 0

        ctx = session_context(self.logger, self.config.session_name)

        try:
            for out in self.outputs:
                out.open(Path(storage.session_dir))

            self.logger.info("replay started: %s", session_path)
            self.logger.info("config: %s", self.config.as_dict())

            for frame_idx, observations in read_frames(recording):
                if self._stop_event.is_set():
                    break
                if self.config.max_frames and frames >= self.config.max_frames:
                    break

                ctx.frame_idx = frame_idx
                result = self.engine.process_frame(observations, frame_idx)
                ctx.frame_idx = result.frame_idx
                errors += result.errors

                for item in result.render:
                    for out in self.outputs:
                        out.write_anchor(result.frame_idx, item.marker_id, item.pose)
                    written += 1

                self.logger.debug(
                    "frame=%d observed=%d anchors=%d drawn=%d",
                    result.frame_idx,
                    len(observations),
                    len(self.engine.registry),
                    len(result.render),
                )
                frames += 1

            ctx.frame_idx = None
            avg = frames / max(1e-6, (time.time() - t0))
            self.logger.info(
                "summary frames=%d anchors=%d avg_fps=%.2f errors=%d", frames, written, avg, errors
            )
        finally:
            ctx.frame_idx = None
            for out in self.outputs:
                try:
                    out.close()
                except Exception as e:
                    self.logger.warning("failed to close output %r: %s", out, e)
            self.engine.close()
            if file_handler is not None:
                self.logger.removeHandler(file_handler)
                file_handler.close()

        return ReplaySummary(
            str(session_path),
            frames,
            written,
            str(Path(storage.session_dir) / "anchors.csv"),
            log_file,
            avg,
            errors,
        )
