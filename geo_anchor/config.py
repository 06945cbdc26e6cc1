from __future__ import annotations

import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Optional


@dataclass
class EngineConfig:
    session_name: str = "geo_anchor"
    calibration_path: str = "data/calibration.yaml"
    jitter_threshold_m: float = 0.03
    degenerate_eps: float = 1e-9
    output_root: str = "data/sessions"
    log_level: str = "INFO"
    max_frames: Optional[int] = None
    save_log: bool = True

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    def apply_overrides(self, **kwargs: Any) -> "EngineConfig":
        for key, value in kwargs.items():
            if value is not None and hasattr(self, key):
                setattr(self, key, value)
        return self


def _load_yaml(path: Path) -> Any:
    try:
        import yaml  # type: ignore
    except Exception as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "YAML file requested but PyYAML is not installed. "
            "Install with: pip install pyyaml"
        ) from exc
    with path.open("r", encoding="utf-8") as fp:
        return yaml.safe_load(fp)


def read_document(path: str | Path) -> Any:
    """Parse a JSON or YAML file, chosen by suffix."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"File not found: {p}")

    if p.suffix.lower() in {".yaml", ".yml"}:
        return _load_yaml(p)
    with p.open("r", encoding="utf-8") as fp:
        return json.load(fp)


def load_config(path: str | Path) -> EngineConfig:
    raw = read_document(path)
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError("Config root must be a JSON/YAML object")

    cfg = EngineConfig()
    cfg.session_name = str(raw.get("session_name", cfg.session_name))
    cfg.calibration_path = str(raw.get("calibration_path", cfg.calibration_path))
    cfg.jitter_threshold_m = float(raw.get("jitter_threshold_m", cfg.jitter_threshold_m))
    if cfg.jitter_threshold_m <= 0:
        raise ValueError("jitter_threshold_m must be positive")
    cfg.degenerate_eps = float(raw.get("degenerate_eps", cfg.degenerate_eps))
    if cfg.degenerate_eps < 0:
        raise ValueError("degenerate_eps must not be negative")
    cfg.output_root = str(raw.get("output_root", cfg.output_root))
    cfg.log_level = str(raw.get("log_level", cfg.log_level)).upper()
    cfg.max_frames = raw.get("max_frames", cfg.max_frames)
    if cfg.max_frames is not None:
        cfg.max_frames = int(cfg.max_frames)
    cfg.save_log = bool(raw.get("save_log", cfg.save_log))

    return cfg
