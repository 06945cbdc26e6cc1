import argparse
import signal
import sys

from .config import EngineConfig, load_config
from .engine import configure
from .logging_utils import setup_logger
from .replay import ReplayRunner


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Replay recorded marker observations through the anchor engine")
    ap.add_argument("recording", help="JSON Lines file, one {frame, observations} object per line")
    ap.add_argument("--config", help="Path to JSON/YAML engine config")

    ap.add_argument("--session-name")
    ap.add_argument("--calib")
    ap.add_argument("--out")
    ap.add_argument("--threshold-m", type=float)
    ap.add_argument("--max-frames", type=int)
    ap.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    ap.add_argument("--no-save-log", action="store_true")

    return ap


def _apply_args(cfg: EngineConfig, args: argparse.Namespace) -> EngineConfig:
    if args.threshold_m is not None and args.threshold_m <= 0:
        raise SystemExit("--threshold-m must be positive")
    cfg.apply_overrides(
        session_name=args.session_name,
        calibration_path=args.calib,
        output_root=args.out,
        jitter_threshold_m=args.threshold_m,
        max_frames=args.max_frames,
        log_level=args.log_level,
        save_log=False if args.no_save_log else None,
    )
    return cfg


def main(argv=None) -> int:
    ap = _build_parser()
    args = ap.parse_args(argv)

    cfg = load_config(args.config) if args.config else EngineConfig()
    cfg = _apply_args(cfg, args)

    logger = setup_logger(cfg.session_name, cfg.log_level)
    setup = configure(cfg, logger=logger)
    if not setup.ok:
        print(f"configuration failed: {setup.error}", file=sys.stderr)
        return 2

    runner = ReplayRunner(cfg, setup.engine, logger=logger)

    def _handle_signal(_sig, _frame):
        runner.stop()

    signal.signal(signal.SIGINT, _handle_signal)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _handle_signal)

    summary = runner.run(args.recording)
    print(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
