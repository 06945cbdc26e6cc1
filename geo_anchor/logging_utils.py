import logging


class SessionContextFilter(logging.Filter):
    """Stamps the session name and the frame being processed onto records."""

    def __init__(self, session_name: str):
        super().__init__()
        self.session_name = session_name
        self.frame_idx: int | None = None

    def filter(self, record: logging.LogRecord) -> bool:
        record.session = self.session_name
        record.frame = "-" if self.frame_idx is None else self.frame_idx
        return True


def _formatter() -> logging.Formatter:
    return logging.Formatter("%(asctime)s %(levelname)s [%(session)s #%(frame)s] %(message)s")


def session_context(logger: logging.Logger, session_name: str) -> SessionContextFilter:
    """Return the context filter shared by every handler of ``logger``."""
    ctx = getattr(logger, "_geo_anchor_context", None)
    if ctx is None:
        ctx = SessionContextFilter(session_name)
        logger._geo_anchor_context = ctx  # type: ignore[attr-defined]
    return ctx


def setup_logger(session_name: str, level: int | str = logging.INFO) -> logging.Logger:
    logger = logging.getLogger(f"geo_anchor.{session_name}")
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(_formatter())
        handler.addFilter(session_context(logger, session_name))
        logger.addHandler(handler)

    return logger


def add_file_handler(logger: logging.Logger, session_name: str, log_path: str) -> logging.FileHandler:
    handler = logging.FileHandler(log_path)
    handler.setFormatter(_formatter())
    handler.addFilter(session_context(logger, session_name))
    logger.addHandler(handler)
    return handler
