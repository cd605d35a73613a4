import logging
import os
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = os.getenv("LOG_DIR", "logs")


def configure_logging(log_dir: str | None = LOG_DIR, level: str = LOG_LEVEL) -> None:
    """Console logging for every module plus an optional ``api.log`` file."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    if not log_dir:
        return
    log_path = Path(log_dir) / "api.log"
    root = logging.getLogger()
    # FileHandler stores its target through os.path.abspath
    if any(getattr(h, "baseFilename", None) == os.path.abspath(log_path) for h in root.handlers):
        return
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(file_handler)
