import logging
import os
from logging.handlers import RotatingFileHandler
import sys
from typing import Optional

_DEFAULT_LOG_DIR = "logs"
_LOG_NAME = "app.log"

def _resolve_dir(log_dir: Optional[str]) -> str:
    return os.path.abspath(log_dir or os.environ.get("ARTFX_LOG_DIR") or _DEFAULT_LOG_DIR)

def setup_logging(level=logging.INFO, log_dir: Optional[str] = None) -> None:
    log_dir = _resolve_dir(log_dir)
    os.makedirs(log_dir, exist_ok=True)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    ch = logging.StreamHandler(stream=sys.stdout)
    ch.setFormatter(fmt)
    ch.setLevel(level)
    root.addHandler(ch)

    fh = RotatingFileHandler(os.path.join(log_dir, _LOG_NAME), maxBytes=5_000_000, backupCount=3)
    fh.setFormatter(fmt)
    fh.setLevel(logging.DEBUG)
    root.addHandler(fh)

    # Tame noisy libs
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("watchdog").setLevel(logging.INFO)

def log_path(log_dir: Optional[str] = None) -> str:
    return os.path.join(_resolve_dir(log_dir), _LOG_NAME)
