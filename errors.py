from __future__ import annotations
import faulthandler
import functools
import os
import sys
import threading
import traceback
from datetime import datetime, timezone
from typing import Callable, Optional
import logging

logger = logging.getLogger("Errors")

# Keep strong refs so they aren't GC'd
_faulthandler_file: Optional[object] = None
_dump_dir: Optional[str] = None


class DecodeError(ValueError):
    """Input bytes are not a decodable raster image (or exceed the size limit)."""


def _crash_dir() -> str:
    return _dump_dir or os.path.abspath(os.environ.get("ARTFX_LOG_DIR", "logs"))

def _write_dump(prefix: str, exc_text: str) -> None:
    crash_dir = _crash_dir()
    os.makedirs(crash_dir, exist_ok=True)
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    path = os.path.join(crash_dir, f"{prefix}_{ts}.dump")
    with open(path, "w", encoding="utf-8") as f:
        f.write(exc_text)
    logger.error("Wrote exception dump: %s", path)

def install_global_exception_hooks(log_dir: Optional[str] = None) -> None:
    """
    Capture: sys.excepthook, threading.excepthook, sys.unraisablehook,
    and native crashes via faulthandler. Dumps go to log_dir
    (default: $ARTFX_LOG_DIR, then ./logs).
    """
    global _faulthandler_file, _dump_dir
    if log_dir:
        _dump_dir = os.path.abspath(log_dir)
    crash_dir = _crash_dir()
    os.makedirs(crash_dir, exist_ok=True)

    # 1) Python uncaught exceptions
    def excepthook(exc_type, exc, tb):
        buf = "".join(traceback.format_exception(exc_type, exc, tb))
        logger.critical("Uncaught exception:\n%s", buf)
        _write_dump("uncaught", buf)
        sys.__excepthook__(exc_type, exc, tb)

    sys.excepthook = excepthook

    # 2) Threading exceptions
    def threading_hook(args: threading.ExceptHookArgs):
        buf = "".join(traceback.format_exception(args.exc_type, args.exc_value, args.exc_traceback))
        logger.critical("Thread exception in %s:\n%s", getattr(args.thread, "name", "<unknown>"), buf)
        _write_dump("thread", buf)

    threading.excepthook = threading_hook

    # 3) Unraisable exceptions
    def unraisable_hook(unraisable):
        buf = "".join(traceback.format_exception(unraisable.exc_type, unraisable.exc_value, unraisable.exc_traceback))
        where = getattr(unraisable, "object", None)
        logger.error("Unraisable exception in %r:\n%s", where, buf)
        _write_dump("unraisable", buf)

    sys.unraisablehook = unraisable_hook

    # 4) Faulthandler for native crashes: requires a *binary* file kept alive
    try:
        _faulthandler_file = open(os.path.join(crash_dir, "crash.dump"), "ab", buffering=0)
        faulthandler.enable(file=_faulthandler_file, all_threads=True)
        logger.info("Faulthandler enabled: %s", os.path.join(crash_dir, "crash.dump"))
    except OSError as e:
        logger.warning("Failed to enable faulthandler: %s", e)

def safe_callback(fn: Callable) -> Callable:
    """Decorator for watcher/worker callbacks: logs exceptions instead of letting them kill the thread."""
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except Exception:
            buf = traceback.format_exc()
            logger.error("Exception in callback %s:\n%s", getattr(fn, "__name__", str(fn)), buf)
            _write_dump("callback", buf)
            return None
    return wrapper
