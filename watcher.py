from __future__ import annotations
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler
import logging
import os
from typing import Callable, List, Optional

from errors import safe_callback
from io_utils import IMAGE_EXTS

logger = logging.getLogger(__name__)


class _EnqueueHandler(FileSystemEventHandler):
    def __init__(self, callback: Callable[[List[str]], None]):
        self.cb = safe_callback(callback)

    def _maybe_enqueue(self, path: str):
        _, ext = os.path.splitext(path.lower())
        if ext in IMAGE_EXTS:
            self.cb([path])

    def on_created(self, event):
        if event.is_directory:
            return
        self._maybe_enqueue(event.src_path)

    def on_moved(self, event):
        if event.is_directory:
            return
        self._maybe_enqueue(event.dest_path)


class FolderWatcher:
    def __init__(self, callback: Callable[[List[str]], None]):
        self._obs: Optional[Observer] = None
        self._path: Optional[str] = None
        self._cb = callback

    def start(self, path: str):
        self.stop()
        self._path = path
        handler = _EnqueueHandler(self._cb)
        self._obs = Observer()
        self._obs.schedule(handler, path, recursive=False)
        self._obs.start()
        logger.info("Watch started: %s", path)

    def stop(self):
        if self._obs:
            self._obs.stop()
            self._obs.join(timeout=2.0)
            self._obs = None
            logger.info("Watch stopped: %s", self._path)
            self._path = None

    def is_running(self) -> bool:
        return self._obs is not None

    def path(self) -> Optional[str]:
        return self._path
