"""
Base drift watcher — re-runs conflict detection when a file with a
pending change is modified on disk.

Uses watchdog to monitor the project directory.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .errors import ReviewError

logger = logging.getLogger(__name__)


class DriftHandler(FileSystemEventHandler):
    """
    Watchdog event handler that checks tracked files for base drift.

    Events are debounced on the trailing edge: each event for a file
    restarts that file's timer, so the check runs once the file has been
    quiet for ``debounce_seconds`` and sees the last write.

    Parameters
    ----------
    store:
        The :class:`~change_review.editing.change_store.PendingChangeStore`
        whose open changes are checked.
    file_system:
        Reader used to fetch the fresh base content
        (:class:`~change_review.editing.file_io.LocalFileSystem`).
    debounce_seconds:
        Quiet period before a changed file is checked (editors often
        emit several events per save). ``0`` checks on every event.
    """

    def __init__(self, store, file_system, debounce_seconds: float = 0.5) -> None:
        super().__init__()
        self._store = store
        self._fs = file_system
        self._debounce = debounce_seconds
        self._timers: dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    def on_modified(self, event) -> None:  # type: ignore[override]
        if not event.is_directory:
            self.schedule(event.src_path)

    def on_created(self, event) -> None:  # type: ignore[override]
        if not event.is_directory:
            self.schedule(event.src_path)

    def on_deleted(self, event) -> None:  # type: ignore[override]
        if not event.is_directory:
            self.schedule(event.src_path)

    def on_moved(self, event) -> None:  # type: ignore[override]
        if not event.is_directory:
            self.schedule(event.src_path)
            self.schedule(event.dest_path)

    @property
    def pending(self) -> list[str]:
        """Tracked paths with a check waiting for their quiet period."""
        with self._lock:
            return list(self._timers)

    def schedule(self, abs_path: str) -> None:
        """(Re)start the debounce timer for *abs_path* if it is tracked."""
        path = self._tracked_path(abs_path)
        if path is None:
            return
        if self._debounce <= 0:
            self._run(path)
            return

        timer = threading.Timer(self._debounce, self._fire, args=(path,))
        timer.daemon = True
        with self._lock:
            previous = self._timers.get(path)
            if previous is not None:
                previous.cancel()
            self._timers[path] = timer
        timer.start()

    def flush(self) -> dict[str, Optional[list]]:
        """Run every waiting check now. Returns conflicts per path."""
        with self._lock:
            waiting = list(self._timers.items())
            self._timers.clear()
        results: dict[str, Optional[list]] = {}
        for path, timer in waiting:
            timer.cancel()
            results[path] = self._run(path)
        return results

    def cancel_pending(self) -> None:
        with self._lock:
            waiting = list(self._timers.values())
            self._timers.clear()
        for timer in waiting:
            timer.cancel()

    def check(self, abs_path: str) -> Optional[list]:
        """Run conflict detection for *abs_path* now, if it has an open change.

        Returns the detected conflicts, or None when the file is not
        tracked.
        """
        path = self._tracked_path(abs_path)
        if path is None:
            return None
        return self._run(path)

    def _fire(self, path: str) -> None:
        with self._lock:
            timer = self._timers.get(path)
            if timer is None or timer is not threading.current_thread():
                # Superseded by a later event or flushed
                return
            del self._timers[path]
        try:
            self._run(path)
        except OSError as exc:
            logger.warning("[Watcher] Could not read %s: %s", path, exc)

    def _run(self, path: str) -> Optional[list]:
        current = self._fs.read_text(path)
        try:
            conflicts = self._store.detect_conflicts(path, current)
        except ReviewError as exc:
            # The change was finalized or removed since the event fired
            logger.debug("[Watcher] Skipped %s: %s", path, exc)
            return None

        if conflicts:
            logger.warning(
                "[Watcher] %s changed on disk: %d conflict(s) with pending change",
                path, len(conflicts),
            )
        else:
            logger.info("[Watcher] %s changed on disk, no conflicts", path)
        return conflicts

    def _tracked_path(self, abs_path: str) -> Optional[str]:
        """Map *abs_path* onto the key of an open change, if any."""
        target = os.path.abspath(abs_path)
        for path in self._store.open_paths():
            if self._fs.resolve(path) == target:
                return path
        return None


class DriftWatcher:
    """
    Watches the file system root of a store's pending changes.

    Usage::

        watcher = DriftWatcher(store, LocalFileSystem("/path/to/project"))
        watcher.start()
        ...
        watcher.stop()
    """

    def __init__(self, store, file_system, debounce_seconds: float = 0.5) -> None:
        self._fs = file_system
        self._handler = DriftHandler(store, file_system, debounce_seconds)
        self._observer: Optional[Observer] = None

    @property
    def handler(self) -> DriftHandler:
        return self._handler

    def start(self) -> None:
        """Start watching in watchdog's background thread."""
        if self._observer is not None:
            return
        observer = Observer()
        observer.schedule(self._handler, self._fs.root, recursive=True)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.info("[Watcher] Watching %s", self._fs.root)

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._handler.cancel_pending()
        self._observer = None
        logger.info("[Watcher] Stopped")

    def __enter__(self) -> "DriftWatcher":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
