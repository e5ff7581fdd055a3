"""
Hot reload for dialog documents.

Watches the dialog base path with watchdog. File system callbacks arrive
on the observer thread, so they only record which files changed; the
cache is reloaded from poll(), called on the game's update thread.

Usage:
    watcher = DialogWatcher(cache)
    watcher.start()

    # once per frame
    watcher.poll()

    watcher.stop()
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from narrative.dialog.cache import DialogCache

DIALOG_EXTENSIONS = {".json"}


class DialogFileHandler(FileSystemEventHandler):
    """
    Filters watchdog events down to dialog documents and debounces
    bursts of writes to the same file.
    """

    def __init__(self, callback: Callable[[Path], None], debounce_seconds: float = 0.5):
        super().__init__()
        self.callback = callback
        self.debounce_seconds = debounce_seconds
        self._last_events: dict[str, float] = {}
        self._lock = threading.Lock()

    def should_process(self, path: str) -> bool:
        p = Path(path)
        if p.suffix.lower() not in DIALOG_EXTENSIONS:
            return False
        # Editor temp and hidden files
        return not (p.name.startswith(".") or p.name.startswith("~") or p.name.endswith("~"))

    def _is_debounced(self, path: str) -> bool:
        with self._lock:
            now = time.monotonic()
            last = self._last_events.get(path)
            if last is not None and now - last < self.debounce_seconds:
                return True
            self._last_events[path] = now
            return False

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in ("created", "modified", "deleted", "moved"):
            return
        path = getattr(event, "dest_path", "") or event.src_path
        if isinstance(path, bytes):
            path = path.decode()
        if not self.should_process(path) or self._is_debounced(path):
            return
        self.callback(Path(path))


class DialogWatcher:
    """Reloads a DialogCache when its documents change on disk."""

    def __init__(self, cache: DialogCache, debounce_seconds: float = 0.5):
        self.cache = cache
        self.debounce_seconds = debounce_seconds
        self.logger = logging.getLogger(__name__)

        self._observer: Optional[Observer] = None
        self._pending: set[Path] = set()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[int], None]] = []

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    def add_callback(self, callback: Callable[[int], None]) -> None:
        """Called with the loaded language count after each reload."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def notify(self, path: Path) -> None:
        """Record a changed file. Safe to call from any thread."""
        with self._lock:
            self._pending.add(Path(path))

    @property
    def has_pending(self) -> bool:
        with self._lock:
            return bool(self._pending)

    def start(self) -> bool:
        if self._observer is not None:
            return True

        base = self.cache.base_path
        if not base.is_dir():
            self.logger.warning(f"Cannot watch non-existent directory: {base}")
            return False

        observer = Observer()
        observer.schedule(
            DialogFileHandler(self.notify, self.debounce_seconds), str(base), recursive=True
        )
        try:
            observer.start()
        except OSError as e:
            self.logger.error(f"Failed to start dialog watcher: {e}")
            return False

        self._observer = observer
        self.logger.info(f"Watching {base} for dialog changes")
        return True

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=2.0)
        self._observer = None
        self.logger.info("Dialog watcher stopped")

    def poll(self) -> bool:
        """Apply pending changes. Returns True when the cache was reloaded."""
        with self._lock:
            changed, self._pending = self._pending, set()
        if not changed:
            return False

        base = self.cache.base_path.resolve()
        for path in changed:
            try:
                relative = path.resolve().relative_to(base)
            except ValueError:
                continue
            # Files directly under the base path belong to the legacy cache
            if len(relative.parts) == 1:
                self.cache.clear_legacy(relative.stem)

        count = self.cache.load_all_languages()
        self.logger.info(f"Reloaded dialogs after {len(changed)} change(s): {count} languages")
        for callback in list(self._callbacks):
            callback(count)
        return True

    def __enter__(self) -> DialogWatcher:
        self.start()
        return self

    def __exit__(self, *args) -> None:
        self.stop()
