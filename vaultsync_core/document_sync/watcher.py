"""File watching for live vault sync.

This module monitors the base directory with the Watchdog library and feeds
file events to the sync engine on the asyncio loop.

Architecture:
    Observer Thread (Watchdog):
        - Monitors the base directory recursively
        - Translates created, modified and deleted files into WatchEvents
        - A move becomes a removal of the source followed by an addition of the destination

    Async Consumer Task:
        - Takes events off an asyncio.Queue in arrival order
        - Awaits the subscribed handler for one event at a time
        - Logs handler failures and keeps consuming

    Thread Safety:
        - Watchdog runs in a separate thread
        - Events cross into the loop via loop.call_soon_threadsafe()
"""

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class WatchEventKind(enum.Enum):
    ADDED = 'added'
    CHANGED = 'changed'
    REMOVED = 'removed'


@dataclass(frozen=True)
class WatchEvent:
    kind: WatchEventKind
    path: Path


WatchHandler = Callable[[WatchEvent], Awaitable[Any]]


def _decode(path: str | bytes) -> str:
    return path.decode() if isinstance(path, bytes) else path


class VaultFileHandler(FileSystemEventHandler):
    """Handles file system events for the base directory."""

    def __init__(self, watcher: 'DocumentWatcher'):
        self.watcher = watcher

    def on_created(self, event: FileSystemEvent):
        if not event.is_directory:
            self.watcher._enqueue(WatchEventKind.ADDED, _decode(event.src_path))

    def on_modified(self, event: FileSystemEvent):
        if not event.is_directory:
            self.watcher._enqueue(WatchEventKind.CHANGED, _decode(event.src_path))

    def on_deleted(self, event: FileSystemEvent):
        if not event.is_directory:
            self.watcher._enqueue(WatchEventKind.REMOVED, _decode(event.src_path))

    def on_moved(self, event: FileSystemEvent):
        if event.is_directory:
            return
        self.watcher._enqueue(WatchEventKind.REMOVED, _decode(event.src_path))
        self.watcher._enqueue(WatchEventKind.ADDED, _decode(event.dest_path))


class DocumentWatcher:
    """Watches a base directory and hands events to one subscribed handler."""

    def __init__(self, base_dir: Path | str):
        """Initialize document watcher.

        Args:
            base_dir: Directory watched recursively
        """
        self.base_dir = Path(base_dir)
        self.observer = Observer()
        self.handler: WatchHandler | None = None
        self.loop: asyncio.AbstractEventLoop | None = None
        self.consumer_task: asyncio.Task | None = None
        self._queue: asyncio.Queue[WatchEvent] | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def subscribe(self, handler: WatchHandler):
        """Register the handler every event is delivered to."""
        if self.handler is not None and self.handler is not handler:
            logger.warning('Replacing existing watch handler')
        self.handler = handler

    def start(self, loop: asyncio.AbstractEventLoop):
        """Start the observer thread and the consumer task.

        Args:
            loop: Event loop the handler runs on
        """
        if self._running:
            logger.warning('Document watcher already running')
            return

        self.loop = loop
        self._queue = asyncio.Queue()
        self._running = True

        # a stopped observer thread cannot be started again
        self.observer = Observer()
        self.observer.schedule(VaultFileHandler(self), str(self.base_dir), recursive=True)
        self.observer.start()

        self.consumer_task = loop.create_task(self._consume())
        logger.info(f'Watching {self.base_dir}')

    async def stop(self):
        """Stop observer and cancel the consumer task."""
        if not self._running:
            return

        self._running = False

        self.observer.stop()
        self.observer.join()

        if self.consumer_task:
            self.consumer_task.cancel()
            try:
                await self.consumer_task
            except asyncio.CancelledError:
                pass

    async def drain(self):
        """Wait until every event queued so far has been handled."""
        if self._queue is not None:
            await self._queue.join()

    def _enqueue(self, kind: WatchEventKind, path: str):
        """Thread-safe: queue an event for the loop.

        Called from the watchdog thread.
        """
        if self.loop is None or self._queue is None or self.loop.is_closed():
            return
        self.loop.call_soon_threadsafe(self._queue.put_nowait, WatchEvent(kind, Path(path)))

    async def _consume(self):
        """Background task: take the next event and hand it to the handler."""
        assert self._queue is not None
        while True:
            event = await self._queue.get()
            try:
                if self.handler is not None:
                    await self.handler(event)
            except Exception as e:
                logger.error(f'Error handling {event.kind.value} event for {event.path}: {e}')
            finally:
                self._queue.task_done()
