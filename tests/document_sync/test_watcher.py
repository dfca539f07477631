import asyncio
import logging
from pathlib import Path

import pytest
from watchdog.events import (
    DirCreatedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from vaultsync_core.document_sync.watcher import (
    DocumentWatcher,
    VaultFileHandler,
    WatchEvent,
    WatchEventKind,
)


def start_watcher(tmp_path):
    watcher = DocumentWatcher(tmp_path)
    received: list[WatchEvent] = []

    async def handler(event):
        received.append(event)

    watcher.subscribe(handler)
    watcher.start(asyncio.get_running_loop())
    return watcher, received


class TestVaultFileHandler:
    @pytest.mark.asyncio
    async def test_file_events_are_translated(self, tmp_path):
        watcher, received = start_watcher(tmp_path)
        handler = VaultFileHandler(watcher)

        handler.on_created(FileCreatedEvent(str(tmp_path / 'a.md')))
        handler.on_modified(FileModifiedEvent(str(tmp_path / 'a.md')))
        handler.on_deleted(FileDeletedEvent(str(tmp_path / 'a.md')))
        await asyncio.sleep(0)
        await watcher.drain()
        await watcher.stop()

        assert [event.kind for event in received][-3:] == [
            WatchEventKind.ADDED,
            WatchEventKind.CHANGED,
            WatchEventKind.REMOVED,
        ]
        assert received[-1].path == tmp_path / 'a.md'

    @pytest.mark.asyncio
    async def test_move_is_remove_then_add(self, tmp_path):
        watcher, received = start_watcher(tmp_path)
        handler = VaultFileHandler(watcher)

        handler.on_moved(FileMovedEvent(str(tmp_path / 'old.md'), str(tmp_path / 'new.md')))
        await asyncio.sleep(0)
        await watcher.drain()
        await watcher.stop()

        assert received[-2:] == [
            WatchEvent(WatchEventKind.REMOVED, tmp_path / 'old.md'),
            WatchEvent(WatchEventKind.ADDED, tmp_path / 'new.md'),
        ]

    @pytest.mark.asyncio
    async def test_directory_events_are_ignored(self, tmp_path):
        watcher, received = start_watcher(tmp_path)
        handler = VaultFileHandler(watcher)

        handler.on_created(DirCreatedEvent(str(tmp_path / 'folder')))
        await asyncio.sleep(0)
        await watcher.drain()
        await watcher.stop()

        assert all(event.path != tmp_path / 'folder' for event in received)


class TestDocumentWatcher:
    @pytest.mark.asyncio
    async def test_handler_errors_do_not_stop_consumer(self, tmp_path, caplog):
        watcher = DocumentWatcher(tmp_path)
        handled: list[Path] = []

        async def handler(event):
            if event.path.name == 'bad.md':
                raise RuntimeError('boom')
            handled.append(event.path)

        watcher.subscribe(handler)
        watcher.start(asyncio.get_running_loop())
        try:
            with caplog.at_level(logging.ERROR):
                watcher._enqueue(WatchEventKind.CHANGED, str(tmp_path / 'bad.md'))
                watcher._enqueue(WatchEventKind.CHANGED, str(tmp_path / 'good.md'))
                await asyncio.sleep(0)
                await watcher.drain()
        finally:
            await watcher.stop()

        assert tmp_path / 'good.md' in handled
        assert 'Error handling changed event' in caplog.text

    @pytest.mark.asyncio
    async def test_start_and_stop(self, tmp_path):
        watcher = DocumentWatcher(tmp_path)
        assert not watcher.running

        watcher.start(asyncio.get_running_loop())
        assert watcher.running
        assert watcher.observer.is_alive()

        await watcher.stop()
        assert not watcher.running
        assert watcher.consumer_task.cancelled()

    @pytest.mark.asyncio
    async def test_events_before_start_are_dropped(self, tmp_path):
        watcher = DocumentWatcher(tmp_path)
        watcher._enqueue(WatchEventKind.ADDED, str(tmp_path / 'a.md'))
        await watcher.drain()
        assert watcher.handler is None

    @pytest.mark.asyncio
    async def test_stop_without_start_is_a_noop(self, tmp_path):
        await DocumentWatcher(tmp_path).stop()

    @pytest.mark.asyncio
    async def test_restart_after_stop(self, tmp_path):
        watcher, received = start_watcher(tmp_path)
        await watcher.stop()

        watcher.start(asyncio.get_running_loop())
        try:
            assert watcher.running
            assert watcher.observer.is_alive()
            watcher._enqueue(WatchEventKind.CHANGED, str(tmp_path / 'a.md'))
            await asyncio.sleep(0)
            await watcher.drain()
        finally:
            await watcher.stop()

        assert WatchEvent(WatchEventKind.CHANGED, tmp_path / 'a.md') in received
