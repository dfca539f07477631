from .memory_store import MemoryEntryStore
from .sqlite_store import SqliteEntryStore
from .store import EntryRecord, EntryStore, Heading, RenderedContent, RenderedMetadata

__all__ = [
    'EntryRecord',
    'EntryStore',
    'Heading',
    'MemoryEntryStore',
    'RenderedContent',
    'RenderedMetadata',
    'SqliteEntryStore',
]
