"""Document synchronization module for VaultSync.

This module keeps an entry store in step with a directory of markdown notes,
on a full pass and incrementally from file system events.
"""

from .content_splitter import (
    EntryContext,
    EntryInfo,
    fill_entry_data,
    get_entry_info,
    split_front_matter,
)
from .entry_reader import EntryStat, read_entry, stat_entry
from .glob_matcher import GlobMatcher, is_config_file
from .hashing import compute_content_hash
from .identifiers import generate_id, slugify
from .loader import LoaderContext, VaultLoader, vault_loader
from .renderer import MarkdownRenderer, get_render_function
from .schema import VaultDocument, parse_data
from .sync_manager import DocumentSyncManager
from .watcher import DocumentWatcher, WatchEvent, WatchEventKind

__all__ = [
    'compute_content_hash',
    'fill_entry_data',
    'generate_id',
    'get_entry_info',
    'get_render_function',
    'is_config_file',
    'parse_data',
    'read_entry',
    'slugify',
    'split_front_matter',
    'stat_entry',
    'vault_loader',
    'DocumentSyncManager',
    'DocumentWatcher',
    'EntryContext',
    'EntryInfo',
    'EntryStat',
    'GlobMatcher',
    'LoaderContext',
    'MarkdownRenderer',
    'VaultDocument',
    'VaultLoader',
    'WatchEvent',
    'WatchEventKind',
]
