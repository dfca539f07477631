"""Core synchronization logic.

This module keeps an entry store in step with a directory of markdown notes.

Key Concepts:
    Full pass:
        - Snapshot the store's identifiers as the untouched set
        - Read every matching file through the concurrency limiter and derive its identifier
        - Claim identifiers in candidate order; a later file with a taken identifier is skipped
        - Store the claimants through the limiter, then delete identifiers nobody claimed

    Change Detection:
        - SHA256 content digest compared against the stored record
        - Unchanged entries skip validation, rendering and the store write

    Watch Events:
        - Added and changed files re-run the per-entry routine against the known candidates
        - Removed files are deleted through the path to identifier index

    Errors:
        - Read failures are logged and the entry is skipped
        - Render failures are logged and the record is stored without HTML
        - Anything else fails the entry task and is raised after the pass
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from vaultsync_core.config import VaultSyncConfig
from vaultsync_core.errors import EntryReadError, EntryRenderError, SyncPassError
from vaultsync_core.helpers import ConcurrencyLimiter, posix_relative
from vaultsync_core.store import EntryRecord, EntryStore, RenderedContent

from .content_splitter import EntryContext, fill_entry_data, split_front_matter
from .entry_reader import EntryStat, read_entry, stat_entry
from .glob_matcher import GlobMatcher, is_config_file
from .hashing import compute_content_hash
from .identifiers import generate_id
from .renderer import RenderFunction, get_render_function
from .schema import parse_data
from .watcher import WatchEvent, WatchEventKind

ParseDataFunction = Callable[[str, dict[str, Any], str], Awaitable[dict[str, Any]]]

SYNCED = 'synced'
SKIPPED = 'skipped'
ERROR = 'error'
DELETED = 'deleted'


@dataclass
class PreparedEntry:
    """An entry that has been read and split, with its identifier."""

    entry: str
    file_path: Path
    contents: str
    stats: EntryStat
    front_matter: dict[str, Any]
    body: str
    entry_id: str


class DocumentSyncManager:
    """Synchronizes the entries under a base directory into an EntryStore."""

    def __init__(
        self,
        config: VaultSyncConfig,
        store: EntryStore,
        file_to_id: dict[str, str] | None = None,
        generate_digest: Callable[[str], str] = compute_content_hash,
        parse_data: ParseDataFunction = parse_data,
        render: RenderFunction | None = None,
        deferred_render: bool = False,
        logger: logging.Logger | None = None,
    ):
        """Initialize document sync manager.

        Args:
            config: Collection configuration
            store: Store receiving the synced records
            file_to_id: Index of absolute entry path to identifier, shared across passes
            generate_digest: Content digest function
            parse_data: Front-matter validation step
            render: Render function, defaults to the markdown renderer
            deferred_render: Leave rendering to the store's consumer
            logger: Logger for per-entry diagnostics

        Raises:
            PatternError: the include pattern does not compile
        """
        self.config = config
        self.store = store
        self.base_dir = config.base_dir
        self.root = config.root.resolve()
        self.matcher = GlobMatcher(config.loader.pattern)
        self.file_to_id = file_to_id if file_to_id is not None else {}
        self.generate_digest = generate_digest
        self.parse_data = parse_data
        self.render = render or get_render_function(config)
        self.deferred_render = deferred_render
        self.logger = logger or logging.getLogger(__name__)
        self.limiter = ConcurrencyLimiter(config.max_concurrency)
        # candidates of the last full pass, kept current by watch events
        self.files: list[str] = []
        self.last_summary: dict[str, Any] | None = None

    def _index_key(self, entry: str) -> str:
        return str(self.base_dir / entry)

    def _known_ids(self) -> dict[str, str]:
        return {
            posix_relative(self.base_dir, key): entry_id
            for key, entry_id in self.file_to_id.items()
        }

    def _entry_context(self, files: list[str], ids: dict[str, str]) -> EntryContext:
        return EntryContext(
            base=self.base_dir,
            base_url=self.config.base_url,
            files=files,
            author=self.config.loader.author,
            i18n=self.config.loader.i18n,
            default_locale=self.config.default_locale,
            ids=ids,
        )

    async def prepare_entry(self, entry: str) -> PreparedEntry | None:
        """Read and split one entry and derive its identifier.

        Returns:
            None when the entry could not be read
        """
        file_path = self.base_dir / entry

        try:
            contents = await read_entry(file_path, entry)
        except EntryReadError as e:
            self.logger.error(e.message)
            return None

        stats = await stat_entry(file_path)
        if not contents:
            self.logger.debug(f'{entry} is empty')

        front_matter, body = split_front_matter(contents, entry)
        return PreparedEntry(
            entry=entry,
            file_path=file_path,
            contents=contents,
            stats=stats,
            front_matter=front_matter,
            body=body,
            entry_id=generate_id(entry, self.base_dir, front_matter),
        )

    async def store_entry(
        self,
        prepared: PreparedEntry,
        files: list[str],
        ids: dict[str, str],
        claimed: dict[str, str] | None = None,
    ) -> str:
        """Write a prepared entry unless the store already holds its content.

        Args:
            prepared: Entry read by prepare_entry
            files: Candidate entries, used to resolve wikilinks
            ids: Entry to identifier map, used to resolve wikilinks
            claimed: Identifier to entry map of the current full pass

        Returns:
            'synced' or 'skipped'
        """
        entry, entry_id = prepared.entry, prepared.entry_id
        key = self._index_key(entry)

        previous_id = self.file_to_id.get(key)
        if previous_id is not None and previous_id != entry_id:
            other_owner = any(
                value == previous_id for other, value in self.file_to_id.items() if other != key
            )
            if not other_owner and previous_id not in (claimed or {}):
                # the slug changed, the old record belongs to nobody now
                self.store.delete(previous_id)

        digest = self.generate_digest(prepared.contents)
        existing = self.store.get(entry_id)
        if existing is not None and existing.digest == digest and existing.file_path:
            if existing.deferred_render:
                self.store.add_module_import(existing.file_path)
            self.file_to_id[key] = entry_id
            return SKIPPED

        info = fill_entry_data(
            prepared.front_matter,
            prepared.body,
            prepared.file_path,
            entry,
            prepared.stats,
            self._entry_context(files, ids),
        )
        file_path = str(prepared.file_path)
        data = await self.parse_data(entry_id, info.data, file_path)

        rendered: RenderedContent | None = None
        if not self.deferred_render:
            try:
                rendered = await self.render(entry_id, data, info.body, file_path, digest)
            except EntryRenderError as e:
                self.logger.error(e.message)
            except Exception as e:
                self.logger.error(f'Error rendering {entry}: {e}')

        self.store.set(
            EntryRecord(
                id=entry_id,
                digest=digest,
                data=data,
                body=info.body,
                file_path=posix_relative(self.root, prepared.file_path),
                rendered=rendered,
                asset_imports=rendered.metadata.image_paths
                if rendered is not None and rendered.metadata is not None
                else None,
                deferred_render=self.deferred_render,
            )
        )
        self.file_to_id[key] = entry_id
        return SYNCED

    async def sync_entry(self, entry: str, files: list[str] | None = None) -> str:
        """Sync one entry outside a full pass.

        An identifier already held by another path stays with that path.

        Args:
            entry: Path relative to the base directory
            files: Candidate entries, used to resolve wikilinks

        Returns:
            'synced', 'skipped', or 'error' when the entry could not be read
        """
        prepared = await self.prepare_entry(entry)
        if prepared is None:
            return ERROR

        key = self._index_key(entry)
        owner = next(
            (
                other
                for other, value in self.file_to_id.items()
                if value == prepared.entry_id and other != key
            ),
            None,
        )
        if owner is not None:
            self.logger.warning(
                f'Duplicate id "{prepared.entry_id}" for {entry}, keeping {owner}'
            )
            return SKIPPED

        ids = self._known_ids()
        ids[entry] = prepared.entry_id
        return await self.store_entry(prepared, files or [entry], ids)

    async def sync_all(self) -> dict[str, Any]:
        """Reconcile the store with every matching entry under the base directory.

        Returns:
            Statistics: total, synced, skipped, deleted, errors

        Raises:
            BaseDirectoryError: the base directory does not exist
            SyncPassError: more than one entry task failed; a single failure is raised as-is
        """
        untouched = set(self.store.keys())
        files = self.matcher.enumerate(self.base_dir)
        entries = [entry for entry in files if not is_config_file(entry)]
        self.files = files

        prepared_results = await asyncio.gather(
            *(self.limiter.schedule(self.prepare_entry, entry) for entry in entries),
            return_exceptions=True,
        )

        results: list[Any] = [None] * len(entries)
        ids: dict[str, str] = {}
        claimed: dict[str, str] = {}
        claimants: dict[int, PreparedEntry] = {}
        for index, prepared in enumerate(prepared_results):
            if isinstance(prepared, BaseException):
                results[index] = prepared
                continue
            if prepared is None:
                results[index] = ERROR
                continue

            ids[prepared.entry] = prepared.entry_id
            untouched.discard(prepared.entry_id)
            owner = claimed.setdefault(prepared.entry_id, prepared.entry)
            if owner != prepared.entry:
                self.logger.warning(
                    f'Duplicate id "{prepared.entry_id}" for {prepared.entry}, keeping {owner}'
                )
                results[index] = SKIPPED
                continue
            claimants[index] = prepared

        stored = await asyncio.gather(
            *(
                self.limiter.schedule(self.store_entry, prepared, files, ids, claimed)
                for prepared in claimants.values()
            ),
            return_exceptions=True,
        )
        for index, result in zip(claimants, stored):
            results[index] = result

        stale = sorted(untouched)
        for entry_id in stale:
            self.store.delete(entry_id)
        if stale:
            stale_ids = set(stale)
            for key in [key for key, value in self.file_to_id.items() if value in stale_ids]:
                del self.file_to_id[key]

        failures: list[BaseException] = []
        for entry, result in zip(entries, results):
            if isinstance(result, BaseException):
                self.logger.error(f'Error syncing {entry}: {result}')
                failures.append(result)

        summary = {
            'total': len(entries),
            'synced': results.count(SYNCED),
            'skipped': results.count(SKIPPED),
            'deleted': len(stale),
            'errors': results.count(ERROR) + len(failures),
        }
        self.last_summary = summary
        self.logger.info(
            f'Synced {self.config.collection}: {summary["synced"]} synced, '
            f'{summary["skipped"]} unchanged, {summary["deleted"]} deleted, '
            f'{summary["errors"]} errors'
        )

        if len(failures) == 1:
            raise failures[0]
        if failures:
            raise SyncPassError(failures)
        return summary

    def remove_entry(self, path: Path | str) -> str | None:
        """Delete the record synced from an absolute path, if there is one."""
        entry = posix_relative(self.base_dir, path)
        self.files = [candidate for candidate in self.files if candidate != entry]
        entry_id = self.file_to_id.pop(self._index_key(entry), None)
        if entry_id is None:
            return None
        self.store.delete(entry_id)
        self.logger.info(f'Removed {entry_id} ({entry})')
        return DELETED

    async def handle_event(self, event: WatchEvent) -> str | None:
        """Apply one watch event. Events for non-matching paths are ignored."""
        entry = posix_relative(self.base_dir, event.path)
        if not self.matcher.matches(entry):
            return None

        if event.kind is WatchEventKind.REMOVED:
            return self.remove_entry(event.path)

        self.files = sorted({*self.files, entry})
        status = await self.sync_entry(entry, self.files)
        if status != ERROR:
            self.logger.info(f'Reloaded data from {entry}')
        return status
