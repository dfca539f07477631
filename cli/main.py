"""
Copyright (c) 2024 Zep Labs, Inc.
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""
# cli/main.py
import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import typer
from dotenv import load_dotenv
from pydantic import ValidationError

from vaultsync_core.config import LoaderOptions, VaultSyncConfig
from vaultsync_core.document_sync import DocumentWatcher, LoaderContext, vault_loader
from vaultsync_core.errors import VaultSyncError
from vaultsync_core.store import EntryStore, MemoryEntryStore, SqliteEntryStore

# Loads .env from CWD if present
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

cli_app = typer.Typer(
    help='A CLI tool to sync a directory of markdown notes into a queryable entry store.'
)

# Define app as an alias for cli_app to support package entry points
app = cli_app


# --- Typer Option Constants ---
# sync options
BASE_ARGUMENT = typer.Argument(
    None, help='Directory to sync, relative to the project root. Defaults to the root.'
)
PATTERN_OPTION = typer.Option(
    None, '--pattern', '-p', help='Glob pattern of entries to sync. Repeat for several.'
)
COLLECTION_OPTION = typer.Option(None, '--collection', '-c', help='Name of the collection.')
ROOT_OPTION = typer.Option(
    None,
    '--root',
    help='Project root. Stored file paths are relative to it.',
    file_okay=False,
    dir_okay=True,
    resolve_path=True,
)
URL_OPTION = typer.Option(None, '--url', help='Base URL of the collection permalinks.')
AUTHOR_OPTION = typer.Option(None, '--author', help='Author of entries that do not name one.')
I18N_OPTION = typer.Option(
    None, '--i18n/--no-i18n', help='Treat the first directory of each entry as its locale.'
)
CONCURRENCY_OPTION = typer.Option(
    None, '--concurrency', min=1, help='Maximum number of entries processed at once.'
)
WATCH_OPTION = typer.Option(
    False, '--watch', '-w', help='Keep watching the directory after the initial sync.'
)
LOG_LEVEL_OPTION = typer.Option('INFO', '--log-level', help='Logging level.')

# General options used in multiple commands
DB_OPTION = typer.Option(None, '--db', help='SQLite database holding the synced entries.')
CONFIG_OPTION = typer.Option(
    None,
    '--config',
    help='YAML configuration file. Defaults to VAULTSYNC_CONFIG_PATH or ./vaultsync.yaml.',
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
)


def load_config(config_path: Path | None = None, **overrides: Any) -> VaultSyncConfig:
    """
    Load the configuration file and apply command line overrides.

    Overrides that are None are ignored. Loader options (pattern, base, url,
    author, i18n) go to the nested loader section.
    """
    config = VaultSyncConfig.from_yaml(config_path) if config_path else VaultSyncConfig.from_env()

    loader_keys = set(LoaderOptions.model_fields)
    loader_overrides = {
        key: value for key, value in overrides.items() if key in loader_keys and value is not None
    }
    config_overrides = {
        key: value
        for key, value in overrides.items()
        if key not in loader_keys and value is not None
    }

    loader = LoaderOptions(**{**config.loader.model_dump(), **loader_overrides})
    return VaultSyncConfig(**{**config.model_dump(), **config_overrides, 'loader': loader})


def open_store(config: VaultSyncConfig) -> EntryStore:
    if config.store_path is None:
        logger.warning('No store path configured, synced entries are kept in memory only')
        return MemoryEntryStore()
    store_path = config.store_path
    if not store_path.is_absolute():
        store_path = config.root / store_path
    logger.info(f'Using SQLite store at {store_path}')
    return SqliteEntryStore(store_path)


async def _sync(config: VaultSyncConfig, watch: bool = False) -> dict[str, Any]:
    """Internal async function running the loader against the configured store."""
    store = open_store(config)
    watcher = DocumentWatcher(config.base_dir) if watch else None
    context = LoaderContext(
        collection=config.collection,
        config=config,
        store=store,
        watcher=watcher,
    )

    summary = await vault_loader(config.loader).load(context)
    print(
        f'Synced {summary["total"]} entries from {config.base_dir}: '
        f'{summary["synced"]} synced, {summary["skipped"]} unchanged, '
        f'{summary["deleted"]} deleted, {summary["errors"]} errors'
    )

    if watcher is not None:
        print('Watching for changes. Press Ctrl+C to stop.')
        try:
            await asyncio.Event().wait()
        finally:
            await watcher.stop()
    return summary


@cli_app.command()
def sync(
    base: str | None = BASE_ARGUMENT,
    pattern: list[str] | None = PATTERN_OPTION,
    collection: str | None = COLLECTION_OPTION,
    root: Path | None = ROOT_OPTION,
    db: Path | None = DB_OPTION,
    url: str | None = URL_OPTION,
    author: str | None = AUTHOR_OPTION,
    i18n: bool | None = I18N_OPTION,
    concurrency: int | None = CONCURRENCY_OPTION,
    config_path: Path | None = CONFIG_OPTION,
    watch: bool = WATCH_OPTION,
    log_level: str = LOG_LEVEL_OPTION,
):
    """
    Syncs the markdown entries under BASE into the entry store.
    Unchanged entries are skipped and entries whose files are gone are deleted.
    """
    logging.getLogger().setLevel(log_level.upper())
    logger.info('Running sync command...')

    try:
        config = load_config(
            config_path,
            base=base,
            pattern=pattern or None,
            collection=collection,
            root=root,
            store_path=db,
            url=url,
            author=author,
            i18n=i18n,
            max_concurrency=concurrency,
        )
    except (ValidationError, FileNotFoundError) as err:
        logger.error(f'Invalid configuration: {err}')
        raise typer.Exit(code=1) from err

    try:
        asyncio.run(_sync(config, watch))
    except VaultSyncError as err:
        logger.error(f'Sync failed: {err}')
        raise typer.Exit(code=1) from err
    except KeyboardInterrupt:
        print('\nStopped watching.')


def _open_existing_store(db: Path | None, config_path: Path | None) -> SqliteEntryStore:
    config = load_config(config_path, store_path=db)
    if config.store_path is None:
        logger.error('No store given. Pass --db or set store_path in the configuration file.')
        raise typer.Exit(code=1)
    store_path = config.store_path
    if not store_path.is_absolute():
        store_path = config.root / store_path
    if not store_path.is_file():
        logger.error(f'Store not found: {store_path}')
        raise typer.Exit(code=1)
    return SqliteEntryStore(store_path)


@cli_app.command(name='list')
def list_entries(
    db: Path | None = DB_OPTION,
    config_path: Path | None = CONFIG_OPTION,
):
    """Lists the identifiers, digests and file paths held in the store."""
    store = _open_existing_store(db, config_path)
    records = store.values()
    if not records:
        print('No entries found.')
        return

    for record in records:
        print(f'{record.id}\t{record.digest}\t{record.file_path or "-"}')
    print(f'\n{len(records)} entries')


@cli_app.command()
def show(
    entry_id: str = typer.Argument(..., help='Identifier of the entry.'),
    db: Path | None = DB_OPTION,
    config_path: Path | None = CONFIG_OPTION,
):
    """Prints one stored entry as JSON."""
    store = _open_existing_store(db, config_path)
    record = store.get(entry_id)
    if record is None:
        logger.error(f'No entry found with id: {entry_id}')
        raise typer.Exit(code=1)
    print(json.dumps(record.model_dump(mode='json'), indent=2, ensure_ascii=False))


if __name__ == '__main__':
    cli_app()
