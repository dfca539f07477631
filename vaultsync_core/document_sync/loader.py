"""
Copyright 2024, Zep Software, Inc.

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

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from vaultsync_core.config import LoaderOptions, VaultSyncConfig
from vaultsync_core.store import EntryStore

from .hashing import compute_content_hash
from .renderer import RenderFunction
from .schema import VaultDocument, parse_data
from .sync_manager import DocumentSyncManager, ParseDataFunction
from .watcher import DocumentWatcher

logger = logging.getLogger(__name__)


@dataclass
class LoaderContext:
    """Everything a loader needs from the host for one load."""

    collection: str
    config: VaultSyncConfig
    store: EntryStore
    logger: logging.Logger = field(default_factory=lambda: logger)
    watcher: DocumentWatcher | None = None
    generate_digest: Callable[[str], str] = compute_content_hash
    parse_data: ParseDataFunction = parse_data
    render: RenderFunction | None = None
    deferred_render: bool = False


class VaultLoader:
    """Loads a directory of markdown notes into a collection store.

    The path to identifier index lives on the loader, so repeated loads in one
    process keep resolving removals for entries synced by earlier loads.
    """

    name = 'vault'

    def __init__(self, options: LoaderOptions):
        self.options = options
        self.file_to_id: dict[str, str] = {}
        self.manager: DocumentSyncManager | None = None

    def _config(self, context: LoaderContext) -> VaultSyncConfig:
        return context.config.model_copy(
            update={'collection': context.collection, 'loader': self.options}
        )

    async def load(self, context: LoaderContext) -> dict[str, Any]:
        """Run a full pass, then follow the watcher if the context has one.

        Returns:
            The full pass statistics
        """
        self.manager = DocumentSyncManager(
            self._config(context),
            context.store,
            file_to_id=self.file_to_id,
            generate_digest=context.generate_digest,
            parse_data=context.parse_data,
            render=context.render,
            deferred_render=context.deferred_render,
            logger=context.logger,
        )
        summary = await self.manager.sync_all()

        if context.watcher is None:
            return summary

        context.watcher.subscribe(self.manager.handle_event)
        if not context.watcher.running:
            context.watcher.start(asyncio.get_running_loop())
        return summary

    def schema(self) -> type[VaultDocument]:
        return VaultDocument


def vault_loader(options: LoaderOptions | dict[str, Any] | None = None) -> VaultLoader:
    """Create a vault loader.

    Examples:
        >>> loader = vault_loader({'pattern': 'notes/**/*.md', 'author': 'Ada'})
        >>> loader.name
        'vault'
    """
    if options is None:
        options = LoaderOptions()
    elif isinstance(options, dict):
        options = LoaderOptions(**options)
    return VaultLoader(options)
