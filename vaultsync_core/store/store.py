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

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, Field


class Heading(BaseModel):
    depth: int = Field(description='heading level, 1 to 6')
    slug: str = Field(description='anchor id of the heading')
    text: str = Field(description='plain text of the heading')


class RenderedMetadata(BaseModel):
    headings: list[Heading] = Field(default_factory=list)
    image_paths: list[str] = Field(
        default_factory=list, description='images referenced by the rendered body'
    )
    frontmatter: dict[str, Any] = Field(default_factory=dict)


class RenderedContent(BaseModel):
    html: str = Field(description='display-ready body')
    metadata: RenderedMetadata | None = None


class EntryRecord(BaseModel):
    id: str = Field(description='identifier, unique across the store')
    digest: str = Field(description='content digest at the last successful sync')
    data: dict[str, Any] = Field(default_factory=dict, description='validated front-matter')
    body: str = Field(default='', description='raw body text')
    file_path: str | None = Field(
        default=None, description='entry location relative to the project root'
    )
    rendered: RenderedContent | None = None
    asset_imports: list[str] | None = None
    deferred_render: bool = False


class EntryStore(ABC):
    """Key-value store of synced entries, keyed by identifier.

    Implementations only need atomic single-key writes. Concurrent entry tasks
    never touch the same key within one pass.
    """

    @abstractmethod
    def get(self, entry_id: str) -> EntryRecord | None:
        raise NotImplementedError()

    @abstractmethod
    def set(self, record: EntryRecord) -> bool:
        raise NotImplementedError()

    @abstractmethod
    def delete(self, entry_id: str) -> None:
        raise NotImplementedError()

    @abstractmethod
    def keys(self) -> list[str]:
        raise NotImplementedError()

    @abstractmethod
    def clear(self) -> None:
        raise NotImplementedError()

    @abstractmethod
    def add_module_import(self, file_path: str) -> None:
        """Register a dependency on an entry whose render is deferred to the consumer."""
        raise NotImplementedError()

    def has(self, entry_id: str) -> bool:
        return self.get(entry_id) is not None

    def values(self) -> list[EntryRecord]:
        return [record for key in self.keys() if (record := self.get(key)) is not None]

    def __iter__(self) -> Iterator[EntryRecord]:
        return iter(self.values())

    def __len__(self) -> int:
        return len(self.keys())
