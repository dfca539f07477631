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

from .store import EntryRecord, EntryStore


class MemoryEntryStore(EntryStore):
    """Process-local store. Records are lost when the process exits."""

    def __init__(self):
        self._records: dict[str, EntryRecord] = {}
        self.module_imports: list[str] = []
        self.writes = 0

    def get(self, entry_id: str) -> EntryRecord | None:
        return self._records.get(entry_id)

    def set(self, record: EntryRecord) -> bool:
        existing = self._records.get(record.id)
        self._records[record.id] = record
        self.writes += 1
        return existing is None or existing.digest != record.digest

    def delete(self, entry_id: str) -> None:
        self._records.pop(entry_id, None)

    def keys(self) -> list[str]:
        return list(self._records.keys())

    def clear(self) -> None:
        self._records.clear()

    def add_module_import(self, file_path: str) -> None:
        if file_path not in self.module_imports:
            self.module_imports.append(file_path)
