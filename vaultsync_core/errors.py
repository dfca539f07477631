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


class VaultSyncError(Exception):
    """Base exception class for VaultSync Core."""


class EntryReadError(VaultSyncError):
    """Raised when an entry cannot be read from disk."""

    def __init__(self, entry: str, reason: str):
        self.entry = entry
        self.message = f'Error reading {entry}: {reason}'
        super().__init__(self.message)


class FrontMatterError(VaultSyncError):
    """Raised when the front-matter block of an entry cannot be parsed."""

    def __init__(self, entry: str, reason: str):
        self.entry = entry
        self.message = f'Invalid front-matter in {entry}: {reason}'
        super().__init__(self.message)


class EntryValidationError(VaultSyncError):
    """Raised when an entry's front-matter does not match the collection schema."""

    def __init__(self, entry_id: str, detail: str):
        self.entry_id = entry_id
        self.message = f'entry "{entry_id}" failed validation: {detail}'
        super().__init__(self.message)


class EntryRenderError(VaultSyncError):
    """Raised when an entry body cannot be rendered."""

    def __init__(self, entry: str, reason: str):
        self.entry = entry
        self.message = f'Error rendering {entry}: {reason}'
        super().__init__(self.message)


class PatternError(VaultSyncError):
    """Raised when an include pattern cannot be compiled."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.message = f'invalid include pattern "{pattern}": {reason}'
        super().__init__(self.message)


class BaseDirectoryError(VaultSyncError):
    """Raised when the sync base directory does not exist."""

    def __init__(self, path: str):
        self.path = path
        self.message = f'base directory {path} does not exist or is not a directory'
        super().__init__(self.message)


class SyncPassError(VaultSyncError):
    """Raised when several entries of one full pass failed."""

    def __init__(self, errors: list[BaseException]):
        self.errors = errors
        self.message = f'{len(errors)} entries failed to sync: ' + '; '.join(
            str(error) for error in errors
        )
        super().__init__(self.message)
