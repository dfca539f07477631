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
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from vaultsync_core.errors import EntryReadError


@dataclass(frozen=True)
class EntryStat:
    size: int
    modified_at: datetime
    created_at: datetime

    @classmethod
    def from_stat_result(cls, result: os.stat_result) -> 'EntryStat':
        # st_birthtime only exists on macOS and BSD
        created = getattr(result, 'st_birthtime', None) or result.st_ctime
        return cls(
            size=result.st_size,
            modified_at=datetime.fromtimestamp(result.st_mtime, tz=timezone.utc),
            created_at=datetime.fromtimestamp(created, tz=timezone.utc),
        )


async def read_entry(path: Path, entry: str) -> str:
    """Read an entry as UTF-8 text off the event loop.

    Raises:
        EntryReadError: the file vanished, is unreadable, or is not valid UTF-8
    """
    try:
        return await asyncio.to_thread(path.read_text, encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise EntryReadError(entry, str(e)) from e


async def stat_entry(path: Path) -> EntryStat:
    """Stat an entry off the event loop. OSError propagates to the caller."""
    result = await asyncio.to_thread(os.stat, path)
    return EntryStat.from_stat_result(result)
