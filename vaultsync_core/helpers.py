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
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

from dotenv import load_dotenv

load_dotenv()

SEMAPHORE_LIMIT = int(os.getenv('VAULTSYNC_SEMAPHORE_LIMIT', 10))
DEFAULT_PATTERN = '**/*.md'

T = TypeVar('T')


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def posix_relative(root: str | Path, path: str | Path) -> str:
    """
    Relative path from root to path with forward slashes on every platform.
    Paths outside root keep their '../' prefix so callers can reject them.
    """
    relative = os.path.relpath(os.fspath(path), os.fspath(root))
    return relative.replace(os.sep, '/')


class ConcurrencyLimiter:
    """
    Bounds the number of coroutines running at once.

    Work submitted past the ceiling waits on the semaphore in submission order.
    A failing unit of work releases its slot and never affects its siblings.
    """

    def __init__(self, max_coroutines: int | None = None):
        self.max_coroutines = max_coroutines or SEMAPHORE_LIMIT
        if self.max_coroutines < 1:
            raise ValueError('max_coroutines must be at least 1')
        self._semaphore = asyncio.Semaphore(self.max_coroutines)
        self.active = 0
        self.peak = 0

    async def run(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        async with self._semaphore:
            self.active += 1
            self.peak = max(self.peak, self.active)
            try:
                return await func(*args, **kwargs)
            finally:
                self.active -= 1

    def schedule(
        self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> 'asyncio.Task[T]':
        return asyncio.ensure_future(self.run(func, *args, **kwargs))

