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

import re
from pathlib import Path, PurePosixPath
from typing import Any

from vaultsync_core.helpers import posix_relative

_STRIP_CHARS = re.compile(r'[^\w\- ]', re.UNICODE)


def slugify(text: str) -> str:
    """
    Lowercase, drop punctuation, turn spaces into hyphens.

    >>> slugify('Hello, World!')
    'hello-world'
    """
    return _STRIP_CHARS.sub('', text.strip().lower()).replace(' ', '-')


def slugify_path(path: str) -> str:
    segments = [slugify(segment) for segment in path.strip('/').split('/') if segment]
    return '/'.join(segment for segment in segments if segment)


def generate_id(entry: str, base: str | Path, data: dict[str, Any]) -> str:
    """
    Stable identifier for an entry.

    A front-matter 'slug' wins. Otherwise the entry path relative to base is
    used without its extension, each segment slugified, and a trailing
    'index' segment folds into its directory.
    """
    slug = data.get('slug')
    if isinstance(slug, str) and slugify_path(slug):
        return slugify_path(slug)

    if Path(entry).is_absolute():
        entry = posix_relative(base, entry)

    stem = str(PurePosixPath(entry).with_suffix('')) if PurePosixPath(entry).suffix else entry
    segments = stem.split('/')
    if len(segments) > 1 and segments[-1].lower() == 'index':
        segments = segments[:-1]

    # punctuation-only names would otherwise collapse to an empty id
    return slugify_path('/'.join(segments)) or stem
