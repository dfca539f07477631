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
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

import yaml

from vaultsync_core.errors import FrontMatterError

from .entry_reader import EntryStat
from .identifiers import generate_id, slugify

FRONT_MATTER_PATTERN = re.compile(
    r'\A---[ \t]*\r?\n(?P<yaml>.*?)^(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)',
    re.MULTILINE | re.DOTALL,
)
EMPTY_FRONT_MATTER_PATTERN = re.compile(r'\A---[ \t]*\r?\n(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)')
WIKILINK_PATTERN = re.compile(
    r'(?<!!)\[\[(?P<target>[^\]|#]*)(?:#(?P<heading>[^\]|]*))?(?:\|(?P<label>[^\]]*))?\]\]'
)
EMBED_PATTERN = re.compile(r'!\[\[(?P<target>[^\]|#]+)(?:#[^\]|]*)?(?:\|[^\]]*)?\]\]')
MARKDOWN_IMAGE_PATTERN = re.compile(r'!\[[^\]]*\]\((?P<src><[^>]+>|[^)\s]+)(?:\s+"[^"]*")?\)')
INLINE_TAG_PATTERN = re.compile(r'(?<![\w/#&])#(?P<tag>[\w][\w/-]*)', re.UNICODE)
FENCED_CODE_PATTERN = re.compile(r'^(```|~~~).*?^\1[ \t]*$', re.MULTILINE | re.DOTALL)
INLINE_CODE_PATTERN = re.compile(r'`[^`\n]*`')


@dataclass
class EntryContext:
    """Loader settings an entry is interpreted with."""

    base: Path
    base_url: str
    files: list[str] = field(default_factory=list)
    author: str | None = None
    i18n: bool = False
    default_locale: str = 'en'
    # entry path to identifier, for entries whose front-matter sets a slug
    ids: dict[str, str] = field(default_factory=dict)


@dataclass
class EntryInfo:
    data: dict[str, Any]
    body: str


def split_front_matter(contents: str, entry: str) -> tuple[dict[str, Any], str]:
    """
    Split raw entry text into its YAML front-matter mapping and body.

    Text without a leading '---' block has empty front-matter.

    Raises:
        FrontMatterError: the block is not valid YAML or not a mapping
    """
    contents = contents.lstrip('\ufeff')

    if EMPTY_FRONT_MATTER_PATTERN.match(contents):
        return {}, EMPTY_FRONT_MATTER_PATTERN.sub('', contents, count=1)

    match = FRONT_MATTER_PATTERN.match(contents)
    if match is None:
        return {}, contents

    try:
        front_matter = yaml.safe_load(match.group('yaml'))
    except yaml.YAMLError as e:
        raise FrontMatterError(entry, str(e)) from e

    if front_matter is None:
        front_matter = {}
    if not isinstance(front_matter, dict):
        raise FrontMatterError(entry, f'expected a mapping, got {type(front_matter).__name__}')

    return front_matter, contents[match.end() :]


def _as_list(value: Any, separator: str = r',') -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in re.split(separator, value) if part.strip()]
    if isinstance(value, (list, tuple, set)):
        return [str(item).strip() for item in value if item is not None and str(item).strip()]
    return [str(value)]


def _without_code(body: str) -> str:
    return INLINE_CODE_PATTERN.sub('', FENCED_CODE_PATTERN.sub('', body))


def _dedupe(values: list[str]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        seen.setdefault(value, None)
    return list(seen)


def permalink(base_url: str, entry_id: str) -> str:
    parts = [part for part in (base_url.strip('/'), entry_id.strip('/')) if part]
    return '/' + '/'.join(parts)


def build_link_index(files: list[str]) -> dict[str, str]:
    """Map lowercased stems and extensionless paths to their entry."""
    index: dict[str, str] = {}
    for entry in files:
        path = PurePosixPath(entry)
        index.setdefault(path.stem.lower(), entry)
        index[str(path.with_suffix('')).lower()] = entry
        index[entry.lower()] = entry
    return index


def resolve_links(body: str, context: EntryContext) -> list[dict[str, Any]]:
    index = build_link_index(context.files)
    links: list[dict[str, Any]] = []
    for match in WIKILINK_PATTERN.finditer(_without_code(body)):
        target = match.group('target').strip()
        heading = (match.group('heading') or '').strip()
        label = (match.group('label') or '').strip() or target or heading

        if not target:
            # [[#Heading]] points inside the current entry
            links.append(
                {'target': '', 'label': label, 'href': f'#{slugify(heading)}', 'exists': True}
            )
            continue

        resolved = index.get(target.lower()) or index.get(target.lower().removesuffix('.md'))
        href = None
        if resolved is not None:
            target_id = context.ids.get(resolved) or generate_id(resolved, context.base, {})
            href = permalink(context.base_url, target_id)
            if heading:
                href += f'#{slugify(heading)}'
        links.append(
            {'target': target, 'label': label, 'href': href, 'exists': resolved is not None}
        )
    return links


def extract_images(body: str) -> list[str]:
    text = _without_code(body)
    images = [match.group('target').strip() for match in EMBED_PATTERN.finditer(text)]
    images.extend(
        match.group('src').strip('<>') for match in MARKDOWN_IMAGE_PATTERN.finditer(text)
    )
    return _dedupe(images)


async def get_entry_info(
    contents: str,
    file_path: Path,
    entry: str,
    stats: EntryStat,
    context: EntryContext,
) -> EntryInfo:
    """
    Split an entry and fill in the front-matter fields a vault note leaves implicit:
    title, author, created/updated, tags, aliases, locale, permalink, links and images.
    """
    front_matter, body = split_front_matter(contents, entry)
    return fill_entry_data(front_matter, body, file_path, entry, stats, context)


def fill_entry_data(
    front_matter: dict[str, Any],
    body: str,
    file_path: Path,
    entry: str,
    stats: EntryStat,
    context: EntryContext,
) -> EntryInfo:
    data = dict(front_matter)

    data.setdefault('title', PurePosixPath(entry).stem or file_path.stem)
    if context.author and not data.get('author'):
        data['author'] = context.author
    data.setdefault('created', stats.created_at)
    data.setdefault('updated', stats.modified_at)

    tags = [tag.lstrip('#') for tag in _as_list(data.get('tags'), r'[,\s]+')]
    tags.extend(match.group('tag') for match in INLINE_TAG_PATTERN.finditer(_without_code(body)))
    data['tags'] = _dedupe(tags)
    data['aliases'] = _dedupe(_as_list(data.get('aliases')))

    if 'locale' not in data:
        segments = entry.split('/')
        use_segment = context.i18n and len(segments) > 1
        data['locale'] = segments[0] if use_segment else context.default_locale

    entry_id = generate_id(entry, context.base, data)
    data.setdefault('permalink', permalink(context.base_url, entry_id))
    data['links'] = resolve_links(body, context)
    data['images'] = extract_images(body)

    return EntryInfo(data=data, body=body)
