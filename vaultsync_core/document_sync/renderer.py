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
import html
import logging
import re
from collections.abc import Awaitable, Callable
from typing import Any

import markdown

from vaultsync_core.config import VaultSyncConfig
from vaultsync_core.errors import EntryRenderError
from vaultsync_core.store import Heading, RenderedContent, RenderedMetadata

from .content_splitter import EMBED_PATTERN, MARKDOWN_IMAGE_PATTERN, WIKILINK_PATTERN
from .identifiers import slugify

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = ['extra', 'toc', 'sane_lists']

RenderFunction = Callable[[str, dict[str, Any], str, str, str], Awaitable[RenderedContent]]


def _flatten_toc(tokens: list[dict[str, Any]]) -> list[Heading]:
    headings: list[Heading] = []
    for token in tokens:
        headings.append(
            Heading(depth=token['level'], slug=token['id'], text=html.unescape(token['name']))
        )
        headings.extend(_flatten_toc(token.get('children', [])))
    return headings


class MarkdownRenderer:
    """Renders entry bodies to HTML with Python-Markdown.

    Wikilinks become anchors to the permalink resolved by the content splitter,
    unresolved ones a `wikilink-missing` span. Embeds become images.
    """

    def __init__(self, extensions: list[str] | None = None):
        self.extensions = extensions or list(MARKDOWN_EXTENSIONS)

    def _rewrite_wikilinks(self, body: str, data: dict[str, Any]) -> str:
        hrefs = {
            link['target'].lower(): link.get('href')
            for link in data.get('links', [])
            if link.get('target')
        }

        def embed(match: re.Match[str]) -> str:
            target = match.group('target').strip()
            return f'![{target}](<{target}>)'

        def link(match: re.Match[str]) -> str:
            target = match.group('target').strip()
            heading = (match.group('heading') or '').strip()
            label = (match.group('label') or '').strip() or target or heading
            if not target:
                return f'[{label}](<#{slugify(heading)}>)'
            href = hrefs.get(target.lower())
            if href is None:
                return f'<span class="wikilink-missing">{html.escape(label)}</span>'
            href = href.split('#', 1)[0]
            if heading:
                href += f'#{slugify(heading)}'
            return f'[{label}](<{href}>)'

        return WIKILINK_PATTERN.sub(link, EMBED_PATTERN.sub(embed, body))

    def render_sync(self, id: str, data: dict[str, Any], body: str) -> RenderedContent:
        # Markdown instances keep per-document state, so one per render
        md = markdown.Markdown(extensions=self.extensions)
        rendered_html = md.convert(self._rewrite_wikilinks(body, data))

        image_paths = list(data.get('images', []))
        for match in MARKDOWN_IMAGE_PATTERN.finditer(body):
            src = match.group('src').strip('<>')
            if src not in image_paths:
                image_paths.append(src)

        return RenderedContent(
            html=rendered_html,
            metadata=RenderedMetadata(
                headings=_flatten_toc(getattr(md, 'toc_tokens', [])),
                image_paths=[path for path in image_paths if '://' not in path],
                frontmatter=data,
            ),
        )

    async def render(
        self, id: str, data: dict[str, Any], body: str, file_path: str, digest: str
    ) -> RenderedContent:
        try:
            return await asyncio.to_thread(self.render_sync, id, data, body)
        except Exception as e:
            raise EntryRenderError(file_path, str(e)) from e


def get_render_function(config: VaultSyncConfig | None = None) -> RenderFunction:
    """Render function for a collection."""
    renderer = MarkdownRenderer()
    logger.debug(
        f'Using markdown renderer for {config.collection if config else "default"} collection'
    )
    return renderer.render
