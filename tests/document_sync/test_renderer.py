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

from unittest.mock import patch

import pytest

from vaultsync_core.document_sync.renderer import MarkdownRenderer, get_render_function
from vaultsync_core.errors import EntryRenderError
from vaultsync_core.store import Heading

DATA = {
    'title': 'A',
    'links': [
        {'target': 'Target', 'label': 'Target', 'href': '/vault/notes/target', 'exists': True},
        {'target': 'Missing', 'label': 'Missing', 'href': None, 'exists': False},
    ],
    'images': ['pic.png'],
}

BODY = """# Hello

See [[Target]], [[Target#Sub Part|the part]] and [[Missing]].

![[pic.png]]

## Sub
"""


@pytest.fixture
def renderer():
    return MarkdownRenderer()


class TestMarkdownRenderer:
    def test_html(self, renderer):
        rendered = renderer.render_sync('a', DATA, BODY)

        assert '<h1 id="hello">Hello</h1>' in rendered.html
        assert '<a href="/vault/notes/target">Target</a>' in rendered.html
        assert '<a href="/vault/notes/target#sub-part">the part</a>' in rendered.html
        assert '<span class="wikilink-missing">Missing</span>' in rendered.html
        assert 'src="pic.png"' in rendered.html

    def test_metadata(self, renderer):
        rendered = renderer.render_sync('a', DATA, BODY)

        assert rendered.metadata.headings == [
            Heading(depth=1, slug='hello', text='Hello'),
            Heading(depth=2, slug='sub', text='Sub'),
        ]
        assert rendered.metadata.image_paths == ['pic.png']
        assert rendered.metadata.frontmatter == DATA

    def test_remote_images_are_not_assets(self, renderer):
        rendered = renderer.render_sync(
            'a', {}, '![local](img/a.png)\n\n![remote](https://example.com/b.png)'
        )
        assert rendered.metadata.image_paths == ['img/a.png']

    def test_tables_from_extra(self, renderer):
        rendered = renderer.render_sync('a', {}, '| a | b |\n|---|---|\n| 1 | 2 |\n')
        assert '<table>' in rendered.html

    def test_empty_body(self, renderer):
        rendered = renderer.render_sync('a', {}, '')
        assert rendered.html == ''
        assert rendered.metadata.headings == []

    @pytest.mark.asyncio
    async def test_render_wraps_failures(self, renderer):
        with patch.object(renderer, 'render_sync', side_effect=ValueError('boom')):
            with pytest.raises(EntryRenderError, match='Error rendering vault/a.md: boom'):
                await renderer.render('a', {}, 'body', 'vault/a.md', 'sha256:x')

    @pytest.mark.asyncio
    async def test_render_function(self):
        render = get_render_function()
        rendered = await render('a', {}, '*hi*', 'vault/a.md', 'sha256:x')
        assert rendered.html == '<p><em>hi</em></p>'
