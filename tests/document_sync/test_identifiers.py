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

from vaultsync_core.document_sync.hashing import compute_content_hash
from vaultsync_core.document_sync.identifiers import generate_id, slugify, slugify_path


class TestSlugify:
    def test_punctuation_and_case(self):
        assert slugify('Hello, World!') == 'hello-world'

    def test_keeps_unicode_letters(self):
        assert slugify('Café Notes') == 'café-notes'

    def test_path(self):
        assert slugify_path('/Projects/My Plan/') == 'projects/my-plan'


class TestGenerateId:
    def test_relative_path(self, tmp_path):
        assert generate_id('notes/Hello World.md', tmp_path, {}) == 'notes/hello-world'

    def test_index_folds_into_directory(self, tmp_path):
        assert generate_id('guides/index.md', tmp_path, {}) == 'guides'
        assert generate_id('index.md', tmp_path, {}) == 'index'

    def test_front_matter_slug_wins(self, tmp_path):
        assert generate_id('a.md', tmp_path, {'slug': 'Custom/Path'}) == 'custom/path'

    def test_blank_slug_is_ignored(self, tmp_path):
        assert generate_id('a.md', tmp_path, {'slug': '  '}) == 'a'

    def test_absolute_entry(self, tmp_path):
        assert generate_id(str(tmp_path / 'a' / 'b.md'), tmp_path, {}) == 'a/b'

    def test_punctuation_only_name(self, tmp_path):
        assert generate_id('!!!.md', tmp_path, {}) == '!!!'

    def test_deterministic(self, tmp_path):
        first = generate_id('Daily/2024-01-01.md', tmp_path, {'title': 'x'})
        second = generate_id('Daily/2024-01-01.md', tmp_path, {'title': 'y'})
        assert first == second == 'daily/2024-01-01'


class TestComputeContentHash:
    def test_prefix_and_stability(self):
        digest = compute_content_hash('hello')
        assert digest.startswith('sha256:')
        assert digest == compute_content_hash('hello')

    def test_single_character_change(self):
        assert compute_content_hash('hello') != compute_content_hash('hellp')

    def test_bytes_and_text_agree(self):
        assert compute_content_hash('héllo'.encode()) == compute_content_hash('héllo')
