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

from pathlib import Path

import pytest
from pydantic import ValidationError

from vaultsync_core.config import CONFIG_FILE_NAMES, LoaderOptions, VaultSyncConfig
from vaultsync_core.helpers import SEMAPHORE_LIMIT


class TestLoaderOptions:
    def test_defaults(self):
        """Test loader options defaults are set correctly."""
        options = LoaderOptions()

        assert options.pattern == '**/*.md'
        assert options.patterns == ['**/*.md']
        assert options.base is None
        assert options.i18n is False
        assert options.url is None
        assert options.author is None

    def test_pattern_list(self):
        options = LoaderOptions(pattern=['notes/*.md', 'daily/*.md'])
        assert options.patterns == ['notes/*.md', 'daily/*.md']

    def test_empty_pattern_rejected(self):
        """Test an empty pattern fails validation."""
        with pytest.raises(ValidationError, match='non-empty glob'):
            LoaderOptions(pattern='  ')

    def test_empty_pattern_list_rejected(self):
        with pytest.raises(ValidationError):
            LoaderOptions(pattern=[])


class TestVaultSyncConfig:
    def test_defaults(self):
        """Test default configuration."""
        config = VaultSyncConfig()

        assert config.root == Path.cwd()
        assert config.collection == 'vault'
        assert config.default_locale == 'en'
        assert config.max_concurrency == SEMAPHORE_LIMIT
        assert config.store_path is None

    def test_base_dir(self, tmp_path):
        config = VaultSyncConfig(root=tmp_path, loader=LoaderOptions(base='content'))
        assert config.base_dir == (tmp_path / 'content').resolve()

        assert VaultSyncConfig(root=tmp_path).base_dir == tmp_path.resolve()

    def test_base_url_defaults_to_collection(self):
        assert VaultSyncConfig(collection='docs').base_url == 'docs'
        assert VaultSyncConfig(collection='docs', loader=LoaderOptions(url='kb')).base_url == 'kb'
        assert VaultSyncConfig(loader=LoaderOptions(url='')).base_url == ''

    def test_concurrency_must_be_positive(self):
        with pytest.raises(ValidationError):
            VaultSyncConfig(max_concurrency=0)

    def test_yaml_round_trip(self, tmp_path):
        """Test saving and loading configuration from YAML."""
        config = VaultSyncConfig(
            root=tmp_path,
            collection='notes',
            loader=LoaderOptions(pattern=['**/*.md', '!drafts/**'], base='vault', author='Ada'),
            max_concurrency=4,
            store_path=tmp_path / 'entries.db',
        )
        yaml_path = tmp_path / 'vaultsync.yaml'
        config.to_yaml(yaml_path)

        assert VaultSyncConfig.from_yaml(yaml_path) == config

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            VaultSyncConfig.from_yaml(tmp_path / 'missing.yaml')

    def test_from_empty_yaml(self, tmp_path):
        yaml_path = tmp_path / 'vaultsync.yaml'
        yaml_path.write_text('')
        assert VaultSyncConfig.from_yaml(yaml_path).collection == 'vault'

    def test_from_env(self, tmp_path, monkeypatch):
        """Test loading configuration from the path in an environment variable."""
        yaml_path = tmp_path / 'custom.yaml'
        yaml_path.write_text('collection: journal\nloader:\n  pattern: "*.md"\n')
        monkeypatch.setenv('VAULTSYNC_CONFIG_PATH', str(yaml_path))

        config = VaultSyncConfig.from_env()

        assert config.collection == 'journal'
        assert config.loader.pattern == '*.md'

    def test_from_env_falls_back_to_cwd_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv('VAULTSYNC_CONFIG_PATH', raising=False)
        monkeypatch.chdir(tmp_path)
        (tmp_path / '.vaultsync.yaml').write_text('collection: local\n')

        assert VaultSyncConfig.from_env().collection == 'local'

    def test_from_env_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv('VAULTSYNC_CONFIG_PATH', raising=False)
        monkeypatch.chdir(tmp_path)

        assert VaultSyncConfig.from_env().collection == 'vault'


def test_config_file_names():
    assert '.vaultsync.yaml' in CONFIG_FILE_NAMES
    assert 'vaultsync.yml' in CONFIG_FILE_NAMES
