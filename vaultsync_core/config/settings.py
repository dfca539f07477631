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

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from vaultsync_core.helpers import DEFAULT_PATTERN, SEMAPHORE_LIMIT

CONFIG_FILE_NAMES = ('.vaultsync.yaml', '.vaultsync.yml', 'vaultsync.yaml', 'vaultsync.yml')


class LoaderOptions(BaseModel):
    """Options accepted by the vault loader.

    Examples:
        >>> options = LoaderOptions(pattern=['notes/**/*.md', 'daily/*.md'], author='Ada')
        >>> options = LoaderOptions(base='content/vault', i18n=True, url='docs')
    """

    pattern: str | list[str] = Field(
        default=DEFAULT_PATTERN,
        description='Glob pattern(s) matching entries, relative to the base directory',
    )
    base: str | None = Field(
        default=None,
        description='Base directory to resolve the pattern from. Relative to the project root.',
    )
    i18n: bool = Field(
        default=False,
        description='Treat the first path segment of every entry as its locale',
    )
    url: str | None = Field(
        default=None,
        description='Base URL the collection is served under. Defaults to the collection name.',
    )
    author: str | None = Field(
        default=None,
        description='Author used when an entry does not declare one',
    )

    @field_validator('pattern')
    @classmethod
    def pattern_not_empty(cls, value: str | list[str]) -> str | list[str]:
        patterns = [value] if isinstance(value, str) else value
        if not patterns or any(not p.strip() for p in patterns):
            raise ValueError('pattern must contain at least one non-empty glob')
        return value

    @property
    def patterns(self) -> list[str]:
        return [self.pattern] if isinstance(self.pattern, str) else list(self.pattern)


class VaultSyncConfig(BaseModel):
    """Main VaultSync configuration.

    Examples:
        >>> config = VaultSyncConfig(root='.', loader=LoaderOptions(base='vault'))

        >>> # Load from YAML file
        >>> config = VaultSyncConfig.from_yaml('vaultsync.yaml')

        >>> # Load from environment (looks for VAULTSYNC_CONFIG_PATH)
        >>> config = VaultSyncConfig.from_env()
    """

    root: Path = Field(
        default_factory=Path.cwd,
        description='Project root. Stored file paths are relative to it.',
    )
    collection: str = Field(default='vault', description='Name of the synced collection')
    default_locale: str = Field(
        default='en',
        description='Locale assigned to entries when i18n routing is off',
    )
    loader: LoaderOptions = Field(
        default_factory=LoaderOptions,
        description='Loader options',
    )
    max_concurrency: int = Field(
        default=SEMAPHORE_LIMIT,
        ge=1,
        description='Maximum number of entries processed at once',
    )
    store_path: Path | None = Field(
        default=None,
        description='SQLite database holding the synced entries. In-memory store when unset.',
    )

    @property
    def base_dir(self) -> Path:
        """Directory the include pattern is resolved from."""
        if self.loader.base is None:
            return self.root.resolve()
        return (self.root / self.loader.base).resolve()

    @property
    def base_url(self) -> str:
        return self.loader.url if self.loader.url is not None else self.collection

    @classmethod
    def from_yaml(cls, path: str | Path) -> 'VaultSyncConfig':
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            VaultSyncConfig instance loaded from the file

        Raises:
            FileNotFoundError: If the configuration file doesn't exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f'Configuration file not found: {path}')

        with open(path) as f:
            config_dict = yaml.safe_load(f)

        if config_dict is None:
            config_dict = {}

        return cls(**config_dict)

    @classmethod
    def from_env(cls, env_var: str = 'VAULTSYNC_CONFIG_PATH') -> 'VaultSyncConfig':
        """Load configuration from a YAML file specified in an environment variable.

        Falls back to a config file in the current directory, then to defaults.
        """
        config_path = os.getenv(env_var)
        if config_path:
            return cls.from_yaml(config_path)

        for default_file in CONFIG_FILE_NAMES:
            if Path(default_file).exists():
                return cls.from_yaml(default_file)

        return cls()

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        path = Path(path)
        config_dict = self.model_dump(exclude_none=True, mode='json')

        with open(path, 'w') as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)
