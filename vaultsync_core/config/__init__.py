"""Configuration models for VaultSync."""

from .settings import CONFIG_FILE_NAMES, LoaderOptions, VaultSyncConfig

__all__ = ['CONFIG_FILE_NAMES', 'LoaderOptions', 'VaultSyncConfig']
