from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version('vaultsync-core')
except PackageNotFoundError:
    __version__ = 'unknown'

from .document_sync import DocumentSyncManager, LoaderContext, VaultLoader, vault_loader

__all__ = ['DocumentSyncManager', 'LoaderContext', 'VaultLoader', 'vault_loader', '__version__']
