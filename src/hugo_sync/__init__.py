"""Sync vault notes into a Hugo site."""

from .config import AppConfig, load_config
from .core import SyncError, SyncService
from .host import LocalVaultHost, VaultHost
from .models import BatchSyncResult, ConversionResult, Document, ImageCopyInstruction, ImageLayout
from .transform import DocumentTransformer

__all__ = [
    "AppConfig",
    "BatchSyncResult",
    "ConversionResult",
    "Document",
    "DocumentTransformer",
    "ImageCopyInstruction",
    "ImageLayout",
    "LocalVaultHost",
    "SyncError",
    "SyncService",
    "VaultHost",
    "load_config",
]
