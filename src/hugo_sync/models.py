"""Domain models for the vault to Hugo sync."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .logging import BatchSummary


class ImageLayout(str, Enum):
    """Where copied images live in the Hugo tree."""

    STATIC = "static"
    BUNDLE = "bundle"

    @property
    def link_prefix(self) -> str:
        return "/images" if self is ImageLayout.STATIC else "./images"


@dataclass(frozen=True, slots=True)
class Document:
    """A note selected for syncing.

    ``path`` is the vault-relative POSIX path, ``name`` the file name.
    """

    name: str
    path: str


@dataclass(frozen=True, slots=True)
class ImageCopyInstruction:
    source: Path
    destination: Path
    name: str


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """Output of a single document conversion."""

    text: str
    images: tuple[ImageCopyInstruction, ...] = ()
    tags: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass(slots=True)
class DocumentSyncResult:
    """Result metadata for one synced document."""

    document: Document
    output_path: Path
    copied: list[Path]
    skipped: list[Path]
    warnings: list[str]
    summary: str


@dataclass(slots=True)
class BatchSyncResult:
    """Aggregate results for a batch sync request."""

    runs: list[DocumentSyncResult]
    summary: BatchSummary
    errors: list[str] = field(default_factory=list)
    message: str = ""


__all__ = [
    "BatchSyncResult",
    "ConversionResult",
    "Document",
    "DocumentSyncResult",
    "ImageCopyInstruction",
    "ImageLayout",
]
