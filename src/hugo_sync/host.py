"""Capabilities the sync core needs from its host.

The core never touches the filesystem directly. Everything goes through a
:class:`VaultHost`, so a different host (an editor plugin bridge, an
in-memory fake in tests) only has to provide these few operations.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Sequence
from pathlib import Path, PurePosixPath
from typing import Protocol

from .models import Document
from .utils import atomic_copy, atomic_write, posix_dirname

Notifier = Callable[[str, int | None], None]


class VaultHost(Protocol):
    def selected_documents(self) -> list[Document]:  # pragma: no cover - interface
        ...

    def read_text(self, document: Document) -> str:  # pragma: no cover - interface
        ...

    def resolve_link(self, reference: str, context_path: str) -> str | None:  # pragma: no cover - interface
        ...

    def vault_base(self) -> Path:  # pragma: no cover - interface
        ...

    def exists(self, path: Path) -> bool:  # pragma: no cover - interface
        ...

    def make_dirs(self, path: Path) -> None:  # pragma: no cover - interface
        ...

    def copy_file(self, source: Path, destination: Path) -> None:  # pragma: no cover - interface
        ...

    def write_text(self, path: Path, text: str) -> None:  # pragma: no cover - interface
        ...

    def notify(self, message: str, duration_ms: int | None = None) -> None:  # pragma: no cover - interface
        ...


class LocalVaultHost:
    """A vault that is a plain directory on the local disk."""

    def __init__(
        self,
        vault_dir: Path,
        *,
        selected: Sequence[Path] = (),
        active: Path | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self._vault_dir = vault_dir
        self._selected = list(selected)
        self._active = active
        self._notifier = notifier
        self._name_index: dict[str, list[str]] | None = None

    def selected_documents(self) -> list[Document]:
        paths = self._selected or ([self._active] if self._active else [])
        return [self.document_for(path) for path in paths]

    def document_for(self, path: Path) -> Document:
        candidate = path if path.is_absolute() else self._vault_dir / path
        try:
            relative = candidate.resolve().relative_to(self._vault_dir.resolve())
        except ValueError:
            return Document(name=candidate.name, path=candidate.resolve().as_posix())
        return Document(name=candidate.name, path=relative.as_posix())

    def read_text(self, document: Document) -> str:
        return (self._vault_dir / document.path).read_text(encoding="utf-8")

    def resolve_link(self, reference: str, context_path: str) -> str | None:
        link = reference.strip().lstrip("/")
        if not link:
            return None
        if "/" in link:
            context_dir = posix_dirname(context_path)
            for candidate in (f"{context_dir}/{link}" if context_dir else link, link):
                if (self._vault_dir / candidate).is_file():
                    return str(PurePosixPath(candidate))
            return None
        matches = self._index().get(link.lower(), [])
        if not matches:
            return None
        context_dir = posix_dirname(context_path)
        for match in matches:
            if posix_dirname(match) == context_dir:
                return match
        return matches[0]

    def vault_base(self) -> Path:
        return self._vault_dir

    def exists(self, path: Path) -> bool:
        return path.exists()

    def make_dirs(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def copy_file(self, source: Path, destination: Path) -> None:
        atomic_copy(source, destination)

    def write_text(self, path: Path, text: str) -> None:
        atomic_write(path, text)

    def notify(self, message: str, duration_ms: int | None = None) -> None:
        if self._notifier is not None:
            self._notifier(message, duration_ms)

    def _index(self) -> dict[str, list[str]]:
        if self._name_index is None:
            index: dict[str, list[str]] = defaultdict(list)
            for file_path in sorted(self._vault_dir.rglob("*")):
                relative = file_path.relative_to(self._vault_dir)
                if any(part.startswith(".") for part in relative.parts):
                    continue
                if file_path.is_file():
                    index[file_path.name.lower()].append(relative.as_posix())
            for matches in index.values():
                matches.sort(key=lambda match: (match.count("/"), match))
            self._name_index = dict(index)
        return self._name_index


__all__ = ["LocalVaultHost", "Notifier", "VaultHost"]
