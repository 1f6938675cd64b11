from __future__ import annotations

import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from urllib.parse import unquote

from .config import AppConfig
from .constants import IMAGE_EXTENSIONS, WEB_SCHEMES
from .host import VaultHost
from .models import ImageCopyInstruction, ImageLayout
from .utils import encode_link_path, posix_dirname

_EXTENSIONS = "|".join(IMAGE_EXTENSIONS)

# ![alt](path.png "optional title"); the path may hold balanced parentheses
BRACKET_IMAGE_RE = re.compile(
    rf"!\[(?P<alt>[^\]]*)\]\((?P<ref>(?:[^()]|\([^()]*\))*?\.(?:{_EXTENSIONS}))(?P<title>\s+[\"'][^)]*?[\"'])?\)",
    re.IGNORECASE,
)
# ![[path.png]] or ![[path.png|300]]
EMBED_IMAGE_RE = re.compile(
    rf"!\[\[(?P<ref>[^\]|]*?\.(?:{_EXTENSIONS}))(?:\|[^\]]*)?\]\]",
    re.IGNORECASE,
)

IMAGE_REMOTE = "IMAGE_REMOTE"
EMBED_UNRESOLVED = "EMBED_UNRESOLVED"
IMAGE_NOT_FOUND = "IMAGE_NOT_FOUND"
IMAGE_EXISTS = "IMAGE_EXISTS"


@dataclass(slots=True)
class Resolution:
    instruction: ImageCopyInstruction | None = None
    link: str | None = None
    warning: str | None = None


@dataclass(slots=True)
class LineRewrite:
    line: str
    matched: bool = False
    images: list[ImageCopyInstruction] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class ImageResolver:
    """Maps in-note image references onto the Hugo tree."""

    def __init__(
        self,
        config: AppConfig,
        host: VaultHost,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._host = host
        self._clock = clock

    @property
    def layout(self) -> ImageLayout:
        return self._config.hugo.image_layout

    def rewrite_line(self, line: str, *, document_path: str, title: str) -> LineRewrite:
        """Rewrite every image reference on ``line``.

        References that cannot be resolved are left exactly as written.
        """

        result = LineRewrite(line=line)

        def _substitute(match: re.Match[str], embedded: bool) -> str:
            result.matched = True
            reference = match.group("ref")
            resolution = self.resolve(reference, document_path=document_path, title=title, embedded=embedded)
            if resolution.warning:
                result.warnings.append(resolution.warning)
            if resolution.instruction is None or resolution.link is None:
                return match.group(0)
            result.images.append(resolution.instruction)
            return self.rewrite_reference(match, resolution.link, embedded=embedded)

        rewritten = BRACKET_IMAGE_RE.sub(lambda match: _substitute(match, False), line)
        rewritten = EMBED_IMAGE_RE.sub(lambda match: _substitute(match, True), rewritten)
        result.line = rewritten
        return result

    def resolve(self, reference: str, *, document_path: str, title: str, embedded: bool) -> Resolution:
        source = self._resolve_source(reference, document_path, embedded)
        if isinstance(source, str):
            return Resolution(warning=source)
        if not self._host.exists(source):
            return Resolution(warning=IMAGE_NOT_FOUND)
        name = self.new_name(source)
        instruction = ImageCopyInstruction(
            source=source,
            destination=self.destination_dir(title) / name,
            name=name,
        )
        return Resolution(instruction=instruction, link=self.link_for(name))

    def _resolve_source(self, reference: str, document_path: str, embedded: bool) -> Path | str:
        reference = reference.strip()
        if reference.lower().startswith(WEB_SCHEMES):
            return IMAGE_REMOTE
        base = self._host.vault_base()
        if embedded:
            resolved = self._host.resolve_link(reference, document_path)
            if resolved is None:
                return EMBED_UNRESOLVED
            return base / resolved
        decoded = unquote(reference)
        if decoded.startswith("/"):
            return base / decoded.lstrip("/")
        return base / posix_dirname(document_path) / decoded

    def new_name(self, source: Path) -> str:
        if not self._config.convert.timestamp_image_names:
            return source.name
        return f"{source.stem}_{int(self._clock() * 1000)}{source.suffix}"

    def destination_dir(self, title: str) -> Path:
        hugo = self._config.hugo
        if self.layout is ImageLayout.STATIC:
            return hugo.path / hugo.static_path / "images"
        return hugo.path / hugo.content_path / title / "images"

    def link_for(self, name: str) -> str:
        return encode_link_path(f"{self.layout.link_prefix}/{name}")

    @staticmethod
    def rewrite_reference(match: re.Match[str], link: str, *, embedded: bool) -> str:
        if embedded:
            alt = PurePosixPath(match.group("ref").strip()).stem
            return f"![{alt}]({link})"
        text = match.group(0)
        start = match.start("ref") - match.start()
        end = match.end("ref") - match.start()
        return text[:start] + link + text[end:]


class ImageCopier:
    """Copies resolved images into the Hugo tree, never overwriting."""

    def __init__(self, host: VaultHost) -> None:
        self._host = host

    def copy(self, instruction: ImageCopyInstruction) -> bool:
        if self._host.exists(instruction.destination):
            return False
        self._host.make_dirs(instruction.destination.parent)
        self._host.copy_file(instruction.source, instruction.destination)
        return True


__all__ = [
    "BRACKET_IMAGE_RE",
    "EMBED_IMAGE_RE",
    "EMBED_UNRESOLVED",
    "IMAGE_EXISTS",
    "IMAGE_NOT_FOUND",
    "IMAGE_REMOTE",
    "ImageCopier",
    "ImageResolver",
    "LineRewrite",
    "Resolution",
]
