"""Vault note to Hugo page conversion.

A note is converted with a single forward scan over its lines. The scan
carries a small state (:class:`ScanState`) from line to line and every
transition is computed by :meth:`LineScanner.step`, which looks at one line
and returns the next state together with what that line contributes to the
output (:class:`LineOutcome`).

Per line the checks run in a fixed order:

1. headings open or close a filtered region,
2. image references are rewritten (a line with images is emitted as is and
   takes no part in tag handling),
3. ``tags:`` blocks collect list items as tags,
4. inline ``#tag`` tokens are collected and stripped from the line.
"""

from __future__ import annotations

import re
import string
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from .config import AppConfig
from .frontmatter import FrontMatter, render_front_matter
from .images import ImageResolver
from .models import ConversionResult, ImageCopyInstruction
from .utils import strip_markdown_suffix

HEADER_RE = re.compile(r"^(#{1,6})(?!#)(?:(?<=##)|(?=\s|$))\s*(.*?)\s*$")
INLINE_TAG_RE = re.compile(r"#[^\s#]+")
SYMBOL_ONLY_RE = re.compile(rf"^[{re.escape(string.punctuation)}]+$")

TAG_BLOCK_MARKER = "tags:"
LIST_ITEM_MARKER = "-"


def is_symbol_only(value: str) -> bool:
    return bool(SYMBOL_ONLY_RE.match(value))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_date(moment: datetime) -> str:
    iso = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return iso.replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class ScanState:
    header_level: int = 0
    skip_content: bool = False
    tag_section: bool = False


@dataclass(slots=True)
class LineOutcome:
    emit: str | None = None
    tags: list[str] = field(default_factory=list)
    images: list[ImageCopyInstruction] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class LineScanner:
    def __init__(
        self,
        resolver: ImageResolver,
        filtered_headers: Sequence[str],
        *,
        document_path: str,
        title: str,
    ) -> None:
        self._resolver = resolver
        self._filtered = frozenset(filtered_headers)
        self._document_path = document_path
        self._title = title

    def step(self, state: ScanState, line: str) -> tuple[ScanState, LineOutcome]:
        trimmed = line.strip()

        header = HEADER_RE.match(trimmed)
        if header:
            state, dropped = self._enter_header(state, len(header.group(1)), header.group(2))
            if dropped:
                return state, LineOutcome()

        if state.tag_section and not trimmed.startswith(LIST_ITEM_MARKER):
            state = replace(state, tag_section=False)

        if not state.skip_content:
            rewrite = self._resolver.rewrite_line(line, document_path=self._document_path, title=self._title)
            if rewrite.matched:
                return state, LineOutcome(emit=rewrite.line, images=rewrite.images, warnings=rewrite.warnings)

        if trimmed == TAG_BLOCK_MARKER:
            return replace(state, tag_section=True), LineOutcome()

        if state.tag_section:
            tag = trimmed[len(LIST_ITEM_MARKER):].strip()
            if tag and not is_symbol_only(tag):
                return state, LineOutcome(tags=[tag])
            return state, LineOutcome()

        if state.skip_content:
            return state, LineOutcome()

        # heading markers are never tags, even without a space (##Notes)
        text = header.group(2) if header else trimmed
        tokens = INLINE_TAG_RE.findall(text)
        if not tokens:
            return state, LineOutcome(emit=line)
        tags = [token[1:] for token in tokens if not is_symbol_only(token[1:])]
        if header:
            cleaned = f"{header.group(1)} {INLINE_TAG_RE.sub('', text).strip()}".rstrip()
        else:
            cleaned = INLINE_TAG_RE.sub("", line).strip()
        return state, LineOutcome(emit=cleaned or None, tags=tags)

    def _enter_header(self, state: ScanState, level: int, content: str) -> tuple[ScanState, bool]:
        if state.skip_content and level > state.header_level:
            # nested headings stay inside the filtered section
            return state, True
        if content in self._filtered:
            return replace(state, header_level=level, skip_content=True), True
        return replace(state, header_level=level, skip_content=False), False


def trim_blank_lines(lines: list[str]) -> list[str]:
    start = 0
    end = len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


class DocumentTransformer:
    """Turns the raw text of one note into a Hugo page."""

    def __init__(
        self,
        config: AppConfig,
        resolver: ImageResolver,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._config = config
        self._resolver = resolver
        self._clock = clock

    def convert(self, content: str, file_name: str, *, document_path: str | None = None) -> ConversionResult:
        options = self._config.convert
        title = strip_markdown_suffix(file_name)
        scanner = LineScanner(
            self._resolver,
            options.filtered_headers,
            document_path=document_path if document_path is not None else file_name,
            title=title,
        )

        lines = content.splitlines()
        state = ScanState()
        body: list[str] = []
        tags: list[str] = []
        images: list[ImageCopyInstruction] = []
        warnings: list[str] = []
        for line in lines:
            state, outcome = scanner.step(state, line)
            if outcome.emit is not None:
                body.append(outcome.emit)
            for tag in outcome.tags:
                if tag not in tags:
                    tags.append(tag)
            for image in outcome.images:
                if all(image.destination != known.destination for known in images):
                    images.append(image)
            warnings.extend(outcome.warnings)

        meta = FrontMatter(
            title=title,
            date=format_date(self._clock()),
            tags=tags,
            description=self._description(lines),
            author=options.author_name or None,
            cover=images[0].destination if options.use_first_image_as_cover and images else None,
        )
        text = render_front_matter(meta) + "\n"
        content_lines = trim_blank_lines(body)
        if content_lines:
            text += "\n" + "\n".join(content_lines) + "\n"
        return ConversionResult(
            text=text,
            images=tuple(images),
            tags=tuple(tags),
            warnings=tuple(warnings),
        )

    def _description(self, lines: list[str]) -> str | None:
        count = self._config.convert.description_lines
        if count <= 0:
            return None
        description = "".join(lines[:count]).strip()
        limit = self._config.convert.description_max_length
        if limit > 0:
            description = description[:limit].rstrip()
        return description


__all__ = [
    "DocumentTransformer",
    "LineOutcome",
    "LineScanner",
    "ScanState",
    "format_date",
    "is_symbol_only",
    "trim_blank_lines",
]
