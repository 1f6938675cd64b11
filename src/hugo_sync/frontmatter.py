from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DELIMITER = "---"


@dataclass(slots=True)
class FrontMatter:
    title: str
    date: str
    tags: list[str] = field(default_factory=list)
    description: str | None = None
    author: str | None = None
    cover: Path | None = None


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def render_front_matter(meta: FrontMatter) -> str:
    """Render the metadata block in its fixed field order.

    Optional fields are left out entirely when unset.
    """

    lines = [
        DELIMITER,
        f"title: {_quote(meta.title)}",
        f"date: {meta.date}",
        "draft: false",
        f"tags: [{', '.join(_quote(tag) for tag in meta.tags)}]",
    ]
    if meta.description is not None:
        lines.append(f"description: {_quote(meta.description)}")
    if meta.author:
        lines.append(f"author: {_quote(meta.author)}")
    if meta.cover is not None:
        lines.append(f"cover: {meta.cover.as_posix()}")
    lines.append(DELIMITER)
    return "\n".join(lines)


__all__ = ["FrontMatter", "render_front_matter"]
