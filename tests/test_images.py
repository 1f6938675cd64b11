from __future__ import annotations

from pathlib import Path

from hugo_sync.host import LocalVaultHost
from hugo_sync.images import (
    EMBED_UNRESOLVED,
    IMAGE_NOT_FOUND,
    ImageCopier,
    ImageResolver,
)
from hugo_sync.models import ImageCopyInstruction, ImageLayout

from helpers import build_config, write_file

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


def build_vault(tmp_path: Path) -> Path:
    vault = tmp_path / "vault"
    write_file(vault / "posts" / "note.md", "note")
    write_file(vault / "posts" / "a b.png", PNG_BYTES)
    write_file(vault / "attachments" / "diagram.png", PNG_BYTES)
    return vault


def rewrite(resolver: ImageResolver, line: str):
    return resolver.rewrite_line(line, document_path="posts/note.md", title="note")


def test_static_layout_link_is_encoded(tmp_path: Path) -> None:
    vault = build_vault(tmp_path)
    config = build_config(tmp_path)
    resolver = ImageResolver(config, LocalVaultHost(vault))

    result = rewrite(resolver, "![shot](a%20b.png)")

    assert result.line == "![shot](/images/a%20b.png)"
    assert result.images == [
        ImageCopyInstruction(
            source=vault / "posts" / "a b.png",
            destination=tmp_path / "site" / "static" / "images" / "a b.png",
            name="a b.png",
        )
    ]


def test_bundle_layout_link_is_relative(tmp_path: Path) -> None:
    vault = build_vault(tmp_path)
    config = build_config(tmp_path, layout=ImageLayout.BUNDLE)
    resolver = ImageResolver(config, LocalVaultHost(vault))

    result = rewrite(resolver, "![shot](a b.png)")

    assert result.line == "![shot](./images/a%20b.png)"
    assert result.images[0].destination == (
        tmp_path / "site" / "content" / "posts" / "note" / "images" / "a b.png"
    )


def test_embed_is_resolved_through_the_vault(tmp_path: Path) -> None:
    vault = build_vault(tmp_path)
    resolver = ImageResolver(build_config(tmp_path), LocalVaultHost(vault))

    result = rewrite(resolver, "See ![[diagram.png|300]] here")

    assert result.line == "See ![diagram](/images/diagram.png) here"
    assert result.images[0].source == vault / "attachments" / "diagram.png"


def test_vault_absolute_reference(tmp_path: Path) -> None:
    vault = build_vault(tmp_path)
    resolver = ImageResolver(build_config(tmp_path), LocalVaultHost(vault))

    result = rewrite(resolver, "![d](/attachments/diagram.png)")

    assert result.line == "![d](/images/diagram.png)"
    assert result.images[0].source == vault / "attachments" / "diagram.png"


def test_title_and_alt_are_preserved(tmp_path: Path) -> None:
    vault = build_vault(tmp_path)
    resolver = ImageResolver(build_config(tmp_path), LocalVaultHost(vault))

    result = rewrite(resolver, '![Alt text](../attachments/diagram.png "A title")')

    assert result.line == '![Alt text](/images/diagram.png "A title")'


def test_parentheses_in_file_name(tmp_path: Path) -> None:
    vault = build_vault(tmp_path)
    write_file(vault / "posts" / "Screenshot (1).png", PNG_BYTES)
    resolver = ImageResolver(build_config(tmp_path), LocalVaultHost(vault))

    result = rewrite(resolver, "See ![s](Screenshot (1).png) and ![t](Screenshot (1).png \"Shot\").")

    assert result.line == (
        "See ![s](/images/Screenshot%20%281%29.png) and ![t](/images/Screenshot%20%281%29.png \"Shot\")."
    )
    assert [image.source for image in result.images] == [vault / "posts" / "Screenshot (1).png"] * 2


def test_several_references_on_one_line(tmp_path: Path) -> None:
    vault = build_vault(tmp_path)
    resolver = ImageResolver(build_config(tmp_path), LocalVaultHost(vault))

    result = rewrite(resolver, "![a](a%20b.png) and ![[diagram.png]]")

    assert result.line == "![a](/images/a%20b.png) and ![diagram](/images/diagram.png)"
    assert [image.name for image in result.images] == ["a b.png", "diagram.png"]


def test_broken_references_stay_as_written(tmp_path: Path) -> None:
    vault = build_vault(tmp_path)
    resolver = ImageResolver(build_config(tmp_path), LocalVaultHost(vault))

    line = "![x](missing.png) ![[nowhere.png]]"
    result = rewrite(resolver, line)

    assert result.matched is True
    assert result.line == line
    assert result.images == []
    assert result.warnings == [IMAGE_NOT_FOUND, EMBED_UNRESOLVED]


def test_non_image_links_are_ignored(tmp_path: Path) -> None:
    vault = build_vault(tmp_path)
    resolver = ImageResolver(build_config(tmp_path), LocalVaultHost(vault))

    result = rewrite(resolver, "[doc](file.pdf) ![[other note]]")

    assert result.matched is False


def test_timestamped_names(tmp_path: Path) -> None:
    vault = build_vault(tmp_path)
    config = build_config(tmp_path, timestamp_image_names=True)
    resolver = ImageResolver(config, LocalVaultHost(vault), clock=lambda: 1700000000.0)

    result = rewrite(resolver, "![[diagram.png]]")

    assert result.images[0].name == "diagram_1700000000000.png"
    assert result.line == "![diagram](/images/diagram_1700000000000.png)"


class CountingHost(LocalVaultHost):
    def __init__(self, vault_dir: Path) -> None:
        super().__init__(vault_dir)
        self.copies = 0

    def copy_file(self, source: Path, destination: Path) -> None:
        self.copies += 1
        super().copy_file(source, destination)


def test_copier_never_overwrites(tmp_path: Path) -> None:
    vault = build_vault(tmp_path)
    host = CountingHost(vault)
    destination = tmp_path / "site" / "static" / "images" / "diagram.png"
    instruction = ImageCopyInstruction(
        source=vault / "attachments" / "diagram.png",
        destination=destination,
        name="diagram.png",
    )
    copier = ImageCopier(host)

    assert copier.copy(instruction) is True
    assert destination.read_bytes() == PNG_BYTES
    assert copier.copy(instruction) is False
    assert host.copies == 1
