from __future__ import annotations

import hashlib
import os
import shutil
import tempfile
import time
from collections.abc import Iterable
from pathlib import Path, PurePosixPath
from typing import Iterator
from urllib.parse import quote

from .constants import MARKDOWN_SUFFIXES


def generate_run_id(prefix: str = "run") -> str:
    epoch_ms = int(time.time() * 1000)
    random_bits = hashlib.sha256(os.urandom(16)).hexdigest()[:8]
    return f"{prefix}-{epoch_ms}-{random_bits}"


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w", delete=False, dir=path.parent, encoding=encoding, newline="\n"
    ) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
    os.replace(tmp.name, path)


def atomic_copy(source: Path, destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(delete=False, dir=destination.parent) as tmp:
        tmp_path = Path(tmp.name)
    try:
        shutil.copyfile(source, tmp_path)
        os.replace(tmp_path, destination)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def iter_markdown_files(paths: Iterable[Path]) -> Iterator[Path]:
    """Expand directories into the notes below them.

    Anything that is not a directory is passed through, missing files
    included, so the caller can report them.
    """

    for path in paths:
        if not path.is_dir():
            yield path
            continue
        for file_path in sorted(path.rglob("*")):
            relative = file_path.relative_to(path)
            if any(part.startswith(".") for part in relative.parts):
                continue
            if file_path.is_file() and file_path.suffix.lower() in MARKDOWN_SUFFIXES:
                yield file_path


def strip_markdown_suffix(file_name: str) -> str:
    lowered = file_name.lower()
    for suffix in MARKDOWN_SUFFIXES:
        if lowered.endswith(suffix):
            return file_name[: -len(suffix)]
    return file_name


def encode_link_path(path: str) -> str:
    """Percent-encode each segment of a forward-slash link path."""

    normalized = path.replace("\\", "/")
    return "/".join(quote(segment, safe="") for segment in normalized.split("/"))


def posix_dirname(path: str) -> str:
    parent = str(PurePosixPath(path.replace("\\", "/")).parent)
    return "" if parent == "." else parent
