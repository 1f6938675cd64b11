from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from hugo_sync.config import AppConfig, ConvertConfig, HugoConfig, RuntimeConfig, VaultConfig
from hugo_sync.models import ImageLayout

FIXED_DATE = "2024-01-02T03:04:05.000Z"


def fixed_clock() -> datetime:
    return datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def build_config(
    tmp_path: Path,
    *,
    layout: ImageLayout = ImageLayout.STATIC,
    **convert_options: object,
) -> AppConfig:
    convert = ConvertConfig(description_lines=0)
    for key, value in convert_options.items():
        setattr(convert, key, value)
    return AppConfig(
        hugo=HugoConfig(path=tmp_path / "site", image_layout=layout),
        convert=convert,
        vault=VaultConfig(path=tmp_path / "vault"),
        runtime=RuntimeConfig(log_dir=tmp_path / "logs"),
    )


def write_file(path: Path, data: str | bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, bytes):
        path.write_bytes(data)
    else:
        path.write_text(data, encoding="utf-8")
    return path
