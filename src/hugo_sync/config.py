from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

from .constants import DEFAULT_CONFIG_PATH
from .models import ImageLayout


class ConfigError(ValueError):
    """Raised when config.toml holds a value that cannot be used."""


@dataclass(slots=True)
class HugoConfig:
    path: Path = Path("")
    content_path: str = "content/posts"
    static_path: str = "static"
    image_layout: ImageLayout = ImageLayout.STATIC


@dataclass(slots=True)
class ConvertConfig:
    filtered_headers: tuple[str, ...] = ()
    description_lines: int = 5
    description_max_length: int = 120
    use_first_image_as_cover: bool = False
    author_name: str = ""
    timestamp_image_names: bool = False
    language: str = "en"


@dataclass(slots=True)
class VaultConfig:
    path: Path = Path(".")


@dataclass(slots=True)
class RuntimeConfig:
    log_dir: Path = Path(".hugo-sync")
    log_file: str = "log.jsonl"
    summary_csv: str = "summary.csv"
    enable_local_api: bool = False


@dataclass(slots=True)
class APIConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(slots=True)
class AppConfig:
    hugo: HugoConfig = field(default_factory=HugoConfig)
    convert: ConvertConfig = field(default_factory=ConvertConfig)
    vault: VaultConfig = field(default_factory=VaultConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    api: APIConfig = field(default_factory=APIConfig)


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _section(raw: Mapping[str, object], name: str) -> Mapping[str, object] | None:
    data = raw.get(name)
    return data if isinstance(data, Mapping) else None


def _integer(data: Mapping[str, object], key: str, default: int) -> int:
    raw = data.get(key, default)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from exc


def _non_negative(data: Mapping[str, object], key: str, default: int) -> int:
    value = _integer(data, key, default)
    if value < 0:
        raise ConfigError(f"{key} must be >= 0, got {value}")
    return value


def _build_layout(data: Mapping[str, object]) -> ImageLayout:
    if "image_layout" in data:
        try:
            return ImageLayout(str(data["image_layout"]))
        except ValueError as exc:
            choices = ", ".join(layout.value for layout in ImageLayout)
            raise ConfigError(f"image_layout must be one of: {choices}") from exc
    if "image_to_static" in data:
        return ImageLayout.STATIC if bool(data["image_to_static"]) else ImageLayout.BUNDLE
    return ImageLayout.STATIC


def _build_hugo(data: Mapping[str, object] | None) -> HugoConfig:
    if not data:
        return HugoConfig()
    return HugoConfig(
        path=Path(str(data.get("path", ""))),
        content_path=str(data.get("content_path", "content/posts")),
        static_path=str(data.get("static_path", "static")),
        image_layout=_build_layout(data),
    )


def _tuple_of_strings(value: object | None, default: Iterable[str]) -> tuple[str, ...]:
    if not value:
        return tuple(default)
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Iterable):
        return tuple(str(item) for item in value)
    raise ConfigError(f"Unsupported filtered_headers configuration: {value!r}")


def _build_convert(data: Mapping[str, object] | None) -> ConvertConfig:
    if not data:
        return ConvertConfig()
    headers = _tuple_of_strings(data.get("filtered_headers"), ())
    return ConvertConfig(
        filtered_headers=tuple(header.strip() for header in headers if header.strip()),
        description_lines=_non_negative(data, "description_lines", 5),
        description_max_length=_non_negative(data, "description_max_length", 120),
        use_first_image_as_cover=bool(data.get("use_first_image_as_cover", False)),
        author_name=str(data.get("author_name", "")),
        timestamp_image_names=bool(data.get("timestamp_image_names", False)),
        language=str(data.get("language", "en")),
    )


def _build_vault(data: Mapping[str, object] | None) -> VaultConfig:
    if not data:
        return VaultConfig()
    return VaultConfig(path=Path(str(data.get("path", "."))))


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data:
        return RuntimeConfig()
    return RuntimeConfig(
        log_dir=Path(str(data.get("log_dir", ".hugo-sync"))),
        log_file=str(data.get("log_file", "log.jsonl")),
        summary_csv=str(data.get("summary_csv", "summary.csv")),
        enable_local_api=bool(data.get("enable_local_api", False)),
    )


def _build_api(data: Mapping[str, object] | None) -> APIConfig:
    if not data:
        return APIConfig()
    return APIConfig(host=str(data.get("host", "127.0.0.1")), port=_integer(data, "port", 8000))


def load_config(path: Path | None = None) -> AppConfig:
    path = path or DEFAULT_CONFIG_PATH
    raw = _read_toml(path)
    return AppConfig(
        hugo=_build_hugo(_section(raw, "hugo")),
        convert=_build_convert(_section(raw, "convert")),
        vault=_build_vault(_section(raw, "vault")),
        runtime=_build_runtime(_section(raw, "runtime")),
        api=_build_api(_section(raw, "api")),
    )


def dump_config(config: AppConfig) -> str:
    payload = {
        "hugo": {
            "path": str(config.hugo.path),
            "content_path": config.hugo.content_path,
            "static_path": config.hugo.static_path,
            "image_layout": config.hugo.image_layout.value,
        },
        "convert": {
            "filtered_headers": list(config.convert.filtered_headers),
            "description_lines": config.convert.description_lines,
            "description_max_length": config.convert.description_max_length,
            "use_first_image_as_cover": config.convert.use_first_image_as_cover,
            "author_name": config.convert.author_name,
            "timestamp_image_names": config.convert.timestamp_image_names,
            "language": config.convert.language,
        },
        "vault": {
            "path": str(config.vault.path),
        },
        "runtime": {
            "log_dir": str(config.runtime.log_dir),
            "log_file": config.runtime.log_file,
            "summary_csv": config.runtime.summary_csv,
            "enable_local_api": config.runtime.enable_local_api,
        },
        "api": {
            "host": config.api.host,
            "port": config.api.port,
        },
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


__all__ = [
    "APIConfig",
    "AppConfig",
    "ConfigError",
    "ConvertConfig",
    "HugoConfig",
    "RuntimeConfig",
    "VaultConfig",
    "dump_config",
    "load_config",
]
