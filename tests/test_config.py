from __future__ import annotations

import json
from pathlib import Path

import pytest

from hugo_sync.config import AppConfig, ConfigError, dump_config, load_config
from hugo_sync.models import ImageLayout


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "absent.toml")
    assert config == AppConfig()
    assert config.hugo.content_path == "content/posts"
    assert config.convert.description_lines == 5
    assert config.convert.description_max_length == 120


def test_load_config_sections(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        """
[hugo]
path = "/srv/site"
image_layout = "bundle"

[convert]
filtered_headers = ["Private", "  ", "Draft "]
author_name = "Ada"

[runtime]
enable_local_api = true
""",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.hugo.path == Path("/srv/site")
    assert config.hugo.image_layout is ImageLayout.BUNDLE
    assert config.convert.filtered_headers == ("Private", "Draft")
    assert config.convert.author_name == "Ada"
    assert config.runtime.enable_local_api is True


def test_legacy_image_to_static_flag(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("[hugo]\nimage_to_static = false\n", encoding="utf-8")
    assert load_config(path).hugo.image_layout is ImageLayout.BUNDLE


@pytest.mark.parametrize(
    "body",
    [
        '[hugo]\nimage_layout = "flat"\n',
        "[convert]\ndescription_lines = -1\n",
        '[convert]\ndescription_lines = "many"\n',
        "[api]\nport = [8000]\n",
    ],
)
def test_invalid_values_raise(tmp_path: Path, body: str) -> None:
    path = tmp_path / "config.toml"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_dump_config_is_json() -> None:
    payload = json.loads(dump_config(AppConfig()))
    assert payload["hugo"]["image_layout"] == "static"
    assert payload["convert"]["filtered_headers"] == []
