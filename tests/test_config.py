# File: tests/test_config.py
import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from dep_scout.config import DEFAULT_REGISTRY, ScanOptions, load_config, proxy_url, read_resolvers


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("concurrency: 5\nresolvers: ['1.1.1.1', '8.8.8.8:53']", ".yaml", None),
        (json.dumps({"concurrency": 5, "resolvers": ["1.1.1.1", "8.8.8.8:53"]}), ".json", None),
        ("concurrency: 0", ".yaml", ValidationError),
        ("unknown_option: 1", ".yml", ValidationError),
        ("concurrency: [unclosed", ".yaml", ValueError),
        ("- just\n- a list", ".yaml", TypeError),
        ("{broken", ".json", ValueError),
        ("concurrency = 5", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, ScanOptions)
        assert cfg.concurrency == 5
        assert cfg.resolvers == ["1.1.1.1", "8.8.8.8:53"]


def test_load_config_defaults():
    cfg = load_config(None)
    assert cfg.concurrency == 10
    assert cfg.timeout == 30
    assert cfg.delay == 0
    assert cfg.delay_jitter == 0
    assert cfg.user_agent == "dep_scout"
    assert cfg.proxy is None
    assert cfg.resolvers == []
    assert cfg.registry_url == DEFAULT_REGISTRY


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_options_are_frozen():
    cfg = ScanOptions()
    with pytest.raises(ValidationError):
        cfg.concurrency = 3


def test_registry_trailing_slash_stripped():
    assert ScanOptions(registry_url="http://mirror.local/npm/").registry_url == "http://mirror.local/npm"


def test_read_resolvers(tmp_path):
    path = tmp_path / "resolvers.txt"
    path.write_text("# public\n1.1.1.1\n\n8.8.4.4:5353\n", encoding="utf-8")
    assert read_resolvers(path) == ["1.1.1.1", "8.8.4.4:5353"]


def test_read_resolvers_unreadable_degrades(tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="DepScout"):
        assert read_resolvers(tmp_path / "missing.txt") == []
    assert "falling back to system DNS" in caplog.text


@pytest.mark.parametrize(
    "value,expected",
    [
        ("127.0.0.1:8080", "http://127.0.0.1:8080"),
        ("proxy.local:3128", "http://proxy.local:3128"),
        (None, None),
        ("", None),
    ],
)
def test_proxy_url(value, expected):
    assert proxy_url(value) == expected


@pytest.mark.parametrize("value", ["proxy.local", "http://proxy.local:3128", "host:0", "host:70000"])
def test_proxy_url_invalid_is_warning(value, caplog):
    with caplog.at_level(logging.WARNING, logger="DepScout"):
        assert proxy_url(value) is None
    assert "Invalid proxy format" in caplog.text
