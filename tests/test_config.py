# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from csp_scout.config import ScannerConfig, build_config, load_config


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("sitemap: https://example.com/sitemap.xml\nconcurrency: 4", ".yaml", None),
        (json.dumps({"sitemap": "https://example.com/sitemap.xml", "concurrency": 4}), ".json", None),
        ("{}", ".json", ValidationError),
        ("concurrency: 0\nsitemap: s.xml", ".yml", ValidationError),
        ("sitemap: s.xml\nunknown_key: 1", ".yaml", ValidationError),
        ("::invalid yaml: [", ".yaml", ValueError),
        ("- just\n- a list", ".yaml", TypeError),
        ("{broken json", ".json", ValueError),
        ("sitemap = 's.xml'", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, ScannerConfig)
        assert cfg.sitemap == "https://example.com/sitemap.xml"
        assert cfg.concurrency == 4


def test_defaults():
    cfg = ScannerConfig(sitemap="  sitemap.xml ")
    assert cfg.sitemap == "sitemap.xml"
    assert cfg.out_dir == Path("out")
    assert cfg.concurrency == 8
    assert cfg.limit == 0
    assert cfg.timeout == 20
    assert cfg.sitemap_timeout == 30.0
    assert cfg.user_agent == "CSP-Inventory-Crawler/1.0"
    assert cfg.sample_pages == 5


def test_config_is_frozen():
    cfg = ScannerConfig(sitemap="s.xml")
    with pytest.raises(ValidationError):
        cfg.concurrency = 2


def test_apply_limit():
    urls = ["a", "b", "c"]
    assert ScannerConfig(sitemap="s", limit=0).apply_limit(urls) == urls
    assert ScannerConfig(sitemap="s", limit=2).apply_limit(urls) == ["a", "b"]
    assert ScannerConfig(sitemap="s", limit=10).apply_limit(urls) == urls


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_build_config_overrides_file_values(tmp_path):
    cfg_path = write_file(tmp_path, "sitemap: from-file.xml\nconcurrency: 3\ntimeout: 7", ".yaml")
    cfg = build_config(cfg_path, concurrency=10, timeout=None, user_agent="UA/2")
    assert cfg.sitemap == "from-file.xml"
    assert cfg.concurrency == 10
    assert cfg.timeout == 7
    assert cfg.user_agent == "UA/2"


def test_build_config_without_file():
    assert build_config(sitemap="s.xml").sitemap == "s.xml"
    with pytest.raises(ValidationError):
        build_config()
