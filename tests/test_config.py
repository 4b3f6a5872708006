# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from threepwood.config import ScannerConfig, load_config
from threepwood.origin import LOCAL_PATH_PATTERN


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,expect_exc",
    [
        ("base_url: http://example.com\nmax_depth: 2", None),
        (json.dumps({"base_url": "http://example.com", "max_depth": 2}), None),
        ("{}", ValidationError),
        ("not: a: mapping", ValueError),
        ("::invalid yaml", TypeError),
    ],
)
def test_load_config_variants(tmp_path, content, expect_exc):
    suffix = ".yaml" if not content.strip().startswith("{") else ".json"
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, ScannerConfig)
        assert str(cfg.base_url).rstrip("/") == "http://example.com"
        assert cfg.max_depth == 2


def test_defaults():
    cfg = ScannerConfig(base_url="http://example.com")
    assert cfg.max_depth == 3
    assert cfg.verbose is False
    assert cfg.abort_on_malformed is False
    assert cfg.local_path_pattern == LOCAL_PATH_PATTERN


def test_overrides_take_precedence(tmp_path):
    cfg_path = write_file(tmp_path, "base_url: http://example.com\nmax_depth: 1\nverbose: true", ".yml")
    cfg = load_config(cfg_path, base_url="https://other.org", max_depth=5, verbose=None)
    assert str(cfg.base_url).startswith("https://other.org")
    assert cfg.max_depth == 5
    assert cfg.verbose is True


def test_scheme_defaults_to_https():
    cfg = load_config(base_url="example.com/start")
    assert str(cfg.base_url) == "https://example.com/start"


@pytest.mark.parametrize(
    "values",
    [
        {"base_url": "http://example.com", "max_depth": -1},
        {"base_url": "http://example.com", "local_path_pattern": "(unclosed"},
        {"base_url": "http://example.com", "unknown": 1},
        {"base_url": "ftp://example.com"},
    ],
)
def test_invalid_values(values):
    with pytest.raises(ValidationError):
        ScannerConfig(**values)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


def test_unsupported_suffix(tmp_path):
    with pytest.raises(ValueError):
        load_config(write_file(tmp_path, "base_url = 'x'", ".toml"))


def test_config_is_frozen():
    cfg = ScannerConfig(base_url="http://example.com")
    with pytest.raises(ValidationError):
        cfg.max_depth = 7
