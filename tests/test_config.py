"""Tests for config persistence."""

import json
import os
import tempfile
from pathlib import Path

import pytest

from difx.config import Config, config_path, load_config, mask_secret, save_config
from difx.errors import ConfigError


def test_missing_file_gives_defaults():
    with tempfile.TemporaryDirectory() as tmpdir:
        cfg = load_config(Path(tmpdir) / "config.json")
        assert cfg == Config()
        assert cfg.active_model == "claude"
        assert cfg.streaming is True
        assert cfg.markup == "tags"


def test_save_load():
    """Config round-trips through JSON, creating the directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "nested" / "config.json"
        cfg = Config(active_model="azure-openai", azure_openai_key="k", streaming=False)
        save_config(cfg, path)

        assert path.is_file()
        assert load_config(path) == cfg


def test_unknown_keys_ignored():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.json"
        path.write_text(json.dumps({"claude_api_key": "abc", "legacy_field": 1}))
        assert load_config(path).claude_api_key == "abc"


def test_bad_json_is_config_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError):
            load_config(path)


def test_non_object_is_config_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.json"
        path.write_text("[]")
        with pytest.raises(ConfigError):
            load_config(path)


def test_unknown_markup_is_config_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.json"
        path.write_text(json.dumps({"markup": "html"}))
        with pytest.raises(ConfigError):
            load_config(path)


def test_unwritable_is_config_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        blocker = Path(tmpdir) / "file"
        blocker.write_text("")
        with pytest.raises(ConfigError):
            save_config(Config(), blocker / "config.json")


def test_config_dir_from_env(monkeypatch):
    monkeypatch.setenv("DIFX_CONFIG_DIR", "/tmp/difx-test-dir")
    assert config_path() == Path("/tmp/difx-test-dir/config.json")


def test_default_config_dir(monkeypatch):
    monkeypatch.delenv("DIFX_CONFIG_DIR", raising=False)
    assert config_path() == Path(os.path.expanduser("~/.config/difx/config.json"))


def test_mask_secret():
    assert mask_secret("") == "(not set)"
    assert mask_secret("abc") == "***"
    assert mask_secret("sk-ant-123456") == "*********3456"


def test_wrong_value_type_is_config_error():
    """Values of the wrong JSON type are rejected instead of loaded as-is."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.json"
        for data in [{"streaming": "false"}, {"streaming": 0}, {"claude_api_key": 123}, {"markup": None}]:
            path.write_text(json.dumps(data))
            with pytest.raises(ConfigError) as exc_info:
                load_config(path)
            assert next(iter(data)) in str(exc_info.value)


def test_false_streaming_loads():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.json"
        path.write_text(json.dumps({"streaming": False}))
        assert load_config(path).streaming is False
