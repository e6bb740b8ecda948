"""Tests for configuration loading, env overrides and saving."""

import json
import os
import pytest
from unittest.mock import patch


class TestDefaults:
    def test_defaults(self):
        from knowledge.common.config import KBConfig, MAX_CHECKPOINT_BYTES
        cfg = KBConfig()
        assert cfg.search.endpoint == ""
        assert cfg.search.api_version == "2025-11-01-preview"
        assert cfg.search.is_configured is False
        assert cfg.checkpoint.backend == "memory"
        assert cfg.checkpoint.max_payload_bytes == MAX_CHECKPOINT_BYTES == 5 * 1024 * 1024
        assert cfg.retriever.topk == 10
        assert cfg.server.transport == "stdio"

    def test_is_configured_requires_all_three(self):
        from knowledge.common.config import SearchConfig
        assert not SearchConfig(endpoint="https://x", api_key="k").is_configured
        assert SearchConfig(endpoint="https://x", api_key="k", kb_name="kb").is_configured


class TestLoadConfig:
    def test_missing_file_uses_defaults(self, tmp_path):
        from knowledge.common.config import load_config
        with patch("knowledge.common.config.CONFIG_PATH", tmp_path / "absent.json"), \
             patch.dict(os.environ, {}, clear=True):
            cfg = load_config()
        assert cfg.checkpoint.ttl_seconds == 3600.0
        assert cfg.search.is_configured is False

    def test_load_from_file(self, tmp_path):
        from knowledge.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({
            "search": {"endpoint": "https://search.example", "api_key": "k", "kb_name": "contoso"},
            "checkpoint": {"backend": "file", "directory": str(tmp_path / "cp"), "ttl_seconds": 60},
            "retriever": {"topk": 5},
            "server": {"transport": "http", "port": 9000},
        }))

        with patch("knowledge.common.config.CONFIG_PATH", config_file), \
             patch.dict(os.environ, {}, clear=True):
            cfg = load_config()

        assert cfg.search.is_configured
        assert cfg.search.kb_name == "contoso"
        assert cfg.checkpoint.backend == "file"
        assert cfg.checkpoint.ttl_seconds == 60.0
        assert cfg.retriever.topk == 5
        assert cfg.server.transport == "http"
        assert cfg.server.port == 9000

    def test_malformed_file_falls_back_to_defaults(self, tmp_path):
        from knowledge.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json")

        with patch("knowledge.common.config.CONFIG_PATH", config_file), \
             patch.dict(os.environ, {}, clear=True):
            cfg = load_config()

        assert cfg.checkpoint.backend == "memory"

    def test_env_overrides_file(self, tmp_path):
        from knowledge.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"retriever": {"topk": 5}}))

        env = {
            "AZURE_SEARCH_ENDPOINT": "https://env.example",
            "AZURE_SEARCH_API_KEY": "env-key",
            "AZURE_SEARCH_KB_NAME": "env-kb",
            "KB_TOPK": "7",
            "KB_CHECKPOINT_BACKEND": "FILE",
            "KB_CHECKPOINT_TTL": "120",
            "MCP_PORT": "8123",
        }
        with patch("knowledge.common.config.CONFIG_PATH", config_file), \
             patch.dict(os.environ, env, clear=True):
            cfg = load_config()

        assert cfg.search.endpoint == "https://env.example"
        assert cfg.search.is_configured
        assert cfg.retriever.topk == 7
        assert cfg.checkpoint.backend == "file"
        assert cfg.checkpoint.ttl_seconds == 120.0
        assert cfg.server.port == 8123
        assert "api_key" in cfg._env_sourced_keys

    def test_invalid_numeric_env_is_ignored(self, tmp_path):
        from knowledge.common.config import load_config
        with patch("knowledge.common.config.CONFIG_PATH", tmp_path / "absent.json"), \
             patch.dict(os.environ, {"KB_TOPK": "lots", "MCP_PORT": "x"}, clear=True):
            cfg = load_config()
        assert cfg.retriever.topk == 10
        assert cfg.server.port == 8000


class TestSaveConfig:
    def test_save_config_omits_env_api_key(self, tmp_path):
        from knowledge.common.config import load_config, save_config
        config_file = tmp_path / "config.json"
        config_file.write_text("{}")

        env = {"AZURE_SEARCH_API_KEY": "secret-from-env", "AZURE_SEARCH_KB_NAME": "kb"}
        with patch("knowledge.common.config.CONFIG_PATH", config_file), \
             patch("knowledge.common.config.CONFIG_DIR", tmp_path), \
             patch.dict(os.environ, env, clear=True):
            cfg = load_config()
            save_config(cfg)

        saved = json.loads(config_file.read_text())
        assert saved["search"]["api_key"] == ""
        assert saved["search"]["kb_name"] == "kb"

    def test_save_config_round_trips_file_values(self, tmp_path):
        from knowledge.common.config import load_config, save_config
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"search": {"api_key": "file-key"}, "retriever": {"topk": 3}}))

        with patch("knowledge.common.config.CONFIG_PATH", config_file), \
             patch("knowledge.common.config.CONFIG_DIR", tmp_path), \
             patch.dict(os.environ, {}, clear=True):
            cfg = load_config()
            save_config(cfg)

        saved = json.loads(config_file.read_text())
        assert saved["search"]["api_key"] == "file-key"
        assert saved["retriever"]["topk"] == 3
        assert oct(config_file.stat().st_mode & 0o777) == "0o600"


def test_ensure_directories_creates_configured_checkpoint_dir(tmp_path):
    from knowledge.common.config import KBConfig, ensure_directories
    base = tmp_path / ".foundry-kb"
    custom = tmp_path / "elsewhere" / "checkpoints"
    cfg = KBConfig()
    cfg.checkpoint.backend = "file"
    cfg.checkpoint.directory = str(custom)

    with patch("knowledge.common.config.CONFIG_DIR", base):
        ensure_directories(cfg)

    assert base.is_dir()
    assert custom.is_dir()
    assert not (base / "checkpoints").exists()
    assert not (base / "logs").exists()


def test_ensure_directories_memory_backend_skips_checkpoint_dir(tmp_path):
    from knowledge.common.config import KBConfig, ensure_directories
    base = tmp_path / ".foundry-kb"
    cfg = KBConfig()
    cfg.checkpoint.directory = str(tmp_path / "unused")

    with patch("knowledge.common.config.CONFIG_DIR", base):
        ensure_directories(cfg)

    assert base.is_dir()
    assert not (tmp_path / "unused").exists()
