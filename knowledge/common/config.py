"""
Configuration Management for the Foundry KB MCP server

Loads configuration from ~/.foundry-kb/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field

logger = logging.getLogger("foundry_kb.config")

# Default config paths
CONFIG_DIR = Path.home() / ".foundry-kb"
CONFIG_PATH = CONFIG_DIR / "config.json"
CHECKPOINTS_DIR = CONFIG_DIR / "checkpoints"

DEFAULT_API_VERSION = "2025-11-01-preview"
MAX_CHECKPOINT_BYTES = 5 * 1024 * 1024  # 5 MiB


@dataclass
class SearchConfig:
    """Azure AI Search knowledge base configuration"""
    endpoint: str = ""
    api_key: str = ""
    kb_name: str = ""
    api_version: str = DEFAULT_API_VERSION
    timeout_seconds: float = 30.0

    @property
    def is_configured(self) -> bool:
        """True when a live knowledge base endpoint can be used"""
        return bool(self.endpoint and self.api_key and self.kb_name)


@dataclass
class CheckpointConfig:
    """Checkpoint store configuration"""
    backend: str = "memory"  # "memory" or "file"
    directory: str = str(CHECKPOINTS_DIR)
    ttl_seconds: float = 3600.0
    max_entries: int = 1000
    max_payload_bytes: int = MAX_CHECKPOINT_BYTES


@dataclass
class RetrieverConfig:
    """Retrieval defaults"""
    topk: int = 10


@dataclass
class ServerConfig:
    """MCP server configuration"""
    name: str = "foundry_kb_mcp_server"
    transport: str = "stdio"  # "stdio" or "http"
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class KBConfig:
    """Main Foundry KB configuration"""
    search: SearchConfig = field(default_factory=SearchConfig)
    checkpoint: CheckpointConfig = field(default_factory=CheckpointConfig)
    retriever: RetrieverConfig = field(default_factory=RetrieverConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    _env_sourced_keys: set = field(default_factory=set, repr=False)


def _parse_search_config(data: dict) -> SearchConfig:
    """Parse search section from config dict"""
    search_data = data.get("search", {})
    return SearchConfig(
        endpoint=search_data.get("endpoint", ""),
        api_key=search_data.get("api_key", ""),
        kb_name=search_data.get("kb_name", ""),
        api_version=search_data.get("api_version", DEFAULT_API_VERSION),
        timeout_seconds=float(search_data.get("timeout_seconds", 30.0)),
    )


def _parse_checkpoint_config(data: dict) -> CheckpointConfig:
    """Parse checkpoint section from config dict"""
    checkpoint_data = data.get("checkpoint", {})
    return CheckpointConfig(
        backend=checkpoint_data.get("backend", "memory"),
        directory=checkpoint_data.get("directory", str(CHECKPOINTS_DIR)),
        ttl_seconds=float(checkpoint_data.get("ttl_seconds", 3600.0)),
        max_entries=int(checkpoint_data.get("max_entries", 1000)),
        max_payload_bytes=int(checkpoint_data.get("max_payload_bytes", MAX_CHECKPOINT_BYTES)),
    )


def _parse_retriever_config(data: dict) -> RetrieverConfig:
    """Parse retriever section from config dict"""
    retriever_data = data.get("retriever", {})
    return RetrieverConfig(
        topk=int(retriever_data.get("topk", 10)),
    )


def _parse_server_config(data: dict) -> ServerConfig:
    """Parse server section from config dict"""
    server_data = data.get("server", {})
    return ServerConfig(
        name=server_data.get("name", "foundry_kb_mcp_server"),
        transport=server_data.get("transport", "stdio"),
        host=server_data.get("host", "127.0.0.1"),
        port=int(server_data.get("port", 8000)),
    )


def _env_number(name: str, cast):
    """Read a numeric env var, ignoring (with a warning) values that do not parse"""
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not a valid {cast.__name__}")
        return None


def load_config() -> KBConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (~/.foundry-kb/config.json)
    3. Default values
    """
    config = KBConfig()

    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            config.search = _parse_search_config(data)
            config.checkpoint = _parse_checkpoint_config(data)
            config.retriever = _parse_retriever_config(data)
            config.server = _parse_server_config(data)
        except (json.JSONDecodeError, IOError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load config file {CONFIG_PATH}: {e}")
            config = KBConfig()

    # Search env overrides (track env-sourced secrets so save_config skips them)
    _env_search_map = {
        "AZURE_SEARCH_ENDPOINT": "endpoint",
        "AZURE_SEARCH_API_KEY": "api_key",
        "AZURE_SEARCH_KB_NAME": "kb_name",
        "AZURE_SEARCH_API_VERSION": "api_version",
    }
    for env_var, attr in _env_search_map.items():
        val = os.getenv(env_var)
        if val:
            setattr(config.search, attr, val)
            config._env_sourced_keys.add(attr)

    timeout = _env_number("KB_SEARCH_TIMEOUT", float)
    if timeout is not None:
        config.search.timeout_seconds = timeout

    if os.getenv("KB_CHECKPOINT_BACKEND"):
        config.checkpoint.backend = os.getenv("KB_CHECKPOINT_BACKEND").lower()
    if os.getenv("KB_CHECKPOINT_DIR"):
        config.checkpoint.directory = os.getenv("KB_CHECKPOINT_DIR")
    ttl = _env_number("KB_CHECKPOINT_TTL", float)
    if ttl is not None:
        config.checkpoint.ttl_seconds = ttl
    max_entries = _env_number("KB_CHECKPOINT_MAX_ENTRIES", int)
    if max_entries is not None:
        config.checkpoint.max_entries = max_entries

    topk = _env_number("KB_TOPK", int)
    if topk is not None:
        config.retriever.topk = topk

    if os.getenv("MCP_SERVER_NAME"):
        config.server.name = os.getenv("MCP_SERVER_NAME")
    if os.getenv("MCP_TRANSPORT"):
        config.server.transport = os.getenv("MCP_TRANSPORT").lower()
    if os.getenv("MCP_HOST"):
        config.server.host = os.getenv("MCP_HOST")
    port = _env_number("MCP_PORT", int)
    if port is not None:
        config.server.port = port

    return config


def save_config(config: KBConfig) -> None:
    """Save configuration to file.

    An API key sourced from the environment is written as an empty string so
    that secrets are not persisted to disk.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    env_sourced = getattr(config, "_env_sourced_keys", set())

    data = {
        "search": {
            "endpoint": config.search.endpoint,
            "api_key": "" if "api_key" in env_sourced else config.search.api_key,
            "kb_name": config.search.kb_name,
            "api_version": config.search.api_version,
            "timeout_seconds": config.search.timeout_seconds,
        },
        "checkpoint": {
            "backend": config.checkpoint.backend,
            "directory": config.checkpoint.directory,
            "ttl_seconds": config.checkpoint.ttl_seconds,
            "max_entries": config.checkpoint.max_entries,
            "max_payload_bytes": config.checkpoint.max_payload_bytes,
        },
        "retriever": {
            "topk": config.retriever.topk,
        },
        "server": {
            "name": config.server.name,
            "transport": config.server.transport,
            "host": config.server.host,
            "port": config.server.port,
        },
    }

    with open(CONFIG_PATH, "w") as f:
        json.dump(data, f, indent=2)

    # Set secure permissions
    CONFIG_PATH.chmod(0o600)


def ensure_directories(config: Optional[KBConfig] = None) -> None:
    """Ensure the config directory and, for the file backend, the checkpoint directory exist"""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    checkpoint = config.checkpoint if config is not None else CheckpointConfig()
    if checkpoint.backend == "file":
        Path(checkpoint.directory).expanduser().mkdir(parents=True, exist_ok=True)
