"""
Foundry KB Common Module

Shared configuration and schemas for the checkpoint service and retrievers.
"""

from .config import KBConfig, load_config

__all__ = [
    "KBConfig",
    "load_config",
]
