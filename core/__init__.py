"""Core pieces — identity resolution, logging, and command backend contracts.

This package is framework-agnostic. It must NEVER import from ``bot/`` or ``sdk/``.
"""

from core.backend import CommandExecutor, FollowRegistry, HttpCommandBackend
from core.identity import get_identity
from core.logger import AlertorLogger

__all__ = [
    "get_identity",
    "AlertorLogger",
    "CommandExecutor",
    "FollowRegistry",
    "HttpCommandBackend",
]
