"""Data models for the Unicorn systemd service."""

from .service import ElevationContext, InstallMode, ServiceConfig
from .command import (
    AlternativeCommand,
    Command,
    Comment,
    FailureKind,
    FallbackCommand,
    GuardedCommand,
    HeredocCommand,
    RawCommand,
    ShellCommand,
    Substitution,
)

__all__ = [
    "AlternativeCommand",
    "ElevationContext",
    "InstallMode",
    "ServiceConfig",
    "Command",
    "Comment",
    "FailureKind",
    "FallbackCommand",
    "GuardedCommand",
    "HeredocCommand",
    "RawCommand",
    "ShellCommand",
    "Substitution",
]
