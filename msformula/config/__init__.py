"""Configuration management for msformula."""

from .settings import (
    MsFormulaConfig,
    LoggingConfig,
    CompilerConfig,
    LogLevel,
    TermOrder,
    get_default_config,
    reset_default_config,
)

__all__ = [
    "MsFormulaConfig",
    "LoggingConfig",
    "CompilerConfig",
    "LogLevel",
    "TermOrder",
    "get_default_config",
    "reset_default_config",
]
