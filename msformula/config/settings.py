"""
Configuration management system for msformula.

Provides a hierarchical configuration system with support for YAML
configuration files, environment variables, and runtime updates.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum

from ..core.exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class TermOrder(str, Enum):
    """How pooled terms are ordered in the term catalog."""
    DEGREE = "degree"          # main effects first, then 2-way, 3-way ...
    APPEARANCE = "appearance"  # order of first appearance


class LoggingConfig(BaseModel):
    """Logging configuration."""
    model_config = ConfigDict(validate_assignment=True, validate_default=True, use_enum_values=True)

    level: LogLevel = LogLevel.WARNING
    file_logging: bool = False
    log_file: Optional[Path] = None
    console_logging: bool = True
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator('log_file', mode='before')
    @classmethod
    def validate_log_file(cls, v):
        return Path(v) if v else None


class CompilerConfig(BaseModel):
    """Covariate compiler configuration."""
    model_config = ConfigDict(validate_assignment=True, validate_default=True, use_enum_values=True)

    censor_label: str = "(censored)"
    baseline_label: str = "(Baseline)"
    state_column: str = "state"
    term_order: TermOrder = TermOrder.DEGREE

    @field_validator('censor_label', 'baseline_label', 'state_column')
    @classmethod
    def validate_label(cls, v):
        if not v or not v.strip():
            raise ValueError("labels must be non-empty")
        return v


class MsFormulaConfig(BaseModel):
    """Main configuration class for msformula."""
    model_config = ConfigDict(validate_assignment=True, validate_default=True, use_enum_values=True)

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    compiler: CompilerConfig = Field(default_factory=CompilerConfig)

    def __init__(self, config_file: Optional[Union[str, Path]] = None, **kwargs):
        """
        Initialize configuration.

        Args:
            config_file: Path to YAML configuration file
            **kwargs: Override specific configuration values
        """
        config_data: Dict[str, Any] = {}
        if config_file:
            config_data = self._load_config_file(config_file)

        for section, values in self._load_environment_variables().items():
            config_data.setdefault(section, {}).update(values)

        config_data.update(kwargs)

        super().__init__(**config_data)

    @staticmethod
    def _load_config_file(config_file: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        config_path = Path(config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(config_key=str(config_path))
        return data

    @staticmethod
    def _load_environment_variables() -> Dict[str, Dict[str, Any]]:
        """Load configuration from environment variables."""
        config: Dict[str, Dict[str, Any]] = {}

        env_mappings = {
            'MSFORMULA_LOG_LEVEL': ('logging', 'level'),
            'MSFORMULA_LOG_FILE': ('logging', 'log_file'),
            'MSFORMULA_CENSOR_LABEL': ('compiler', 'censor_label'),
            'MSFORMULA_STATE_COLUMN': ('compiler', 'state_column'),
            'MSFORMULA_TERM_ORDER': ('compiler', 'term_order'),
        }

        for env_var, (section, key) in env_mappings.items():
            value = os.getenv(env_var)
            if value is not None:
                if key == 'level':
                    value = value.upper()
                elif key == 'log_file':
                    config.setdefault(section, {})['file_logging'] = True
                config.setdefault(section, {})[key] = value

        return config

    def save_config(self, config_file: Union[str, Path]) -> None:
        """Save current configuration to YAML file."""
        config_path = Path(config_file)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w') as f:
            yaml.safe_dump(self.model_dump(mode='json'), f, default_flow_style=False, indent=2)

    def update(self, **kwargs) -> None:
        """
        Update configuration values.

        Nested keys use dotted names: ``update(**{"compiler.censor_label": "cens"})``.
        """
        for key, value in kwargs.items():
            if '.' in key:
                section, subkey = key.split('.', 1)
                section_obj = getattr(self, section, None)
                if section_obj is None or subkey not in type(section_obj).model_fields:
                    raise ConfigurationError(config_key=key)
                setattr(section_obj, subkey, value)
            elif key in type(self).model_fields:
                setattr(self, key, value)
            else:
                raise ConfigurationError(config_key=key)


# Default configuration instance
_default_config: Optional[MsFormulaConfig] = None


def get_default_config() -> MsFormulaConfig:
    """Get the default configuration instance."""
    global _default_config
    if _default_config is None:
        _default_config = MsFormulaConfig()
    return _default_config


def reset_default_config() -> None:
    """Drop the cached default configuration so the next access rebuilds it."""
    global _default_config
    _default_config = None
