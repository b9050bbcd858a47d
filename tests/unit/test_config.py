"""
Tests for configuration management.
"""

import pytest
import yaml
from pydantic import ValidationError as PydanticValidationError

import msformula
from msformula.config.settings import (
    MsFormulaConfig,
    TermOrder,
    get_default_config,
    reset_default_config,
)
from msformula.core.exceptions import ConfigurationError


class TestMsFormulaConfig:
    """Test configuration defaults and overrides."""

    def test_defaults(self):
        config = MsFormulaConfig()
        assert config.compiler.censor_label == "(censored)"
        assert config.compiler.baseline_label == "(Baseline)"
        assert config.compiler.state_column == "state"
        assert config.compiler.term_order == TermOrder.DEGREE.value
        assert config.logging.level == "WARNING"
        assert not config.logging.file_logging

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MSFORMULA_CENSOR_LABEL", "cens")
        monkeypatch.setenv("MSFORMULA_TERM_ORDER", "appearance")
        monkeypatch.setenv("MSFORMULA_LOG_LEVEL", "debug")
        monkeypatch.setenv("MSFORMULA_LOG_FILE", str(tmp_path / "msformula.log"))
        config = MsFormulaConfig()
        assert config.compiler.censor_label == "cens"
        assert config.compiler.term_order == "appearance"
        assert config.logging.level == "DEBUG"
        assert config.logging.file_logging
        assert config.logging.log_file == tmp_path / "msformula.log"

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            "compiler": {"baseline_label": "base", "state_column": "name"},
            "logging": {"level": "INFO"},
        }))
        config = MsFormulaConfig(config_file=path)
        assert config.compiler.baseline_label == "base"
        assert config.compiler.state_column == "name"
        assert config.logging.level == "INFO"

    def test_environment_beats_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"compiler": {"censor_label": "from-file"}}))
        monkeypatch.setenv("MSFORMULA_CENSOR_LABEL", "from-env")
        assert MsFormulaConfig(config_file=path).compiler.censor_label == "from-env"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            MsFormulaConfig(config_file=tmp_path / "absent.yaml")

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            MsFormulaConfig(config_file=path)

    def test_save_and_reload(self, tmp_path):
        config = MsFormulaConfig()
        config.update(**{"compiler.censor_label": "cens"})
        path = tmp_path / "nested" / "saved.yaml"
        config.save_config(path)
        assert MsFormulaConfig(config_file=path).compiler.censor_label == "cens"

    def test_update_dotted_keys(self):
        config = MsFormulaConfig()
        config.update(**{"compiler.term_order": "appearance", "logging.level": "ERROR"})
        assert config.compiler.term_order == "appearance"
        assert config.logging.level == "ERROR"

    @pytest.mark.parametrize("key", ["compiler.colour", "nosection.level", "verbose"])
    def test_update_unknown_key(self, key):
        with pytest.raises(ConfigurationError) as exc_info:
            MsFormulaConfig().update(**{key: 1})
        assert exc_info.value.context["config_key"] == key

    def test_invalid_values(self):
        config = MsFormulaConfig()
        with pytest.raises(PydanticValidationError):
            config.update(**{"compiler.term_order": "alphabetical"})
        with pytest.raises(PydanticValidationError):
            config.update(**{"compiler.censor_label": "  "})


class TestGlobalConfig:
    """Test the shared configuration instance."""

    def test_singleton(self):
        assert get_default_config() is get_default_config()
        assert msformula.get_config() is get_default_config()

    def test_reset(self):
        first = get_default_config()
        reset_default_config()
        assert get_default_config() is not first

    def test_configure(self):
        msformula.configure(**{"compiler.baseline_label": "base"})
        assert get_default_config().compiler.baseline_label == "base"
