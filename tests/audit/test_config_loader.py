"""Tests for YAML audit configuration loading."""

import pytest

from uxaudit.audit.application.config_loader import load_audit_config
from uxaudit.shared.domain.exceptions import ConfigurationError


class TestLoadAuditConfig:
    """Test load_audit_config."""

    def test_camel_and_snake_case_keys(self, tmp_path):
        path = tmp_path / "uxaudit.yaml"
        path.write_text("output: report.json\nvalidation: false\ntier: pro\ncontext: Internal build tool\n")

        config = load_audit_config(path)

        assert config.output == "report.json"
        assert config.validation is False
        assert config.tier == "pro"
        assert config.context == "Internal build tool"
        assert config.verbose is False

    def test_overrides_win_and_none_is_ignored(self, tmp_path):
        path = tmp_path / "uxaudit.yaml"
        path.write_text("output: report.json\ntier: pro\n")

        config = load_audit_config(path, output="cli.json", tier=None, verbose=True)

        assert config.output == "cli.json"
        assert config.tier == "pro"
        assert config.verbose is True

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "uxaudit.yaml"
        path.write_text("")

        config = load_audit_config(path)

        assert config.validation is True
        assert config.output == "uxaudit-report.json"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Config file not found"):
            load_audit_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "uxaudit.yaml"
        path.write_text("output: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_audit_config(path)

    def test_root_must_be_mapping(self, tmp_path):
        path = tmp_path / "uxaudit.yaml"
        path.write_text("- output\n- tier\n")

        with pytest.raises(ConfigurationError, match="must be a mapping"):
            load_audit_config(path)

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "uxaudit.yaml"
        path.write_text("parallel: true\n")

        with pytest.raises(ConfigurationError, match="Unknown config key: parallel"):
            load_audit_config(path)

    def test_wrong_type(self, tmp_path):
        path = tmp_path / "uxaudit.yaml"
        path.write_text("validation: sometimes\n")

        with pytest.raises(ConfigurationError, match="Invalid value for validation") as exc_info:
            load_audit_config(path)

        assert exc_info.value.context["key"] == "validation"
