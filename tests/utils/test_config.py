"""Tests for the configuration system.

Tests ConfigBuilder loading, environment variable resolution, dot-path access
and the module-level helpers used by the pipeline.
"""

import pytest
import yaml

from persistwire.utils.config import (
    ConfigBuilder,
    get_config_builder,
    get_config_value,
    reset_config,
)


class TestConfigBuilder:
    """Test ConfigBuilder class."""

    def test_loads_yaml(self, tmp_path):
        """Test that ConfigBuilder loads a valid YAML configuration."""
        config_file = tmp_path / "config.yml"
        config_file.write_text(
            """
persistence:
  schema_version: "3.0"
  descriptor_resources:
    - META-INF/persistence.xml
"""
        )

        builder = ConfigBuilder(config_file)

        assert builder.get("persistence.schema_version") == "3.0"
        assert builder.get("persistence.descriptor_resources") == ["META-INF/persistence.xml"]

    def test_environment_variable_resolution(self, tmp_path, monkeypatch):
        """Test ${VAR}, ${VAR:-default} and $VAR references."""
        monkeypatch.setenv("PW_SCAN", "shop.model")
        monkeypatch.delenv("PW_MISSING", raising=False)
        config_file = tmp_path / "config.yml"
        config_file.write_text(
            """
persistence:
  scan_packages: ["${PW_SCAN}"]
  schema_version: "${PW_MISSING:-2.1}"
logging:
  level: $PW_SCAN
"""
        )

        builder = ConfigBuilder(config_file)

        assert builder.get("persistence.scan_packages") == ["shop.model"]
        assert builder.get("persistence.schema_version") == "2.1"
        assert builder.get("logging.level") == "shop.model"

    def test_unresolved_variable_kept(self, tmp_path, monkeypatch):
        """Test that unknown variables without a default stay as written."""
        monkeypatch.delenv("PW_NOT_SET", raising=False)
        config_file = tmp_path / "config.yml"
        config_file.write_text("value: ${PW_NOT_SET}\n")

        builder = ConfigBuilder(config_file)

        assert builder.get("value") == "${PW_NOT_SET}"
        assert builder.get_unexpanded_config() == {"value": "${PW_NOT_SET}"}

    def test_dotenv_loaded_from_working_directory(self, isolated_environment, monkeypatch, tmp_path):
        """Test that .env in the working directory feeds variable resolution."""
        monkeypatch.delenv("PW_FROM_DOTENV", raising=False)
        (isolated_environment / ".env").write_text("PW_FROM_DOTENV=from-dotenv\n")
        config_file = tmp_path / "config.yml"
        config_file.write_text("value: ${PW_FROM_DOTENV}\n")

        builder = ConfigBuilder(config_file)

        assert builder.get("value") == "from-dotenv"

    def test_missing_default_file(self):
        """Test that no config.yml in the working directory raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            ConfigBuilder()

    def test_non_mapping_rejected(self, tmp_path):
        """Test that a top-level list is rejected."""
        config_file = tmp_path / "config.yml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="dictionary"):
            ConfigBuilder(config_file)

    def test_malformed_yaml(self, tmp_path):
        """Test that YAML syntax errors surface as yaml.YAMLError."""
        config_file = tmp_path / "config.yml"
        config_file.write_text("persistence: [unclosed\n")

        with pytest.raises(yaml.YAMLError):
            ConfigBuilder(config_file)

    def test_require(self, tmp_path):
        """Test require() with and without a default."""
        config_file = tmp_path / "config.yml"
        config_file.write_text("persistence: {}\n")
        builder = ConfigBuilder(config_file)

        assert builder.require("persistence.schema_version", "2.2") == "2.2"
        with pytest.raises(ValueError, match="persistence.schema_version"):
            builder.require("persistence.schema_version")


class TestConfigHelpers:
    """Test module-level configuration helpers."""

    def test_defaults_without_config_file(self):
        """Test that the pipeline can read defaults when no config exists."""
        assert get_config_value("persistence.schema_version", "2.2") == "2.2"
        assert get_config_value("persistence.scan_packages") is None

    def test_config_file_env_var(self, tmp_path, monkeypatch):
        """Test that CONFIG_FILE selects the default configuration."""
        config_file = tmp_path / "custom.yml"
        config_file.write_text("persistence:\n  schema_version: '3.1'\n")
        monkeypatch.setenv("CONFIG_FILE", str(config_file))
        reset_config()

        assert get_config_value("persistence.schema_version") == "3.1"

    def test_cwd_config_file(self, isolated_environment):
        """Test that config.yml in the working directory is picked up."""
        (isolated_environment / "config.yml").write_text("logging:\n  level: DEBUG\n")

        assert get_config_value("logging.level") == "DEBUG"

    def test_explicit_path_set_as_default(self, tmp_path):
        """Test that set_as_default makes an explicit config the default."""
        config_file = tmp_path / "explicit.yml"
        config_file.write_text("persistence:\n  schema_version: '1.0'\n")

        builder = get_config_builder(config_file, set_as_default=True)

        assert builder is get_config_builder(config_file)
        assert get_config_value("persistence.schema_version") == "1.0"

    def test_reset_config(self, isolated_environment):
        """Test that reset_config forgets the cached default."""
        config_file = isolated_environment / "config.yml"
        config_file.write_text("value: first\n")
        assert get_config_value("value") == "first"

        config_file.write_text("value: second\n")
        assert get_config_value("value") == "first"

        reset_config()
        assert get_config_value("value") == "second"

    def test_empty_path_rejected(self):
        with pytest.raises(ValueError):
            get_config_value("")
