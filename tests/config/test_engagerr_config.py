"""
Tests for configuration management.

Tests config loading from:
1. Defaults
2. Environment variables
3. YAML files
4. Combined (env overrides YAML)
"""

import os

import pytest
import yaml
from pydantic import ValidationError as PydanticValidationError

from engagerr.config import Config, RendererConfig, SuggestionConfig
from engagerr.utils.exceptions import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    """Remove any ENGAGERR_ variables from the test environment."""
    for key in list(os.environ.keys()):
        if key.startswith("ENGAGERR_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestConfigDefaults:
    """Test default configuration values."""

    def test_default_config_creation(self):
        config = Config()

        # Suggestions
        assert config.suggestions.default_confidence_threshold == 0.5
        assert config.suggestions.max_suggestions == 10

        # Layout
        assert config.layout.link_distance == 100.0
        assert config.layout.charge_strength == -50.0
        assert config.layout.velocity_decay == 0.4

        # Renderer
        assert config.renderer.min_zoom == 0.2
        assert config.renderer.max_zoom == 3.0
        assert config.renderer.zoom_step == 1.2

        # Store and API
        assert config.store.backend == "sqlite"
        assert config.api.base_url == "http://localhost:8000"
        assert config.logging.level == "INFO"

    def test_threshold_bounds(self):
        with pytest.raises(PydanticValidationError):
            SuggestionConfig(default_confidence_threshold=1.5)

    def test_zoom_bounds_must_be_ordered(self):
        with pytest.raises(PydanticValidationError):
            RendererConfig(min_zoom=4.0, max_zoom=2.0)


class TestConfigFromEnv:
    """Test loading configuration from environment variables."""

    def test_from_env_basic(self, clean_env):
        clean_env.setenv("ENGAGERR_STORE_DB_PATH", "/tmp/graph.db")
        clean_env.setenv("ENGAGERR_API_BASE_URL", "http://graph:9000")
        clean_env.setenv("ENGAGERR_LOG_LEVEL", "DEBUG")

        config = Config.from_env()

        assert config.store.db_path == "/tmp/graph.db"
        assert config.api.base_url == "http://graph:9000"
        assert config.logging.level == "DEBUG"

    def test_from_env_with_numbers(self, clean_env):
        clean_env.setenv("ENGAGERR_SUGGESTION_THRESHOLD", "0.75")
        clean_env.setenv("ENGAGERR_SUGGESTION_LIMIT", "25")
        clean_env.setenv("ENGAGERR_RENDERER_MAX_ZOOM", "5")

        config = Config.from_env()

        assert config.suggestions.default_confidence_threshold == 0.75
        assert config.suggestions.max_suggestions == 25
        assert config.renderer.max_zoom == 5.0

    def test_from_env_with_booleans(self, clean_env):
        clean_env.setenv("ENGAGERR_LOG_TO_FILE", "false")
        clean_env.setenv("ENGAGERR_LOG_SERIALIZE", "0")

        config = Config.from_env()

        assert config.logging.log_to_file is False
        assert config.logging.serialize is False

    def test_invalid_number_raises(self, clean_env):
        clean_env.setenv("ENGAGERR_SUGGESTION_LIMIT", "many")

        with pytest.raises(ConfigurationError) as exc_info:
            Config.from_env()

        assert exc_info.value.context["key"] == "ENGAGERR_SUGGESTION_LIMIT"

    def test_from_env_with_dotenv_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env.test"
        env_file.write_text(
            """
ENGAGERR_STORE_DB_PATH=/data/from-file.db
ENGAGERR_SUGGESTION_THRESHOLD=0.6
"""
        )

        config = Config.from_env(env_file=str(env_file))

        assert config.store.db_path == "/data/from-file.db"
        assert config.suggestions.default_confidence_threshold == 0.6

        # load_dotenv writes into os.environ
        os.environ.pop("ENGAGERR_STORE_DB_PATH", None)
        os.environ.pop("ENGAGERR_SUGGESTION_THRESHOLD", None)


class TestConfigFromYAML:
    """Test loading configuration from YAML files."""

    def test_from_yaml_partial_config(self, tmp_path):
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text(
            yaml.dump(
                {
                    "suggestions": {"default_confidence_threshold": 0.8},
                    "layout": {"link_distance": 140.0},
                }
            )
        )

        config = Config.from_yaml(str(yaml_file))

        assert config.suggestions.default_confidence_threshold == 0.8
        assert config.suggestions.max_suggestions == 10  # default
        assert config.layout.link_distance == 140.0
        assert config.store.backend == "sqlite"  # default

    def test_from_yaml_file_not_found(self):
        with pytest.raises(FileNotFoundError):
            Config.from_yaml("/nonexistent/config.yaml")

    def test_from_yaml_invalid_yaml(self, tmp_path):
        yaml_file = tmp_path / "bad.yaml"
        yaml_file.write_text("invalid: yaml: content: [")

        with pytest.raises(yaml.YAMLError):
            Config.from_yaml(str(yaml_file))


class TestConfigFromEnvOrYAML:
    """Test combined loading (env overrides YAML)."""

    def test_env_overrides_yaml(self, clean_env, tmp_path):
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text(
            yaml.dump(
                {
                    "store": {"db_path": "/yaml/graph.db"},
                    "logging": {"level": "WARNING"},
                }
            )
        )
        clean_env.setenv("ENGAGERR_LOG_LEVEL", "DEBUG")

        config = Config.from_env_or_yaml(yaml_path=str(yaml_file))

        assert config.logging.level == "DEBUG"
        assert config.store.db_path == "/yaml/graph.db"

    def test_yaml_only_when_no_env(self, clean_env, tmp_path):
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text(yaml.dump({"renderer": {"min_zoom": 0.5}}))

        config = Config.from_env_or_yaml(yaml_path=str(yaml_file))

        assert config.renderer.min_zoom == 0.5
        assert config.renderer.max_zoom == 3.0

    def test_env_only_when_no_yaml(self, clean_env):
        clean_env.setenv("ENGAGERR_SUGGESTION_LIMIT", "3")

        config = Config.from_env_or_yaml(yaml_path="/nonexistent/config.yaml")

        assert config.suggestions.max_suggestions == 3
