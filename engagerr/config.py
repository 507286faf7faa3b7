"""
Configuration for Engagerr.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

from engagerr.utils.exceptions import ConfigurationError


class SuggestionConfig(BaseModel):
    """AI suggestion surfacing configuration."""

    default_confidence_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    max_suggestions: int = Field(default=10, ge=1)
    # Heuristic classifier: max days between publishes to count as related
    time_window_days: float = Field(default=7.0, gt=0)


class LayoutConfig(BaseModel):
    """Graph layout configuration."""

    link_distance: float = 100.0
    charge_strength: float = -50.0
    velocity_decay: float = Field(default=0.4, ge=0.0, le=1.0)
    alpha_min: float = 0.001
    alpha_decay: float = 1 - 0.001 ** (1 / 300)
    drag_alpha_target: float = 0.3
    node_spacing: float = 100.0
    rank_spacing: float = 150.0


class RendererConfig(BaseModel):
    """Interactive renderer configuration."""

    min_zoom: float = Field(default=0.2, gt=0)
    max_zoom: float = Field(default=3.0, gt=0)
    zoom_step: float = Field(default=1.2, gt=1.0)
    transition_frames: int = Field(default=18, ge=1)
    frame_interval: float = Field(default=1 / 60, gt=0)

    @model_validator(mode="after")
    def _check_zoom_bounds(self) -> "RendererConfig":
        if self.min_zoom > self.max_zoom:
            raise ValueError("min_zoom must not exceed max_zoom")
        return self


class StoreConfig(BaseModel):
    """Relationship store configuration."""

    backend: str = "sqlite"
    db_path: str = "data/engagerr.db"


class ApiConfig(BaseModel):
    """Backend API client configuration."""

    base_url: str = "http://localhost:8000"
    timeout: float = 30.0


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = True
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


class Config(BaseModel):
    """Main configuration."""

    suggestions: SuggestionConfig = Field(default_factory=SuggestionConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    renderer: RendererConfig = Field(default_factory=RendererConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file (default: .env in project root)

        Returns:
            Config instance

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed

        Environment variables:
            ENGAGERR_SUGGESTION_THRESHOLD: Default confidence threshold
            ENGAGERR_SUGGESTION_LIMIT: Max suggestions returned
            ENGAGERR_LAYOUT_LINK_DISTANCE: Force layout link distance
            ENGAGERR_LAYOUT_CHARGE_STRENGTH: Force layout charge strength
            ENGAGERR_RENDERER_MIN_ZOOM / ENGAGERR_RENDERER_MAX_ZOOM: Zoom bounds
            ENGAGERR_STORE_BACKEND: Relationship store backend (sqlite)
            ENGAGERR_STORE_DB_PATH: SQLite database path
            ENGAGERR_API_BASE_URL: Backend base URL for the client
            ENGAGERR_API_TIMEOUT: Client request timeout in seconds
            ENGAGERR_LOG_LEVEL: Log level
        """
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        def get_env(key: str, default: Any = None) -> Any:
            """Get environment variable with type conversion."""
            value = os.getenv(key)
            if value is None or value == "":
                return default
            if isinstance(default, bool):
                return str(value).lower() in ("true", "1", "yes")
            try:
                if isinstance(default, int):
                    return int(value)
                if isinstance(default, float):
                    return float(value)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {key}: {value!r}", context={"key": key, "value": value}
                ) from e
            return value

        suggestions = SuggestionConfig()
        layout = LayoutConfig()
        renderer = RendererConfig()

        return cls(
            suggestions=SuggestionConfig(
                default_confidence_threshold=get_env(
                    "ENGAGERR_SUGGESTION_THRESHOLD", suggestions.default_confidence_threshold
                ),
                max_suggestions=get_env("ENGAGERR_SUGGESTION_LIMIT", suggestions.max_suggestions),
                time_window_days=get_env(
                    "ENGAGERR_SUGGESTION_TIME_WINDOW_DAYS", suggestions.time_window_days
                ),
            ),
            layout=LayoutConfig(
                link_distance=get_env("ENGAGERR_LAYOUT_LINK_DISTANCE", layout.link_distance),
                charge_strength=get_env("ENGAGERR_LAYOUT_CHARGE_STRENGTH", layout.charge_strength),
                velocity_decay=get_env("ENGAGERR_LAYOUT_VELOCITY_DECAY", layout.velocity_decay),
                node_spacing=get_env("ENGAGERR_LAYOUT_NODE_SPACING", layout.node_spacing),
                rank_spacing=get_env("ENGAGERR_LAYOUT_RANK_SPACING", layout.rank_spacing),
            ),
            renderer=RendererConfig(
                min_zoom=get_env("ENGAGERR_RENDERER_MIN_ZOOM", renderer.min_zoom),
                max_zoom=get_env("ENGAGERR_RENDERER_MAX_ZOOM", renderer.max_zoom),
                zoom_step=get_env("ENGAGERR_RENDERER_ZOOM_STEP", renderer.zoom_step),
                transition_frames=get_env(
                    "ENGAGERR_RENDERER_TRANSITION_FRAMES", renderer.transition_frames
                ),
            ),
            store=StoreConfig(
                backend=get_env("ENGAGERR_STORE_BACKEND", "sqlite"),
                db_path=get_env("ENGAGERR_STORE_DB_PATH", "data/engagerr.db"),
            ),
            api=ApiConfig(
                base_url=get_env("ENGAGERR_API_BASE_URL", "http://localhost:8000"),
                timeout=get_env("ENGAGERR_API_TIMEOUT", 30.0),
            ),
            logging=LoggingConfig(
                level=get_env("ENGAGERR_LOG_LEVEL", "INFO"),
                log_to_file=get_env("ENGAGERR_LOG_TO_FILE", True),
                log_dir=get_env("ENGAGERR_LOG_DIR", "logs"),
                file_rotation=get_env("ENGAGERR_LOG_FILE_ROTATION", "10 MB"),
                file_retention=get_env("ENGAGERR_LOG_FILE_RETENTION", "7 days"),
                compression=get_env("ENGAGERR_LOG_COMPRESSION", "zip"),
                serialize=get_env("ENGAGERR_LOG_SERIALIZE", True),
            ),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            config_dict = {}

        env_config = cls.from_env(env_file)

        # Env sections that differ from defaults override YAML
        final_dict = {**config_dict}
        default = cls()
        for section in ("suggestions", "layout", "renderer", "store", "api", "logging"):
            env_section = getattr(env_config, section)
            if env_section != getattr(default, section):
                final_dict[section] = env_section.model_dump()

        return cls(**final_dict) if final_dict else env_config


# Default config instance
default_config = Config()
