"""Configuration management for dirstash."""

from pathlib import Path
from typing import Any, Literal

import toml
from pydantic import BaseModel, Field, ValidationError

from dirstash.core.exceptions import ConfigError


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_dir = Path.home() / ".config" / "dirstash"
    return config_dir


def get_config_path() -> Path:
    """Get the configuration file path."""
    return get_config_dir() / "config.toml"


def get_content_path() -> Path:
    """Get the default content root."""
    return get_config_dir() / "content"


def get_log_path() -> Path:
    """Get the default log file path."""
    return get_config_dir() / "logs" / "dirstash.log"


class GeneralConfig(BaseModel):
    """General configuration."""

    content_path: str = ""
    default_locale: str = "en"
    # Thread pool size for per-item reads
    max_workers: int = 8

    def model_post_init(self, __context: Any) -> None:
        if not self.content_path:
            self.content_path = str(get_content_path())


class SimilarityConfig(BaseModel):
    """Related-items engine configuration."""

    cache_ttl: float = 300.0
    max_results: int = 6
    sweep_probability: float = 0.1


class LoggingConfig(BaseModel):
    """Logging configuration."""

    # Global log level
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Console settings (diagnostic output to stderr)
    console_enabled: bool = True
    console_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    console_timestamps: bool = False

    # File settings (persistent debug trail)
    file_enabled: bool = True
    file_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"
    file_path: str = ""
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    file_format: Literal["simple", "detailed", "json"] = "detailed"

    # Filter noisy third-party loggers
    filters: dict[str, str] = {
        "asyncio": "WARNING",
    }

    def model_post_init(self, __context: Any) -> None:
        if not self.file_path:
            self.file_path = str(get_log_path())


class Config(BaseModel):
    """Application configuration."""

    general: GeneralConfig = Field(default_factory=GeneralConfig)
    similarity: SimilarityConfig = Field(default_factory=SimilarityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def content_root(self) -> Path:
        return Path(self.general.content_path).expanduser()

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file."""
        config_path = config_path or get_config_path()
        if not config_path.exists():
            return cls()
        try:
            data = toml.load(config_path)
            return cls(**data)
        except (toml.TomlDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e

    def save(self, config_path: Path | None = None) -> None:
        """Save configuration to file."""
        config_path = config_path or get_config_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            toml.dump(self.model_dump(), f)


def init_config() -> Config:
    """Initialize configuration with defaults."""
    config = Config()
    config.save()
    return config
