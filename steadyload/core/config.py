"""Configuration models and validation using Pydantic."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from steadyload.core.exceptions import ConfigurationError


DEFAULT_CONFIG_PATH = "configs/config.yaml"


class ViewportConfig(BaseModel):
    """Viewport used where the browser cannot be started maximized."""
    width: int = Field(default=1920, ge=100, le=7680)
    height: int = Field(default=1080, ge=100, le=4320)


class SessionConfig(BaseModel):
    """Browser session timing and launch settings."""
    headless: bool = Field(default=False)
    startup_wait_seconds: float = Field(default=3.0, ge=0.0, le=120.0)
    maximize_wait_seconds: float = Field(default=1.0, ge=0.0, le=60.0)
    new_tab_settle_seconds: float = Field(default=2.0, ge=0.0, le=60.0)
    scroll_pause_seconds: float = Field(default=1.0, ge=0.0, le=60.0)
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)


class BrowsersConfig(BaseModel):
    """Executable locations for browsers Playwright does not ship."""
    opera_executable: Optional[str] = Field(default=None, description="Path to opera(.exe)")
    operabeta_executable: Optional[str] = Field(default=None, description="Path to the Opera beta binary")


class MetricsConfig(BaseModel):
    """Metrics configuration."""
    enabled: bool = Field(default=False)
    prometheus_port: int = Field(default=9119, ge=1024, le=65535)


class LoggingConfig(BaseModel):
    """structlog output settings."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    json_output: bool = Field(default=False, alias="json")

    model_config = {"populate_by_name": True}


class SteadyloadConfig(BaseModel):
    """Main configuration model for Steadyload."""
    session: SessionConfig = Field(default_factory=SessionConfig)
    browsers: BrowsersConfig = Field(default_factory=BrowsersConfig)
    credentials_file: str = Field(default="config.json")
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, config_path: Path) -> SteadyloadConfig:
        """Load configuration from YAML file.

        A missing or empty file yields the defaults. Anything that fails to
        parse or validate raises ConfigurationError; a measurement run never
        continues on a half-read config.
        """
        import yaml

        if not config_path.exists():
            return cls()

        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                "Failed to parse config file", context={"path": str(config_path), "error": str(e)}
            ) from e

        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Config file must contain a mapping", context={"path": str(config_path)}
            )

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(
                "Config validation failed",
                context={"path": str(config_path), "errors": e.error_count()},
            ) from e

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> SteadyloadConfig:
        """Resolve the config path from the argument or STEADYLOAD_CONFIG."""
        if config_path is None:
            config_path = Path(os.getenv("STEADYLOAD_CONFIG", DEFAULT_CONFIG_PATH))
        return cls.from_yaml(config_path)

    def to_dict(self) -> Dict:
        """Convert config to dictionary."""
        return self.model_dump(exclude_none=True, by_alias=True)
