"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import List, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import MAX_BUNDLE_SIZE
from .domain.time_grid import generate_time_options


class BusinessConfig(BaseModel):
    """Studio details printed on outbound messages and backups."""
    name: str = "Studio"
    address: List[str] = Field(default_factory=list)
    payment_notes: List[str] = Field(default_factory=list)
    policy_notes: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        """Ensure the studio has a name."""
        if not value.strip():
            raise ValueError("business name must not be empty")
        return value.strip()


class ScheduleConfig(BaseModel):
    """Working day used to build the time grid."""
    start_hour: int = 7
    end_hour: int = 19
    interval_minutes: int = 30
    max_services: int = MAX_BUNDLE_SIZE

    @field_validator("start_hour", "end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @field_validator("interval_minutes")
    @classmethod
    def validate_interval(cls, value: int) -> int:
        """Slots must tile an hour exactly."""
        if value <= 0 or 60 % value != 0:
            raise ValueError(f"interval_minutes must divide 60, got {value}")
        return value

    @field_validator("max_services")
    @classmethod
    def validate_max_services(cls, value: int) -> int:
        if not 1 <= value <= MAX_BUNDLE_SIZE:
            raise ValueError(f"max_services must be between 1 and {MAX_BUNDLE_SIZE}, got {value}")
        return value

    @model_validator(mode="after")
    def validate_hours_order(self) -> "ScheduleConfig":
        """Ensure the working day does not close before it opens."""
        if self.end_hour < self.start_hour:
            raise ValueError("end_hour must not be earlier than start_hour")
        return self

    def time_options(self) -> List[str]:
        """The time grid for this working day."""
        return generate_time_options(
            start_hour=self.start_hour,
            end_hour=self.end_hour,
            interval_minutes=self.interval_minutes,
        )


class StoreConfig(BaseModel):
    """Persistence backend settings."""
    backend: Literal["json", "rest"] = "json"
    path: Path = Path("studiobook_data.json")
    url: str = ""
    api_key: str = ""
    timeout: int = 30

    @model_validator(mode="after")
    def validate_rest_settings(self) -> "StoreConfig":
        """The REST backend needs an endpoint and a key."""
        if self.backend == "rest" and (not self.url or not self.api_key):
            raise ValueError("store.url and store.api_key are required for the rest backend")
        return self


class MessagingConfig(BaseModel):
    """Outbound message settings."""
    country_code: str = "55"
    currency_symbol: str = "R$"

    @field_validator("country_code")
    @classmethod
    def validate_country_code(cls, value: str) -> str:
        digits = value.lstrip("+")
        if not digits.isdigit():
            raise ValueError(f"country_code must be numeric, got {value!r}")
        return digits


class AppConfig(BaseModel):
    """Application configuration."""
    business: BusinessConfig = Field(default_factory=BusinessConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    messaging: MessagingConfig = Field(default_factory=MessagingConfig)
    timezone: str = "America/Sao_Paulo"

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        A relative store path is resolved against the directory of the config file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)

        if not config.store.path.is_absolute():
            config.store.path = config_path.parent / config.store.path

        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
