"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import time
from pathlib import Path
from typing import List

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.calendar_grid import BusinessHours
from .domain.exceptions import InvalidAppointmentType
from .domain.models import QUANTUM_MINUTES, AppointmentType


class DefaultsConfig(BaseModel):
    """Default settings for CLI commands."""
    appointment_type: str = "short"
    fill_percentage: int = 50

    @field_validator("appointment_type")
    @classmethod
    def validate_appointment_type(cls, value: str) -> str:
        """Ensure the default names a known appointment type."""
        try:
            return AppointmentType.parse(value).value
        except InvalidAppointmentType as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("fill_percentage")
    @classmethod
    def validate_fill_percentage(cls, value: int) -> int:
        if not 1 <= value <= 100:
            raise ValueError(f"fill_percentage must be between 1 and 100, got {value}")
        return value

    def get_appointment_type(self) -> AppointmentType:
        return AppointmentType.parse(self.appointment_type)


class BusinessInterval(BaseModel):
    """One daily open block, e.g. 08:00 - 12:00."""
    start: time
    end: time

    @field_validator("start", "end")
    @classmethod
    def validate_quantized(cls, value: time) -> time:
        """Validate the boundary sits on the 15 minute grid."""
        if value.minute % QUANTUM_MINUTES or value.second or value.microsecond:
            raise ValueError(f"Business hours must align to {QUANTUM_MINUTES} minutes, got {value}")
        return value

    @model_validator(mode="after")
    def validate_order(self) -> "BusinessInterval":
        """Ensure the interval opens before it closes."""
        if self.end <= self.start:
            raise ValueError(f"Interval end {self.end} must be later than start {self.start}")
        return self


def _default_business_hours() -> List[BusinessInterval]:
    return [
        BusinessInterval(start=time(8, 0), end=time(12, 0)),
        BusinessInterval(start=time(13, 0), end=time(17, 0)),
    ]


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Berlin"
    business_hours: List[BusinessInterval] = Field(default_factory=_default_business_hours)
    exclude_days: List[int] = Field(default_factory=lambda: [5, 6])  # Saturday, Sunday
    store_file: Path = Path("appointments.json")
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("business_hours")
    @classmethod
    def validate_business_hours(cls, value: List[BusinessInterval]) -> List[BusinessInterval]:
        """Ensure intervals are present, sorted and do not overlap."""
        if not value:
            raise ValueError("business_hours must contain at least one interval")
        for previous, current in zip(value, value[1:]):
            if current.start < previous.end:
                raise ValueError(
                    f"Business intervals must be sorted and disjoint: "
                    f"{previous.start}-{previous.end} and {current.start}-{current.end}"
                )
        return value

    @field_validator("exclude_days")
    @classmethod
    def validate_exclude_days(cls, value: List[int]) -> List[int]:
        """Ensure weekdays are in valid range and deduplicated."""
        invalid_days = [day for day in value if day not in range(7)]
        if invalid_days:
            raise ValueError(f"exclude_days must be between 0 and 6, got {invalid_days}")
        # Preserve order while removing duplicates
        seen: set[int] = set()
        deduped: List[int] = []
        for day in value:
            if day not in seen:
                deduped.append(day)
                seen.add(day)
        if len(deduped) == 7:
            raise ValueError("exclude_days must leave at least one business day")
        return deduped

    def to_business_hours(self) -> BusinessHours:
        """Build the calendar grid from this configuration."""
        return BusinessHours(
            intervals=[(interval.start, interval.end) for interval in self.business_hours],
            exclude_weekdays=list(self.exclude_days),
            timezone=self.timezone,
        )

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

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
                f"See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


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


def load_config(config_file: Path | None = None) -> AppConfig:
    """
    Load the explicit config file, or the default one when present.

    Without an explicit path a missing ``config.yaml`` yields the built-in
    defaults.
    """
    if config_file is not None:
        return AppConfig.load_from_yaml(config_file)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)
    return AppConfig()
