"""Deploy-time configuration for a repository backup stack."""
from __future__ import annotations

from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .models import Cadence, RetentionPolicy, StorageClass

GITHUB_ISSUER_URL = "https://token.actions.githubusercontent.com"
GITHUB_THUMBPRINTS = [
    "6938fd4d98bab03faadb97b34396831e3780aea1",
    "1c58a3a8518e8759bf075b76b750d4f2df264fcd",
]
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class DeploymentConfig(BaseModel):
    """Parameters supplied when the backup stack is deployed."""

    repository: str = Field(
        ...,
        pattern=r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$",
        description="GitHub repository in the form 'owner/repo'",
    )
    daily_retention_days: int = Field(30, ge=1, le=365)
    weekly_retention_days: int = Field(365, ge=1, le=3650)
    storage_class: StorageClass = StorageClass.GLACIER_IR
    issuer_url: str = GITHUB_ISSUER_URL
    audiences: List[str] = Field(default_factory=lambda: ["sts.amazonaws.com"], min_length=1)
    thumbprints: List[str] = Field(default_factory=lambda: list(GITHUB_THUMBPRINTS))
    weekly_day: str = "Sunday"
    archive_extension: str = "7z"
    noncurrent_version_days: int = Field(90, ge=1)
    workflow_key: str = "github-workflow.yaml"
    schedule_cron: str = "0 0 * * *"

    @field_validator("weekly_day")
    @classmethod
    def normalize_weekday(cls, value: str) -> str:
        name = value.strip().capitalize()
        if name not in WEEKDAYS:
            raise ValueError(f"Unknown weekday: {value}")
        return name

    @field_validator("archive_extension")
    @classmethod
    def strip_dot(cls, value: str) -> str:
        value = value.lstrip(".")
        if not value:
            raise ValueError("archive_extension must not be empty")
        return value

    @property
    def weekly_weekday(self) -> int:
        """Weekly day as returned by ``datetime.weekday()`` (Monday is 0)."""

        return WEEKDAYS.index(self.weekly_day)

    def retention_policies(self) -> List[RetentionPolicy]:
        return [
            RetentionPolicy(
                cadence=Cadence.DAILY,
                retention_days=self.daily_retention_days,
                storage_class=self.storage_class,
            ),
            RetentionPolicy(
                cadence=Cadence.WEEKLY,
                retention_days=self.weekly_retention_days,
                storage_class=self.storage_class,
            ),
        ]


def load_config(path: Path) -> DeploymentConfig:
    """Loads a YAML file and returns the validated configuration."""

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with path.open("r", encoding="utf-8") as config_file:
        raw_config = yaml.safe_load(config_file) or {}

    try:
        return DeploymentConfig.model_validate(raw_config)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
