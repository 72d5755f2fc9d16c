"""
Time-partitioned key naming for repository backups.

Every capture produces one daily key and, on the designated weekly day, one
weekly key with the same suffix:

    daily/YYYY/MM/DD/YYYYMMDDhhmmss.<ext>
    weekly/YYYY/MM/DD/YYYYMMDDhhmmss.<ext>

All components are UTC. The bucket lifecycle rules expire objects by these
prefixes, so the layout must not drift from ``retention.build_lifecycle_rules``.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from .models import BackupObjectKey, Cadence

SUNDAY = 6
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


@dataclass(frozen=True)
class PartitionKeys:
    daily: BackupObjectKey
    weekly: Optional[BackupObjectKey] = None

    def all(self) -> List[BackupObjectKey]:
        return [self.daily] if self.weekly is None else [self.daily, self.weekly]


def to_utc(instant: datetime) -> datetime:
    """Naive datetimes are taken to be UTC already."""

    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def backup_key(cadence: Cadence, captured_at: datetime, extension: str) -> BackupObjectKey:
    instant = to_utc(captured_at)
    return BackupObjectKey(
        cadence=cadence,
        year=instant.strftime("%Y"),
        month=instant.strftime("%m"),
        day=instant.strftime("%d"),
        timestamp=instant.strftime(TIMESTAMP_FORMAT),
        extension=extension.lstrip("."),
    )


def partition_keys(captured_at: datetime, extension: str = "7z", weekly_day: int = SUNDAY) -> PartitionKeys:
    """
    Computes the storage keys for a backup captured at ``captured_at``.

    Args:
        captured_at: Capture instant
        extension: Archive extension, with or without the leading dot
        weekly_day: Weekday (Monday=0 ... Sunday=6) that also gets a weekly copy
    """
    if not 0 <= weekly_day <= 6:
        raise ValueError(f"weekly_day must be between 0 and 6, got {weekly_day}")

    instant = to_utc(captured_at)
    daily = backup_key(Cadence.DAILY, instant, extension)
    if instant.weekday() != weekly_day:
        return PartitionKeys(daily=daily)
    return PartitionKeys(daily=daily, weekly=backup_key(Cadence.WEEKLY, instant, extension))
