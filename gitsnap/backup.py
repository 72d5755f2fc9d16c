"""Uploads an already-built repository archive to its partitioned keys."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import ClientError

from .aws_utils import s3_uri
from .config import DeploymentConfig
from .partition import partition_keys

logger = logging.getLogger(__name__)


class BackupWriter:
    """Copies one archive to the daily key and, on the weekly day, the weekly key."""

    def __init__(self, s3_client, bucket: str, config: DeploymentConfig) -> None:
        self.s3 = s3_client
        self.bucket = bucket
        self.config = config

    def upload(self, archive: Path, captured_at: Optional[datetime] = None) -> List[str]:
        if not archive.is_file():
            raise FileNotFoundError(f"Archive not found: {archive}")

        captured_at = captured_at or datetime.now(timezone.utc)
        keys = partition_keys(
            captured_at,
            extension=self.config.archive_extension,
            weekly_day=self.config.weekly_weekday,
        )

        uploaded = []
        for backup_key in keys.all():
            logger.info("Uploading %s to %s", archive, s3_uri(self.bucket, backup_key.key))
            try:
                self.s3.upload_file(
                    Filename=str(archive),
                    Bucket=self.bucket,
                    Key=backup_key.key,
                    ExtraArgs={
                        "StorageClass": self.config.storage_class.value,
                        "ServerSideEncryption": "AES256",
                    },
                )
            except (ClientError, S3UploadFailedError) as exc:
                raise RuntimeError(f"Error uploading backup to {backup_key.key}: {exc}") from exc
            uploaded.append(s3_uri(self.bucket, backup_key.key))
        return uploaded
