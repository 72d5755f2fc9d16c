"""
Tests for uploading archives to their partitioned keys.
"""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
from boto3.exceptions import S3UploadFailedError

from gitsnap.backup import BackupWriter
from gitsnap.config import DeploymentConfig

SUNDAY = datetime(2024, 6, 9, 0, 0, 0, tzinfo=timezone.utc)
MONDAY = datetime(2024, 6, 10, 0, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def archive(tmp_path):
    path = tmp_path / "repo-backup.7z"
    path.write_bytes(b"7z\xbc\xaf")
    return path


class TestBackupWriter:
    """Daily always, weekly on the configured day."""

    def test_sunday_uploads_twice(self, archive):
        s3 = Mock()
        writer = BackupWriter(s3, "gitsnap-backups", DeploymentConfig(repository="org/repo"))

        uris = writer.upload(archive, SUNDAY)

        assert uris == [
            "s3://gitsnap-backups/daily/2024/06/09/20240609000000.7z",
            "s3://gitsnap-backups/weekly/2024/06/09/20240609000000.7z",
        ]
        assert s3.upload_file.call_count == 2
        extra = s3.upload_file.call_args.kwargs["ExtraArgs"]
        assert extra == {"StorageClass": "GLACIER_IR", "ServerSideEncryption": "AES256"}

    def test_monday_uploads_daily_only(self, archive):
        s3 = Mock()
        writer = BackupWriter(s3, "gitsnap-backups", DeploymentConfig(repository="org/repo"))

        uris = writer.upload(archive, MONDAY)

        assert uris == ["s3://gitsnap-backups/daily/2024/06/10/20240610000000.7z"]
        s3.upload_file.assert_called_once_with(
            Filename=str(archive),
            Bucket="gitsnap-backups",
            Key="daily/2024/06/10/20240610000000.7z",
            ExtraArgs={"StorageClass": "GLACIER_IR", "ServerSideEncryption": "AES256"},
        )

    def test_configured_weekday_and_class(self, archive):
        s3 = Mock()
        config = DeploymentConfig(repository="org/repo", weekly_day="Monday", storage_class="STANDARD")

        uris = BackupWriter(s3, "b", config).upload(archive, MONDAY)

        assert len(uris) == 2
        assert s3.upload_file.call_args.kwargs["ExtraArgs"]["StorageClass"] == "STANDARD"

    def test_missing_archive(self, tmp_path):
        s3 = Mock()

        with pytest.raises(FileNotFoundError):
            BackupWriter(s3, "b", DeploymentConfig(repository="org/repo")).upload(tmp_path / "nope.7z", MONDAY)
        s3.upload_file.assert_not_called()

    def test_upload_failure(self, archive):
        s3 = Mock()
        s3.upload_file.side_effect = S3UploadFailedError("Failed to upload: Access Denied")

        with pytest.raises(RuntimeError, match="daily/2024/06/10"):
            BackupWriter(s3, "b", DeploymentConfig(repository="org/repo")).upload(archive, MONDAY)
