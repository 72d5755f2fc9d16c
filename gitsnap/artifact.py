"""Writes generated artifacts (the backup workflow file) into the backup bucket."""
from __future__ import annotations

import logging
from typing import Union

from .aws_utils import s3_uri

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "text/yaml"


class ArtifactMaterializer:
    """Overwrites ``s3://bucket/key`` with the given content.

    No read-before-write: the key is fully determined by the request, so a
    repeated write with the same input leaves the same object behind.
    """

    def __init__(self, s3_client) -> None:
        self.s3 = s3_client

    def materialize(
        self,
        bucket: str,
        key: str,
        content: Union[str, bytes],
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> str:
        if not bucket or not key:
            raise ValueError("Bucket name and file path are required")

        body = content.encode("utf-8") if isinstance(content, str) else content
        logger.info("Uploading artifact to %s (%d bytes)", s3_uri(bucket, key), len(body))
        self.s3.put_object(
            Bucket=bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
            ServerSideEncryption="AES256",
        )
        return s3_uri(bucket, key)
