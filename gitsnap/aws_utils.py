"""AWS helper utilities shared by the handlers and the CLI."""

from __future__ import annotations

from typing import Optional

import boto3
from botocore.config import Config

USER_AGENT = "gitsnap/1.0"


def make_client(service: str, region: Optional[str] = None, retries: int = 3):
    """Create a boto3 client for the given service with standard retries."""

    config = Config(
        retries={"mode": "standard", "max_attempts": max(1, retries)},
        user_agent_extra=USER_AGENT,
    )
    return boto3.client(service, region_name=region, config=config)


def s3_uri(bucket: str, key: str) -> str:
    return f"s3://{bucket}/{key}"
