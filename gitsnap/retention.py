"""Bucket lifecycle rules derived from the retention policies."""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from botocore.exceptions import ClientError

from .config import DeploymentConfig
from .models import Cadence, RetentionPolicy

logger = logging.getLogger(__name__)

RULE_IDS = {
    Cadence.DAILY: "DailyBackupRetention",
    Cadence.WEEKLY: "WeeklyBackupRetention",
}
DELETED_OBJECT_RULE_ID = "DeletedObjectRetention"


def expiration_rule(policy: RetentionPolicy) -> Dict[str, Any]:
    return {
        "ID": RULE_IDS[policy.cadence],
        "Status": "Enabled",
        "Filter": {"Prefix": policy.cadence.prefix},
        "Expiration": {"Days": policy.retention_days},
    }


def build_lifecycle_rules(policies: List[RetentionPolicy], noncurrent_days: int = 90) -> List[Dict[str, Any]]:
    """Expiry per cadence prefix plus cleanup of overwritten and deleted versions."""

    seen = set()
    rules = []
    for policy in policies:
        if policy.cadence in seen:
            raise ValueError(f"Duplicate retention policy for {policy.cadence.value}")
        seen.add(policy.cadence)
        rules.append(expiration_rule(policy))

    # Empty filter: applies to the whole bucket.
    rules.append({
        "ID": DELETED_OBJECT_RULE_ID,
        "Status": "Enabled",
        "Filter": {},
        "NoncurrentVersionExpiration": {"NoncurrentDays": noncurrent_days},
        "Expiration": {"ExpiredObjectDeleteMarker": True},
    })
    return rules


def lifecycle_configuration(config: DeploymentConfig) -> Dict[str, Any]:
    return {
        "Rules": build_lifecycle_rules(
            config.retention_policies(),
            noncurrent_days=config.noncurrent_version_days,
        )
    }


def apply_lifecycle(s3_client, bucket: str, config: DeploymentConfig) -> Dict[str, Any]:
    """Replaces the bucket lifecycle configuration with the retention rules."""

    lifecycle = lifecycle_configuration(config)
    logger.info("Applying %d lifecycle rules to s3://%s", len(lifecycle["Rules"]), bucket)
    try:
        s3_client.put_bucket_lifecycle_configuration(
            Bucket=bucket,
            LifecycleConfiguration=lifecycle,
        )
    except ClientError as e:
        error_code = e.response["Error"]["Code"]
        logger.error("Error applying lifecycle to '%s': %s - %s", bucket, error_code, e)
        raise
    return lifecycle
