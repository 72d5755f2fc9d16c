"""
Lambda function: workflow_uploader

Backs the ``Custom::S3FileCreator`` resource. Writes the generated GitHub
Actions workflow into the backup bucket and returns its ``s3://`` URI. The
file is kept on stack deletion, like every other object in the bucket.
"""

import logging
import os
from functools import lru_cache

from gitsnap.aws_utils import make_client
from gitsnap.dispatcher import RequestDispatcher
from gitsnap.handlers import artifact_dispatcher

logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())

CALLBACK_TIMEOUT_SECONDS = float(os.environ.get("CALLBACK_TIMEOUT_SECONDS", "30"))
AWS_MAX_ATTEMPTS = int(os.environ.get("AWS_MAX_ATTEMPTS", "3"))


@lru_cache(maxsize=1)
def get_dispatcher() -> RequestDispatcher:
    """One S3 client per Lambda container."""

    s3_client = make_client("s3", retries=AWS_MAX_ATTEMPTS)
    return artifact_dispatcher(s3_client, timeout=CALLBACK_TIMEOUT_SECONDS)


def lambda_handler(event, context):
    return get_dispatcher().dispatch(event, context)
