"""
Lambda function: oidc_provider

Backs the ``Custom::OIDCProvider`` resource. Finds the IAM OpenID Connect
provider for the GitHub issuer or creates it, and returns its ARN, account id
and provider name as resource attributes. Delete is a no-op: the provider may
be shared with other stacks.
"""

import logging
import os
from functools import lru_cache

from gitsnap.aws_utils import make_client
from gitsnap.dispatcher import RequestDispatcher
from gitsnap.handlers import provider_dispatcher

logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())

CALLBACK_TIMEOUT_SECONDS = float(os.environ.get("CALLBACK_TIMEOUT_SECONDS", "30"))
AWS_MAX_ATTEMPTS = int(os.environ.get("AWS_MAX_ATTEMPTS", "3"))


@lru_cache(maxsize=1)
def get_dispatcher() -> RequestDispatcher:
    """One IAM client per Lambda container."""

    iam_client = make_client("iam", retries=AWS_MAX_ATTEMPTS)
    return provider_dispatcher(iam_client, timeout=CALLBACK_TIMEOUT_SECONDS)


def lambda_handler(event, context):
    return get_dispatcher().dispatch(event, context)
