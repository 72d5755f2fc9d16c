"""
Delivery of custom resource results back to CloudFormation.

CloudFormation blocks on a PUT to the pre-signed ``ResponseURL`` of each event.
Events invoked by hand (CLI, console test events) carry no such URL; for those
the envelope is simply returned to the caller.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import requests

from .models import ReconciliationResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30


class DirectSignaler:
    """Returns the envelope to the invoker without any network call."""

    def signal(self, result: ReconciliationResult) -> Dict[str, Any]:
        envelope = result.envelope()
        logger.info("No ResponseURL in event, returning response directly")
        logger.info("Response: %s", json.dumps(envelope))
        return envelope


class CallbackSignaler:
    """PUTs the envelope to the pre-signed response URL."""

    def __init__(
        self,
        response_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.response_url = response_url
        self.session = session or requests.Session()
        self.timeout = timeout

    def signal(self, result: ReconciliationResult) -> Dict[str, Any]:
        envelope = result.envelope()
        body = json.dumps(envelope).encode("utf-8")
        logger.info("Response: %s", body.decode("utf-8"))

        # The pre-signed URL is signed for an empty content type.
        headers = {"Content-Type": "", "Content-Length": str(len(body))}
        try:
            response = self.session.put(
                self.response_url,
                data=body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("Error sending response: %s", exc)
            raise RuntimeError(f"Could not deliver response to CloudFormation: {exc}") from exc

        logger.info("Response delivered (HTTP %s)", response.status_code)
        return envelope


def signaler_for(
    response_url: Optional[str],
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
):
    """Picks the delivery strategy for one request."""

    if response_url:
        return CallbackSignaler(response_url, session=session, timeout=timeout)
    return DirectSignaler()
