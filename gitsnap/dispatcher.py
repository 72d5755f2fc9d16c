"""
Custom resource request dispatching.

Every invocation ends with exactly one response: CloudFormation waits for it
and rolls the stack back after its own timeout otherwise. Delete events are
acknowledged without touching anything, so stack deletion or rollback never
removes the backup bucket contents or a shared OIDC provider.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Optional

import requests
from pydantic import ValidationError

from .models import ReconciliationRequest, ReconciliationResult
from .signaler import DEFAULT_TIMEOUT_SECONDS, signaler_for

logger = logging.getLogger(__name__)

# Handlers receive a validated Create/Update request and return the response Data.
Handler = Callable[[ReconciliationRequest], Dict[str, Any]]


def resolve_physical_id(
    physical_resource_id: Optional[str],
    logical_resource_id: Optional[str],
    context: Any = None,
) -> str:
    return (
        physical_resource_id
        or logical_resource_id
        or getattr(context, "log_group_name", None)
        or "unknown"
    )


class RequestDispatcher:
    """Routes custom resource events to a handler and signals the outcome."""

    def __init__(
        self,
        handler: Handler,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.handler = handler
        self.session = session
        self.timeout = timeout

    def dispatch(self, event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
        logger.info("Event: %s", json.dumps(event, default=str))

        raw = event if isinstance(event, dict) else {}
        if raw.get("RequestType") == "Delete":
            result = _raw_result(raw, context, "SUCCESS")
            logger.info("Delete request for %s: resource is retained", result.physical_resource_id)
            return signaler_for(raw.get("ResponseURL"), self.session, self.timeout).signal(result)

        try:
            request = ReconciliationRequest.model_validate(event)
        except ValidationError as exc:
            logger.error("Malformed request: %s", exc)
            result = _raw_result(raw, context, "FAILED", f"Malformed request: {_first_error(exc)}")
            return signaler_for(raw.get("ResponseURL"), self.session, self.timeout).signal(result)

        physical_id = resolve_physical_id(
            request.physical_resource_id, request.logical_resource_id, context
        )
        result = self._reconcile(request, physical_id)
        return signaler_for(request.response_url, self.session, self.timeout).signal(result)

    def _reconcile(self, request: ReconciliationRequest, physical_id: str) -> ReconciliationResult:
        try:
            data = self.handler(request)
        except Exception as exc:
            logger.error("Error handling %s request: %s", request.request_type, exc, exc_info=True)
            return ReconciliationResult.failed(request, physical_id, str(exc) or type(exc).__name__)
        return ReconciliationResult.success(request, physical_id, data)


def _raw_result(raw: Dict[str, Any], context: Any, status: str, reason: str = "") -> ReconciliationResult:
    """Builds a response straight from the event fields, without validating them."""

    return ReconciliationResult(
        status=status,
        reason=reason,
        physical_resource_id=resolve_physical_id(
            raw.get("PhysicalResourceId"), raw.get("LogicalResourceId"), context
        ),
        stack_id=str(raw.get("StackId") or ""),
        request_id=str(raw.get("RequestId") or ""),
        logical_resource_id=str(raw.get("LogicalResourceId") or ""),
    )


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid value')}" if location else first.get("msg", str(exc))
