"""Create/Update handlers for the two custom resources of the backup stack."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from .artifact import DEFAULT_CONTENT_TYPE, ArtifactMaterializer
from .dispatcher import RequestDispatcher
from .models import ReconciliationRequest
from .oidc import ProviderReconciler
from .signaler import DEFAULT_TIMEOUT_SECONDS


def _as_list(value: Any) -> List[str]:
    """CloudFormation passes CommaDelimitedList parameters as lists, but hand-written
    events sometimes carry a plain comma-separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return [str(item) for item in value]


class ProviderHandler:
    """Custom::OIDCProvider"""

    def __init__(self, reconciler: ProviderReconciler) -> None:
        self.reconciler = reconciler

    def __call__(self, request: ReconciliationRequest) -> Dict[str, Any]:
        url = request.require("Url")
        properties = request.resource_properties
        provider = self.reconciler.reconcile(
            url,
            _as_list(properties.get("ClientIdList")),
            _as_list(properties.get("ThumbprintList")),
        )
        return {
            "Arn": provider.arn,
            "Url": url,
            "ProviderName": provider.provider_name,
            "AccountId": provider.account_id,
        }


class ArtifactHandler:
    """Custom::S3FileCreator"""

    def __init__(self, materializer: ArtifactMaterializer) -> None:
        self.materializer = materializer

    def __call__(self, request: ReconciliationRequest) -> Dict[str, Any]:
        uri = self.materializer.materialize(
            bucket=request.require("BucketName"),
            key=request.require("FilePath"),
            content=request.require("WorkflowContent"),
            content_type=request.resource_properties.get("ContentType") or DEFAULT_CONTENT_TYPE,
        )
        return {"S3Uri": uri}


def provider_dispatcher(
    iam_client,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> RequestDispatcher:
    return RequestDispatcher(ProviderHandler(ProviderReconciler(iam_client)), session=session, timeout=timeout)


def artifact_dispatcher(
    s3_client,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> RequestDispatcher:
    return RequestDispatcher(ArtifactHandler(ArtifactMaterializer(s3_client)), session=session, timeout=timeout)
