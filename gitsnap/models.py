"""Domain models shared by the handlers, the backup writer and the CLI."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class StorageClass(str, Enum):
    STANDARD = "STANDARD"
    INTELLIGENT_TIERING = "INTELLIGENT_TIERING"
    ONEZONE_IA = "ONEZONE_IA"
    STANDARD_IA = "STANDARD_IA"
    GLACIER = "GLACIER"
    GLACIER_IR = "GLACIER_IR"
    DEEP_ARCHIVE = "DEEP_ARCHIVE"


class Cadence(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"

    @property
    def prefix(self) -> str:
        return f"{self.value}/"


# ----------------------------
# Custom resource envelope
# ----------------------------
class ReconciliationRequest(BaseModel):
    """Custom resource event as sent by CloudFormation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    request_type: Literal["Create", "Update", "Delete"] = Field(..., alias="RequestType")
    stack_id: str = Field(..., alias="StackId")
    request_id: str = Field(..., alias="RequestId")
    logical_resource_id: str = Field(..., alias="LogicalResourceId")
    resource_properties: Dict[str, Any] = Field(default_factory=dict, alias="ResourceProperties")
    physical_resource_id: Optional[str] = Field(default=None, alias="PhysicalResourceId")
    response_url: Optional[str] = Field(default=None, alias="ResponseURL")

    def require(self, name: str) -> Any:
        """Returns a resource property, failing loudly when it is missing."""

        try:
            return self.resource_properties[name]
        except KeyError as exc:
            raise ValueError(f"Missing required resource property: {name}") from exc


class ReconciliationResult(BaseModel):
    """Response envelope reported back to CloudFormation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: Literal["SUCCESS", "FAILED"] = Field(..., alias="Status")
    reason: str = Field("", alias="Reason")
    physical_resource_id: str = Field(..., alias="PhysicalResourceId")
    stack_id: str = Field(..., alias="StackId")
    request_id: str = Field(..., alias="RequestId")
    logical_resource_id: str = Field(..., alias="LogicalResourceId")
    data: Dict[str, Any] = Field(default_factory=dict, alias="Data")

    @classmethod
    def success(
        cls,
        request: ReconciliationRequest,
        physical_resource_id: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> "ReconciliationResult":
        return cls(
            status="SUCCESS",
            physical_resource_id=physical_resource_id,
            stack_id=request.stack_id,
            request_id=request.request_id,
            logical_resource_id=request.logical_resource_id,
            data=data or {},
        )

    @classmethod
    def failed(
        cls,
        request: ReconciliationRequest,
        physical_resource_id: str,
        reason: str,
    ) -> "ReconciliationResult":
        return cls(
            status="FAILED",
            reason=reason or "Unknown error",
            physical_resource_id=physical_resource_id,
            stack_id=request.stack_id,
            request_id=request.request_id,
            logical_resource_id=request.logical_resource_id,
        )

    def envelope(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


# ----------------------------
# Identity provider
# ----------------------------
class FederatedProvider(BaseModel):
    """An IAM OpenID Connect provider, before or after reconciliation."""

    url: str
    client_ids: List[str] = Field(default_factory=list)
    thumbprints: List[str] = Field(default_factory=list)
    arn: Optional[str] = None

    @property
    def account_id(self) -> str:
        return _arn_parts(self._require_arn())[4]

    @property
    def provider_name(self) -> str:
        resource = _arn_parts(self._require_arn())[5]
        return resource.replace("oidc-provider/", "", 1)

    def _require_arn(self) -> str:
        if not self.arn:
            raise ValueError(f"Provider {self.url} has no ARN yet")
        return self.arn


def _arn_parts(arn: str) -> List[str]:
    # The resource part may itself contain ':' (issuer with port).
    parts = arn.split(":", 5)
    if len(parts) != 6 or parts[0] != "arn":
        raise ValueError(f"Malformed ARN: {arn}")
    return parts


# ----------------------------
# Backups and retention
# ----------------------------
class BackupObjectKey(BaseModel):
    """Storage key of one backup object under a cadence prefix."""

    model_config = ConfigDict(frozen=True)

    cadence: Cadence
    year: str
    month: str
    day: str
    timestamp: str
    extension: str

    @property
    def key(self) -> str:
        return (
            f"{self.cadence.prefix}{self.year}/{self.month}/{self.day}/"
            f"{self.timestamp}.{self.extension}"
        )

    def __str__(self) -> str:
        return self.key


class RetentionPolicy(BaseModel):
    """Expiry rule for every object under one cadence prefix."""

    model_config = ConfigDict(frozen=True)

    cadence: Cadence
    retention_days: int = Field(..., gt=0)
    storage_class: StorageClass = StorageClass.GLACIER_IR
