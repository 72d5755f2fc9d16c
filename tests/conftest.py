"""Shared fixtures and fakes for the handler tests."""

from typing import Any, Dict, Optional

import pytest
from botocore.exceptions import ClientError

from gitsnap.oidc import strip_scheme

ACCOUNT_ID = "123456789012"


def client_error(code: str = "AccessDenied", operation: str = "GetOpenIDConnectProvider", message: str = "denied"):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def make_event(request_type: str = "Create", properties: Optional[Dict[str, Any]] = None, **overrides) -> Dict[str, Any]:
    event = {
        "RequestType": request_type,
        "ServiceToken": "arn:aws:lambda:eu-west-1:123456789012:function:handler",
        "StackId": "arn:aws:cloudformation:eu-west-1:123456789012:stack/gitsnap/abc",
        "RequestId": "req-1",
        "LogicalResourceId": "GitHubOIDCProvider",
        "ResourceType": "Custom::OIDCProvider",
        "ResourceProperties": properties or {},
    }
    if request_type != "Create":
        event["PhysicalResourceId"] = "existing-physical-id"
    event.update(overrides)
    return event


class FakeIAM:
    """In-memory stand-in for the IAM client's OIDC provider calls."""

    def __init__(self, providers: Optional[Dict[str, str]] = None):
        # arn -> url as IAM stores it (no scheme)
        self.providers = dict(providers or {})
        self.create_calls = []

    def list_open_id_connect_providers(self):
        return {"OpenIDConnectProviderList": [{"Arn": arn} for arn in self.providers]}

    def get_open_id_connect_provider(self, OpenIDConnectProviderArn):
        return {
            "Url": self.providers[OpenIDConnectProviderArn],
            "ClientIDList": ["sts.amazonaws.com"],
            "ThumbprintList": [],
        }

    def create_open_id_connect_provider(self, Url, ClientIDList, ThumbprintList):
        self.create_calls.append({"Url": Url, "ClientIDList": ClientIDList, "ThumbprintList": ThumbprintList})
        stored = strip_scheme(Url)
        if stored in self.providers.values():
            raise client_error("EntityAlreadyExists", "CreateOpenIDConnectProvider", f"Provider with url {Url} already exists")
        arn = f"arn:aws:iam::{ACCOUNT_ID}:oidc-provider/{stored}"
        self.providers[arn] = stored
        return {"OpenIDConnectProviderArn": arn}


@pytest.fixture
def fake_iam():
    return FakeIAM()


@pytest.fixture
def provider_properties():
    return {
        "ServiceToken": "arn:aws:lambda:eu-west-1:123456789012:function:handler",
        "Url": "https://token.actions.githubusercontent.com",
        "ClientIdList": ["sts.amazonaws.com"],
        "ThumbprintList": [
            "6938fd4d98bab03faadb97b34396831e3780aea1",
            "1c58a3a8518e8759bf075b76b750d4f2df264fcd",
        ],
    }


@pytest.fixture
def artifact_properties():
    return {
        "ServiceToken": "arn:aws:lambda:eu-west-1:123456789012:function:uploader",
        "BucketName": "gitsnap-backups",
        "FilePath": "github-workflow.yaml",
        "WorkflowContent": "name: GitSnap\n",
    }
