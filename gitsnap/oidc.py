"""
Discover-or-create for the IAM OpenID Connect provider.

An account holds at most one OIDC provider per issuer URL, and the GitHub
provider is often created by some other stack or by hand. The reconciler
therefore looks for an existing provider first and only creates one when
nothing matches. Failures while looking are logged and treated as "not
found": the create call that follows either succeeds or fails with a
definitive error (e.g. EntityAlreadyExists).
"""
from __future__ import annotations

import logging
import re
from typing import Iterable, Iterator, Optional

from botocore.exceptions import ClientError

from .models import FederatedProvider

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


def strip_scheme(url: str) -> str:
    """IAM stores provider URLs without their scheme."""

    return _SCHEME_RE.sub("", url.strip())


class ProviderMatcher:
    """Scans the providers visible to the IAM client for a given issuer."""

    def __init__(self, iam_client) -> None:
        self.iam = iam_client

    def candidate_arns(self) -> Iterator[str]:
        # ListOpenIDConnectProviders is not paginated: one call returns them all.
        try:
            response = self.iam.list_open_id_connect_providers()
            arns = [provider["Arn"] for provider in response["OpenIDConnectProviderList"] if provider.get("Arn")]
        except Exception as e:
            logger.warning("Error listing OIDC providers: %s", e)
            return
        yield from arns

    def stored_url(self, arn: str) -> Optional[str]:
        try:
            return self.iam.get_open_id_connect_provider(OpenIDConnectProviderArn=arn).get("Url")
        except Exception as e:
            logger.warning("Error getting provider details for %s: %s", arn, e)
            return None

    def find(self, url: str) -> Optional[str]:
        """Returns the ARN of the first provider whose URL matches ``url``."""

        target = strip_scheme(url)
        for arn in self.candidate_arns():
            stored = self.stored_url(arn)
            if stored is not None and strip_scheme(stored) == target:
                logger.info("Found existing provider: %s", arn)
                return arn
        return None


class ProviderReconciler:
    """Ensures an OIDC provider exists for an issuer and returns it with its ARN."""

    def __init__(self, iam_client, matcher: Optional[ProviderMatcher] = None) -> None:
        self.iam = iam_client
        self.matcher = matcher or ProviderMatcher(iam_client)

    def reconcile(self, url: str, client_ids: Iterable[str], thumbprints: Iterable[str]) -> FederatedProvider:
        provider = FederatedProvider(
            url=url,
            client_ids=list(client_ids),
            thumbprints=list(thumbprints),
        )

        arn = self.matcher.find(url)
        if arn is None:
            arn = self.create(provider)
        return provider.model_copy(update={"arn": arn})

    def create(self, provider: FederatedProvider) -> str:
        logger.info("Creating new OIDC provider with URL %s", provider.url)
        try:
            response = self.iam.create_open_id_connect_provider(
                Url=provider.url,
                ClientIDList=provider.client_ids,
                ThumbprintList=provider.thumbprints,
            )
        except ClientError as e:
            logger.error("Error creating provider: %s", e)
            raise
        arn = response["OpenIDConnectProviderArn"]
        logger.info("Created new provider: %s", arn)
        return arn
