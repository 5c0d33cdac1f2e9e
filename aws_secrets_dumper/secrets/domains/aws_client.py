"""Clients for AWS SSM Parameter Store and AWS Secrets Manager."""
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config_loader import DEFAULT_THROTTLE_SECONDS
from .errors import SecretStoreError
from .models import Filter, Secret

logger = logging.getLogger(__name__)

CURRENT_STAGE = "AWSCURRENT"

AWS_ERRORS = (BotoCoreError, ClientError)


def paginate(client: Any, operation: str, result_key: str, **kwargs) -> Iterator[dict]:
    """
    Yield every item of a paginated listing, page after page.

    Args:
        client: boto3 client
        operation: Paginated operation name, e.g. 'list_secrets'
        result_key: Key holding the items in each page, e.g. 'SecretList'
        **kwargs: Arguments for the operation

    Pages are fetched lazily, so per-item work runs between page requests.
    """
    paginator = client.get_paginator(operation)
    for page in paginator.paginate(**kwargs):
        for item in page.get(result_key, []):
            yield item


def resolve_current_version(versions_to_stages: Optional[Dict[str, List[str]]]) -> Optional[str]:
    """
    Return the version id staged as AWSCURRENT.

    Only the first stage label of each version is inspected, so a version whose
    labels are e.g. ["AWSPENDING", "AWSCURRENT"] is not matched.
    """
    for version_id, stages in (versions_to_stages or {}).items():
        if stages and stages[0] == CURRENT_STAGE:
            return version_id
    return None


class SecretStoreClient(ABC):
    """Wrapper around a boto3 client for one secret store."""

    service_name: str
    list_operation: str
    result_key: str
    list_error: str

    def __init__(
        self,
        client: Any = None,
        region: Optional[str] = None,
        profile: Optional[str] = None,
        throttle_seconds: float = DEFAULT_THROTTLE_SECONDS,
    ):
        self._client = client
        self.region = region
        self.profile = profile
        self.throttle_seconds = throttle_seconds

    @property
    def client(self) -> Any:
        """Lazy-initialize the boto3 client from the default credential chain."""
        if self._client is None:
            try:
                session = boto3.Session(region_name=self.region, profile_name=self.profile)
                self._client = session.client(self.service_name)
            except AWS_ERRORS as e:
                raise SecretStoreError(f"failed to create {self.service_name} client: {e}") from e
        return self._client

    def list_secrets(self, filter: Filter) -> List[Secret]:
        """
        Return every secret matching filter, across all pages.

        Each listed item costs one more API call for its detail, followed by the
        throttle delay. Any error aborts the listing; nothing partial is returned.
        """
        secrets = []
        try:
            for item in paginate(self.client, self.list_operation, self.result_key,
                                 **self._list_arguments(filter)):
                secrets.append(self._fetch_secret(item))
                self._throttle()
        except AWS_ERRORS as e:
            raise SecretStoreError(f"{self.list_error}: {e}") from e
        return secrets

    @abstractmethod
    def _list_arguments(self, filter: Filter) -> Dict[str, Any]:
        """Arguments for the list operation."""
        ...

    @abstractmethod
    def _fetch_secret(self, item: dict) -> Secret:
        """Build a Secret from a listed item, fetching whatever the listing omits."""
        ...

    def _throttle(self) -> None:
        # Per-secret detail calls are rate limited per account
        if self.throttle_seconds > 0:
            time.sleep(self.throttle_seconds)


class ParameterStoreClient(SecretStoreClient):
    """Reads parameters (decrypted) and their descriptions from SSM Parameter Store."""

    service_name = "ssm"
    list_operation = "get_parameters_by_path"
    result_key = "Parameters"
    list_error = "failed to get parameters from SSM Parameter Store"

    def _list_arguments(self, filter: Filter) -> Dict[str, Any]:
        return {"Path": filter.prefix, "Recursive": True, "WithDecryption": True}

    def _fetch_secret(self, item: dict) -> Secret:
        name = item["Name"]
        logger.debug(f"retrieving parameter detail for {name}")
        return Secret(
            key=name,
            value=item.get("Value", ""),
            description=self._describe(name),
            identifier=item.get("ARN"),
        )

    def _describe(self, name: str) -> str:
        """Fetch the description of one parameter; get_parameters_by_path omits it."""
        try:
            response = self.client.describe_parameters(
                ParameterFilters=[{"Key": "Name", "Option": "Equals", "Values": [name]}],
            )
        except AWS_ERRORS as e:
            raise SecretStoreError(
                f"failed to describe parameter(name={name}) on SSM Parameter Store: {e}"
            ) from e

        details = response.get("Parameters", [])
        if not details:
            raise SecretStoreError(f"parameter(name={name}) not found on SSM Parameter Store")
        return details[0].get("Description") or ""


class SecretsManagerClient(SecretStoreClient):
    """Reads secret values and their current version from Secrets Manager."""

    service_name = "secretsmanager"
    list_operation = "list_secrets"
    result_key = "SecretList"
    list_error = "failed to list SecretsManager Secrets"

    def _list_arguments(self, filter: Filter) -> Dict[str, Any]:
        # ListSecrets rejects an empty filter value; no prefix lists everything
        if not filter.prefix:
            return {}
        return {"Filters": [{"Key": "name", "Values": [filter.prefix]}]}

    def _fetch_secret(self, item: dict) -> Secret:
        name = item["Name"]
        arn = item["ARN"]
        logger.debug(f"retrieving secret value for {name}")

        try:
            value = self.client.get_secret_value(SecretId=arn)
        except AWS_ERRORS as e:
            raise SecretStoreError(f"failed to get SecretsManager Secret(name={name}): {e}") from e

        if "SecretString" not in value:
            raise SecretStoreError(
                f"SecretsManager Secret(name={name}) has no SecretString; binary secrets are unsupported"
            )

        return Secret(
            key=name,
            value=value["SecretString"],
            description=item.get("Description") or "",
            identifier=arn,
            version=resolve_current_version(item.get("SecretVersionsToStages")),
        )
