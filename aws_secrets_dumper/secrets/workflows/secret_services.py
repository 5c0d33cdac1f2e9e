"""Secret services: retrieve secrets from one backend and generate Terraform for it."""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, TextIO, Type

from ..domains.aws_client import CURRENT_STAGE, ParameterStoreClient, SecretsManagerClient, SecretStoreClient
from ..domains.errors import DumperError, GenerationError, RetrievalError, UnknownTargetError
from ..domains.models import Filter, Secret, strip_prefix
from . import templates

logger = logging.getLogger(__name__)


class SecretService(ABC):
    """A secret backend selectable with --target."""

    name: str = ""
    target: str = ""
    client_class: Type[SecretStoreClient]

    def __init__(self, client: Optional[SecretStoreClient] = None, **client_options):
        self.client = client or self.client_class(**client_options)

    def retrieve_secrets(self, filter: Filter) -> List[Secret]:
        """
        Fetch every secret matching filter.

        Returns:
            Secrets in the order the provider listed them

        Raises:
            RetrievalError: If any call to the backend fails
        """
        logger.debug(f"retrieving from {self.name} with filter={filter}")
        try:
            secrets = self.client.list_secrets(filter)
        except DumperError as e:
            raise RetrievalError(f"failed to retrieve secrets via {self.name}: {e}") from e

        logger.info(f"retrieved {len(secrets)} secret(s) via {self.name}")
        return secrets

    @abstractmethod
    def generate_tf(self, filter: Filter, out: TextIO) -> None:
        """Write Terraform resources managing the secrets under filter.prefix."""
        ...

    @abstractmethod
    def generate_imports(self, filter: Filter, out: TextIO) -> None:
        """Write `terraform import` commands for the existing secrets."""
        ...

    def _retrieve_for_generation(self, filter: Filter) -> List[Secret]:
        try:
            return self.retrieve_secrets(filter)
        except RetrievalError as e:
            raise GenerationError(f"failed to retrieve secrets: {e}") from e


class ParameterStoreService(SecretService):
    name = "SSM Parameter Store service"
    target = "ssm"
    client_class = ParameterStoreClient

    def generate_tf(self, filter: Filter, out: TextIO) -> None:
        secrets = self._retrieve_for_generation(filter)
        out.write(templates.render_ssm_tf(filter.prefix, secrets))

    def generate_imports(self, filter: Filter, out: TextIO) -> None:
        secrets = self._retrieve_for_generation(filter)
        for secret in secrets:
            # aws_ssm_parameter imports by parameter name, not by ARN (Secret.identifier)
            out.write(
                f"terraform import '{templates.ssm_parameter_address(secret.key, filter.prefix)}' "
                f"{secret.key}\n"
            )


class SecretsManagerService(SecretService):
    name = "secrets manager service"
    target = "secretsmanager"
    client_class = SecretsManagerClient

    def generate_tf(self, filter: Filter, out: TextIO) -> None:
        out.write(templates.render_secretsmanager_tf(filter.prefix))

    def generate_imports(self, filter: Filter, out: TextIO) -> None:
        secrets = self._retrieve_for_generation(filter)
        for secret in secrets:
            if not secret.version:
                logger.warning(
                    f"no {CURRENT_STAGE} version found for {strip_prefix(secret.key, filter.prefix)}"
                )
            out.write(
                f"terraform import '{templates.secretsmanager_secret_address(secret.key, filter.prefix)}' "
                f"{secret.identifier}\n"
            )
            out.write(
                f"terraform import '{templates.secretsmanager_version_address(secret.key, filter.prefix)}' "
                f"'{secret.identifier}|{secret.version or ''}'\n"
            )


SERVICES: Dict[str, Type[SecretService]] = {
    service.target: service for service in (ParameterStoreService, SecretsManagerService)
}


def resolve_service(target: str, **client_options) -> SecretService:
    """
    Build the service for a --target value.

    Args:
        target: 'ssm' or 'secretsmanager'
        **client_options: region, profile, throttle_seconds or a prebuilt client

    Raises:
        UnknownTargetError: If target is not a known backend
    """
    service_class = SERVICES.get(target)
    if service_class is None:
        raise UnknownTargetError(f"unknown target '{target}'")
    return service_class(**client_options)
