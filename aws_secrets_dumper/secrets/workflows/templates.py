"""Terraform templates for managing dumped secrets with the sops provider.

The dumped YAML is expected to be encrypted with sops into
``secrets.encrypted.yml``; the generated resources read it back through the
``sops_file`` data source.
"""
from typing import Any, Dict, List

from ..domains.errors import GenerationError
from ..domains.models import Secret, strip_prefix

ENCRYPTED_SECRET_FILE_NAME = "secrets.encrypted.yml"

SSM_PARAMETER_TF = """
data "sops_file" "ssm_parameters" {
  source_file = "%(encrypted_file)s"
}

locals {
  ssm_parameters = nonsensitive(
    distinct([
      for key in keys(data.sops_file.ssm_parameters.data) : split(".", key)[0]
    ])
  )
}

resource "aws_ssm_parameter" "parameter" {
  for_each    = toset(local.ssm_parameters)
  name        = "%(prefix)s${each.key}"
  description = nonsensitive(data.sops_file.ssm_parameters.data["${each.value}.description"])
  type        = "SecureString"
  value       = data.sops_file.ssm_parameters.data["${each.value}.value"]
}
%(imports)s"""

SSM_IMPORT_BLOCK = """
import {
  from = "%(source)s"
  to   = %(address)s
}
"""

SECRETS_MANAGER_TF = """
data "sops_file" "secretsmanager_secrets" {
  source_file = "%(encrypted_file)s"
}

locals {
  secretsmanager_secrets = nonsensitive(
    distinct([
      for key in keys(data.sops_file.secretsmanager_secrets.data) : split(".", key)[0]
    ])
  )
}

resource "aws_secretsmanager_secret" "secret" {
  for_each    = toset(local.secretsmanager_secrets)
  name        = "%(prefix)s${each.value}"
  description = nonsensitive(data.sops_file.secretsmanager_secrets.data["${each.value}.description"])
}

resource "aws_secretsmanager_secret_version" "secret" {
  for_each      = toset(local.secretsmanager_secrets)
  secret_id     = aws_secretsmanager_secret.secret[each.value].id
  secret_string = data.sops_file.secretsmanager_secrets.data["${each.value}.value"]
}
"""


def ssm_parameter_address(key: str, prefix: str) -> str:
    return f'aws_ssm_parameter.parameter["{strip_prefix(key, prefix)}"]'


def secretsmanager_secret_address(key: str, prefix: str) -> str:
    return f'aws_secretsmanager_secret.secret["{strip_prefix(key, prefix)}"]'


def secretsmanager_version_address(key: str, prefix: str) -> str:
    return f'aws_secretsmanager_secret_version.secret["{strip_prefix(key, prefix)}"]'


def render(template: str, params: Dict[str, Any]) -> str:
    """Fill a template, raising GenerationError on missing or bad parameters."""
    try:
        return template % params
    except (KeyError, TypeError, ValueError) as e:
        raise GenerationError(f"failed to execute template: {e!r}") from e


def render_ssm_tf(prefix: str, secrets: List[Secret]) -> str:
    imports = "".join(
        render(SSM_IMPORT_BLOCK, {
            "source": secret.key,
            "address": ssm_parameter_address(secret.key, prefix),
        })
        for secret in secrets
    )
    return render(SSM_PARAMETER_TF, {
        "encrypted_file": ENCRYPTED_SECRET_FILE_NAME,
        "prefix": prefix,
        "imports": imports,
    })


def render_secretsmanager_tf(prefix: str) -> str:
    return render(SECRETS_MANAGER_TF, {
        "encrypted_file": ENCRYPTED_SECRET_FILE_NAME,
        "prefix": prefix,
    })
