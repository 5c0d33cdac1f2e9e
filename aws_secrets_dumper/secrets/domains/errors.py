"""Exceptions raised by aws-secrets-dumper."""


class DumperError(Exception):
    """Base class for all aws-secrets-dumper errors."""
    pass


class ConfigError(DumperError):
    """Configuration error exception."""
    pass


class UnknownTargetError(DumperError):
    """Raised when a target name does not map to a secret service."""
    pass


class SecretStoreError(DumperError):
    """A call against Parameter Store or Secrets Manager failed."""
    pass


class RetrievalError(DumperError):
    """Retrieving secrets through a service failed."""
    pass


class DumpError(DumperError):
    """Serializing secrets failed."""
    pass


class GenerationError(DumperError):
    """Generating Terraform code or import commands failed."""
    pass
