"""Domain models for secret retrieval."""
from dataclasses import dataclass
from typing import Optional


@dataclass
class Secret:
    """A secret entry read from Parameter Store or Secrets Manager."""
    key: str
    value: str
    description: str = ""
    identifier: Optional[str] = None  # ARN
    version: Optional[str] = None  # Secrets Manager only

    def __repr__(self) -> str:
        return (
            f"Secret(key={self.key!r}, value='***', description={self.description!r}, "
            f"identifier={self.identifier!r}, version={self.version!r})"
        )


@dataclass(frozen=True)
class Filter:
    """Scopes which keys a retrieval considers."""
    prefix: str = ""


@dataclass
class OutSecret:
    """Serialized projection of a Secret (key and identifiers stripped)."""
    value: str
    description: str

    def to_dict(self) -> dict:
        return {"value": self.value, "description": self.description}


def strip_prefix(key: str, prefix: str) -> str:
    """Remove prefix once from the start of key, if key starts with it."""
    if prefix and key.startswith(prefix):
        return key[len(prefix):]
    return key
