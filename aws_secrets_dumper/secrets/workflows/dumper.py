"""Dump retrieved secrets as a YAML document."""
import logging
from typing import Dict, Iterable, TextIO

import yaml

from ..domains.errors import DumpError
from ..domains.models import OutSecret, Secret, strip_prefix

logger = logging.getLogger(__name__)


def build_document(secrets: Iterable[Secret], prefix_to_remove: str = "") -> Dict[str, Dict[str, str]]:
    """
    Map each secret's key to its value and description.

    Args:
        secrets: Secrets to dump, in retrieval order
        prefix_to_remove: Stripped from the start of each key that begins with it

    Returns:
        {key: {"value": ..., "description": ...}}. When two keys collide after
        stripping, the later secret wins.
    """
    root: Dict[str, Dict[str, str]] = {}
    for secret in secrets:
        key = strip_prefix(secret.key, prefix_to_remove)
        if key in root:
            logger.warning(f"duplicate key '{key}' after prefix removal, keeping the last one")
        root[key] = OutSecret(value=secret.value, description=secret.description).to_dict()
    return root


class Dumper:
    """Writes secrets to out as `<key>: {value, description}` YAML."""

    def __init__(self, out: TextIO, prefix_to_remove: str = ""):
        self.out = out
        self.prefix_to_remove = prefix_to_remove

    def dump(self, secrets: Iterable[Secret]) -> None:
        root = build_document(secrets, self.prefix_to_remove)
        try:
            yaml.safe_dump(root, self.out, default_flow_style=False, allow_unicode=True)
        except yaml.YAMLError as e:
            raise DumpError(f"failed to encode secrets: {e}") from e
        logger.debug(f"dumped {len(root)} secret(s)")
