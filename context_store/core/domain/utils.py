"""Naming helpers shared by the store and its adapters."""

import re

from .exceptions import ValidationError

_UNSAFE_CHARS = re.compile(r"[^a-z0-9_]")


def normalize_collection_name(name: str) -> str:
    """Normalize a collection name to a storage-safe token.

    Lowercases the name and replaces every character outside
    ``[a-z0-9_]`` with an underscore, so ``"My-Repo"`` becomes ``"my_repo"``.

    Raises:
        ValidationError: If the name is empty or whitespace only.
    """
    if not name or not name.strip():
        raise ValidationError("Collection name must not be empty")
    return _UNSAFE_CHARS.sub("_", name.strip().lower())
