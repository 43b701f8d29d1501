"""Exceptions raised by the election protocol and its stores.

Store connectivity and command failures (insert, find, drop) are not
wrapped: they propagate as the driver raised them.
"""

from __future__ import annotations


class ElectionError(Exception):
    """Base exception for election errors."""

    pass


class InitializationError(ElectionError):
    """The group's collection or its expiry index could not be created."""

    def __init__(self, group_key: str, message: str):
        self.group_key = group_key
        super().__init__(f"Failed to initialize election group '{group_key}': {message}")


class StoreError(ElectionError):
    """Base exception for conditions normalised by store adapters."""

    pass


class CollectionExistsError(StoreError):
    """The collection already exists."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Collection '{name}' already exists")


class IndexExistsError(StoreError):
    """An index on the field already exists with different options."""

    def __init__(self, name: str, field: str, details: str | None = None):
        self.name = name
        self.field = field
        self.details = details
        message = f"Index on '{name}.{field}' already exists"
        if details:
            message = f"{message}: {details}"
        super().__init__(message)
