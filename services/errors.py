"""Errors raised by the registry service."""

from __future__ import annotations


class RegistryError(Exception):
    """Base class for failures reported back to the caller."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(RegistryError, ValueError):
    """The request payload is missing a field or carries a malformed value."""


class NotFoundError(RegistryError, KeyError):
    """A referenced farm or sensor does not exist."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id
