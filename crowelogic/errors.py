"""
Error types raised by the persistence core and the model collaborator.
"""

from __future__ import annotations


class CroweLogicError(Exception):
    """Base class for errors raised by this package."""


class BackendUnavailable(CroweLogicError):
    """The remote key-value store could not be reached or rejected our credentials."""


class EntityNotFound(CroweLogicError):
    """An operation needed an existing parent entity that is not stored."""

    entity = "Entity"

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} not found: {entity_id}")


class ChatNotFound(EntityNotFound):
    entity = "Chat"


class FarmNotFound(EntityNotFound):
    entity = "Farm"


class GenerationFailed(CroweLogicError):
    """The language model call failed or returned an unusable response."""
