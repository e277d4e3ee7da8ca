"""
tdrs/errors.py - Exception hierarchy for the social engine

Lookups raise KeyError subclasses, misuse raises TypeError/ValueError
subclasses, and everything shares the TDRSError base.
"""
from __future__ import annotations


class TDRSError(Exception):
    """Base class for all social engine errors."""


class _NotFoundError(TDRSError, KeyError):
    """Lookup of an unregistered key."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class AgentNotFoundError(_NotFoundError):
    """Raised when no agent is registered under a uid."""


class RelationshipNotFoundError(_NotFoundError):
    """Raised when no relationship exists between two agents."""


class TraitNotFoundError(_NotFoundError):
    """Raised when a trait id is not in the library or on an entity."""


class StatNotFoundError(_NotFoundError):
    """Raised when an entity has no stat with the given name."""


class SchemaNotFoundError(_NotFoundError):
    """Raised when no agent or relationship schema matches a type."""


class SocialRuleNotFoundError(_NotFoundError):
    """Raised when a social rule id is not registered."""


class SocialEventNotFoundError(_NotFoundError):
    """Raised when no social event matches a name and role count."""


class EffectFactoryNotFoundError(_NotFoundError):
    """Raised when an effect string names an unknown factory."""


class TraitTypeError(TDRSError, TypeError):
    """Raised when an agent trait is added to a relationship or vice versa."""


class DuplicateEntityError(TDRSError, ValueError):
    """Raised when an agent or relationship is registered twice."""


class EffectArgumentError(TDRSError, ValueError):
    """Raised when an effect string has bad arguments."""


class EffectInstantiationError(TDRSError, RuntimeError):
    """Raised when an event's effects cannot be created or applied.

    The original exception is kept as __cause__.
    """

    def __init__(self, event_name: str, message: str):
        self.event_name = event_name
        super().__init__(
            f"Error encountered while instantiating effects for '{event_name}' event: {message}"
        )
