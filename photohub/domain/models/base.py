"""
Base entity and domain exceptions.
This module contains the foundational classes for all domain entities.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from abc import ABC
from dataclasses import dataclass, field
from enum import Enum
import uuid


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Visibility(str, Enum):
    """Who may view a photo, album or image."""
    PUBLIC = "Public"
    PRIVATE = "Private"


@dataclass
class BaseEntity(ABC):
    """
    Base class for all domain entities.
    Entities are identified by a UUID and compared by it.
    """

    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=utc_now)

    def __eq__(self, other: Any) -> bool:
        """Entities are equal if they have the same ID and are of the same type."""
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, self.id))

    def validate(self) -> None:
        """
        Validate the entity's state.
        Should be overridden by subclasses to implement specific validation rules.
        Raises ValidationError if the entity is in an invalid state.
        """
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert entity to dictionary representation."""
        data = {}
        for key, value in self.__dict__.items():
            if key.startswith('_'):
                continue
            if isinstance(value, datetime):
                data[key] = value.isoformat()
            elif isinstance(value, uuid.UUID):
                data[key] = str(value)
            elif isinstance(value, Enum):
                data[key] = value.value
            elif isinstance(value, BaseEntity):
                data[key] = value.to_dict()
            else:
                data[key] = value
        return data


class DomainException(Exception):
    """Base exception for domain errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class ValidationError(DomainException):
    """Exception raised when entity validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, "VALIDATION_ERROR")
        self.field = field


class EntityNotFoundError(DomainException):
    """Exception raised when an entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any):
        message = f"{entity_type} with id {entity_id} not found"
        super().__init__(message, "ENTITY_NOT_FOUND")
        self.entity_type = entity_type
        self.entity_id = entity_id


class AuthorizationDenied(DomainException):
    """The policy server evaluated the request and said no."""

    def __init__(self, message: str, code: str):
        super().__init__(message, code)


class UnauthorizedToView(AuthorizationDenied):

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(
            f"Unauthorized to view {entity_type.lower()} with id {entity_id}",
            "UNAUTHORIZED_TO_VIEW"
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class UnauthorizedToCreate(AuthorizationDenied):

    def __init__(self, entity_type: str):
        super().__init__(
            f"Unauthorized to create {entity_type.lower()}",
            "UNAUTHORIZED_TO_CREATE"
        )
        self.entity_type = entity_type


class UnauthorizedToEdit(AuthorizationDenied):

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(
            f"Unauthorized to edit {entity_type.lower()} with id {entity_id}",
            "UNAUTHORIZED_TO_EDIT"
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class UnsupportedOperationError(DomainException):
    """Exception raised for requests the service recognises but cannot carry out."""

    def __init__(self, message: str):
        super().__init__(message, "UNSUPPORTED_OPERATION")
