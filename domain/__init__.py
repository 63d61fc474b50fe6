"""Domain layer exports."""

from domain.exceptions import DomainError, ObjectNotFoundError, ValidationError
from domain.value_objects import (
    AclPolicy,
    ObjectPermission,
    Visibility,
    guess_content_type,
)

__all__ = [
    "AclPolicy",
    "DomainError",
    "ObjectNotFoundError",
    "ObjectPermission",
    "ValidationError",
    "Visibility",
    "guess_content_type",
]
