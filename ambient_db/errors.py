"""
Error types for ambient-db.

This module defines the exception types raised by the schema layer:
- AmbientDbError: Base exception
- DocumentDecodeError: Stored document does not match its declared shape
- UnboundCollectionError: Type or collection missing from the registry
- UnknownFieldError: Unknown field in a partial update

Invariants:
    - All errors inherit from AmbientDbError
    - Errors include context for debugging
    - Error messages are actionable

The fleet-label precondition of running-server ids is not represented here:
it is a programming mistake and surfaces as AssertionError.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any, Dict, List, Optional


class AmbientDbError(Exception):
    """Base exception for all ambient-db errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "AMBIENT_DB_ERROR"
        self.details = details or {}


class DocumentDecodeError(AmbientDbError):
    """A document could not be decoded into its declared type.

    Raised when:
    - A required field is missing
    - A field value has the wrong type
    - An enum value (region, state, content tag) is unknown

    Attributes:
        type_name: Name of the document type
        collection: Collection the type is bound to, if any
        errors: Per-field error descriptions
    """

    def __init__(
        self,
        type_name: str,
        collection: Optional[str] = None,
        errors: Optional[List[str]] = None,
    ) -> None:
        errors = errors or []
        where = f" (collection '{collection}')" if collection else ""
        msg = f"Failed to decode {type_name}{where}"
        if errors:
            msg += ": " + "; ".join(errors)
        super().__init__(
            msg,
            code="DECODE_ERROR",
            details={"type_name": type_name, "collection": collection, "errors": errors},
        )
        self.type_name = type_name
        self.collection = collection
        self.errors = errors


class UnboundCollectionError(AmbientDbError):
    """No collection binding exists for a type, or no type for a collection."""

    def __init__(self, message: str, target: Optional[str] = None) -> None:
        super().__init__(message, code="UNBOUND_COLLECTION", details={"target": target})
        self.target = target


class UnknownFieldError(AmbientDbError):
    """Unknown field in a partial update.

    Includes suggestions for similar field names.

    Attributes:
        field_name: The unknown field
        type_name: The document type being updated
        suggestions: Similar field names
    """

    def __init__(
        self,
        field_name: str,
        type_name: str,
        known_fields: Optional[List[str]] = None,
    ) -> None:
        suggestions = get_close_matches(field_name, known_fields or [], n=3)
        msg = f"Unknown field '{field_name}' in type '{type_name}'"
        if suggestions:
            msg += f". Did you mean: {', '.join(suggestions)}?"

        super().__init__(
            msg,
            code="UNKNOWN_FIELD",
            details={
                "field_name": field_name,
                "type_name": type_name,
                "suggestions": suggestions,
            },
        )
        self.field_name = field_name
        self.type_name = type_name
        self.suggestions = suggestions
