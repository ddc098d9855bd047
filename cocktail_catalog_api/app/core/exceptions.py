"""
Error taxonomy for catalog operations.

Every failure a caller can see is one of the classes below, each
carrying a single human-readable ``message``.  Validation and
authentication errors are raised before any remote call is made;
collaborator errors wrap whatever the hosted backend reported and
pass its message through unchanged.
"""

from typing import Optional


class CatalogError(Exception):
    """Base class for all errors raised by the catalog services."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(CatalogError):
    """Input has the wrong shape or is out of range."""

    status_code = 400


class AuthRequiredError(CatalogError):
    """The action needs a logged-in user."""

    status_code = 401

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class OwnershipError(CatalogError):
    """The acting user does not own the record.

    Client-side ownership checks are advisory only; the backend's
    access policy remains the real boundary.
    """

    status_code = 403

    def __init__(self, item_id: str, user_id: Optional[str] = None) -> None:
        self.item_id = item_id
        self.user_id = user_id
        super().__init__(f"Only the owner can modify cocktail {item_id}")


class NotFoundError(CatalogError):
    """A referenced record does not exist."""

    status_code = 404

    def __init__(self, kind: str, identifier: str) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind.capitalize()} {identifier} not found")


class DuplicateSubmissionError(CatalogError):
    """The same action is already being submitted from the same place."""

    status_code = 409

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"'{action}' is already being submitted")


class CollaboratorError(CatalogError):
    """The storage or auth backend failed, timed out or was unreachable."""

    status_code = 500

    def __init__(self, message: str, original: Optional[BaseException] = None) -> None:
        self.original = original
        super().__init__(message)


def describe_validation_error(exc: Exception) -> str:
    """Flatten a pydantic validation error into one readable sentence."""
    errors = getattr(exc, "errors", None)
    if not callable(errors):
        return str(exc)
    parts = []
    for error in errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or str(exc)
