class ContentError(Exception):
    """Base for failures surfaced to the user as a dismissible notification."""

    kind = "error"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(ContentError):
    """A required form field is missing; raised before any network call."""

    kind = "validation"


class GenerationError(ContentError):
    """The Generation Service failed; `message` is the provider's text, verbatim."""

    kind = "generation"


class PersistenceError(ContentError):
    """A Backend Data Service read, write or delete failed (including a missing session)."""

    kind = "persistence"
