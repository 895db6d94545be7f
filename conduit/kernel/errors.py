"""
Domain error taxonomy.

Every failure a handler can report maps to exactly one of these. The HTTP
layer renders them; nothing below the API layer knows about status codes
beyond the ``status_code`` attribute carried here.
"""

from typing import Dict, Iterable, List, Mapping, Tuple, Union


class ConduitError(Exception):
    """Base class for errors rendered with a specific HTTP status."""

    status_code: int = 500
    detail: str = "Internal server error"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.detail)
        if detail is not None:
            self.detail = detail


class NotFoundError(ConduitError):
    """The addressed resource does not exist."""

    status_code = 404
    detail = "Resource not found"


class ForbiddenError(ConduitError):
    """The resource exists but the caller may not perform this action."""

    status_code = 403
    detail = "Forbidden"


class UnauthorizedError(ConduitError):
    """No valid credential was presented."""

    status_code = 401
    detail = "Not authenticated"


class InternalError(ConduitError):
    """Corrupt state or an unexpected failure; never attributed to the caller."""

    status_code = 500
    detail = "Internal server error"


FieldErrors = Union[Mapping[str, Union[str, Iterable[str]]], Iterable[Tuple[str, str]]]


class UnprocessableEntityError(ConduitError):
    """
    Input that was well-formed but rejected, addressed by field.

    Accepts either a mapping or an iterable of ``(field, message)`` pairs::

        UnprocessableEntityError({"slug": "duplicate article slug: hello"})
        UnprocessableEntityError([("email", "email taken")])
    """

    status_code = 422
    detail = "Unprocessable entity"

    def __init__(self, errors: FieldErrors):
        self.errors: Dict[str, List[str]] = {}
        pairs = errors.items() if isinstance(errors, Mapping) else errors
        for field, messages in pairs:
            if isinstance(messages, str):
                messages = [messages]
            self.errors.setdefault(field, []).extend(messages)
        super().__init__("; ".join(
            f"{field}: {', '.join(msgs)}" for field, msgs in self.errors.items()
        ))
