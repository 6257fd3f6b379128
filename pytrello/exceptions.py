"""Custom exception classes for pytrello.

This module defines the exception hierarchy for Trello API transport errors
and for custom field value encoding/decoding errors.
"""

from __future__ import annotations


class TrelloAPIError(Exception):
    """Base exception for Trello API errors"""

    def __init__(
        self, message: str, status_code: int | None = None, response_text: str | None = None
    ):
        self.status_code = status_code
        self.response_text = response_text
        super().__init__(message)


class TrelloAuthenticationError(TrelloAPIError):
    """Raised when API credentials are invalid or expired (401/403)"""

    pass


class TrelloNotFoundError(TrelloAPIError):
    """Raised when a board, card, or resource is not found (404)"""

    pass


class TrelloRateLimitError(TrelloAPIError):
    """Raised when rate limit is exceeded (429) after retries"""

    pass


class TrelloServerError(TrelloAPIError):
    """Raised when Trello's servers return an error (500/502/503/504)"""

    pass


def is_not_found(err: BaseException | None) -> bool:
    """Return True if ``err`` reports a missing resource."""
    return isinstance(err, TrelloNotFoundError)


def is_permission_denied(err: BaseException | None) -> bool:
    """Return True if ``err`` reports a 403 (token lacks access)."""
    return isinstance(err, TrelloAuthenticationError) and err.status_code == 403


class CustomFieldError(Exception):
    """Base exception for custom field value errors.

    None of these are retried: the value (or item) itself is wrong, so
    repeating the request would fail the same way.
    """

    pass


class UnsupportedTypeError(CustomFieldError):
    """Raised when a value has no custom field wire mapping.

    Attributes:
        value_type: Name of the offending Python type
    """

    def __init__(self, value_type: str):
        self.value_type = value_type
        super().__init__(f"unsupported type: {value_type}")


class UnresolvableSourceError(CustomFieldError):
    """Raised when a lazily-resolved value cannot be turned into a primitive.

    The resolver's own exception, if any, is available as ``__cause__``.
    """

    pass


class CustomFieldDecodeError(CustomFieldError):
    """Raised when a wire value received from Trello cannot be decoded"""

    def __init__(self, message: str, raw: object = None):
        self.raw = raw
        super().__init__(message)


class DateParseError(CustomFieldDecodeError):
    """Raised when a ``date`` wire field does not match ``YYYY-MM-DDTHH:MM:SSZ``"""

    pass


class NumberConversionError(CustomFieldDecodeError):
    """Raised when a ``number`` wire field is not an integer or a float"""

    def __init__(self, raw: str):
        super().__init__(f"cannot convert {raw} to number", raw=raw)


class UnsupportedModelTypeError(CustomFieldError):
    """Raised when a custom field item targets anything other than a card.

    Attributes:
        model_type: The rejected ``modelType`` tag
    """

    def __init__(self, model_type: str):
        self.model_type = model_type
        super().__init__(f"unsupported model type: {model_type}")
