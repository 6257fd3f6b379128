"""Typed Python binding for the Trello REST API."""

from __future__ import annotations

# Import arguments helpers from extracted module
from pytrello.arguments import Arguments, defaults, flatten_arguments

# Import client from extracted module
from pytrello.client import TrelloClient

# Import configuration loading
from pytrello.config import TrelloConfig, load_config

# Import custom field codec and descriptors
from pytrello.custom_fields import (
    CustomField,
    CustomFieldItem,
    CustomFieldKind,
    CustomFieldOption,
    CustomFieldValue,
    Resolvable,
    WireValue,
    decode_value,
    encode_value,
)

# Import exceptions from extracted module
from pytrello.exceptions import (
    CustomFieldDecodeError,
    CustomFieldError,
    DateParseError,
    NumberConversionError,
    TrelloAPIError,
    TrelloAuthenticationError,
    TrelloNotFoundError,
    TrelloRateLimitError,
    TrelloServerError,
    UnresolvableSourceError,
    UnsupportedModelTypeError,
    UnsupportedTypeError,
    is_not_found,
    is_permission_denied,
)

# Import logging configuration
from pytrello.logging_config import setup_logging

# Import resource models
from pytrello.models import (
    Action,
    Attachment,
    Board,
    Card,
    CheckItem,
    CheckItemState,
    Checklist,
    Label,
    List,
    Member,
)

# Import rate limiter from extracted module
from pytrello.rate_limiter import RateLimiter

__version__ = "0.1.0"

__all__ = [
    # Client
    "TrelloClient",
    "TrelloConfig",
    "load_config",
    "RateLimiter",
    "Arguments",
    "defaults",
    "flatten_arguments",
    "setup_logging",
    # Custom fields
    "CustomField",
    "CustomFieldItem",
    "CustomFieldKind",
    "CustomFieldOption",
    "CustomFieldValue",
    "Resolvable",
    "WireValue",
    "decode_value",
    "encode_value",
    # Resources
    "Action",
    "Attachment",
    "Board",
    "Card",
    "CheckItem",
    "CheckItemState",
    "Checklist",
    "Label",
    "List",
    "Member",
    # Exceptions
    "TrelloAPIError",
    "TrelloAuthenticationError",
    "TrelloNotFoundError",
    "TrelloRateLimitError",
    "TrelloServerError",
    "CustomFieldError",
    "CustomFieldDecodeError",
    "DateParseError",
    "NumberConversionError",
    "UnresolvableSourceError",
    "UnsupportedModelTypeError",
    "UnsupportedTypeError",
    "is_not_found",
    "is_permission_denied",
]
