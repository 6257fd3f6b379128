"""
Unit tests for the exception hierarchy
"""

import sys
from pathlib import Path

# Add parent directory to path to import pytrello module
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from pytrello import (
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


class TestTrelloAPIErrors:
    """Test API error classes"""

    def test_trello_api_error_base_exception(self):
        """Should create base TrelloAPIError with metadata"""
        error = TrelloAPIError("Test error", status_code=400, response_text="Bad request")

        assert str(error) == "Test error"
        assert error.status_code == 400
        assert error.response_text == "Bad request"

    def test_defaults(self):
        error = TrelloAPIError("Network down")
        assert error.status_code is None
        assert error.response_text is None

    def test_subclasses(self):
        for cls in (
            TrelloAuthenticationError,
            TrelloNotFoundError,
            TrelloRateLimitError,
            TrelloServerError,
        ):
            assert issubclass(cls, TrelloAPIError)

    def test_is_not_found(self):
        assert is_not_found(TrelloNotFoundError("gone", status_code=404))
        assert not is_not_found(TrelloAPIError("other", status_code=400))
        assert not is_not_found(None)

    def test_is_permission_denied(self):
        assert is_permission_denied(TrelloAuthenticationError("no", status_code=403))
        assert not is_permission_denied(TrelloAuthenticationError("bad key", status_code=401))
        assert not is_permission_denied(TrelloNotFoundError("gone", status_code=404))


class TestCustomFieldErrors:
    """Test codec error classes"""

    def test_hierarchy(self):
        for cls in (
            UnsupportedTypeError,
            UnresolvableSourceError,
            CustomFieldDecodeError,
            UnsupportedModelTypeError,
        ):
            assert issubclass(cls, CustomFieldError)
        assert issubclass(DateParseError, CustomFieldDecodeError)
        assert issubclass(NumberConversionError, CustomFieldDecodeError)

    def test_custom_field_errors_are_not_api_errors(self):
        assert not issubclass(CustomFieldError, TrelloAPIError)

    def test_unsupported_type_message(self):
        error = UnsupportedTypeError("list")
        assert str(error) == "unsupported type: list"
        assert error.value_type == "list"

    def test_number_conversion_message(self):
        error = NumberConversionError("abc")
        assert str(error) == "cannot convert abc to number"
        assert error.raw == "abc"

    def test_unsupported_model_type_message(self):
        error = UnsupportedModelTypeError("board")
        assert str(error) == "unsupported model type: board"
        assert error.model_type == "board"
