"""
Unit tests for the pytrello command line
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

# Add parent directory to path to import pytrello module
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from pytrello import (
    Board,
    Card,
    CustomField,
    CustomFieldItem,
    CustomFieldValue,
    NumberConversionError,
    TrelloConfig,
    TrelloNotFoundError,
)
from pytrello.cli import build_parser, convert_value, main

CONFIG = TrelloConfig(api_key="k", token="t")


@pytest.fixture
def mock_config():
    with patch("pytrello.cli.load_config", return_value=CONFIG) as mock_load:
        yield mock_load


class TestConvertValue:
    """Test conversion of command-line strings per field type"""

    def test_text(self):
        assert convert_value("hello", "text") == "hello"

    def test_number(self):
        assert convert_value("42", "number") == 42
        assert convert_value("2.5", "number") == 2.5

    def test_bad_number(self):
        with pytest.raises(NumberConversionError):
            convert_value("lots", "number")

    def test_date(self):
        assert convert_value("2021-06-01T10:00:00Z", "date") == datetime(
            2021, 6, 1, 10, 0, tzinfo=timezone.utc
        )

    def test_bad_date(self):
        with pytest.raises(ValueError, match="Not a date"):
            convert_value("tomorrow", "date")

    @pytest.mark.parametrize("raw,expected", [("true", True), ("Yes", True), ("0", False)])
    def test_checkbox(self, raw, expected):
        assert convert_value(raw, "checkbox") is expected

    def test_bad_checkbox(self):
        with pytest.raises(ValueError, match="Not a checkbox value"):
            convert_value("maybe", "checkbox")

    def test_empty_clears_any_type(self):
        assert convert_value("", "number") == ""

    def test_dropdown_not_supported(self):
        with pytest.raises(ValueError, match="type 'list'"):
            convert_value("Option A", "list")


class TestParser:
    def test_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_set_field_arguments(self):
        args = build_parser().parse_args(["-v", "set-field", "c1", "f1", "3", "--type", "number"])
        assert args.verbose is True
        assert (args.card_id, args.field_id, args.value, args.type) == ("c1", "f1", "3", "number")


class TestMain:
    """Test main() end to end with a mocked client"""

    def test_missing_credentials(self):
        with patch("pytrello.cli.load_config", side_effect=ValueError("Missing")):
            assert main(["fields", "b1"]) == 1

    def test_set_field_with_explicit_type(self, mock_config):
        with patch("pytrello.cli.TrelloClient.set_custom_field") as mock_set:
            assert main(["-q", "set-field", "c1", "f1", "7", "--type", "number"]) == 0

        mock_set.assert_called_once_with("c1", "f1", 7)

    def test_set_field_looks_up_type(self, mock_config):
        field = CustomField(id="f1", name="Done", type="checkbox")
        with (
            patch("pytrello.cli.TrelloClient.get_custom_field", return_value=field),
            patch("pytrello.cli.TrelloClient.set_custom_field") as mock_set,
        ):
            assert main(["-q", "set-field", "c1", "f1", "yes"]) == 0

        mock_set.assert_called_once_with("c1", "f1", True)

    def test_set_field_bad_value(self, mock_config):
        with patch("pytrello.cli.TrelloClient.set_custom_field") as mock_set:
            assert main(["-q", "set-field", "c1", "f1", "abc", "--type", "number"]) == 1

        mock_set.assert_not_called()

    def test_api_error(self, mock_config):
        with patch(
            "pytrello.cli.TrelloClient.get_board",
            side_effect=TrelloNotFoundError("Resource not found: boards/b1", status_code=404),
        ):
            assert main(["-q", "fields", "b1"]) == 1

    def test_fields(self, mock_config):
        board = MagicMock(spec=Board)
        board.name = "Roadmap"
        board.get_custom_fields.return_value = [CustomField(id="f1", name="Estimate", type="number")]
        with patch("pytrello.cli.TrelloClient.get_board", return_value=board):
            assert main(["-q", "fields", "b1"]) == 0

        board.get_custom_fields.assert_called_once()

    def test_card_fields(self, mock_config):
        card = Card(
            id="c1",
            id_board="b1",
            custom_field_items=[
                CustomFieldItem(value=CustomFieldValue(3), id_custom_field="f1")
            ],
        )
        board = MagicMock(spec=Board)
        board.get_custom_fields.return_value = [CustomField(id="f1", name="Estimate")]
        with (
            patch("pytrello.cli.TrelloClient.get_card", return_value=card),
            patch("pytrello.cli.TrelloClient.get_board", return_value=board) as mock_board,
        ):
            assert main(["-q", "card-fields", "c1"]) == 0

        assert mock_board.call_args.args[0] == "b1"
        assert card.custom_fields([]) == {"Estimate": 3}
