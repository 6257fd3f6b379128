"""Command-line access to Trello custom fields.

Usage:
    export TRELLO_API_KEY="your-key"
    export TRELLO_TOKEN="your-token"

    # Show the custom fields defined on a board
    python3 -m pytrello fields Bm0nnz1R

    # Show a card's custom field values by field name
    python3 -m pytrello card-fields 57f5183c691585658d408681

    # Set a value (the field's type is looked up unless --type is given)
    python3 -m pytrello set-field <card-id> <field-id> 42
    python3 -m pytrello set-field <card-id> <field-id> 2021-06-01T10:00:00Z --type date

    # Clear a value
    python3 -m pytrello set-field <card-id> <field-id> ""
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from pytrello.client import TrelloClient
from pytrello.config import load_config
from pytrello.custom_fields import parse_number
from pytrello.exceptions import CustomFieldError, TrelloAPIError
from pytrello.logging_config import setup_logging
from pytrello.models import parse_timestamp

logger = logging.getLogger("pytrello.cli")

FIELD_TYPES = ("text", "number", "date", "checkbox")
TRUE_WORDS = {"true", "yes", "y", "1", "on"}
FALSE_WORDS = {"false", "no", "n", "0", "off"}


def convert_value(raw: str, field_type: str) -> Any:
    """Turn a command-line string into the Python value for a field type

    Raises:
        ValueError: If ``raw`` is not valid for ``field_type``
    """
    if raw == "":
        return ""
    if field_type == "text":
        return raw
    if field_type == "number":
        return parse_number(raw)
    if field_type == "date":
        try:
            parsed = parse_timestamp(raw)
        except ValueError as e:
            raise ValueError(f"Not a date: {raw!r} (use YYYY-MM-DDTHH:MM:SSZ)") from e
        return parsed
    if field_type == "checkbox":
        word = raw.lower()
        if word in TRUE_WORDS:
            return True
        if word in FALSE_WORDS:
            return False
        raise ValueError(f"Not a checkbox value: {raw!r} (use true or false)")
    raise ValueError(f"Cannot set fields of type '{field_type}' from the command line")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pytrello",
        description="Inspect and set Trello custom fields",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Log every request")
    verbosity.add_argument("--quiet", "-q", action="store_true", help="Only log errors")
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument("--env-file", help="Read credentials from this .env file")

    commands = parser.add_subparsers(dest="command", required=True)

    fields_cmd = commands.add_parser("fields", help="List a board's custom fields")
    fields_cmd.add_argument("board_id")

    card_cmd = commands.add_parser("card-fields", help="Show a card's custom field values")
    card_cmd.add_argument("card_id")

    set_cmd = commands.add_parser("set-field", help="Set a custom field on a card")
    set_cmd.add_argument("card_id")
    set_cmd.add_argument("field_id")
    set_cmd.add_argument("value")
    set_cmd.add_argument("--type", choices=FIELD_TYPES, help="Field type (looked up if omitted)")

    return parser


def show_board_fields(client: TrelloClient, board_id: str) -> None:
    board = client.get_board(board_id, {"fields": "name"})
    fields = board.get_custom_fields()
    logger.info(f"Custom fields on '{board.name}': {len(fields)}")
    for cf in sorted(fields, key=lambda f: f.pos):
        logger.info(f"  {cf.id}  {cf.type:<8}  {cf.name}")
        for option in cf.options:
            logger.info(f"      - {option.text} ({option.id})")


def show_card_fields(client: TrelloClient, card_id: str) -> None:
    card = client.get_card(card_id, {"customFieldItems": "true"})
    board = client.get_board(card.id_board, {"fields": "name"})
    values = card.custom_fields(board.get_custom_fields())
    if not values:
        logger.info(f"Card '{card.name}' has no custom field values")
        return
    for name, value in values.items():
        logger.info(f"  {name}: {value}")


def set_field(
    client: TrelloClient, card_id: str, field_id: str, raw: str, field_type: str | None
) -> None:
    if field_type is None:
        field_type = client.get_custom_field(field_id).type
    value = convert_value(raw, field_type)
    client.set_custom_field(card_id, field_id, value)
    if value == "":
        logger.info(f"Cleared field {field_id} on card {card_id}")
    else:
        logger.info(f"Set field {field_id} on card {card_id} to {value}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    log_level = "DEBUG" if args.verbose else "ERROR" if args.quiet else "INFO"
    setup_logging(log_level, args.log_file)

    try:
        config = load_config(args.env_file)
    except ValueError as e:
        logger.error(f"Error: {e}")
        return 1

    client = TrelloClient.from_config(config)

    try:
        if args.command == "fields":
            show_board_fields(client, args.board_id)
        elif args.command == "card-fields":
            show_card_fields(client, args.card_id)
        elif args.command == "set-field":
            set_field(client, args.card_id, args.field_id, args.value, args.type)
    except (CustomFieldError, ValueError) as e:
        logger.error(f"Error: {e}")
        return 1
    except TrelloAPIError as e:
        logger.error(f"Trello API error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
