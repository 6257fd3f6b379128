"""
Shared pytest fixtures for pytrello tests
"""
import json
from pathlib import Path

import pytest


@pytest.fixture
def fixtures_dir():
    """Return path to test fixtures directory"""
    return Path(__file__).parent / "fixtures"


def _load(fixtures_dir, name):
    with open(fixtures_dir / name) as f:
        return json.load(f)


@pytest.fixture
def card_fixture(fixtures_dir):
    """A single card as returned by GET cards/{id}"""
    return _load(fixtures_dir, "card.json")


@pytest.fixture
def list_cards_fixture(fixtures_dir):
    """Cards of a list, requested with customFieldItems=true"""
    return _load(fixtures_dir, "list_cards.json")


@pytest.fixture
def board_custom_fields_fixture(fixtures_dir):
    """Custom field definitions of the board the list cards live on"""
    return _load(fixtures_dir, "board_custom_fields.json")


@pytest.fixture
def board_copy_actions_fixture(fixtures_dir):
    """copyCard actions of a board"""
    return _load(fixtures_dir, "board_copy_actions.json")
