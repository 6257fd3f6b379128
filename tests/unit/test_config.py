"""
Unit tests for configuration loading
"""

import os
import sys
from pathlib import Path
from unittest.mock import patch

# Add parent directory to path to import pytrello module
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from pytrello import TrelloConfig, load_config
from pytrello.config import load_env_file


@pytest.fixture
def clean_env(tmp_path):
    """Environment without TRELLO_* variables, pointing at a missing .env"""
    env = {k: v for k, v in os.environ.items() if not k.startswith("TRELLO_")}
    env["TRELLO_ENV_FILE"] = str(tmp_path / "missing.env")
    with patch.dict(os.environ, env, clear=True):
        yield


class TestLoadConfig:
    """Test load_config() from environment variables and .env files"""

    def test_from_environment(self, clean_env):
        os.environ["TRELLO_API_KEY"] = "key123"
        os.environ["TRELLO_TOKEN"] = "token456"

        config = load_config()

        assert config.api_key == "key123"
        assert config.token == "token456"
        assert config.base_url == "https://api.trello.com/1"
        assert config.timeout == 30.0

    def test_missing_credentials(self, clean_env):
        with pytest.raises(ValueError, match="TRELLO_API_KEY and TRELLO_TOKEN"):
            load_config()

    def test_optional_settings(self, clean_env):
        os.environ.update(
            {
                "TRELLO_API_KEY": "k",
                "TRELLO_TOKEN": "t",
                "TRELLO_BASE_URL": "http://localhost:9000/1",
                "TRELLO_TIMEOUT": "5",
            }
        )

        config = load_config()

        assert config.base_url == "http://localhost:9000/1"
        assert config.timeout == 5.0

    def test_invalid_timeout(self, clean_env):
        os.environ.update({"TRELLO_API_KEY": "k", "TRELLO_TOKEN": "t", "TRELLO_TIMEOUT": "soon"})

        with pytest.raises(ValueError, match="TRELLO_TIMEOUT"):
            load_config()

    def test_from_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# Trello credentials\n"
            "TRELLO_API_KEY=filekey\n"
            "\n"
            'TRELLO_TOKEN="filetoken"\n'
        )

        config = load_config(env_file)

        assert config.api_key == "filekey"
        assert config.token == "filetoken"

    def test_environment_wins_over_env_file(self, clean_env, tmp_path):
        os.environ["TRELLO_API_KEY"] = "envkey"
        env_file = tmp_path / ".env"
        env_file.write_text("TRELLO_API_KEY=filekey\nTRELLO_TOKEN=filetoken\n")

        config = load_config(env_file)

        assert config.api_key == "envkey"
        assert config.token == "filetoken"

    def test_repr_hides_credentials(self):
        config = TrelloConfig(api_key="secretkey", token="secrettoken")
        assert "secret" not in repr(config)


class TestLoadEnvFile:
    def test_missing_file(self, tmp_path):
        assert load_env_file(tmp_path / "nope.env") == 0

    def test_skips_malformed_lines(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("not a pair\nTRELLO_X=1\n#TRELLO_Y=2\n")

        assert load_env_file(env_file) == 1
        assert os.environ["TRELLO_X"] == "1"
        assert "TRELLO_Y" not in os.environ
