"""
Unit tests for the config module.

Tests programmatic settings, environment variable overrides and resetting.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

import oak.config as config


@pytest.mark.core
class TestSchemaDirConfiguration:
    """Test schema directory resolution."""

    def test_default_is_bundled_schemas(self):
        with patch.dict(os.environ, {}, clear=True):
            schema_dir = config.get_schema_dir()

        assert schema_dir == config.DEFAULT_SCHEMA_DIR
        assert (schema_dir / "agent-card.schema.json").is_file()

    def test_schema_dir_from_env(self):
        with patch.dict(os.environ, {"OAK_SCHEMA_DIR": "/srv/oak/schemas"}):
            assert config.get_schema_dir() == Path("/srv/oak/schemas")

    def test_explicit_schema_dir_wins_over_env(self):
        config.set_schema_dir("/opt/schemas")

        with patch.dict(os.environ, {"OAK_SCHEMA_DIR": "/srv/oak/schemas"}):
            assert config.get_schema_dir() == Path("/opt/schemas")

    def test_clearing_schema_dir(self):
        config.set_schema_dir("/opt/schemas")
        config.set_schema_dir(None)

        with patch.dict(os.environ, {}, clear=True):
            assert config.get_schema_dir() == config.DEFAULT_SCHEMA_DIR


@pytest.mark.core
class TestLogLevelConfiguration:
    def test_default_log_level(self):
        with patch.dict(os.environ, {}, clear=True):
            assert config.get_log_level() == "INFO"

    def test_set_log_level_normalizes_case(self):
        config.set_log_level("debug")

        assert config.get_log_level() == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            config.set_log_level("chatty")

    def test_log_level_from_env(self):
        with patch.dict(os.environ, {"OAK_LOG_LEVEL": "warning"}):
            assert config.get_log_level() == "WARNING"

    def test_unknown_env_log_level_falls_back_to_default(self):
        with patch.dict(os.environ, {"OAK_LOG_LEVEL": "loud"}):
            assert config.get_log_level() == "INFO"


@pytest.mark.core
class TestFetchTimeoutConfiguration:
    def test_default_timeout(self):
        with patch.dict(os.environ, {}, clear=True):
            assert config.get_fetch_timeout() == 10.0

    def test_set_timeout(self):
        config.set_fetch_timeout(2.5)

        assert config.get_fetch_timeout() == 2.5

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ValueError, match="must be positive"):
            config.set_fetch_timeout(0)

    def test_timeout_from_env(self):
        with patch.dict(os.environ, {"OAK_FETCH_TIMEOUT": "30"}):
            assert config.get_fetch_timeout() == 30.0

    def test_invalid_timeout_from_env(self):
        with patch.dict(os.environ, {"OAK_FETCH_TIMEOUT": "soon"}):
            with pytest.raises(ValueError, match="must be a number"):
                config.get_fetch_timeout()

        with patch.dict(os.environ, {"OAK_FETCH_TIMEOUT": "-1"}):
            with pytest.raises(ValueError, match="must be positive"):
                config.get_fetch_timeout()


@pytest.mark.core
class TestSiteDirConfiguration:
    def test_default_output_dir(self):
        with patch.dict(os.environ, {}, clear=True):
            assert config.get_default_output_dir("oak") == Path("oak") / "site"

    def test_site_dir_name_from_env(self):
        with patch.dict(os.environ, {"OAK_SITE_DIR_NAME": "public"}):
            assert config.get_default_output_dir("/data/oak") == Path("/data/oak/public")


@pytest.mark.core
def test_reset_config():
    """Test resetting configuration."""
    config.set_schema_dir("/opt/schemas")
    config.set_log_level("ERROR")
    config.set_fetch_timeout(1)

    config.reset_config()

    with patch.dict(os.environ, {}, clear=True):
        assert config.get_schema_dir() == config.DEFAULT_SCHEMA_DIR
        assert config.get_log_level() == "INFO"
        assert config.get_fetch_timeout() == 10.0
