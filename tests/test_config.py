"""
Unit tests for configuration module.

Tests configuration loading, path resolution, and validation.
"""

import os
import logging
from pathlib import Path
from unittest.mock import patch
from config import Config, get_config


class TestConfig:
    """Test suite for Config class."""

    def test_default_configuration(self):
        """Test that default configuration values are set correctly."""
        with patch.dict(os.environ, {}, clear=True):
            config = Config()

            assert config.log_level == "INFO"
            assert config.log_file is None
            assert config.server_name == "pipeline-mcp-server"
            assert config.follow_up_days == 45
            assert config.include_applications is True

            assert config._repo_root.exists()
            assert config._repo_root.is_dir()

    def test_db_path_from_env_absolute(self):
        """Test database path resolution from PIPELINE_DB (absolute)."""
        test_path = "/absolute/path/to/pipeline.db"
        with patch.dict(os.environ, {"PIPELINE_DB": test_path}, clear=True):
            config = Config()
            assert str(config.db_path) == test_path

    def test_db_path_from_env_relative(self):
        """Test database path resolution from PIPELINE_DB (relative)."""
        with patch.dict(os.environ, {"PIPELINE_DB": "custom/pipeline.db"}, clear=True):
            config = Config()
            assert config.db_path.name == "pipeline.db"
            assert config.db_path.is_absolute()
            assert "custom" in str(config.db_path)

    def test_db_path_from_pipeline_root(self):
        """Test database path resolution from PIPELINE_ROOT."""
        with patch.dict(os.environ, {"PIPELINE_ROOT": "/opt/pipeline"}, clear=True):
            config = Config()
            assert config.db_path == Path("/opt/pipeline") / "data" / "pipeline.db"

    def test_db_path_default(self):
        """Test default database path resolution."""
        with patch.dict(os.environ, {}, clear=True):
            config = Config()
            assert config.db_path == config._repo_root / "data" / "pipeline.db"

    def test_db_path_priority(self):
        """Test that PIPELINE_DB takes priority over PIPELINE_ROOT."""
        with patch.dict(
            os.environ, {"PIPELINE_DB": "/custom/db.db", "PIPELINE_ROOT": "/opt/pipeline"}, clear=True
        ):
            config = Config()
            assert str(config.db_path) == "/custom/db.db"

    def test_log_level_case_insensitive(self):
        """Test that log level is converted to uppercase."""
        with patch.dict(os.environ, {"PIPELINE_LOG_LEVEL": "debug"}, clear=True):
            config = Config()
            assert config.log_level == "DEBUG"

    def test_log_file_from_env_relative(self):
        """Test log file path from environment (relative)."""
        with patch.dict(os.environ, {"PIPELINE_LOG_FILE": "logs/server.log"}, clear=True):
            config = Config()
            assert config.log_file.name == "server.log"
            assert config.log_file.is_absolute()

    def test_server_name_from_env(self):
        """Test server name configuration from environment."""
        with patch.dict(os.environ, {"PIPELINE_SERVER_NAME": "custom-server"}, clear=True):
            config = Config()
            assert config.server_name == "custom-server"

    def test_follow_up_days_from_env(self):
        with patch.dict(os.environ, {"PIPELINE_FOLLOW_UP_DAYS": "30"}, clear=True):
            assert Config().follow_up_days == 30

    def test_follow_up_days_invalid_falls_back(self):
        with patch.dict(os.environ, {"PIPELINE_FOLLOW_UP_DAYS": "soon"}, clear=True):
            assert Config().follow_up_days == 45

    def test_include_applications_from_env(self):
        with patch.dict(os.environ, {"PIPELINE_INCLUDE_APPLICATIONS": "false"}, clear=True):
            assert Config().include_applications is False
        with patch.dict(os.environ, {"PIPELINE_INCLUDE_APPLICATIONS": "YES"}, clear=True):
            assert Config().include_applications is True

    def test_validate_missing_database(self, tmp_path):
        """Test validation warns when database doesn't exist."""
        non_existent = tmp_path / "missing.db"
        with patch.dict(os.environ, {"PIPELINE_DB": str(non_existent)}, clear=True):
            warnings = Config().validate()

            assert len(warnings) > 0
            assert "Database file not found" in warnings[0]
            assert str(non_existent) in warnings[0]

    def test_validate_existing_database(self, tmp_path):
        """Test validation passes when database exists."""
        db_file = tmp_path / "test.db"
        db_file.touch()

        with patch.dict(os.environ, {"PIPELINE_DB": str(db_file)}, clear=True):
            assert Config().validate() == []

    def test_validate_negative_follow_up(self, tmp_path):
        db_file = tmp_path / "test.db"
        db_file.touch()

        with patch.dict(
            os.environ,
            {"PIPELINE_DB": str(db_file), "PIPELINE_FOLLOW_UP_DAYS": "-3"},
            clear=True,
        ):
            warnings = Config().validate()
            assert any("PIPELINE_FOLLOW_UP_DAYS" in w for w in warnings)

    def test_setup_logging_default(self):
        """Test logging setup with default configuration."""
        with patch.dict(os.environ, {}, clear=True):
            Config().setup_logging()

            root_logger = logging.getLogger()
            assert root_logger.level == logging.INFO
            assert len(root_logger.handlers) >= 1

    def test_setup_logging_with_file(self, tmp_path):
        """Test logging setup with file output."""
        log_file = tmp_path / "nested" / "test.log"

        with patch.dict(
            os.environ,
            {"PIPELINE_LOG_FILE": str(log_file), "PIPELINE_LOG_LEVEL": "DEBUG"},
            clear=True,
        ):
            Config().setup_logging()

            root_logger = logging.getLogger()
            assert root_logger.level == logging.DEBUG
            assert len(root_logger.handlers) >= 2
            assert log_file.parent.is_dir()

    def test_setup_logging_invalid_level(self):
        """Test that an unknown log level falls back to INFO."""
        with patch.dict(os.environ, {"PIPELINE_LOG_LEVEL": "CHATTY"}, clear=True):
            Config().setup_logging()
            assert logging.getLogger().level == logging.INFO

    def test_get_config_returns_global_instance(self):
        assert get_config() is get_config()
