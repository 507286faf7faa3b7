"""Tests for Loguru logging setup."""

import json
import sys

import pytest
from loguru import logger

from engagerr.config import LoggingConfig
from engagerr.utils.logger import get_logger, setup_logging


@pytest.fixture
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


class TestSetupLogging:
    """Tests for sink configuration."""

    def test_file_sink_writes_json_with_content_id(self, tmp_path, restore_logger):
        setup_logging(LoggingConfig(level="DEBUG", log_dir=str(tmp_path), compression="gz"))

        get_logger("engagerr.tests", content_id="podcast_42").warning("Orphan detected")
        get_logger("engagerr.tests").info("No content bound")
        logger.complete()

        [log_file] = list(tmp_path.glob("engagerr_*.log"))
        records = [json.loads(line)["record"] for line in log_file.read_text().splitlines()]

        assert records[0]["message"] == "Orphan detected"
        assert records[0]["extra"]["content_id"] == "podcast_42"
        assert records[0]["extra"]["module"] == "engagerr.tests"
        assert records[1]["extra"]["content_id"] == "-"

    def test_console_only(self, tmp_path, restore_logger):
        setup_logging(LoggingConfig(log_to_file=False, log_dir=str(tmp_path / "logs")))

        get_logger(__name__).info("console only")

        assert not (tmp_path / "logs").exists()
