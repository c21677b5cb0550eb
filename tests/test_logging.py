"""Test logger setup and per-game message prefixes."""

import logging

from ice_analytics.ingestion.game_feed_io import GameDataUnavailable
from ice_analytics.pipelines.game_metrics import Subject
from ice_analytics.pipelines.season import compute_subject_analytics
from ice_analytics.utils.logging import game_logger, get_logger, resolve_level, setup_logger


def test_resolve_level():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level("WARNING") == logging.WARNING
    assert resolve_level("chatty") == logging.INFO


def test_setup_logger_with_file(tmp_path):
    """Test that the file handler receives debug messages."""
    log_file = tmp_path / "logs" / "engine.log"
    logger = setup_logger("ice_analytics.tests.file", log_file=log_file, level="DEBUG")
    logger.debug("rolling window ready")
    for handler in logger.handlers:
        handler.flush()

    assert len(logger.handlers) == 2
    assert "rolling window ready" in log_file.read_text(encoding="utf-8")

    # Reconfiguring does not stack handlers
    setup_logger("ice_analytics.tests.file", level="INFO")
    assert len(logger.handlers) == 1
    for handler in list(logger.handlers):
        handler.close()


def test_get_logger_reuses_handlers():
    first = get_logger("ice_analytics.tests.reuse")
    second = get_logger("ice_analytics.tests.reuse")
    assert first is second
    assert len(second.handlers) == 1


def test_game_logger_prefix(caplog):
    logger = get_logger("ice_analytics.tests.game")
    with caplog.at_level(logging.INFO, logger="ice_analytics.tests.game"):
        game_logger(logger, 2023020001).info("3 rush attacks")
    assert "[game 2023020001] 3 rush attacks" in caplog.messages


def test_skipped_game_is_logged_with_its_id(caplog, sample_feed):
    def _fetch(game_id):
        if game_id == 2:
            raise GameDataUnavailable(game_id, "not stored")
        return sample_feed

    with caplog.at_level(logging.INFO, logger="ice_analytics.pipelines.season"):
        compute_subject_analytics([1, 2], _fetch, Subject.team(1), window=1)

    assert any(message.startswith("[game 2] Skipped") for message in caplog.messages)
