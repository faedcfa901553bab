"""
Tests for the package logging setup.
"""

import logging

from LocalBundleAdjustment import configure_root_logger, get_logger


def test_module_loggers_are_package_children():
    logger = get_logger("graph.proximity")
    assert logger.name == "LocalBundleAdjustment.graph.proximity"
    assert logger.propagate


def test_configure_root_logger_writes_module_records_to_file(tmp_path):
    log_file = tmp_path / "logs" / "local_ba.log"
    root = configure_root_logger(level="DEBUG", log_file=str(log_file), console=False)
    try:
        get_logger("pipeline.local_ba").debug("round 3 prepared")
        for handler in root.handlers:
            handler.flush()

        content = log_file.read_text()
        assert "[DEBUG] [LocalBundleAdjustment.pipeline.local_ba] round 3 prepared" in content
    finally:
        configure_root_logger(console=False)


def test_reconfiguring_replaces_handlers(tmp_path):
    configure_root_logger(level="INFO", log_file=str(tmp_path / "a.log"))
    root = configure_root_logger(level="WARNING", console=True)
    try:
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)
        assert not isinstance(root.handlers[0], logging.FileHandler)
    finally:
        configure_root_logger(console=False)
