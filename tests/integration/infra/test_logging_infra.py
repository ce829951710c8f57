from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the asynchronous QueueListener architecture, idempotency
of configuration, log file rotation logic and clean shutdown.
"""

import logging
import time
from logging.handlers import QueueListener
from pathlib import Path
from typing import Iterator

import pytest

from compile_modules.infra.logging import (
    _CONFIGURED_FLAG_ATTR,
    _HANDLER_TAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    LoggingConfig,
    configure_logging,
    shutdown_logging,
)


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Clean up root logger handlers before and after each test."""
    shutdown_logging()
    yield
    shutdown_logging()


def test_logging_idempotency() -> None:
    """Multiple config calls do not duplicate handlers."""
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    root = logging.getLogger()
    initial_handler_count = len(root.handlers)

    configure_logging(cfg)
    assert len(root.handlers) == initial_handler_count, "Handlers were duplicated."


def test_log_rotation(tmp_path: Path) -> None:
    """File rotation happens when the size limit is exceeded."""
    log_file = tmp_path / "logs" / "test_rotate.log"
    cfg = LoggingConfig(
        level="DEBUG",
        console=False,
        log_file=str(log_file),
        max_bytes=100,
        backup_count=1
    )

    configure_logging(cfg)
    logger = logging.getLogger("test_rotate")

    for _ in range(10):
        logger.debug("This is a long log message to trigger rotation." * 5)

    # Give time for the QueueListener to process
    time.sleep(0.5)

    assert log_file.exists()
    assert (tmp_path / "logs" / "test_rotate.log.1").exists(), "Rotation backup file was not created."


def test_queue_listener_architecture() -> None:
    """The root logger uses a QueueHandler-based architecture."""
    configure_logging(LoggingConfig(level="INFO", console=True))

    root = logging.getLogger()
    queue_handlers = [h for h in root.handlers if getattr(h, _HANDLER_TAG_ATTR, False)]

    assert len(queue_handlers) == 1
    assert isinstance(getattr(root, _QUEUE_LISTENER_ATTR), QueueListener)


def test_shutdown_removes_our_handlers() -> None:
    configure_logging(LoggingConfig(level="INFO", console=True))

    shutdown_logging()

    root = logging.getLogger()
    assert not any(getattr(h, _HANDLER_TAG_ATTR, False) for h in root.handlers)
    assert not getattr(root, _CONFIGURED_FLAG_ATTR, False)

    # Configuring again after shutdown is allowed
    configure_logging(LoggingConfig(level="INFO", console=True))
    assert getattr(root, _CONFIGURED_FLAG_ATTR)
