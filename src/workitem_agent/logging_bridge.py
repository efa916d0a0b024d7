"""Route agent log records to the queue client's log sinks."""

from __future__ import annotations

import logging
import threading

from workitem_agent.client.base import QueueClient

AGENT_LOGGER_NAME = "workitem_agent"


class QueueClientLogHandler(logging.Handler):
    """Forwards INFO records to ``client.info`` and ERROR records to ``client.error``."""

    def __init__(self, client: QueueClient, level: int = logging.INFO) -> None:
        super().__init__(level=level)
        self.client = client
        self.previous_propagate = True
        self._local = threading.local()

    def emit(self, record: logging.LogRecord) -> None:
        if getattr(self._local, "emitting", False):
            return
        self._local.emitting = True
        try:
            message = self.format(record)
            if record.levelno >= logging.ERROR:
                self.client.error(message)
            elif record.levelno >= logging.INFO:
                self.client.info(message)
        except Exception:  # noqa: BLE001
            self.handleError(record)
        finally:
            self._local.emitting = False


def install_client_logging(client: QueueClient, level: int = logging.INFO) -> QueueClientLogHandler:
    """Attach a forwarding handler to the agent's root logger and return it."""

    handler = QueueClientLogHandler(client, level=level)
    logger = logging.getLogger(AGENT_LOGGER_NAME)
    handler.previous_propagate = logger.propagate
    logger.addHandler(handler)
    logger.propagate = False
    if logger.level == logging.NOTSET or logger.level > level:
        logger.setLevel(level)
    return handler


def remove_client_logging(handler: QueueClientLogHandler) -> None:
    logger = logging.getLogger(AGENT_LOGGER_NAME)
    logger.removeHandler(handler)
    logger.propagate = handler.previous_propagate
