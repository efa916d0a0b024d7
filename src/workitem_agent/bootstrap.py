"""Connect to the queue service and bind the drain loop to a consumer queue."""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from workitem_agent.client.base import QueueClient, is_signed_in
from workitem_agent.config import AgentSettings
from workitem_agent.worker import DrainLoop, ExitHook, terminate_process

logger = logging.getLogger(__name__)


class AgentBootstrap:
    """Startup glue: connect, register the consumer, optionally drain once and exit.

    Connection or registration failures are fatal: they are logged and the
    process exits with code 0 without retrying.
    """

    def __init__(
        self,
        *,
        client: QueueClient,
        drain_loop: DrainLoop,
        settings: AgentSettings,
        exit_process: ExitHook = terminate_process,
        poll_interval_seconds: float = 0.5,
    ) -> None:
        self.client = client
        self.drain_loop = drain_loop
        self.settings = settings
        self.exit_process = exit_process
        self.poll_interval_seconds = poll_interval_seconds
        self.consumer_queue: str | None = None
        self._stop = threading.Event()
        self._stop_signal_name: str | None = None

    def start(self) -> None:
        try:
            self.client.enable_tracing(self.settings.tracing)
            self.client.on_client_event(self._on_client_event)
            self.client.connect()
        except Exception as error:
            logger.exception("Failed to connect to queue service: %s", error)
            self.exit_process(0)
            self.stop()

    def run_forever(self) -> str | None:
        """Start the agent and stay resident until SIGINT/SIGTERM.

        In ephemeral mode the drain that follows sign-in normally exits the
        process; if that drain was aborted the agent stops here instead.
        Returns the name of the signal that stopped the agent, if any.
        """

        with self._signal_handlers():
            self.start()
            while not self._stop.wait(self.poll_interval_seconds):
                pass
        logger.info("Agent stopped")
        return self._stop_signal_name

    def stop(self) -> None:
        self._stop.set()

    def _on_client_event(self, event: Mapping[str, Any]) -> None:
        if not is_signed_in(event):
            return
        self._on_connected()

    def _on_connected(self) -> None:
        try:
            self.consumer_queue = self.client.register_queue(
                self.settings.queue,
                self.drain_loop.trigger,
            )
            logger.info("Consuming message queue: %s", self.consumer_queue)
        except Exception as error:
            logger.exception("Failed to register queue %s: %s", self.settings.queue, error)
            self.exit_process(0)
            self.stop()
            return
        # A drain already started by a queue message owns the exit.
        if self.settings.ephemeral and self.drain_loop.trigger() is not None:
            self.stop()

    @contextmanager
    def _signal_handlers(self) -> Iterator[None]:
        if not hasattr(signal, "SIGINT"):
            yield
            return

        original_sigint = signal.getsignal(signal.SIGINT)
        original_sigterm = signal.getsignal(signal.SIGTERM)

        def _handler(signum: int, _: object | None) -> None:
            try:
                self._stop_signal_name = signal.Signals(signum).name
            except ValueError:
                self._stop_signal_name = str(signum)
            self._stop.set()

        try:
            signal.signal(signal.SIGINT, _handler)
            signal.signal(signal.SIGTERM, _handler)
        except ValueError:
            # Signal handlers can only be installed in main thread.
            yield
            return
        try:
            yield
        finally:
            signal.signal(signal.SIGINT, original_sigint)
            signal.signal(signal.SIGTERM, original_sigterm)
