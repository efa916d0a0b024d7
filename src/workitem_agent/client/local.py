"""In-process queue client for local runs and tests."""

from __future__ import annotations

import threading
import uuid
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass

import click

from workitem_agent.client.base import (
    SIGNED_IN_EVENT,
    ClientEventHandler,
    QueueClientError,
    QueueMessageHandler,
)
from workitem_agent.models import Workitem, WorkitemState


@dataclass(slots=True)
class WorkitemUpdate:
    """One recorded ``update_workitem`` call."""

    workitem: Workitem
    files: list[str] | None


class LocalQueueClient:
    """Queue client that keeps workitems in memory and signs in on connect.

    Workitems are queued per work-item queue with ``push``; ``deliver``
    simulates a message arriving on a registered consumer queue.
    """

    def __init__(
        self,
        *,
        workitems: Iterable[Workitem] = (),
        wiq: str = "default_queue",
        dummy_workitem: bool = False,
        echo: bool = True,
    ) -> None:
        self.echo = echo
        self.tracing: str | None = None
        self.connected = False
        self.updates: list[WorkitemUpdate] = []
        self.messages: list[tuple[str, str]] = []
        self._lock = threading.Lock()
        self._queues: dict[str, deque[Workitem]] = {}
        self._consumers: dict[str, QueueMessageHandler] = {}
        self._event_handlers: list[ClientEventHandler] = []
        self._dummy_id: str | None = None
        for workitem in workitems:
            self.push(wiq, workitem)
        if dummy_workitem:
            self._dummy_id = f"wi_{uuid.uuid4().hex[:12]}"
            self.push(
                wiq,
                Workitem(
                    id=self._dummy_id,
                    payload={"initial": True},
                    name="dummy",
                    state=WorkitemState.NEW,
                ),
            )

    def push(self, wiq: str, workitem: Workitem) -> None:
        with self._lock:
            self._queues.setdefault(wiq, deque()).append(workitem)

    def pending(self, wiq: str) -> int:
        with self._lock:
            return len(self._queues.get(wiq, ()))

    def deliver(self, queuename: str) -> object:
        """Invoke the consumer registered for ``queuename`` as a message would."""

        handler = self._consumers.get(queuename)
        if handler is None:
            raise QueueClientError(f"No consumer registered for queue {queuename!r}")
        return handler()

    def enable_tracing(self, level: str) -> None:
        self.tracing = level

    def connect(self) -> None:
        self.info("Connecting to local queue client...")
        self.connected = True
        self._emit({"event": SIGNED_IN_EVENT, "reason": "local"})

    def on_client_event(self, handler: ClientEventHandler) -> None:
        self._event_handlers.append(handler)

    def register_queue(self, queuename: str, on_message: QueueMessageHandler) -> str:
        if not self.connected:
            raise QueueClientError("Client is not connected")
        self._consumers[queuename] = on_message
        self.info(f"Registered queue consumer for '{queuename}'")
        return queuename

    def pop_workitem(self, wiq: str) -> Workitem | None:
        with self._lock:
            queue = self._queues.get(wiq)
            if not queue:
                return None
            workitem = queue.popleft()
        if workitem.id == self._dummy_id:
            self.info(f"Popping dummy workitem from {wiq}")
        return workitem

    def update_workitem(self, workitem: Workitem, files: list[str] | None = None) -> None:
        self.updates.append(WorkitemUpdate(workitem=workitem, files=list(files) if files else None))
        suffix = " and files" if files else ""
        self.info(f"Updated workitem {workitem.id} with state '{workitem.state.value}'{suffix}")

    def info(self, message: str) -> None:
        self.messages.append(("info", message))
        if self.echo:
            click.echo(f"[INFO] {message}")

    def error(self, message: str) -> None:
        self.messages.append(("error", message))
        if self.echo:
            click.echo(f"[ERROR] {message}", err=True)

    def _emit(self, event: dict[str, str]) -> None:
        for handler in list(self._event_handlers):
            try:
                handler(event)
            except Exception as error:  # noqa: BLE001
                self.error(f"Client event handler error: {error}")
