"""Queue client interface consumed by the agent."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol

from workitem_agent.models import Workitem

SIGNED_IN_EVENT = "SignedIn"

ClientEventHandler = Callable[[Mapping[str, Any]], None]
QueueMessageHandler = Callable[[], object]


class QueueClientError(RuntimeError):
    """Queue service call failed."""


class QueueClient(Protocol):
    """Capabilities the agent needs from a workitem queue service."""

    def enable_tracing(self, level: str) -> None:
        """Configure client-side tracing."""

    def connect(self) -> None:
        """Connect and sign in; a ``SignedIn`` client event follows."""

    def on_client_event(self, handler: ClientEventHandler) -> None:
        """Subscribe to client events such as ``{"event": "SignedIn"}``."""

    def register_queue(self, queuename: str, on_message: QueueMessageHandler) -> str:
        """Invoke ``on_message`` for every message on ``queuename``; return the bound name."""

    def pop_workitem(self, wiq: str) -> Workitem | None:
        """Pop one workitem without blocking, or return None when the queue is empty."""

    def update_workitem(self, workitem: Workitem, files: list[str] | None = None) -> None:
        """Report the final state of a workitem with optional produced files."""

    def info(self, message: str) -> None:
        """Informational log sink."""

    def error(self, message: str) -> None:
        """Error log sink."""


def is_signed_in(event: Mapping[str, Any] | None) -> bool:
    return bool(event) and event.get("event") == SIGNED_IN_EVENT
