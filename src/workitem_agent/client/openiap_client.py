"""Adapter over the OpenIAP Python SDK."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from workitem_agent.client.base import ClientEventHandler, QueueMessageHandler
from workitem_agent.models import Workitem


class OpenIAPQueueClient:
    """Exposes an ``openiap.Client`` through the agent's queue client interface.

    The SDK is imported lazily so the agent installs without it; pass
    ``sdk_client`` to wrap an already constructed client.
    """

    def __init__(self, sdk_client: Any | None = None) -> None:
        if sdk_client is None:
            from openiap import Client  # noqa: PLC0415

            sdk_client = Client()
        self._client = sdk_client

    def enable_tracing(self, level: str) -> None:
        self._client.enable_tracing(level, "")

    def connect(self) -> None:
        self._client.connect()

    def on_client_event(self, handler: ClientEventHandler) -> None:
        def _on_event(event: Mapping[str, Any] | None, *_: object) -> None:
            handler(event or {})

        self._client.on_client_event(_on_event)

    def register_queue(self, queuename: str, on_message: QueueMessageHandler) -> str:
        def _on_message(*_: object) -> None:
            on_message()

        return str(self._client.register_queue(queuename, _on_message))

    def pop_workitem(self, wiq: str) -> Workitem | None:
        raw = self._client.pop_workitem(wiq)
        if not raw:
            return None
        if not isinstance(raw, Mapping):
            raw = vars(raw)
        return Workitem.from_mapping(raw)

    def update_workitem(self, workitem: Workitem, files: list[str] | None = None) -> None:
        if files:
            self._client.update_workitem(workitem.to_mapping(), files)
        else:
            self._client.update_workitem(workitem.to_mapping())

    def info(self, message: str) -> None:
        self._client.info(message)

    def error(self, message: str) -> None:
        self._client.error(message)
