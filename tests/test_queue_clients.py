from __future__ import annotations

import allure
import pytest

from workitem_agent.client import (
    SIGNED_IN_EVENT,
    LocalQueueClient,
    OpenIAPQueueClient,
    QueueClientError,
    is_signed_in,
)
from workitem_agent.models import Workitem, WorkitemState

pytestmark = [
    allure.epic("Workitem Agent"),
    allure.feature("Queue Client Adapters"),
]


class _FakeSdkClient:
    """Records calls the adapter makes on the SDK client."""

    def __init__(self, popped: list[dict | None]) -> None:
        self.popped = list(popped)
        self.calls: list[tuple] = []
        self.event_callback = None
        self.queue_callback = None

    def enable_tracing(self, level, tags):
        self.calls.append(("enable_tracing", level, tags))

    def connect(self):
        self.calls.append(("connect",))

    def on_client_event(self, callback):
        self.event_callback = callback

    def register_queue(self, queuename, callback):
        self.queue_callback = callback
        return f"{queuename}-bound"

    def pop_workitem(self, wiq):
        self.calls.append(("pop_workitem", wiq))
        return self.popped.pop(0) if self.popped else None

    def update_workitem(self, workitem, files=None):
        self.calls.append(("update_workitem", workitem, files))

    def info(self, message):
        self.calls.append(("info", message))

    def error(self, message):
        self.calls.append(("error", message))


def test_is_signed_in_only_for_signed_in_events() -> None:
    assert is_signed_in({"event": SIGNED_IN_EVENT})
    assert not is_signed_in({"event": "Disconnected"})
    assert not is_signed_in({})
    assert not is_signed_in(None)


def test_local_client_emits_signed_in_on_connect() -> None:
    client = LocalQueueClient(echo=False)
    events: list[dict] = []
    client.on_client_event(events.append)

    client.connect()

    assert events == [{"event": SIGNED_IN_EVENT, "reason": "local"}]


def test_local_client_reports_event_handler_errors() -> None:
    client = LocalQueueClient(echo=False)

    def _broken(_event):
        raise RuntimeError("handler exploded")

    client.on_client_event(_broken)
    client.connect()

    assert ("error", "Client event handler error: handler exploded") in client.messages


def test_local_client_requires_connection_before_registering() -> None:
    client = LocalQueueClient(echo=False)

    with pytest.raises(QueueClientError, match="not connected"):
        client.register_queue("q", lambda: None)


def test_local_client_pops_fifo_then_none() -> None:
    client = LocalQueueClient(
        workitems=[Workitem(id="a"), Workitem(id="b")],
        wiq="q",
        echo=False,
    )

    assert client.pop_workitem("q").id == "a"
    assert client.pop_workitem("q").id == "b"
    assert client.pop_workitem("q") is None
    assert client.pop_workitem("other") is None


def test_local_client_seeds_one_dummy_workitem() -> None:
    client = LocalQueueClient(wiq="q", dummy_workitem=True, echo=False)

    workitem = client.pop_workitem("q")

    assert workitem is not None
    assert workitem.id.startswith("wi_")
    assert workitem.payload == {"initial": True}
    assert workitem.state == WorkitemState.NEW
    assert client.pop_workitem("q") is None


def test_local_client_deliver_requires_consumer() -> None:
    client = LocalQueueClient(echo=False)

    with pytest.raises(QueueClientError, match="No consumer registered"):
        client.deliver("missing")


def test_openiap_adapter_translates_workitems_and_callbacks() -> None:
    sdk = _FakeSdkClient(
        popped=[{"id": "wi-1", "retries": 3, "payload": {"a": 1}, "state": "new", "wiq": "q"}],
    )
    adapter = OpenIAPQueueClient(sdk_client=sdk)
    events: list[object] = []
    messages: list[str] = []
    adapter.on_client_event(events.append)

    adapter.enable_tracing("openiap=debug")
    adapter.connect()
    sdk.event_callback({"event": SIGNED_IN_EVENT}, 1)
    bound = adapter.register_queue("q", lambda: messages.append("message"))
    sdk.queue_callback({"queuename": "q"}, 1)
    workitem = adapter.pop_workitem("q")
    assert workitem is not None
    workitem.mark_successful()
    adapter.update_workitem(workitem, files=["/tmp/hello.txt"])
    adapter.update_workitem(workitem)

    assert bound == "q-bound"
    assert events == [{"event": SIGNED_IN_EVENT}]
    assert messages == ["message"]
    assert workitem.retries == 3
    assert adapter.pop_workitem("q") is None
    assert ("enable_tracing", "openiap=debug", "") in sdk.calls
    updates = [call for call in sdk.calls if call[0] == "update_workitem"]
    assert updates[0][1]["state"] == "successful"
    assert updates[0][1]["wiq"] == "q"
    assert updates[0][2] == ["/tmp/hello.txt"]
    assert updates[1][2] is None


def test_openiap_adapter_forwards_log_sinks() -> None:
    sdk = _FakeSdkClient(popped=[])
    adapter = OpenIAPQueueClient(sdk_client=sdk)

    adapter.info("hello")
    adapter.error("oops")

    assert sdk.calls == [("info", "hello"), ("error", "oops")]


def test_local_client_logs_registration_pop_and_update() -> None:
    client = LocalQueueClient(
        workitems=[Workitem(id="plain")],
        wiq="q",
        dummy_workitem=True,
        echo=False,
    )
    client.connect()

    client.register_queue("consumer", lambda: None)
    plain = client.pop_workitem("q")
    dummy = client.pop_workitem("q")
    plain.mark_successful()
    client.update_workitem(plain)
    client.update_workitem(dummy, files=["/tmp/hello.txt"])

    assert client.messages[1:] == [
        ("info", "Registered queue consumer for 'consumer'"),
        ("info", "Popping dummy workitem from q"),
        ("info", "Updated workitem plain with state 'successful'"),
        ("info", f"Updated workitem {dummy.id} with state 'new' and files"),
    ]
