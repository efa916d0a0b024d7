"""Queue client interface and adapters."""

from workitem_agent.client.base import (
    SIGNED_IN_EVENT,
    QueueClient,
    QueueClientError,
    is_signed_in,
)
from workitem_agent.client.local import LocalQueueClient, WorkitemUpdate
from workitem_agent.client.openiap_client import OpenIAPQueueClient

__all__ = [
    "SIGNED_IN_EVENT",
    "LocalQueueClient",
    "OpenIAPQueueClient",
    "QueueClient",
    "QueueClientError",
    "WorkitemUpdate",
    "is_signed_in",
]
