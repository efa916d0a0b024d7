"""Domain models for workitems exchanged with the queue service."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

APPLICATION_ERROR = "application"
UNKNOWN_ERROR_SOURCE = "Unknown source"

_KNOWN_FIELDS = frozenset(
    {"id", "retries", "payload", "name", "state", "errortype", "errormessage", "errorsource"},
)


class WorkitemState(str, Enum):
    """Workitem states this agent reads or reports."""

    NEW = "new"
    SUCCESSFUL = "successful"
    RETRY = "retry"


@dataclass(slots=True)
class Workitem:
    """One unit of work popped from a workitem queue."""

    id: str
    retries: int = 0
    payload: dict[str, Any] = field(default_factory=dict)
    name: str = ""
    state: WorkitemState = WorkitemState.NEW
    errortype: str | None = None
    errormessage: str | None = None
    errorsource: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> Workitem:
        payload = raw.get("payload")
        return cls(
            id=str(raw.get("id", "")),
            retries=int(raw.get("retries") or 0),
            payload=dict(payload) if isinstance(payload, Mapping) else {},
            name=str(raw.get("name") or ""),
            state=_parse_state(raw.get("state")),
            errortype=raw.get("errortype"),
            errormessage=raw.get("errormessage"),
            errorsource=raw.get("errorsource"),
            extra={key: value for key, value in raw.items() if key not in _KNOWN_FIELDS},
        )

    def to_mapping(self) -> dict[str, Any]:
        """Wire mapping; error fields are included only while set."""

        data: dict[str, Any] = dict(self.extra)
        data.update(
            {
                "id": self.id,
                "retries": self.retries,
                "payload": self.payload,
                "name": self.name,
                "state": self.state.value,
            },
        )
        for key in ("errortype", "errormessage", "errorsource"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    def mark_successful(self) -> None:
        self.state = WorkitemState.SUCCESSFUL
        self.errortype = None
        self.errormessage = None
        self.errorsource = None

    def mark_retry(self, *, message: str, source: str | None) -> None:
        self.state = WorkitemState.RETRY
        self.errortype = APPLICATION_ERROR
        self.errormessage = message
        self.errorsource = source or UNKNOWN_ERROR_SOURCE


def _parse_state(value: object) -> WorkitemState:
    try:
        return WorkitemState(value)
    except ValueError:
        return WorkitemState.NEW
