"""Runtime configuration for the workitem agent."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_WORKITEM_QUEUE = "default_queue"
DEFAULT_TRACING = "openiap=info"
SUPPORTED_CLIENTS = ("openiap", "local")


@dataclass(slots=True)
class AgentSettings:
    """Agent settings resolved from the host environment."""

    wiq: str = DEFAULT_WORKITEM_QUEUE
    queue: str = DEFAULT_WORKITEM_QUEUE
    vmid: str = ""
    workdir: Path = Path(".")
    processing_delay_seconds: float = 2.0
    tracing: str = DEFAULT_TRACING
    client: str = "openiap"
    dummy_workitem: bool = False

    @property
    def ephemeral(self) -> bool:
        """True when running inside a serverless VM that must exit after one drain."""

        return bool(self.vmid)

    @classmethod
    def from_env(cls, workdir: Path | None = None) -> AgentSettings:
        """Load settings from environment with defaults for a local daemon."""

        wiq = _first_non_empty("wiq", "SF_AMQPQUEUE") or DEFAULT_WORKITEM_QUEUE
        return cls(
            wiq=wiq,
            queue=_first_non_empty("queue") or wiq,
            vmid=os.getenv("SF_VMID", "").strip(),
            workdir=(workdir or Path(os.getenv("WORKITEM_AGENT_WORKDIR", "."))).absolute(),
            processing_delay_seconds=float(
                os.getenv("WORKITEM_AGENT_PROCESSING_DELAY_SECONDS", "2.0"),
            ),
            tracing=os.getenv("WORKITEM_AGENT_TRACING", DEFAULT_TRACING),
            client=os.getenv("WORKITEM_AGENT_CLIENT", "openiap").strip().lower(),
            dummy_workitem=_env_bool("DUMMY_WORKITEM", default=False),
        )

    def validate(self) -> None:
        """Raise configuration error for values the agent cannot run with."""

        if self.processing_delay_seconds < 0:
            raise ValueError("WORKITEM_AGENT_PROCESSING_DELAY_SECONDS must be >= 0.")
        if self.client not in SUPPORTED_CLIENTS:
            raise ValueError(
                f"Unsupported WORKITEM_AGENT_CLIENT: {self.client!r}. "
                f"Expected one of: {', '.join(SUPPORTED_CLIENTS)}.",
            )
        if not self.workdir.is_dir():
            raise ValueError(f"Working directory does not exist: {str(self.workdir)!r}")


def _first_non_empty(*names: str) -> str:
    for name in names:
        value = os.getenv(name, "").strip()
        if value:
            return value
    return ""


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off", ""}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
