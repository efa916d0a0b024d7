"""Controllers for agent CLI commands."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from workitem_agent.bootstrap import AgentBootstrap
from workitem_agent.client import LocalQueueClient, OpenIAPQueueClient, QueueClient
from workitem_agent.config import AgentSettings
from workitem_agent.logging_bridge import install_client_logging, remove_client_logging
from workitem_agent.processor import HelloKittyProcessor
from workitem_agent.worker import DrainLoop, ExitHook, ProcessingWrapper, terminate_process


@dataclass(slots=True)
class AgentRunCommand:
    """CLI input for running the resident or ephemeral agent."""

    workdir: Path | None
    client: str | None = None
    dummy_workitem: bool = False


@dataclass(slots=True)
class AgentDrainCommand:
    """CLI input for a single local drain pass."""

    workdir: Path | None
    dummy_workitem: bool = True


class AgentCliController:
    """Wires settings, queue client, drain loop and bootstrap for CLI commands."""

    def __init__(self, exit_process: ExitHook = terminate_process) -> None:
        self.exit_process = exit_process

    def run(self, command: AgentRunCommand) -> list[str]:
        settings = AgentSettings.from_env(workdir=command.workdir)
        if command.client is not None:
            settings = replace(settings, client=command.client)
        if command.dummy_workitem:
            settings = replace(settings, dummy_workitem=True)
        settings.validate()

        client = build_client(settings)
        handler = install_client_logging(client)
        try:
            bootstrap = AgentBootstrap(
                client=client,
                drain_loop=build_drain_loop(
                    client=client,
                    settings=settings,
                    exit_process=self.exit_process,
                ),
                settings=settings,
                exit_process=self.exit_process,
            )
            stop_signal = bootstrap.run_forever()
        finally:
            remove_client_logging(handler)

        return [
            "Agent stopped: "
            f"queue={bootstrap.consumer_queue or '-'} signal={stop_signal or '-'}",
        ]

    def drain(self, command: AgentDrainCommand) -> list[str]:
        settings = AgentSettings.from_env(workdir=command.workdir)
        settings = replace(settings, client="local", vmid="")
        settings.validate()

        client = LocalQueueClient(
            wiq=settings.wiq,
            dummy_workitem=command.dummy_workitem or settings.dummy_workitem,
        )
        handler = install_client_logging(client)
        try:
            drain_loop = build_drain_loop(
                client=client,
                settings=settings,
                exit_process=self.exit_process,
            )
            summary = drain_loop.trigger()
        finally:
            remove_client_logging(handler)

        lines = [
            f"Update: workitem={update.workitem.id} state={update.workitem.state.value} "
            f"files={len(update.files or [])}"
            for update in client.updates
        ]
        if summary is not None:
            lines.append(
                "Drain summary: "
                f"queue={settings.wiq} processed={summary.processed} "
                f"succeeded={summary.succeeded} retried={summary.retried} "
                f"aborted={str(summary.aborted).lower()}",
            )
        return lines


def build_client(settings: AgentSettings) -> QueueClient:
    if settings.client == "local":
        return LocalQueueClient(wiq=settings.wiq, dummy_workitem=settings.dummy_workitem)
    try:
        return OpenIAPQueueClient()
    except ImportError as error:
        raise ValueError(
            "The openiap SDK is not installed. "
            "Install workitem-agent[openiap] or set WORKITEM_AGENT_CLIENT=local.",
        ) from error


def build_drain_loop(
    *,
    client: QueueClient,
    settings: AgentSettings,
    exit_process: ExitHook = terminate_process,
) -> DrainLoop:
    wrapper = ProcessingWrapper(
        client=client,
        processor=HelloKittyProcessor(
            workdir=settings.workdir,
            delay_seconds=settings.processing_delay_seconds,
        ),
        workdir=settings.workdir,
    )
    return DrainLoop(
        client=client,
        wrapper=wrapper,
        workdir=settings.workdir,
        wiq=settings.wiq,
        vmid=settings.vmid,
        exit_process=exit_process,
    )
