"""CLI entrypoint for workitem-agent."""

from pathlib import Path

import rich_click as click

from workitem_agent import __version__
from workitem_agent.config import SUPPORTED_CLIENTS
from workitem_agent.controllers import AgentCliController, AgentDrainCommand, AgentRunCommand

click.rich_click.USE_MARKDOWN = True
AGENT_CONTROLLER = AgentCliController()


@click.group()
@click.version_option(version=__version__, prog_name="workitem-agent")
def workitem_agent() -> None:
    """Workitem queue agent CLI."""


@workitem_agent.command("run")
@click.option(
    "--workdir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Working directory scanned for produced files. Defaults to WORKITEM_AGENT_WORKDIR.",
)
@click.option(
    "--client",
    type=click.Choice(SUPPORTED_CLIENTS, case_sensitive=False),
    default=None,
    help="Queue client adapter. Defaults to WORKITEM_AGENT_CLIENT.",
)
@click.option(
    "--dummy-workitem/--no-dummy-workitem",
    default=False,
    show_default=True,
    help="Seed one dummy workitem when using the local client.",
)
def run(workdir: Path | None, client: str | None, dummy_workitem: bool) -> None:
    """Connect, consume the queue and drain it on every message.

    When `SF_VMID` is set the agent drains once after sign-in and exits.
    """

    try:
        lines = AGENT_CONTROLLER.run(
            AgentRunCommand(
                workdir=workdir,
                client=client.lower() if client is not None else None,
                dummy_workitem=dummy_workitem,
            ),
        )
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


@workitem_agent.command("drain")
@click.option(
    "--workdir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Working directory scanned for produced files. Defaults to WORKITEM_AGENT_WORKDIR.",
)
@click.option(
    "--dummy-workitem/--no-dummy-workitem",
    default=True,
    show_default=True,
    help="Seed one dummy workitem before draining.",
)
def drain(workdir: Path | None, dummy_workitem: bool) -> None:
    """Run one drain pass against the in-process local client."""

    try:
        lines = AGENT_CONTROLLER.drain(
            AgentDrainCommand(workdir=workdir, dummy_workitem=dummy_workitem),
        )
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    workitem_agent()
