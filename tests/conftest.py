"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from workitem_agent.client import LocalQueueClient
from workitem_agent.models import Workitem
from workitem_agent.processor import HelloKittyProcessor
from workitem_agent.worker import DrainLoop, ProcessingWrapper

WIQ = "test_queue"


class ExitRecorder:
    """Exit hook that records codes instead of terminating the test process."""

    def __init__(self) -> None:
        self.codes: list[int] = []

    def __call__(self, code: int) -> None:
        self.codes.append(code)


class FailingProcessor:
    """Processor that writes a file and then raises."""

    def __init__(self, workdir: Path, error: Exception | None = None) -> None:
        self.workdir = workdir
        self.error = error or RuntimeError("boom")

    def process(self, workitem: Workitem) -> Workitem:
        (self.workdir / f"partial-{workitem.id}.txt").write_text("partial", encoding="utf-8")
        raise self.error


@pytest.fixture(autouse=True)
def _clean_agent_env(monkeypatch):
    for name in (
        "wiq",
        "SF_AMQPQUEUE",
        "queue",
        "SF_VMID",
        "WORKITEM_AGENT_WORKDIR",
        "WORKITEM_AGENT_PROCESSING_DELAY_SECONDS",
        "WORKITEM_AGENT_TRACING",
        "WORKITEM_AGENT_CLIENT",
        "DUMMY_WORKITEM",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def workdir(tmp_path: Path) -> Path:
    path = tmp_path / "work"
    path.mkdir()
    (path / "existing.txt").write_text("keep me", encoding="utf-8")
    return path


@pytest.fixture()
def client() -> LocalQueueClient:
    return LocalQueueClient(wiq=WIQ, echo=False)


@pytest.fixture()
def exit_recorder() -> ExitRecorder:
    return ExitRecorder()


@pytest.fixture()
def make_drain_loop(
    client: LocalQueueClient,
    workdir: Path,
    exit_recorder: ExitRecorder,
) -> Callable[..., DrainLoop]:
    def _make(processor=None, vmid: str = "") -> DrainLoop:
        wrapper = ProcessingWrapper(
            client=client,
            processor=processor or HelloKittyProcessor(workdir=workdir, delay_seconds=0),
            workdir=workdir,
        )
        return DrainLoop(
            client=client,
            wrapper=wrapper,
            workdir=workdir,
            wiq=WIQ,
            vmid=vmid,
            exit_process=exit_recorder,
        )

    return _make


@pytest.fixture()
def failing_processor(workdir: Path) -> Callable[..., FailingProcessor]:
    def _make(error: Exception | None = None) -> FailingProcessor:
        return FailingProcessor(workdir, error=error)

    return _make


@pytest.fixture()
def wiq() -> str:
    return WIQ
