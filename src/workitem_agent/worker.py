"""Queue drain loop and per-workitem processing wrapper."""

from __future__ import annotations

import logging
import os
import sys
import threading
import traceback
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from workitem_agent import snapshot
from workitem_agent.client.base import QueueClient
from workitem_agent.models import Workitem, WorkitemState
from workitem_agent.processor import WorkitemProcessor
from workitem_agent.snapshot import DirectorySnapshot

logger = logging.getLogger(__name__)

ExitHook = Callable[[int], None]


@dataclass(slots=True)
class DrainSummary:
    """Counters for one drain pass."""

    processed: int = 0
    succeeded: int = 0
    retried: int = 0
    aborted: bool = False


def terminate_process(code: int) -> None:
    """Exit the process even when called from a client callback thread."""

    if threading.current_thread() is threading.main_thread():
        sys.exit(code)
    logging.shutdown()
    os._exit(code)


class ProcessingWrapper:
    """Runs the processor on one workitem and reports the outcome to the queue."""

    def __init__(
        self,
        *,
        client: QueueClient,
        processor: WorkitemProcessor,
        workdir: Path,
    ) -> None:
        self.client = client
        self.processor = processor
        self.workdir = workdir.absolute()

    def handle(self, baseline: DirectorySnapshot, workitem: Workitem) -> Workitem:
        """Process and report one workitem.

        Processing failures become ``retry`` state on the reported workitem.
        Only a failing ``update_workitem`` call propagates.
        """

        try:
            workitem = self.processor.process(workitem)
            workitem.mark_successful()
        except Exception as error:  # noqa: BLE001
            message = str(error) or error.__class__.__name__
            workitem.mark_retry(message=message, source=traceback.format_exc())
            logger.error("Workitem %s failed: %s", workitem.id, message)

        produced = snapshot.diff(baseline, snapshot.capture(self.workdir))
        if produced:
            files = [str(self.workdir / name) for name in sorted(produced)]
            self.client.update_workitem(workitem, files=files)
        else:
            self.client.update_workitem(workitem)
        return workitem


class DrainLoop:
    """Pops and processes workitems until the queue is empty, one drain at a time.

    ``trigger`` is safe to call from any thread. A trigger that arrives while a
    drain is running is dropped, not deferred. A processing step that never
    returns keeps the drain running forever; there is no timeout.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        client: QueueClient,
        wrapper: ProcessingWrapper,
        workdir: Path,
        wiq: str,
        vmid: str = "",
        exit_process: ExitHook = terminate_process,
    ) -> None:
        self.client = client
        self.wrapper = wrapper
        self.workdir = workdir
        self.wiq = wiq
        self.vmid = vmid
        self.exit_process = exit_process
        self._guard = threading.Lock()

    @property
    def is_draining(self) -> bool:
        return self._guard.locked()

    def trigger(self) -> DrainSummary | None:
        """Run one drain pass, or return None when a pass is already running."""

        if not self._guard.acquire(blocking=False):
            logger.debug("Drain of %s already running, trigger dropped", self.wiq)
            return None

        summary = DrainSummary()
        try:
            baseline = snapshot.capture(self.workdir)
            try:
                self._drain(baseline, summary)
            except Exception:
                summary.aborted = True
                logger.exception("Drain of %s workitem queue aborted", self.wiq)
            finally:
                snapshot.cleanup(self.workdir, baseline)
        finally:
            self._guard.release()

        if self.vmid and not summary.aborted:
            logger.info("Exiting application as running in serverless VM %s", self.vmid)
            self.exit_process(0)
        return summary

    def _drain(self, baseline: DirectorySnapshot, summary: DrainSummary) -> None:
        while True:
            workitem = self.client.pop_workitem(self.wiq)
            if workitem is None:
                break
            summary.processed += 1
            reported = self.wrapper.handle(baseline, workitem)
            if reported.state == WorkitemState.SUCCESSFUL:
                summary.succeeded += 1
            else:
                summary.retried += 1
            snapshot.cleanup(self.workdir, baseline)

        if summary.processed > 0:
            logger.info("No more workitems in %s workitem queue", self.wiq)
