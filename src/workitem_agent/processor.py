"""Workitem processing step."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Protocol

from workitem_agent.models import Workitem

logger = logging.getLogger(__name__)

OUTPUT_FILE_NAME = "hello.txt"
OUTPUT_TEXT = "Hello kitty"


class WorkitemProcessor(Protocol):
    """Business step applied to one workitem.

    Implementations may raise anything and may create files in the working
    directory, but must not delete or rename files that already exist there.
    """

    def process(self, workitem: Workitem) -> Workitem:
        """Transform the workitem and return the value to report."""


class HelloKittyProcessor:
    """Placeholder business logic: tag the payload and write one output file."""

    def __init__(self, workdir: Path, delay_seconds: float = 2.0) -> None:
        self.workdir = workdir
        self.delay_seconds = delay_seconds

    def process(self, workitem: Workitem) -> Workitem:
        logger.info("Processing workitem id %s, retry #%s", workitem.id, workitem.retries)
        if not isinstance(workitem.payload, dict):
            workitem.payload = {}
        workitem.payload["name"] = OUTPUT_TEXT
        workitem.name = OUTPUT_TEXT
        (self.workdir / OUTPUT_FILE_NAME).write_text(OUTPUT_TEXT, encoding="utf-8")
        if self.delay_seconds > 0:
            time.sleep(self.delay_seconds)
        return workitem
