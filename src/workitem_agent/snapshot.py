"""Working-directory snapshots used to find files produced while processing.

A snapshot is the set of regular-file names in one directory at one instant.
Diffing a snapshot taken before a processing step against one taken after it
yields the files that step created, provided nothing else writes to the
directory in between. The agent does not lock the directory; running two
agents, or any other writer, in the same working directory breaks the diff.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DirectorySnapshot = frozenset[str]


def capture(directory: Path) -> DirectorySnapshot:
    """Return names of regular files in ``directory``; never raises.

    Symbolic links, subdirectories and entries whose metadata cannot be read
    are excluded. An unreadable directory yields an empty snapshot.
    """

    names: set[str] = set()
    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                try:
                    if entry.is_file(follow_symlinks=False):
                        names.add(entry.name)
                except OSError:
                    continue
    except OSError as error:
        logger.debug("Cannot list %s: %s", directory, error)
    return frozenset(names)


def diff(before: DirectorySnapshot, after: DirectorySnapshot) -> DirectorySnapshot:
    """Files present in ``after`` but not in ``before``."""

    return frozenset(after - before)


def cleanup(directory: Path, baseline: DirectorySnapshot) -> None:
    """Best-effort delete of every file created since ``baseline``.

    Failures to unlink are swallowed; the result of cleanup never affects
    the caller's control flow.
    """

    for name in sorted(diff(baseline, capture(directory))):
        try:
            (directory / name).unlink()
        except OSError as error:
            logger.debug("Cleanup could not remove %s: %s", name, error)
