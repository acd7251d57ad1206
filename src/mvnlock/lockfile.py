"""Lock file assembly and persistence."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .models import LockFile

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .models import LockEntry, SkippedArtifact

logger = logging.getLogger(__name__)

LOCK_DIRECTORY = ".mvnlock"
LOCK_FILENAME = "lock.json"


def lock_path(project_root: Path | str) -> Path:
    """The well-known location of the lock file of the project at `project_root`."""
    return Path(project_root) / LOCK_DIRECTORY / LOCK_FILENAME


def assemble(skipped: Iterable[SkippedArtifact], entries: Iterable[LockEntry]) -> LockFile:
    """Combine skipped artifacts and lock entries into a diff-stable lock file.

    Identical skip records reached through several paths are kept once, and both
    lists are sorted by coordinate.
    """
    return LockFile(
        skipped=sorted(set(skipped)),
        entries=sorted(entries, key=lambda e: str(e.coordinate)),
    )


def dumps(lock: LockFile) -> str:
    """Serialize a lock file to JSON."""
    return json.dumps(lock.to_obj(), indent=4) + "\n"


def loads(text: str) -> LockFile:
    """Deserialize a lock file from JSON."""
    return LockFile.from_obj(json.loads(text))


def write_lock(lock: LockFile, project_root: Path | str) -> Path:
    """Write `lock` to its well-known location under `project_root` and return the path."""
    path = lock_path(project_root)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(".tmp")
    try:
        tmp_path.write_text(dumps(lock))
        tmp_path.replace(path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
    logger.info("Wrote %d resolved and %d skipped artifacts to %s", len(lock.entries), len(lock.skipped), path)
    return path


def read_lock(project_root: Path | str) -> LockFile:
    """Read the lock file of the project at `project_root`."""
    return loads(lock_path(project_root).read_text())
