"""Command-line interface for mvnlock."""

from __future__ import annotations

import logging
import os
import sys

from . import __version__ as mvnlock_version
from .config import Settings
from .declarations import load_declarations
from .lockfile import write_lock
from .logger import setup_logger
from .maven import MavenRepository
from .models import InvalidDeclarationError
from .repository import ResolutionError
from .resolution import lock

logger = logging.getLogger(__name__)


def run(settings: Settings) -> int:
    """Lock the project described by `settings` and return the process exit code."""
    if settings.version:
        logger.info("mvnlock version %s", mvnlock_version)
        return 0

    # If max_workers isn't provided, use the number of CPUs.
    # If that fails, use 1.
    if settings.max_workers == -1:
        settings.max_workers = os.cpu_count() or 1

    logger.debug("Starting mvnlock with settings: %s", settings)

    try:
        declarations = load_declarations(settings.project_root)
    except InvalidDeclarationError as e:
        logger.error("%s", e)  # noqa: TRY400
        return 1

    repository = MavenRepository(settings.local_repository, settings.repositories, timeout=settings.timeout)
    try:
        lock_file = lock(
            declarations,
            repository,
            max_workers=settings.max_workers,
            sources=settings.sources,
        )
    except ResolutionError as e:
        logger.error("%s", e.diagnostic())  # noqa: TRY400
        return 1
    except InvalidDeclarationError as e:
        logger.error("%s", e)  # noqa: TRY400
        return 1

    try:
        path = write_lock(lock_file, settings.project_root)
    except OSError as e:
        logger.error("Could not write the lock file: %s", e)  # noqa: TRY400
        return 1
    logger.info("Lock file saved to %s", path.absolute())
    return 0


def main() -> None:
    settings = Settings(_cli_parse_args=True)
    setup_logger(settings.log_level)
    sys.exit(run(settings))
