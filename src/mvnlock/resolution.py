"""The end-to-end lock pipeline."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .conflicts import resolve_conflicts
from .lockfile import assemble
from .materialize import materialize_all
from .provided import PLATFORM_PROVIDED
from .resolver import Resolver

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .models import DependencyDeclaration, LockFile
    from .repository import ArtifactRepository

logger = logging.getLogger(__name__)


def lock(
    declarations: Iterable[DependencyDeclaration],
    repository: ArtifactRepository,
    *,
    platform: Mapping[tuple[str, str], str] = PLATFORM_PROVIDED,
    max_workers: int | None = None,
    sources: bool = True,
) -> LockFile:
    """Resolve, reconcile and materialize `declarations` into a lock file.

    Nothing is written; the caller persists the result. Any failure propagates
    before a lock file exists.

    Raises:
        ResolutionError: if a descriptor or payload can not be fetched
        InvalidDeclarationError: on a malformed coordinate, a missing version or an unknown scope

    """
    declarations = list(declarations)
    resolver = Resolver(repository, declarations, platform=platform, max_workers=max_workers)
    resolution = resolver.resolve_all()
    logger.info("Discovered %d artifacts, skipped %d", len(resolution), len(resolution.skipped))
    nodes = resolve_conflicts(resolution.nodes, declarations)
    entries = materialize_all(
        nodes,
        repository,
        direct=resolver.direct_coordinates,
        max_workers=resolver.max_workers,
        sources=sources,
    )
    return assemble(resolution.skipped, entries)
