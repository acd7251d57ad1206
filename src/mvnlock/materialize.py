"""Downloading resolved artifacts into the local repository."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from multiprocessing import cpu_count
from typing import TYPE_CHECKING

from tqdm import tqdm

from .models import LockEntry
from .repository import ResolutionError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .models import Coordinate, ResolvedNode
    from .repository import ArtifactRepository

logger = logging.getLogger(__name__)

# packaging types that have no payload besides their descriptor
_DESCRIPTOR_ONLY = frozenset({"pom"})


def materialize(
    node: ResolvedNode,
    repository: ArtifactRepository,
    direct: frozenset[Coordinate] = frozenset(),
    sources: bool = True,  # noqa: FBT001, FBT002
) -> LockEntry:
    """Make sure the payload of `node` is available locally and build its lock entry.

    Raises:
        ResolutionError: if the payload can not be downloaded

    """
    coordinate = node.coordinate
    if node.packaging not in _DESCRIPTOR_ONLY and not repository.exists_locally(coordinate, node.packaging):
        logger.info("Downloading: %s", coordinate)
        status = repository.download(coordinate, node.packaging)
        if not status.is_success:
            raise ResolutionError(coordinate, status)
        if sources:
            sources_status = repository.download_sources(coordinate)
            if not sources_status.is_success:
                logger.warning("Could not fetch sources for %s: %s", coordinate, sources_status)
    return LockEntry(
        coordinate=coordinate,
        scope=node.scope,
        packaging=node.packaging,
        direct=coordinate in direct,
        path=repository.local_path(coordinate, node.packaging),
        dependencies=(str(dep) for dep in node.dependencies),
    )


def materialize_all(
    nodes: Iterable[ResolvedNode],
    repository: ArtifactRepository,
    direct: frozenset[Coordinate] = frozenset(),
    max_workers: int | None = None,
    sources: bool = True,  # noqa: FBT001, FBT002
) -> list[LockEntry]:
    """Materialize every node concurrently and return their entries sorted by coordinate.

    The first failure cancels the downloads that have not started yet and is raised
    once the running ones have finished.
    """
    nodes = list(nodes)
    if max_workers is None or max_workers < 0:
        max_workers = cpu_count()
    entries: list[LockEntry] = []
    with (
        ThreadPoolExecutor(max_workers=max(max_workers, 1), thread_name_prefix="mvnlock-download") as executor,
        tqdm(desc="downloading", total=len(nodes), leave=False, unit=" artifacts") as t,
    ):
        futures = {executor.submit(materialize, node, repository, direct, sources): node for node in nodes}
        try:
            for future in as_completed(futures):
                t.update(1)
                entries.append(future.result())
        except BaseException:
            for future in futures:
                future.cancel()
            raise
    return sorted(entries, key=lambda e: str(e.coordinate))
