"""Transitive dependency discovery."""

from __future__ import annotations

import logging
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from multiprocessing import cpu_count
from typing import TYPE_CHECKING

from tqdm import tqdm

from .models import Coordinate, Exclusion, ResolvedNode, Scope, SkippedArtifact, is_excluded
from .provided import PLATFORM_PROVIDED
from .repository import ResolutionError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

    from .models import DependencyDeclaration
    from .repository import ArtifactRepository

logger = logging.getLogger(__name__)


class Resolution:
    """Nodes and skipped artifacts discovered by a walk, in pre-order."""

    def __init__(self, nodes: Iterable[ResolvedNode] = (), skipped: Iterable[SkippedArtifact] = ()) -> None:
        """Initialize a resolution."""
        self.nodes: list[ResolvedNode] = list(nodes)
        self.skipped: list[SkippedArtifact] = list(skipped)

    def __add__(self, other: Resolution) -> Resolution:
        """Concatenate two resolutions."""
        return Resolution(self.nodes + other.nodes, self.skipped + other.skipped)

    def __iter__(self) -> Iterator[ResolvedNode]:
        """Iterate over the resolved nodes."""
        yield from self.nodes

    def __len__(self) -> int:
        """Return the number of resolved nodes."""
        return len(self.nodes)

    def coordinates(self) -> list[str]:
        """Return the coordinate strings of the resolved nodes, duplicates included."""
        return [str(node.coordinate) for node in self.nodes]


class _Visit:
    """A vertex of the walk, expanded once its descriptor has been fetched."""

    __slots__ = ("children", "coordinate", "exclude", "node", "scope", "skipped")

    def __init__(self, coordinate: Coordinate, scope: Scope, exclude: frozenset[Exclusion]) -> None:
        self.coordinate = coordinate
        self.scope = scope
        self.exclude = exclude
        self.node: ResolvedNode | None = None
        self.skipped: SkippedArtifact | None = None
        self.children: list[_Visit] = []

    def flatten(self) -> Resolution:
        """Collect this subtree in pre-order; siblings keep their declared order."""
        nodes: list[ResolvedNode] = []
        skipped: list[SkippedArtifact] = []
        stack = [self]
        while stack:
            visit = stack.pop()
            if visit.node is not None:
                nodes.append(visit.node)
            if visit.skipped is not None:
                skipped.append(visit.skipped)
            stack.extend(reversed(visit.children))
        return Resolution(nodes, skipped)


class Resolver:
    """Discovers the transitive closure of direct declarations.

    Every node is fetched once per path it is reached through; the same library may
    therefore appear several times, possibly at different versions.
    """

    def __init__(
        self,
        repository: ArtifactRepository,
        declarations: Iterable[DependencyDeclaration] = (),
        platform: Mapping[tuple[str, str], str] = PLATFORM_PROVIDED,
        max_workers: int | None = None,
    ) -> None:
        """Initialize a resolver.

        Args:
            repository: Where descriptors are fetched from
            declarations: The project's direct declarations
            platform: Library identities provided by the host, mapped to the provided version
            max_workers: Number of concurrent descriptor fetches; None or negative means one
                per CPU, and 1 or less disables concurrency

        """
        self.repository = repository
        self.declarations: tuple[DependencyDeclaration, ...] = tuple(declarations)
        self.direct_coordinates: frozenset[Coordinate] = frozenset(d.coordinate for d in self.declarations)
        self.platform = platform
        if max_workers is None or max_workers < 0:
            max_workers = cpu_count()
        self.max_workers: int = max_workers

    def platform_skip(self, coordinate: Coordinate, scope: Scope) -> SkippedArtifact | None:
        """Return a skip record if `coordinate` is provided by the host platform.

        A provided library is skipped when the requested version is the provided one,
        or when the project did not declare this exact coordinate itself.
        """
        available = self.platform.get(coordinate.identity)
        if available is None:
            return None
        if available == coordinate.version or coordinate not in self.direct_coordinates:
            return SkippedArtifact(coordinate, available, scope)
        return None

    def children(self, node: ResolvedNode, exclude: Iterable[Exclusion]) -> list[tuple[Coordinate, Scope]]:
        """Select the declared dependencies of `node` that the walk recurses into."""
        selected = []
        for dep in node.dependencies:
            if dep.optional or not node.scope.admits(dep.scope):
                continue
            child = dep.coordinate
            if is_excluded(child, exclude):
                logger.debug("Excluding %s (required by %s)", child, node.coordinate)
                continue
            selected.append((child, Scope.from_string(dep.scope)))
        return selected

    def resolve(
        self,
        coordinate: Coordinate | str,
        scope: Scope | str,
        exclude: Iterable[Exclusion | str] = (),
    ) -> Resolution:
        """Resolve `coordinate` and its transitive dependencies.

        The result lists a node before its own subtree. Exclusions apply to the whole
        subtree.

        Raises:
            ResolutionError: if any descriptor can not be fetched
            InvalidDeclarationError: on a missing version or an unknown scope

        """
        if isinstance(coordinate, str):
            coordinate = Coordinate.parse(coordinate)
        if not isinstance(scope, Scope):
            scope = Scope.from_string(scope)
        exclusions = frozenset(e if isinstance(e, Exclusion) else Exclusion.parse(e) for e in exclude)
        root = _Visit(coordinate, scope, exclusions)
        self._walk([root])
        return root.flatten()

    def resolve_all(self, declarations: Iterable[DependencyDeclaration] | None = None) -> Resolution:
        """Resolve every declaration with its own exclusions, concatenated in declaration order."""
        if declarations is None:
            declarations = self.declarations
        roots = [_Visit(d.coordinate, d.scope, d.exclude) for d in declarations]
        self._walk(roots)
        resolution = Resolution()
        for root in roots:
            resolution += root.flatten()
        return resolution

    def _fetch(self, visit: _Visit) -> ResolvedNode:
        logger.info("Resolving: %s", visit.coordinate)
        status, descriptor = self.repository.fetch_descriptor(visit.coordinate)
        if not status.is_success:
            raise ResolutionError(visit.coordinate, status)
        if descriptor is None:
            msg = f"Could not locate descriptor for: {visit.coordinate}"
            raise ResolutionError(visit.coordinate, status, msg)
        return ResolvedNode(visit.coordinate, visit.scope, descriptor.packaging, descriptor.dependencies)

    def _skip(self, visit: _Visit) -> bool:
        visit.skipped = self.platform_skip(visit.coordinate, visit.scope)
        if visit.skipped is not None:
            logger.info("Skipping: %s (provided at %s)", visit.coordinate, visit.skipped.available_version)
        return visit.skipped is not None

    def _expand(self, visit: _Visit, node: ResolvedNode) -> list[_Visit]:
        visit.node = node
        visit.children = [_Visit(child, scope, visit.exclude) for child, scope in self.children(node, visit.exclude)]
        return visit.children

    def _walk(self, roots: list[_Visit]) -> None:
        pending: deque[_Visit] = deque(roots)
        with tqdm(desc="resolving", total=len(pending), leave=False, unit=" artifacts") as t:
            if self.max_workers <= 1:
                # don't use concurrency
                while pending:
                    visit = pending.popleft()
                    if not self._skip(visit):
                        new_visits = self._expand(visit, self._fetch(visit))
                        pending.extend(new_visits)
                        t.total += len(new_visits)
                    t.update(1)
                return

            futures: dict[Future[ResolvedNode], _Visit] = {}
            with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="mvnlock-resolver") as pool:
                try:
                    while pending or futures:
                        # fill the pool with the next pending fetches
                        while pending and len(futures) < self.max_workers:
                            visit = pending.popleft()
                            if self._skip(visit):
                                t.update(1)
                                continue
                            futures[pool.submit(self._fetch, visit)] = visit
                        if not futures:
                            continue
                        done, _ = wait(futures, return_when=FIRST_COMPLETED)
                        for finished in done:
                            visit = futures.pop(finished)
                            new_visits = self._expand(visit, finished.result())
                            pending.extend(new_visits)
                            t.total += len(new_visits)
                            t.update(1)
                except BaseException:
                    for future in futures:
                        future.cancel()
                    raise
