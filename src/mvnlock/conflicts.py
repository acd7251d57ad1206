"""Version conflict resolution: an explicit pin wins, otherwise the newest version."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .models import Coordinate, DependencyDeclaration, ResolvedNode

logger = logging.getLogger(__name__)


def deduplicate(nodes: Iterable[ResolvedNode]) -> list[ResolvedNode]:
    """Collapse nodes with the same coordinate, keeping the first one reached."""
    seen: dict[Coordinate, ResolvedNode] = {}
    for node in nodes:
        seen.setdefault(node.coordinate, node)
    return list(seen.values())


def group_by_identity(nodes: Iterable[ResolvedNode]) -> dict[tuple[str, str], list[ResolvedNode]]:
    """Group nodes by `(group, artifact)`, ignoring the version."""
    groups: dict[tuple[str, str], list[ResolvedNode]] = {}
    for node in nodes:
        groups.setdefault(node.coordinate.identity, []).append(node)
    return groups


def select_version(candidates: list[ResolvedNode], pinned: frozenset[Coordinate]) -> ResolvedNode:
    """Pick the winner among different versions of one library.

    A candidate whose coordinate the project declared directly always wins.
    Otherwise the greatest version wins; equal versions are ordered by coordinate.
    """
    for candidate in candidates:
        if candidate.coordinate in pinned:
            return candidate
    return max(candidates, key=lambda n: (n.coordinate.parsed_version, str(n.coordinate)))


def resolve_conflicts(
    nodes: Iterable[ResolvedNode], declarations: Iterable[DependencyDeclaration]
) -> list[ResolvedNode]:
    """Reduce the walk's nodes to exactly one node per library identity.

    This does not check that the selected version is compatible with every consumer
    that asked for a different one.
    """
    pinned = frozenset(d.coordinate for d in declarations)
    resolved = []
    for (group, artifact), candidates in group_by_identity(deduplicate(nodes)).items():
        if len(candidates) == 1:
            resolved.append(candidates[0])
            continue
        winner = select_version(candidates, pinned)
        logger.info(
            "Version conflict for %s:%s between %s; selected %s%s",
            group,
            artifact,
            ", ".join(c.coordinate.version for c in candidates),
            winner.coordinate.version,
            " (declared)" if winner.coordinate in pinned else "",
        )
        resolved.append(winner)
    return resolved
