"""Core data models for dependency resolution and lock files."""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from semantic_version import Version

if TYPE_CHECKING:
    from collections.abc import Iterable

_RANGE_BRACKETS = re.compile(r"[\[\]]")
_INVALID_VERSION_CHARS = re.compile(r"[^0-9A-Za-z.+-]")

_RELEASE_PREFIX = re.compile(r"^(\d+(?:\.\d+)*)(.*)$")
_QUALIFIER_TOKEN = re.compile(r"\d+|[A-Za-z]+")

# qualifiers ordered from oldest to newest; anything unknown sorts after snapshot
_QUALIFIER_RANKS = {
    "alpha": 0,
    "a": 0,
    "beta": 1,
    "b": 1,
    "milestone": 2,
    "m": 2,
    "rc": 3,
    "cr": 3,
    "snapshot": 4,
}
_UNKNOWN_QUALIFIER_RANK = 5
# qualifiers that mean a plain release
_RELEASE_QUALIFIERS = frozenset(("final", "ga", "release"))


class InvalidDeclarationError(ValueError):
    """A coordinate, version or scope that can not be resolved as written."""


def strip_range(version: str) -> str:
    """Strip Maven range brackets from a version string, so that `[1.0]` becomes `1.0`."""
    return _RANGE_BRACKETS.sub("", version).strip()


class MavenVersion:
    """A comparable Maven-style version.

    The first three numeric segments form a semantic version; further numeric
    segments (`2.13.4.2`) extend it. Everything after the numeric prefix is a
    qualifier, split into word and number tokens that compare as ranked words and
    integers, so `beta-10` > `beta-9` and `RC10` > `RC9`. A qualified version ranks
    below the plain release with the same numeric prefix.
    """

    def __init__(self, release: tuple[int, ...], qualifier: tuple[str | int, ...] = ()) -> None:
        """Initialize a version.

        Args:
            release: Numeric segments of the version
            qualifier: Word and number tokens following the numeric segments

        """
        padded = (*release, 0, 0, 0)
        self.semantic: Version = Version(major=padded[0], minor=padded[1], patch=padded[2])
        extra = list(release[3:])
        while extra and extra[-1] == 0:
            extra.pop()
        self.extra: tuple[int, ...] = tuple(extra)
        self.qualifier: tuple[str | int, ...] = qualifier

    @property
    def key(self) -> tuple[Any, ...]:
        """The tuple this version is ordered by."""
        qualifier_key = tuple(
            (1, token, "")
            if isinstance(token, int)
            else (0, _QUALIFIER_RANKS.get(token, _UNKNOWN_QUALIFIER_RANK), token)
            for token in self.qualifier
        )
        return self.semantic, self.extra, not self.qualifier, qualifier_key

    def __str__(self) -> str:
        """Return the normalized version string."""
        numeric = ".".join(str(n) for n in (self.semantic.major, self.semantic.minor, self.semantic.patch, *self.extra))
        if not self.qualifier:
            return numeric
        return f"{numeric}-{'-'.join(str(t) for t in self.qualifier)}"

    def __repr__(self) -> str:
        """Return the representation of the version."""
        return f"{self.__class__.__name__}({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        """Check equality with another version."""
        if isinstance(other, MavenVersion):
            return self.key == other.key
        return False

    def __hash__(self) -> int:
        """Compute hash for version."""
        return hash(self.key)

    def __lt__(self, other: object) -> bool:
        """Compare versions for sorting."""
        if not isinstance(other, MavenVersion):
            msg = "Need a MavenVersion"
            raise TypeError(msg)
        return self.key < other.key


def parse_version(version_string: str) -> MavenVersion:
    """Parse a Maven-style version string into a comparable version.

    Missing segments are padded (`1.2` -> `1.2.0`) and anything after the numeric
    prefix is a qualifier, so a plain release outranks a qualified one with the
    same numeric prefix (`1.1.0` > `1.1.0-beta`, `1.0` > `1.0-SNAPSHOT`).
    Known qualifiers rank alpha < beta < milestone < rc < snapshot, and
    `Final`, `GA` and `RELEASE` mean a plain release.

    Raises:
        InvalidDeclarationError: if the string has no leading numeric segment

    """
    cleaned = _INVALID_VERSION_CHARS.sub("-", strip_range(version_string))
    match = _RELEASE_PREFIX.match(cleaned)
    if match is None:
        msg = f"Can not parse version <{version_string}>"
        raise InvalidDeclarationError(msg)
    release = tuple(int(segment) for segment in match.group(1).split("."))
    qualifier = tuple(
        int(token) if token.isdigit() else token.lower() for token in _QUALIFIER_TOKEN.findall(match.group(2))
    )
    if all(token in _RELEASE_QUALIFIERS for token in qualifier):
        qualifier = ()
    return MavenVersion(release, qualifier)


class Scope(str, Enum):
    """How a dependency is used by its consumer."""

    IMPLEMENTATION = "implementation"
    COMPILE_ONLY = "compile-only"

    @classmethod
    def from_string(cls, value: str) -> Scope:
        """Parse a scope from either its own name or a descriptor scope.

        Descriptors spell implementation scope as `runtime` and compile-only scope
        as `compile`.
        """
        normalized = value.strip().lower().replace("_", "-")
        if normalized in ("implementation", "runtime"):
            return cls.IMPLEMENTATION
        if normalized in ("compile-only", "compileonly", "compile"):
            return cls.COMPILE_ONLY
        msg = f"Unknown dependency scope <{value}>"
        raise InvalidDeclarationError(msg)

    @property
    def descriptor_scope(self) -> str:
        """The scope name used for this scope inside a package descriptor."""
        return "runtime" if self is Scope.IMPLEMENTATION else "compile"

    def admits(self, descriptor_scope: str) -> bool:
        """Check if a child declared with `descriptor_scope` is propagated through this scope.

        A compile-only dependency only pulls in its compile-only children; an
        implementation dependency pulls in both kinds.
        """
        if self is Scope.COMPILE_ONLY:
            return descriptor_scope == Scope.COMPILE_ONLY.descriptor_scope
        return descriptor_scope in (Scope.IMPLEMENTATION.descriptor_scope, Scope.COMPILE_ONLY.descriptor_scope)


class Coordinate:
    """A `group:artifact:version` artifact identity with range brackets stripped."""

    def __init__(self, group: str, artifact: str, version: str) -> None:
        """Initialize a coordinate.

        Args:
            group: Group id of the artifact
            artifact: Artifact id
            version: Version, optionally wrapped in range brackets

        """
        version = strip_range(version)
        if not group or not artifact:
            msg = f"Invalid coordinate <{group}:{artifact}:{version}>"
            raise InvalidDeclarationError(msg)
        if not version:
            msg = f"Missing version for <{group}:{artifact}>"
            raise InvalidDeclarationError(msg)
        self.group: str = group
        self.artifact: str = artifact
        self.version: str = version

    @classmethod
    def parse(cls, description: str) -> Coordinate:
        """Create a coordinate from a `group:artifact:version` string."""
        parts = description.strip().split(":")
        if len(parts) == 2:  # noqa: PLR2004
            msg = f"Missing version for <{description}>"
            raise InvalidDeclarationError(msg)
        if len(parts) != 3:  # noqa: PLR2004
            msg = f"Can not parse coordinate <{description}>"
            raise InvalidDeclarationError(msg)
        return cls(*parts)

    @property
    def identity(self) -> tuple[str, str]:
        """The `(group, artifact)` pair shared by every version of this library."""
        return self.group, self.artifact

    @property
    def parsed_version(self) -> MavenVersion:
        """The comparable form of this coordinate's version."""
        return parse_version(self.version)

    def __str__(self) -> str:
        """Return the canonical coordinate string."""
        return f"{self.group}:{self.artifact}:{self.version}"

    def __repr__(self) -> str:
        """Return the representation of the coordinate."""
        return f"{self.__class__.__name__}({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        """Check equality with another coordinate."""
        return isinstance(other, Coordinate) and str(self) == str(other)

    def __lt__(self, other: object) -> bool:
        """Compare coordinates for sorting."""
        if not isinstance(other, Coordinate):
            msg = "Need a Coordinate"
            raise TypeError(msg)
        return str(self) < str(other)

    def __hash__(self) -> int:
        """Compute hash for coordinate."""
        return hash(str(self))


class Exclusion:
    """An excluded coordinate; without a version it excludes every version of the library."""

    def __init__(self, group: str, artifact: str, version: str | None = None) -> None:
        """Initialize an exclusion."""
        self.group = group
        self.artifact = artifact
        self.version = strip_range(version) if version else None

    @classmethod
    def parse(cls, description: str) -> Exclusion:
        """Create an exclusion from a `group:artifact[:version]` string."""
        parts = description.strip().split(":")
        if len(parts) not in (2, 3) or not all(parts):
            msg = f"Can not parse exclusion <{description}>"
            raise InvalidDeclarationError(msg)
        return cls(*parts)

    def matches(self, coordinate: Coordinate) -> bool:
        """Check if `coordinate` is excluded."""
        if coordinate.identity != (self.group, self.artifact):
            return False
        return self.version is None or self.version == coordinate.version

    def __str__(self) -> str:
        """Return the exclusion string."""
        if self.version is None:
            return f"{self.group}:{self.artifact}"
        return f"{self.group}:{self.artifact}:{self.version}"

    def __eq__(self, other: object) -> bool:
        """Check equality with another exclusion."""
        return isinstance(other, Exclusion) and str(self) == str(other)

    def __hash__(self) -> int:
        """Compute hash for exclusion."""
        return hash(str(self))


def is_excluded(coordinate: Coordinate, exclude: Iterable[Exclusion]) -> bool:
    """Check if any exclusion in `exclude` matches `coordinate`."""
    return any(exclusion.matches(coordinate) for exclusion in exclude)


class DependencyDeclaration:
    """A dependency listed directly by the consuming project."""

    def __init__(
        self,
        coordinate: Coordinate | str,
        scope: Scope | str = Scope.IMPLEMENTATION,
        exclude: Iterable[Exclusion | str] = (),
    ) -> None:
        """Initialize a direct declaration."""
        if isinstance(coordinate, str):
            coordinate = Coordinate.parse(coordinate)
        if not isinstance(scope, Scope):
            scope = Scope.from_string(scope)
        self.coordinate: Coordinate = coordinate
        self.scope: Scope = scope
        self.exclude: frozenset[Exclusion] = frozenset(
            e if isinstance(e, Exclusion) else Exclusion.parse(e) for e in exclude
        )
        self.direct: bool = True

    def __str__(self) -> str:
        """Return string representation of the declaration."""
        return f"{self.scope.value}({self.coordinate!s})"

    def __eq__(self, other: object) -> bool:
        """Check equality with another declaration."""
        return (
            isinstance(other, DependencyDeclaration)
            and self.coordinate == other.coordinate
            and self.scope == other.scope
            and self.exclude == other.exclude
        )

    def __hash__(self) -> int:
        """Compute hash for declaration."""
        return hash((self.coordinate, self.scope, self.exclude))


class DeclaredDependency:
    """One entry in a package descriptor's dependency list."""

    def __init__(
        self,
        group: str,
        artifact: str,
        version: str | None = None,
        scope: str = "compile",
        optional: bool = False,  # noqa: FBT001, FBT002
    ) -> None:
        """Initialize a declared dependency."""
        self.group = group
        self.artifact = artifact
        self.version = strip_range(version) if version else None
        self.scope = scope
        self.optional = optional

    @property
    def coordinate(self) -> Coordinate:
        """The coordinate of this dependency; raises if the descriptor did not give a version."""
        if not self.version:
            msg = f"Missing version for <{self.group}:{self.artifact}>"
            raise InvalidDeclarationError(msg)
        return Coordinate(self.group, self.artifact, self.version)

    def __str__(self) -> str:
        """Return the dependency as a coordinate string."""
        if not self.version:
            return f"{self.group}:{self.artifact}"
        return f"{self.group}:{self.artifact}:{self.version}"

    def __repr__(self) -> str:
        """Return the representation of the declared dependency."""
        return (
            f"{self.__class__.__name__}({str(self)!r}, scope={self.scope!r}, optional={self.optional!r})"
        )

    def __eq__(self, other: object) -> bool:
        """Check equality with another declared dependency."""
        return isinstance(other, DeclaredDependency) and (
            self.group,
            self.artifact,
            self.version,
            self.scope,
            self.optional,
        ) == (other.group, other.artifact, other.version, other.scope, other.optional)

    def __hash__(self) -> int:
        """Compute hash for declared dependency."""
        return hash((self.group, self.artifact, self.version, self.scope, self.optional))


class Descriptor:
    """A fetched package descriptor: packaging type and declared dependencies."""

    def __init__(
        self,
        coordinate: Coordinate,
        packaging: str = "jar",
        dependencies: Iterable[DeclaredDependency] = (),
    ) -> None:
        """Initialize a descriptor."""
        self.coordinate = coordinate
        self.packaging = packaging or "jar"
        self.dependencies: tuple[DeclaredDependency, ...] = tuple(dependencies)


class ResolvedNode:
    """A graph vertex reached during the walk.

    The same library may be reached through several paths and therefore appear in
    several nodes; those duplicates are reconciled by conflict resolution.
    """

    __slots__ = ("coordinate", "dependencies", "packaging", "scope")

    def __init__(
        self,
        coordinate: Coordinate,
        scope: Scope,
        packaging: str = "jar",
        dependencies: Iterable[DeclaredDependency] = (),
    ) -> None:
        """Initialize a resolved node."""
        object.__setattr__(self, "coordinate", coordinate)
        object.__setattr__(self, "scope", scope)
        object.__setattr__(self, "packaging", packaging)
        object.__setattr__(self, "dependencies", tuple(dependencies))

    def __setattr__(self, name: str, value: object) -> None:
        """Resolved nodes are immutable."""
        msg = f"{self.__class__.__name__} is immutable"
        raise AttributeError(msg)

    def __str__(self) -> str:
        """Return string representation of the node."""
        return f"{self.coordinate!s} ({self.scope.value})"

    def __repr__(self) -> str:
        """Return the representation of the node."""
        return f"{self.__class__.__name__}({str(self.coordinate)!r}, {self.scope.value!r})"


class SkippedArtifact:
    """A dependency left unresolved because the host platform already provides it."""

    def __init__(self, coordinate: Coordinate | str, available_version: str, scope: Scope | str) -> None:
        """Initialize a skipped artifact record."""
        if isinstance(coordinate, str):
            coordinate = Coordinate.parse(coordinate)
        if not isinstance(scope, Scope):
            scope = Scope.from_string(scope)
        self.coordinate: Coordinate = coordinate
        self.available_version: str = available_version
        self.scope: Scope = scope

    def to_obj(self) -> dict[str, str]:
        """Convert the record to dictionary representation."""
        return {
            "coord": str(self.coordinate),
            "available_version": self.available_version,
            "scope": self.scope.value,
        }

    @classmethod
    def from_obj(cls, obj: dict[str, Any]) -> SkippedArtifact:
        """Create a record from its dictionary representation."""
        return cls(obj["coord"], obj["available_version"], obj["scope"])

    def _key(self) -> tuple[str, str, str]:
        return str(self.coordinate), self.available_version, self.scope.value

    def __eq__(self, other: object) -> bool:
        """Check equality with another record."""
        return isinstance(other, SkippedArtifact) and self._key() == other._key()

    def __lt__(self, other: object) -> bool:
        """Compare records for sorting."""
        if not isinstance(other, SkippedArtifact):
            msg = "Need a SkippedArtifact"
            raise TypeError(msg)
        return self._key() < other._key()

    def __hash__(self) -> int:
        """Compute hash for record."""
        return hash(self._key())

    def __repr__(self) -> str:
        """Return the representation of the record."""
        return f"{self.__class__.__name__}({str(self.coordinate)!r}, {self.available_version!r})"


class LockEntry:
    """The final record for one resolved and materialized artifact."""

    def __init__(  # noqa: PLR0913
        self,
        coordinate: Coordinate | str,
        scope: Scope | str,
        packaging: str,
        direct: bool,  # noqa: FBT001
        path: Path | str,
        dependencies: Iterable[str] = (),
    ) -> None:
        """Initialize a lock entry.

        Args:
            coordinate: Coordinate of the artifact
            scope: Scope the artifact was resolved under
            packaging: Packaging type from the descriptor (`jar`, `aar`, ...)
            direct: Whether the project declared this coordinate itself
            path: Local path of the materialized payload
            dependencies: Raw coordinates declared by the artifact's descriptor

        """
        if isinstance(coordinate, str):
            coordinate = Coordinate.parse(coordinate)
        if not isinstance(scope, Scope):
            scope = Scope.from_string(scope)
        self.coordinate: Coordinate = coordinate
        self.scope: Scope = scope
        self.packaging: str = packaging
        self.direct: bool = direct
        self.path: Path = Path(path)
        self.dependencies: tuple[str, ...] = tuple(dependencies)

    def to_obj(self) -> dict[str, Any]:
        """Convert entry to dictionary representation."""
        return {
            "coord": str(self.coordinate),
            "scope": self.scope.value,
            "type": self.packaging,
            "direct": self.direct,
            "path": str(self.path),
            "deps": list(self.dependencies),
        }

    @classmethod
    def from_obj(cls, obj: dict[str, Any]) -> LockEntry:
        """Create an entry from its dictionary representation."""
        return cls(
            coordinate=obj["coord"],
            scope=obj["scope"],
            packaging=obj["type"],
            direct=obj["direct"],
            path=obj["path"],
            dependencies=obj.get("deps", ()),
        )

    def _key(self) -> tuple[Any, ...]:
        return (
            str(self.coordinate),
            self.scope.value,
            self.packaging,
            self.direct,
            str(self.path),
            self.dependencies,
        )

    def __eq__(self, other: object) -> bool:
        """Check equality with another entry."""
        return isinstance(other, LockEntry) and self._key() == other._key()

    def __lt__(self, other: object) -> bool:
        """Compare entries for sorting."""
        if not isinstance(other, LockEntry):
            msg = "Need a LockEntry"
            raise TypeError(msg)
        return self._key() < other._key()

    def __hash__(self) -> int:
        """Compute hash for entry."""
        return hash(self._key())

    def __repr__(self) -> str:
        """Return the representation of the entry."""
        return f"{self.__class__.__name__}({str(self.coordinate)!r}, {self.scope.value!r})"


class LockFile:
    """All skipped artifacts and lock entries of one resolution run."""

    def __init__(self, skipped: Iterable[SkippedArtifact] = (), entries: Iterable[LockEntry] = ()) -> None:
        """Initialize a lock file."""
        self.skipped: list[SkippedArtifact] = list(skipped)
        self.entries: list[LockEntry] = list(entries)

    def __len__(self) -> int:
        """Return the number of resolved artifacts."""
        return len(self.entries)

    def __contains__(self, coordinate: Coordinate | str) -> bool:
        """Check if a coordinate was resolved."""
        return any(str(entry.coordinate) == str(coordinate) for entry in self.entries)

    def entry(self, group: str, artifact: str) -> LockEntry | None:
        """Return the entry for a library identity, if it was resolved."""
        for entry in self.entries:
            if entry.coordinate.identity == (group, artifact):
                return entry
        return None

    def to_obj(self) -> dict[str, Any]:
        """Convert the lock file to dictionary representation."""
        return {
            "skipped_artifacts": [s.to_obj() for s in self.skipped],
            "resolved_artifacts": [e.to_obj() for e in self.entries],
        }

    @classmethod
    def from_obj(cls, obj: dict[str, Any]) -> LockFile:
        """Create a lock file from its dictionary representation."""
        return cls(
            skipped=map(SkippedArtifact.from_obj, obj.get("skipped_artifacts", ())),
            entries=map(LockEntry.from_obj, obj.get("resolved_artifacts", ())),
        )

    def __eq__(self, other: object) -> bool:
        """Lock files are equal when they hold the same records, regardless of order."""
        return (
            isinstance(other, LockFile)
            and frozenset(self.skipped) == frozenset(other.skipped)
            and frozenset(self.entries) == frozenset(other.entries)
        )

    def __hash__(self) -> int:
        """Compute hash for lock file."""
        return hash((frozenset(self.skipped), frozenset(self.entries)))
