"""The artifact repository interface the resolver fetches descriptors and payloads through."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .models import InvalidDeclarationError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from .models import Coordinate, Descriptor


class FetchStatus:
    """Outcome of one fetch or download against the configured repositories."""

    @property
    def is_success(self) -> bool:
        """Check if the fetch succeeded."""
        return False

    def describe(self) -> list[str]:
        """Return the diagnostic lines for this status."""
        return [str(self)]

    def __eq__(self, other: object) -> bool:
        """Statuses without payload are equal when they are of the same kind."""
        return type(other) is type(self)

    def __hash__(self) -> int:
        """Compute hash for status."""
        return hash(type(self).__name__)

    def __str__(self) -> str:
        """Return the name of the status."""
        return type(self).__name__


class Success(FetchStatus):
    """The artifact was fetched."""

    @property
    def is_success(self) -> bool:
        """Check if the fetch succeeded."""
        return True


class NotFound(FetchStatus):
    """No configured repository has the coordinate."""


class InvalidHash(FetchStatus):
    """The downloaded payload failed checksum verification."""


class FetchError(FetchStatus):
    """A transport-level failure against a specific repository."""

    def __init__(self, repository: str, response_code: int | None, message: str) -> None:
        """Initialize a fetch error.

        Args:
            repository: Identity of the repository that failed
            response_code: HTTP response code, if a response was received
            message: Reason for the failure

        """
        self.repository = repository
        self.response_code = response_code
        self.message = message

    def describe(self) -> list[str]:
        """Return the diagnostic lines for this status."""
        return [
            f"Repository: {self.repository}",
            f"Response code: {self.response_code}",
            f"Message: {self.message}",
        ]

    def __eq__(self, other: object) -> bool:
        """Check equality with another fetch error."""
        return isinstance(other, FetchError) and (self.repository, self.response_code, self.message) == (
            other.repository,
            other.response_code,
            other.message,
        )

    def __hash__(self) -> int:
        """Compute hash for fetch error."""
        return hash((self.repository, self.response_code, self.message))

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"FetchError({self.repository}, {self.response_code}, {self.message})"


class AggregateError(FetchStatus):
    """Every attempted repository failed; holds one status per repository."""

    def __init__(self, errors: Mapping[str, FetchStatus]) -> None:
        """Initialize an aggregate error."""
        self.errors: dict[str, FetchStatus] = dict(errors)

    def describe(self) -> list[str]:
        """Return the diagnostic lines of every underlying status."""
        lines = []
        for repository, status in self.errors.items():
            lines.append(f"{repository}: {status}")
            if isinstance(status, FetchError):
                lines.extend(f"    {line}" for line in status.describe())
        return lines

    def __eq__(self, other: object) -> bool:
        """Check equality with another aggregate error."""
        return isinstance(other, AggregateError) and self.errors == other.errors

    def __hash__(self) -> int:
        """Compute hash for aggregate error."""
        return hash(frozenset(self.errors.items()))

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"AggregateError({', '.join(f'{r}: {s}' for r, s in self.errors.items())})"


SUCCESS = Success()


class ResolutionError(Exception):
    """A fetch or download failure that aborts the whole resolution run."""

    def __init__(self, coordinate: Coordinate | str, status: FetchStatus, message: str | None = None) -> None:
        """Initialize a resolution error for the offending coordinate and its status."""
        self.coordinate = str(coordinate)
        self.status = status
        if message is None:
            if isinstance(status, NotFound):
                message = f"No artifact found for: {self.coordinate}"
            elif isinstance(status, InvalidHash):
                message = f"Hash validation failed for: {self.coordinate}"
            else:
                message = f"Could not fetch: {self.coordinate}"
        self.message = message
        super().__init__(self.diagnostic())

    def diagnostic(self) -> str:
        """Return a multi-line diagnostic naming the coordinate and the underlying status."""
        lines = [self.message]
        if not isinstance(self.status, (NotFound, InvalidHash)):
            lines.extend(self.status.describe())
        return "\n".join(lines)


class ArtifactRepository(ABC):
    """Fetches package descriptors and payloads for coordinates."""

    @abstractmethod
    def fetch_descriptor(self, coordinate: Coordinate) -> tuple[FetchStatus, Descriptor | None]:
        """Fetch the package descriptor for `coordinate`."""
        raise NotImplementedError

    @abstractmethod
    def download(self, coordinate: Coordinate, packaging: str = "jar") -> FetchStatus:
        """Materialize the payload of `coordinate` at `self.local_path(coordinate, packaging)`."""
        raise NotImplementedError

    def download_sources(self, coordinate: Coordinate) -> FetchStatus:  # noqa: ARG002
        """Materialize the sources payload of `coordinate`; failures are not fatal."""
        return NotFound()

    @abstractmethod
    def exists_locally(self, coordinate: Coordinate, packaging: str = "jar") -> bool:
        """Check if the payload of `coordinate` is already materialized."""
        raise NotImplementedError

    @abstractmethod
    def local_path(self, coordinate: Coordinate, packaging: str = "jar") -> Path:
        """The deterministic local path of the payload of `coordinate`."""
        raise NotImplementedError


__all__ = [
    "SUCCESS",
    "AggregateError",
    "ArtifactRepository",
    "FetchError",
    "FetchStatus",
    "InvalidDeclarationError",
    "InvalidHash",
    "NotFound",
    "ResolutionError",
    "Success",
]
