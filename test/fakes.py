"""An in-memory artifact repository for tests."""

from __future__ import annotations

import threading
from pathlib import Path

from mvnlock.models import Coordinate, DeclaredDependency, Descriptor
from mvnlock.repository import SUCCESS, ArtifactRepository, FetchStatus, NotFound


def dep(description: str, scope: str = "compile", optional: bool = False) -> DeclaredDependency:  # noqa: FBT001, FBT002
    """A declared dependency from a `group:artifact[:version]` string."""
    group, artifact, *version = description.split(":")
    return DeclaredDependency(group, artifact, version[0] if version else None, scope=scope, optional=optional)


class FakeRepository(ArtifactRepository):
    def __init__(self, root: Path | str = "/repository") -> None:
        self.root = Path(root)
        self.descriptors: dict[str, Descriptor] = {}
        self.descriptor_statuses: dict[str, FetchStatus] = {}
        self.download_statuses: dict[str, FetchStatus] = {}
        self.sources_statuses: dict[str, FetchStatus] = {}
        self.local: set[str] = set()
        self.fetched: list[str] = []
        self.downloaded: list[str] = []
        self._lock = threading.Lock()

    def add(self, coordinate: str, *dependencies: DeclaredDependency, packaging: str = "jar") -> Descriptor:
        descriptor = Descriptor(Coordinate.parse(coordinate), packaging=packaging, dependencies=dependencies)
        self.descriptors[str(descriptor.coordinate)] = descriptor
        return descriptor

    def fetch_descriptor(self, coordinate: Coordinate) -> tuple[FetchStatus, Descriptor | None]:
        with self._lock:
            self.fetched.append(str(coordinate))
        if str(coordinate) in self.descriptor_statuses:
            return self.descriptor_statuses[str(coordinate)], None
        descriptor = self.descriptors.get(str(coordinate))
        if descriptor is None:
            return NotFound(), None
        return SUCCESS, descriptor

    def download(self, coordinate: Coordinate, packaging: str = "jar") -> FetchStatus:  # noqa: ARG002
        status = self.download_statuses.get(str(coordinate), SUCCESS)
        with self._lock:
            self.downloaded.append(str(coordinate))
            if status.is_success:
                self.local.add(str(coordinate))
        return status

    def download_sources(self, coordinate: Coordinate) -> FetchStatus:
        return self.sources_statuses.get(str(coordinate), SUCCESS)

    def exists_locally(self, coordinate: Coordinate, packaging: str = "jar") -> bool:  # noqa: ARG002
        return str(coordinate) in self.local

    def local_path(self, coordinate: Coordinate, packaging: str = "jar") -> Path:
        return (
            self.root
            / coordinate.group
            / coordinate.artifact
            / coordinate.version
            / f"{coordinate.artifact}-{coordinate.version}.{packaging}"
        )
