"""An artifact repository backed by remote Maven repositories over HTTP."""

from __future__ import annotations

import hashlib
import logging
import os
import re
import threading
import xml.etree.ElementTree as ET
from pathlib import Path
from tempfile import mkstemp
from typing import TYPE_CHECKING

from requests import RequestException, Session

from .models import Coordinate, DeclaredDependency, Descriptor
from .repository import SUCCESS, AggregateError, ArtifactRepository, FetchError, InvalidHash, NotFound

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .repository import FetchStatus

logger = logging.getLogger(__name__)

DEFAULT_REPOSITORIES = (
    "https://repo1.maven.org/maven2",
    "https://maven.google.com",
)

_PROPERTY = re.compile(r"\$\{([^}]+)\}")
_MAX_PARENT_DEPTH = 16
_MAX_INTERPOLATION_PASSES = 8

# packaging types whose payload is stored under another extension
_EXTENSIONS = {
    "bundle": "jar",
    "maven-plugin": "jar",
    "eclipse-plugin": "jar",
    "hk2-jar": "jar",
}


def extension(packaging: str) -> str:
    """The file extension of the payload of an artifact with `packaging`."""
    return _EXTENSIONS.get(packaging, packaging or "jar")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(element: ET.Element | None, name: str) -> ET.Element | None:
    if element is None:
        return None
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None


def _children(element: ET.Element | None, name: str) -> list[ET.Element]:
    if element is None:
        return []
    return [child for child in element if _local_name(child.tag) == name]


def _text(element: ET.Element | None, name: str) -> str | None:
    child = _child(element, name)
    if child is None or child.text is None:
        return None
    return child.text.strip() or None


def interpolate(value: str | None, properties: Mapping[str, str]) -> str | None:
    """Substitute `${name}` references in `value`; unknown references are left as they are."""
    if value is None:
        return None
    for _ in range(_MAX_INTERPOLATION_PASSES):
        substituted = _PROPERTY.sub(lambda m: properties.get(m.group(1), m.group(0)), value)
        if substituted == value:
            break
        value = substituted
    return value


class PomModel:
    """The parts of a POM needed to list an artifact's dependencies."""

    def __init__(  # noqa: PLR0913
        self,
        group: str | None,
        artifact: str | None,
        version: str | None,
        packaging: str = "jar",
        parent: Coordinate | None = None,
        properties: Mapping[str, str] | None = None,
        managed: Mapping[tuple[str, str], str] | None = None,
        dependencies: Iterable[dict[str, str | None]] = (),
    ) -> None:
        """Initialize a POM model; group and version may be inherited from the parent."""
        self.group = group
        self.artifact = artifact
        self.version = version
        self.packaging = packaging
        self.parent = parent
        self.properties: dict[str, str] = dict(properties or {})
        self.managed: dict[tuple[str, str], str] = dict(managed or {})
        self.dependencies: list[dict[str, str | None]] = list(dependencies)

    def inherit(self, parent: PomModel) -> PomModel:
        """Return this model with the properties, managed versions and dependencies of `parent` merged in."""
        own = {(d["groupId"], d["artifactId"]) for d in self.dependencies}
        return PomModel(
            group=self.group or parent.group,
            artifact=self.artifact,
            version=self.version or parent.version,
            packaging=self.packaging,
            parent=self.parent,
            properties={**parent.properties, **self.properties},
            managed={**parent.managed, **self.managed},
            dependencies=[d for d in parent.dependencies if (d["groupId"], d["artifactId"]) not in own]
            + self.dependencies,
        )

    def effective_properties(self) -> dict[str, str]:
        """Properties including the implicit `project.*` ones."""
        properties = dict(self.properties)
        implicit = {
            "project.groupId": self.group,
            "project.artifactId": self.artifact,
            "project.version": self.version,
            "pom.groupId": self.group,
            "pom.version": self.version,
            "version": self.version,
        }
        if self.parent is not None:
            implicit["project.parent.groupId"] = self.parent.group
            implicit["project.parent.version"] = self.parent.version
        properties.update({k: v for k, v in implicit.items() if v is not None})
        return properties

    def to_descriptor(self, coordinate: Coordinate) -> Descriptor:
        """Build the descriptor of `coordinate` with every reference interpolated."""
        properties = self.effective_properties()
        managed = {
            (interpolate(g, properties), interpolate(a, properties)): interpolate(v, properties)
            for (g, a), v in self.managed.items()
        }
        dependencies = []
        for raw in self.dependencies:
            group = interpolate(raw["groupId"], properties) or ""
            artifact = interpolate(raw["artifactId"], properties) or ""
            version = interpolate(raw.get("version"), properties) or managed.get((group, artifact))
            dependencies.append(
                DeclaredDependency(
                    group=group,
                    artifact=artifact,
                    version=version,
                    scope=interpolate(raw.get("scope"), properties) or "compile",
                    optional=(interpolate(raw.get("optional"), properties) or "").lower() == "true",
                )
            )
        packaging = interpolate(self.packaging, properties) or "jar"
        return Descriptor(coordinate, packaging=packaging, dependencies=dependencies)


def _raw_dependency(element: ET.Element) -> dict[str, str | None]:
    return {
        "groupId": _text(element, "groupId"),
        "artifactId": _text(element, "artifactId"),
        "version": _text(element, "version"),
        "scope": _text(element, "scope"),
        "optional": _text(element, "optional"),
    }


def parse_pom(text: str | bytes) -> PomModel:
    """Parse the text of a POM.

    Raises:
        ValueError: if the text is not a POM

    """
    try:
        root = ET.fromstring(text)  # noqa: S314
    except ET.ParseError as e:
        msg = f"Malformed POM: {e!s}"
        raise ValueError(msg) from e
    if _local_name(root.tag) != "project":
        msg = f"Expected a <project> element, found <{_local_name(root.tag)}>"
        raise ValueError(msg)

    parent_element = _child(root, "parent")
    parent = None
    if parent_element is not None:
        parent_group = _text(parent_element, "groupId")
        parent_artifact = _text(parent_element, "artifactId")
        parent_version = _text(parent_element, "version")
        if parent_group and parent_artifact and parent_version:
            parent = Coordinate(parent_group, parent_artifact, parent_version)

    properties: dict[str, str] = {}
    properties_element = _child(root, "properties")
    if properties_element is not None:
        for prop in properties_element:
            properties[_local_name(prop.tag)] = (prop.text or "").strip()

    managed: dict[tuple[str, str], str] = {}
    management = _child(_child(root, "dependencyManagement"), "dependencies")
    for element in _children(management, "dependency"):
        raw = _raw_dependency(element)
        if raw["scope"] == "import":
            logger.debug("Ignoring imported dependency management from %s:%s", raw["groupId"], raw["artifactId"])
            continue
        if raw["groupId"] and raw["artifactId"] and raw["version"]:
            managed[(raw["groupId"], raw["artifactId"])] = raw["version"]

    dependencies = [
        raw
        for raw in map(_raw_dependency, _children(_child(root, "dependencies"), "dependency"))
        if raw["groupId"] and raw["artifactId"]
    ]

    return PomModel(
        group=_text(root, "groupId"),
        artifact=_text(root, "artifactId"),
        version=_text(root, "version"),
        packaging=_text(root, "packaging") or "jar",
        parent=parent,
        properties=properties,
        managed=managed,
        dependencies=dependencies,
    )


def combine_statuses(errors: Mapping[str, FetchStatus]) -> FetchStatus:
    """Reduce the failed attempts against each repository to a single status."""
    if all(isinstance(status, NotFound) for status in errors.values()):
        return NotFound()
    if len(errors) == 1:
        return next(iter(errors.values()))
    return AggregateError(errors)


class MavenRepository(ArtifactRepository):
    """Fetches artifacts from remote Maven repositories into a local repository.

    Remote repositories are tried in order; the first one that has the file wins.
    Every fetched file is verified against its `.sha1` checksum when the remote
    publishes one.
    """

    def __init__(
        self,
        local_repository: Path | str,
        remotes: Iterable[str] = DEFAULT_REPOSITORIES,
        session: Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize a Maven repository.

        Args:
            local_repository: Directory the artifacts are materialized into
            remotes: Base URLs of the remote repositories, in priority order
            session: HTTP session shared by every thread; if omitted, each thread gets its own
            timeout: Timeout of each HTTP request, in seconds

        """
        self.local_repository = Path(local_repository)
        self.remotes: tuple[str, ...] = tuple(r.rstrip("/") for r in remotes)
        self._shared_session = session
        self._local = threading.local()
        self.timeout = timeout

    @property
    def session(self) -> Session:
        """The HTTP session of the calling thread."""
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = Session()
        return session

    @staticmethod
    def artifact_path(coordinate: Coordinate, ext: str, classifier: str | None = None) -> str:
        """The path of a file of `coordinate` relative to a repository root."""
        suffix = f"-{classifier}" if classifier else ""
        return "/".join(
            (
                *coordinate.group.split("."),
                coordinate.artifact,
                coordinate.version,
                f"{coordinate.artifact}-{coordinate.version}{suffix}.{ext}",
            )
        )

    def local_path(self, coordinate: Coordinate, packaging: str = "jar") -> Path:
        """The deterministic local path of the payload of `coordinate`."""
        return self.local_repository / self.artifact_path(coordinate, extension(packaging))

    def exists_locally(self, coordinate: Coordinate, packaging: str = "jar") -> bool:
        """Check if the payload of `coordinate` is already in the local repository."""
        return self.local_path(coordinate, packaging).is_file()

    def fetch_descriptor(self, coordinate: Coordinate) -> tuple[FetchStatus, Descriptor | None]:
        """Fetch and parse the POM of `coordinate`, including its parent POMs."""
        status, model = self._load_model(coordinate, depth=0)
        if model is None:
            return status, None
        return SUCCESS, model.to_descriptor(coordinate)

    def download(self, coordinate: Coordinate, packaging: str = "jar") -> FetchStatus:
        """Download the payload of `coordinate` into the local repository."""
        return self._fetch_to(self.artifact_path(coordinate, extension(packaging)))

    def download_sources(self, coordinate: Coordinate) -> FetchStatus:
        """Download the sources jar of `coordinate` into the local repository."""
        return self._fetch_to(self.artifact_path(coordinate, "jar", classifier="sources"))

    def _load_model(self, coordinate: Coordinate, depth: int) -> tuple[FetchStatus, PomModel | None]:
        relative = self.artifact_path(coordinate, "pom")
        path = self.local_repository / relative
        if not path.is_file():
            status = self._fetch_to(relative)
            if not status.is_success:
                return status, None
        try:
            model = parse_pom(path.read_bytes())
        except ValueError as e:
            return FetchError(str(self.local_repository), None, f"{relative}: {e!s}"), None
        if model.parent is None:
            return SUCCESS, model
        if depth >= _MAX_PARENT_DEPTH:
            logger.warning("Not following the parent of %s: too many parent POMs", coordinate)
            return SUCCESS, model
        status, parent = self._load_model(model.parent, depth + 1)
        if parent is None:
            logger.error("Could not fetch parent %s of %s", model.parent, coordinate)
            return status, None
        return SUCCESS, model.inherit(parent)

    def _fetch_to(self, relative: str) -> FetchStatus:
        status, content = self._get(relative)
        if content is None:
            return status
        destination = self.local_repository / relative
        destination.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = mkstemp(dir=destination.parent, prefix=f".{destination.name}.", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            Path(tmp_name).replace(destination)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return status

    def _get(self, relative: str) -> tuple[FetchStatus, bytes | None]:
        errors: dict[str, FetchStatus] = {}
        for remote in self.remotes:
            status, content = self._get_from(remote, f"{remote}/{relative}")
            if content is not None:
                return status, content
            logger.debug("%s: %s", remote, status)
            errors[remote] = status
        return combine_statuses(errors), None

    def _get_from(self, remote: str, url: str) -> tuple[FetchStatus, bytes | None]:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except RequestException as e:
            return FetchError(remote, None, str(e)), None
        if response.status_code == 404:  # noqa: PLR2004
            return NotFound(), None
        if response.status_code != 200:  # noqa: PLR2004
            return FetchError(remote, response.status_code, response.reason or ""), None
        content = response.content
        if not self._verify(url, content):
            return InvalidHash(), None
        return SUCCESS, content

    def _verify(self, url: str, content: bytes) -> bool:
        """Check `content` against the published `.sha1` checksum of `url`, if there is one."""
        try:
            response = self.session.get(f"{url}.sha1", timeout=self.timeout)
        except RequestException as e:
            logger.debug("Could not fetch the checksum of %s: %s", url, e)
            return True
        if response.status_code != 200 or not response.text.strip():  # noqa: PLR2004
            logger.debug("No checksum published for %s", url)
            return True
        expected = response.text.split()[0].strip().lower()
        return hashlib.sha1(content).hexdigest() == expected  # noqa: S324
