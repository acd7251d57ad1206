"""Unit tests for coordinates, scopes, versions and lock records."""

from __future__ import annotations

import pytest

from mvnlock.models import (
    Coordinate,
    DependencyDeclaration,
    Exclusion,
    InvalidDeclarationError,
    LockEntry,
    LockFile,
    ResolvedNode,
    Scope,
    SkippedArtifact,
    parse_version,
)


class TestCoordinate:
    """Tests for coordinate parsing and identity."""

    def test_parse(self) -> None:
        coordinate = Coordinate.parse("lib:core:1.0.0")
        assert coordinate.group == "lib"
        assert coordinate.artifact == "core"
        assert coordinate.version == "1.0.0"
        assert str(coordinate) == "lib:core:1.0.0"

    def test_range_brackets_are_stripped(self) -> None:
        coordinate = Coordinate.parse("lib:core:[1.0]")
        assert coordinate.version == "1.0"
        assert coordinate == Coordinate.parse("lib:core:1.0")
        assert hash(coordinate) == hash(Coordinate("lib", "core", "1.0"))

    def test_identity_ignores_version(self) -> None:
        assert Coordinate.parse("lib:core:1.0").identity == Coordinate.parse("lib:core:2.0").identity
        assert Coordinate.parse("lib:core:1.0") != Coordinate.parse("lib:core:2.0")

    def test_missing_version(self) -> None:
        with pytest.raises(InvalidDeclarationError, match="Missing version"):
            Coordinate.parse("lib:core")
        with pytest.raises(InvalidDeclarationError, match="Missing version"):
            Coordinate.parse("lib:core:[]")

    def test_malformed(self) -> None:
        with pytest.raises(InvalidDeclarationError):
            Coordinate.parse("lib")
        with pytest.raises(InvalidDeclarationError):
            Coordinate.parse("lib:core:jar:1.0:extra")


class TestVersions:
    """Tests for version ordering."""

    def test_release_outranks_prerelease(self) -> None:
        assert parse_version("1.1.0") > parse_version("1.1.0-beta")
        assert parse_version("1.0") > parse_version("1.0-SNAPSHOT")

    def test_numeric_segments(self) -> None:
        assert parse_version("1.10.0") > parse_version("1.9.0")
        assert parse_version("2") > parse_version("1.99.99")
        assert parse_version("14.0.1") > parse_version("14.0")

    def test_newest_of_mixed_versions(self) -> None:
        versions = ["1.0.0", "1.2.0", "1.1.0-beta"]
        assert max(versions, key=parse_version) == "1.2.0"

    def test_fourth_segment(self) -> None:
        assert parse_version("2.13.4.10") > parse_version("2.13.4.9")
        assert parse_version("2.13.4.2") > parse_version("2.13.4")
        assert parse_version("2.13.4.2") < parse_version("2.13.5")
        assert parse_version("1.2.3.0") == parse_version("1.2.3")

    def test_qualifier_counters(self) -> None:
        assert parse_version("1.0-beta-10") > parse_version("1.0-beta-9")
        assert parse_version("2.0.0-RC10") > parse_version("2.0.0-RC9")
        assert parse_version("2.0.0-RC10") < parse_version("2.0.0")

    def test_qualifier_ranks(self) -> None:
        ordered = ["1.0-alpha-3", "1.0-beta-2", "1.0-M1", "1.0-RC1", "1.0-SNAPSHOT", "1.0"]
        assert sorted(reversed(ordered), key=parse_version) == ordered

    def test_release_qualifiers(self) -> None:
        assert parse_version("5.3.0.RELEASE") == parse_version("5.3.0")
        assert parse_version("1.0.Final") == parse_version("1.0")
        assert str(parse_version("1.2.Final")) == "1.2.0"

    def test_brackets_and_odd_characters(self) -> None:
        assert parse_version("[1.2]") == parse_version("1.2.0")
        assert parse_version("1.0_r2") < parse_version("1.0")

    def test_unparseable(self) -> None:
        with pytest.raises(InvalidDeclarationError, match="Can not parse version"):
            parse_version("RELEASE")


class TestScope:
    """Tests for scope parsing and propagation."""

    def test_from_string(self) -> None:
        assert Scope.from_string("implementation") is Scope.IMPLEMENTATION
        assert Scope.from_string("runtime") is Scope.IMPLEMENTATION
        assert Scope.from_string("compile-only") is Scope.COMPILE_ONLY
        assert Scope.from_string("compile_only") is Scope.COMPILE_ONLY
        assert Scope.from_string("compile") is Scope.COMPILE_ONLY

    def test_unknown_scope(self) -> None:
        with pytest.raises(InvalidDeclarationError, match="Unknown dependency scope"):
            Scope.from_string("test")

    def test_admits(self) -> None:
        assert Scope.IMPLEMENTATION.admits("runtime")
        assert Scope.IMPLEMENTATION.admits("compile")
        assert not Scope.IMPLEMENTATION.admits("test")
        assert Scope.COMPILE_ONLY.admits("compile")
        assert not Scope.COMPILE_ONLY.admits("runtime")
        assert not Scope.COMPILE_ONLY.admits("provided")


class TestExclusion:
    def test_exact_version(self) -> None:
        exclusion = Exclusion.parse("lib:util:2.0.0")
        assert exclusion.matches(Coordinate.parse("lib:util:2.0.0"))
        assert not exclusion.matches(Coordinate.parse("lib:util:2.1.0"))

    def test_any_version(self) -> None:
        exclusion = Exclusion.parse("lib:util")
        assert exclusion.matches(Coordinate.parse("lib:util:2.0.0"))
        assert exclusion.matches(Coordinate.parse("lib:util:3.0.0"))
        assert not exclusion.matches(Coordinate.parse("lib:core:2.0.0"))

    def test_malformed(self) -> None:
        with pytest.raises(InvalidDeclarationError):
            Exclusion.parse("lib")


def test_declaration_defaults() -> None:
    declaration = DependencyDeclaration("lib:core:[1.0.0]", exclude=["lib:util"])
    assert declaration.coordinate == Coordinate.parse("lib:core:1.0.0")
    assert declaration.scope is Scope.IMPLEMENTATION
    assert declaration.exclude == frozenset({Exclusion("lib", "util")})
    assert declaration.direct


def test_resolved_node_is_immutable() -> None:
    node = ResolvedNode(Coordinate.parse("lib:core:1.0.0"), Scope.IMPLEMENTATION)
    with pytest.raises(AttributeError):
        node.scope = Scope.COMPILE_ONLY  # type: ignore[misc]


class TestLockFile:
    def test_to_obj(self) -> None:
        lock = LockFile(
            skipped=[SkippedArtifact("com.google.guava:guava:14.0.1", "14.0.1", Scope.IMPLEMENTATION)],
            entries=[
                LockEntry("lib:core:1.0.0", Scope.IMPLEMENTATION, "jar", True, "/r/core.jar", ["lib:util:2.0.0"]),
            ],
        )
        assert lock.to_obj() == {
            "skipped_artifacts": [
                {"coord": "com.google.guava:guava:14.0.1", "available_version": "14.0.1", "scope": "implementation"}
            ],
            "resolved_artifacts": [
                {
                    "coord": "lib:core:1.0.0",
                    "scope": "implementation",
                    "type": "jar",
                    "direct": True,
                    "path": "/r/core.jar",
                    "deps": ["lib:util:2.0.0"],
                }
            ],
        }
        assert LockFile.from_obj(lock.to_obj()) == lock

    def test_equality_ignores_order(self) -> None:
        a = LockEntry("lib:a:1.0", Scope.IMPLEMENTATION, "jar", True, "/r/a.jar")
        b = LockEntry("lib:b:1.0", Scope.COMPILE_ONLY, "aar", False, "/r/b.aar")
        assert LockFile(entries=[a, b]) == LockFile(entries=[b, a])
        assert LockFile(entries=[a]) != LockFile(entries=[a, b])

    def test_entry_lookup(self) -> None:
        a = LockEntry("lib:a:1.0", Scope.IMPLEMENTATION, "jar", True, "/r/a.jar")
        lock = LockFile(entries=[a])
        assert lock.entry("lib", "a") is a
        assert lock.entry("lib", "b") is None
        assert "lib:a:1.0" in lock
