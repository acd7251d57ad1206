"""End-to-end tests of the lock pipeline against an in-memory repository."""

from __future__ import annotations

from unittest import TestCase

import pytest
from fakes import FakeRepository, dep

from mvnlock.lockfile import dumps
from mvnlock.models import DependencyDeclaration, Scope
from mvnlock.repository import NotFound, ResolutionError
from mvnlock.resolution import lock


class TestLock(TestCase):
    def setUp(self) -> None:
        self.repository = FakeRepository()

    def test_optional_dependency_is_not_locked(self) -> None:
        self.repository.add("lib:core:1.0.0", dep("lib:util:2.0.0"), dep("lib:extra:1.0.0", optional=True))
        self.repository.add("lib:util:2.0.0")
        result = lock([DependencyDeclaration("lib:core:1.0.0", "implementation")], self.repository, max_workers=2)
        self.assertEqual(["lib:core:1.0.0", "lib:util:2.0.0"], [str(e.coordinate) for e in result.entries])
        core = result.entry("lib", "core")
        util = result.entry("lib", "util")
        assert core is not None
        assert util is not None
        self.assertTrue(core.direct)
        self.assertFalse(util.direct)
        self.assertIs(Scope.COMPILE_ONLY, util.scope)
        self.assertEqual(("lib:util:2.0.0", "lib:extra:1.0.0"), core.dependencies)

    def test_declared_version_beats_transitive(self) -> None:
        self.repository.add("app:feature:1.0", dep("lib:json:2.5", scope="runtime"))
        self.repository.add("lib:json:2.5")
        self.repository.add("lib:json:2.0")
        declarations = [DependencyDeclaration("app:feature:1.0"), DependencyDeclaration("lib:json:2.0")]
        result = lock(declarations, self.repository, max_workers=1)
        json_entry = result.entry("lib", "json")
        assert json_entry is not None
        self.assertEqual("2.0", json_entry.coordinate.version)
        self.assertNotIn("lib:json:2.5", result)
        self.assertNotIn("lib:json:2.5", self.repository.downloaded)

    def test_newest_transitive_version_wins(self) -> None:
        self.repository.add("app:a:1", dep("lib:x:1.0.0"))
        self.repository.add("app:b:1", dep("lib:x:1.2.0"))
        self.repository.add("app:c:1", dep("lib:x:1.1.0-beta"))
        for version in ("1.0.0", "1.2.0", "1.1.0-beta"):
            self.repository.add(f"lib:x:{version}")
        declarations = [DependencyDeclaration(f"app:{name}:1") for name in "abc"]
        result = lock(declarations, self.repository, max_workers=3)
        self.assertEqual(["app:a:1", "app:b:1", "app:c:1", "lib:x:1.2.0"], [str(e.coordinate) for e in result.entries])

    def test_platform_provided_library_is_skipped(self) -> None:
        self.repository.add("app:ui:1.0", dep("com.google.guava:guava:14.0.1"))
        result = lock([DependencyDeclaration("app:ui:1.0")], self.repository, max_workers=1)
        self.assertIsNone(result.entry("com.google.guava", "guava"))
        self.assertEqual(["com.google.guava:guava:14.0.1"], [str(s.coordinate) for s in result.skipped])
        self.assertNotIn("com.google.guava:guava:14.0.1", self.repository.fetched)

    def test_rerun_is_reproducible(self) -> None:
        self.repository.add("app:a:1", dep("lib:x:1.0"), dep("lib:y:1.0", scope="runtime"))
        self.repository.add("app:b:1", dep("lib:x:1.1"), dep("androidx.core:core:1.0.0"))
        for coordinate in ("lib:x:1.0", "lib:x:1.1", "lib:y:1.0"):
            self.repository.add(coordinate)
        declarations = [DependencyDeclaration("app:a:1"), DependencyDeclaration("app:b:1", exclude=["lib:y"])]
        first = lock(declarations, self.repository, max_workers=4)
        second = lock(declarations, self.repository, max_workers=1)
        self.assertEqual(first, second)
        self.assertEqual(dumps(first), dumps(second))

    def test_not_found_aborts(self) -> None:
        self.repository.add("app:a:1", dep("lib:x:1.0"))
        self.repository.add("app:b:1")
        declarations = [DependencyDeclaration("app:b:1"), DependencyDeclaration("app:a:1")]
        with pytest.raises(ResolutionError) as raised:
            lock(declarations, self.repository, max_workers=2)
        self.assertIsInstance(raised.value.status, NotFound)
        self.assertEqual("lib:x:1.0", raised.value.coordinate)
        self.assertEqual([], self.repository.downloaded)
