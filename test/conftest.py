from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from fakes import FakeRepository


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--runintegration",
        action="store_true",
        default=False,
        help="run tests that fetch from real Maven repositories",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "integration: mark test as needing network access to Maven repositories")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--runintegration"):
        # --runintegration given in cli: do not skip integration tests
        return
    skip_integration = pytest.mark.skip(reason="need --runintegration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def fake_repository(tmp_path: Path) -> FakeRepository:
    """An empty in-memory repository whose payloads live under `tmp_path`."""
    return FakeRepository(tmp_path / "repository")


@pytest.fixture
def reset_logging() -> Iterator[None]:
    """Restore the root logger after a test reconfigures it."""
    root_logger = logging.getLogger()
    level = root_logger.level
    handlers = root_logger.handlers[:]
    yield
    root_logger.setLevel(level)
    root_logger.handlers[:] = handlers
