"""Configuration settings for mvnlock."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, CliImplicitFlag, SettingsConfigDict

from .maven import DEFAULT_REPOSITORIES
from .mvnlock import APP_DIRS

DEFAULT_LOCAL_REPOSITORY = Path(APP_DIRS.user_cache_dir) / "repository"


class Settings(BaseSettings):
    """Settings for mvnlock."""

    project_root: Path = Field(
        default=Path("."),
        description="""Root directory of the project. Its direct dependencies are
        read from `mvnlock.json` and the lock file is written to `.mvnlock/lock.json`.""",
    )
    local_repository: Path = Field(
        default=DEFAULT_LOCAL_REPOSITORY,
        description="""Directory that resolved artifacts are downloaded into.""",
    )
    repositories: list[str] = Field(
        default=list(DEFAULT_REPOSITORIES),
        description="""Remote Maven repositories to fetch from, in priority order.""",
    )
    max_workers: int = Field(
        default=-1,
        description="""Maximum number of concurrent fetches. If not provided,
        the number of logical CPUs will be used.""",
    )
    sources: CliImplicitFlag[bool] = Field(
        default=True,
        description="""Also download the sources jar of every artifact (failures are ignored).""",
    )
    timeout: float = Field(default=30.0, description="Timeout of each HTTP request, in seconds.")
    log_level: str = Field(default="info", description="Log level")
    version: CliImplicitFlag[bool] = Field(
        default=False,
        description="""Show the version of mvnlock and exit.""",
    )

    model_config = SettingsConfigDict(
        env_prefix="MVNLOCK_",
        nested_model_default_partial_update=True,
    )
