"""Loading a project's direct declarations."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .models import DependencyDeclaration, InvalidDeclarationError

DECLARATIONS_FILENAME = "mvnlock.json"


class DeclarationModel(BaseModel):
    """One direct dependency as written in the declarations file."""

    coordinate: str
    scope: str = "implementation"
    exclude: list[str] = Field(default_factory=list)

    def to_declaration(self) -> DependencyDeclaration:
        """Convert to a validated declaration."""
        return DependencyDeclaration(self.coordinate, self.scope, self.exclude)


class ProjectModel(BaseModel):
    """The declarations file of a project."""

    dependencies: list[DeclarationModel] = Field(default_factory=list)


def parse_declarations(text: str) -> list[DependencyDeclaration]:
    """Parse the JSON text of a declarations file.

    Raises:
        InvalidDeclarationError: if the text is not a valid declarations file

    """
    try:
        project = ProjectModel.model_validate_json(text)
    except ValidationError as e:
        msg = f"Invalid declarations: {e!s}"
        raise InvalidDeclarationError(msg) from e
    return [d.to_declaration() for d in project.dependencies]


def load_declarations(project_root: Path | str) -> list[DependencyDeclaration]:
    """Load the direct declarations of the project at `project_root`."""
    path = Path(project_root) / DECLARATIONS_FILENAME
    if not path.is_file():
        msg = f"{path} does not exist"
        raise InvalidDeclarationError(msg)
    return parse_declarations(path.read_text())
