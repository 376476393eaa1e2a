"""References to the parsed feature, scenario and step definitions."""

from pathlib import Path

from pydantic import Field

from bdd_reporting.models.base import Model


class Step(Model):
    """A single step as written in the feature file."""

    prefix: str = Field(..., description="Step keyword (Given, When, Then, ...)")
    text: str = Field(..., description="Step text following the keyword")
    line: int = Field(default=0, description="Source line of the step")


class Scenario(Model):
    """Scenario reference within a feature."""

    name: str | None = Field(default=None, description="Scenario title")
    description: str | None = Field(default=None, description="Free text below title")
    line: int = Field(default=0, description="Source line of the scenario")
    section_index: int = Field(default=0, description="0-based section position")
    example_index: int = Field(
        default=-1, description="0-based outline example row, -1 for plain scenarios"
    )

    @property
    def ref_id(self) -> str:
        """Short positional identifier, e.g. ``[2.1:14]``."""
        example = "" if self.example_index == -1 else f".{self.example_index + 1}"
        return f"[{self.section_index + 1}{example}:{self.line}]"

    @property
    def name_for_report(self) -> str:
        """Name shown in protocol lines and reports."""
        if not self.name or not self.name.strip():
            return self.ref_id
        return f"{self.ref_id} {self.name}"


class Feature(Model):
    """Feature file reference."""

    path: Path = Field(..., description="Location of the feature file on disk")
    display_uri: str = Field(..., description="URI shown in reports")
    qualified_name: str = Field(
        ..., description="Package-qualified name used for artifact file names"
    )
    name: str | None = Field(default=None, description="Feature title")
    description: str | None = Field(default=None, description="Free text below title")
    line: int = Field(default=1, description="Source line of the Feature keyword")

    @property
    def name_for_report(self) -> str:
        """Feature title prefixed with the file name, e.g. ``[users] Users API``."""
        if not self.name or not self.name.strip():
            return f"[{self.path.stem}]"
        return f"[{self.path.stem}] {self.name}"
