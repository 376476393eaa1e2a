"""Configuration for the reporting hook."""

from pathlib import Path

from pydantic import BaseModel


class ReportConfig(BaseModel):
    """Configuration fixed for the lifetime of a reporting hook."""

    output_dir: Path = Path("target/bdd-reports")
    html_report: bool = False
    # Emit TeamCity service messages for IDE and CI test trees
    teamcity: bool = False
