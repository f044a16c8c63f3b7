"""Corpus configuration files.

A corpus configuration file names everything a corpus is built from.
Paths and patterns are relative to the configuration file::

    style: ../styles/jm-chicago.csl
    libraries:
      - library/*.json
    suites:
      - suites/**/*.yml
    jurisdictionDirs:
      - modules
"""

from pathlib import Path  # noqa: TC003
from typing import Any

from pydantic import Field, field_validator

from pytest_csl.models import StrictModel


class CorpusConfig(StrictModel):
    """Validated corpus configuration."""

    style: Path = Field(
        title='Style',
        description='Path to the CSL style under test.',
    )

    libraries: list[str] = Field(
        default_factory=list,
        title='Reference libraries',
        description='Patterns of CSL-JSON library files.',
    )

    suites: list[str] = Field(
        default_factory=list,
        title='Test suites',
        description='Patterns of YAML suite documents, merged in order.',
    )

    jurisdiction_dirs: list[str] = Field(
        default_factory=list,
        alias='jurisdictionDirs',
        title='Jurisdiction directories',
        description='Patterns of directories searched for style modules.',
    )

    engine: str | None = Field(
        default=None,
        title='Rendering engine',
        description='A `module:attribute` path or a `pytest_csl.engines` entry point name.',
    )

    output_format: str = Field(
        default='html',
        alias='format',
        title='Default output format',
    )

    @field_validator('libraries', 'suites', 'jurisdiction_dirs', mode='before')
    @classmethod
    def ensure_list(cls, value: Any) -> Any:  # noqa: ANN401
        """Accept a single pattern in place of a list."""
        if isinstance(value, str):
            return [value]

        if value is None:
            return []

        return value
