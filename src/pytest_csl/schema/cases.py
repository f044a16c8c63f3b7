"""Suite units and the test cases they group.

A suite document is a YAML sequence of units::

    - describe: Case names
      tests:
        - it: renders a short form
          single:
            id: smith2001
            locator: 12
          expect: Smith v Jones, 12

Units are identified by `describe` and tests by `it`; both identities are
what merging across documents is keyed on.
"""

from typing import Literal, Self

from pydantic import ConfigDict, Field, model_validator

from pytest_csl.models import SchemaModel

from .abbreviations import AbbreviationSet  # noqa: TC001
from .items import CiteItem, Cluster  # noqa: TC001

#: Execution mode of a test case.
type Mode = Literal['normal', 'only', 'skip']


class SuiteCase(SchemaModel):
    """A single test case.

    A case without `expect` is a placeholder: documented, collected and
    skipped. An executed case renders either `single` or `sequence`.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str = Field(
        alias='it',
        title='Test name',
        description='Name of the test, unique within its suite unit.',
    )

    mode: Mode | None = Field(
        default=None,
        title='Execution mode',
        description='Set to `skip` to skip the test or `only` to focus on it.',
    )

    single: CiteItem | None = Field(
        default=None,
        title='Single cite',
        description='One cite item rendered as a one-item cluster.',
    )

    sequence: list[Cluster] | None = Field(
        default=None,
        title='Cluster sequence',
        description='Ordered clusters rendered together as one document.',
    )

    output_format: str | None = Field(
        default=None,
        alias='format',
        title='Output format',
        description='Rendering engine output format, `html` by default.',
    )

    abbreviations: list[AbbreviationSet] | None = Field(
        default=None,
        title='Abbreviations',
        description='Abbreviation sets installed before rendering.',
    )

    expect: str | list[str] | None = Field(
        default=None,
        title='Expected output',
        description='Rendered text, or one text per cluster for a sequence.',
    )

    @model_validator(mode='after')
    def check_input(self) -> Self:
        """Validate that an executed case has exactly one input."""
        if self.expect is None:
            return self

        if (self.single is None) == (self.sequence is None):
            raise ValueError('Test with expectation needs exactly one of `single` or `sequence`')

        if self.single is not None and not isinstance(self.expect, str):
            raise ValueError('Expectation of a single cite must be a string')

        if self.sequence is not None and not isinstance(self.expect, list):
            raise ValueError('Expectation of a sequence must be a list of strings')

        return self

    @property
    def is_placeholder(self) -> bool:
        """Whether the case only documents behaviour without checking it."""
        return self.expect is None


class SuiteUnit(SchemaModel):
    """A named group of test cases."""

    describe: str = Field(
        title='Unit label',
        description='Label of the unit; units sharing it are merged.',
    )

    tests: list[SuiteCase] = Field(
        default_factory=list,
        title='Test cases',
    )
