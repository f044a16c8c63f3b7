"""Pytest item rendering a single test case.

The item renders the case input with the corpus engine and compares
the result against the expectation. Rendering errors fail the item
only; the rest of the corpus keeps running.
"""

from typing import TYPE_CHECKING

import pytest

from pytest_csl.engine import normalize_italics
from pytest_csl.errors import CSLError, ErrorContext, ErrorFormatter, RenderError

if TYPE_CHECKING:
    from typing import Any

if TYPE_CHECKING:
    from _pytest._code.code import ExceptionInfo, TerminalRepr

if TYPE_CHECKING:
    from pytest_csl.engine import TestEngine
    from pytest_csl.schema import SuiteCase


class CitationCase(pytest.Item):
    """Pytest item executing a single citation test case.

    Placeholders (cases without expectation) and cases in `skip` mode
    are collected with a skip marker.
    """

    __test__ = False

    def __init__(self, *, case: 'SuiteCase', engine: 'TestEngine', **kwargs: 'Any') -> None:
        """Initialize a pytest test case.

        Args:
            case: Normalized test case.
            engine: Engine shared by all cases of the corpus.
            **kwargs: Keyword pytest.Item arguments.
        """
        super().__init__(**kwargs)

        self.case = case
        self.engine = engine

        if case.is_placeholder:
            self.add_marker(pytest.mark.skip(reason='no expectation'))
        elif case.mode == 'skip':
            self.add_marker(pytest.mark.skip(reason='mode: skip'))

    @property
    def unit(self) -> str:
        """Label of the suite unit owning the case."""
        return self.parent.name if self.parent else ''

    def render(self) -> tuple['str | list[str]', 'str | list[str]']:
        """Render the case input.

        Returns:
            The expected and the rendered output, both normalized.
        """
        case = self.case

        if case.single is not None:
            output = self.engine.produce_single(case.single, case.output_format, case.abbreviations)
            return normalize_italics(str(case.expect)), normalize_italics(output)

        outputs = self.engine.produce_sequence(case.sequence or [], case.output_format,
                                               case.abbreviations)
        return (
            [normalize_italics(item) for item in case.expect or ()],
            [normalize_italics(item) for item in outputs],
        )

    def runtest(self) -> None:
        """Execute the test case.

        Raises:
            AssertionError: If the rendered output differs.
            RenderError: If the rendering engine fails.
        """
        try:
            expected, actual = self.render()

        except RenderError as base:
            raise RenderError(base.message, context=ErrorContext({
                **(base.context or {}),
                'filename': f'{self.path}',
                'unit': self.unit,
                'case': self.name,
            })) from base

        if actual != expected:
            raise AssertionError(ErrorFormatter.format('Rendered output differs', ErrorContext(
                filename=f'{self.path}',
                unit=self.unit,
                case=self.name,
                element={'expect': expected, 'actual': actual},
            )))

    def repr_failure(self, excinfo: 'ExceptionInfo[BaseException]',
                     style: 'Any' = None) -> 'str | TerminalRepr':
        """Report rendering errors without a traceback."""
        if isinstance(excinfo.value, CSLError):
            return str(excinfo.value)

        return super().repr_failure(excinfo, style=style)

    def reportinfo(self) -> tuple['Any', int | None, str]:
        """Location shown in test reports."""
        return self.path, None, f'{self.unit}: {self.name}'
