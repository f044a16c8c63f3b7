"""Pytest collectors for corpus configuration files.

A corpus file is loaded eagerly during collection: its configuration,
suites and library are read and the rendering engine is created before
any test runs, so configuration and parse errors surface as collection
errors. Each suite unit becomes a collector of its own.
"""

from typing import TYPE_CHECKING

import pytest

from pytest_csl.core import read_corpus_config, read_test_units
from pytest_csl.engine import TestEngine, load_processor_factory
from pytest_csl.errors import ConfigurationError, CSLError

from .case import CitationCase

if TYPE_CHECKING:
    from collections.abc import Iterable
    from typing import Any

if TYPE_CHECKING:
    from _pytest._code.code import ExceptionInfo, TerminalRepr

if TYPE_CHECKING:
    from pytest_csl.schema import CorpusConfig, SuiteUnit


class CorpusFile(pytest.File):
    """Pytest collector for a corpus configuration file."""

    __test__ = False

    engine: TestEngine

    def collect(self) -> 'Iterable[SuiteGroup]':
        """Load the corpus and collect one group per suite unit.

        Returns:
            Iterable of `SuiteGroup` collectors in corpus order.

        Raises:
            ConfigurationError: If the corpus is misconfigured.
            ParseError: If a suite or library document is malformed.
            NetworkError: If reference repositories cannot be obtained.
        """
        config = read_corpus_config(self.path)
        base = self.path.parent

        units = read_test_units(config.suites, base)

        self.ensure_repos()
        self.engine = TestEngine(
            config,
            load_processor_factory(self.engine_name(config)),
            self.config.csl_repos,  # type: ignore[attr-defined]
            base=base,
        )

        for unit in units:
            yield SuiteGroup.from_parent(
                self,
                name=unit.describe,
                unit=unit,
            )

    def engine_name(self, config: 'CorpusConfig') -> str:
        """Pick the rendering engine of the corpus.

        The command line wins over the corpus file, which wins over
        the environment.

        Raises:
            ConfigurationError: If no engine is configured anywhere.
        """
        settings = self.config.csl_settings  # type: ignore[attr-defined]
        name = self.config.getoption('csl_engine', default=None) or config.engine or settings.engine
        if not name:
            raise ConfigurationError('no rendering engine configured')

        return name

    def ensure_repos(self) -> None:
        """Make reference repositories available once per session."""
        if self.config.csl_repos_ready:  # type: ignore[attr-defined]
            return

        settings = self.config.csl_settings  # type: ignore[attr-defined]
        self.config.csl_repos.ensure(settings.refresh)  # type: ignore[attr-defined]
        self.config.csl_repos_ready = True  # type: ignore[attr-defined]

    def repr_failure(self, excinfo: 'ExceptionInfo[BaseException]',
                     style: 'Any' = None) -> 'str | TerminalRepr':
        """Report corpus errors without a traceback."""
        if isinstance(excinfo.value, CSLError):
            return str(excinfo.value)

        return super().repr_failure(excinfo, style=style)


class SuiteGroup(pytest.Collector):
    """Pytest collector for one suite unit."""

    __test__ = False

    def __init__(self, *, unit: 'SuiteUnit', **kwargs: 'Any') -> None:
        """Initialize a unit collector.

        Args:
            unit: Merged and normalized suite unit.
            **kwargs: Keyword pytest.Collector arguments.
        """
        super().__init__(**kwargs)

        self.unit = unit

    def collect(self) -> 'Iterable[CitationCase]':
        """Collect one item per test case."""
        corpus = self.getparent(CorpusFile)

        for case in self.unit.tests:
            yield CitationCase.from_parent(
                self,
                name=case.name,
                case=case,
                engine=corpus.engine,
            )
