"""Tests configurations and fixtures."""

import json
from typing import TYPE_CHECKING

import pytest

from pytest_csl.repos import RepoCache
from pytest_csl.schema import CorpusConfig

from .examples.engines import FakeProcessor

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

STYLE = '<style xmlns="http://purl.org/net/xbiblio/csl" class="note" version="1.0"/>\n'

LIBRARY = [
    {'id': 'smith', 'type': 'legal_case', 'title': 'Smith v Jones', 'jurisdiction': 'us'},
    {'id': 'doe', 'type': 'book', 'title': 'A Treatise on Torts'},
    {'id': 'roe', 'type': 'legal_case', 'title': 'Roe v Wade', 'jurisdiction': 'us'},
]


@pytest.fixture
def repos(tmp_path: 'Path') -> RepoCache:
    """Provide a repository cache with both checkouts present.

    The cache holds an `en-US` locale and no style modules.
    """
    cache = RepoCache(tmp_path / 'cache')
    (cache.location('locales')).mkdir(parents=True)
    (cache.location('style-modules')).mkdir(parents=True)
    (cache.location('locales') / 'locales-en-US.xml').write_text('<locale xml:lang="en-US"/>')

    return cache


@pytest.fixture
def corpus_dir(tmp_path: 'Path') -> 'Path':
    """Provide a directory with a style, a library and a module directory."""
    root = tmp_path / 'corpus'
    (root / 'library').mkdir(parents=True)
    (root / 'modules').mkdir()
    (root / 'suites').mkdir()

    (root / 'style.csl').write_text(STYLE)
    (root / 'library' / 'items.json').write_text(json.dumps(LIBRARY))
    (root / 'modules' / 'juris-us.csl').write_text('<style>us</style>')

    return root


@pytest.fixture
def corpus_config() -> CorpusConfig:
    """Provide a configuration matching `corpus_dir`."""
    return CorpusConfig.model_validate({
        'style': 'style.csl',
        'libraries': 'library/*.json',
        'suites': 'suites/*.yml',
        'jurisdictionDirs': ['modules'],
    })


@pytest.fixture
def make_processor() -> 'Callable[..., FakeProcessor]':
    """Provide a processor factory remembering the processor it made."""
    made: list[FakeProcessor] = []

    def factory(system: object, style: str) -> FakeProcessor:
        processor = FakeProcessor(system, style)
        made.append(processor)
        return processor

    factory.made = made  # type: ignore[attr-defined]

    return factory
