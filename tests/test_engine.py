"""Tests for the test engine and the rendering engine callbacks."""

from typing import TYPE_CHECKING

import pytest

from pytest_csl.engine import (
    AbbreviationStore,
    CiteprocSystem,
    StyleModuleResolver,
    TestEngine,
    at_index,
    load_processor_factory,
    normalize_italics,
)
from pytest_csl.errors import ConfigurationError, RenderError
from pytest_csl.schema import CATEGORIES, AbbreviationSet, CiteItem

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

if TYPE_CHECKING:
    from pytest_mock import MockerFixture

    from pytest_csl.repos import RepoCache
    from pytest_csl.schema import CorpusConfig

    from .examples.engines import FakeProcessor


@pytest.fixture
def engine(corpus_dir: 'Path', corpus_config: 'CorpusConfig', repos: 'RepoCache',
           make_processor: 'Callable[..., FakeProcessor]') -> TestEngine:
    """Provide an engine over the example corpus."""
    return TestEngine(corpus_config, make_processor, repos, base=corpus_dir)


def test_engine_setup(engine: TestEngine, make_processor: 'Callable[..., FakeProcessor]',
                      corpus_dir: 'Path') -> None:
    """Create the processor with the style and register library items."""
    processor = make_processor.made[0]  # type: ignore[attr-defined]

    assert processor.style.startswith('<style')
    assert processor.ids == ['smith', 'doe', 'roe']
    assert engine.retrieve_item('doe') == {'id': 'doe', 'type': 'book', 'title': 'A Treatise on Torts'}
    assert engine.resolver.directories == (corpus_dir / 'modules',)


def test_produce_single(engine: TestEngine) -> None:
    """Render a single cite item."""
    assert engine.produce_single(CiteItem(id='doe', locator='4', label='page')) == (
        'A Treatise on Torts, page 4'
    )
    assert engine.produce_single({'id': 'smith'}) == '<i>Smith v Jones</i>'
    assert engine.produce_single({'id': 'smith'}, 'text') == 'Smith v Jones'


def test_produce_single_goes_through_sequence(engine: TestEngine,
                                              mocker: 'MockerFixture') -> None:
    """Render single cites as one-cluster sequences."""
    spy = mocker.spy(engine, 'produce_sequence')

    engine.produce_single({'id': 'doe'})

    spy.assert_called_once_with([[{'id': 'doe'}]], None, None)


def test_produce_sequence_order(engine: TestEngine) -> None:
    """Render clusters in order, depending on earlier clusters."""
    together = engine.produce_sequence([[{'id': 'doe'}], [{'id': 'smith'}, {'id': 'doe'}]], 'text')
    alone = engine.produce_sequence([[{'id': 'smith'}, {'id': 'doe'}]], 'text')

    assert together == ['A Treatise on Torts', 'Smith v Jones; Ibid.']
    assert alone == ['Smith v Jones; A Treatise on Torts']


def test_produce_sequence_citations(engine: TestEngine,
                                    make_processor: 'Callable[..., FakeProcessor]',
                                    mocker: 'MockerFixture') -> None:
    """Number clusters from one and rebuild the whole state each call."""
    processor = make_processor.made[0]  # type: ignore[attr-defined]
    spy = mocker.spy(processor, 'rebuild_processor_state')

    engine.produce_sequence([[{'id': 'doe'}], [{'id': 'roe'}]])

    citations, output_format = spy.call_args.args
    assert output_format == 'html'
    assert [citation['citationID'] for citation in citations] == ['CITATION-1', 'CITATION-2']
    assert [citation['properties'] for citation in citations] == [
        {'noteIndex': 1},
        {'noteIndex': 2},
    ]


def test_produce_sequence_reorders_results(engine: TestEngine,
                                           make_processor: 'Callable[..., FakeProcessor]',
                                           mocker: 'MockerFixture') -> None:
    """Return texts in input order whatever order the engine reports."""
    processor = make_processor.made[0]  # type: ignore[attr-defined]
    mocker.patch.object(processor, 'rebuild_processor_state', return_value=[
        ['CITATION-2', 2, 'second'],
        ['CITATION-1', 1, 'first'],
    ])

    assert engine.produce_sequence([[{'id': 'doe'}], [{'id': 'roe'}]]) == ['first', 'second']


def test_produce_sequence_abbreviations(engine: TestEngine) -> None:
    """Apply abbreviations of a call without leaking them into the next."""
    abbreviations = [
        AbbreviationSet.model_validate({'jurisdiction': 'us', 'title': {'Smith v Jones': 'Smith'}}),
        AbbreviationSet.model_validate({'title': {'A Treatise on Torts': 'Torts'}}),
    ]

    first = engine.produce_sequence([[{'id': 'smith'}], [{'id': 'doe'}]], 'text', abbreviations)
    second = engine.produce_sequence([[{'id': 'smith'}], [{'id': 'doe'}]], 'text')

    assert first == ['Smith', 'Torts']
    assert second == ['Smith v Jones', 'A Treatise on Torts']


def test_produce_sequence_clears_engine_cache(engine: TestEngine,
                                              make_processor: 'Callable[..., FakeProcessor]') -> None:
    """Clear the engine's own abbreviation cache between calls."""
    processor = make_processor.made[0]  # type: ignore[attr-defined]
    abbreviations = [AbbreviationSet.model_validate({'title': {'A Treatise on Torts': 'Torts'}})]

    engine.produce_single({'id': 'doe'}, 'text', abbreviations)
    cache = processor.abbreviation_cache
    assert cache['default']['title'] == {'A Treatise on Torts': 'Torts'}

    engine.produce_single({'id': 'roe'}, 'text')

    assert processor.abbreviation_cache is cache
    assert cache['default']['title'] == {}


def test_produce_sequence_render_error(engine: TestEngine) -> None:
    """Wrap rendering engine failures."""
    with pytest.raises(RenderError, match=r'^Rendering error') as error:
        engine.produce_single({'id': 'unknown'})

    assert "unknown item 'unknown'" in str(error.value)
    assert isinstance(error.value.__cause__, LookupError)


def test_engine_output_format(corpus_dir: 'Path', corpus_config: 'CorpusConfig', repos: 'RepoCache',
                              make_processor: 'Callable[..., FakeProcessor]') -> None:
    """Use the corpus output format by default."""
    config = corpus_config.model_copy(update={'output_format': 'text'})

    engine = TestEngine(config, make_processor, repos, base=corpus_dir)

    assert engine.produce_single({'id': 'smith'}) == 'Smith v Jones'


def test_engine_missing_style(corpus_dir: 'Path', corpus_config: 'CorpusConfig', repos: 'RepoCache',
                              make_processor: 'Callable[..., FakeProcessor]') -> None:
    """Fail eagerly on configuration errors."""
    (corpus_dir / 'style.csl').unlink()

    with pytest.raises(ConfigurationError, match=r'^style not loaded'):
        TestEngine(corpus_config, make_processor, repos, base=corpus_dir)

    assert make_processor.made == []  # type: ignore[attr-defined]


def test_at_index() -> None:
    """Build a positional citation."""
    assert at_index([CiteItem(id='a', locator='1', label='page'), {'id': 'b'}], 3) == {
        'citationID': 'CITATION-3',
        'properties': {'noteIndex': 3},
        'citationItems': [
            {'id': 'a', 'locator': '1', 'label': 'page'},
            {'id': 'b'},
        ],
    }


@pytest.mark.parametrize('text, normalized', (
    pytest.param('<i>Smith</i> <i>v Jones</i>', '<i>Smith v Jones</i>', id='joined'),
    pytest.param('<i>a</i><i>b</i> and <i>c</i> <i>d</i>', '<i>ab</i> and <i>c</i> <i>d</i>', id='first only'),
    pytest.param('plain', 'plain', id='plain'),
))
def test_normalize_italics(text: str, normalized: str) -> None:
    """Join the first pair of adjacent italic runs."""
    assert normalize_italics(text) == normalized


def test_load_processor_factory_path() -> None:
    """Load an engine from a module path."""
    from .examples.engines import FakeProcessor  # noqa: PLC0415

    assert load_processor_factory('tests.examples.engines:FakeProcessor') is FakeProcessor


@pytest.mark.parametrize('name, expect_message', (
    pytest.param('tests.examples.engines:Missing', r'^failed to load', id='missing attribute'),
    pytest.param('no_such_module:Processor', r'^failed to load', id='missing module'),
    pytest.param('tests.examples.engines:__doc__', r'is not callable', id='not callable'),
    pytest.param('no-such-engine', r'is not installed', id='missing entry point'),
))
def test_load_processor_factory_errors(name: str, expect_message: str) -> None:
    """Fail on engines that cannot be loaded."""
    with pytest.raises(ConfigurationError, match=expect_message):
        load_processor_factory(name)


def test_load_processor_factory_entry_point(mocker: 'MockerFixture') -> None:
    """Load an engine from the engines entry point group."""
    factory = mocker.Mock(name='factory')
    entrypoint = mocker.Mock()
    entrypoint.load.return_value = factory
    patch = mocker.patch('importlib.metadata.entry_points')
    patch.return_value.select.return_value = [entrypoint]

    assert load_processor_factory('citeproc') is factory
    patch.return_value.select.assert_called_once_with(group='pytest_csl.engines', name='citeproc')


def test_system_retrieve_locale(repos: 'RepoCache', tmp_path: 'Path') -> None:
    """Read cached locales and report missing ones as absent."""
    system = CiteprocSystem(
        {},
        locales=repos.location('locales'),
        resolver=StyleModuleResolver([], tmp_path),
        abbreviations=AbbreviationStore(),
    )

    assert system.retrieve_locale('en-US') == '<locale xml:lang="en-US"/>'
    assert system.retrieve_locale('xx-XX') is None


def test_system_retrieve_style_module(engine: TestEngine) -> None:
    """Resolve modules through corpus directories."""
    assert engine.system.retrieve_style_module('us') == '<style>us</style>'
    assert engine.system.retrieve_style_module('us', 'court') is False


def test_system_get_abbreviation(tmp_path: 'Path') -> None:
    """Bind the engine cache and record hits in it."""
    store = AbbreviationStore()
    store.add('us', 'institution-part', 'Supreme Court', 'S. Ct.')
    system = CiteprocSystem(
        {},
        locales=tmp_path,
        resolver=StyleModuleResolver([], tmp_path),
        abbreviations=store,
    )
    cache: dict = {}

    value = system.get_abbreviation(None, cache, ['us:ny', 'us'], 'institution-part', 'Supreme Court')
    missing = system.get_abbreviation(None, cache, 'us', 'institution-part', 'Court of Appeals')

    assert value == 'S. Ct.'
    assert missing is None
    assert store.cache is cache
    assert list(cache) == ['us']
    assert set(cache['us']) == set(CATEGORIES)
    assert cache['us']['institution-part'] == {'Supreme Court': 'S. Ct.'}
    assert cache['us']['container-title'] == {}
