"""Test engine wrapping an external citation rendering engine.

The rendering engine itself is not part of this package. It is loaded
from a `module:attribute` path or from the `pytest_csl.engines` entry
point group, and must follow the `ProcessorFactory` protocol.
"""

from collections.abc import Mapping
from logging import getLogger
from re import compile as regexp
from typing import TYPE_CHECKING, Any, Protocol

from pytest_csl.core import index_library, read_config_files
from pytest_csl.errors import ConfigurationError, CSLError, RenderError
from pytest_csl.schema import CiteItem

from .abbreviations import AbbreviationStore
from .resolver import StyleModuleResolver
from .system import CiteprocSystem

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

if TYPE_CHECKING:
    from pytest_csl.repos import RepoCache
    from pytest_csl.schema import AbbreviationSet, CorpusConfig

logger = getLogger(__name__)

ENGINES_GROUP = 'pytest_csl.engines'
DEFAULT_FORMAT = 'html'

_ITALICS_JOIN = regexp(r'</i>(\s*)<i>')

#: A cite item as accepted by the test engine.
type Item = CiteItem | Mapping[str, Any]


class Processor(Protocol):
    """Citation processor created by a rendering engine."""

    def update_items(self, ids: 'Sequence[str]') -> None:
        """Register the identifiers of the reference library."""

    def rebuild_processor_state(self, citations: list[dict[str, Any]],
                                output_format: str) -> 'Sequence[Sequence[Any]]':
        """Render citations as one document from a clean state.

        Returns:
            One `(citation_id, note_index, text)` entry per citation.
        """


class ProcessorFactory(Protocol):
    """Constructor of a citation processor for a style."""

    def __call__(self, system: CiteprocSystem, style: str) -> Processor:
        """Create a processor bound to callbacks and a style."""


def load_processor_factory(name: str) -> ProcessorFactory:
    """Load a rendering engine.

    Args:
        name: A `module:attribute` path, or the name of an entry point
            in the `pytest_csl.engines` group.

    Returns:
        The processor factory.

    Raises:
        ConfigurationError: If the engine cannot be loaded.
    """
    from importlib.metadata import entry_points  # noqa: PLC0415
    from pkgutil import resolve_name  # noqa: PLC0415

    try:
        if ':' in name:
            factory = resolve_name(name)
        else:
            matches = entry_points().select(group=ENGINES_GROUP, name=name)
            if not matches:
                raise ConfigurationError(f'rendering engine {name!r} is not installed')
            factory = next(iter(matches)).load()

    except CSLError:
        raise

    except Exception as base:
        raise ConfigurationError(f'failed to load rendering engine {name!r}') from base

    if not callable(factory):
        raise ConfigurationError(f'rendering engine {name!r} is not callable')

    return factory


def normalize_italics(text: str) -> str:
    """Join the first pair of adjacent italic runs.

    Engines differ in whether `<i>a</i> <i>b</i>` is emitted as one run
    or two; comparisons apply this to both sides.
    """
    return _ITALICS_JOIN.sub(r'\1', text, count=1)


def at_index(cluster: 'Iterable[Item]', index: int) -> dict[str, Any]:
    """Build the citation of a cluster at a 1-based note position."""
    return {
        'citationID': f'CITATION-{index}',
        'properties': {'noteIndex': index},
        'citationItems': [_dump_item(item) for item in cluster],
    }


def _dump_item(item: Item) -> dict[str, Any]:
    if isinstance(item, CiteItem):
        return item.dump()

    return dict(item)


class TestEngine:
    """Renders test case input with a configured rendering engine.

    Calls are not reentrant: every call rebuilds the processor state
    and replaces the installed abbreviations, and results depend on the
    whole ordered list of clusters rendered together.
    """

    __test__ = False

    def __init__(self, config: 'CorpusConfig', factory: ProcessorFactory,
                 repos: 'RepoCache', *,
                 base: 'Path | None' = None,
                 store: AbbreviationStore | None = None) -> None:
        """Load a corpus configuration and create the processor.

        Args:
            config: Corpus configuration.
            factory: Rendering engine.
            repos: Cache of reference repositories.
            base: Directory relative configuration paths resolve against.
            store: Abbreviation store, a fresh one by default.

        Raises:
            ConfigurationError: If the style or a library is invalid.
            ParseError: If a library file is malformed.
        """
        loaded = read_config_files(config, base)
        self.citations, self.item_ids = index_library(loaded.library)
        self.output_format = config.output_format or DEFAULT_FORMAT

        self.abbreviations = store if store is not None else AbbreviationStore()
        self.resolver = StyleModuleResolver(
            loaded.jurisdiction_dirs,
            repos.location('style-modules'),
        )
        self.system = CiteprocSystem(
            self.citations,
            locales=repos.location('locales'),
            resolver=self.resolver,
            abbreviations=self.abbreviations,
        )

        self.processor = factory(self.system, loaded.style)
        self.processor.update_items(list(self.item_ids))

        logger.debug('engine ready with %d items', len(self.item_ids))

    def retrieve_item(self, id: str) -> dict[str, Any] | None:  # noqa: A002
        """Return the library record of an item."""
        return self.system.retrieve_item(id)

    def set_abbreviations(self, sets: 'Iterable[AbbreviationSet] | None') -> None:
        """Install the abbreviation sets of the next render call."""
        self.abbreviations.apply(sets)

    def produce_single(self, item: Item, output_format: str | None = None,
                       abbreviations: 'Iterable[AbbreviationSet] | None' = None) -> str:
        """Render one cite item as a cluster of its own.

        Rendering goes through `produce_sequence`: single-cluster entry
        points of rendering engines fail on some item shapes.
        """
        return self.produce_sequence([[item]], output_format, abbreviations)[0]

    def produce_sequence(self, clusters: 'Sequence[Iterable[Item]]',
                         output_format: str | None = None,
                         abbreviations: 'Iterable[AbbreviationSet] | None' = None) -> list[str]:
        """Render clusters as one document.

        Args:
            clusters: Clusters in document order.
            output_format: Output format, the corpus default if omitted.
            abbreviations: Abbreviation sets visible while rendering.

        Returns:
            The text of each cluster, in input order.

        Raises:
            RenderError: If the rendering engine fails.
        """
        self.set_abbreviations(abbreviations)

        citations = [
            at_index(cluster, index)
            for index, cluster in enumerate(clusters, start=1)
        ]

        try:
            results = self.processor.rebuild_processor_state(
                citations,
                output_format or self.output_format,
            )
            texts = {str(result[0]): result[2] for result in results}
            return [texts[citation['citationID']] for citation in citations]

        except CSLError:
            raise

        except Exception as base:
            raise RenderError.from_case(f'{base!r}', element=citations) from base
