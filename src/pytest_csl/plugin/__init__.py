"""Pytest plugin collecting citation rendering corpora.

This module integrates `pytest-csl` with pytest by:
- registering command-line options;
- resolving process settings and the reference repository cache;
- collecting corpus configuration files as test collectors;
- honouring `mode: only` on test cases.

Files named `csl-tests.yml`, `csl-tests.yaml` or `<name>.csl-tests.yml`
are treated as corpus configuration files.
"""

from re import match
from typing import TYPE_CHECKING

from pytest_csl.repos import RepoCache
from pytest_csl.settings import CSLSettings

from .case import CitationCase
from .corpus import CorpusFile

if TYPE_CHECKING:
    from pathlib import Path

if TYPE_CHECKING:
    from _pytest.config import Config
    from _pytest.config.argparsing import Parser
    from _pytest.main import Session
    from _pytest.nodes import Item, Node

CORPUS_PATTERN = r'^(.+\.)?csl-tests\.ya?ml$'


def pytest_addoption(parser: 'Parser') -> None:
    """Register pytest command-line options for pytest-csl.

    Args:
        parser: Pytest argument parser.
    """
    group = parser.getgroup('csl', 'citation style tests')
    group.addoption(
        '--csl-refresh',
        action='store_true',
        dest='csl_refresh',
        default=None,
        help='Pull updates of the cached locale and style module repositories.',
    )
    group.addoption(
        '--csl-offline',
        action='store_true',
        dest='csl_offline',
        default=None,
        help=(
            'Use the cached repositories as they are, without cloning '
            'missing ones. Locales and modules not cached are reported missing.'
        ),
    )
    group.addoption(
        '--csl-cache-dir',
        action='store',
        dest='csl_cache_dir',
        default=None,
        help='Directory holding the cached reference repositories.',
    )
    group.addoption(
        '--csl-engine',
        action='store',
        dest='csl_engine',
        default=None,
        help=(
            'Rendering engine used by every corpus, either a `module:attribute` '
            'path or an entry point name from the `pytest_csl.engines` group.'
        ),
    )


def pytest_configure(config: 'Config') -> None:
    """Configure pytest-csl integration.

    Resolves settings from the environment, applies command-line
    overrides and attaches them to the pytest configuration object as
    `config.csl_settings`, together with the repository cache as
    `config.csl_repos`.

    Args:
        config: Pytest configuration object.
    """
    overrides = {
        'cache_dir': config.getoption('csl_cache_dir', default=None),
        'engine': config.getoption('csl_engine', default=None),
        'refresh': config.getoption('csl_refresh', default=None),
        'offline': config.getoption('csl_offline', default=None),
    }

    settings = CSLSettings(**{
        key: value
        for key, value in overrides.items()
        if value is not None
    })

    config.csl_settings = settings  # type: ignore[attr-defined]
    config.csl_repos = RepoCache(settings.cache_dir)  # type: ignore[attr-defined]
    config.csl_repos_ready = settings.offline  # type: ignore[attr-defined]


def pytest_collect_file(parent: 'Node', file_path: 'Path') -> CorpusFile | None:
    """Collect corpus configuration files.

    Args:
        parent: Parent pytest collection node.
        file_path: Path to the file being considered.

    Returns:
        A `CorpusFile` collector if the file name matches, otherwise ``None``.
    """
    if match(CORPUS_PATTERN, file_path.name):
        return CorpusFile.from_parent(
            parent,
            path=file_path,
        )

    return None


def pytest_collection_modifyitems(session: 'Session', config: 'Config',  # noqa: ARG001
                                  items: list['Item']) -> None:
    """Focus corpora holding `mode: only` cases.

    Within a corpus file containing at least one case in `only` mode,
    every other case is deselected. Other corpora are left alone.

    Args:
        session: Pytest session.
        config: Pytest configuration object.
        items: Collected items, modified in place.
    """
    focused = {
        item.getparent(CorpusFile)
        for item in items
        if isinstance(item, CitationCase) and item.case.mode == 'only'
    }
    if not focused:
        return

    kept, deselected = [], []
    for item in items:
        if (
            isinstance(item, CitationCase)
            and item.getparent(CorpusFile) in focused
            and item.case.mode != 'only'
        ):
            deselected.append(item)
        else:
            kept.append(item)

    if deselected:
        config.hook.pytest_deselected(items=deselected)
        items[:] = kept
