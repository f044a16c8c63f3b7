"""Local cache of reference data repositories.

Locale definitions and jurisdiction style modules are kept as git
checkouts under the cache directory. A missing checkout is cloned; an
existing one is used as is, or pulled when a refresh is requested.
A checkout that cannot be opened or pulled is removed and cloned again.
"""

from dataclasses import dataclass
from logging import getLogger
from shutil import rmtree
from typing import TYPE_CHECKING, Any

from pytest_csl.errors import NetworkError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

logger = getLogger(__name__)


@dataclass(frozen=True)
class RepoSource:
    """A reference data repository."""

    #: Directory name under the cache directory.
    name: str
    #: Canonical remote location.
    url: str
    #: Tracked branch.
    branch: str = 'master'


LOCALES = RepoSource('locales', 'https://github.com/citation-style-language/locales')
STYLE_MODULES = RepoSource('style-modules', 'https://github.com/Juris-M/style-modules')

DEFAULT_SOURCES = (LOCALES, STYLE_MODULES)


class RepoCache:
    """Clone-or-pull policy over the reference repositories."""

    def __init__(self, cache_dir: 'Path',
                 sources: 'Iterable[RepoSource]' = DEFAULT_SOURCES, *,
                 repo_class: Any = None) -> None:  # noqa: ANN401
        """Initialize the cache.

        Args:
            cache_dir: Directory holding one checkout per source.
            sources: Repositories to keep, processed in order.
            repo_class: Git repository class, `git.Repo` by default.
        """
        self.cache_dir = cache_dir
        self.sources = tuple(sources)
        self._repo_class = repo_class

    @property
    def repo_class(self) -> Any:  # noqa: ANN401
        """Git repository class used to open and clone checkouts."""
        if self._repo_class is None:
            from git import Repo  # noqa: PLC0415

            self._repo_class = Repo

        return self._repo_class

    def location(self, name: str) -> 'Path':
        """Return the checkout directory of a source."""
        return self.cache_dir / name

    def ensure(self, refresh: bool = False) -> None:
        """Make every source available locally.

        Sources are processed one after another so a failure is
        attributed to exactly one of them.

        Args:
            refresh: Whether existing checkouts pull remote updates.

        Raises:
            NetworkError: If a source can be neither opened nor cloned.
        """
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        for source in self.sources:
            self.clone_or_pull(source, refresh)

    def clone_or_pull(self, source: RepoSource, refresh: bool = False) -> None:
        """Ensure a single source.

        Args:
            source: Repository to ensure.
            refresh: Whether an existing checkout pulls remote updates.

        Raises:
            NetworkError: If the fallback clone fails.
        """
        location = self.location(source.name)

        try:
            repo = self.repo_class(location)
            if refresh:
                repo.remote('origin').fetch()
                repo.git.checkout(source.branch)
                repo.git.merge(f'origin/{source.branch}')
                logger.info('pulled repo %s', location)
            return None

        except Exception as error:  # noqa: BLE001
            logger.info('repo %s not cached; fetching (%s)', location, error)

        self.clone(source)

    def clone(self, source: RepoSource) -> None:
        """Replace a checkout with a fresh clone.

        Raises:
            NetworkError: If cloning fails.
        """
        location = self.location(source.name)
        rmtree(location, ignore_errors=True)

        try:
            self.repo_class.clone_from(source.url, location, branch=source.branch)

        except Exception as base:
            raise NetworkError(f'failed to clone {source.name} from {source.url}') from base

        logger.info('cloned %s into %s', source.url, location)
