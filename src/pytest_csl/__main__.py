"""CLI utilities for pytest-csl.

Manages the cached reference repositories and shows merged corpora
the way the pytest plugin sees them.
"""

from pathlib import Path

from click import ClickException, argument, echo, group, option
from click import Path as PathParam
from yaml import safe_dump

from pytest_csl.core import read_test_units
from pytest_csl.errors import CSLError
from pytest_csl.repos import RepoCache
from pytest_csl.settings import CSLSettings

CacheDirectory = PathParam(
    file_okay=False,
    writable=True,
    path_type=Path,
)


def _repos(cache_dir: Path | None) -> RepoCache:
    if cache_dir is None:
        cache_dir = CSLSettings().cache_dir

    return RepoCache(cache_dir)


@group(help='Command-line utilities for pytest-csl.')
def cli() -> None:
    """Root CLI group for pytest-csl tools."""
    return None


@cli.command(
    name='refresh',
    help='Clone missing reference repositories and pull existing ones.',
)
@option(
    '-c', '--cache-dir',
    type=CacheDirectory,
    default=None,
    help='Directory holding the cached reference repositories.',
)
def refresh(cache_dir: Path | None) -> None:
    """Bring the reference repositories up to date."""
    repos = _repos(cache_dir)

    try:
        repos.ensure(refresh=True)
    except CSLError as error:
        raise ClickException(str(error)) from error

    for source in repos.sources:
        echo(f'{source.name}: {repos.location(source.name)}')


@cli.command(
    name='where',
    help='Print the locations of the cached reference repositories.',
)
@option(
    '-c', '--cache-dir',
    type=CacheDirectory,
    default=None,
    help='Directory holding the cached reference repositories.',
)
def where(cache_dir: Path | None) -> None:
    """Print cache locations."""
    repos = _repos(cache_dir)

    echo(f'cache: {repos.cache_dir}')
    for source in repos.sources:
        echo(f'{source.name}: {repos.location(source.name)} ({source.url})')


@cli.command(
    name='corpus',
    help='Print the merged and normalized corpus of suite documents as YAML.',
)
@argument('suites', nargs=-1, required=True)
def corpus(suites: tuple[str, ...]) -> None:
    """Merge suite documents and print the result.

    Args:
        suites: Suite document patterns, merged in order.
    """
    try:
        units = read_test_units(suites)
    except CSLError as error:
        raise ClickException(str(error)) from error

    echo(safe_dump(
        [unit.dump() for unit in units],
        allow_unicode=True,
        sort_keys=False,
    ), nl=False)


if __name__ == '__main__':
    cli()
