"""Jurisdiction style module lookup."""

from logging import getLogger
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from pathlib import Path

logger = getLogger(__name__)


def module_filename(jurisdiction: str, preference: str | None = None) -> str:
    """Build the file name of a style module.

    Colons separating jurisdiction levels become `+`, so `us:ny` with
    preference `court` maps to `juris-us+ny-court.csl`.
    """
    jurisdiction = jurisdiction.replace(':', '+')
    if preference:
        return f'juris-{jurisdiction}-{preference}.csl'

    return f'juris-{jurisdiction}.csl'


class StyleModuleResolver:
    """Best-effort search for style modules.

    Directories supplied by the corpus are searched in order, then the
    cached style module repository. The first directory holding a
    readable, non-empty module wins; directories that fail to produce
    one are skipped.
    """

    def __init__(self, directories: 'Iterable[Path]', fallback: 'Path') -> None:
        """Initialize the resolver.

        Args:
            directories: Corpus jurisdiction directories, in search order.
            fallback: Cached style module directory, searched last.
        """
        self.directories = tuple(directories)
        self.fallback = fallback

    def candidates(self) -> 'Iterator[Path]':
        """Iterate directories in search order."""
        yield from self.directories
        yield self.fallback

    def lookup(self, jurisdiction: str, preference: str | None = None) -> str | None:
        """Find the text of a style module.

        Args:
            jurisdiction: Jurisdiction code, levels separated by colons.
            preference: Optional module variant.

        Returns:
            Module text, or `None` when no directory provides it.
        """
        filename = module_filename(jurisdiction, preference)

        for directory in self.candidates():
            path = directory / filename
            logger.debug('searching %s', path)
            try:
                text = path.read_text(encoding='utf-8')
            except OSError:
                continue

            if text:
                logger.debug('found %s', path)
                return text

        logger.debug('style module %s not found', filename)

        return None

    def resolve(self, jurisdiction: str, preference: str | None = None) -> str | Literal[False]:
        """Find a style module for the rendering engine.

        Same as `lookup`, but reports a miss as `False`, which is what
        rendering engines expect from their module retrieval callback.
        """
        return self.lookup(jurisdiction, preference) or False
