"""Callbacks the rendering engine uses to reach test data.

The rendering engine retrieves locales, library records, style modules
and abbreviations through a "system" object. All callbacks are
synchronous and read-only, except `get_abbreviation`, which fills the
engine's own abbreviation cache.
"""

from logging import getLogger
from typing import TYPE_CHECKING, Any, Literal

from .abbreviations import segments

if TYPE_CHECKING:
    from collections.abc import Iterable, MutableMapping
    from pathlib import Path

if TYPE_CHECKING:
    from pytest_csl.core import LibraryIndex

    from .abbreviations import AbbreviationStore, Segments
    from .resolver import StyleModuleResolver

logger = getLogger(__name__)


class CiteprocSystem:
    """Rendering engine adapter over a library, locales and modules."""

    def __init__(self, citations: 'LibraryIndex', *,
                 locales: 'Path',
                 resolver: 'StyleModuleResolver',
                 abbreviations: 'AbbreviationStore') -> None:
        """Initialize the adapter.

        Args:
            citations: Library records by identifier.
            locales: Directory of `locales-<lang>.xml` files.
            resolver: Style module lookup.
            abbreviations: Abbreviation store of the running test.
        """
        self.citations = citations
        self.locales = locales
        self.resolver = resolver
        self.abbreviations = abbreviations

    def retrieve_locale(self, lang: str) -> str | None:
        """Return the locale definition for a language, if available."""
        logger.debug('retrieving locale: %s', lang)
        path = self.locales / f'locales-{lang}.xml'
        try:
            return path.read_text(encoding='utf-8')
        except OSError:
            logger.warning('locale %s not found in %s', lang, self.locales)
            return None

    def retrieve_item(self, id: str) -> dict[str, Any] | None:  # noqa: A002
        """Return the library record of an item."""
        return self.citations.get(str(id))

    def retrieve_style_module(self, jurisdiction: str,
                              preference: str | None = None) -> str | Literal[False]:
        """Return a jurisdiction style module, or `False` if missing."""
        logger.debug(
            'retrieving style module: %s%s',
            jurisdiction, f'-{preference}' if preference else '',
        )
        return self.resolver.resolve(jurisdiction, preference)

    def get_abbreviation(self, style_id: str | None,  # noqa: PLR0913
                         cache: 'MutableMapping[str, Segments]',
                         jurisdiction: 'str | Iterable[str]',
                         category: str,
                         key: str,
                         item_type: str | None = None,  # noqa: ARG002
                         no_hints: bool = False) -> str | None:  # noqa: ARG002
        """Look up an abbreviation on behalf of the rendering engine.

        The cache object is bound to the abbreviation store, so the
        store can clear it whenever a new test installs its sets. A hit
        is also written into `cache` under the jurisdiction providing it,
        whose record is created holding every category.

        Args:
            style_id: Identifier of the style asking.
            cache: The rendering engine's abbreviation cache.
            jurisdiction: Jurisdiction, or jurisdictions in preference order.
            category: Abbreviation category.
            key: Raw text to abbreviate.
            item_type: Type of the item being rendered.
            no_hints: Whether the engine disabled abbreviation hints.

        Returns:
            The abbreviation, or `None`.
        """
        if self.abbreviations.cache is not cache:
            self.abbreviations.bind(cache)

        jurisdictions = (jurisdiction,) if isinstance(jurisdiction, str) else tuple(jurisdiction)
        found = self.abbreviations.find(jurisdictions, category, key)
        if found is None:
            return None

        provider, value = found
        record = cache.setdefault(provider, segments())
        record.setdefault(category, {})[key] = value

        logger.debug('abbreviation %s.%s[%r] -> %r', provider, category, key, value)

        return value
