"""Abbreviation store consulted by the rendering engine.

Every render call installs the abbreviation sets of its test case from
scratch. The rendering engine keeps its own abbreviation cache object,
handed over through the `get_abbreviation` callback; the store keeps a
reference to it and clears it in place on every reset, so the engine
never sees abbreviations left behind by a previous test.
"""

from logging import getLogger
from re import compile as regexp
from typing import TYPE_CHECKING

from pytest_csl.errors import ConfigurationError
from pytest_csl.schema.abbreviations import CATEGORIES, DEFAULT_JURISDICTION

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, MutableMapping

if TYPE_CHECKING:
    from pytest_csl.schema import AbbreviationSet

logger = getLogger(__name__)

#: Abbreviations of one jurisdiction: category, then key, then value.
type Segments = dict[str, dict[str, str]]

#: Abbreviations of all jurisdictions.
type Abbreviations = dict[str, Segments]

_SPACES = regexp(r'\s+')


def segments() -> Segments:
    """Create an empty record holding every category."""
    return {category: {} for category in CATEGORIES}


def normalize_key(key: str) -> str:
    """Normalize a raw abbreviation key.

    Surrounding whitespace is removed and inner runs of whitespace are
    collapsed to one space.
    """
    return _SPACES.sub(' ', key.strip())


def lookup_key(key: str) -> str:
    """Derive the lookup form of a normalized key.

    Full stops are dropped and case is folded, so `U.S.`, `u.s.` and
    `US` share one entry.
    """
    return key.replace('.', '').casefold()


class AbbreviationStore:
    """Per-jurisdiction, per-category abbreviation lookup.

    Attributes:
        generation: Number of resets so far. Changes whenever the
            visible abbreviations are replaced.
    """

    def __init__(self, *,
                 normalize: 'Callable[[str], str]' = normalize_key,
                 lookup: 'Callable[[str], str]' = lookup_key) -> None:
        """Initialize an empty store.

        Args:
            normalize: Normalization applied to raw keys.
            lookup: Derivation of the stored key from a normalized key.
        """
        self.normalize = normalize
        self.lookup = lookup

        self.generation = 0
        self.abbreviations: Abbreviations = {DEFAULT_JURISDICTION: segments()}
        self.cache: MutableMapping[str, Segments] | None = None

    def key(self, raw: str) -> str:
        """Compute the stored form of a raw key."""
        return self.lookup(self.normalize(raw))

    def bind(self, cache: 'MutableMapping[str, Segments]') -> None:
        """Keep a reference to the rendering engine's cache object."""
        self.cache = cache

    def reset(self) -> None:
        """Drop all abbreviations and reseed the default jurisdiction.

        A bound engine cache is cleared in place so references held by
        the engine stay valid.
        """
        self.generation += 1
        self.abbreviations = {DEFAULT_JURISDICTION: segments()}

        if self.cache is not None:
            logger.debug('clearing engine abbreviation cache')
            self.cache.clear()
            self.cache[DEFAULT_JURISDICTION] = segments()

    def add(self, jurisdiction: str, category: str, key: str, value: str) -> None:
        """Add an abbreviation.

        Raises:
            ConfigurationError: If the category is unknown.
        """
        if category not in CATEGORIES:
            raise ConfigurationError(f'unknown abbreviation category {category!r}')

        logger.info('adding abbreviation: %s.%s[%r] = %r', jurisdiction, category, key, value)
        record = self.abbreviations.setdefault(jurisdiction, segments())
        record[category][self.key(key)] = value

    def apply(self, sets: 'Iterable[AbbreviationSet] | None') -> None:
        """Replace the store contents with abbreviation sets.

        The store is reset even when no sets are given. Only categories
        of the fixed universe are read from each set.
        """
        self.reset()

        for abbreviation_set in sets or ():
            jurisdiction = abbreviation_set.jurisdiction or DEFAULT_JURISDICTION
            for category in CATEGORIES:
                for key, value in abbreviation_set.categories.get(category, {}).items():
                    self.add(jurisdiction, category, key, value)

    def get(self, jurisdiction: str, category: str, key: str) -> str | None:
        """Look up an abbreviation.

        Returns:
            The abbreviation, or `None` if it was never added.
        """
        record = self.abbreviations.get(jurisdiction)
        if record is None:
            return None

        return record.get(category, {}).get(self.key(key))

    def find(self, jurisdictions: 'Iterable[str]', category: str,
             key: str) -> tuple[str, str] | None:
        """Look up an abbreviation across jurisdictions.

        Jurisdictions are tried in the given order, then the default one.

        Returns:
            The jurisdiction providing the abbreviation and its value,
            or `None`.
        """
        for jurisdiction in (*jurisdictions, DEFAULT_JURISDICTION):
            if (value := self.get(jurisdiction, category, key)) is not None:
                return jurisdiction, value

        return None
