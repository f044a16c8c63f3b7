"""Loading of suites, reference libraries and corpus configuration.

All loading is eager: configuration and parse errors surface while a
corpus is being collected, never while an individual test runs.
"""

from dataclasses import dataclass
from json import JSONDecodeError, loads
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError
from yaml import safe_load
from yaml.error import MarkedYAMLError, YAMLError

from pytest_csl.errors import ConfigurationError, ErrorContext, ParseError
from pytest_csl.paths import expand_globs
from pytest_csl.schema import CorpusConfig, SuiteUnit

from .corpus import merge_units, normalize_units

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from io import TextIOBase
    from pathlib import Path

logger = getLogger(__name__)

#: Mapping of item identifier to its CSL-JSON record.
type LibraryIndex = Mapping[str, dict[str, Any]]

_UNITS = TypeAdapter(list[SuiteUnit] | None)


@dataclass(frozen=True)
class LoadedConfig:
    """Files referenced by a corpus configuration, read into memory."""

    #: Text of the CSL style under test.
    style: str
    #: Records of all library files, in file order.
    library: list[dict[str, Any]]
    #: Directories searched for jurisdiction style modules, in order.
    jurisdiction_dirs: list['Path']


def parse_suite(content: 'TextIOBase | str', filename: str | None = None) -> list[SuiteUnit]:
    """Parse a suite document.

    Args:
        content: YAML text of the document or a file-like object.
        filename: Name of the source used for error reporting.

    Returns:
        Units of the document; an empty document has none.

    Raises:
        ParseError: If the document is not valid YAML or not a
            sequence of suite units.
    """
    try:
        data = safe_load(content)

    except MarkedYAMLError as base:
        raise ParseError.from_yaml_error(base) from base

    except YAMLError as base:
        raise ParseError('Invalid YAML', context=ErrorContext(filename=filename)) from base

    try:
        units = _UNITS.validate_python(data)

    except ValidationError as base:
        raise ParseError.from_pydantic_error(base, data=data, filename=filename) from base

    return units or []


def read_suite(path: 'Path') -> list[SuiteUnit]:
    """Read and parse a suite document from disk."""
    logger.debug('reading suite %s', path)

    with path.open('rt', encoding='utf-8') as content:
        return parse_suite(content, filename=str(path))


def read_test_units(patterns: 'Iterable[str]', base: 'Path | None' = None) -> list[SuiteUnit]:
    """Build a corpus from suite documents.

    Documents are merged left to right in the order the patterns
    expand to, then every case is normalized.

    Args:
        patterns: Suite document patterns.
        base: Directory relative patterns are resolved against.

    Returns:
        The merged and normalized units.

    Raises:
        ConfigurationError: If the patterns match no file.
        ParseError: If a document is malformed.
    """
    suites = expand_globs(patterns, base)
    if not suites:
        raise ConfigurationError('no suites provided')

    units: list[SuiteUnit] = []
    for suite in suites:
        units = merge_units(units, read_suite(suite))

    return normalize_units(units)


def read_library(patterns: 'Iterable[str]', base: 'Path | None' = None) -> list[dict[str, Any]]:
    """Read CSL-JSON reference libraries.

    Args:
        patterns: Library file patterns.
        base: Directory relative patterns are resolved against.

    Returns:
        All records of all files, in file order.

    Raises:
        ConfigurationError: If a file is empty, is not an array of
            records or holds a record without `id`.
        ParseError: If a file is not valid JSON.
    """
    library: list[dict[str, Any]] = []

    for path in expand_globs(patterns, base):
        content = path.read_text(encoding='utf-8')
        if not content.strip():
            raise ConfigurationError(f'library file {path} empty or nonexistent')

        try:
            records = loads(content)

        except JSONDecodeError as base_error:
            raise ParseError(
                f'Invalid JSON: {base_error.msg}',
                context=ErrorContext(
                    filename=str(path),
                    line_num=base_error.lineno - 1,
                    column_num=base_error.colno - 1,
                ),
            ) from base_error

        if not isinstance(records, list):
            raise ConfigurationError(f'parsed library {path} not an array of references')

        for record in records:
            if not isinstance(record, dict) or 'id' not in record:
                raise ConfigurationError(
                    f'library {path} holds a reference without id',
                    context=ErrorContext(filename=str(path), element=record),
                )

        logger.debug('read %d references from %s', len(records), path)
        library.extend(records)

    return library


def index_library(library: 'Iterable[dict[str, Any]]') -> tuple[LibraryIndex, tuple[str, ...]]:
    """Index library records by identifier.

    A record whose identifier was seen before replaces the earlier one;
    identifiers keep the order of their first appearance.

    Args:
        library: CSL-JSON records.

    Returns:
        A read-only index and the ordered identifiers.
    """
    citations: dict[str, dict[str, Any]] = {}
    for record in library:
        citations[str(record['id'])] = record

    return MappingProxyType(citations), tuple(citations)


def read_config_files(config: CorpusConfig, base: 'Path | None' = None) -> LoadedConfig:
    """Read the style, libraries and jurisdiction directories of a corpus.

    Args:
        config: Validated corpus configuration.
        base: Directory relative paths are resolved against.

    Returns:
        Loaded configuration.

    Raises:
        ConfigurationError: If the style is missing or empty, or a
            library file is invalid.
        ParseError: If a library file is not valid JSON.
    """
    style_path = config.style.expanduser()
    if base is not None and not style_path.is_absolute():
        style_path = base / style_path

    try:
        style = style_path.read_text(encoding='utf-8')

    except OSError as base_error:
        raise ConfigurationError(f'style not loaded: {style_path}') from base_error

    if not style.strip():
        raise ConfigurationError(f'style not loaded: {style_path} is empty')

    library = read_library(config.libraries, base)
    jurisdiction_dirs = [
        path
        for path in expand_globs(config.jurisdiction_dirs, base)
        if path.is_dir()
    ]

    return LoadedConfig(style, library, jurisdiction_dirs)


def read_corpus_config(path: 'Path') -> CorpusConfig:
    """Read and validate a corpus configuration file.

    Raises:
        ParseError: If the file is not valid YAML or not a valid
            configuration.
    """
    try:
        with path.open('rt', encoding='utf-8') as content:
            data = safe_load(content)

    except MarkedYAMLError as base:
        raise ParseError.from_yaml_error(base) from base

    except YAMLError as base:
        raise ParseError('Invalid YAML', context=ErrorContext(filename=str(path))) from base

    try:
        return CorpusConfig.model_validate(data)

    except ValidationError as base:
        raise ParseError.from_pydantic_error(base, data=data, filename=str(path)) from base
