"""Test corpus composition.

This package reads suite documents, reference libraries and corpus
configuration files, and folds independently authored suites into one
ordered, override-aware and normalized corpus.

The primary public entry point is `read_test_units`.
"""

from .corpus import OrderedIndex, merge_unit, merge_units, normalize_case, normalize_units
from .loader import (
    LibraryIndex,
    LoadedConfig,
    index_library,
    parse_suite,
    read_config_files,
    read_corpus_config,
    read_library,
    read_suite,
    read_test_units,
)

__all__ = (
    'LibraryIndex',
    'LoadedConfig',
    'OrderedIndex',
    'index_library',
    'merge_unit',
    'merge_units',
    'normalize_case',
    'normalize_units',
    'parse_suite',
    'read_config_files',
    'read_corpus_config',
    'read_library',
    'read_suite',
    'read_test_units',
)
