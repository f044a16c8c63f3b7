"""Rendering side of the test runner.

This package adapts an external citation rendering engine to a corpus:
it resolves jurisdiction style modules, keeps the abbreviation store in
sync with the engine's own cache, and renders test case input.

The primary public entry point is `TestEngine`.
"""

from .abbreviations import AbbreviationStore, lookup_key, normalize_key, segments
from .engine import (
    Processor,
    ProcessorFactory,
    TestEngine,
    at_index,
    load_processor_factory,
    normalize_italics,
)
from .resolver import StyleModuleResolver, module_filename
from .system import CiteprocSystem

__all__ = (
    'AbbreviationStore',
    'CiteprocSystem',
    'Processor',
    'ProcessorFactory',
    'StyleModuleResolver',
    'TestEngine',
    'at_index',
    'load_processor_factory',
    'lookup_key',
    'module_filename',
    'normalize_italics',
    'normalize_key',
    'segments',
)
