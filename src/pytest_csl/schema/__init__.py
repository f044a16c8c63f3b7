"""Pydantic models of the documents a corpus is assembled from.

Defines immutable models for cite items, abbreviation sets, test cases,
suite units and corpus configuration files. Models keep unknown fields
so suites survive merging and normalization without loss.
"""

from .abbreviations import CATEGORIES, AbbreviationSet
from .cases import Mode, SuiteCase, SuiteUnit
from .config import CorpusConfig
from .items import CiteItem, Cluster

__all__ = (
    'CATEGORIES',
    'AbbreviationSet',
    'CiteItem',
    'Cluster',
    'CorpusConfig',
    'Mode',
    'SuiteCase',
    'SuiteUnit',
)
