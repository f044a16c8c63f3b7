"""Test suite for the pytest-csl package.

This package contains unit and integration tests validating corpus
merging and normalization, style module resolution, the abbreviation
store, the reference repository cache and pytest integration.
"""
