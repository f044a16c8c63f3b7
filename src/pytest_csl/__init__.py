"""Pytest plugin for testing citation styles against YAML suites.

The `pytest_csl` package checks that a citation rendering engine renders
citations of a CSL style as expected for a reference library and a set
of jurisdiction style modules.

Key features:
- independently authored YAML suites merged into one corpus, later
  documents overriding same-named tests;
- jurisdiction style modules resolved through corpus directories with
  a cached fallback repository;
- per-test abbreviation sets kept in sync with the engine's cache;
- every test case collected as a pytest item.
"""
