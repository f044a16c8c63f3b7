"""Example collaborators used by the test suite."""
