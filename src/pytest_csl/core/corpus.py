"""Corpus composition: merging suite documents and normalizing cases.

Suites are authored independently and folded left to right into one
corpus. Units are matched by `describe` and tests within a unit by name.
A later test with a known name replaces the earlier one where it stands;
tests with new names are appended. Overriding therefore never moves a
test within its unit.
"""

from typing import TYPE_CHECKING

from pytest_csl.schema import SuiteCase, SuiteUnit

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable


class OrderedIndex[K: 'Hashable', V]:
    """Ordered collection with keyed overlay.

    Keeps values in insertion order alongside a key to position map.
    Putting a known key updates the value in place; a new key is
    appended at the end.
    """

    def __init__(self, key: 'Callable[[V], K]') -> None:
        """Initialize an empty index.

        Args:
            key: Function extracting the identity of a value.
        """
        self.key = key
        self.values: list[V] = []
        self.positions: dict[K, int] = {}

    def __contains__(self, key: K) -> bool:
        return key in self.positions

    def __getitem__(self, key: K) -> V:
        return self.values[self.positions[key]]

    def __len__(self) -> int:
        return len(self.values)

    def put(self, value: V) -> None:
        """Overlay a value onto the index.

        Args:
            value: Value to insert or to replace a same-keyed value with.
        """
        key = self.key(value)
        if (position := self.positions.get(key)) is not None:
            self.values[position] = value
        else:
            self.positions[key] = len(self.values)
            self.values.append(value)

    def extend(self, values: 'Iterable[V]') -> None:
        """Overlay values in order."""
        for value in values:
            self.put(value)


def merge_unit(first: SuiteUnit, second: SuiteUnit) -> SuiteUnit:
    """Merge two units sharing a label.

    Args:
        first: Unit accumulated so far.
        second: Unit from a later document.

    Returns:
        The first unit with tests of the second overlaid by name.
    """
    tests: OrderedIndex[str, SuiteCase] = OrderedIndex(lambda case: case.name)
    tests.extend(first.tests)
    tests.extend(second.tests)

    return first.model_copy(update={'tests': tests.values})


def merge_units(accumulated: 'Iterable[SuiteUnit]',
                incoming: 'Iterable[SuiteUnit] | None') -> list[SuiteUnit]:
    """Fold the units of a new document into an accumulated corpus.

    Units keep the order of their first appearance; a unit whose label
    is already known is merged into the existing one. Tests sharing a
    name within one unit collapse the same way, the later one taking
    the place of the first.

    Args:
        accumulated: Units merged so far.
        incoming: Units of the next document. `None` (an empty document)
            contributes nothing.

    Returns:
        The merged units.
    """
    units: OrderedIndex[str, SuiteUnit] = OrderedIndex(lambda unit: unit.describe)

    for unit in (*accumulated, *(incoming or ())):
        if unit.describe in units:
            base = units[unit.describe]
        else:
            base = unit.model_copy(update={'tests': []})
        units.put(merge_unit(base, unit))

    return units.values


def strip_expect(case: SuiteCase) -> SuiteCase:
    """Trim surrounding whitespace off the expected output."""
    if case.expect is None:
        return case

    if isinstance(case.expect, list):
        expect: str | list[str] = [item.strip() for item in case.expect]
    else:
        expect = case.expect.strip()

    return case.model_copy(update={'expect': expect})


def insert_missing_labels(case: SuiteCase) -> SuiteCase:
    """Default the label of every cite item that has a locator."""
    update = {}

    if case.single is not None:
        update['single'] = case.single.with_default_label()

    if case.sequence is not None:
        update['sequence'] = [
            [item.with_default_label() for item in cluster]
            for cluster in case.sequence
        ]

    if not update:
        return case

    return case.model_copy(update=update)


def normalize_case(case: SuiteCase) -> SuiteCase:
    """Apply all case normalizations."""
    return insert_missing_labels(strip_expect(case))


def normalize_unit(unit: SuiteUnit) -> SuiteUnit:
    """Normalize every case of a unit."""
    return unit.model_copy(update={
        'tests': [normalize_case(case) for case in unit.tests],
    })


def normalize_units(units: 'Iterable[SuiteUnit]') -> list[SuiteUnit]:
    """Normalize every unit of a corpus."""
    return [normalize_unit(unit) for unit in units]
