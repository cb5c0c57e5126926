"""Tests for calibench.bench.selection — stable indices and filtering."""

from __future__ import annotations

import unittest

from bench_test_helpers import make_registry

from calibench.bench.selection import assign_indices, select_tests, unmatched_tests


def _registry():  # type: ignore[no-untyped-def]
    # Registration order differs from name order on purpose.
    return make_registry(
        {
            "Zeta": ["list", "validation"],
            "Alpha": ["dict"],
            "Mid": ["list"],
            "Flaky": ["list", "unstable"],
            "Skipped": ["skip"],
        }
    )


def _names(selection) -> list[str]:  # type: ignore[no-untyped-def]
    return [info.name for _, info in selection]


class TestAssignIndices(unittest.TestCase):
    """Tests for assign_indices()."""

    def test_indices_follow_name_order(self) -> None:
        indices = assign_indices(_registry())
        self.assertEqual(
            indices,
            {"Alpha": "1", "Flaky": "2", "Mid": "3", "Skipped": "4", "Zeta": "5"},
        )

    def test_bijection_onto_one_to_n(self) -> None:
        indices = assign_indices(_registry())
        self.assertEqual(sorted(indices.values(), key=int), ["1", "2", "3", "4", "5"])

    def test_empty(self) -> None:
        self.assertEqual(assign_indices([]), {})


class TestSelectTests(unittest.TestCase):
    """Tests for select_tests()."""

    def test_default_skips_unstable_and_skip(self) -> None:
        selection = select_tests(_registry())
        self.assertEqual(_names(selection), ["Zeta", "Alpha", "Mid"])

    def test_output_keeps_registry_order_with_indices(self) -> None:
        selection = select_tests(_registry())
        self.assertEqual([idx for idx, _ in selection], ["5", "1", "3"])

    def test_required_tags_superset(self) -> None:
        selection = select_tests(_registry(), tags=["list"])
        self.assertEqual(_names(selection), ["Zeta", "Mid"])

    def test_required_tags_all_must_match(self) -> None:
        selection = select_tests(_registry(), tags=["list", "validation"])
        self.assertEqual(_names(selection), ["Zeta"])

    def test_empty_skip_tags_includes_everything(self) -> None:
        selection = select_tests(_registry(), skip_tags=[])
        self.assertEqual(len(selection), 5)

    def test_custom_skip_tags(self) -> None:
        selection = select_tests(_registry(), skip_tags=["dict"])
        self.assertEqual(_names(selection), ["Zeta", "Mid", "Flaky", "Skipped"])

    def test_explicit_by_name(self) -> None:
        selection = select_tests(_registry(), specified_tests=["Mid"])
        self.assertEqual(selection, [("3", _registry().get("Mid"))])

    def test_explicit_by_index(self) -> None:
        selection = select_tests(_registry(), specified_tests=["1", "5"])
        self.assertEqual(_names(selection), ["Zeta", "Alpha"])

    def test_explicit_overrides_tags(self) -> None:
        """Explicit tests win even over skip tags and required tags."""
        selection = select_tests(
            _registry(),
            specified_tests=["Flaky", "4"],
            tags=["dict"],
        )
        self.assertEqual(_names(selection), ["Flaky", "Skipped"])

    def test_indices_stable_across_filters(self) -> None:
        by_tag = dict((info.name, idx) for idx, info in select_tests(_registry(), tags=["list"]))
        everything = dict((info.name, idx) for idx, info in select_tests(_registry(), skip_tags=[]))
        for name, idx in by_tag.items():
            self.assertEqual(everything[name], idx)

    def test_unknown_tag_fails_fast(self) -> None:
        with self.assertRaises(ValueError):
            select_tests(_registry(), tags=["bogus"])

    def test_unknown_skip_tag_fails_fast(self) -> None:
        with self.assertRaises(ValueError):
            select_tests(_registry(), specified_tests=["Mid"], skip_tags=["bogus"])

    def test_no_match(self) -> None:
        self.assertEqual(select_tests(_registry(), specified_tests=["Nope"]), [])


class TestUnmatchedTests(unittest.TestCase):
    """Tests for unmatched_tests()."""

    def test_reports_unknown_names_and_indices(self) -> None:
        self.assertEqual(unmatched_tests(_registry(), ["Mid", "2", "99", "Nope"]), ["99", "Nope"])

    def test_all_matched(self) -> None:
        self.assertEqual(unmatched_tests(_registry(), ["Alpha", "5"]), [])


if __name__ == "__main__":
    unittest.main()
