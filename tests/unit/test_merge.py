"""
Unit tests for fragment merging.
"""

import random

import pytest

from postgres_metrics.core.fetcher import merge_fragments, merge_stat


class TestMergeStat:

    @pytest.mark.unit
    @pytest.mark.fetcher
    def test_copies_into_destination(self):
        dst = {"a": 1}
        merge_stat(dst, {"b": 2})
        assert dst == {"a": 1, "b": 2}

    @pytest.mark.unit
    @pytest.mark.fetcher
    def test_overwrites_existing_key(self):
        dst = {"a": 1}
        merge_stat(dst, {"a": 3})
        assert dst == {"a": 3}


class TestMergeFragments:
    """Tests for merge_fragments."""

    @pytest.mark.unit
    @pytest.mark.fetcher
    def test_empty(self):
        """No fragments gives an empty snapshot."""
        assert merge_fragments([]) == {}

    @pytest.mark.unit
    @pytest.mark.fetcher
    def test_last_write_wins(self):
        """[{a:1}, {a:2}] merges to {a:2}."""
        assert merge_fragments([{"a": 1}, {"a": 2}]) == {"a": 2}

    @pytest.mark.unit
    @pytest.mark.fetcher
    def test_disjoint_union(self):
        """Disjoint fragments merge to their union whatever the order."""
        fragments = [{f"k{i}": i} for i in range(20)]
        expected = {f"k{i}": i for i in range(20)}

        shuffled = list(fragments)
        random.Random(1234).shuffle(shuffled)

        assert merge_fragments(fragments) == expected
        assert merge_fragments(shuffled) == expected

    @pytest.mark.unit
    @pytest.mark.fetcher
    def test_does_not_mutate_fragments(self):
        """Inputs are left untouched."""
        first, second = {"a": 1}, {"a": 2, "b": 3}
        merge_fragments([first, second])
        assert first == {"a": 1}
        assert second == {"a": 2, "b": 3}

    @pytest.mark.unit
    @pytest.mark.fetcher
    def test_accepts_generator(self):
        assert merge_fragments({"x": i} for i in range(3)) == {"x": 2}
