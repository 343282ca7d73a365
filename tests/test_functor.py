"""Tests for src.analyzer.functor — fmap/contents over container shapes."""

from __future__ import annotations

import pytest

from src.analyzer.functor import Box, Maybe, contents, fmap


def inc(x):
    return x + 1


class TestSequences:
    def test_list_keeps_type_and_length(self):
        assert fmap([1, 2, 3], inc) == [2, 3, 4]

    def test_tuple_stays_tuple(self):
        result = fmap((1, 2), inc)
        assert isinstance(result, tuple)
        assert result == (2, 3)

    def test_empty_list(self):
        assert fmap([], inc) == []

    def test_input_not_mutated(self):
        data = [1, 2]
        fmap(data, inc)
        assert data == [1, 2]


class TestMaybe:
    def test_present_value_mapped(self):
        assert fmap(Maybe.of(1), inc) == Maybe.of(2)

    def test_empty_stays_empty(self):
        calls = []
        result = fmap(Maybe.empty(), lambda x: calls.append(x))
        assert result == Maybe.empty()
        assert calls == []

    def test_from_optional(self):
        assert Maybe.from_optional(None) == Maybe.empty()
        assert Maybe.from_optional(0).present

    def test_get_or(self):
        assert Maybe.of(3).get_or(0) == 3
        assert Maybe.empty().get_or(0) == 0


class TestBox:
    def test_mapped(self):
        assert fmap(Box(2), inc) == Box(3)


class TestLaws:
    @pytest.mark.parametrize("container", [[1, 2], (3,), Maybe.of(4), Maybe.empty(), Box(5)])
    def test_identity(self, container):
        assert fmap(container, lambda x: x) == container

    @pytest.mark.parametrize("container", [[1, 2], (3,), Maybe.of(4), Box(5)])
    def test_composition(self, container):
        double = lambda x: x * 2  # noqa: E731
        assert fmap(fmap(container, inc), double) == fmap(container, lambda x: double(inc(x)))


class TestContents:
    def test_each_shape(self):
        assert contents([1, 2]) == [1, 2]
        assert contents((1,)) == [1]
        assert contents(Maybe.of(1)) == [1]
        assert contents(Maybe.empty()) == []
        assert contents(Box(1)) == [1]


class TestUnregistered:
    def test_fmap_raises_type_error(self):
        with pytest.raises(TypeError):
            fmap({1, 2}, inc)

    def test_contents_raises_type_error(self):
        with pytest.raises(TypeError):
            contents("abc")
