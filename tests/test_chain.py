import unittest
from unittest.mock import MagicMock

import pytest

from lazybind import chain, inject


class TestChainOrdering(unittest.TestCase):
    def setUp(self):
        self.factory = inject({"foo": lambda _: 3})

    def test_chain_applies_hooks_left_to_right(self):
        it = self.factory(chain({"foo": lambda n, _: 2 * n}, {"foo": lambda n, _: 2 + n}))
        assert it.foo == 8

    def test_chain_order_is_not_commutative(self):
        it = self.factory(chain({"foo": lambda n, _: 2 + n}, {"foo": lambda n, _: 2 * n}))
        assert it.foo == 10

    def test_chain_passes_same_instance_to_every_hook(self):
        first = MagicMock(side_effect=lambda n, _: n + 1)
        second = MagicMock(side_effect=lambda n, _: n * 10)

        it = self.factory(chain({"foo": first}, {"foo": second}))
        assert it.foo == 40

        assert first.call_args[0] == (3, it)
        assert second.call_args[0] == (4, it)
        assert first.call_args[0][1] is it
        assert second.call_args[0][1] is it

    def test_chain_of_three_maps_composes_in_order(self):
        hooks = chain(
            {"foo": lambda n, _: n + 1},
            {"foo": lambda n, _: n * 10},
            {"foo": lambda n, _: n - 2},
        )
        assert self.factory(hooks).foo == 38


class TestChainComposition(unittest.TestCase):
    def test_chain_single_contributor_is_not_wrapped(self):
        def double(n, _):
            return n * 2

        def add(n, _):
            return n + 2

        hooks = chain({"foo": double}, {"bar": add}, {})
        assert hooks["foo"] is double
        assert hooks["bar"] is add

    def test_chain_covers_union_of_fields(self):
        hooks = chain({"foo": lambda n, _: n}, {"bar": lambda n, _: n}, {"foo": lambda n, _: n})
        assert set(hooks) == {"foo", "bar"}

    def test_chain_without_arguments_is_empty(self):
        assert chain() == {}

    def test_chain_skips_none_hooks(self):
        def double(n, _):
            return n * 2

        hooks = chain({"foo": None}, {"foo": double}, {"foo": None, "bar": None})
        assert hooks == {"foo": double}

    def test_chain_does_not_mutate_inputs(self):
        first = {"foo": lambda n, _: n + 1}
        second = {"foo": lambda n, _: n * 2}
        first_copy, second_copy = dict(first), dict(second)

        chain(first, second)

        assert first == first_copy
        assert second == second_copy

    def test_chain_result_is_a_hook_map_for_chain(self):
        inner = chain({"foo": lambda n, _: n + 1}, {"foo": lambda n, _: n * 2})
        outer = chain(inner, {"foo": lambda n, _: n - 1})
        assert inject({"foo": lambda _: 3})(outer).foo == 7

    def test_chain_rejects_non_callable_hook(self):
        with pytest.raises(TypeError) as ctx:
            chain({"foo": 42})
        assert "'foo'" in str(ctx.value)


def test_chain_hooks_run_once_per_instance():
    calls = []

    def record(n, _):
        calls.append(n)
        return n

    factory = inject({"foo": lambda _: 3, "bar": lambda s: s.foo})
    it = factory(chain({"foo": record}, {"foo": record}))
    it.foo  # noqa: B018
    it.bar  # noqa: B018
    assert calls == [3, 3]
