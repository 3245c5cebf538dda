from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple

import pytest
from hypothesis import given, strategies as st

from hashlab.core import ChainTable, OpenAddressTable, verify_table


@dataclass(frozen=True)
class CollidingKey:
    """Key whose hash intentionally collides with peers for stress testing."""

    value: int

    def __hash__(self) -> int:  # pragma: no cover - trivial wrapper
        return 0

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"CK({self.value})"


def _key_strategy() -> st.SearchStrategy[Any]:
    small_ints = st.integers(-20, 20)
    colliding = st.builds(CollidingKey, st.integers(-10, 10))
    short_text = st.text(alphabet="abcxyz", min_size=1, max_size=3)
    return st.one_of(small_ints, colliding, short_text)


def _operation_strategy() -> st.SearchStrategy[Tuple[str, Any, int | None]]:
    key = _key_strategy()
    value = st.integers(-1_000, 1_000)
    put_op = st.tuples(st.just("put"), key, value)
    get_op = st.tuples(st.just("get"), key, st.none())
    remove_op = st.tuples(st.just("remove"), key, st.none())
    rehash_op = st.tuples(st.just("rehash"), st.none(), st.integers(-2, 40))
    return st.one_of(put_op, put_op, get_op, remove_op, rehash_op)


FACTORIES: Dict[str, Callable[[], Any]] = {
    "open": lambda: OpenAddressTable(2),
    "chaining": lambda: ChainTable(1),
}


@pytest.mark.parametrize("backend", sorted(FACTORIES))
@given(operations=st.lists(_operation_strategy(), min_size=1, max_size=120))
def test_table_behaves_like_dict(backend: str, operations: list[Tuple[str, Any, int | None]]) -> None:
    table = FACTORIES[backend]()
    model: Dict[Any, int] = {}
    seen_keys: set[Any] = set()

    for op, key, maybe_value in operations:
        if op == "rehash":
            assert maybe_value is not None
            before = table.capacity()
            minimum = max(2, len(model) + 1) if backend == "open" else 1
            accepted = table.rehash(maybe_value)
            assert accepted is (maybe_value >= minimum)
            assert table.capacity() == (maybe_value if accepted else before)
        elif op == "put":
            seen_keys.add(key)
            assert maybe_value is not None
            table.put(key, maybe_value)
            model[key] = maybe_value
            assert table.get(key) == maybe_value
        elif op == "remove":
            seen_keys.add(key)
            expected = model.pop(key, None)
            assert table.remove(key) == expected
            assert table.get(key) is None
        else:
            seen_keys.add(key)
            assert table.get(key) == model.get(key)

        assert table.size() == len(model)
        for candidate in seen_keys:
            assert table.get(candidate) == model.get(candidate)
        assert dict(table.items()) == model

    ok, messages = verify_table(table)
    assert ok, messages


@pytest.mark.parametrize("backend", sorted(FACTORIES))
@given(keys=st.lists(st.text(min_size=1, max_size=8), unique=True, max_size=60))
def test_unique_inserts_grow_and_stay_retrievable(backend: str, keys: list[str]) -> None:
    table = FACTORIES[backend]()
    for i, key in enumerate(keys):
        table.put(key, i)
    assert table.size() == len(keys)
    assert table.load_factor() < 0.8
    assert all(table.get(key) == i for i, key in enumerate(keys))


@pytest.mark.parametrize("backend", sorted(FACTORIES))
def test_equal_keys_of_different_types_share_one_entry(backend: str) -> None:
    table = FACTORIES[backend]()
    table.rehash(10)
    table.put(1, "int")
    table.put(True, "bool")
    table.put(-1, "neg")
    table.put(-1.0, "negfloat")
    assert table.size() == 2
    assert table.get(1.0) == "bool"
    assert table.get(-1) == "negfloat"
    assert table.remove(True) == "bool"
    assert table.get(1) is None
    ok, messages = verify_table(table)
    assert ok, messages
