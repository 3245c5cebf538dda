from __future__ import annotations

import pytest

from hashlab.core.entry import Entry
from hashlab.core.hashing import bucket_index, stable_hash, string_hash


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("", 0),
        ("a", 97),
        ("b", 98),
        ("pear", 3436774),
        ("banana", -1396355227),
        ("orange", -1008851410),
    ],
)
def test_string_hash_matches_known_values(text: str, expected: int) -> None:
    assert string_hash(text) == expected


def test_non_string_keys_use_builtin_hash() -> None:
    assert stable_hash(42) == 42
    assert stable_hash(-7) == -7
    assert stable_hash(True) == stable_hash(1) == stable_hash(1.0)
    assert stable_hash(-1) == stable_hash(-1.0)
    assert stable_hash(10**12) == hash(10**12)


def test_stable_hash_falls_back_to_builtin_hash() -> None:
    assert stable_hash((1, 2)) == hash((1, 2))


def test_bucket_index_is_non_negative_and_in_range() -> None:
    assert bucket_index("banana", 10) == 7
    assert bucket_index(-13, 5) == 3
    for cap in (1, 2, 3, 7, 64):
        for key in ("x", "banana", -99, 10**12):
            assert 0 <= bucket_index(key, cap) < cap


def test_entry_renders_and_compares_by_key() -> None:
    entry = Entry("a", 1)
    assert str(entry) == "a:1"
    assert entry == Entry("a", 2)
    assert entry != Entry("b", 1)
    assert hash(entry) == hash("a")
    # Keys that compare equal across types make equal entries.
    assert Entry(-1, "int") == Entry(-1.0, "float")
    assert len({Entry(1, "x"), Entry(True, "y"), Entry(1.0, "z")}) == 1


def test_entry_rejects_none_and_is_immutable() -> None:
    with pytest.raises(ValueError):
        Entry(None, 1)
    with pytest.raises(ValueError):
        Entry("a", None)
    entry = Entry("a", 1)
    with pytest.raises(AttributeError):
        entry.value = 2  # type: ignore[misc]
