from __future__ import annotations

import pytest

from hashlab.contracts.error import InvariantError
from hashlab.core.entry import Entry
from hashlab.core.open_address import OpenAddressTable


def test_new_tables_are_empty() -> None:
    st1 = OpenAddressTable(10)
    st2 = OpenAddressTable(5)
    assert st1.capacity() == 10 and st2.capacity() == 5
    assert st1.size() == 0 and len(st2) == 0


def test_constructor_rejects_capacity_below_two() -> None:
    with pytest.raises(ValueError):
        OpenAddressTable(1)
    with pytest.raises(ValueError):
        OpenAddressTable(4, max_load_factor=1.5)


def test_string_scenario_update_in_place() -> None:
    st1 = OpenAddressTable(10)
    st1.put("a", "apple")
    st1.put("b", "banana")
    st1.put("banana", "b")
    st1.put("b", "butter")

    assert str(st1) == "a:apple\nb:butter\nbanana:b"
    assert st1.to_string_debug() == (
        "[0]: null\n[1]: null\n[2]: null\n[3]: null\n[4]: null\n"
        "[5]: null\n[6]: null\n[7]: a:apple\n[8]: b:butter\n[9]: banana:b"
    )
    assert st1.capacity() == 10
    assert st1.size() == 3
    assert st1.get("a") == "apple"
    assert st1.get("b") == "butter"
    assert st1.get("banana") == "b"


def test_growth_remove_and_rehash_scenario() -> None:
    st2 = OpenAddressTable(5)
    st2.put("a", 1)
    st2.put("b", 2)
    st2.put("e", 3)
    st2.put("y", 4)

    # Fourth insert reaches 0.8 * 5 and doubles the table.
    assert st2.to_string() == "e:3\ny:4\na:1\nb:2"
    assert st2.to_string_debug() == (
        "[0]: null\n[1]: e:3\n[2]: y:4\n[3]: null\n[4]: null\n"
        "[5]: null\n[6]: null\n[7]: a:1\n[8]: b:2\n[9]: null"
    )
    assert st2.capacity() == 10 and st2.size() == 4
    assert [st2.get(k) for k in ("a", "b", "e", "y")] == [1, 2, 3, 4]

    assert st2.remove("e") == 3
    assert st2.capacity() == 10 and st2.size() == 3
    assert st2.get("e") is None
    assert st2.get("y") == 4
    assert st2.to_string() == "y:4\na:1\nb:2"
    assert st2.to_string_debug() == (
        "[0]: null\n[1]: tombstone\n[2]: y:4\n[3]: null\n[4]: null\n"
        "[5]: null\n[6]: null\n[7]: a:1\n[8]: b:2\n[9]: null"
    )

    assert st2.rehash(2) is False
    assert st2.size() == 3 and st2.capacity() == 10

    assert st2.rehash(4) is True
    assert st2.size() == 3 and st2.capacity() == 4
    assert st2.to_string() == "y:4\na:1\nb:2"
    assert st2.to_string_debug() == "[0]: null\n[1]: y:4\n[2]: a:1\n[3]: b:2"


def test_tombstone_slot_is_reused() -> None:
    st3 = OpenAddressTable(2)
    st3.put("a", "a")
    assert st3.remove("a") == "a"
    assert st3.to_string() == ""
    assert st3.to_string_debug() == "[0]: null\n[1]: tombstone"
    assert st3.is_tombstone(1)

    st3.put("a", "a")
    assert st3.to_string() == "a:a"
    assert st3.to_string_debug() == "[0]: null\n[1]: a:a"
    assert st3.tombstone_count() == 0


def test_rehash_accepts_exactly_one_spare_slot() -> None:
    st6 = OpenAddressTable(2)
    for key in ("orange", "peach", "pear", "banana"):
        st6.put(key, "3")
    assert st6.rehash(10) is True
    assert st6.rehash(4) is False
    assert st6.rehash(5) is True
    assert st6.capacity() == 5 and st6.size() == 4
    assert sorted(st6.keys()) == ["banana", "orange", "peach", "pear"]


def test_put_rejects_none() -> None:
    table = OpenAddressTable(4)
    with pytest.raises(ValueError):
        table.put(None, "x")
    with pytest.raises(ValueError):
        table.put("x", None)
    assert table.size() == 0


def test_probe_continues_through_tombstones() -> None:
    table = OpenAddressTable(10)
    # 97, 107 and 117 all share home slot 7 at capacity 10.
    table.put(97, "first")
    table.put(107, "second")
    table.put(117, "third")
    assert table.remove(107) == "second"
    assert table.get(117) == "third"
    assert table.remove(117) == "third"
    assert table.get(117) is None
    assert table.size() == 1


def test_update_past_tombstone_does_not_duplicate() -> None:
    table = OpenAddressTable(10)
    table.put(97, "a")
    table.put(107, "b")
    table.remove(97)
    table.put(107, "b2")
    assert table.size() == 1
    assert list(table.items()) == [(107, "b2")]
    table.put(117, "c")
    # The first tombstone on the probe path is recycled for new keys.
    assert table.to_string_debug().splitlines()[7] == "[7]: 117:c"


def test_remove_missing_key_stops_at_empty_slot() -> None:
    table = OpenAddressTable(10)
    table.put("a", 1)
    assert table.remove("zzz") is None
    assert table.remove("a") == 1
    assert table.remove("a") is None
    assert table.size() == 0


def test_growth_keeps_entries_retrievable() -> None:
    table = OpenAddressTable(2)
    for i in range(100):
        table.put(f"k{i}", i)
        assert table.load_factor() < 0.8
    assert table.size() == 100
    assert table.capacity() == 128
    assert all(table.get(f"k{i}") == i for i in range(100))


def test_compact_clears_tombstones() -> None:
    table = OpenAddressTable(16)
    for i in range(8):
        table.put(i, i)
    for i in range(0, 8, 2):
        table.remove(i)
    assert table.tombstone_count() == 4
    assert table.tombstone_ratio() == pytest.approx(0.25)
    table.compact()
    assert table.tombstone_count() == 0
    assert dict(table.items()) == {1: 1, 3: 3, 5: 5, 7: 7}


def test_probe_exhaustion_raises_invariant_error() -> None:
    table = OpenAddressTable(2)
    # Simulate a corrupted, completely full slot array.
    table._slots = [Entry("x", 1), Entry("y", 2)]  # pylint: disable=protected-access
    with pytest.raises(InvariantError):
        table.put("z", 3)


def test_debug_dump_is_idempotent() -> None:
    table = OpenAddressTable(5)
    table.put("a", 1)
    table.put("e", 2)
    table.remove("a")
    assert table.to_string_debug() == table.to_string_debug()


def test_container_protocol() -> None:
    table = OpenAddressTable(4)
    table.put("k", "v")
    assert "k" in table
    assert "missing" not in table
    assert None not in table
    assert list(table) == ["k"]
    assert repr(table) == "OpenAddressTable(capacity=4, size=1)"


def test_rehash_never_goes_below_two_slots() -> None:
    table = OpenAddressTable(2)
    assert table.rehash(1) is False
    assert table.rehash(0) is False
    assert table.capacity() == 2
    table.put("a", 1)
    assert table.rehash(2) is True
    assert table.capacity() == 2
