from __future__ import annotations

import logging
from typing import Any, Iterator, List, Optional, Tuple

from hashlab.contracts.error import InvariantError

from .entry import Entry
from .hashing import bucket_index

logger = logging.getLogger("hashlab")

DEFAULT_MAX_LOAD_FACTOR: float = 0.8
MIN_CAPACITY: int = 2


class _Tombstone:
    __slots__ = ()

    def __repr__(self) -> str:
        return "tombstone"


# Slot states: None (never used), _TOMBSTONE (removed), Entry (occupied).
_TOMBSTONE = _Tombstone()


class OpenAddressTable:
    """Open-addressing hash table with linear probing and tombstone deletion."""

    __slots__ = ("_slots", "_count", "_max_lf")

    def __init__(self, initial_capacity: int, *, max_load_factor: float = DEFAULT_MAX_LOAD_FACTOR) -> None:
        if initial_capacity < MIN_CAPACITY:
            raise ValueError(f"initial_capacity must be >= {MIN_CAPACITY}")
        if not 0.0 < max_load_factor <= 1.0:
            raise ValueError("max_load_factor must be in (0, 1]")
        self._slots: List[Optional[Any]] = [None] * initial_capacity
        self._count = 0
        self._max_lf = max_load_factor

    def __len__(self) -> int:
        return self._count

    def __contains__(self, key: Any) -> bool:
        return key is not None and self._find(key) is not None

    def __iter__(self) -> Iterator[Any]:
        return self.keys()

    def capacity(self) -> int:
        return len(self._slots)

    def size(self) -> int:
        return self._count

    def load_factor(self) -> float:
        return self._count / len(self._slots)

    def max_load_factor(self) -> float:
        return self._max_lf

    def tombstone_count(self) -> int:
        return sum(1 for slot in self._slots if slot is _TOMBSTONE)

    def tombstone_ratio(self) -> float:
        return self.tombstone_count() / len(self._slots)

    def is_tombstone(self, index: int) -> bool:
        return self._slots[index] is _TOMBSTONE

    def home_slot(self, key: Any) -> int:
        return bucket_index(key, len(self._slots))

    def _find(self, key: Any) -> Optional[int]:
        cap = len(self._slots)
        idx = bucket_index(key, cap)
        for _ in range(cap):
            slot = self._slots[idx]
            if slot is None:
                return None
            if isinstance(slot, Entry) and slot.key == key:
                return idx
            idx = (idx + 1) % cap
        return None

    def _insert(self, entry: Entry) -> bool:
        """Place ``entry`` without growing; return True when a slot was consumed."""

        cap = len(self._slots)
        idx = bucket_index(entry.key, cap)
        free: Optional[int] = None
        for _ in range(cap):
            slot = self._slots[idx]
            if slot is None:
                if free is None:
                    free = idx
                break
            if slot is _TOMBSTONE:
                if free is None:
                    free = idx
            elif slot.key == entry.key:
                self._slots[idx] = entry
                return False
            idx = (idx + 1) % cap
        if free is None:
            raise InvariantError(f"probe exhausted all {cap} slots for key {entry.key!r}")
        self._slots[free] = entry
        self._count += 1
        return True

    def put(self, key: Any, value: Any) -> None:
        if key is None or value is None:
            raise ValueError("put requires a non-None key and value")
        if not self._insert(Entry(key, value)):
            return
        while self._count >= self._max_lf * len(self._slots):
            new_cap = len(self._slots) * 2
            logger.info(
                "Open-address table growing %d -> %d (size=%d)", len(self._slots), new_cap, self._count
            )
            self.rehash(new_cap)

    def get(self, key: Any) -> Optional[Any]:
        if key is None:
            return None
        idx = self._find(key)
        if idx is None:
            return None
        return self._slots[idx].value

    def remove(self, key: Any) -> Optional[Any]:
        if key is None:
            return None
        idx = self._find(key)
        if idx is None:
            return None
        entry = self._slots[idx]
        self._slots[idx] = _TOMBSTONE
        self._count -= 1
        return entry.value

    def rehash(self, new_capacity: int) -> bool:
        minimum = max(MIN_CAPACITY, self._count + 1)
        if new_capacity < minimum:
            logger.debug(
                "Rejected open-address rehash to %d (size=%d needs >= %d)",
                new_capacity,
                self._count,
                minimum,
            )
            return False
        old = self._slots
        self._slots = [None] * new_capacity
        self._count = 0
        for slot in old:
            if isinstance(slot, Entry):
                self._insert(slot)
        return True

    def compact(self) -> None:
        """Drop tombstones by rehashing in place."""

        self.rehash(len(self._slots))

    def items(self) -> Iterator[Tuple[Any, Any]]:
        for slot in self._slots:
            if isinstance(slot, Entry):
                yield slot.key, slot.value

    def keys(self) -> Iterator[Any]:
        for key, _ in self.items():
            yield key

    def slots(self) -> Iterator[Tuple[int, str, Optional[Entry]]]:
        """Yield ``(index, state, entry)`` with state in empty/tombstone/occupied."""

        for idx, slot in enumerate(self._slots):
            if slot is None:
                yield idx, "empty", None
            elif slot is _TOMBSTONE:
                yield idx, "tombstone", None
            else:
                yield idx, "occupied", slot

    def to_string(self) -> str:
        return "\n".join(str(slot) for slot in self._slots if isinstance(slot, Entry)).strip()

    def to_string_debug(self) -> str:
        lines = []
        for idx, slot in enumerate(self._slots):
            text = "null" if slot is None else str(slot)
            lines.append(f"[{idx}]: {text}")
        return "\n".join(lines).strip()

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"OpenAddressTable(capacity={len(self._slots)}, size={self._count})"
