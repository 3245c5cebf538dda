from __future__ import annotations

import logging
from typing import Any, Iterator, List, Optional, Tuple

from .entry import Entry
from .hashing import bucket_index

logger = logging.getLogger("hashlab")

DEFAULT_MAX_LOAD_FACTOR: float = 0.8
MIN_CAPACITY: int = 1


class _Node:
    __slots__ = ("entry", "next")

    def __init__(self, entry: Entry, next: Optional["_Node"] = None) -> None:  # noqa: A002
        self.entry = entry
        self.next = next

    def __str__(self) -> str:
        return f"[{self.entry}]->"


class ChainTable:
    """Separate-chaining hash table with singly-linked buckets."""

    __slots__ = ("_buckets", "_count", "_max_lf")

    def __init__(self, initial_capacity: int, *, max_load_factor: float = DEFAULT_MAX_LOAD_FACTOR) -> None:
        if initial_capacity < MIN_CAPACITY:
            raise ValueError(f"initial_capacity must be >= {MIN_CAPACITY}")
        if not 0.0 < max_load_factor <= 1.0:
            raise ValueError("max_load_factor must be in (0, 1]")
        self._buckets: List[Optional[_Node]] = [None] * initial_capacity
        self._count = 0
        self._max_lf = max_load_factor

    def __len__(self) -> int:
        return self._count

    def __contains__(self, key: Any) -> bool:
        return key is not None and self._find(key) is not None

    def __iter__(self) -> Iterator[Any]:
        return self.keys()

    def capacity(self) -> int:
        return len(self._buckets)

    def size(self) -> int:
        return self._count

    def load_factor(self) -> float:
        return self._count / len(self._buckets)

    def max_load_factor(self) -> float:
        return self._max_lf

    def home_slot(self, key: Any) -> int:
        return bucket_index(key, len(self._buckets))

    def chain_length(self, index: int) -> int:
        length = 0
        node = self._buckets[index]
        while node is not None:
            length += 1
            node = node.next
        return length

    def max_chain_len(self) -> int:
        return max((self.chain_length(i) for i in range(len(self._buckets))), default=0)

    def _find(self, key: Any) -> Optional[_Node]:
        node = self._buckets[bucket_index(key, len(self._buckets))]
        while node is not None:
            if node.entry.key == key:
                return node
            node = node.next
        return None

    def _insert(self, entry: Entry) -> bool:
        """Link ``entry`` without growing; return True when a node was appended."""

        idx = bucket_index(entry.key, len(self._buckets))
        node = self._buckets[idx]
        if node is None:
            self._buckets[idx] = _Node(entry)
            self._count += 1
            return True
        while True:
            if node.entry.key == entry.key:
                node.entry = entry
                return False
            if node.next is None:
                break
            node = node.next
        node.next = _Node(entry)
        self._count += 1
        return True

    def put(self, key: Any, value: Any) -> None:
        if key is None or value is None:
            raise ValueError("put requires a non-None key and value")
        if not self._insert(Entry(key, value)):
            return
        while self._count >= self._max_lf * len(self._buckets):
            new_cap = len(self._buckets) * 2
            logger.info("Chain table growing %d -> %d (size=%d)", len(self._buckets), new_cap, self._count)
            self.rehash(new_cap)

    def get(self, key: Any) -> Optional[Any]:
        if key is None:
            return None
        node = self._find(key)
        return None if node is None else node.entry.value

    def remove(self, key: Any) -> Optional[Any]:
        if key is None:
            return None
        idx = bucket_index(key, len(self._buckets))
        head = self._buckets[idx]
        if head is None:
            return None
        if head.entry.key == key:
            self._buckets[idx] = head.next
            self._count -= 1
            return head.entry.value
        prev = head
        while prev.next is not None:
            victim = prev.next
            if victim.entry.key == key:
                prev.next = victim.next
                self._count -= 1
                return victim.entry.value
            prev = victim
        return None

    def rehash(self, new_capacity: int) -> bool:
        if new_capacity < MIN_CAPACITY:
            logger.debug("Rejected chain rehash to %d (minimum %d)", new_capacity, MIN_CAPACITY)
            return False
        old = self._buckets
        self._buckets = [None] * new_capacity
        self._count = 0
        for head in old:
            node = head
            while node is not None:
                self._insert(node.entry)
                node = node.next
        return True

    def chain(self, index: int) -> Iterator[Entry]:
        node = self._buckets[index]
        while node is not None:
            yield node.entry
            node = node.next

    def items(self) -> Iterator[Tuple[Any, Any]]:
        for idx in range(len(self._buckets)):
            for entry in self.chain(idx):
                yield entry.key, entry.value

    def keys(self) -> Iterator[Any]:
        for key, _ in self.items():
            yield key

    def to_string(self) -> str:
        return "\n".join(
            str(entry) for idx in range(len(self._buckets)) for entry in self.chain(idx)
        ).strip()

    def to_string_debug(self) -> str:
        lines = []
        for idx, head in enumerate(self._buckets):
            parts = []
            node = head
            while node is not None:
                parts.append(str(node))
                node = node.next
            lines.append(f"[{idx}]: {''.join(parts)}null")
        return "\n".join(lines).strip()

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"ChainTable(capacity={len(self._buckets)}, size={self._count})"
