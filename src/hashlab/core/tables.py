from __future__ import annotations

from typing import Any, Iterator, Optional, Protocol, Tuple, Union

from .chaining import ChainTable
from .open_address import DEFAULT_MAX_LOAD_FACTOR, OpenAddressTable

BACKENDS: Tuple[str, ...] = ("open", "chaining")


class HashTable(Protocol):
    """Contract shared by both table backends."""

    def capacity(self) -> int: ...

    def size(self) -> int: ...

    def put(self, key: Any, value: Any) -> None: ...

    def get(self, key: Any) -> Optional[Any]: ...

    def remove(self, key: Any) -> Optional[Any]: ...

    def rehash(self, new_capacity: int) -> bool: ...

    def items(self) -> Iterator[Tuple[Any, Any]]: ...

    def to_string(self) -> str: ...

    def to_string_debug(self) -> str: ...


AnyTable = Union[OpenAddressTable, ChainTable]


def backend_name(table: Any) -> str:
    if isinstance(table, OpenAddressTable):
        return "open"
    if isinstance(table, ChainTable):
        return "chaining"
    raise TypeError(f"Unsupported table type: {type(table).__name__}")


def build_table(
    backend: str, capacity: int, *, max_load_factor: float = DEFAULT_MAX_LOAD_FACTOR
) -> AnyTable:
    if backend == "open":
        return OpenAddressTable(capacity, max_load_factor=max_load_factor)
    if backend == "chaining":
        return ChainTable(capacity, max_load_factor=max_load_factor)
    raise ValueError(f"unknown backend: {backend}")
