from .chaining import ChainTable
from .entry import Entry
from .hashing import bucket_index, stable_hash
from .open_address import OpenAddressTable
from .tables import BACKENDS, AnyTable, HashTable, backend_name, build_table
from .verify import ensure_valid, verify_table

__all__ = [
    "AnyTable",
    "BACKENDS",
    "ChainTable",
    "Entry",
    "HashTable",
    "OpenAddressTable",
    "backend_name",
    "bucket_index",
    "build_table",
    "ensure_valid",
    "stable_hash",
    "verify_table",
]
