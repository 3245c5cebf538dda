"""Hash tables with linear probing and separate chaining."""

from . import analysis, contracts, core
from .core import ChainTable, OpenAddressTable, build_table

__all__ = [
    "ChainTable",
    "OpenAddressTable",
    "analysis",
    "build_table",
    "contracts",
    "core",
]
