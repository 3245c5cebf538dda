"""Typed configuration loader for the hashlab CLI."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .contracts.error import BadInputError
from .core.chaining import MIN_CAPACITY as CHAIN_MIN_CAPACITY
from .core.open_address import MIN_CAPACITY as OPEN_MIN_CAPACITY
from .core.tables import BACKENDS

CONFIG_ENV_VAR = "HASHLAB_CONFIG"


@dataclass
class TablePolicy:
    backend: str = "open"
    initial_capacity: int = 2
    max_load_factor: float = 0.8

    def validate(self) -> None:
        if self.backend not in BACKENDS:
            raise BadInputError("table.backend must be 'open' or 'chaining'")
        if isinstance(self.initial_capacity, bool) or not isinstance(self.initial_capacity, int):
            raise BadInputError("table.initial_capacity must be an integer")
        if isinstance(self.max_load_factor, bool) or not isinstance(self.max_load_factor, (int, float)):
            raise BadInputError("table.max_load_factor must be a number")
        minimum = OPEN_MIN_CAPACITY if self.backend == "open" else CHAIN_MIN_CAPACITY
        if self.initial_capacity < minimum:
            raise BadInputError(
                f"table.initial_capacity must be >= {minimum} for backend {self.backend!r}"
            )
        if not 0.0 < self.max_load_factor <= 1.0:
            raise BadInputError("table.max_load_factor must be in (0, 1]")


@dataclass
class AppConfig:
    table: TablePolicy = field(default_factory=TablePolicy)

    @classmethod
    def load(cls, path: Path | None) -> AppConfig:
        if path is None:
            cfg = cls()
        else:
            try:
                data = tomllib.loads(path.read_text(encoding="utf-8"))
            except FileNotFoundError as exc:
                raise BadInputError(f"Config file not found: {path}") from exc
            except tomllib.TOMLDecodeError as exc:
                raise BadInputError(f"Invalid TOML: {exc}") from exc
            cfg = cls.from_dict(data)
        cfg.apply_env_overrides(os.environ)
        cfg.validate()
        return cfg

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        table_data = data.get("table", {})
        if not isinstance(table_data, dict):
            raise BadInputError("[table] section must be a table")
        unknown = sorted(set(table_data) - set(TablePolicy.__dataclass_fields__))
        if unknown:
            raise BadInputError(f"Unknown [table] keys: {', '.join(unknown)}")
        return cls(table=TablePolicy(**table_data))

    def apply_env_overrides(self, env: Mapping[str, str]) -> None:
        mapping: dict[str, tuple[str, Callable[[str], Any]]] = {
            "HASHLAB_BACKEND": ("backend", str),
            "HASHLAB_INITIAL_CAPACITY": ("initial_capacity", int),
            "HASHLAB_MAX_LOAD_FACTOR": ("max_load_factor", float),
        }
        for key, (attr, caster) in mapping.items():
            raw_value = env.get(key)
            if raw_value is None:
                continue
            try:
                value = caster(raw_value)
            except ValueError as exc:
                raise BadInputError(f"Invalid env override {key}={raw_value!r}") from exc
            setattr(self.table, attr, value)

    def validate(self) -> None:
        self.table.validate()


DEFAULT_CONFIG = AppConfig()


def load_app_config(path: str | None) -> AppConfig:
    config_path = Path(path) if path else None
    return AppConfig.load(config_path)
