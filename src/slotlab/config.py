"""Typed configuration loader for the SlotLab CLI."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .contracts.error import BadInputError
from .core.factory import Strategy, normalize_strategy
from .core.hash_functions import HASH_NAMES, normalize_hash_code

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(raw: Any, label: str) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        normalized = raw.strip().lower()
        if normalized in _TRUE:
            return True
        if normalized in _FALSE:
            return False
    raise BadInputError(f"{label} must be boolean")


@dataclass
class TablePolicy:
    capacity: int = 10
    strategy: str = "chaining"
    hash_function: str = "division"
    verbose: int = 0

    def validate(self) -> None:
        if isinstance(self.capacity, bool) or not isinstance(self.capacity, int) or self.capacity < 1:
            raise BadInputError("table.capacity must be an integer >= 1")
        if not isinstance(self.verbose, int) or self.verbose < 0:
            raise BadInputError("table.verbose must be an integer >= 0")
        if not isinstance(self.strategy, str) or not self.strategy.strip():
            raise BadInputError("table.strategy must be a non-empty string")
        if not isinstance(self.hash_function, str) or not self.hash_function.strip():
            raise BadInputError("table.hash_function must be a non-empty string")

    def resolved_strategy(self) -> Strategy:
        return normalize_strategy(self.strategy)

    def hash_code(self) -> str:
        return normalize_hash_code(self.hash_function)

    def hash_label(self) -> str:
        return HASH_NAMES[self.hash_code()]


@dataclass
class RunPolicy:
    commands_file: str = "commands.txt"
    data_dir: str = "data"
    use_data_dir: bool = False
    grow_on_full: bool = False

    def validate(self) -> None:
        if not self.commands_file:
            raise BadInputError("run.commands_file must not be empty")

    def commands_path(self) -> Path:
        path = Path(self.commands_file)
        if self.use_data_dir and not path.is_absolute():
            path = Path(self.data_dir) / path
        return path.expanduser()


@dataclass
class AppConfig:
    table: TablePolicy = field(default_factory=TablePolicy)
    run: RunPolicy = field(default_factory=RunPolicy)

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
        run_data = data.get("run", {})
        if not isinstance(run_data, dict):
            raise BadInputError("[run] section must be a table")
        try:
            table = TablePolicy(**table_data)
        except TypeError as exc:
            raise BadInputError(f"Unknown key in [table]: {exc}") from exc
        run_kwargs = dict(run_data)
        for key in ("use_data_dir", "grow_on_full"):
            if key in run_kwargs:
                run_kwargs[key] = _parse_bool(run_kwargs[key], f"run.{key}")
        try:
            run = RunPolicy(**run_kwargs)
        except TypeError as exc:
            raise BadInputError(f"Unknown key in [run]: {exc}") from exc
        return cls(table=table, run=run)

    def apply_env_overrides(self, env: Mapping[str, str]) -> None:
        table_mapping: dict[str, tuple[str, Callable[[str], Any]]] = {
            "SLOTLAB_CAPACITY": ("capacity", int),
            "SLOTLAB_STRATEGY": ("strategy", str),
            "SLOTLAB_HASH_FUNCTION": ("hash_function", str),
            "SLOTLAB_VERBOSE": ("verbose", int),
        }
        for key, (attr, caster) in table_mapping.items():
            raw_value = env.get(key)
            if raw_value is None:
                continue
            try:
                value = caster(raw_value)
            except ValueError as exc:
                raise BadInputError(f"Invalid env override {key}={raw_value!r}") from exc
            setattr(self.table, attr, value)

        for key, attr in (("SLOTLAB_COMMANDS_FILE", "commands_file"), ("SLOTLAB_DATA_DIR", "data_dir")):
            raw_value = env.get(key)
            if raw_value is not None:
                setattr(self.run, attr, raw_value)

        raw_grow = env.get("SLOTLAB_GROW_ON_FULL")
        if raw_grow is not None:
            try:
                self.run.grow_on_full = _parse_bool(raw_grow, "SLOTLAB_GROW_ON_FULL")
            except BadInputError as exc:
                raise BadInputError(f"Invalid env override SLOTLAB_GROW_ON_FULL={raw_grow!r}") from exc

    def validate(self) -> None:
        self.table.validate()
        self.run.validate()


DEFAULT_CONFIG = AppConfig()


def load_app_config(path: str | None) -> AppConfig:
    config_path = Path(path) if path else None
    return AppConfig.load(config_path)


__all__ = ["AppConfig", "DEFAULT_CONFIG", "RunPolicy", "TablePolicy", "load_app_config"]
