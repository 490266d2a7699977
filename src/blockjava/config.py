"""TOML config loading for blockjava.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

CONFIG_NAME = "blockjava.toml"


@dataclass(frozen=True)
class GeneratorConfig:
    """Settings for one generation pass. Immutable once a pass starts."""

    app_name: str = "BlocklyApp"
    package: str = ""
    base_class: str = ""
    extra_imports: tuple[str, ...] | None = None
    # Imports every generated file needs, independent of the blocks used.
    default_imports: tuple[str, ...] = ()
    inline_var_class: bool = True
    wrap_class: bool = False
    # Custom block type tag -> Java class name.
    class_types: tuple[tuple[str, str], ...] = ()

    def with_overrides(self, **overrides: Any) -> GeneratorConfig:
        """Copy with every override that is not None applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find blockjava.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> GeneratorConfig:
    """Parse a blockjava.toml file into a GeneratorConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = GeneratorConfig()

    if "generator" in data:
        gen = data["generator"]
        extra = gen.get("extra_imports")
        config = GeneratorConfig(
            app_name=gen.get("app_name", config.app_name),
            package=gen.get("package", ""),
            base_class=gen.get("base_class", ""),
            extra_imports=tuple(extra) if extra is not None else None,
            default_imports=tuple(gen.get("default_imports", [])),
            inline_var_class=gen.get("inline_var_class", True),
            wrap_class=gen.get("wrap_class", False),
        )

    if "types" in data:
        config = replace(
            config,
            class_types=tuple((str(k), str(v)) for k, v in data["types"].items()),
        )

    return config
