"""TOML config loading for sculp.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from sculp.signatures import DEFAULT_SIGNATURES, SignatureTable

CONFIG_NAME = "sculp.toml"


@dataclass
class PackageConfig:
    name: str = "untitled"
    version: str = "0.0.0"


@dataclass
class SculpConfig:
    package: PackageConfig = field(default_factory=PackageConfig)
    procedures: SignatureTable = field(default_factory=lambda: DEFAULT_SIGNATURES)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find sculp.toml. Raises FileNotFoundError."""
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


def load_config(path: Path) -> SculpConfig:
    """Parse a sculp.toml file into a SculpConfig.

    ``[procedures]`` maps each procedure name to the list of parameter
    types it takes; without that table the default procedures apply.
    """
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = SculpConfig()

    if "package" in data:
        pkg = data["package"]
        config.package = PackageConfig(
            name=pkg.get("name", "untitled"),
            version=pkg.get("version", "0.0.0"),
        )

    if "procedures" in data:
        config.procedures = SignatureTable(data["procedures"])

    return config


def config_for(start_path: Path | None = None) -> SculpConfig:
    """Load the nearest sculp.toml, or the defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return SculpConfig()
