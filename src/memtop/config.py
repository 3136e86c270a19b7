"""Configuration for memtop."""

from dataclasses import dataclass
from pathlib import Path

import tomlkit

from memtop.report import DEFAULT_LIMIT
from memtop.scanner import DEFAULT_PROCFS_PATH


def default_config_path() -> Path:
    """Location of the user config file."""
    return Path.home() / ".config" / "memtop" / "config.toml"


@dataclass
class Config:
    """Report settings. Command-line options override these."""

    limit: int = DEFAULT_LIMIT  # Rows to display
    java_by: str = "auto"  # "auto", "jar" or "main"
    procfs_path: str = DEFAULT_PROCFS_PATH

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML file, returning defaults for missing values."""
        defaults = cls()
        path = path or default_config_path()
        if not path.exists():
            return defaults

        try:
            with open(path) as f:
                data = tomlkit.load(f)
        except tomlkit.exceptions.TOMLKitError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        limit = data.get("limit", defaults.limit)
        if not isinstance(limit, int) or isinstance(limit, bool):
            raise ValueError(f"Invalid limit in {path}: {limit!r}")

        return cls(
            limit=int(limit),
            java_by=str(data.get("java_by", defaults.java_by)),
            procfs_path=str(data.get("procfs_path", defaults.procfs_path)),
        )
