"""AllowListConfig: project-local config for the allow-list store.

Default layout (all relative to the project root):

    allowlist.toml        # project config (git-tracked)
    .allowlist/
        queries/          # one file per allow-listed operation
            <ns>.<Name>.yaml
        fragments/        # one file per fragment, no extension
            <ns>.<FragmentName>

allowlist.toml example:

    [allowlist]
    name = "gateway"
    # root = ".allowlist"   # default
    # fs = "file"           # fsspec protocol ("memory" for throwaway stores)
    # read_only = false
    # queue_size = 1        # pending writes before set() blocks

    [logging]
    level = "INFO"

Environment overrides: GQLALLOW_ROOT, GQLALLOW_READ_ONLY, GQLALLOW_LOG_LEVEL.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import fsspec

if TYPE_CHECKING:
    from fsspec import AbstractFileSystem

_CONFIG_FILENAME = "allowlist.toml"
_DEFAULT_STORE_DIR = ".allowlist"
_DEFAULT_FS = "file"
_DEFAULT_QUEUE_SIZE = 1
_TRUE = {"1", "true", "yes", "on"}


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: str = "%(asctime)s %(name)s %(levelname)s %(message)s"


@dataclass
class AllowListConfig:
    """Resolved configuration for an allow-list store."""

    root: Path                          # directory that contains allowlist.toml
    name: str = ""
    store_dir: Path = field(default_factory=Path)
    fs_protocol: str = _DEFAULT_FS
    read_only: bool = False
    queue_size: int = _DEFAULT_QUEUE_SIZE
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def queries_dir(self) -> Path:
        return self.store_dir / "queries"

    @property
    def fragments_dir(self) -> Path:
        return self.store_dir / "fragments"

    def filesystem(self) -> AbstractFileSystem:
        return fsspec.filesystem(self.fs_protocol)

    def ensure_dirs(self) -> None:
        """Create queries/ and fragments/ under store_dir if they don't exist."""
        fs = self.filesystem()
        fs.makedirs(self.queries_dir.as_posix(), exist_ok=True)
        fs.makedirs(self.fragments_dir.as_posix(), exist_ok=True)


def load_config(root: Path | str | None = None) -> AllowListConfig:
    """Load allowlist.toml from root (or search upward from cwd if root is None)."""
    root_path = _find_root(Path(root) if root else Path.cwd())
    config_path = root_path / _CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_path.exists():
        with config_path.open("rb") as f:
            raw = tomllib.load(f)

    section = raw.get("allowlist", {})
    log_section = raw.get("logging", {})

    store_rel = os.environ.get("GQLALLOW_ROOT") or section.get("root", _DEFAULT_STORE_DIR)
    fs_protocol = str(section.get("fs", _DEFAULT_FS))
    # Non-local filesystems take the store path as given.
    store_dir = root_path / store_rel if fs_protocol == _DEFAULT_FS else Path(store_rel)

    read_only = bool(section.get("read_only", False))
    env_ro = os.environ.get("GQLALLOW_READ_ONLY")
    if env_ro is not None:
        read_only = env_ro.strip().lower() in _TRUE

    queue_size = int(section.get("queue_size", _DEFAULT_QUEUE_SIZE))
    if queue_size < 1:
        msg = f"queue_size must be >= 1, got {queue_size}"
        raise ValueError(msg)

    return AllowListConfig(
        root=root_path,
        name=section.get("name", root_path.name),
        store_dir=store_dir,
        fs_protocol=fs_protocol,
        read_only=read_only,
        queue_size=queue_size,
        logging=LoggingConfig(
            level=str(os.environ.get("GQLALLOW_LOG_LEVEL") or log_section.get("level", "INFO")).upper(),
        ),
    )


def _find_root(start: Path) -> Path:
    """Walk upward from start looking for allowlist.toml."""
    for directory in (start, *start.parents):
        if (directory / _CONFIG_FILENAME).exists():
            return directory
    return start


def init_config(root: Path, name: str | None = None) -> Path:
    """Write a default allowlist.toml at root. Raises if already exists."""
    config_path = root / _CONFIG_FILENAME
    if config_path.exists():
        msg = f"allowlist.toml already exists at {config_path}"
        raise FileExistsError(msg)

    project_name = name or root.name
    content = f"""\
[allowlist]
name = "{project_name}"
# root = ".allowlist"   # default
# fs = "file"           # fsspec protocol
# read_only = false
# queue_size = 1        # pending writes before set() blocks

# [logging]
# level = "INFO"
"""
    config_path.write_text(content)
    return config_path
