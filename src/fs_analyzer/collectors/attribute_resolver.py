from __future__ import annotations

import logging
import os
import platform
import re
from typing import Callable, Optional, Sequence, TypeVar

from fs_analyzer.collectors.command_runner import CommandRunner
from fs_analyzer.models.filesystem import (
    NOT_AVAILABLE,
    UNKNOWN_FS_TYPE,
    InodeInfo,
    ResolvedAttributes,
)

logger = logging.getLogger(__name__)

V = TypeVar("V")
Strategy = Callable[[str, float], Optional[V]]

# df -P -T: Filesystem Type 1024-blocks Used Available Capacity Mounted-on
DF_TYPE_COLUMNS = 7
# df -P / df -P -i: Filesystem Size Used Avail Use% Mounted-on
DF_COLUMNS = 6

_RX_MOUNT_LINE = re.compile(r"^\S+\s+on\s+(.+?)\s+type\s+(\S+)")
_RX_VOLUME_FS = re.compile(r"File System Name\s*:\s*(\S+)")


def first_result(strategies: Sequence[Strategy[V]], path: str, timeout: float) -> V | None:
    for strategy in strategies:
        value = strategy(path, timeout)
        if value is not None:
            return value
        logger.debug("%s gave nothing for %s", getattr(strategy, "__name__", strategy), path)
    return None


def data_row(output: str | None, min_columns: int) -> list[str] | None:
    """First data row of a df-style listing, split on whitespace."""
    if not output:
        return None
    lines = [ln for ln in output.strip().splitlines() if ln.strip()]
    if len(lines) < 2:
        return None
    parts = lines[1].split()
    if len(parts) < min_columns:
        return None
    return parts


def _norm(path: str) -> str:
    return path.rstrip("/") or "/"


def _inode_count(cell: str) -> int | str:
    return int(cell) if cell.isdigit() else NOT_AVAILABLE


def _inode_percent(cell: str) -> float | str:
    try:
        return float(cell.rstrip("%"))
    except ValueError:
        return NOT_AVAILABLE


class AttributeResolver:
    """Resolves filesystem type, mount point and inode usage for a path.

    Each attribute has an ordered list of strategies ``(path, timeout) -> value
    | None``. The first non-None value wins; when every strategy fails the
    attribute degrades to "Unknown", the requested path, or no inode data.
    """

    def __init__(self, runner: CommandRunner | None = None, timeout: float = 30.0) -> None:
        self.runner = runner or CommandRunner()
        self.timeout = float(timeout)
        self.type_strategies: list[Strategy[str]] = []
        self.mount_strategies: list[Strategy[str]] = []
        self.inode_strategies: list[Strategy[InodeInfo]] = []

    def resolve(self, path: str) -> ResolvedAttributes:
        fs_type = first_result(self.type_strategies, path, self.timeout)
        mount_point = first_result(self.mount_strategies, path, self.timeout)
        inodes = first_result(self.inode_strategies, path, self.timeout)
        return ResolvedAttributes(
            filesystem_type=fs_type or UNKNOWN_FS_TYPE,
            mount_point=mount_point or path,
            inodes=inodes,
        )


class PosixAttributeResolver(AttributeResolver):
    def __init__(self, runner: CommandRunner | None = None, timeout: float = 30.0) -> None:
        super().__init__(runner, timeout)
        self.type_strategies = [self.type_from_df, self.type_from_mount_table]
        self.mount_strategies = [self.mount_from_df]
        self.inode_strategies = [self.inodes_from_df]

    def type_from_df(self, path: str, timeout: float) -> str | None:
        parts = data_row(self.runner.run(["df", "-P", "-T", path], timeout), DF_TYPE_COLUMNS)
        return parts[1] if parts else None

    def type_from_mount_table(self, path: str, timeout: float) -> str | None:
        out = self.runner.run(["mount"], timeout)
        if not out:
            return None
        want = _norm(path)
        for line in out.splitlines():
            m = _RX_MOUNT_LINE.search(line)
            if m and _norm(m.group(1)) == want:
                return m.group(2)
        return None

    def mount_from_df(self, path: str, timeout: float) -> str | None:
        parts = data_row(self.runner.run(["df", "-P", path], timeout), DF_COLUMNS)
        if not parts:
            return None
        # mount points may contain spaces
        return " ".join(parts[5:])

    def inodes_from_df(self, path: str, timeout: float) -> InodeInfo | None:
        parts = data_row(self.runner.run(["df", "-P", "-i", path], timeout), DF_COLUMNS)
        if not parts:
            return None
        return InodeInfo(
            total=_inode_count(parts[1]),
            used=_inode_count(parts[2]),
            free=_inode_count(parts[3]),
            usage_percent=_inode_percent(parts[4]),
        )


class WindowsAttributeResolver(AttributeResolver):
    def __init__(self, runner: CommandRunner | None = None, timeout: float = 30.0) -> None:
        super().__init__(runner, timeout)
        self.type_strategies = [self.type_from_volume_info]
        self.mount_strategies = [self.mount_from_real_path, self.mount_from_raw_path]
        self.inode_strategies = [self.inodes_unsupported]

    def type_from_volume_info(self, path: str, timeout: float) -> str | None:
        drive = path[:2]
        if not drive:
            return None
        out = self.runner.run(["fsutil", "fsinfo", "volumeinfo", drive], timeout)
        if not out:
            return None
        m = _RX_VOLUME_FS.search(out)
        return m.group(1) if m else None

    def mount_from_real_path(self, path: str, timeout: float) -> str | None:
        if not os.path.exists(path):
            return None
        return os.path.realpath(path)[:2] or None

    def mount_from_raw_path(self, path: str, timeout: float) -> str | None:
        return path[:2] or None

    def inodes_unsupported(self, path: str, timeout: float) -> InodeInfo | None:
        return InodeInfo.unsupported()


def select_resolver(
    runner: CommandRunner | None = None,
    timeout: float = 30.0,
    system: str | None = None,
) -> AttributeResolver:
    name = (system or platform.system()).lower()
    if name == "windows":
        return WindowsAttributeResolver(runner, timeout)
    return PosixAttributeResolver(runner, timeout)
