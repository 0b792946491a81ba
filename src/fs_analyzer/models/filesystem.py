from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from fs_analyzer.models.common import UsageStatus

NOT_AVAILABLE = "N/A"
UNKNOWN_FS_TYPE = "Unknown"

InodeCount = Union[int, str]
InodePercent = Union[float, str]


@dataclass(frozen=True)
class Capacity:
    total_bytes: int
    free_bytes: int


@dataclass(frozen=True)
class InodeInfo:
    total: InodeCount
    used: InodeCount
    free: InodeCount
    usage_percent: InodePercent

    @classmethod
    def unsupported(cls) -> InodeInfo:
        return cls(
            total=NOT_AVAILABLE,
            used=NOT_AVAILABLE,
            free=NOT_AVAILABLE,
            usage_percent=NOT_AVAILABLE,
        )


@dataclass(frozen=True)
class ResolvedAttributes:
    filesystem_type: str
    mount_point: str
    inodes: InodeInfo | None


@dataclass(frozen=True)
class FilesystemRecord:
    """One observation of a requested path.

    When ``error`` is set every numeric field is zero and the record must not
    take part in deduplication or totals.
    """

    path: str
    total_bytes: int
    free_bytes: int
    used_bytes: int
    usage_percent: float
    filesystem_type: str
    mount_point: str
    inodes: InodeInfo | None = None
    status: UsageStatus | None = None
    error: str | None = None

    @classmethod
    def failed(cls, path: str, error: str) -> FilesystemRecord:
        return cls(
            path=path,
            total_bytes=0,
            free_bytes=0,
            used_bytes=0,
            usage_percent=0.0,
            filesystem_type=UNKNOWN_FS_TYPE,
            mount_point=path,
            error=error,
        )

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class FilesystemSummary:
    filesystem_count: int
    total_space: int
    total_used: int
    total_usage_percent: float
    critical_count: int
    warning_count: int
    ok_count: int


@dataclass(frozen=True)
class ScanData:
    records: dict[str, FilesystemRecord]
    mounts: dict[str, FilesystemRecord]
    summary: FilesystemSummary
    notes: list[str] = field(default_factory=list)
