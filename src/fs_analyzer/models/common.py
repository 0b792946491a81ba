from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class UsageStatus(str, Enum):
    OK = "OK"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class CollectorResult(Generic[T]):
    ts: datetime
    status: UsageStatus
    warning_count: int
    data: T
    warnings: list[str] = field(default_factory=list)
