from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Mapping

from fs_analyzer.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_WARNING_THRESHOLD = 80.0
DEFAULT_CRITICAL_THRESHOLD = 90.0
DEFAULT_TIMEOUT_SECONDS = 30.0


def _whole_number(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class AnalyzerConfig:
    warning_threshold: float = DEFAULT_WARNING_THRESHOLD
    critical_threshold: float = DEFAULT_CRITICAL_THRESHOLD
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    scan_paths: tuple[str, ...] | None = None
    workers: int = 1

    def __post_init__(self) -> None:
        for name in ("warning_threshold", "critical_threshold"):
            v = getattr(self, name)
            if not math.isfinite(v) or not 0 <= v <= 100:
                raise ConfigError(f"{name} must be within 0..100, got {v}")
        if self.critical_threshold < self.warning_threshold:
            raise ConfigError(
                f"critical_threshold ({self.critical_threshold}) must be >= "
                f"warning_threshold ({self.warning_threshold})"
            )
        if not math.isfinite(self.timeout_seconds) or self.timeout_seconds <= 0:
            raise ConfigError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
        if self.workers < 1:
            raise ConfigError(f"workers must be >= 1, got {self.workers}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> AnalyzerConfig:
        kwargs: dict[str, Any] = {}
        try:
            for name in ("warning_threshold", "critical_threshold", "timeout_seconds"):
                if data.get(name) is not None:
                    kwargs[name] = float(data[name])
            if data.get("workers") is not None:
                kwargs["workers"] = _whole_number("workers", data["workers"])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid config value: {e}") from e

        paths = data.get("scan_paths")
        if paths is not None:
            if not isinstance(paths, (list, tuple)) or not all(isinstance(p, str) for p in paths):
                raise ConfigError("scan_paths must be a list of strings")
            kwargs["scan_paths"] = tuple(paths) or None

        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            logger.debug("ignoring unknown config keys: %s", ", ".join(sorted(unknown)))
        return cls(**kwargs)

    def merged(self, **overrides: Any) -> AnalyzerConfig:
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "scan_paths" in changes:
            changes["scan_paths"] = tuple(changes["scan_paths"]) or None
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["scan_paths"] = list(self.scan_paths) if self.scan_paths else None
        return d


@dataclass(frozen=True)
class ConfigPaths:
    path: Path


class ConfigService:
    def __init__(self, paths: ConfigPaths | None = None) -> None:
        self.paths = paths or ConfigPaths(path=self.default_path())

    @staticmethod
    def default_path() -> Path:
        xdg = os.environ.get("XDG_CONFIG_HOME")
        if xdg:
            base = Path(xdg)
        else:
            base = Path.home() / ".config"
        return base / "fs_analyzer" / "config.json"

    def load(self) -> dict[str, Any]:
        """Raw config mapping; a missing file is empty, an unreadable one raises ConfigError."""
        p = self.paths.path
        if not p.exists():
            return {}
        try:
            with open(p, "r", encoding="utf-8") as f:
                obj = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"could not read config {p}: {e}") from e
        if not isinstance(obj, dict):
            raise ConfigError(f"config {p} is not a JSON object")
        return obj

    def load_config(self) -> AnalyzerConfig:
        return AnalyzerConfig.from_mapping(self.load())

    def save(self, cfg: AnalyzerConfig) -> Path:
        p = self.paths.path
        p.parent.mkdir(parents=True, exist_ok=True)
        tmp = p.with_suffix(p.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(cfg.to_dict(), f, ensure_ascii=False, indent=2, sort_keys=True)
        tmp.replace(p)
        return p
