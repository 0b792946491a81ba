from __future__ import annotations


class FsAnalyzerError(Exception):
    """Base class for fs_analyzer errors."""


class InvalidPath(FsAnalyzerError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Invalid or inaccessible path: {path}")
        self.path = path


class CapacityUnavailable(FsAnalyzerError):
    def __init__(self, path: str, reason: str = "") -> None:
        msg = "Could not retrieve disk space"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.path = path


class ConfigError(FsAnalyzerError):
    pass
