from __future__ import annotations

import os
import platform
import string
from typing import Callable, Sequence

POSIX_DEFAULT_PATHS = ("/", "/home", "/var", "/tmp", "/usr", "/boot")
WINDOWS_FALLBACK_PATH = "C:\\"


def is_accessible(path: str) -> bool:
    return os.path.exists(path) and os.access(path, os.R_OK) and os.path.isdir(path)


class PathDiscoverer:
    def __init__(
        self,
        system: str | None = None,
        accessible: Callable[[str], bool] = is_accessible,
    ) -> None:
        self.system = (system or platform.system()).lower()
        self._accessible = accessible

    def scan_paths(self, override: Sequence[str] | None = None) -> list[str]:
        if override:
            return list(override)
        return self.default_paths()

    def default_paths(self) -> list[str]:
        if self.system == "windows":
            return self._drive_letters()
        return list(POSIX_DEFAULT_PATHS)

    def _drive_letters(self) -> list[str]:
        # C through Z, in order
        drives = [f"{letter}:\\" for letter in string.ascii_uppercase[2:]]
        found = [d for d in drives if self._accessible(d)]
        return found or [WINDOWS_FALLBACK_PATH]
