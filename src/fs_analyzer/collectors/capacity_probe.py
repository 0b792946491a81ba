from __future__ import annotations

import logging
from typing import Callable

import psutil

from fs_analyzer.collectors.path_discoverer import is_accessible
from fs_analyzer.exceptions import CapacityUnavailable, InvalidPath
from fs_analyzer.models.filesystem import Capacity

logger = logging.getLogger(__name__)


class CapacityProbe:
    def __init__(self, accessible: Callable[[str], bool] = is_accessible) -> None:
        self._accessible = accessible

    def probe(self, path: str) -> Capacity:
        """Raw total/free bytes for ``path``.

        Raises InvalidPath for a missing, unreadable or non-directory target and
        CapacityUnavailable when the OS query fails. ``free <= total`` is not
        checked here.
        """
        if not self._accessible(path):
            raise InvalidPath(path)

        try:
            u = psutil.disk_usage(path)
        except (OSError, RuntimeError) as e:
            raise CapacityUnavailable(path, str(e)) from e

        total = getattr(u, "total", None)
        free = getattr(u, "free", None)
        if total is None or free is None:
            raise CapacityUnavailable(path)

        logger.debug("capacity %s: total=%s free=%s", path, total, free)
        return Capacity(total_bytes=int(total), free_bytes=int(free))
