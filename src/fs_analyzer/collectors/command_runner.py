from __future__ import annotations

import logging
import subprocess
from typing import Sequence

logger = logging.getLogger(__name__)


class CommandRunner:
    """Runs one external query and hands back its stdout.

    Any failure (missing binary, non-zero exit, timeout, empty output) comes
    back as ``None`` so callers can move on to their next strategy.
    """

    def run(self, argv: Sequence[str], timeout: float) -> str | None:
        try:
            proc = subprocess.run(
                list(argv),
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.debug("%s timed out after %ss", argv[0], timeout)
            return None
        except OSError as e:
            logger.debug("%s could not be started: %s", argv[0], e)
            return None

        if proc.returncode != 0:
            logger.debug("%s exited with %s: %s", argv[0], proc.returncode, proc.stderr.strip())
            return None

        out = proc.stdout
        return out if out.strip() else None
