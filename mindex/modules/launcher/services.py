"""Opening catalog files with the operating system's default application."""

import os
import subprocess
import sys
import threading
from typing import List, Optional

from ...infrastructure.logging import get_logger
from .schemas import OpenFileResult

logger = get_logger(__name__)


def opener_command(path: str, platform: str = sys.platform) -> Optional[List[str]]:
    """Command that opens ``path`` on ``platform``, or None on Windows (``os.startfile``)."""
    if platform.startswith("win"):
        return None
    if platform == "darwin":
        return ["open", path]
    return ["xdg-open", path]


class LauncherService:
    """Hands a file to the desktop's default application.

    Launching is fire and forget. The reader process is started detached
    and a daemon thread waits on it so it is reaped when it exits. Nothing
    is retried; failures come back as an error message instead of an
    exception.
    """

    def __init__(self, platform: str = sys.platform):
        self.platform = platform

    def open_file(self, path: str) -> OpenFileResult:
        if not path:
            return OpenFileResult(error="No file path given")
        if not os.path.exists(path):
            return OpenFileResult(error=f"File not found: {path}")

        command = opener_command(path, self.platform)
        try:
            if command is None:
                os.startfile(path)  # type: ignore[attr-defined]
            else:
                process = subprocess.Popen(
                    command,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    start_new_session=True,
                )
                threading.Thread(target=process.wait, name=f"reap-{command[0]}", daemon=True).start()
        except OSError as e:
            logger.warning(f"Could not open {path}: {e}")
            return OpenFileResult(error=str(e))

        logger.info(f"Opened {path}")
        return OpenFileResult(success=True)
