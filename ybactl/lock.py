"""
Advisory lock preventing two yba-ctl processes from working on the same
installation at once.
"""

import fcntl
import logging
import os
from pathlib import Path
from typing import IO, Optional

from common.exceptions import LockError

logger = logging.getLogger(__name__)


class InstallerLock:
    """
    Exclusive, non-blocking flock on a lock file. The holder's PID is written
    into the file for debugging.

    Usage:
        with InstallerLock(app_settings.lock_file):
            ...
    """

    def __init__(self, lock_file: Path):
        self.lock_file = Path(lock_file)
        self._file: Optional[IO[str]] = None

    def acquire(self) -> None:
        """
        Raises:
            LockError: If another process holds the lock.
        """
        self.lock_file.parent.mkdir(parents=True, exist_ok=True)
        # a+ keeps the holder's PID readable if we fail to get the lock.
        self._file = open(self.lock_file, "a+")
        try:
            fcntl.flock(self._file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as e:
            self._file.seek(0)
            holder = self._file.read().strip() or "unknown"
            self._file.close()
            self._file = None
            raise LockError(
                f"another yba-ctl process (PID {holder}) is operating on this installation; "
                f"lock file {self.lock_file}"
            ) from e

        self._file.seek(0)
        self._file.truncate()
        self._file.write(str(os.getpid()))
        self._file.flush()
        logger.debug(f"Acquired installer lock {self.lock_file} (PID {os.getpid()})")

    def release(self) -> None:
        if self._file is None:
            return
        try:
            fcntl.flock(self._file.fileno(), fcntl.LOCK_UN)
        finally:
            self._file.close()
            self._file = None
        logger.debug(f"Released installer lock {self.lock_file}")

    def __enter__(self) -> "InstallerLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()
