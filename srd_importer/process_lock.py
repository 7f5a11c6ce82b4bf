"""
SRD Importer - プロセスロック

ダウンロード・取り込みの多重起動を防ぐ。fcntl.flock による排他ロックを
ノンブロッキングで取得し、既に他プロセスが保持していれば AlreadyRunningError。
"""
import fcntl
import logging
import os
import tempfile
from pathlib import Path

from errors import AlreadyRunningError

logger = logging.getLogger(__name__)

LOCK_FILENAME = "ukcp-srd-import.lock"


def default_lock_path() -> Path:
    return Path(tempfile.gettempdir()) / LOCK_FILENAME


class ProcessLock:
    def __init__(self, path=None):
        self._path = Path(path) if path else default_lock_path()
        self._fd = None

    def acquire(self):
        fd = os.open(self._path, os.O_RDWR | os.O_CREAT, 0o600)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            os.close(fd)
            raise AlreadyRunningError(f"another process is already running ({self._path})")
        self._fd = fd
        logger.debug(f"ロック取得: {self._path}")

    def release(self):
        if self._fd is None:
            return
        fcntl.flock(self._fd, fcntl.LOCK_UN)
        os.close(self._fd)
        self._fd = None
        logger.debug(f"ロック解放: {self._path}")

    @property
    def locked(self) -> bool:
        return self._fd is not None

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
