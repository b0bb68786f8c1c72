# SPDX-License-Identifier: MIT
"""Filesystem helpers: atomic replacement and the vendor file lock."""

from __future__ import annotations

import os
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import structlog

from .errors import LockTimeoutError

log = structlog.get_logger("internal_vendor.fsutil")

LOCK_SUFFIX = ".lock"
DEFAULT_LOCK_TIMEOUT = 10.0
LOCK_POLL_INTERVAL = 0.05


def write_atomic(path: Path, data: bytes) -> None:
    """Write bytes to ``path`` so readers see either the old or new content.

    The data is written to a temporary sibling file, flushed to disk and then
    moved over the target with :func:`os.replace`. The target's permission
    bits are kept when it already exists.

    Args:
        path: File to write
        data: New file content
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    mode = None
    if path.exists():
        mode = path.stat().st_mode & 0o7777

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        if mode is not None:
            os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


@contextmanager
def file_lock(path: Path, timeout: float = DEFAULT_LOCK_TIMEOUT) -> Iterator[Path]:
    """Hold an exclusive lock for writing ``path``.

    The lock is a ``<path>.lock`` file created with ``O_EXCL``. It is removed
    when the block exits, including when the block raises.

    Args:
        path: File being protected
        timeout: Seconds to wait for a competing holder

    Yields:
        Path of the lock file

    Raises:
        LockTimeoutError: If the lock is still held after ``timeout`` seconds
    """
    lock_path = Path(path).with_name(Path(path).name + LOCK_SUFFIX)
    deadline = time.monotonic() + timeout

    while True:
        try:
            fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
            break
        except FileExistsError:
            if time.monotonic() >= deadline:
                raise LockTimeoutError(
                    f"Timed out waiting for {lock_path}; remove it if no other process is running."
                ) from None
            time.sleep(LOCK_POLL_INTERVAL)

    try:
        try:
            os.write(fd, str(os.getpid()).encode("ascii"))
        finally:
            os.close(fd)
        log.debug("fsutil.lock_acquired", lock=str(lock_path))
        yield lock_path
    finally:
        lock_path.unlink(missing_ok=True)
        log.debug("fsutil.lock_released", lock=str(lock_path))
