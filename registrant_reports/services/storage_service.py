"""Atomic JSON cache files and cross-process file locks."""
import json
import logging
import os
import sys
import tempfile
import time
from contextlib import contextmanager
from typing import Any

if sys.platform != "win32":
    import fcntl

logger = logging.getLogger(__name__)

LOCK_POLL_INTERVAL = 0.05


def load_json(file_path: str, retry_count: int = 3, retry_delay: float = 0.1) -> Any:
    """
    Read a UTF-8 JSON file.

    A reader can briefly hit PermissionError on Windows while a writer is
    replacing the file, so permission failures are retried.

    Args:
        file_path: Path to JSON file
        retry_count: Attempts before giving up on PermissionError
        retry_delay: Seconds between attempts

    Returns:
        Parsed content (object or list)

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If content is not valid JSON
        PermissionError: If file stays unreadable
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    attempt = 0
    while True:
        attempt += 1
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise json.JSONDecodeError(f"Malformed JSON in {file_path}: {e.msg}", e.doc, e.pos) from e
        except PermissionError:
            if attempt >= retry_count:
                raise PermissionError(f"Cannot read file after {retry_count} attempts: {file_path}")
            time.sleep(retry_delay)


def _replace(source: str, target: str, retry_count: int = 3) -> None:
    # Windows refuses to replace a file another process holds open.
    for attempt in range(1, retry_count + 1):
        try:
            os.replace(source, target)
            return
        except PermissionError:
            if sys.platform != "win32" or attempt == retry_count:
                raise
            time.sleep(0.1)


def save_json(file_path: str, data: Any) -> None:
    """
    Write JSON so that readers see either the previous or the new content.

    Data goes to a temporary file beside the target, is flushed to disk and
    then renamed over the target. Missing directories are created.

    Raises:
        IOError: If the data cannot be serialised or the file cannot be written
    """
    dir_path = os.path.dirname(file_path) or "."
    os.makedirs(dir_path, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(dir=dir_path, prefix=".tmp_", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        _replace(temp_path, file_path)
    except (OSError, TypeError, ValueError) as e:
        if os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError:
                logger.warning(f"Could not remove temporary file {temp_path}")
        raise IOError(f"Failed to write file {file_path}: {e}") from e


def ensure_file(file_path: str) -> str:
    """Create an empty file (and its directory) if it does not exist yet."""
    dir_path = os.path.dirname(file_path)
    if dir_path:
        os.makedirs(dir_path, exist_ok=True)
    if not os.path.exists(file_path):
        with open(file_path, "a", encoding="utf-8"):
            pass
    return file_path


def _wait(deadline: float, file_path: str, timeout: float) -> None:
    if time.monotonic() > deadline:
        raise TimeoutError(f"Could not acquire lock on {file_path} within {timeout}s")
    time.sleep(LOCK_POLL_INTERVAL)


@contextmanager
def _sidecar_lock(file_path: str, timeout: float):
    """Exclusive lock via an O_EXCL sidecar file, for platforms without flock."""
    sidecar_path = f"{file_path}.lock"
    deadline = time.monotonic() + timeout
    while True:
        try:
            fd = os.open(sidecar_path, os.O_CREAT | os.O_EXCL | os.O_RDWR)
            break
        except FileExistsError:
            _wait(deadline, file_path, timeout)

    try:
        yield
    finally:
        os.close(fd)
        try:
            os.remove(sidecar_path)
        except OSError:
            logger.warning(f"Could not remove lock file {sidecar_path}")


@contextmanager
def _flock(file_path: str, timeout: float):
    """Exclusive advisory lock on the file itself."""
    deadline = time.monotonic() + timeout
    with open(file_path, "r+") as handle:
        while True:
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except OSError:
                _wait(deadline, file_path, timeout)
        try:
            yield
        finally:
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
            except OSError:
                logger.warning(f"Could not release lock on {file_path}")


@contextmanager
def lock_file(file_path: str, timeout: float = 5.0):
    """
    Hold an exclusive lock on an existing file.

    Usage:
        with lock_file("cache/csu/.refresh.lock"):
            # refresh datasets
            ...

    Raises:
        FileNotFoundError: If the file doesn't exist
        TimeoutError: If the lock is not acquired within timeout seconds
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Cannot lock non-existent file: {file_path}")

    locker = _sidecar_lock if sys.platform == "win32" else _flock
    with locker(file_path, timeout):
        yield
