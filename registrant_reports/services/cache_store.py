"""Per-enterprise cache of raw and derived registrant snapshots."""
import glob
import json
import logging
import os
import threading
import time
from contextlib import ExitStack, contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from registrant_reports.models.record import Row
from registrant_reports.models.snapshot import (
    BareSnapshot,
    Dataset,
    Snapshot,
    WrappedSnapshot,
)
from registrant_reports.services.storage_service import (
    ensure_file,
    load_json,
    lock_file,
    save_json,
)
from registrant_reports.utils.date_utils import (
    CACHE_TIMEZONE,
    format_cache_timestamp,
    now_in_cache_zone,
    parse_cache_timestamp,
)
from registrant_reports.utils.exceptions import (
    CacheCorruptError,
    FileWriteError,
    RefreshLockTimeoutError,
)

logger = logging.getLogger(__name__)

SESSION_FILE_PATTERN = "sess_*"
SESSION_MAX_AGE = 24 * 60 * 60
REFRESH_LOCK_NAME = ".refresh.lock"


class CacheStore:
    """
    File-backed store of named datasets, isolated per enterprise.

    Layout: ``<root_dir>/<enterprise>/<dataset file>``. Dataset file names
    come from :class:`Dataset` only; enterprise codes are validated before
    they reach the store.
    """

    def __init__(self, root_dir: str, clock: Optional[Callable[[], datetime]] = None):
        self.root_dir = os.path.abspath(root_dir)
        self._clock = clock or now_in_cache_zone
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def now(self) -> datetime:
        return self._clock()

    def tenant_dir(self, tenant: str) -> str:
        return os.path.join(self.root_dir, tenant)

    def path(self, tenant: str, dataset: Dataset) -> str:
        return os.path.join(self.tenant_dir(tenant), dataset.filename)

    def exists(self, tenant: str, dataset: Dataset) -> bool:
        return os.path.exists(self.path(tenant, dataset))

    def read(self, tenant: str, dataset: Dataset) -> Optional[Snapshot]:
        """
        Read a dataset snapshot.

        Returns:
            WrappedSnapshot or BareSnapshot according to the dataset, or None
            when the file does not exist

        Raises:
            CacheCorruptError: If the file exists but is not valid for the dataset
        """
        file_path = self.path(tenant, dataset)
        if not os.path.exists(file_path):
            return None

        try:
            payload = load_json(file_path)
        except FileNotFoundError:
            # Removed by a concurrent clear.
            return None
        except json.JSONDecodeError as e:
            logger.warning(f"Corrupt cache file {file_path}: {e.msg}")
            raise CacheCorruptError(file_path, e.msg) from e
        except (UnicodeDecodeError, OSError) as e:
            logger.warning(f"Unreadable cache file {file_path}: {e}")
            raise CacheCorruptError(file_path, str(e)) from e

        return self._to_snapshot(dataset, payload, file_path)

    def read_rows(self, tenant: str, dataset: Dataset) -> List[Row]:
        """Rows of a dataset; an absent dataset reads as empty."""
        snapshot = self.read(tenant, dataset)
        return snapshot.data if snapshot is not None else []

    def read_timestamp(self, tenant: str, dataset: Dataset) -> Optional[str]:
        """Generation timestamp of a wrapped dataset, if any."""
        snapshot = self.read(tenant, dataset)
        if isinstance(snapshot, WrappedSnapshot) and snapshot.global_timestamp:
            return snapshot.global_timestamp
        return None

    def write(self, tenant: str, dataset: Dataset, snapshot: Snapshot) -> None:
        """
        Overwrite a dataset with a full snapshot.

        Raises:
            TypeError: If the snapshot shape does not match the dataset
            FileWriteError: If the file cannot be written
        """
        if not isinstance(snapshot, dataset.shape):
            raise TypeError(
                f"Dataset {dataset.dataset_name} stores {dataset.shape.__name__}, "
                f"got {type(snapshot).__name__}"
            )

        file_path = self.path(tenant, dataset)
        try:
            save_json(file_path, snapshot.to_dict())
        except IOError as e:
            logger.error(f"Cache write failed for {file_path}: {e}")
            raise FileWriteError(str(e)) from e

    def write_timestamped(self, tenant: str, dataset: Dataset, rows: List[Row]) -> WrappedSnapshot:
        """Write rows as a wrapped snapshot stamped with the current time."""
        snapshot = WrappedSnapshot(global_timestamp=format_cache_timestamp(self.now()), data=rows)
        self.write(tenant, dataset, snapshot)
        return snapshot

    def is_stale(self, tenant: str, dataset: Dataset, ttl_seconds: int) -> bool:
        """
        Decide whether a dataset must be regenerated.

        A dataset is stale when absent, unreadable, missing a parseable
        global_timestamp, or older than ttl_seconds. Age is measured at the
        minute resolution of the stored timestamp.
        """
        try:
            snapshot = self.read(tenant, dataset)
        except CacheCorruptError:
            return True

        if not isinstance(snapshot, WrappedSnapshot):
            return True

        generated_at = parse_cache_timestamp(snapshot.global_timestamp)
        if generated_at is None:
            return True

        now = self.now().replace(second=0, microsecond=0)
        if now.tzinfo is None:
            now = now.replace(tzinfo=CACHE_TIMEZONE)
        age = (now.astimezone(timezone.utc) - generated_at.astimezone(timezone.utc)).total_seconds()
        return age > ttl_seconds

    def delete(self, tenant: str, dataset: Dataset) -> bool:
        file_path = self.path(tenant, dataset)
        if not os.path.exists(file_path):
            return True
        try:
            os.remove(file_path)
        except OSError as e:
            logger.error(f"Failed to delete cache file {file_path}: {e}")
            return False
        return True

    def clear_all(self, tenant: str) -> bool:
        """
        Delete every dataset of an enterprise and purge old session files.

        Returns:
            True if every dataset file was removed
        """
        success = True
        for dataset in Dataset:
            if not self.delete(tenant, dataset):
                success = False

        result = self.clear_session_files()
        logger.info(f"Cleared cache for {tenant}: {result['message']}")
        return success

    def clear_session_files(self, max_age: int = SESSION_MAX_AGE) -> Dict[str, Any]:
        """
        Remove session files older than max_age from the shared cache root.

        Session files are not enterprise specific; they live directly under
        the root directory.
        """
        if not os.path.isdir(self.root_dir):
            return {
                "success": False,
                "deleted": 0,
                "errors": 1,
                "error_details": [],
                "message": "Session directory does not exist",
            }

        cutoff = time.time() - max_age
        deleted = 0
        errors: List[str] = []

        for file_path in glob.glob(os.path.join(self.root_dir, SESSION_FILE_PATTERN)):
            if not os.path.isfile(file_path) or os.path.getmtime(file_path) >= cutoff:
                continue
            try:
                os.remove(file_path)
                deleted += 1
            except OSError:
                errors.append(f"Failed to delete: {os.path.basename(file_path)}")

        message = f"Deleted {deleted} old session files"
        if errors:
            message += f" with {len(errors)} errors"

        return {
            "success": not errors,
            "deleted": deleted,
            "errors": len(errors),
            "error_details": errors,
            "message": message,
        }

    def file_info(self, tenant: str, dataset: Dataset) -> Dict[str, Any]:
        """Existence, size and modification time of a dataset file."""
        file_path = self.path(tenant, dataset)
        if not os.path.exists(file_path):
            return {"exists": False, "size": 0, "modified": None, "enterprise": tenant}
        return {
            "exists": True,
            "size": os.path.getsize(file_path),
            "modified": os.path.getmtime(file_path),
            "enterprise": tenant,
        }

    @contextmanager
    def tenant_lock(self, tenant: str, timeout: float = 30.0):
        """
        Exclusive lock for one enterprise across threads and processes.

        Usage:
            with store.tenant_lock("csu"):
                # refresh datasets
                ...

        Raises:
            RefreshLockTimeoutError: If the lock is not acquired within timeout seconds
        """
        with self._locks_guard:
            thread_lock = self._locks.setdefault(tenant, threading.Lock())

        if not thread_lock.acquire(timeout=timeout):
            raise RefreshLockTimeoutError(tenant, timeout)
        try:
            lock_path = ensure_file(os.path.join(self.tenant_dir(tenant), REFRESH_LOCK_NAME))
            with ExitStack() as stack:
                try:
                    stack.enter_context(lock_file(lock_path, timeout=timeout))
                except TimeoutError as e:
                    logger.warning(f"Refresh lock for {tenant} is held by another process")
                    raise RefreshLockTimeoutError(tenant, timeout) from e
                yield
        finally:
            thread_lock.release()

    def _to_snapshot(self, dataset: Dataset, payload: Any, file_path: str) -> Snapshot:
        if dataset.is_wrapped:
            if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
                raise CacheCorruptError(file_path, "expected an object with a data list")
            rows = payload["data"]
            timestamp = payload.get("global_timestamp") or ""
            snapshot: Snapshot = WrappedSnapshot(global_timestamp=str(timestamp), data=rows)
        else:
            if not isinstance(payload, list):
                raise CacheCorruptError(file_path, "expected a list of rows")
            rows = payload
            snapshot = BareSnapshot(data=rows)

        if not all(isinstance(row, list) for row in rows):
            raise CacheCorruptError(file_path, "rows must be lists")
        return snapshot
