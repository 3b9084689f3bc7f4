"""Shared file handling for the JSON-backed repositories.

Every write replaces the whole file through a temp file and
``os.replace``, so a write either lands completely or not at all.
``JsonFile.locked()`` serialises read-check-write sequences across
threads and across processes: a per-path ``RLock`` inside the process
plus an exclusive ``flock`` on a sibling ``.lock`` file.
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any, Iterator

from storeorders.domain.exceptions import PersistenceFailure

logger = logging.getLogger(__name__)


class _FileLock:
    """Reentrant lock held by one thread of one process at a time."""

    def __init__(self, lock_path: Path) -> None:
        self._lock_path = lock_path
        self._rlock = threading.RLock()
        self._depth = 0
        self._handle: IO[str] | None = None

    @contextmanager
    def hold(self) -> Iterator[None]:
        with self._rlock:
            # Only the outermost acquisition takes the flock; a second
            # descriptor in the same process would block on the first.
            if self._depth == 0:
                self._acquire()
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
                if self._depth == 0:
                    self._release()

    def _acquire(self) -> None:
        try:
            self._lock_path.parent.mkdir(parents=True, exist_ok=True)
            handle = open(self._lock_path, "w")
        except OSError as exc:
            raise PersistenceFailure(f"Could not lock {self._lock_path.name}") from exc
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
        self._handle = handle

    def _release(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
            handle.close()


_LOCKS: dict[Path, _FileLock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> _FileLock:
    resolved = path.resolve()
    with _LOCKS_GUARD:
        if resolved not in _LOCKS:
            _LOCKS[resolved] = _FileLock(resolved.with_name(resolved.name + ".lock"))
        return _LOCKS[resolved]


class JsonFile:

    def __init__(self, file_path: Path, empty: Any = None) -> None:
        self._file_path = file_path
        self._empty = [] if empty is None else empty
        self._lock = _lock_for(file_path)
        self._ensure_file()

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._lock.hold():
            yield

    def load(self) -> Any:
        try:
            return json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("reading %s failed: %s", self._file_path, exc)
            raise PersistenceFailure(f"Could not read {self._file_path.name}") from exc

    def persist(self, data: Any) -> None:
        directory = self._file_path.parent
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=directory, prefix=f".{self._file_path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(json.dumps(data, indent=2, ensure_ascii=False) + "\n")
                os.replace(tmp_name, self._file_path)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.error("writing %s failed: %s", self._file_path, exc)
            raise PersistenceFailure(f"Could not write {self._file_path.name}") from exc

    def _ensure_file(self) -> None:
        if self._file_path.exists():
            return
        with self.locked():
            if self._file_path.exists():
                return
            try:
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                self._file_path.write_text(json.dumps(self._empty), encoding="utf-8")
            except OSError as exc:
                raise PersistenceFailure(f"Could not create {self._file_path}") from exc
