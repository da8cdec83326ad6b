"""Reading, atomic writing and advisory locking of the workflow file."""

from __future__ import annotations

import logging
import os
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator

from app.errors import LockTimeout, WorkflowIOError

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 5.0
DEFAULT_LOCK_INTERVAL = 0.05


def read_workflow_file(path: Path) -> str:
    """Return the file text without newline translation; missing means empty."""
    try:
        return path.read_bytes().decode("utf-8")
    except FileNotFoundError:
        return ""
    except (OSError, UnicodeDecodeError) as exc:
        raise WorkflowIOError("read", str(path), exc) from exc


def _atomic_write(target_path: Path, content: str) -> None:
    data = content.encode("utf-8")
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "wb",
            dir=target_path.parent,
            prefix=f".{target_path.name}.",
            suffix=".tmp",
            delete=False,
        ) as temp_file:
            temp_path = Path(temp_file.name)
            temp_file.write(data)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        try:
            os.replace(temp_path, target_path)
        except PermissionError:
            logger.warning(
                "Atomic replace refused for %s; writing in place", target_path
            )
            target_path.write_bytes(data)
    finally:
        if temp_path is not None and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass


def write_workflow_file(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        _atomic_write(path, content)
    except OSError as exc:
        raise WorkflowIOError("write", str(path), exc) from exc


def _lock_path(path: Path) -> Path:
    return path.with_name(path.name + ".lock")


@contextmanager
def workflow_lock(
    path: Path,
    timeout: float = DEFAULT_LOCK_TIMEOUT,
    interval: float = DEFAULT_LOCK_INTERVAL,
) -> Iterator[Path]:
    """Hold an exclusive marker file next to ``path`` for the block.

    Cooperative only: writers that skip this lock are not stopped, and a
    crash while holding it leaves a stale ``.lock`` file that must be removed
    by hand.
    """
    lock_path = _lock_path(path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    deadline = time.monotonic() + timeout
    contended = False
    while True:
        try:
            fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError:
            if not contended:
                logger.debug("Waiting for lock %s", lock_path)
                contended = True
            if time.monotonic() >= deadline:
                logger.error("Timed out after %.2fs waiting for %s", timeout, lock_path)
                raise LockTimeout(str(lock_path), timeout) from None
            time.sleep(interval)
            continue
        except OSError as exc:
            raise WorkflowIOError("lock", str(lock_path), exc) from exc
        break

    try:
        try:
            os.write(fd, str(os.getpid()).encode("ascii"))
        finally:
            os.close(fd)
        yield lock_path
    finally:
        try:
            lock_path.unlink()
        except FileNotFoundError:
            logger.warning("Lock %s disappeared before release", lock_path)


def update_workflow_file(
    path: Path,
    transform: Callable[[str], str],
    timeout: float = DEFAULT_LOCK_TIMEOUT,
    interval: float = DEFAULT_LOCK_INTERVAL,
) -> str:
    """Read, transform and atomically rewrite ``path`` under the lock.

    Nothing is written if ``transform`` raises.
    """
    with workflow_lock(path, timeout=timeout, interval=interval):
        current = read_workflow_file(path)
        updated = transform(current)
        write_workflow_file(path, updated)
    logger.info("Updated workflow file %s", path)
    return updated
