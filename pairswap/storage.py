"""Durable pool state.

A pool saves a PoolSnapshot through its store at the end of every
successful mutation, inside the same transaction: if the save fails, the
operation is rolled back.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog

from pairswap.models.snapshot import PoolSnapshot

logger = structlog.get_logger()


@runtime_checkable
class PoolStore(Protocol):
    """Where pool snapshots are kept."""

    def save(self, snapshot: PoolSnapshot) -> None: ...

    def load(self) -> PoolSnapshot | None: ...


class MemoryPoolStore:
    """Keeps the latest snapshot in memory. Useful for tests and simulations."""

    def __init__(self) -> None:
        self._snapshot: PoolSnapshot | None = None
        self.saves = 0

    def save(self, snapshot: PoolSnapshot) -> None:
        self._snapshot = snapshot.model_copy(deep=True)
        self.saves += 1

    def load(self) -> PoolSnapshot | None:
        if self._snapshot is None:
            return None
        return self._snapshot.model_copy(deep=True)


class JsonFilePoolStore:
    """Writes snapshots to a JSON file.

    Each save goes to a temporary file in the same directory, is flushed to
    disk, then renamed over the target, so a crash leaves either the old or
    the new snapshot and never a partial one.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def save(self, snapshot: PoolSnapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = snapshot.model_dump_json(indent=2)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.debug("snapshot_saved", path=str(self.path), pool=snapshot.address)

    def load(self) -> PoolSnapshot | None:
        if not self.path.exists():
            return None
        with open(self.path) as f:
            return PoolSnapshot.model_validate_json(f.read())
