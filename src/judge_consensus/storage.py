"""
Key/value persistence for evaluation results.

Core components never write results themselves; callers that want to keep
comparisons or reports pass a ``ResultStore`` to the runner or CLI.
"""

from __future__ import annotations

import hashlib
import json
import logging
import shutil
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

DEFAULT_STORE_DIR = ".judge_results"


@runtime_checkable
class ResultStore(Protocol):
    """Storage for JSON-compatible result records."""

    def get(self, key: str) -> dict[str, Any] | None:
        """Return the record stored under ``key``, or None."""
        ...

    def put(self, key: str, value: dict[str, Any]) -> None:
        """Store ``value`` under ``key``, replacing any previous record."""
        ...

    def list(self, prefix: str = "") -> list[str]:
        """Return the sorted keys starting with ``prefix``."""
        ...


class InMemoryResultStore:
    """Dict-backed store for tests and single-process runs."""

    def __init__(self) -> None:
        self._data: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            value = self._data.get(key)
        return json.loads(json.dumps(value)) if value is not None else None

    def put(self, key: str, value: dict[str, Any]) -> None:
        # Round-trip through JSON so stored records match what a file store returns
        with self._lock:
            self._data[key] = json.loads(json.dumps(value, default=str))

    def list(self, prefix: str = "") -> list[str]:
        with self._lock:
            return sorted(k for k in self._data if k.startswith(prefix))

    def __len__(self) -> int:
        return len(self._data)


class FileResultStore:
    """
    Disk-based result store.

    Records are written as JSON files named by the SHA256 of their key, in a
    2-level directory structure; the key itself is kept inside the file.
    """

    def __init__(self, root: str | Path = DEFAULT_STORE_DIR):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _digest(key: str) -> str:
        return hashlib.sha256(key.encode()).hexdigest()

    def _path(self, key: str) -> Path:
        digest = self._digest(key)
        return self.root / digest[:2] / f"{digest}.json"

    def get(self, key: str) -> dict[str, Any] | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path) as f:
                data = json.load(f)
            return data["value"]
        except (json.JSONDecodeError, KeyError) as e:
            logger.warning(f"Store read error for {key}: {e}")
            return None

    def put(self, key: str, value: dict[str, Any]) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        record = {
            "key": key,
            "stored_at": datetime.now().isoformat(),
            "value": value,
        }
        with open(path, "w") as f:
            json.dump(record, f, indent=2, default=str)
        logger.debug(f"Stored {key}")

    def delete(self, key: str) -> bool:
        """Delete a record. Returns True if it existed."""
        path = self._path(key)
        if path.exists():
            path.unlink()
            return True
        return False

    def list(self, prefix: str = "") -> list[str]:
        keys = []
        for path in self.root.rglob("*.json"):
            try:
                with open(path) as f:
                    key = json.load(f)["key"]
            except (json.JSONDecodeError, KeyError) as e:
                logger.warning(f"Skipping unreadable record {path.name}: {e}")
                continue
            if key.startswith(prefix):
                keys.append(key)
        return sorted(keys)

    def clear(self) -> int:
        """Remove all records. Returns number of records removed."""
        count = sum(1 for _ in self.root.rglob("*.json"))
        shutil.rmtree(self.root)
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"Store cleared: {count} records removed")
        return count

    def stats(self) -> dict[str, Any]:
        """Return record count and location."""
        return {
            "root": str(self.root),
            "records": sum(1 for _ in self.root.rglob("*.json")),
        }
