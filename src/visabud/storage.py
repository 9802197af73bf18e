"""Single-document JSON persistence shared by every store."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import time
import uuid
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class PersistenceError(OSError):
    """A store kept a change in memory but could not write it out."""


class JsonDocument:
    """One JSON document on disk guarded by its own lock.

    Reads that fail (missing file, unreadable file, invalid JSON) yield None so
    callers start from an empty state. Writes go through a temporary file and
    ``os.replace`` so the previous document survives a failed write.

    With ``path=None`` the document lives only in memory, which keeps tests
    and throwaway engines off the filesystem.
    """

    def __init__(self, path: Path | None, lock: threading.Lock | None = None) -> None:
        self.path = path
        self.lock = lock or threading.Lock()
        self._memory: Any = None

    def read(self) -> Any:
        """Return the parsed document, or None if it cannot be read."""
        if self.path is None:
            return self._memory

        if not self.path.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Invalid JSON in %s: %s. Starting empty.", self.path, e)
            return None
        except OSError as e:
            logger.warning("Cannot read %s: %s. Starting empty.", self.path, e)
            return None

    def write(self, data: Any) -> bool:
        """Atomically replace the document. Returns False on failure."""
        if self.path is None:
            try:
                self._memory = json.loads(json.dumps(data))
            except (TypeError, ValueError) as e:
                logger.warning("Failed to store in-memory document: %s", e)
                return False
            return True

        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Failed to write %s: %s", self.path, e)
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            return False

    def delete(self) -> None:
        """Remove the document."""
        if self.path is None:
            self._memory = None
            return
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Failed to delete %s: %s", self.path, e)


class ArtifactStore:
    """Persisted collection of generated artifacts (e.g. roadmaps)."""

    def __init__(self, path: Path | None = None, max_items: int = 50) -> None:
        self._doc = JsonDocument(path)
        self.max_items = max_items

    def save(self, kind: str, payload: dict[str, Any]) -> str:
        """Store an artifact and return its id. Newest entries come first."""
        with self._doc.lock:
            data = self._doc.read() or {}
            items = data.get("items", []) if isinstance(data, dict) else []
            artifact_id = f"{kind}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"
            items.insert(
                0,
                {
                    "id": artifact_id,
                    "kind": kind,
                    "created_at": time.time(),
                    "payload": payload,
                },
            )
            self._doc.write({"items": items[: self.max_items]})
        return artifact_id

    def list(self, kind: str | None = None) -> list[dict[str, Any]]:
        """List stored artifacts, newest first."""
        with self._doc.lock:
            data = self._doc.read() or {}
        items = data.get("items", []) if isinstance(data, dict) else []
        if kind is None:
            return list(items)
        return [item for item in items if item.get("kind") == kind]
