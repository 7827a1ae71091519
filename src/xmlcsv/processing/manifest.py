"""Processed-file ledger used to skip duplicate inputs."""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Set, Tuple

from xmlcsv.core import DEDUPE_KEYS

logger = logging.getLogger(__name__)


@dataclass
class Manifest:
    """Track processed files to avoid duplicates.

    The ledger is append-only. With ``path=None`` it lives in memory for the
    lifetime of the object; otherwise every entry is appended to a JSON Lines
    file and reloaded on the next run.

    Parameters
    ----------
    path:
        Location of the manifest JSON Lines file, or ``None`` for in-memory.
    key:
        How a file is identified: ``"hash"`` (SHA256 of the content),
        ``"name"`` or ``"name+size"``.
    """

    path: Optional[Path] = None
    key: str = "hash"
    keys: Set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        if self.key not in DEDUPE_KEYS:
            raise ValueError(f"key must be one of {', '.join(DEDUPE_KEYS)}, got '{self.key}'")
        if self.path is not None:
            self.path = Path(self.path)
        if self.path is not None and self.path.exists():
            for line in self.path.read_text(encoding="utf-8").splitlines():
                try:
                    obj = json.loads(line)
                except json.JSONDecodeError:
                    logger.warning("Skipping unreadable manifest line in %s", self.path)
                    continue
                if obj.get("status") == "ok" and obj.get(self.key):
                    self.keys.add(obj[self.key])

    def _identify(self, name: str, data: bytes) -> dict:
        digest = hashlib.sha256(data).hexdigest()
        size = len(data)
        return {
            "hash": digest,
            "name": name,
            "name+size": f"{name}:{size}",
            "bytes": size,
        }

    def check(self, name: str, data: bytes) -> Tuple[bool, str, int]:
        """Return (is_duplicate, key, size)."""
        ident = self._identify(name, data)
        k = ident[self.key]
        return k in self.keys, k, ident["bytes"]

    def record(self, name: str, data: bytes, status: str) -> None:
        """Append an entry for ``name`` with ``status``; only ``ok`` entries count as processed."""
        entry = {"path": name, **self._identify(name, data), "status": status}
        if self.path is not None:
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(entry) + "\n")
        if status == "ok":
            self.keys.add(entry[self.key])
