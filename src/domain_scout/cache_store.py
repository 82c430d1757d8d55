"""
Key-value stores backing the search demand cache.

The cache is injected into the estimator so tests can use an in-memory
store while deployments persist entries to an HMAC-protected JSON file.
"""

import hashlib
import hmac
import json
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from .audit_logger import AuditLogger
from .exceptions import PersistenceError, TamperingError
from .models import CacheEntry


class KeyValueStore(ABC):
    """Mapping of lowercased keyword to cached demand entry."""

    @abstractmethod
    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for key, or None."""

    @abstractmethod
    def set(self, key: str, entry: CacheEntry) -> None:
        """Store an entry under key."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key if present."""


class InMemoryStore(KeyValueStore):
    """Process-local store; the default and the one used in tests."""

    def __init__(self, entries: Optional[dict[str, CacheEntry]] = None) -> None:
        self._entries: dict[str, CacheEntry] = dict(entries or {})

    def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def set(self, key: str, entry: CacheEntry) -> None:
        self._entries[key] = entry

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


class JsonFileStore(KeyValueStore):
    """
    Persistent store with HMAC protection.

    The whole cache is one JSON document ``{version, entries, hmac}``. The
    file is loaded lazily on first access and rewritten on every change.
    Access is serialized so writes may run on executor threads.
    """

    VERSION = 1

    def __init__(
        self,
        file_path: Path,
        hmac_secret: str,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Args:
            file_path: Path to the cache file (JSON format)
            hmac_secret: Secret key for HMAC computation
            logger: Optional logger for discarded cache files
        """
        self._file_path = file_path
        self._hmac_secret = hmac_secret.encode("utf-8")
        self._logger = logger
        self._entries: Optional[dict[str, CacheEntry]] = None
        self._lock = threading.RLock()

    @property
    def file_path(self) -> Path:
        return self._file_path

    def load(self) -> dict[str, CacheEntry]:
        """
        Load entries from disk and validate the HMAC.

        Returns:
            Entries keyed by keyword; empty when the file does not exist

        Raises:
            TamperingError: If HMAC validation fails
            PersistenceError: If the file cannot be read or parsed
        """
        if not self._file_path.exists():
            self._entries = {}
            return self._entries

        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                raw_data = json.load(f)
        except json.JSONDecodeError as e:
            raise PersistenceError(
                code="parse_error",
                message=f"Failed to parse cache file: {e}",
                details={"file_path": str(self._file_path)},
            )
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to read cache file: {e}",
                details={"file_path": str(self._file_path)},
            )

        raw_entries = raw_data.get("entries", {})
        computed_hmac = self.compute_hmac(
            {"version": raw_data.get("version"), "entries": raw_entries}
        )
        if not hmac.compare_digest(str(raw_data.get("hmac", "")), computed_hmac):
            raise TamperingError(
                code="hmac_mismatch",
                message="HMAC validation failed - cache file may have been tampered with",
                details={"file_path": str(self._file_path)},
            )

        try:
            self._entries = {
                key: CacheEntry.from_dict(value) for key, value in raw_entries.items()
            }
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(
                code="parse_error",
                message=f"Malformed cache entry: {e}",
                details={"file_path": str(self._file_path)},
            )
        return self._entries

    def save(self) -> None:
        """
        Write all entries to disk with a fresh HMAC.

        Raises:
            PersistenceError: If the file cannot be written
        """
        entries = {key: entry.to_dict() for key, entry in self._loaded().items()}
        output = {
            "version": self.VERSION,
            "entries": entries,
            "hmac": self.compute_hmac({"version": self.VERSION, "entries": entries}),
        }

        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(self._file_path, "w", encoding="utf-8") as f:
                json.dump(output, f, indent=2, sort_keys=True)
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to write cache file: {e}",
                details={"file_path": str(self._file_path)},
            )

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._loaded().get(key)

    def set(self, key: str, entry: CacheEntry) -> None:
        with self._lock:
            self._loaded()[key] = entry
            self.save()

    def delete(self, key: str) -> None:
        with self._lock:
            if self._loaded().pop(key, None) is not None:
                self.save()

    def compute_hmac(self, data: dict) -> str:
        """Compute HMAC-SHA256 over the canonical JSON form of data."""
        serialized = json.dumps(data, sort_keys=True, separators=(",", ":"))
        return hmac.new(
            self._hmac_secret,
            serialized.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def _loaded(self) -> dict[str, CacheEntry]:
        if self._entries is None:
            try:
                return self.load()
            except PersistenceError as e:
                # Unreadable or tampered cache is treated as empty and
                # overwritten on the next write.
                self._entries = {}
                if self._logger:
                    self._logger.log_error(
                        "JsonFileStore",
                        "Discarding unreadable search demand cache",
                        error=e,
                        additional_data={"file_path": str(self._file_path)},
                    )
        return self._entries
