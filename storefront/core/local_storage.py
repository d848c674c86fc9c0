"""Key-value storage standing in for browser local storage.

Two backends share one interface: JSON files under a data directory for a
single visitor, and Redis (with TTL and in-memory fallback) when several
API workers must see the same carts and sessions.
"""
from __future__ import annotations

import json
import os
import re
import tempfile
import time
from pathlib import Path
from typing import Any

import redis

from storefront.core.constants import STORAGE_TTL_SECONDS
from storefront.core.exceptions import StorageException
from storefront.logging_config import logger

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class LocalStorage:
    """Interface for JSON-serializable key-value persistence."""

    def get(self, key: str) -> Any | None:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def namespace(self, prefix: str) -> LocalStorage:
        return NamespacedStorage(self, prefix)


class NamespacedStorage(LocalStorage):
    """View of another storage with every key prefixed, one per visitor session."""

    def __init__(self, inner: LocalStorage, prefix: str):
        self._inner = inner
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    def get(self, key: str) -> Any | None:
        return self._inner.get(self._key(key))

    def set(self, key: str, value: Any) -> None:
        self._inner.set(self._key(key), value)

    def delete(self, key: str) -> None:
        self._inner.delete(self._key(key))


class MemoryStorage(LocalStorage):
    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value, ensure_ascii=False)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileStorage(LocalStorage):
    """One JSON document per key, replaced atomically on every write."""

    def __init__(self, directory: str | Path):
        self._dir = Path(directory)

    def _path(self, key: str) -> Path:
        return self._dir / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> Any | None:
        path = self._path(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageException(f"Cannot read {path}: {e}") from e
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding corrupt storage entry %s", path)
            return None

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._dir, prefix=".tmp-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(value, fh, ensure_ascii=False)
            os.replace(tmp_name, path)
        except OSError as e:
            raise StorageException(f"Cannot write {path}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageException(f"Cannot delete {self._path(key)}: {e}") from e


class RedisStorage(LocalStorage):
    """Storage persisted in Redis with TTL, falling back to memory on failure."""

    def __init__(self, redis_url: str | None = None, ttl_seconds: int = STORAGE_TTL_SECONDS):
        self._redis_url = redis_url or os.getenv("REDIS_URL")
        self._ttl = ttl_seconds
        self._client = self._init_client()
        self._memory: dict[str, str] = {}
        self._memory_last_access: dict[str, float] = {}

    @property
    def is_shared(self) -> bool:
        return self._client is not None

    def _switch_to_memory_fallback(self, reason: Exception | str) -> None:
        logger.warning("Redis storage fallback to memory mode: %s", reason)
        self._client = None

    def _init_client(self):
        if not self._redis_url:
            logger.warning("REDIS_URL is not set; storage uses in-memory fallback")
            return None

        try:
            client = redis.from_url(
                self._redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            client.ping()
            logger.info("Redis storage enabled")
            return client
        except Exception as exc:
            logger.warning("Redis storage init failed, fallback to in-memory: %s", exc)
            return None

    def _cleanup_memory_expired(self) -> None:
        now = time.time()
        expired = [
            key for key, last_access in self._memory_last_access.items() if now - last_access > self._ttl
        ]
        for key in expired:
            self._memory.pop(key, None)
            self._memory_last_access.pop(key, None)

    def _memory_get(self, key: str) -> str | None:
        self._cleanup_memory_expired()
        raw = self._memory.get(key)
        if raw is not None:
            self._memory_last_access[key] = time.time()
        return raw

    def _memory_set(self, key: str, raw: str) -> None:
        self._memory[key] = raw
        self._memory_last_access[key] = time.time()

    def _memory_delete(self, key: str) -> None:
        self._memory.pop(key, None)
        self._memory_last_access.pop(key, None)

    def get(self, key: str) -> Any | None:
        raw: str | None
        if self._client:
            try:
                raw = self._client.get(key)
            except Exception as exc:
                self._switch_to_memory_fallback(exc)
                raw = self._memory_get(key)
        else:
            raw = self._memory_get(key)

        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, json.JSONDecodeError):
            logger.warning("Discarding corrupt storage entry %s", key)
            return None

    def set(self, key: str, value: Any) -> None:
        serialized = json.dumps(value, ensure_ascii=False)
        if self._client:
            try:
                self._client.setex(key, self._ttl, serialized)
                return
            except Exception as exc:
                self._switch_to_memory_fallback(exc)
        self._memory_set(key, serialized)

    def delete(self, key: str) -> None:
        if self._client:
            try:
                self._client.delete(key)
            except Exception as exc:
                self._switch_to_memory_fallback(exc)
        self._memory_delete(key)


def create_storage(redis_url: str | None, data_dir: str | Path) -> LocalStorage:
    """Shared Redis storage when configured, otherwise files under ``data_dir``."""
    if redis_url:
        return RedisStorage(redis_url)
    return FileStorage(data_dir)
