import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, MutableMapping

from cachetools import TTLCache
from loguru import logger

from src.legacy_bridge.core.models.profile import RemoteProfile
from src.legacy_bridge.runtime.config.config_data import ProfileCacheConfig


class ProfileCache(ABC):
    """Positive cache of legacy profiles keyed by username.

    Only successful fetches are stored; absent or unreachable users are never
    cached. ``put`` is last-writer-wins and replaces, never merges.
    """

    @abstractmethod
    def get(self, username: str) -> RemoteProfile | None:
        """Return the cached profile for ``username``, if any."""
        raise NotImplementedError

    @abstractmethod
    def put(self, profile: RemoteProfile) -> None:
        """Store ``profile`` under ``profile.username``."""
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        """Drop every cached profile."""
        raise NotImplementedError

    @abstractmethod
    def profiles(self) -> list[RemoteProfile]:
        """Snapshot of the currently cached profiles."""
        raise NotImplementedError

    def __len__(self) -> int:
        return len(self.profiles())

    def find_by_email(self, email: str) -> RemoteProfile | None:
        """Case-insensitive email match over the cached working set.

        This is a best-effort secondary index: a user that was never fetched
        by username cannot be found here. Among several entries sharing an
        email the first one encountered wins.
        """
        if not email:
            return None
        wanted = email.casefold()
        for profile in self.profiles():
            if profile.email is not None and profile.email.casefold() == wanted:
                return profile
        return None


class ProfileCacheInMemory(ProfileCache):
    """Process-local profile cache.

    With ``max_entries`` set, entries live in an LRU cache with a TTL. Without
    it the cache is a plain dict that keeps every profile until ``clear()``.
    """

    def __init__(
        self,
        max_entries: int | None = None,
        ttl_seconds: float | None = None,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lock = threading.RLock()
        self._entries: MutableMapping[str, RemoteProfile]
        if max_entries is None:
            self._entries = {}
        else:
            self._entries = TTLCache(
                maxsize=max_entries, ttl=ttl_seconds or float("inf"), timer=timer
            )

    @classmethod
    def from_config(cls, config: ProfileCacheConfig) -> "ProfileCacheInMemory":
        if config.mode == "unbounded":
            logger.warning("Profile cache is unbounded; entries are kept until shutdown")
            return cls()
        return cls(max_entries=config.max_entries, ttl_seconds=config.ttl_seconds)

    @property
    def bounded(self) -> bool:
        return isinstance(self._entries, TTLCache)

    def get(self, username: str) -> RemoteProfile | None:
        with self._lock:
            return self._entries.get(username)

    def put(self, profile: RemoteProfile) -> None:
        # RemoteProfile is frozen, so storing the instance cannot alias caller state
        with self._lock:
            self._entries[profile.username] = profile

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def profiles(self) -> list[RemoteProfile]:
        with self._lock:
            if isinstance(self._entries, TTLCache):
                self._entries.expire()
            return list(self._entries.values())
