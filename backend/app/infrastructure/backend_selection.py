"""Backend Selection — one-way, fail-open choice between relational and file stores.

Invariants:
    - state starts UNPROVISIONED and moves exactly once, to CONNECTED or DEGRADED_FALLBACK
    - No configured database_url → DEGRADED_FALLBACK without attempting a connection
    - PersistenceUnavailableError from the connect hook → DEGRADED_FALLBACK (never surfaced)
    - No retry-and-promote: the chosen backend lives for the process lifetime
    - Concurrent first callers share one selection (asyncio.Lock)

Design Decisions:
    - Selector object on app.state instead of a lazily-initialized module singleton:
      tests construct their own selector and inject a connect hook
      (ADR: observable state transition)
    - Fail-open: availability for local/dev usage over strict consistency
"""

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable

from app.core.errors import PersistenceUnavailableError
from app.core.repository_protocols import PersistenceBackend
from app.infrastructure.file_store import FileBackedStore
from app.infrastructure.relational_store import connect_relational

logger = logging.getLogger(__name__)

ConnectHook = Callable[..., Awaitable[PersistenceBackend]]


class BackendState(str, Enum):
    UNPROVISIONED = "unprovisioned"
    CONNECTED = "connected"
    DEGRADED_FALLBACK = "degraded_fallback"


class BackendSelector:
    """Chooses the PersistenceBackend on first use and keeps it."""

    def __init__(
        self,
        database_url: str | None,
        file_path: str | Path,
        connect: ConnectHook = connect_relational,
        pool_size: int = 20,
        max_overflow: int = 10,
    ):
        self.database_url = database_url
        self.file_path = Path(file_path)
        self._connect = connect
        self._pool_size = pool_size
        self._max_overflow = max_overflow
        self._lock = asyncio.Lock()
        self._backend: PersistenceBackend | None = None
        self.state = BackendState.UNPROVISIONED

    @property
    def backend(self) -> PersistenceBackend | None:
        return self._backend

    async def get(self) -> PersistenceBackend:
        if self._backend is not None:
            return self._backend
        async with self._lock:
            if self._backend is None:
                self._backend = await self._select()
        return self._backend

    async def _select(self) -> PersistenceBackend:
        if not self.database_url:
            logger.warning(
                "DATABASE_URL not configured — using file-backed store",
                extra={"backend": FileBackedStore.kind},
            )
            return self._fallback()
        try:
            backend = await self._connect(
                self.database_url,
                pool_size=self._pool_size,
                max_overflow=self._max_overflow,
            )
        except PersistenceUnavailableError as e:
            logger.warning(
                f"Failed to connect to database, falling back to file store: {e.message}",
                extra={"backend": FileBackedStore.kind, "error_code": e.code},
            )
            return self._fallback()
        self.state = BackendState.CONNECTED
        logger.info(
            "Connected to relational store", extra={"backend": backend.kind},
        )
        return backend

    def _fallback(self) -> PersistenceBackend:
        self.state = BackendState.DEGRADED_FALLBACK
        return FileBackedStore(self.file_path)

    async def dispose(self) -> None:
        if self._backend is not None:
            await self._backend.dispose()
