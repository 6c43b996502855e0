"""
Scoped storage sessions.

Every multi-step interaction with the remote store (download, parse, mutate,
re-upload) runs inside exactly one connect/disconnect bracket. There is no
pooling and no retry: each call pays a full connect/disconnect.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from artbat_admin.repositories.errors import PHASE_CONNECT, StorageConnectionError
from artbat_admin.transport.base import Transport, join_remote

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Storage:
    """Opens transport sessions rooted at a remote base path."""

    def __init__(
        self,
        transport_factory: Callable[[], Transport],
        base_path: str = "/",
        *,
        label: str = "FTP",
    ) -> None:
        self.transport_factory = transport_factory
        self.base_path = base_path or "/"
        self.label = label

    def remote_path(self, *parts: str) -> str:
        return join_remote(self.base_path, *parts)

    @contextmanager
    def session(self) -> Iterator[Transport]:
        transport = self.transport_factory()
        try:
            result = transport.connect()
            if not result:
                raise StorageConnectionError(
                    f"{self.label} storage unavailable: connection failed",
                    phase=PHASE_CONNECT,
                )
            yield transport
        finally:
            transport.disconnect()

    def with_session(self, operation: Callable[[Transport], T]) -> T:
        """Run ``operation`` inside one session and return its result."""
        with self.session() as transport:
            return operation(transport)
