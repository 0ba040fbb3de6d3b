from __future__ import annotations

import threading

from protoc_scope.errors import ResolutionCancelled


class CancellationToken:
    """Lets a caller abandon a running resolution from another thread."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ResolutionCancelled("Resolution was cancelled")
