import threading
import time

from typing import Optional

from cryptobackup.utils.errors import OperationCancelled


class OperationContext:
    """Advisory cancellation and deadline carried through store and pipeline calls.

    Checked between I/O steps only; a single read or write is never interrupted.
    """

    def __init__(self, timeout: Optional[float] = None):
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        if self._event.is_set():
            raise OperationCancelled("operation cancelled")
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise OperationCancelled("operation deadline exceeded")


def check(ctx: Optional[OperationContext]) -> None:
    if ctx is not None:
        ctx.check()
