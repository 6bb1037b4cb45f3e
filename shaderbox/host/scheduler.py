# shaderbox/host/scheduler.py
from __future__ import annotations

import time
from typing import Callable, Dict

FrameCallback = Callable[[float], None]


class FrameScheduler:
    """
    Per-display-refresh callback queue.

    The host drives it by calling run_frame() once per refresh. Callbacks
    requested while a frame is running are deferred to the next frame, and
    a cancelled callback never runs, even mid-frame.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter):
        self._clock = clock
        self._next_handle = 1
        self._pending: Dict[int, FrameCallback] = {}
        self._running: Dict[int, FrameCallback] = {}

    def now(self) -> float:
        return self._clock()

    def request_frame(self, callback: FrameCallback) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)
        self._running.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def run_frame(self, timestamp: float | None = None) -> int:
        """
        Run every callback queued before this frame began.

        Returns how many callbacks ran.
        """
        if timestamp is None:
            timestamp = self.now()

        self._running, self._pending = self._pending, {}
        ran = 0
        try:
            while self._running:
                handle = next(iter(self._running))
                callback = self._running.pop(handle)
                callback(timestamp)
                ran += 1
        finally:
            # A raising callback must not drop the ones queued after it.
            if self._running:
                self._pending = {**self._running, **self._pending}
                self._running = {}
        return ran
