# shaderbox/engine/fps.py
from dataclasses import dataclass
from typing import Optional


@dataclass
class FrameRateMeter:
    """
    Counts frames and yields a frames-per-second sample every `interval`.
    """

    interval: float = 0.5

    _frames: int = 0
    _window_start: Optional[float] = None
    _last_sample: Optional[int] = None

    def reset(self) -> None:
        self._frames = 0
        self._window_start = None

    def frame(self, timestamp: float) -> Optional[int]:
        """
        Record one frame. Returns a new sample when the interval elapsed.
        """
        if self._window_start is None:
            self._window_start = timestamp
            return None

        self._frames += 1
        elapsed = timestamp - self._window_start
        if elapsed < self.interval:
            return None

        sample = round(self._frames / elapsed)
        self._frames = 0
        self._window_start = timestamp
        self._last_sample = sample
        return sample

    @property
    def last_sample(self) -> Optional[int]:
        return self._last_sample
