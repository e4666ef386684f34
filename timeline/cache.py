# timeline/cache.py
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class FrameCache(Generic[T]):
    """Holds one value per frame; computes it on the first request of a frame."""

    def __init__(self):
        self.frame: Optional[int] = None
        self.value: Optional[T] = None

    def get(self, frame: int, compute: Callable[[], T]) -> T:
        if self.frame is None or self.frame != frame:
            self.value = compute()
            self.frame = frame
        return self.value

    def invalidate(self):
        self.frame = None
