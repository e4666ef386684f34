# timeline/volume.py
from typing import Iterable, Optional

from notes.model import MAX_VELOCITY, Block
from timeline.cache import FrameCache
from timeline.curve import ShapeFn, linear_falloff


def block_volume(block: Block, t: float, shape: ShapeFn, normalize_per_track: bool = True) -> float:
    progress = (t - block.start) / (block.end - block.start)
    weight = block.normalized_velocity if normalize_per_track else block.velocity / MAX_VELOCITY
    return shape(progress) * weight


def sum_volume(blocks: Iterable[Block], t: float, shape: ShapeFn = linear_falloff,
               normalize_per_track: bool = True) -> float:
    """Sum of shaped, velocity-weighted volumes. Not clamped."""
    return sum(block_volume(b, t, shape, normalize_per_track) for b in blocks)


class VolumeAggregator:
    def __init__(self, shape: Optional[ShapeFn] = None, normalize_per_track: bool = True):
        self.shape = shape or linear_falloff
        self.normalize_per_track = normalize_per_track
        self._cache: FrameCache[float] = FrameCache()

    def volume(self, frame: int, t: float, blocks: Iterable[Block]) -> float:
        return self._cache.get(
            frame, lambda: sum_volume(blocks, t, self.shape, self.normalize_per_track))

    def invalidate(self):
        self._cache.invalidate()
