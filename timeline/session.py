# timeline/session.py
import logging
from typing import Callable, List, Optional

from config import AppConfig
from notes.model import Block, MidiData
from timeline.cache import FrameCache
from timeline.curve import ShapeFn, make_curve
from timeline.tracker import BlockTracker, TrackUpdate
from timeline.volume import VolumeAggregator

BlockCallback = Callable[[Block], None]


class BlockEvent:
    """Callback list fired synchronously with the block that changed."""

    def __init__(self):
        self._callbacks: List[BlockCallback] = []

    def subscribe(self, cb: BlockCallback) -> BlockCallback:
        self._callbacks.append(cb)
        return cb

    def unsubscribe(self, cb: BlockCallback):
        if cb in self._callbacks:
            self._callbacks.remove(cb)

    def emit(self, block: Block):
        for cb in list(self._callbacks):
            cb(block)

    def __len__(self) -> int:
        return len(self._callbacks)


class PlaybackSession:
    """Advances every track of a MidiData to the time read from ``time_source``.

    Time and volume are computed at most once per frame. Call ``update()``
    once per host frame; listeners on ``on_block_started`` and
    ``on_block_completed`` are called from inside it.
    """

    def __init__(self, data: MidiData, time_source, cfg: Optional[AppConfig] = None,
                 shape: Optional[ShapeFn] = None):
        self.data = data
        self.time_source = time_source
        self.cfg = cfg or AppConfig()
        self.volume = VolumeAggregator(shape or make_curve(self.cfg.volume.curve),
                                       normalize_per_track=self.cfg.volume.normalize_per_track)
        self.on_block_started = BlockEvent()
        self.on_block_completed = BlockEvent()

        self.frame = 0
        self._time: FrameCache[float] = FrameCache()
        self.trackers: List[BlockTracker] = []
        self.reset()

    def reset(self):
        # empty tracks keep a tracker too so indices line up with data.tracks
        self.trackers = [BlockTracker(track) for track in self.data.tracks]
        self._time.invalidate()
        self.volume.invalidate()

    # ---------- per frame ----------
    def update(self, frame: Optional[int] = None) -> List[TrackUpdate]:
        self.frame = self.frame + 1 if frame is None else frame
        t = self.get_current_time()

        updates = []
        for tracker in self.trackers:
            u = tracker.update(t)
            for block in u.entered:
                self.on_block_started.emit(block)
            for block in u.exited:
                self.on_block_completed.emit(block)
            updates.append(u)

        if self.cfg.volume.update_every_frame:
            self.get_current_volume()
        if self.cfg.run.display_debug:
            logging.debug(self.debug_text())
        return updates

    def get_current_time(self) -> float:
        return self._time.get(self.frame, self.time_source.read)

    def get_current_volume(self) -> float:
        t = self.get_current_time()
        return self.volume.volume(self.frame, t, self.active_blocks())

    # ---------- queries ----------
    def active_blocks(self) -> List[Block]:
        return [b for tracker in self.trackers for b in tracker.active_blocks]

    def debug_text(self) -> str:
        lines = [f"MIDI {self.data.name} playing ({self.get_current_time():.2f}s)"]
        for i, tracker in enumerate(self.trackers):
            lines.append(f"track {i} - ({len(tracker.cursor.active)} active blocks)")
        return "\n".join(lines)
