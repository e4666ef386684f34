# timeline/tracker.py
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from notes.model import Block, Track


@dataclass
class TrackCursor:
    track: Track
    last_index: int = -1                  # -1: before the first block
    active: Dict[int, Block] = field(default_factory=dict)  # block index -> block
    time: Optional[float] = None          # time of the previous update

    @property
    def active_blocks(self) -> List[Block]:
        return list(self.active.values())


@dataclass
class TrackUpdate:
    entered: List[Block] = field(default_factory=list)
    exited: List[Block] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.entered or self.exited)


def _enter(cursor: TrackCursor, index: int, update: TrackUpdate):
    if index not in cursor.active:
        block = cursor.track.blocks[index]
        cursor.active[index] = block
        update.entered.append(block)


def advance(cursor: TrackCursor, t: float) -> TrackUpdate:
    """Move ``cursor`` to time ``t`` and report blocks that started or ended.

    Enters are always reported before exits. The cursor only ever holds
    blocks with ``start <= t < end`` afterwards.
    """
    blocks = cursor.track.blocks
    update = TrackUpdate()
    index = cursor.last_index

    if index < 0 or blocks[index].start < t:
        # search forward
        while index < len(blocks) - 1:
            index += 1
            block = blocks[index]
            if t >= block.start:
                if t < block.end:
                    _enter(cursor, index, update)
                cursor.last_index = index
            else:
                break
    else:
        # search backward, one activation at most
        while index > -1:
            index -= 1
            if index == -1:
                cursor.last_index = -1
                break
            block = blocks[index]
            if t >= block.start:
                if t < block.end:
                    _enter(cursor, index, update)
                cursor.last_index = index
                break

    if cursor.time is not None and t < cursor.time:
        # Going back in time can re-open blocks below last_index that the
        # searches above never revisit.
        i = cursor.track.last_started(t)
        max_ends = cursor.track.max_ends
        while i >= 0 and max_ends[i] > t:
            if t < blocks[i].end:
                _enter(cursor, i, update)
            i -= 1

    for index, block in list(cursor.active.items()):
        if t >= block.end or t < block.start:
            del cursor.active[index]
            update.exited.append(block)

    cursor.time = t
    return update


class BlockTracker:
    """One cursor over one track."""

    def __init__(self, track: Track):
        self.track = track
        self.cursor = TrackCursor(track)

    def update(self, t: float) -> TrackUpdate:
        update = advance(self.cursor, t)
        if update:
            logging.debug("t=%.3f index=%d +%d -%d active=%d", t, self.cursor.last_index,
                          len(update.entered), len(update.exited), len(self.cursor.active))
        return update

    def reset(self):
        self.cursor = TrackCursor(self.track)

    @property
    def active_blocks(self) -> List[Block]:
        return self.cursor.active_blocks
