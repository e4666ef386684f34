# notes/model.py
from bisect import bisect_right
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Tuple

MAX_VELOCITY = 127


class MalformedTrackError(ValueError):
    """Track blocks are not sorted by start time or have a negative duration."""


@dataclass(frozen=True)
class Block:
    start: float    # seconds
    end: float      # seconds
    note: int       # MIDI note number
    velocity: int   # 0..127
    normalized_velocity: float = 0.0

    @property
    def length(self) -> float:
        return self.end - self.start

    def contains(self, t: float) -> bool:
        return self.start <= t < self.end


@dataclass(frozen=True)
class Track:
    """Blocks of one MIDI track, sorted by start time.

    Shared read-only between playback sessions; per-session state lives in
    ``timeline.tracker.TrackCursor``.
    """
    blocks: Tuple[Block, ...] = ()
    min_note: int = 0
    max_note: int = 0
    max_velocity: int = 0
    starts: Tuple[float, ...] = field(init=False, repr=False, compare=False)
    max_ends: Tuple[float, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        blocks = tuple(self.blocks)
        for i, b in enumerate(blocks):
            if b.end < b.start:
                raise MalformedTrackError(
                    f"block {i} ends before it starts ({b.start} > {b.end})")
            if i and b.start < blocks[i - 1].start:
                raise MalformedTrackError(
                    f"block {i} starts at {b.start}, before block {i - 1} ({blocks[i - 1].start})")
        object.__setattr__(self, "blocks", blocks)
        object.__setattr__(self, "starts", tuple(b.start for b in blocks))
        # running max of end times over blocks[0..i]
        max_ends: List[float] = []
        hi = float("-inf")
        for b in blocks:
            hi = max(hi, b.end)
            max_ends.append(hi)
        object.__setattr__(self, "max_ends", tuple(max_ends))

    def __len__(self) -> int:
        return len(self.blocks)

    def __getitem__(self, index: int) -> Block:
        return self.blocks[index]

    @property
    def duration(self) -> float:
        return self.max_ends[-1] if self.max_ends else 0.0

    def last_started(self, t: float) -> int:
        """Index of the last block with start <= t, or -1."""
        return bisect_right(self.starts, t) - 1

    def blocks_at(self, t: float) -> List[Block]:
        return [b for b in self.blocks if b.contains(t)]


@dataclass
class MidiData:
    name: str = ""
    tracks: List[Track] = field(default_factory=list)

    @property
    def duration(self) -> float:
        return max((t.duration for t in self.tracks), default=0.0)


def build_track(blocks: Iterable[Block]) -> Track:
    """Sort raw blocks, fill in normalized velocity and per-track stats."""
    raw = sorted(blocks, key=lambda b: (b.start, b.note))
    if not raw:
        return Track()
    max_vel = max(b.velocity for b in raw)
    norm = [replace(b, normalized_velocity=(b.velocity / max_vel) if max_vel > 0 else 0.0)
            for b in raw]
    return Track(
        blocks=tuple(norm),
        min_note=min(b.note for b in raw),
        max_note=max(b.note for b in raw),
        max_velocity=max_vel,
    )
