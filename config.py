# ========================= config.py =========================
from dataclasses import dataclass, field
from enum import Enum


class TimeControl(str, Enum):
    MANUAL = "manual"
    GAME = "game"          # pygame clock minus start_time
    AUDIO = "audio"        # pygame.mixer.music position
    TIMELINE = "timeline"  # external position callable minus start_time


@dataclass
class TimeConfig:
    control: TimeControl = TimeControl.MANUAL
    start_time: float = 0.0
    manual_time: float = 0.0


@dataclass
class VolumeConfig:
    # normalize by the track's own max velocity instead of 127
    normalize_per_track: bool = True
    update_every_frame: bool = False
    curve: str = "linear"


@dataclass
class RunConfig:
    fps: int = 60
    seconds: float = 10.0
    display_debug: bool = False


@dataclass
class AppConfig:
    time: TimeConfig = field(default_factory=TimeConfig)
    volume: VolumeConfig = field(default_factory=VolumeConfig)
    run: RunConfig = field(default_factory=RunConfig)
