# timeline/clock.py
import logging
from typing import Callable, Optional

import pygame

from config import TimeConfig, TimeControl


class MissingTimeSourceError(RuntimeError):
    pass


class ManualTime:
    def __init__(self, value: float = 0.0):
        self.value = value

    def set(self, value: float):
        self.value = value

    def read(self) -> float:
        return self.value


class GameTime:
    """Seconds since pygame.init(), shifted by start_time."""

    def __init__(self, start_time: float = 0.0):
        self.start_time = start_time

    def read(self) -> float:
        return pygame.time.get_ticks() / 1000.0 - self.start_time


class AudioTime:
    """Position of the streaming music player (pygame.mixer.music by default)."""

    def __init__(self, music=None):
        self.music = music if music is not None else pygame.mixer.music

    def read(self) -> float:
        if not pygame.mixer.get_init():
            raise MissingTimeSourceError("pygame.mixer is not initialised")
        pos = self.music.get_pos()
        # get_pos() is -1 while nothing is playing
        return max(0, pos) / 1000.0


class TimelineTime:
    def __init__(self, position: Callable[[], float], start_time: float = 0.0):
        self.position = position
        self.start_time = start_time

    def read(self) -> float:
        return float(self.position()) - self.start_time


def make_time_source(cfg: TimeConfig, position: Optional[Callable[[], float]] = None):
    control = TimeControl(cfg.control)
    if control is TimeControl.MANUAL:
        return ManualTime(cfg.manual_time)
    if control is TimeControl.GAME:
        return GameTime(cfg.start_time)
    if control is TimeControl.AUDIO:
        if not pygame.mixer.get_init():
            logging.warning("Audio time selected but pygame.mixer is not initialised")
        return AudioTime()
    if position is None:
        raise MissingTimeSourceError("Timeline time selected without a position source")
    return TimelineTime(position, cfg.start_time)
