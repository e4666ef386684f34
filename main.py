# main.py
import sys, os
sys.path.append(os.path.dirname(__file__))  # run as a script from any cwd

import argparse
import logging
from typing import List, Optional

import pygame

from config import AppConfig, RunConfig, TimeConfig, TimeControl, VolumeConfig
from notes.asset import load_midi_data
from timeline.clock import make_time_source
from timeline.curve import CURVES
from timeline.session import PlaybackSession
from utils.crashlog import log_dir, log_exception, setup_crashlog

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _init_logging(level: int = logging.INFO):
    root = logging.getLogger()
    if root.handlers:
        return

    logging.basicConfig(level=level, format=LOG_FORMAT, encoding="utf-8")
    try:
        from logging.handlers import RotatingFileHandler
        fh = RotatingFileHandler(os.path.join(log_dir(), "app.log"),
                                 maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(fh)
    except OSError:
        logging.warning("File logging disabled; could not open %s", log_dir(), exc_info=True)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Play a MIDI block asset headless and log block events.")
    ap.add_argument("asset", help="JSON asset with tracks of blocks")
    ap.add_argument("--time-source", default="manual", choices=["manual", "game", "audio"])
    ap.add_argument("--manual-time", type=float, default=0.0)
    ap.add_argument("--start-time", type=float, default=0.0)
    ap.add_argument("--audio", default=None, help="audio file played through pygame.mixer.music")
    ap.add_argument("--fps", type=int, default=60)
    ap.add_argument("--seconds", type=float, default=10.0)
    ap.add_argument("--global-velocity", action="store_true",
                    help="weight volume by velocity/127 instead of the track max velocity")
    ap.add_argument("--volume-every-frame", action="store_true")
    ap.add_argument("--curve", default="linear", choices=sorted(CURVES))
    ap.add_argument("--debug", action="store_true")
    return ap.parse_args(argv)


def build_config(args: argparse.Namespace) -> AppConfig:
    return AppConfig(
        time=TimeConfig(control=TimeControl(args.time_source),
                        start_time=args.start_time, manual_time=args.manual_time),
        volume=VolumeConfig(normalize_per_track=not args.global_velocity,
                            update_every_frame=args.volume_every_frame, curve=args.curve),
        run=RunConfig(fps=args.fps, seconds=args.seconds, display_debug=args.debug),
    )


def run(session: PlaybackSession, cfg: RunConfig, frames: Optional[int] = None) -> int:
    """Drive ``session`` from a pygame clock; returns the number of frames played."""
    clock = pygame.time.Clock()
    elapsed = 0.0
    n = 0
    while (frames is None and elapsed < cfg.seconds) or (frames is not None and n < frames):
        elapsed += clock.tick(cfg.fps) / 1000.0
        session.update()
        n += 1
    logging.info("Stopped after %d frames (t=%.2fs, volume=%.3f)",
                 n, session.get_current_time(), session.get_current_volume())
    return n


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    _init_logging(logging.DEBUG if args.debug else logging.INFO)
    cfg = build_config(args)
    try:
        pygame.init()
        if args.audio:
            pygame.mixer.init()
            pygame.mixer.music.load(args.audio)
            pygame.mixer.music.play()

        data = load_midi_data(args.asset)
        session = PlaybackSession(data, make_time_source(cfg.time), cfg)
        session.on_block_started.subscribe(
            lambda b: logging.info("start note=%d vel=%d [%.3f, %.3f)", b.note, b.velocity, b.start, b.end))
        session.on_block_completed.subscribe(
            lambda b: logging.info("end   note=%d [%.3f, %.3f)", b.note, b.start, b.end))
        logging.info("Playing %s (%d tracks)", data.name, len(data.tracks))
        run(session, cfg.run)
        return 0
    except Exception as e:
        path = log_exception("main", e)
        logging.error("Playback failed (details in %s): %s", path, e, exc_info=True)
        return 1
    finally:
        pygame.quit()


if __name__ == '__main__':
    setup_crashlog()
    sys.exit(main())
