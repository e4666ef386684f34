"""Tests for PlaybackSession: event delivery, per-frame caching and volume."""

import logging
from unittest.mock import MagicMock

import pytest

from config import AppConfig, RunConfig, VolumeConfig
from notes.model import Block, MidiData, build_track
from timeline.clock import ManualTime
from timeline.session import BlockEvent, PlaybackSession


def make_data():
    return MidiData(name="test", tracks=[
        build_track([Block(0.0, 1.0, 60, 100), Block(1.0, 2.0, 62, 50)]),
        build_track([]),
        build_track([Block(0.5, 3.0, 48, 80)]),
    ])


class TestPlaybackSession:

    def setup_method(self):
        self.clock = ManualTime(0.0)
        self.session = PlaybackSession(make_data(), self.clock)
        self.events = []
        self.session.on_block_started.subscribe(lambda b: self.events.append(("start", b.note)))
        self.session.on_block_completed.subscribe(lambda b: self.events.append(("end", b.note)))

    def play(self, t):
        self.clock.set(t)
        self.events.clear()
        self.session.update()
        return list(self.events)

    def test_one_tracker_per_track(self):
        assert len(self.session.trackers) == 3

    def test_events_in_track_order_enters_first(self):
        assert self.play(0.0) == [("start", 60)]
        assert self.play(0.75) == [("start", 48)]
        assert self.play(1.5) == [("start", 62), ("end", 60)]
        assert self.play(5.0) == [("end", 62), ("end", 48)]
        assert self.session.active_blocks() == []

    def test_seek_backward_restores_active_blocks(self):
        self.play(2.5)
        assert [b.note for b in self.session.active_blocks()] == [48]
        assert self.play(0.75) == [("start", 60)]
        assert sorted(b.note for b in self.session.active_blocks()) == [48, 60]

    def test_time_is_read_once_per_frame(self):
        source = MagicMock()
        source.read.side_effect = [1.0, 2.0]
        session = PlaybackSession(make_data(), source)

        session.update()
        assert session.get_current_time() == 1.0
        assert session.get_current_time() == 1.0
        assert source.read.call_count == 1

        session.update()
        assert session.get_current_time() == 2.0
        assert source.read.call_count == 2

    def test_explicit_frame_numbers(self):
        self.clock.set(0.5)
        self.session.update(frame=10)
        self.clock.set(1.5)
        self.session.update(frame=10)
        assert self.session.get_current_time() == 0.5
        self.session.update(frame=11)
        assert self.session.get_current_time() == 1.5

    def test_volume_sums_all_tracks(self):
        self.play(0.5)
        # track 0: (1 - 0.5) * 1.0, track 2: just started, 1.0 * 1.0
        assert self.session.get_current_volume() == pytest.approx(1.5)

    def test_volume_with_global_velocity(self):
        cfg = AppConfig(volume=VolumeConfig(normalize_per_track=False, curve="flat"))
        session = PlaybackSession(make_data(), ManualTime(0.5), cfg)
        session.update()
        assert session.get_current_volume() == pytest.approx((100 + 80) / 127)

    def test_volume_every_frame(self):
        cfg = AppConfig(volume=VolumeConfig(update_every_frame=True))
        session = PlaybackSession(make_data(), ManualTime(0.5), cfg)
        session.update()
        assert session.volume._cache.frame == session.frame

    def test_unsubscribe_and_reset(self):
        listener = MagicMock()
        self.session.on_block_started.subscribe(listener)
        self.session.on_block_started.unsubscribe(listener)
        self.play(0.5)
        listener.assert_not_called()

        self.session.reset()
        assert self.session.active_blocks() == []
        assert all(t.cursor.last_index == -1 for t in self.session.trackers)

    def test_debug_text_logged(self, caplog):
        cfg = AppConfig(run=RunConfig(display_debug=True))
        session = PlaybackSession(make_data(), ManualTime(0.75), cfg)
        with caplog.at_level(logging.DEBUG):
            session.update()
        assert "MIDI test playing (0.75s)" in caplog.text
        assert "track 2 - (1 active blocks)" in caplog.text


def test_block_event_registry():
    event = BlockEvent()
    seen = []
    cb = event.subscribe(seen.append)
    assert len(event) == 1

    block = Block(0.0, 1.0, 60, 100)
    event.emit(block)
    event.unsubscribe(cb)
    event.unsubscribe(cb)
    event.emit(block)

    assert seen == [block]
    assert len(event) == 0
