"""Tests for the block/track data model and asset building."""

import pytest

from notes.model import Block, MalformedTrackError, MidiData, Track, build_track


def test_build_track_sorts_and_normalizes():
    track = build_track([
        Block(2.0, 3.0, note=64, velocity=50),
        Block(0.0, 1.0, note=60, velocity=100),
        Block(1.0, 2.5, note=67, velocity=25),
    ])

    assert [b.start for b in track.blocks] == [0.0, 1.0, 2.0]
    assert track.min_note == 60
    assert track.max_note == 67
    assert track.max_velocity == 100
    assert [b.normalized_velocity for b in track.blocks] == [1.0, 0.25, 0.5]


def test_build_track_empty():
    track = build_track([])
    assert len(track) == 0
    assert track.duration == 0.0
    assert track.last_started(5.0) == -1


def test_zero_max_velocity_normalizes_to_zero():
    track = build_track([Block(0.0, 1.0, 60, 0)])
    assert track.blocks[0].normalized_velocity == 0.0


def test_unsorted_track_is_rejected():
    with pytest.raises(MalformedTrackError):
        Track(blocks=(Block(1.0, 2.0, 60, 10), Block(0.0, 1.0, 60, 10)))


def test_negative_duration_is_rejected():
    with pytest.raises(MalformedTrackError):
        build_track([Block(2.0, 1.0, 60, 10)])


def test_zero_length_block_is_allowed():
    track = build_track([Block(1.0, 1.0, 60, 10)])
    assert track.blocks[0].length == 0.0
    assert not track.blocks[0].contains(1.0)


def test_running_max_end_and_lookup():
    track = build_track([Block(0.0, 10.0, 60, 10), Block(1.0, 2.0, 62, 10), Block(3.0, 4.0, 64, 10)])
    assert track.max_ends == (10.0, 10.0, 10.0)
    assert track.last_started(0.5) == 0
    assert track.last_started(3.0) == 2
    assert track.last_started(-1.0) == -1
    assert track.blocks_at(3.5) == [track.blocks[0], track.blocks[2]]


def test_midi_data_duration():
    data = MidiData(name="song", tracks=[
        build_track([Block(0.0, 4.0, 60, 10)]),
        build_track([Block(1.0, 6.5, 60, 10)]),
        build_track([]),
    ])
    assert data.duration == 6.5
