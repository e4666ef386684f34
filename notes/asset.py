# notes/asset.py
import json
import logging
from typing import Any, Dict

from notes.model import Block, MalformedTrackError, MidiData, build_track


def serialize_midi_data(data: MidiData) -> dict:
    """Plain dict form, blocks as start/end/note/velocity."""
    return {
        "name": data.name,
        "tracks": [
            {"blocks": [{"start": b.start, "end": b.end, "note": b.note, "velocity": b.velocity}
                        for b in track.blocks]}
            for track in data.tracks
        ],
    }


def deserialize_midi_data(obj: Dict[str, Any]) -> MidiData:
    tracks = []
    for ti, raw_track in enumerate(obj.get("tracks", [])):
        blocks = []
        for bi, raw in enumerate(raw_track.get("blocks", [])):
            try:
                blocks.append(Block(start=float(raw["start"]), end=float(raw["end"]),
                                    note=int(raw["note"]), velocity=int(raw["velocity"])))
            except (KeyError, TypeError, ValueError) as e:
                raise MalformedTrackError(f"track {ti} block {bi}: {e!r}") from e
        tracks.append(build_track(blocks))
    return MidiData(name=str(obj.get("name", "")), tracks=tracks)


def load_midi_data(path: str) -> MidiData:
    with open(path, "r", encoding="utf-8") as f:
        obj = json.load(f)
    data = deserialize_midi_data(obj)
    if not data.name:
        data.name = path.replace("\\", "/").split("/")[-1]
    logging.debug("Loaded %s: %d tracks, %d blocks, %.2fs",
                  data.name, len(data.tracks), sum(len(t) for t in data.tracks), data.duration)
    return data


def save_midi_data(path: str, data: MidiData):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(serialize_midi_data(data), f, ensure_ascii=False, indent=2)
