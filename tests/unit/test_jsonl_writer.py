# tests/unit/test_jsonl_writer.py
import json

import pytest

from core.events import Event, event_dump
from plugins.writers.jsonl.impl import METADATA_FILE, JsonlBagWriter
from recording.event_writer import JsonlWriter
from sdk.events import StorageOptions

NS = 1_000_000_000


class FakeClock:
    def __init__(self):
        self.now = 0

    def __call__(self):
        return self.now


def _count(path):
    return len(path.read_text(encoding="utf-8").splitlines())


def test_splits_on_duration(tmp_path):
    clock = FakeClock()
    bag = tmp_path / "Bag_x"
    writer = JsonlBagWriter(clock=clock)
    writer.open(StorageOptions(uri=str(bag), max_bagfile_duration=60))

    writer.write(Event(topic="/a", data=1, ts_ms=0))
    clock.now = 59 * NS
    writer.write(Event(topic="/a", data=2, ts_ms=59_000))
    clock.now = 60 * NS
    writer.write(Event(topic="/a", data=3, ts_ms=60_000))
    clock.now = 130 * NS
    writer.write(Event(topic="/b", data=4, ts_ms=130_000))
    writer.close()

    assert _count(bag / "Bag_x_0.jsonl") == 2
    assert _count(bag / "Bag_x_1.jsonl") == 1
    assert _count(bag / "Bag_x_2.jsonl") == 1

    meta = json.loads((bag / METADATA_FILE).read_text(encoding="utf-8"))
    assert meta["message_count"] == 4
    assert [f["message_count"] for f in meta["files"]] == [2, 1, 1]
    assert meta["files"][0]["duration_ms"] == 59_000
    assert meta["topics"] == {"/a": 3, "/b": 1}
    assert meta["closed_ts_ms"] is not None


def test_splits_on_size(tmp_path):
    bag = tmp_path / "Bag_size"
    writer = JsonlBagWriter(clock=FakeClock())
    writer.open(StorageOptions(uri=str(bag), max_bagfile_size=1, max_bagfile_duration=0))
    for i in range(3):
        writer.write(Event(topic="/a", data=i))
    writer.close()
    assert sorted(p.name for p in bag.glob("*.jsonl")) == ["Bag_size_0.jsonl", "Bag_size_1.jsonl", "Bag_size_2.jsonl"]


def test_no_limits_keeps_one_file(tmp_path):
    clock = FakeClock()
    bag = tmp_path / "Bag_one"
    writer = JsonlBagWriter(clock=clock)
    writer.open(StorageOptions(uri=str(bag), max_bagfile_duration=0))
    for i in range(5):
        clock.now = i * 1000 * NS
        writer.write(Event(topic="/a", data=i))
    writer.close()
    assert [p.name for p in bag.glob("*.jsonl")] == ["Bag_one_0.jsonl"]


def test_empty_bag_still_gets_metadata(tmp_path):
    bag = tmp_path / "Bag_empty"
    writer = JsonlBagWriter()
    writer.open(StorageOptions(uri=str(bag)))
    writer.close()
    meta = json.loads((bag / METADATA_FILE).read_text(encoding="utf-8"))
    assert meta["message_count"] == 0
    assert len(meta["files"]) == 1


def test_write_before_open_raises(tmp_path):
    with pytest.raises(RuntimeError):
        JsonlBagWriter().write(Event(topic="/a"))


def test_close_is_idempotent(tmp_path):
    writer = JsonlBagWriter()
    writer.open(StorageOptions(uri=str(tmp_path / "Bag_c")))
    writer.close()
    writer.close()
    assert not writer.is_open


def test_jsonl_writer_caches_until_threshold(tmp_path):
    out = tmp_path / "x.jsonl"
    w = JsonlWriter(out, cache_bytes=10_000)
    w.write({"a": 1})
    assert out.read_text(encoding="utf-8") == ""
    w.flush()
    assert _count(out) == 1
    w.close()


def test_jsonl_writer_write_through(tmp_path):
    out = tmp_path / "x.jsonl"
    w = JsonlWriter(out)
    size = w.write({"a": 1})
    assert out.read_text(encoding="utf-8") == '{"a": 1}\n'
    assert size == w.bytes_written == len('{"a": 1}\n')
    w.close()


def test_failed_open_leaves_no_directory(tmp_path, monkeypatch):
    import plugins.writers.jsonl.impl as impl

    def _refuse(*_args, **_kwargs):
        raise OSError("no space left on device")

    bag = tmp_path / "Bag_x"
    monkeypatch.setattr(impl, "JsonlWriter", _refuse)
    writer = JsonlBagWriter()
    with pytest.raises(OSError):
        writer.open(StorageOptions(uri=str(bag)))
    assert not bag.exists()
    assert not writer.is_open

    monkeypatch.undo()
    writer.open(StorageOptions(uri=str(bag)))
    writer.close()
    assert (bag / METADATA_FILE).exists()


def test_event_keeps_extra_fields():
    event = Event(topic="/a", data={"x": 1}, source="lab")
    dumped = event_dump(event)
    assert dumped["source"] == "lab"
    assert dumped["data"] == {"x": 1}
