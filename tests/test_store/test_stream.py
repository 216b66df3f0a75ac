"""Tests for KeyStream and Store.stream."""

import asyncio
import re

import pytest

from lazykv import KeyStream, Store
from lazykv.stream import MISSING


@pytest.fixture
async def letters(tmp_path):
    path = tmp_path / "letters.json"
    path.write_text('{"alpha": 1, "beta": 2, "alpine": 3, "gamma": 4}')
    s = Store(quiescence_window=60)
    await s.open(path).wait_loaded()
    yield s
    await s.close()


async def collect(stream):
    return [(key, value) async for key, value in stream]


async def test_streams_all_entries_in_order(letters):
    stream = await letters.stream()
    assert await collect(stream) == [("alpha", 1), ("beta", 2), ("alpine", 3), ("gamma", 4)]


async def test_streams_match_get_all(store):
    data = {}
    stream = await store.stream()
    await stream.consume(lambda key, value: data.__setitem__(key, value))
    assert data == await store.get_all()


async def test_filter_pattern(letters):
    stream = await letters.stream("^al")
    assert await collect(stream) == [("alpha", 1), ("alpine", 3)]


async def test_filter_accepts_compiled_pattern(letters):
    stream = await letters.stream(re.compile("MA$", re.IGNORECASE))
    assert await collect(stream) == [("gamma", 4)]


async def test_invalid_pattern_raises(letters):
    with pytest.raises(re.error):
        await letters.stream("(")


async def test_keys_added_later_are_not_streamed(letters):
    stream = await letters.stream()
    await letters.set("delta", 5)
    assert [key for key, _ in await collect(stream)] == ["alpha", "beta", "alpine", "gamma"]


async def test_keys_removed_mid_stream_are_skipped(letters):
    seen = []
    stream = await letters.stream()
    async for key, _ in stream:
        seen.append(key)
        if key == "alpha":
            await letters.remove("alpine")
    assert seen == ["alpha", "beta", "gamma"]


async def test_values_reflect_current_mapping(letters):
    stream = await letters.stream()
    await letters.set("gamma", 40)
    assert (await collect(stream))[-1] == ("gamma", 40)


async def test_streamed_values_are_copies(tmp_path):
    path = tmp_path / "obj.json"
    path.write_text('{"obj": {"items": [1]}}')
    async with Store().open(path) as s:
        stream = await s.stream()
        async for _, value in stream:
            value["items"].append(2)
        assert await s.get("obj") == {"items": [1]}


async def test_consume_stops_on_false_and_still_ends(letters):
    seen = []
    ended = []

    def on_data(key, value):
        seen.append(key)
        return key != "beta"

    stream = await letters.stream()
    await stream.consume(on_data, lambda: ended.append(True))
    assert seen == ["alpha", "beta"]
    assert ended == [True]
    assert stream.stopped


async def test_consume_calls_end_once_when_exhausted(letters):
    ended = []
    stream = await letters.stream("^zzz")
    await stream.consume(lambda key, value: None, lambda: ended.append(True))
    assert ended == [True]


async def test_consume_accepts_coroutine_handlers(letters):
    seen = []

    async def on_data(key, value):
        seen.append(key)

    stream = await letters.stream("a$")
    await stream.consume(on_data)
    assert seen == ["alpha", "beta", "gamma"]


async def test_stream_yields_to_event_loop(letters):
    ticks = []

    async def ticker():
        for _ in range(10):
            ticks.append(len(ticks))
            await asyncio.sleep(0)

    async def reader():
        order = []
        stream = await letters.stream()
        async for key, _ in stream:
            order.append((key, len(ticks)))
        return order

    order, _ = await asyncio.gather(reader(), ticker())
    tick_counts = [count for _, count in order]
    assert tick_counts == sorted(tick_counts)
    assert tick_counts[0] < tick_counts[-1]


async def test_stop_from_outside(letters):
    stream = await letters.stream()
    first = await stream.__anext__()
    stream.stop()
    assert first == ("alpha", 1)
    assert await collect(stream) == []


async def test_stream_requested_while_loading(data_file):
    s = Store().open(data_file)
    stream = await s.stream()
    assert [key for key, _ in await collect(stream)] == ["test", "nested"]
    await s.close()


async def test_key_stream_standalone():
    data = {"a": 1, "b": 2}
    stream = KeyStream(["a", "b", "c"], lambda key: data.get(key, MISSING))
    assert await collect(stream) == [("a", 1), ("b", 2)]
