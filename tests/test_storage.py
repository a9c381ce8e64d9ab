import asyncio
import json

from spotlight_app.storage import KeyValueStore, MemoryBackend, FileBackend, create_store


def roundtrip(store):
    async def scenario():
        await store.set_json("spaces", [{'id': 1, 'name': "Work"}])
        value = await store.get_json("spaces")
        await store.delete("spaces")
        return value, await store.get_json("spaces")
    return asyncio.run(scenario())


def test_memory_store():
    value, after_delete = roundtrip(KeyValueStore(MemoryBackend()))
    assert value == [{'id': 1, 'name': "Work"}]
    assert after_delete is None


def test_memory_backend_evicts_oldest():
    backend = MemoryBackend(max_size=2)
    backend.set("a", "1")
    backend.set("b", "2")
    backend.get("a")
    backend.set("c", "3")
    assert backend.get("b") is None
    assert backend.get("a") == "1"


def test_file_store_persists_to_disk(tmp_path):
    path = tmp_path / "state" / "spotlight.json"
    store = KeyValueStore(FileBackend(str(path)), prefix="t:")

    asyncio.run(store.set_json("spaceUrlCache", {'folderId': "20"}))

    assert json.loads(path.read_text())["t:spaceUrlCache"] == json.dumps({'folderId': "20"})
    reopened = KeyValueStore(FileBackend(str(path)), prefix="t:")
    assert asyncio.run(reopened.get_json("spaceUrlCache")) == {'folderId': "20"}


def test_corrupt_values_read_as_missing(tmp_path):
    path = tmp_path / "spotlight.json"
    path.write_text("{not json")
    store = KeyValueStore(FileBackend(str(path)))
    assert asyncio.run(store.get_json("anything")) is None

    backend = MemoryBackend()
    backend.set("spotlight:broken", "{")
    assert asyncio.run(KeyValueStore(backend).get_json("broken")) is None


def test_create_store_selection(tmp_path):
    assert isinstance(create_store().backend, MemoryBackend)
    assert isinstance(create_store(path=str(tmp_path / "s.json")).backend, FileBackend)


def test_unreachable_redis_falls_back_to_memory():
    store = create_store(redis_url="redis://127.0.0.1:1/0")
    assert isinstance(store.backend, MemoryBackend)
