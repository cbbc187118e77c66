"""Tests for MemoryRecordStore and FsRecordStore."""

import json
import shutil
import tempfile
from pathlib import Path

import pytest

from gitgov_core.record_store import (
    DEFAULT_ID_ENCODER,
    FsRecordStore,
    InvalidIdError,
    MemoryRecordStore,
    RecordEntry,
    validate_id,
)


@pytest.fixture
def temp_dir():
    path = tempfile.mkdtemp()
    yield path
    shutil.rmtree(path, ignore_errors=True)


class TestValidateId:
    @pytest.mark.parametrize("record_id", ["", "../etc", "a/b", "a\\b", "x..y"])
    def test_rejected(self, record_id):
        with pytest.raises(InvalidIdError):
            validate_id(record_id)

    @pytest.mark.parametrize("record_id", ["task-1", "human.camilo", "actor:bot"])
    def test_accepted(self, record_id):
        validate_id(record_id)

    def test_invalid_id_is_a_value_error(self):
        assert issubclass(InvalidIdError, ValueError)


class TestColonIdEncoder:
    def test_round_trip(self):
        encoded = DEFAULT_ID_ENCODER.encode("human:camilo")
        assert encoded == "human_camilo"
        assert DEFAULT_ID_ENCODER.decode(encoded) == "human:camilo"

    @pytest.mark.parametrize(
        "record_id", ["task-1", "human:camilo", "a:b:c", "human.camilo", "task#1", "my task", "x?y"]
    )
    def test_decode_inverts_encode_for_accepted_ids(self, record_id):
        validate_id(record_id)
        assert DEFAULT_ID_ENCODER.decode(DEFAULT_ID_ENCODER.encode(record_id)) == record_id

    def test_underscore_is_rejected(self):
        with pytest.raises(InvalidIdError):
            DEFAULT_ID_ENCODER.encode("task_1")


class TestMemoryRecordStore:
    @pytest.mark.asyncio
    async def test_crud(self):
        store = MemoryRecordStore()
        assert await store.get("a") is None

        await store.put("a", {"n": 1})
        assert await store.get("a") == {"n": 1}
        assert await store.exists("a") is True
        assert await store.list() == ["a"]

        await store.delete("a")
        await store.delete("a")
        assert await store.exists("a") is False
        assert store.size() == 0

    @pytest.mark.asyncio
    async def test_values_are_isolated_copies(self):
        store = MemoryRecordStore()
        value = {"tags": ["x"]}
        await store.put("a", value)
        value["tags"].append("y")

        loaded = await store.get("a")
        loaded["tags"].append("z")
        assert await store.get("a") == {"tags": ["x"]}

    @pytest.mark.asyncio
    async def test_shared_references_without_deep_clone(self):
        store = MemoryRecordStore(deep_clone=False)
        value = {"n": 1}
        await store.put("a", value)
        value["n"] = 2
        assert (await store.get("a"))["n"] == 2

    @pytest.mark.asyncio
    async def test_put_many_validates_all_before_writing(self):
        store = MemoryRecordStore()
        with pytest.raises(InvalidIdError):
            await store.put_many([RecordEntry("ok", 1), RecordEntry("bad/id", 2)])
        assert store.size() == 0

        await store.put_many([RecordEntry("a", 1), RecordEntry("b", 2)])
        assert store.get_all() == {"a": 1, "b": 2}

    @pytest.mark.asyncio
    async def test_invalid_id_on_every_operation(self):
        store = MemoryRecordStore()
        for call in (store.get("../x"), store.put("../x", 1), store.delete("../x"), store.exists("../x")):
            with pytest.raises(InvalidIdError):
                await call


class TestFsRecordStore:
    @pytest.mark.asyncio
    async def test_crud_writes_pretty_json(self, temp_dir):
        store = FsRecordStore(str(Path(temp_dir) / "tasks"))

        await store.put("task-1", {"title": "Write docs"})

        file_path = Path(temp_dir) / "tasks" / "task-1.json"
        assert file_path.read_text() == json.dumps({"title": "Write docs"}, indent=2)
        assert await store.get("task-1") == {"title": "Write docs"}
        assert await store.exists("task-1") is True

        await store.delete("task-1")
        await store.delete("task-1")
        assert await store.get("task-1") is None

    @pytest.mark.asyncio
    async def test_list_missing_dir_is_empty(self, temp_dir):
        store = FsRecordStore(str(Path(temp_dir) / "nope"))
        assert await store.list() == []

    @pytest.mark.asyncio
    async def test_list_filters_extension_and_decodes(self, temp_dir):
        base = Path(temp_dir) / "actors"
        store = FsRecordStore(str(base), id_encoder=DEFAULT_ID_ENCODER)
        await store.put("human:camilo", {"n": 1})
        await store.put("agent:bot", {"n": 2})
        (base / "notes.txt").write_text("ignored")

        assert (base / "human_camilo.json").exists()
        assert await store.list() == ["agent:bot", "human:camilo"]
        assert await store.get("human:camilo") == {"n": 1}

    @pytest.mark.asyncio
    async def test_custom_extension(self, temp_dir):
        store = FsRecordStore(temp_dir, extension=".rec")
        await store.put("a", [1, 2])
        assert (Path(temp_dir) / "a.rec").exists()
        assert await store.list() == ["a"]

    @pytest.mark.asyncio
    async def test_invalid_id_touches_nothing(self, temp_dir):
        store = FsRecordStore(str(Path(temp_dir) / "records"))
        with pytest.raises(InvalidIdError):
            await store.put("../escape", {})
        assert not (Path(temp_dir) / "records").exists()
        assert not (Path(temp_dir) / "escape.json").exists()

    @pytest.mark.asyncio
    async def test_put_many(self, temp_dir):
        store = FsRecordStore(temp_dir)
        await store.put_many([RecordEntry("a", 1), RecordEntry("b", 2)])
        assert await store.list() == ["a", "b"]

    @pytest.mark.asyncio
    async def test_encoded_ids_list_back_unchanged(self, temp_dir):
        store = FsRecordStore(temp_dir, id_encoder=DEFAULT_ID_ENCODER)
        for record_id in ("human:camilo", "task#1", "my task"):
            await store.put(record_id, {"id": record_id})

        listed = await store.list()
        assert sorted(listed) == ["human:camilo", "my task", "task#1"]
        for record_id in listed:
            assert await store.get(record_id) == {"id": record_id}

    @pytest.mark.asyncio
    async def test_underscore_id_with_encoder_writes_nothing(self, temp_dir):
        store = FsRecordStore(temp_dir, id_encoder=DEFAULT_ID_ENCODER)
        with pytest.raises(InvalidIdError):
            await store.put_many([RecordEntry("ok", 1), RecordEntry("task_1", 2)])
        assert await store.list() == []
