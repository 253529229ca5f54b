import json
import logging
import threading

import pytest

from semitools.core.exceptions import PersistenceDecodeError
from semitools.core.models import BinDefinition, DataSet
from semitools.io.persistence import (
    InMemoryBlobStore, JsonFileBlobStore, SessionStateBlobStore,
    encode_collection, decode_collection, load_collection, save_collection
)


def test_encode_decode_collection():
    items = [DataSet(name="A", values=[1.0, 2.0]), DataSet(name="B")]
    blob = encode_collection(items)
    assert isinstance(json.loads(blob), list)
    assert decode_collection("statisticalDataSets", blob, DataSet.from_dict) == items


@pytest.mark.parametrize("blob", [
    "not json",
    '{"name": "A"}',
    '[{"name": "A"}]',
    '[{"id": "x", "name": "Good", "color": "purple-ish"}]',
])
def test_decode_rejects_malformed_blobs(blob):
    with pytest.raises(PersistenceDecodeError) as exc_info:
        decode_collection("yieldBins", blob, BinDefinition.from_dict)
    assert exc_info.value.key == "yieldBins"


def test_load_collection_absent_key_returns_none(blob_store):
    assert load_collection(blob_store, "yieldBins", BinDefinition.from_dict) is None


def test_load_collection_decode_failure_falls_back(blob_store, caplog):
    blob_store.save("yieldBins", "[{broken")
    with caplog.at_level(logging.WARNING):
        assert load_collection(blob_store, "yieldBins", BinDefinition.from_dict) is None
    assert "Falling back" in caplog.text


def test_save_then_load_round_trip(blob_store):
    bins = [BinDefinition(name="Good", color="#34C759"), BinDefinition(name="Fail", color="#FF3B30")]
    save_collection(blob_store, "yieldBins", bins)
    assert load_collection(blob_store, "yieldBins", BinDefinition.from_dict) == bins
    assert blob_store.keys() == ["yieldBins"]


def test_json_file_store(tmp_path):
    path = tmp_path / "nested" / "storage.json"
    store = JsonFileBlobStore(path)
    assert store.load("yieldBins") is None

    store.save("yieldBins", "[]")
    store.save("yieldRecords", "[1]")

    reopened = JsonFileBlobStore(path)
    assert reopened.load("yieldBins") == "[]"
    assert reopened.load("yieldRecords") == "[1]"
    assert list(path.parent.glob("*.tmp")) == []


def test_json_file_store_corrupt_file_starts_empty(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{corrupt", encoding="utf-8")
    store = JsonFileBlobStore(path)
    assert store.load("yieldBins") is None
    store.save("yieldBins", "[]")
    assert store.load("yieldBins") == "[]"


def test_session_state_store_namespaces_keys():
    state = {}
    store = SessionStateBlobStore(state)
    store.save("yieldBins", "[]")
    assert state == {"blob::yieldBins": "[]"}
    assert store.load("yieldBins") == "[]"
    assert store.load("yieldRecords") is None


def test_in_memory_store_initial_contents():
    store = InMemoryBlobStore({"k": "v"})
    assert store.load("k") == "v"


def test_json_file_stores_on_one_path_share_a_lock(tmp_path):
    a = JsonFileBlobStore(tmp_path / "storage.json")
    b = JsonFileBlobStore(str(tmp_path / "storage.json"))
    assert a.lock is b.lock
    assert JsonFileBlobStore(tmp_path / "other.json").lock is not a.lock


def test_concurrent_saves_of_different_keys_keep_every_key(tmp_path):
    path = tmp_path / "storage.json"
    keys = [f"key{i}" for i in range(8)]

    def write(key):
        JsonFileBlobStore(path).save(key, f'["{key}"]')

    threads = [threading.Thread(target=write, args=(key,)) for key in keys]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    reopened = JsonFileBlobStore(path)
    assert all(reopened.load(key) == f'["{key}"]' for key in keys)
