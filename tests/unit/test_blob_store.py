from unittest.mock import MagicMock

import pytest

from civicflow.config.firebase import create_blob_store
from civicflow.core.errors import PersistenceError
from civicflow.core.settings import Settings
from civicflow.services.blob_store import FileBlobStore, FirestoreBlobStore, MemoryBlobStore


def test_memory_store_counts_writes():
    store = MemoryBlobStore()
    store.put("reports", b"one")
    store.delete("missing")
    store.delete("reports")
    store.set_flag("seen", True)

    assert store.write_count == 3
    assert store.get("reports") is None
    assert store.get_flag("seen") is True


def test_file_store_round_trip(tmp_path):
    store = FileBlobStore(str(tmp_path / "data"))
    assert store.get("reports") is None

    store.put("reports", b"\x00payload")
    assert store.get("reports") == b"\x00payload"
    assert FileBlobStore(str(tmp_path / "data")).get("reports") == b"\x00payload"

    store.delete("reports")
    store.delete("reports")
    assert store.get("reports") is None


def test_file_store_leaves_no_temp_files(tmp_path):
    store = FileBlobStore(str(tmp_path))
    store.put("profiles", b"a")
    store.put("profiles", b"b")

    assert sorted(p.name for p in tmp_path.iterdir()) == ["profiles.blob"]


def test_file_store_flags(tmp_path):
    store = FileBlobStore(str(tmp_path))
    assert store.get_flag("has_seen_welcome") is False

    store.set_flag("has_seen_welcome", True)
    assert FileBlobStore(str(tmp_path)).get_flag("has_seen_welcome") is True


def test_file_store_wraps_os_errors(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("file in the way")
    store = FileBlobStore(str(blocker))

    with pytest.raises(PersistenceError):
        store.put("reports", b"x")


class FakeSnapshot:
    def __init__(self, data):
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, db, doc_id):
        self.db = db
        self.id = doc_id

    def get(self):
        return FakeSnapshot(self.db.docs.get(self.id))

    def set(self, data, merge=False):
        if len(data.get("data", b"")) > FakeFirestore.MAX_DOCUMENT_BYTES:
            raise ValueError("InvalidArgument: document exceeds the maximum size")
        current = self.db.docs.get(self.id, {}) if merge else {}
        self.db.docs[self.id] = {**current, **data}

    def delete(self):
        self.db.docs.pop(self.id, None)


class FakeBatch:
    def __init__(self, db):
        self.db = db
        self.ops = []

    def set(self, doc, data):
        self.ops.append((doc.set, data))

    def delete(self, doc):
        self.ops.append((lambda _: doc.delete(), None))

    def commit(self):
        for op, data in self.ops:
            op(data)
        self.db.commits += 1


class FakeFirestore:
    """Single-collection stand-in that enforces the per-document size cap."""

    MAX_DOCUMENT_BYTES = 1024 * 1024

    def __init__(self):
        self.docs = {}
        self.commits = 0
        self.collections = []

    def collection(self, name):
        self.collections.append(name)
        return self

    def document(self, doc_id):
        return FakeDocument(self, doc_id)

    def batch(self):
        return FakeBatch(self)


@pytest.fixture
def firestore_db():
    return FakeFirestore()


def test_firestore_get_missing_document(firestore_db):
    store = FirestoreBlobStore(firestore_db, "blobs")

    assert store.get("reports") is None
    assert store.get_flag("has_seen_welcome") is False


def test_firestore_round_trip(firestore_db):
    store = FirestoreBlobStore(firestore_db, "blobs")

    store.put("reports", b"abc")
    assert store.get("reports") == b"abc"
    assert firestore_db.collections[0] == "blobs"
    assert firestore_db.docs["reports"]["size"] == 3
    assert "updated_at" in firestore_db.docs["reports"]


def test_firestore_large_blob_is_split_under_the_document_cap(firestore_db):
    store = FirestoreBlobStore(firestore_db, "blobs")
    data = bytes(range(256)) * 12 * 1024  # 3 MiB

    store.put("reports", data)

    assert firestore_db.docs["reports"]["chunks"] == 4
    assert all(len(doc.get("data", b"")) <= FakeFirestore.MAX_DOCUMENT_BYTES for doc in firestore_db.docs.values())
    assert store.get("reports") == data


def test_firestore_shrinking_blob_drops_stale_chunks(firestore_db):
    store = FirestoreBlobStore(firestore_db, "blobs")
    store.put("reports", b"x" * (FirestoreBlobStore.CHUNK_BYTES * 2 + 1))
    store.put("reports", b"small")

    assert store.get("reports") == b"small"
    assert sorted(firestore_db.docs) == ["reports", "reports__chunk_0"]


def test_firestore_oversized_blob_is_rejected_before_writing(firestore_db):
    store = FirestoreBlobStore(firestore_db, "blobs")
    store.put("reports", b"old")

    with pytest.raises(PersistenceError, match="too large"):
        store.put("reports", b"x" * (FirestoreBlobStore.MAX_BLOB_BYTES + 1))
    assert store.get("reports") == b"old"


def test_firestore_reads_unchunked_documents(firestore_db):
    firestore_db.docs["reports"] = {"data": b"legacy"}
    assert FirestoreBlobStore(firestore_db, "blobs").get("reports") == b"legacy"


def test_firestore_missing_chunk_is_a_persistence_error(firestore_db):
    store = FirestoreBlobStore(firestore_db, "blobs")
    store.put("reports", b"abc")
    del firestore_db.docs["reports__chunk_0"]

    with pytest.raises(PersistenceError):
        store.get("reports")


def test_firestore_delete_removes_chunks(firestore_db):
    store = FirestoreBlobStore(firestore_db, "blobs")
    store.put("current_profile", b"abc")
    store.delete("current_profile")
    store.delete("current_profile")

    assert firestore_db.docs == {}


def test_firestore_flags(firestore_db):
    store = FirestoreBlobStore(firestore_db, "blobs")
    store.set_flag("has_seen_welcome", True)

    assert store.get_flag("has_seen_welcome") is True
    assert firestore_db.docs["_flags"] == {"has_seen_welcome": True}


def test_firestore_failures_become_persistence_errors():
    doc = MagicMock()
    doc.get.side_effect = RuntimeError("deadline exceeded")
    client = MagicMock()
    client.collection.return_value.document.return_value = doc
    store = FirestoreBlobStore(client, "blobs")

    with pytest.raises(PersistenceError):
        store.get("reports")
    with pytest.raises(PersistenceError):
        store.put("reports", b"x")


@pytest.mark.parametrize("backend,expected", [
    ("memory", MemoryBlobStore),
    ("file", FileBlobStore),
    ("FILE", FileBlobStore),
])
def test_create_blob_store(tmp_path, backend, expected):
    config = Settings(STORAGE_BACKEND=backend, DATA_DIR=str(tmp_path))
    assert isinstance(create_blob_store(config), expected)


def test_create_blob_store_rejects_unknown_backend():
    with pytest.raises(ValueError):
        create_blob_store(Settings(STORAGE_BACKEND="s3"))
