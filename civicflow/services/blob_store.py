"""
Blob Store - the persistence collaborator.

A key-value store of named byte blobs plus boolean flags. The report store
and profile cache serialize their whole state into a blob and hand it here.

Every backend wraps its own failures in PersistenceError so callers deal
with one exception type.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional
import json
import logging
import os
import tempfile

from firebase_admin import firestore

from civicflow.core.errors import PersistenceError

logger = logging.getLogger(__name__)

# Blob keys
REPORTS_KEY = "reports"
PROFILES_KEY = "profiles"
CURRENT_PROFILE_KEY = "current_profile"

# Flag keys
HAS_SEEN_WELCOME_FLAG = "has_seen_welcome"


class BlobStore(ABC):
    """
    Abstract key-value blob store.

    Contract:
    - get() returns None for a missing key, never raises for it
    - put() completes the write before returning
    - backend failures surface as PersistenceError
    """

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    @abstractmethod
    def put(self, key: str, data: bytes) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_flag(self, key: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def set_flag(self, key: str, value: bool) -> None:
        raise NotImplementedError

    def describe(self) -> Dict[str, str]:
        """Short backend description for health checks."""
        return {"backend": type(self).__name__}


class MemoryBlobStore(BlobStore):
    """In-process store. Counts writes so callers can check that a miss wrote nothing."""

    def __init__(self, blobs: Optional[Dict[str, bytes]] = None):
        self.blobs: Dict[str, bytes] = dict(blobs or {})
        self.flags: Dict[str, bool] = {}
        self.write_count = 0

    def get(self, key: str) -> Optional[bytes]:
        return self.blobs.get(key)

    def put(self, key: str, data: bytes) -> None:
        self.blobs[key] = bytes(data)
        self.write_count += 1

    def delete(self, key: str) -> None:
        if self.blobs.pop(key, None) is not None:
            self.write_count += 1

    def get_flag(self, key: str) -> bool:
        return self.flags.get(key, False)

    def set_flag(self, key: str, value: bool) -> None:
        self.flags[key] = bool(value)
        self.write_count += 1


class FileBlobStore(BlobStore):
    """
    One file per blob under a data directory (local development backend).

    Writes go to a temporary file first and are moved into place, so a crash
    mid-write never leaves a half-written blob behind.
    """

    FLAGS_FILE = "flags.json"

    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir)

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.blob"

    def _write_atomic(self, path: Path, data: bytes) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{path.name}.")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, path)
        except Exception:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Failed to read blob '{key}' from {path}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to read blob '{key}': {e}") from e

    def put(self, key: str, data: bytes) -> None:
        try:
            self._write_atomic(self._path(key), data)
        except OSError as e:
            logger.error(f"Failed to write blob '{key}': {e}", exc_info=True)
            raise PersistenceError(f"Failed to write blob '{key}': {e}") from e

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Failed to delete blob '{key}': {e}", exc_info=True)
            raise PersistenceError(f"Failed to delete blob '{key}': {e}") from e

    def _read_flags(self) -> Dict[str, bool]:
        path = self.data_dir / self.FLAGS_FILE
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Flags file {path} unreadable, treating all flags as unset: {e}")
            return {}

    def get_flag(self, key: str) -> bool:
        return bool(self._read_flags().get(key, False))

    def set_flag(self, key: str, value: bool) -> None:
        flags = self._read_flags()
        flags[key] = bool(value)
        try:
            self._write_atomic(self.data_dir / self.FLAGS_FILE, json.dumps(flags).encode("utf-8"))
        except OSError as e:
            logger.error(f"Failed to write flag '{key}': {e}", exc_info=True)
            raise PersistenceError(f"Failed to write flag '{key}': {e}") from e

    def describe(self) -> Dict[str, str]:
        return {"backend": "file", "data_dir": str(self.data_dir)}


class FirestoreBlobStore(BlobStore):
    """
    Blobs as Firestore documents under one collection.

    Layout:
    - <key>: manifest {"chunks": n, "size": bytes, "updated_at": ...}
    - <key>__chunk_<i>: {"data": bytes}, i in 0..n-1
    - _flags: one boolean field per flag

    Firestore caps a document at 1 MiB, so a blob (photos included) is split
    into chunks and written in one batch. A batch request is itself capped,
    which bounds the total blob size.
    """

    FLAGS_DOCUMENT = "_flags"
    CHUNK_BYTES = 900 * 1024
    MAX_BLOB_BYTES = 9 * 1024 * 1024

    def __init__(self, client, collection: str):
        self.db = client
        self.collection = collection

    def _doc(self, key: str):
        return self.db.collection(self.collection).document(key)

    def _chunk_doc(self, key: str, index: int):
        return self._doc(f"{key}__chunk_{index}")

    def _manifest(self, key: str) -> Optional[Dict]:
        doc = self._doc(key).get()
        if not doc.exists:
            return None
        return doc.to_dict() or {}

    def get(self, key: str) -> Optional[bytes]:
        try:
            manifest = self._manifest(key)
            if manifest is None:
                return None

            # Blobs written before chunking kept their bytes on the manifest
            if "data" in manifest:
                data = manifest["data"]
                return bytes(data) if data is not None else None

            chunks = []
            for index in range(int(manifest.get("chunks", 0))):
                chunk = self._chunk_doc(key, index).get()
                if not chunk.exists:
                    raise PersistenceError(f"Blob '{key}' is missing chunk {index}")
                chunks.append(bytes((chunk.to_dict() or {}).get("data") or b""))
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Failed to read blob '{key}' from Firestore: {e}", exc_info=True)
            raise PersistenceError(f"Failed to read blob '{key}': {e}") from e

        data = b"".join(chunks)
        if len(data) != manifest.get("size", len(data)):
            raise PersistenceError(f"Blob '{key}' is incomplete ({len(data)} of {manifest['size']} bytes)")
        return data

    def put(self, key: str, data: bytes) -> None:
        data = bytes(data)
        if len(data) > self.MAX_BLOB_BYTES:
            logger.error(f"Blob '{key}' is {len(data)} bytes, over the {self.MAX_BLOB_BYTES} byte limit")
            raise PersistenceError(
                f"Blob '{key}' is too large to store ({len(data)} bytes, limit {self.MAX_BLOB_BYTES}); "
                f"remove some reports or photos"
            )

        chunks = [data[i:i + self.CHUNK_BYTES] for i in range(0, len(data), self.CHUNK_BYTES)]
        try:
            previous = self._manifest(key) or {}
            batch = self.db.batch()
            for index, chunk in enumerate(chunks):
                batch.set(self._chunk_doc(key, index), {"data": chunk})
            for index in range(len(chunks), int(previous.get("chunks", 0))):
                batch.delete(self._chunk_doc(key, index))
            batch.set(self._doc(key), {
                "chunks": len(chunks),
                "size": len(data),
                "updated_at": firestore.SERVER_TIMESTAMP,
            })
            batch.commit()
            logger.debug(f"Blob '{key}' written to Firestore ({len(data)} bytes, {len(chunks)} chunk(s))")
        except Exception as e:
            logger.error(f"Failed to write blob '{key}' to Firestore: {e}", exc_info=True)
            raise PersistenceError(f"Failed to write blob '{key}': {e}") from e

    def delete(self, key: str) -> None:
        try:
            previous = self._manifest(key) or {}
            batch = self.db.batch()
            for index in range(int(previous.get("chunks", 0))):
                batch.delete(self._chunk_doc(key, index))
            batch.delete(self._doc(key))
            batch.commit()
        except Exception as e:
            logger.error(f"Failed to delete blob '{key}' from Firestore: {e}", exc_info=True)
            raise PersistenceError(f"Failed to delete blob '{key}': {e}") from e

    def get_flag(self, key: str) -> bool:
        try:
            doc = self._doc(self.FLAGS_DOCUMENT).get()
        except Exception as e:
            logger.error(f"Failed to read flag '{key}' from Firestore: {e}", exc_info=True)
            raise PersistenceError(f"Failed to read flag '{key}': {e}") from e
        if not doc.exists:
            return False
        return bool((doc.to_dict() or {}).get(key, False))

    def set_flag(self, key: str, value: bool) -> None:
        try:
            self._doc(self.FLAGS_DOCUMENT).set({key: bool(value)}, merge=True)
        except Exception as e:
            logger.error(f"Failed to write flag '{key}' to Firestore: {e}", exc_info=True)
            raise PersistenceError(f"Failed to write flag '{key}': {e}") from e

    def describe(self) -> Dict[str, str]:
        return {"backend": "firestore", "collection": self.collection}
