"""
Persistence Module.

Every store keeps its collection in memory and flushes it wholesale to a
key-value blob store after each mutation. The blob store is injected, so the
Streamlit app, the JSON file backend and the test suite all share one contract:

    load(key) -> Optional[str]
    save(key, blob) -> None
    lock                      re-entrant lock guarding read-modify-write cycles

Blobs are JSON arrays of field-for-field dicts produced by the models'
``to_dict`` methods.
"""
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, Protocol, TypeVar, Union

import streamlit as st

from semitools.core.exceptions import PersistenceDecodeError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BlobStore(Protocol):
    lock: threading.RLock

    def load(self, key: str) -> Optional[str]: ...

    def save(self, key: str, blob: str) -> None: ...


class InMemoryBlobStore:
    """Dictionary-backed store. Used by the test suite and for scratch sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._blobs: Dict[str, str] = dict(initial or {})
        self.lock = threading.RLock()

    def load(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    def save(self, key: str, blob: str) -> None:
        self._blobs[key] = blob

    def keys(self) -> List[str]:
        return sorted(self._blobs.keys())


# One lock per storage file, shared by every JsonFileBlobStore opened on it
_FILE_LOCKS: Dict[Path, threading.RLock] = {}
_FILE_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    with _FILE_LOCKS_GUARD:
        return _FILE_LOCKS.setdefault(path, threading.RLock())


class JsonFileBlobStore:
    """
    Keeps every collection in a single JSON document on disk.
    The document is rewritten through a temporary file on every save so a
    crash mid-write never leaves a truncated file behind. Stores opened on
    the same path share one lock.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser().resolve()
        self.lock = _lock_for(self.path)

    def _read_document(self) -> Dict[str, str]:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Storage file '{self.path}' is unreadable ({e}). Starting empty.")
            return {}
        if not isinstance(document, dict):
            logger.warning(f"Storage file '{self.path}' has unexpected shape. Starting empty.")
            return {}
        return document

    def load(self, key: str) -> Optional[str]:
        with self.lock:
            return self._read_document().get(key)

    def save(self, key: str, blob: str) -> None:
        with self.lock:
            document = self._read_document()
            document[key] = blob
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix='.tmp')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(document, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise


class SessionStateBlobStore:
    """
    Wraps st.session_state so the Streamlit app keeps collections across reruns.
    Keys are namespaced to avoid clashing with widget state.
    """
    PREFIX = "blob::"

    def __init__(self, session_state=None):
        self._state = session_state if session_state is not None else st.session_state
        self.lock = threading.RLock()

    def load(self, key: str) -> Optional[str]:
        return self._state.get(self.PREFIX + key)

    def save(self, key: str, blob: str) -> None:
        self._state[self.PREFIX + key] = blob


# --- Collection Codec ---

def encode_collection(items: List) -> str:
    """Serializes a list of records to a JSON blob."""
    return json.dumps([item.to_dict() for item in items], ensure_ascii=False)


def decode_collection(key: str, blob: str, from_dict: Callable[[dict], T]) -> List[T]:
    """
    Deserializes a JSON blob into a list of records.

    Raises:
        PersistenceDecodeError: if the blob is not JSON, is not a list, or any
            entry is missing fields or carries invalid values.
    """
    try:
        raw = json.loads(blob)
    except (json.JSONDecodeError, TypeError) as e:
        raise PersistenceDecodeError(key, f"invalid JSON ({e})") from e

    if not isinstance(raw, list):
        raise PersistenceDecodeError(key, f"expected a list, got {type(raw).__name__}")

    try:
        return [from_dict(entry) for entry in raw]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise PersistenceDecodeError(key, f"malformed entry ({e!r})") from e


def load_collection(store: BlobStore, key: str, from_dict: Callable[[dict], T]) -> Optional[List[T]]:
    """
    Loads one named collection.

    Returns None when the key is absent or the blob fails to decode, so the
    caller can fall back to its empty or seeded default.
    """
    blob = store.load(key)
    if blob is None:
        return None
    try:
        return decode_collection(key, blob, from_dict)
    except PersistenceDecodeError as e:
        logger.warning(f"{e}. Falling back to default state.")
        return None


def save_collection(store: BlobStore, key: str, items: List) -> None:
    store.save(key, encode_collection(items))
    logger.debug(f"Saved {len(items)} item(s) under '{key}'.")
