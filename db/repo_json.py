from __future__ import annotations
import logging, os, tempfile, threading
from contextlib import contextmanager
from typing import Dict, Iterator
from filelock import FileLock, Timeout

logger = logging.getLogger(__name__)

DATA_DIR = "data"


class StorageError(Exception):
    """Fallo real del almacenamiento (lectura, escritura, borrado, lock)."""


class BlobNotFoundError(StorageError, KeyError):
    """El blob no existe. Es un estado normal: significa "sin datos"."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"blob no encontrado: {self.name}"


class SnapshotError(StorageError):
    """El contenido del blob no tiene el formato esperado."""


def validate_blob_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValueError("el nombre del blob no puede estar vacío")
    if "/" in name or "\\" in name or name in (".", ".."):
        raise ValueError(f"nombre de blob inválido: {name!r}")
    return name


class JsonBlobStore:
    """
    Un archivo por blob dentro de `root`.
    - put() escribe a un temporal y hace os.replace (nunca queda a medias)
    - lock() usa FileLock `<blob>.lock` para serializar entre procesos
    """

    def __init__(self, root: str = DATA_DIR, lock_timeout: float = 10.0):
        self.root = root
        self.lock_timeout = lock_timeout
        self._locks: Dict[str, tuple[threading.RLock, FileLock]] = {}
        self._locks_guard = threading.Lock()

    def ensure_dirs(self):
        try:
            os.makedirs(self.root, exist_ok=True)
        except OSError as e:
            raise StorageError(f"no se pudo crear {self.root}: {e}") from e

    def path(self, name: str) -> str:
        return os.path.join(self.root, validate_blob_name(name))

    def exists(self, name: str) -> bool:
        return os.path.isfile(self.path(name))

    def get(self, name: str) -> bytes:
        path = self.path(name)
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            raise BlobNotFoundError(name) from None
        except OSError as e:
            raise StorageError(f"no se pudo leer {path}: {e}") from e

    def put(self, name: str, data: bytes) -> None:
        path = self.path(name)
        self.ensure_dirs()
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile("wb", dir=self.root, prefix=f".{name}.", delete=False) as f:
                tmp_name = f.name
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"no se pudo escribir {path}: {e}") from e
        logger.debug(f"Blob '{name}' escrito ({len(data)} bytes).")

    def delete(self, name: str) -> None:
        path = self.path(name)
        try:
            os.remove(path)
        except FileNotFoundError:
            raise BlobNotFoundError(name) from None
        except OSError as e:
            raise StorageError(f"no se pudo borrar {path}: {e}") from e
        logger.debug(f"Blob '{name}' borrado.")

    def _lock_pair(self, name: str) -> tuple[threading.RLock, FileLock]:
        # RLock entre hilos del proceso, FileLock entre procesos
        with self._locks_guard:
            pair = self._locks.get(name)
            if pair is None:
                pair = (threading.RLock(), FileLock(self.path(name) + ".lock", timeout=self.lock_timeout))
                self._locks[name] = pair
            return pair

    @contextmanager
    def lock(self, name: str) -> Iterator[None]:
        self.ensure_dirs()
        thread_lock, file_lock = self._lock_pair(name)
        with thread_lock:
            try:
                file_lock.acquire()
            except Timeout as e:
                raise StorageError(f"timeout esperando el lock de '{name}'") from e
            try:
                yield
            finally:
                file_lock.release()


class MemoryBlobStore:
    """Mismo contrato que JsonBlobStore, en memoria del proceso."""

    def __init__(self):
        self._blobs: Dict[str, bytes] = {}
        self._lock = threading.RLock()

    def exists(self, name: str) -> bool:
        return validate_blob_name(name) in self._blobs

    def get(self, name: str) -> bytes:
        try:
            return self._blobs[validate_blob_name(name)]
        except KeyError:
            raise BlobNotFoundError(name) from None

    def put(self, name: str, data: bytes) -> None:
        self._blobs[validate_blob_name(name)] = bytes(data)

    def delete(self, name: str) -> None:
        try:
            del self._blobs[validate_blob_name(name)]
        except KeyError:
            raise BlobNotFoundError(name) from None

    @contextmanager
    def lock(self, name: str) -> Iterator[None]:
        validate_blob_name(name)
        with self._lock:
            yield
