from __future__ import annotations
import json
import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from db.repo_json import BlobNotFoundError, JsonBlobStore, SnapshotError
from services.config import PresenceConfig

logger = logging.getLogger(__name__)


@dataclass
class PresenceRecord:
    session_id: str
    last_seen: int  # epoch seconds

    def to_dict(self) -> dict:
        return {"session_id": self.session_id, "last_visit": self.last_seen}

    @classmethod
    def from_dict(cls, d) -> "PresenceRecord":
        if not isinstance(d, dict):
            raise SnapshotError(f"registro inválido: {d!r}")
        sid = d.get("session_id")
        ts = d.get("last_visit")
        if not isinstance(sid, str) or not sid:
            raise SnapshotError(f"session_id inválido: {sid!r}")
        if isinstance(ts, bool) or not isinstance(ts, (int, float)) or not math.isfinite(ts):
            raise SnapshotError(f"last_visit inválido para {sid}: {ts!r}")
        return cls(session_id=sid, last_seen=int(ts))


def decode_snapshot(raw: bytes) -> dict[str, PresenceRecord]:
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise SnapshotError(f"snapshot ilegible: {e}") from e
    if not isinstance(data, list):
        raise SnapshotError("el snapshot debe ser una lista de registros")

    records: dict[str, PresenceRecord] = {}
    for item in data:
        rec = PresenceRecord.from_dict(item)
        prev = records.get(rec.session_id)
        if prev is not None:
            # duplicado: nos quedamos con la visita más reciente
            logger.warning(f"Registro duplicado para la sesión {rec.session_id}, se unifica.")
            rec.last_seen = max(prev.last_seen, rec.last_seen)
        records[rec.session_id] = rec
    return records


def encode_snapshot(records: dict[str, PresenceRecord]) -> bytes:
    payload = [r.to_dict() for r in records.values()]
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


class PresenceRegistry:
    """
    Registro de sesiones en línea (session_id -> última visita).

    Cada operación carga el snapshot del store, trabaja y, si cambió algo, lo
    vuelve a guardar. El ciclo completo corre dentro de store.lock(blob), así
    dos visitas simultáneas no se pisan.

    "Offline" nunca se guarda: se calcula en cada llamada con
    now - last_seen >= inactivity_threshold.
    """

    def __init__(self, store, config: PresenceConfig | None = None, clock: Callable[[], float] | None = None):
        self.store = store
        self.config = config or PresenceConfig()
        self._clock = clock or time.time
        self.current_session_id: Optional[str] = None

    @classmethod
    def from_config(cls, config: PresenceConfig, clock: Callable[[], float] | None = None) -> "PresenceRegistry":
        store = JsonBlobStore(config.data_dir, lock_timeout=config.lock_timeout)
        return cls(store, config, clock=clock)

    @property
    def inactivity_threshold(self) -> int:
        return self.config.inactivity_threshold

    @property
    def blob_name(self) -> str:
        return self.config.blob_name

    def now(self) -> int:
        return int(self._clock())

    # -----------------------------
    # Staleness
    # -----------------------------
    def seconds_since(self, record: PresenceRecord, now: int | None = None) -> int:
        now = self.now() if now is None else now
        return now - record.last_seen

    def is_stale(self, record: PresenceRecord, now: int | None = None) -> bool:
        return self.seconds_since(record, now) >= self.inactivity_threshold

    # -----------------------------
    # Snapshot I/O
    # -----------------------------
    def _load(self) -> dict[str, PresenceRecord] | None:
        """None si el blob no existe (nadie registrado o todo limpiado)."""
        try:
            raw = self.store.get(self.blob_name)
        except BlobNotFoundError:
            return None
        return decode_snapshot(raw)

    def _save(self, records: dict[str, PresenceRecord]) -> None:
        self.store.put(self.blob_name, encode_snapshot(records))

    # -----------------------------
    # Operaciones
    # -----------------------------
    def log_visit(self, session_id: str | None = None) -> bool:
        """
        Marca la sesión como activa ahora.
        False si no hay sesión (no es error: simplemente no hay nada que registrar).
        """
        sid = self.current_session_id if session_id is None else session_id
        if not sid:
            logger.debug("log_visit sin sesión activa, nada que registrar.")
            return False

        with self.store.lock(self.blob_name):
            records = self._load()
            now = self.now()
            if records is None:
                logger.info(f"Creando '{self.blob_name}' con la primera sesión.")
                records = {}

            rec = records.get(sid)
            if rec is None:
                records[sid] = PresenceRecord(session_id=sid, last_seen=now)
                logger.debug(f"Nueva sesión en línea: {sid}")
            else:
                # una visita nunca retrocede el reloj
                rec.last_seen = max(rec.last_seen, now)
            self._save(records)
        return True

    def heartbeat(self, session_id: str | None = None) -> bool:
        """Registra la visita y limpia las sesiones viejas."""
        logged = self.log_visit(session_id)
        self.auto_clean()
        return logged

    def check(self, session_id: str) -> bool:
        with self.store.lock(self.blob_name):
            records = self._load()
        if not records:
            return False
        rec = records.get(session_id)
        if rec is None:
            return False
        return not self.is_stale(rec)

    def count(self) -> int:
        with self.store.lock(self.blob_name):
            records = self._load()
        if not records:
            return 0
        now = self.now()
        return sum(1 for r in records.values() if not self.is_stale(r, now))

    def records(self) -> list[PresenceRecord]:
        with self.store.lock(self.blob_name):
            records = self._load()
        return sorted((records or {}).values(), key=lambda r: r.last_seen, reverse=True)

    def online_sessions(self) -> list[PresenceRecord]:
        now = self.now()
        return [r for r in self.records() if not self.is_stale(r, now)]

    def auto_clean(self) -> bool:
        """
        Borra las sesiones inactivas.
        Si no queda ninguna, borra el blob (nunca se guarda una lista vacía).
        False solo si no había nada que limpiar.
        """
        with self.store.lock(self.blob_name):
            records = self._load()
            if records is None:
                return False

            now = self.now()
            alive = {sid: r for sid, r in records.items() if not self.is_stale(r, now)}
            removed = len(records) - len(alive)

            if alive:
                if removed:
                    self._save(alive)
                    logger.info(f"Limpieza: {removed} sesiones inactivas eliminadas, {len(alive)} en línea.")
            else:
                self.store.delete(self.blob_name)
                logger.info(f"Limpieza: sin sesiones en línea, '{self.blob_name}' eliminado.")
        return True

    def drop(self) -> bool:
        """Borra todo el registro, sin mirar la inactividad."""
        with self.store.lock(self.blob_name):
            try:
                self.store.delete(self.blob_name)
            except BlobNotFoundError:
                return False
        logger.info(f"Registro '{self.blob_name}' eliminado (drop).")
        return True
