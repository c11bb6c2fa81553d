# services/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from db.repo_json import DATA_DIR, validate_blob_name


DEFAULT_DOWN_TIME = 600
DEFAULT_LOG_FILE = "online.txt"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class PresenceConfig:
    """
    Parámetros del registro de presencia.

    - inactivity_threshold : segundos sin actividad para considerar la sesión offline
    - blob_name            : nombre del blob con el snapshot (online.txt)
    - data_dir             : carpeta donde JsonBlobStore guarda los blobs
    - lock_timeout         : segundos máximos esperando el lock del blob
    - admin_password_hash  : hash passlib para entrar al panel admin (None = panel cerrado)
    """
    inactivity_threshold: int = DEFAULT_DOWN_TIME
    blob_name: str = DEFAULT_LOG_FILE
    data_dir: str = DATA_DIR
    lock_timeout: float = 10.0
    admin_password_hash: Optional[str] = None

    def __post_init__(self):
        t = self.inactivity_threshold
        if isinstance(t, bool) or not isinstance(t, int) or t <= 0:
            raise ConfigError(f"inactivity_threshold debe ser un entero positivo, no {t!r}")
        try:
            validate_blob_name(self.blob_name)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        if not self.data_dir:
            raise ConfigError("data_dir no puede estar vacío")
        if self.lock_timeout <= 0:
            raise ConfigError(f"lock_timeout debe ser positivo, no {self.lock_timeout!r}")

    def with_overrides(self, **changes) -> "PresenceConfig":
        return replace(self, **changes)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PresenceConfig":
        env = os.environ if environ is None else environ
        kw = {}

        if env.get("ONLINE_DOWN_TIME"):
            kw["inactivity_threshold"] = _parse_int("ONLINE_DOWN_TIME", env["ONLINE_DOWN_TIME"])
        if env.get("ONLINE_LOG_FILE"):
            kw["blob_name"] = env["ONLINE_LOG_FILE"].strip()
        if env.get("ONLINE_DATA_DIR"):
            kw["data_dir"] = env["ONLINE_DATA_DIR"].strip()
        if env.get("ONLINE_LOCK_TIMEOUT"):
            kw["lock_timeout"] = _parse_float("ONLINE_LOCK_TIMEOUT", env["ONLINE_LOCK_TIMEOUT"])
        if env.get("ONLINE_ADMIN_PASSWORD_HASH"):
            kw["admin_password_hash"] = env["ONLINE_ADMIN_PASSWORD_HASH"].strip()

        return cls(**kw)


def _parse_int(key: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigError(f"{key} debe ser un entero, no {raw!r}") from None


def _parse_float(key: str, raw: str) -> float:
    try:
        return float(raw.strip())
    except ValueError:
        raise ConfigError(f"{key} debe ser un número, no {raw!r}") from None
