# trivia/store.py
"""
Estado por participante (clave = sender id tal cual llega).

Contrato:
  - fetch_or_create(key): crea {answers: [], last_question_index: -1} si no existe.
    Dos primeros contactos simultáneos terminan en UN solo documento.
  - update(key, answers, idx, expected_version, export_claimed_at=0): reemplaza
    todos los campos juntos solo si la versión guardada coincide; si no → StoreConflictError.
"""
import json, logging, sqlite3, threading
from pathlib import Path
from typing import Dict, List, Optional

from .errors import StoreConflictError, StoreFetchError, StoreUpdateError
from .models import NOT_STARTED_INDEX, SessionDoc

log = logging.getLogger("trivia.store")

class MemoryStore:
    """Dict en memoria protegido con lock. Para tests y demo local."""

    def __init__(self):
        self._docs: Dict[str, SessionDoc] = {}
        self._lock = threading.Lock()

    def fetch_or_create(self, key: str) -> SessionDoc:
        with self._lock:
            doc = self._docs.get(key)
            if doc is None:
                doc = SessionDoc(key=key)
                self._docs[key] = doc
                log.info("Sesión creada: %s", key)
            return doc

    def update(self, key: str, answers: List[str], last_question_index: int, expected_version: int,
               export_claimed_at: float = 0.0) -> SessionDoc:
        with self._lock:
            current = self._docs.get(key)
            if current is None:
                raise StoreUpdateError(f"No existe la sesión {key!r}")
            if current.version != expected_version:
                raise StoreConflictError(key, expected_version)
            doc = SessionDoc(
                key=key,
                answers=list(answers),
                last_question_index=last_question_index,
                version=current.version + 1,
                export_claimed_at=export_claimed_at,
            )
            self._docs[key] = doc
            return doc

    def get(self, key: str) -> Optional[SessionDoc]:
        with self._lock:
            return self._docs.get(key)

    def reset(self, key: str) -> bool:
        with self._lock:
            current = self._docs.get(key)
            if current is None:
                return False
            self._docs[key] = SessionDoc(key=key, version=current.version + 1)
            return True

    def list_keys(self) -> List[str]:
        with self._lock:
            return sorted(self._docs)


class SqliteStore:
    """
    Documentos en SQLite (una fila por participante, answers como JSON).
    INSERT OR IGNORE da el create-if-absent atómico; el UPDATE condicional
    por versión da el compare-and-set.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self.conn = sqlite3.connect(db_path, check_same_thread=False, timeout=10, isolation_level=None)
            self.conn.execute("PRAGMA journal_mode=WAL;")
            self.conn.execute("PRAGMA synchronous=NORMAL;")
            self._ensure_schema()
        except sqlite3.Error as e:
            raise StoreFetchError(f"No se pudo abrir {db_path}: {e}") from e
        # una sola conexión compartida entre hilos del server
        self._lock = threading.Lock()

    def _ensure_schema(self):
        self.conn.execute("""
        CREATE TABLE IF NOT EXISTS sessions(
            key TEXT PRIMARY KEY,
            answers TEXT NOT NULL DEFAULT '[]',
            last_question_index INTEGER NOT NULL DEFAULT -1,
            version INTEGER NOT NULL DEFAULT 0,
            export_claimed_at REAL NOT NULL DEFAULT 0
        );
        """)
        # bases creadas antes de la columna de claim
        cols = {r[1] for r in self.conn.execute("PRAGMA table_info(sessions)")}
        if "export_claimed_at" not in cols:
            self.conn.execute("ALTER TABLE sessions ADD COLUMN export_claimed_at REAL NOT NULL DEFAULT 0")

    @staticmethod
    def _row_to_doc(row) -> SessionDoc:
        key, answers, idx, version, claimed_at = row
        return SessionDoc(key=key, answers=json.loads(answers or "[]"), last_question_index=idx,
                          version=version, export_claimed_at=claimed_at or 0.0)

    def _select(self, key: str):
        return self.conn.execute(
            "SELECT key, answers, last_question_index, version, export_claimed_at FROM sessions WHERE key=?",
            (key,),
        ).fetchone()

    def fetch_or_create(self, key: str) -> SessionDoc:
        try:
            with self._lock:
                cur = self.conn.execute(
                    "INSERT OR IGNORE INTO sessions(key, answers, last_question_index, version) VALUES(?, '[]', ?, 0)",
                    (key, NOT_STARTED_INDEX),
                )
                if cur.rowcount:
                    log.info("Sesión creada: %s", key)
                row = self._select(key)
            if row is None:
                raise StoreFetchError(f"Sesión {key!r} no visible después de crearla")
            return self._row_to_doc(row)
        except (sqlite3.Error, ValueError) as e:
            # ValueError: answers corrupto (JSON / validación)
            raise StoreFetchError(f"Fallo leyendo sesión {key!r}: {e}") from e

    def update(self, key: str, answers: List[str], last_question_index: int, expected_version: int,
               export_claimed_at: float = 0.0) -> SessionDoc:
        payload = json.dumps(list(answers), ensure_ascii=False)
        try:
            with self._lock:
                cur = self.conn.execute(
                    "UPDATE sessions SET answers=?, last_question_index=?, export_claimed_at=?, version=version+1 "
                    "WHERE key=? AND version=?",
                    (payload, last_question_index, export_claimed_at, key, expected_version),
                )
                changed = cur.rowcount
                row = self._select(key) if changed else None
            if not changed:
                raise StoreConflictError(key, expected_version)
            return self._row_to_doc(row)
        except (sqlite3.Error, ValueError) as e:
            raise StoreUpdateError(f"Fallo actualizando sesión {key!r}: {e}") from e

    def get(self, key: str) -> Optional[SessionDoc]:
        try:
            with self._lock:
                row = self._select(key)
            return self._row_to_doc(row) if row else None
        except (sqlite3.Error, ValueError) as e:
            raise StoreFetchError(f"Fallo leyendo sesión {key!r}: {e}") from e

    def reset(self, key: str) -> bool:
        try:
            with self._lock:
                cur = self.conn.execute(
                    "UPDATE sessions SET answers='[]', last_question_index=?, export_claimed_at=0, "
                    "version=version+1 WHERE key=?",
                    (NOT_STARTED_INDEX, key),
                )
        except sqlite3.Error as e:
            raise StoreUpdateError(f"Fallo reseteando sesión {key!r}: {e}") from e
        return cur.rowcount > 0

    def list_keys(self) -> List[str]:
        try:
            with self._lock:
                return [r[0] for r in self.conn.execute("SELECT key FROM sessions ORDER BY key")]
        except sqlite3.Error as e:
            raise StoreFetchError(f"Fallo listando sesiones: {e}") from e

    def close(self):
        self.conn.close()


def make_store(backend: str, db_path: str):
    backend = (backend or "sqlite").lower()
    if backend == "memory":
        return MemoryStore()
    if backend == "sqlite":
        return SqliteStore(db_path)
    raise ValueError(f"STORE_BACKEND desconocido: {backend}")
