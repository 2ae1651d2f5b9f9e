"""
SQLite-backed scenario and embedding store with cosine similarity search.

Raw vectors in the `embeddings` table are the source of truth. A per-dimensionality
similarity index (sqlite-vec `vec0` tables) is maintained best-effort; when it is
missing, incomplete or broken, search falls back to an exact brute-force scan.
"""

import json
import logging
import math
import sqlite3
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from config import get_settings
from config.settings import StorageSettings
from spe.data_layer.models import Scenario
from spe.errors import IndexWriteFailure, StorageUnavailable, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_K = 5


@dataclass
class SearchHit:
    """Reference to a stored embedding and its cosine distance to the query."""

    ref: str
    distance: float


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def validate_vector(vector: Optional[Sequence[float]], dim: Optional[int] = None) -> np.ndarray:
    """Reject empty, non-finite or wrongly sized vectors."""
    if vector is None or len(vector) == 0:
        raise ValidationError("vector must not be empty")
    try:
        arr = np.asarray(vector, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"vector must be numeric: {exc}") from exc
    if arr.ndim != 1:
        raise ValidationError("vector must be one-dimensional")
    if not np.all(np.isfinite(arr)):
        raise ValidationError("vector contains non-finite values")
    if dim is not None and dim != len(arr):
        raise ValidationError(f"dimensionality mismatch: expected {dim}, got {len(arr)}")
    return arr


def cosine_distances(query: np.ndarray, candidates: np.ndarray) -> np.ndarray:
    """
    1 - dot(normalized query, normalized candidate) for every candidate row.

    Zero vectors normalize to themselves, which makes their distance exactly 1.
    """
    q_norm = float(np.linalg.norm(query))
    q = query / q_norm if q_norm > 0 else query
    norms = np.linalg.norm(candidates, axis=1)
    safe = np.where(norms > 0, norms, 1.0)
    normalized = candidates / safe[:, None]
    return np.clip(1.0 - normalized @ q, 0.0, 2.0)


class VectorIndex(ABC):
    """Dimensionality-partitioned similarity index with cosine-distance ordering."""

    @abstractmethod
    def ensure(self, dim: int) -> None:
        """Create the index structure for `dim` if missing."""
        ...

    @abstractmethod
    def insert(self, dim: int, rowid: int, vector: Sequence[float]) -> None:
        ...

    @abstractmethod
    def query(self, dim: int, vector: Sequence[float], k: int) -> List[Tuple[int, float]]:
        """Return up to k (rowid, distance) pairs ascending; [] when the index is absent."""
        ...

    @abstractmethod
    def count(self, dim: int) -> int:
        """Number of vectors indexed for `dim`; 0 when the index is absent."""
        ...


class SqliteVecIndex(VectorIndex):
    """Index backed by sqlite-vec `vec0` virtual tables sharing the store connection."""

    TABLE_PREFIX = "vec_embeddings_"

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    @classmethod
    def load(cls, conn: sqlite3.Connection, extension_path: Optional[str]) -> Optional["SqliteVecIndex"]:
        """Load the sqlite-vec extension into `conn`; None if unset or unloadable."""
        if not extension_path:
            return None
        try:
            conn.enable_load_extension(True)
            try:
                conn.load_extension(extension_path)
            finally:
                conn.enable_load_extension(False)
        except (AttributeError, sqlite3.Error) as exc:
            logger.warning("sqlite-vec extension not loaded (%s): %s", extension_path, exc)
            return None
        logger.info("sqlite-vec extension loaded")
        return cls(conn)

    def _table(self, dim: int) -> str:
        return f"{self.TABLE_PREFIX}{int(dim)}"

    def ensure(self, dim: int) -> None:
        self._conn.execute(
            f"CREATE VIRTUAL TABLE IF NOT EXISTS {self._table(dim)} USING vec0(embedding float[{int(dim)}])"
        )

    def insert(self, dim: int, rowid: int, vector: Sequence[float]) -> None:
        self._conn.execute(
            f"INSERT INTO {self._table(dim)}(rowid, embedding) VALUES (?, ?)",
            (rowid, json.dumps([float(x) for x in vector])),
        )

    def query(self, dim: int, vector: Sequence[float], k: int) -> List[Tuple[int, float]]:
        try:
            rows = self._conn.execute(
                f"""
                SELECT rowid, vec_distance_cosine(embedding, ?) AS distance
                FROM {self._table(dim)}
                ORDER BY distance ASC, rowid ASC
                LIMIT ?
                """,
                (json.dumps([float(x) for x in vector]), k),
            ).fetchall()
        except sqlite3.OperationalError as exc:
            logger.debug("vector index unavailable for dim=%d: %s", dim, exc)
            return []
        return [(int(row[0]), row[1]) for row in rows]

    def count(self, dim: int) -> int:
        try:
            row = self._conn.execute(f"SELECT COUNT(*) FROM {self._table(dim)}").fetchone()
        except sqlite3.OperationalError:
            return 0
        return int(row[0])


class VectorStore:
    """Persists scenarios and embeddings; answers k-nearest-neighbour queries."""

    def __init__(
        self,
        db_path: Optional[str],
        sqlite_vec_path: Optional[str] = None,
        index: Optional[VectorIndex] = None,
    ) -> None:
        self._db_path = db_path
        self._sqlite_vec_path = sqlite_vec_path
        self._index = index
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = Lock()

    @classmethod
    def from_settings(cls, settings: Optional[StorageSettings] = None) -> "VectorStore":
        settings = settings or get_settings().storage
        return cls(settings.db_path, settings.sqlite_vec_path)

    # ----------------------------
    # Internals
    # ----------------------------
    def _conn_guard(self) -> sqlite3.Connection:
        if not self._db_path:
            raise StorageUnavailable("no database configured")
        if self._conn is None:
            with self._lock:
                if self._conn is None:
                    self._conn = self._connect()
        return self._conn

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self._db_path, check_same_thread=False, isolation_level=None)
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"cannot open database {self._db_path!r}: {exc}") from exc

        try:
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS scenarios (
                    id TEXT PRIMARY KEY,
                    name TEXT,
                    json TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS embeddings (
                    id TEXT PRIMARY KEY,
                    scenario_id TEXT,
                    dim INTEGER NOT NULL,
                    vector_json TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_embeddings_dim ON embeddings(dim);")
        except sqlite3.Error as exc:
            conn.close()
            raise StorageUnavailable(f"cannot open database {self._db_path!r}: {exc}") from exc

        if self._index is None:
            self._index = SqliteVecIndex.load(conn, self._sqlite_vec_path)
        logger.info("Vector store ready (db=%s, index=%s)", self._db_path, type(self._index).__name__)
        return conn

    def _rowid_for(self, conn: sqlite3.Connection, embedding_id: str) -> Optional[int]:
        row = conn.execute("SELECT rowid FROM embeddings WHERE id=?", (embedding_id,)).fetchone()
        return int(row[0]) if row else None

    # ----------------------------
    # Public API
    # ----------------------------
    @property
    def has_index(self) -> bool:
        return self._index is not None

    def save_scenario(self, scenario: Scenario) -> str:
        """Persist a scenario document; returns its generated id."""
        scenario_id = str(uuid.uuid4())
        payload = scenario.model_dump_json()
        conn = self._conn_guard()
        with self._lock:
            conn.execute(
                "INSERT INTO scenarios (id, name, json, created_at) VALUES (?, ?, ?, ?)",
                (scenario_id, scenario.name, payload, _utc_now()),
            )
        logger.info("Saved scenario %s (%s)", scenario_id, scenario.name or "unnamed")
        return scenario_id

    def get_scenario(self, scenario_id: str) -> Optional[Scenario]:
        conn = self._conn_guard()
        row = conn.execute("SELECT json FROM scenarios WHERE id=?", (scenario_id,)).fetchone()
        if not row:
            return None
        return Scenario.model_validate_json(row["json"])

    def list_scenarios(self) -> List[Dict[str, Any]]:
        conn = self._conn_guard()
        rows = conn.execute(
            "SELECT id, name, created_at FROM scenarios ORDER BY created_at DESC, id ASC"
        ).fetchall()
        return [{"id": row["id"], "name": row["name"], "created_at": row["created_at"]} for row in rows]

    def save_embedding(self, scenario_id: str, vector: Sequence[float]) -> str:
        """Persist a raw vector keyed to a scenario; returns the embedding id."""
        arr = validate_vector(vector)
        embedding_id = str(uuid.uuid4())
        conn = self._conn_guard()
        with self._lock:
            conn.execute(
                """
                INSERT INTO embeddings (id, scenario_id, dim, vector_json, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (embedding_id, scenario_id, len(arr), json.dumps(arr.tolist()), _utc_now()),
            )
        logger.debug("Saved embedding %s (dim=%d, scenario=%s)", embedding_id, len(arr), scenario_id)
        return embedding_id

    def index_embedding(self, dim: int, vector: Sequence[float], embedding_id: str) -> bool:
        """
        Best-effort insertion into the similarity index for `dim`.

        Returns False when there is no index or the write failed; the raw vector
        stays searchable through the exact fallback either way.
        """
        arr = validate_vector(vector, dim)
        conn = self._conn_guard()
        if self._index is None:
            return False
        try:
            with self._lock:
                rowid = self._rowid_for(conn, embedding_id)
                if rowid is None:
                    raise IndexWriteFailure(f"embedding {embedding_id} not found")
                self._index.ensure(dim)
                self._index.insert(dim, rowid, arr.tolist())
        except (IndexWriteFailure, sqlite3.Error) as exc:
            logger.warning("Vector index write failed (dim=%d): %s", dim, exc)
            return False
        return True

    def add_embedding(self, scenario_id: str, vector: Sequence[float]) -> str:
        """Save a raw vector and insert it into its dimensionality-specific index."""
        arr = validate_vector(vector)
        embedding_id = self.save_embedding(scenario_id, arr.tolist())
        self.index_embedding(len(arr), arr.tolist(), embedding_id)
        return embedding_id

    def search(self, query: Sequence[float], k: int = 0) -> List[SearchHit]:
        """
        k nearest stored embeddings of the same dimensionality, ascending cosine distance.

        Args:
            query: Query vector.
            k: Number of hits; values <= 0 default to 5.
        """
        q = validate_vector(query)
        k = k if k > 0 else DEFAULT_K
        conn = self._conn_guard()

        if self._index is not None and np.any(q) and self._index_complete(conn, len(q)):
            hits = self._search_index(conn, q, k)
            if hits:
                return hits
        return self._search_exact(conn, q, k)

    def _index_complete(self, conn: sqlite3.Connection, dim: int) -> bool:
        """True when every stored vector of `dim` is in the index."""
        try:
            stored = conn.execute("SELECT COUNT(*) FROM embeddings WHERE dim = ?", (dim,)).fetchone()[0]
            indexed = self._index.count(dim)
        except sqlite3.Error as exc:
            logger.warning("Vector index count failed, using exact search: %s", exc)
            return False
        if indexed != stored:
            logger.debug("Vector index incomplete for dim=%d (%d of %d), using exact search", dim, indexed, stored)
            return False
        return True

    def _search_index(self, conn: sqlite3.Connection, q: np.ndarray, k: int) -> List[SearchHit]:
        try:
            pairs = self._index.query(len(q), q.tolist(), k)
            if not pairs:
                return []
            placeholders = ",".join("?" for _ in pairs)
            rows = conn.execute(
                f"SELECT rowid, id FROM embeddings WHERE rowid IN ({placeholders})",
                [rowid for rowid, _ in pairs],
            ).fetchall()
        except sqlite3.Error as exc:
            logger.warning("Vector index query failed, using exact search: %s", exc)
            return []

        refs = {int(row[0]): row[1] for row in rows}
        hits = []
        for rowid, distance in pairs:
            if rowid not in refs:
                continue
            if distance is None or math.isnan(distance):
                distance = 1.0
            hits.append(SearchHit(refs[rowid], min(max(float(distance), 0.0), 2.0)))
        hits.sort(key=lambda h: (h.distance, h.ref))
        return hits

    def _search_exact(self, conn: sqlite3.Connection, q: np.ndarray, k: int) -> List[SearchHit]:
        dim = len(q)
        rows = conn.execute(
            "SELECT id, vector_json FROM embeddings WHERE dim = ?", (dim,)
        ).fetchall()
        refs: List[str] = []
        vectors: List[List[float]] = []
        for row in rows:
            ref = row["id"]
            try:
                values = json.loads(row["vector_json"])
            except ValueError:
                logger.warning("Skipping unreadable embedding %s", ref)
                continue
            if len(values) == dim:
                refs.append(ref)
                vectors.append(values)
        if not refs:
            return []

        distances = cosine_distances(q, np.asarray(vectors, dtype=np.float64))
        order = sorted(range(len(refs)), key=lambda i: (distances[i], refs[i]))
        return [SearchHit(refs[i], float(distances[i])) for i in order[:k]]

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None


_store_instance: Optional[VectorStore] = None


def get_vector_store() -> VectorStore:
    """Process-wide store built from settings on first use."""
    global _store_instance
    if _store_instance is None:
        _store_instance = VectorStore.from_settings()
    return _store_instance


def reset_vector_store() -> None:
    global _store_instance
    if _store_instance is not None:
        _store_instance.close()
    _store_instance = None
