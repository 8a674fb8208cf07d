"""Measurement database helpers (SQLite-backed Store)."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np  # type: ignore

from lodprep.analysis.types import FeatureRow
from lodprep.errors import AcquisitionFailure, PersistenceFailure

U16_MAX = 0xFFFF


class Store:
    """Raw I/Q input and feature-row output of one SQLite database.

    ``create=False`` opens an existing file only; a missing database is an
    AcquisitionFailure rather than a silently created empty file.
    """

    def __init__(self, path: str, *, create: bool = False):
        self.path = path
        try:
            if create or path == ":memory:":
                self.con = sqlite3.connect(path, timeout=30.0)
            else:
                uri = Path(path).expanduser().resolve().as_uri() + "?mode=rw"
                self.con = sqlite3.connect(uri, uri=True, timeout=30.0)
        except sqlite3.Error as exc:
            raise AcquisitionFailure("open database", f"{path}: {exc}") from exc
        try:
            self.con.execute("PRAGMA busy_timeout=5000")
            self._init()
        except sqlite3.Error as exc:
            self.con.close()
            raise AcquisitionFailure("open database", f"{path}: {exc}") from exc

    def _init(self) -> None:
        cur = self.con.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS measurements (
                id INTEGER PRIMARY KEY,
                created_at TEXT
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS measured_values (
                measurement_id INTEGER NOT NULL,
                sensor_id INTEGER NOT NULL,
                block_id INTEGER NOT NULL,
                item_id INTEGER NOT NULL,
                i_value INTEGER NOT NULL,
                q_value INTEGER NOT NULL,
                PRIMARY KEY (measurement_id, sensor_id, block_id, item_id)
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS training_values (
                measurement_id INTEGER NOT NULL,
                block_id INTEGER NOT NULL,
                sensor_id INTEGER NOT NULL,
                frequency REAL NOT NULL,
                magnitude REAL NOT NULL
            )
            """
        )
        cur.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_training_values_measurement
            ON training_values(measurement_id, sensor_id, block_id)
            """
        )
        self.con.commit()

    def begin(self) -> None:
        self.con.execute("BEGIN")

    def commit(self) -> None:
        self.con.commit()

    def rollback(self) -> None:
        self.con.rollback()

    def close(self) -> None:
        self.con.close()

    # -----------------
    # Input side
    # -----------------

    def list_measurement_ids(self) -> List[int]:
        try:
            cur = self.con.execute("SELECT DISTINCT measurement_id FROM measured_values ORDER BY measurement_id")
            return [int(row[0]) for row in cur.fetchall()]
        except sqlite3.Error as exc:
            raise AcquisitionFailure("list measurements", str(exc)) from exc

    def list_sensor_ids(self, measurement_id: int) -> List[int]:
        try:
            cur = self.con.execute(
                "SELECT DISTINCT sensor_id FROM measured_values WHERE measurement_id = ? ORDER BY sensor_id",
                (int(measurement_id),),
            )
            return [int(row[0]) for row in cur.fetchall()]
        except sqlite3.Error as exc:
            raise AcquisitionFailure("list sensors", str(exc)) from exc

    def load_samples(self, measurement_id: int, sensor_id: int) -> np.ndarray:
        """Return the sensor's samples as complex128 (re=I, im=Q), ordered by block then item."""
        try:
            cur = self.con.execute(
                """
                SELECT i_value, q_value FROM measured_values
                WHERE measurement_id = ? AND sensor_id = ?
                ORDER BY block_id, item_id
                """,
                (int(measurement_id), int(sensor_id)),
            )
            rows = cur.fetchall()
        except sqlite3.Error as exc:
            raise AcquisitionFailure("load samples", f"measurement {measurement_id} sensor {sensor_id}: {exc}") from exc
        if not rows:
            return np.zeros(0, dtype=np.complex128)
        # SQLite column affinity does not stop TEXT or REAL values from being stored
        if not all(type(i) is int and type(q) is int for i, q in rows):
            raise AcquisitionFailure(
                "load samples",
                f"measurement {measurement_id} sensor {sensor_id}: I/Q values must be integers",
            )
        iq = np.asarray(rows, dtype=np.int64)
        if iq.min() < 0 or iq.max() > U16_MAX:
            raise AcquisitionFailure(
                "load samples",
                f"measurement {measurement_id} sensor {sensor_id}: I/Q outside unsigned 16-bit range",
            )
        return iq[:, 0].astype(np.float64) + 1j * iq[:, 1].astype(np.float64)

    # -----------------
    # Output side
    # -----------------

    def replace_feature_rows(self, measurement_ids: Sequence[int], rows: Iterable[FeatureRow]) -> int:
        """Delete prior rows of ``measurement_ids`` and insert ``rows`` in one transaction."""
        payload = [
            (r.measurement_id, r.block_id, r.sensor_id, float(r.frequency), float(r.magnitude)) for r in rows
        ]
        try:
            self.begin()
            self.con.executemany(
                "DELETE FROM training_values WHERE measurement_id = ?",
                [(int(m),) for m in measurement_ids],
            )
            self.con.executemany(
                """
                INSERT INTO training_values(measurement_id, block_id, sensor_id, frequency, magnitude)
                VALUES (?, ?, ?, ?, ?)
                """,
                payload,
            )
            self.commit()
        except sqlite3.Error as exc:
            self.rollback()
            raise PersistenceFailure("write feature rows", str(exc)) from exc
        return len(payload)

    def load_feature_rows(self, measurement_id: Optional[int] = None) -> List[FeatureRow]:
        query = "SELECT measurement_id, block_id, sensor_id, frequency, magnitude FROM training_values"
        params: Tuple[int, ...] = ()
        if measurement_id is not None:
            query += " WHERE measurement_id = ?"
            params = (int(measurement_id),)
        query += " ORDER BY measurement_id, sensor_id, block_id, rowid"
        cur = self.con.execute(query, params)
        return [
            FeatureRow(
                measurement_id=int(row[0]),
                block_id=int(row[1]),
                sensor_id=int(row[2]),
                frequency=float(row[3]),
                magnitude=float(row[4]),
            )
            for row in cur.fetchall()
        ]

    # -----------------
    # Synthetic data
    # -----------------

    def clear_raw_values(self, measurement_ids: Sequence[int]) -> None:
        self.con.executemany(
            "DELETE FROM measured_values WHERE measurement_id = ?",
            [(int(m),) for m in measurement_ids],
        )

    def insert_measurement(self, measurement_id: int, created_at: str) -> None:
        self.con.execute(
            "INSERT OR REPLACE INTO measurements(id, created_at) VALUES (?, ?)",
            (int(measurement_id), created_at),
        )

    def insert_raw_values(self, rows: Iterable[Tuple[int, int, int, int, int, int]]) -> None:
        """Insert (measurement_id, sensor_id, block_id, item_id, I, Q) tuples."""
        self.con.executemany(
            """
            INSERT INTO measured_values(measurement_id, sensor_id, block_id, item_id, i_value, q_value)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            rows,
        )
