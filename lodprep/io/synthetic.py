"""Deterministic synthetic I/Q data used to populate a measurement database."""

from __future__ import annotations

import math
import sqlite3
from datetime import datetime, timezone
from typing import Iterator, Sequence, Tuple

import numpy as np  # type: ignore

from lodprep.config import PipelineConfig
from lodprep.errors import PersistenceFailure
from lodprep.io.store import Store
from lodprep.util.logging import get_logger

logger = get_logger(__name__)


def synthetic_block(block_size: int, mean: float) -> Tuple[np.ndarray, np.ndarray]:
    """Return the (I, Q) vectors of one synthetic block.

    I = trunc((mean - 1) * (1 + cos(2*pi*i/N)) + 1)
    Q = trunc((mean - 1) * (1 + sin(2*pi*i/N)) + 1)

    Both lie in [1, 2*mean - 1]; after DC removal the block is a single
    tone at bin 1.
    """
    phase = 2.0 * math.pi * np.arange(block_size, dtype=np.float64) / float(block_size)
    i_values = np.trunc((mean - 1.0) * (1.0 + np.cos(phase)) + 1.0).astype(np.int64)
    q_values = np.trunc((mean - 1.0) * (1.0 + np.sin(phase)) + 1.0).astype(np.int64)
    return i_values, q_values


def iter_raw_values(
    config: PipelineConfig,
    measurement_ids: Sequence[int],
    sensor_ids: Sequence[int],
) -> Iterator[Tuple[int, int, int, int, int, int]]:
    """Yield (measurement_id, sensor_id, block_id, item_id, I, Q) rows."""
    i_values, q_values = synthetic_block(config.block_size, config.synthetic_mean)
    for measurement_id in measurement_ids:
        for block_id in range(1, config.blocks_per_sensor + 1):
            for sensor_id in sensor_ids:
                for item_id in range(config.block_size):
                    yield (
                        int(measurement_id),
                        int(sensor_id),
                        block_id,
                        item_id,
                        int(i_values[item_id]),
                        int(q_values[item_id]),
                    )


def populate(
    store: Store,
    config: PipelineConfig,
    measurement_ids: Sequence[int],
    sensor_ids: Sequence[int],
) -> int:
    """Replace the raw values of ``measurement_ids`` with synthetic data; return the row count."""
    created_at = datetime.now(timezone.utc).isoformat()
    expected = len(measurement_ids) * len(sensor_ids) * config.blocks_per_sensor * config.block_size
    logger.info(
        "Generating %d measurements x %d sensors x %d blocks of %d samples",
        len(measurement_ids),
        len(sensor_ids),
        config.blocks_per_sensor,
        config.block_size,
    )
    try:
        store.begin()
        store.clear_raw_values(measurement_ids)
        for measurement_id in measurement_ids:
            store.insert_measurement(measurement_id, created_at)
        store.insert_raw_values(iter_raw_values(config, measurement_ids, sensor_ids))
        store.commit()
    except sqlite3.Error as exc:
        store.rollback()
        raise PersistenceFailure("write synthetic values", str(exc)) from exc
    logger.info("Inserted %d raw values", expected)
    return expected
