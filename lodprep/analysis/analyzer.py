"""Per-sensor spectral analysis producing feature rows."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np  # type: ignore

from lodprep.analysis.types import FeatureRow, SensorKey, SensorResult
from lodprep.config import PipelineConfig
from lodprep.dsp.fft import compute_block_magnitudes
from lodprep.dsp.frequency import bin_frequencies
from lodprep.errors import LengthMismatch
from lodprep.util.logging import get_logger

logger = get_logger(__name__)


class SpectralAnalyzer:
    """Turn one sensor's raw complex samples into (block, frequency, magnitude) rows.

    The frequency axis is computed once per analyser and shared by every
    block of every sensor. Sensors are independent: a length mismatch on
    one sensor is logged and yields no rows without affecting the others.
    """

    def __init__(self, config: PipelineConfig):
        self.config = config.validate()
        self.block_size = config.block_size
        self.frequencies = bin_frequencies(config.block_size, config.sampling_interval_s, config.frequency_mode)

    def block_magnitudes(self, samples: np.ndarray) -> np.ndarray:
        """Normalized magnitudes, shape (blocks, N). Raises LengthMismatch."""
        return compute_block_magnitudes(samples, self.block_size, self.config.window)

    def process_sensor(self, key: SensorKey, samples: np.ndarray) -> SensorResult:
        sample_count = int(np.size(samples))
        context = {"measurement_id": key.measurement_id, "sensor_id": key.sensor_id, "sample_count": sample_count}
        if sample_count == 0:
            logger.debug("no FFT input for measurement %d sensor %d", key.measurement_id, key.sensor_id, extra=context)
            return SensorResult(key=key, status="empty")
        try:
            magnitudes = self.block_magnitudes(samples)
        except LengthMismatch as exc:
            logger.warning(
                "Skipping measurement %d sensor %d: %s",
                key.measurement_id,
                key.sensor_id,
                exc,
                extra=context,
            )
            return SensorResult(key=key, status="length_mismatch", sample_count=sample_count)
        block_count = int(magnitudes.shape[0])
        logger.debug(
            "measurement %d sensor %d: %d samples, %d blocks",
            key.measurement_id,
            key.sensor_id,
            sample_count,
            block_count,
            extra={**context, "block_count": block_count},
        )
        return SensorResult(
            key=key,
            status="ok",
            sample_count=sample_count,
            block_count=block_count,
            rows=_rows_for_sensor(key, self.frequencies, magnitudes),
        )

    def analyze_sensor(self, measurement_id: int, sensor_id: int, samples: np.ndarray) -> List[FeatureRow]:
        return self.process_sensor(SensorKey(int(measurement_id), int(sensor_id)), samples).rows

    def analyze(
        self,
        sources: Iterable[Tuple[SensorKey, np.ndarray]],
        *,
        workers: Optional[int] = None,
    ) -> List[SensorResult]:
        """Analyse every (key, samples) pair; results keep the input order."""
        items: Sequence[Tuple[SensorKey, np.ndarray]] = list(sources)
        workers = self.config.workers if workers is None else workers
        if workers <= 1 or len(items) <= 1:
            return [self.process_sensor(key, samples) for key, samples in items]
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(lambda item: self.process_sensor(*item), items))


def _rows_for_sensor(key: SensorKey, frequencies: np.ndarray, magnitudes: np.ndarray) -> List[FeatureRow]:
    rows: List[FeatureRow] = []
    for block_idx, block in enumerate(magnitudes):
        for freq, mag in zip(frequencies, block):
            rows.append(
                FeatureRow(
                    measurement_id=key.measurement_id,
                    block_id=block_idx + 1,
                    sensor_id=key.sensor_id,
                    frequency=float(freq),
                    magnitude=float(mag),
                )
            )
    return rows
