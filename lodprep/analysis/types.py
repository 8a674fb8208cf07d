"""Dataclasses shared across the analysis, storage and CLI layers."""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class SensorKey:
    measurement_id: int
    sensor_id: int


@dataclass(frozen=True)
class FeatureRow:
    measurement_id: int
    block_id: int
    sensor_id: int
    frequency: float
    magnitude: float


@dataclass
class SensorResult:
    key: SensorKey
    status: str  # "ok", "empty", "length_mismatch"
    sample_count: int = 0
    block_count: int = 0
    rows: List[FeatureRow] = field(default_factory=list)


@dataclass
class RunSummary:
    measurements: int = 0
    sensors_processed: int = 0
    sensors_skipped: int = 0
    sensors_empty: int = 0
    rows_written: int = 0
