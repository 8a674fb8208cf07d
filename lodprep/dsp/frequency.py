"""Bin index to physical frequency mapping."""

from __future__ import annotations

from enum import Enum

import numpy as np  # type: ignore

from lodprep.errors import ConfigurationError


class FrequencyMode(str, Enum):
    # CENTERED folds the upper half of the bins onto negative frequencies
    CENTERED = "centered"
    UNCENTERED = "uncentered"

    @classmethod
    def from_name(cls, name: str) -> "FrequencyMode":
        text = str(name).strip().lower()
        for mode in cls:
            if mode.value == text:
                return mode
        raise ConfigurationError(f"Unknown frequency mode '{name}' (expected centered or uncentered)")


def _check_axis(block_size: int, sampling_interval_s: float) -> None:
    if block_size < 1:
        raise ValueError(f"block_size must be >= 1, got {block_size}")
    if not sampling_interval_s > 0:
        raise ValueError(f"sampling interval must be > 0, got {sampling_interval_s}")


def bin_frequency(
    k: int,
    block_size: int,
    sampling_interval_s: float,
    mode: FrequencyMode = FrequencyMode.CENTERED,
) -> float:
    """Map bin ``k`` of an N-point block sampled over ``sampling_interval_s`` seconds to Hz.

    centered:   (((k + N//2) mod N) - N//2) / T
    uncentered: k / T
    """
    _check_axis(block_size, sampling_interval_s)
    if not 0 <= k < block_size:
        raise ValueError(f"bin index {k} outside [0, {block_size})")
    if FrequencyMode(mode) == FrequencyMode.UNCENTERED:
        return k / sampling_interval_s
    half = block_size // 2
    return (((k + half) % block_size) - half) / sampling_interval_s


def bin_frequencies(
    block_size: int,
    sampling_interval_s: float,
    mode: FrequencyMode = FrequencyMode.CENTERED,
) -> np.ndarray:
    """Vectorized ``bin_frequency`` for every bin of a block."""
    _check_axis(block_size, sampling_interval_s)
    k = np.arange(block_size, dtype=np.int64)
    if FrequencyMode(mode) == FrequencyMode.CENTERED:
        half = block_size // 2
        k = ((k + half) % block_size) - half
    return k.astype(np.float64) / float(sampling_interval_s)
