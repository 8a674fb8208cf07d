"""Block segmentation and per-block DC offset removal."""

from __future__ import annotations

import numpy as np  # type: ignore
from numpy.typing import ArrayLike  # type: ignore

from lodprep.errors import LengthMismatch


def segment_blocks(samples: ArrayLike, block_size: int) -> np.ndarray:
    """Split a flat complex sample vector into a ``(L / N, N)`` array of blocks.

    The result is a copy; blocks keep the input order and never overlap.
    An empty input yields ``(0, N)``. Raises ``LengthMismatch`` when the
    sample count is not a multiple of ``block_size``.
    """
    if block_size < 1:
        raise ValueError(f"block_size must be >= 1, got {block_size}")
    arr = np.array(samples, dtype=np.complex128).reshape(-1)
    if arr.size % block_size != 0:
        raise LengthMismatch(arr.size, block_size)
    return arr.reshape(-1, block_size)


def block_means(blocks: np.ndarray) -> np.ndarray:
    """Return the complex mean of every block (sum / N)."""
    blocks = np.asarray(blocks)
    if blocks.ndim != 2:
        raise ValueError("block_means expects a (blocks, N) array")
    return blocks.sum(axis=1) / blocks.shape[1]


def remove_dc_offset(blocks: np.ndarray) -> np.ndarray:
    """Subtract each block's own mean from its samples."""
    blocks = np.asarray(blocks)
    if blocks.shape[0] == 0:
        return blocks.copy()
    return blocks - block_means(blocks)[:, np.newaxis]
