"""Window functions applied to each block before the transform.

All windows are symmetric generalized cosine windows of the block length N
(denominator N - 1), so the four supported kinds differ only in their
coefficient tuple:

    w(n) = a0 - a1*cos(2*pi*n/(N-1)) + a2*cos(4*pi*n/(N-1)) - a3*cos(6*pi*n/(N-1))
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Dict, Tuple

import numpy as np  # type: ignore
from scipy.signal import windows as sp_windows  # type: ignore

from lodprep.errors import ConfigurationError

_HAMMING_ALPHA = 25.0 / 46.0
_BLACKMAN_ALPHA = 0.16


class WindowKind(str, Enum):
    RECTANGULAR = "rectangular"
    HAMMING = "hamming"
    BLACKMAN = "blackman"
    BLACKMAN_HARRIS = "blackman-harris"

    @classmethod
    def from_name(cls, name: str) -> "WindowKind":
        """Parse a window name as used on the command line or in config files."""
        text = str(name).strip().lower().replace("_", "-")
        if text in ("", "none", "dirichlet", "rect", "boxcar"):
            return cls.RECTANGULAR
        for kind in cls:
            if kind.value == text:
                return kind
        choices = ", ".join(k.value for k in cls)
        raise ConfigurationError(f"Unknown window function '{name}' (expected one of: {choices})")


WINDOW_COEFFICIENTS: Dict[WindowKind, Tuple[float, ...]] = {
    WindowKind.RECTANGULAR: (1.0,),
    WindowKind.HAMMING: (_HAMMING_ALPHA, 1.0 - _HAMMING_ALPHA),
    WindowKind.BLACKMAN: ((1.0 - _BLACKMAN_ALPHA) / 2.0, 0.5, _BLACKMAN_ALPHA / 2.0),
    WindowKind.BLACKMAN_HARRIS: (0.35875, 0.48829, 0.14128, 0.01168),
}


@lru_cache(maxsize=32)
def _cached_window(kind: WindowKind, block_size: int) -> np.ndarray:
    coeffs = WINDOW_COEFFICIENTS[kind]
    # general_cosine alternates the coefficient signs itself
    win = sp_windows.general_cosine(block_size, coeffs, sym=True)
    win = np.asarray(win, dtype=np.float64)
    win.setflags(write=False)
    return win


def window_vector(kind: WindowKind, block_size: int) -> np.ndarray:
    """Return all N coefficients of ``kind`` as a new float64 array."""
    if block_size < 1:
        raise ValueError(f"block_size must be >= 1, got {block_size}")
    return _cached_window(WindowKind(kind), int(block_size)).copy()


def window_coefficient(kind: WindowKind, n: int, block_size: int) -> float:
    """Return the coefficient at in-block index ``n`` of a window of length ``block_size``."""
    if block_size < 1:
        raise ValueError(f"block_size must be >= 1, got {block_size}")
    if not 0 <= n < block_size:
        raise ValueError(f"window index {n} outside [0, {block_size})")
    return float(_cached_window(WindowKind(kind), int(block_size))[n])


def apply_window(blocks: np.ndarray, kind: WindowKind) -> np.ndarray:
    """Multiply every block (last axis) by the window of its length."""
    blocks = np.asarray(blocks)
    if blocks.ndim != 2:
        raise ValueError("apply_window expects a (blocks, N) array")
    if kind == WindowKind.RECTANGULAR:
        return blocks.copy()
    return blocks * _cached_window(WindowKind(kind), blocks.shape[1])
