"""FFT helpers turning windowed blocks into normalized magnitude spectra."""

from __future__ import annotations

import numpy as np  # type: ignore
import scipy.fft as sp_fft  # type: ignore
from numpy.typing import ArrayLike  # type: ignore

from lodprep.dsp.blocks import remove_dc_offset, segment_blocks
from lodprep.dsp.windows import WindowKind, apply_window


def forward_transform(blocks: np.ndarray) -> np.ndarray:
    """Unscaled complex forward DFT of every block along the last axis.

    X[k] = sum_n x[n] * exp(-2j*pi*k*n/N). Works for any N; all blocks go
    through a single batched scipy.fft call.
    """
    blocks = np.asarray(blocks, dtype=np.complex128)
    if blocks.ndim != 2:
        raise ValueError("forward_transform expects a (blocks, N) array")
    if blocks.shape[0] == 0:
        return np.empty_like(blocks)
    return sp_fft.fft(blocks, axis=-1, norm="backward")


def normalize_spectrum(spectra: np.ndarray) -> np.ndarray:
    """Scale raw spectra by 1/sqrt(N) (unitary normalization)."""
    spectra = np.asarray(spectra)
    return spectra / np.sqrt(spectra.shape[-1])


def spectrum_magnitudes(spectra: np.ndarray) -> np.ndarray:
    """Reduce complex bins to real magnitudes sqrt(re^2 + im^2)."""
    return np.abs(spectra)


def compute_block_magnitudes(
    samples: ArrayLike,
    block_size: int,
    window: WindowKind = WindowKind.RECTANGULAR,
) -> np.ndarray:
    """Run segment -> DC removal -> window -> FFT -> normalize for one sensor.

    Returns a ``(blocks, N)`` float64 array of normalized bin magnitudes.
    Propagates ``LengthMismatch`` from the segmenter.
    """
    blocks = segment_blocks(samples, block_size)
    centered = remove_dc_offset(blocks)
    windowed = apply_window(centered, window)
    spectra = forward_transform(windowed)
    return spectrum_magnitudes(normalize_spectrum(spectra))
