import math

import numpy as np
import pytest
from scipy.signal import windows as sp_windows

from lodprep.dsp.windows import WindowKind, apply_window, window_coefficient, window_vector
from lodprep.errors import ConfigurationError


@pytest.mark.parametrize("block_size", [1, 2, 7, 64, 100])
def test_rectangular_window_is_all_ones(block_size: int) -> None:
    win = window_vector(WindowKind.RECTANGULAR, block_size)
    assert win.shape == (block_size,)
    assert np.all(win == 1.0)
    assert all(window_coefficient(WindowKind.RECTANGULAR, n, block_size) == 1.0 for n in range(block_size))


def test_hamming_uses_25_over_46() -> None:
    block_size = 64
    alpha = 25.0 / 46.0
    expected = [alpha - (1.0 - alpha) * math.cos(2.0 * math.pi * n / (block_size - 1)) for n in range(block_size)]
    np.testing.assert_allclose(window_vector(WindowKind.HAMMING, block_size), expected, rtol=0, atol=1e-12)
    np.testing.assert_allclose(
        window_vector(WindowKind.HAMMING, block_size),
        sp_windows.general_hamming(block_size, alpha, sym=True),
        atol=1e-12,
    )


def test_blackman_matches_three_term_formula() -> None:
    block_size = 64
    a = 0.16
    a0, a1, a2 = (1.0 - a) / 2.0, 0.5, a / 2.0
    n = 17
    x = 2.0 * math.pi * n / (block_size - 1)
    expected = a0 - a1 * math.cos(x) + a2 * math.cos(2.0 * x)
    assert window_coefficient(WindowKind.BLACKMAN, n, block_size) == pytest.approx(expected, abs=1e-12)
    np.testing.assert_allclose(window_vector(WindowKind.BLACKMAN, block_size), sp_windows.blackman(block_size), atol=1e-12)


def test_blackman_harris_matches_four_term_formula() -> None:
    block_size = 64
    n = 40
    x = 2.0 * math.pi * n / (block_size - 1)
    expected = 0.35875 - 0.48829 * math.cos(x) + 0.14128 * math.cos(2.0 * x) - 0.01168 * math.cos(3.0 * x)
    assert window_coefficient(WindowKind.BLACKMAN_HARRIS, n, block_size) == pytest.approx(expected, abs=1e-12)
    np.testing.assert_allclose(
        window_vector(WindowKind.BLACKMAN_HARRIS, block_size),
        sp_windows.blackmanharris(block_size),
        atol=1e-12,
    )


@pytest.mark.parametrize("n", [-1, 64, 100])
def test_window_index_outside_block_is_rejected(n: int) -> None:
    with pytest.raises(ValueError):
        window_coefficient(WindowKind.HAMMING, n, 64)


def test_window_vector_is_a_private_copy() -> None:
    first = window_vector(WindowKind.BLACKMAN, 16)
    first[:] = 0.0
    assert window_vector(WindowKind.BLACKMAN, 16)[8] > 0.0


def test_from_name_accepts_cli_spellings() -> None:
    assert WindowKind.from_name("blackman-harris") is WindowKind.BLACKMAN_HARRIS
    assert WindowKind.from_name("BLACKMAN_HARRIS") is WindowKind.BLACKMAN_HARRIS
    assert WindowKind.from_name("dirichlet") is WindowKind.RECTANGULAR
    assert WindowKind.from_name("Hamming") is WindowKind.HAMMING
    with pytest.raises(ConfigurationError):
        WindowKind.from_name("hann")


def test_apply_window_scales_each_index_and_leaves_input_untouched() -> None:
    blocks = np.ones((3, 8), dtype=np.complex128) * (2.0 + 1.0j)
    out = apply_window(blocks, WindowKind.HAMMING)
    win = window_vector(WindowKind.HAMMING, 8)
    for row in out:
        np.testing.assert_allclose(row, (2.0 + 1.0j) * win)
    assert np.all(blocks == 2.0 + 1.0j)
    assert out is not blocks
