import numpy as np
import pytest

from lodprep.dsp.blocks import block_means, remove_dc_offset, segment_blocks
from lodprep.errors import LengthMismatch


def _ramp(length: int) -> np.ndarray:
    idx = np.arange(length, dtype=np.float64)
    return idx + 1j * (1000.0 - idx)


@pytest.mark.parametrize("length", [0, 64, 128, 64 * 16])
def test_segment_produces_length_over_n_blocks(length: int) -> None:
    blocks = segment_blocks(_ramp(length), 64)
    assert blocks.shape == (length // 64, 64)
    np.testing.assert_array_equal(blocks.reshape(-1), _ramp(length))


@pytest.mark.parametrize("length", [1, 61, 63, 65, 127])
def test_segment_rejects_partial_blocks(length: int) -> None:
    with pytest.raises(LengthMismatch) as excinfo:
        segment_blocks(_ramp(length), 64)
    assert excinfo.value.sample_count == length
    assert excinfo.value.block_size == 64


def test_segment_copies_input() -> None:
    samples = _ramp(8)
    blocks = segment_blocks(samples, 4)
    samples[0] = -99.0
    assert blocks[0, 0] == 0.0 + 1000.0j


def test_dc_removal_zeroes_each_block_mean() -> None:
    rng = np.random.default_rng(7)
    samples = rng.integers(0, 4096, size=256) + 1j * rng.integers(0, 4096, size=256)
    centered = remove_dc_offset(segment_blocks(samples, 64))
    np.testing.assert_allclose(block_means(centered), np.zeros(4), atol=1e-9)


def test_constant_block_becomes_exactly_zero() -> None:
    blocks = segment_blocks(np.full(64, 1234.0 + 4321.0j), 64)
    centered = remove_dc_offset(blocks)
    assert np.all(centered == 0)


def test_block_means_do_not_carry_across_blocks() -> None:
    samples = np.concatenate([np.full(4, 1.0 + 1.0j), np.full(4, 5.0 - 2.0j)])
    blocks = segment_blocks(samples, 4)
    np.testing.assert_allclose(block_means(blocks), [1.0 + 1.0j, 5.0 - 2.0j])
    assert np.all(remove_dc_offset(blocks) == 0)


def test_dc_removal_on_no_blocks() -> None:
    centered = remove_dc_offset(segment_blocks([], 64))
    assert centered.shape == (0, 64)
