"""Tests for resampler module."""

import numpy as np
import pytest

from deepscribe._types import AudioStream
from deepscribe.resampler import output_length, resample, resample_stream


RATES = [8000, 11025, 16000, 22050, 44100, 48000]


class TestResample:
    """Tests for linear interpolation resampling."""

    def test_identity_when_rates_match(self):
        """Test equal rates return the input unchanged."""
        samples = np.array([1, -2, 300, -32768, 32767], dtype=np.int16)

        result = resample(samples, 16000, 16000)

        assert result is samples

    @pytest.mark.parametrize("source_rate", RATES)
    @pytest.mark.parametrize("target_rate", [8000, 16000, 44100])
    def test_output_length(self, source_rate, target_rate):
        """Test output length is within one sample of the scaled length."""
        samples = np.arange(1234, dtype=np.int16)

        result = resample(samples, source_rate, target_rate)

        expected = round(len(samples) * target_rate / source_rate)
        assert abs(len(result) - expected) <= 1

    @pytest.mark.parametrize("source_rate", RATES)
    @pytest.mark.parametrize("value", [-32768, -7, 0, 1234, 32767])
    def test_constant_signal_stays_constant(self, source_rate, value):
        """Test linear interpolation of a constant is the constant."""
        samples = np.full(997, value, dtype=np.int16)

        result = resample(samples, source_rate, 16000)

        assert len(result) > 0
        assert np.all(result == value)

    def test_upsample_ramp(self):
        """Test 2x upsampling inserts midpoints and holds the last sample."""
        samples = np.array([0, 10, 20], dtype=np.int16)

        result = resample(samples, 8000, 16000)

        np.testing.assert_array_equal(result, [0, 5, 10, 15, 20, 20])

    def test_downsample_ramp(self):
        """Test 2x downsampling keeps every other sample."""
        samples = np.array([0, 10, 20, 30], dtype=np.int16)

        result = resample(samples, 16000, 8000)

        np.testing.assert_array_equal(result, [0, 20])

    def test_fractional_ratio(self):
        """Test a non-integer ratio weights neighbours by distance."""
        samples = np.array([0, 100, 200, 300], dtype=np.int16)

        # Positions 0, 0.75, 1.5, 2.25, 3.0 (last clamps)
        result = resample(samples, 12000, 16000)

        np.testing.assert_array_equal(result, [0, 75, 150, 225, 300])

    def test_output_dtype_is_int16(self):
        """Test resampled samples keep the int16 type."""
        samples = np.array([5, -5, 5, -5], dtype=np.int16)

        result = resample(samples, 44100, 16000)

        assert result.dtype == np.int16

    def test_output_within_input_bounds(self):
        """Test interpolation never exceeds the input range."""
        rng = np.random.default_rng(1234)
        samples = rng.integers(-32768, 32768, size=4096).astype(np.int16)

        result = resample(samples, 22050, 16000)

        assert result.min() >= samples.min()
        assert result.max() <= samples.max()

    def test_empty_input(self):
        """Test empty input produces empty output."""
        result = resample(np.zeros(0, dtype=np.int16), 8000, 16000)

        assert len(result) == 0
        assert result.dtype == np.int16

    def test_single_sample(self):
        """Test a single sample upsampled is repeated."""
        result = resample(np.array([42], dtype=np.int16), 8000, 16000)

        np.testing.assert_array_equal(result, [42, 42])

    @pytest.mark.parametrize("source_rate,target_rate", [(0, 16000), (-8000, 16000), (8000, 0)])
    def test_invalid_rates(self, source_rate, target_rate):
        """Test non-positive rates are rejected."""
        with pytest.raises(ValueError, match="must be positive"):
            resample(np.zeros(10, dtype=np.int16), source_rate, target_rate)

    def test_output_length_helper(self):
        """Test output_length rounds to the nearest sample."""
        assert output_length(100, 8000, 16000) == 200
        assert output_length(3, 44100, 16000) == 1
        assert output_length(0, 8000, 16000) == 0


class TestResampleStream:
    """Tests for stream-level resampling."""

    def test_passthrough_shares_samples(self):
        """Test a 16 kHz stream is passed through untouched."""
        stream = AudioStream(samples=np.arange(10, dtype=np.int16), sample_rate=16000)

        buffer = resample_stream(stream)

        assert buffer.samples is stream.samples
        assert buffer.sample_rate == 16000
        assert buffer.resampled is False

    def test_resamples_other_rates(self):
        """Test an 8 kHz stream is converted to 16 kHz."""
        stream = AudioStream(samples=np.zeros(800, dtype=np.int16), sample_rate=8000)

        buffer = resample_stream(stream)

        assert buffer.sample_rate == 16000
        assert len(buffer.samples) == 1600
        assert buffer.resampled is True

    def test_custom_target_rate(self):
        """Test a custom target rate is honoured."""
        stream = AudioStream(samples=np.zeros(1600, dtype=np.int16), sample_rate=16000)

        buffer = resample_stream(stream, target_rate=8000)

        assert buffer.sample_rate == 8000
        assert len(buffer.samples) == 800
