"""Linear interpolation sample rate conversion."""

import logging

import numpy as np

from deepscribe._types import AudioStream, ResampledBuffer
from deepscribe.config import ENGINE_SAMPLE_RATE

logger = logging.getLogger(__name__)

_INT16_MIN = np.iinfo(np.int16).min
_INT16_MAX = np.iinfo(np.int16).max


def output_length(sample_count: int, source_rate: int, target_rate: int) -> int:
    """Number of output samples spanning the same duration as the input."""
    return int(round(sample_count * target_rate / source_rate))


def resample(
    samples: np.ndarray,
    source_rate: int,
    target_rate: int = ENGINE_SAMPLE_RATE,
) -> np.ndarray:
    """Resample int16 samples by linear interpolation.

    Output sample ``j`` sits at source position ``j * source_rate / target_rate``
    and is the straight-line blend of the two bracketing input samples.
    Positions beyond the last input sample hold its value. No anti-alias
    filtering is applied.

    Args:
        samples: Mono int16 samples
        source_rate: Sample rate of ``samples`` in Hz
        target_rate: Desired sample rate in Hz

    Returns:
        int16 samples at ``target_rate``; ``samples`` itself when the rates match

    Raises:
        ValueError: If either rate is not positive
    """
    if source_rate <= 0 or target_rate <= 0:
        raise ValueError(
            f"Sample rates must be positive, got {source_rate} -> {target_rate}"
        )

    if source_rate == target_rate:
        return samples

    n_out = output_length(len(samples), source_rate, target_rate)
    if len(samples) == 0 or n_out == 0:
        return np.zeros(0, dtype=np.int16)

    positions = np.arange(n_out, dtype=np.float64) * (source_rate / target_rate)
    source = np.asarray(samples, dtype=np.float64)
    interpolated = np.interp(positions, np.arange(len(source), dtype=np.float64), source)

    return np.clip(np.rint(interpolated), _INT16_MIN, _INT16_MAX).astype(np.int16)


def resample_stream(
    stream: AudioStream,
    target_rate: int = ENGINE_SAMPLE_RATE,
) -> ResampledBuffer:
    """Convert a decoded stream to the engine sample rate."""
    if stream.sample_rate == target_rate:
        logger.debug("Audio already at %d Hz, skipping resampling", target_rate)
        return ResampledBuffer(samples=stream.samples, sample_rate=target_rate, resampled=False)

    logger.info("Resampling from %d Hz to %d Hz", stream.sample_rate, target_rate)
    samples = resample(stream.samples, stream.sample_rate, target_rate)
    logger.debug("Resampled %d -> %d samples", len(stream.samples), len(samples))
    return ResampledBuffer(samples=samples, sample_rate=target_rate, resampled=True)
