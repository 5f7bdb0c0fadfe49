"""Audio file decoding to signed 16-bit PCM."""

import logging
from pathlib import Path

import numpy as np
import soundfile

from deepscribe._types import AudioStream
from deepscribe.errors import AudioFormatError

logger = logging.getLogger(__name__)

SUPPORTED_CHANNELS = 1


def _open(audio_path: Path) -> soundfile.SoundFile:
    if not audio_path.exists():
        raise AudioFormatError(f"Audio file not found: {audio_path}")
    try:
        return soundfile.SoundFile(str(audio_path))
    except (RuntimeError, OSError) as e:
        raise AudioFormatError(f"Cannot decode audio file {audio_path}: {e}") from e


def _check_channels(audio_path: Path, channels: int) -> None:
    if channels != SUPPORTED_CHANNELS:
        raise AudioFormatError(
            f"Only mono audio is supported, {audio_path} has {channels} channels"
        )


def audio_info(audio_path: str | Path) -> dict:
    """Read the stream description of an audio file without decoding it.

    Returns:
        Dict with keys: path, format, subtype, channels, sample_rate, frames

    Raises:
        AudioFormatError: If the file cannot be opened
    """
    audio_path = Path(audio_path)
    with _open(audio_path) as f:
        return {
            "path": str(audio_path),
            "format": f.format,
            "subtype": f.subtype,
            "channels": f.channels,
            "sample_rate": f.samplerate,
            "frames": f.frames,
        }


def decode_audio(audio_path: str | Path) -> AudioStream:
    """Decode a mono audio file fully into memory.

    The channel count is checked against the stream description before any
    samples are read; multi-channel files are rejected, never downmixed.

    Args:
        audio_path: Path to an audio file in any container libsndfile reads

    Returns:
        AudioStream with int16 samples and the declared sample rate

    Raises:
        AudioFormatError: If the file is unreadable or not mono
    """
    audio_path = Path(audio_path)
    with _open(audio_path) as f:
        _check_channels(audio_path, f.channels)
        sample_rate = f.samplerate
        try:
            samples = f.read(dtype="int16")
        except (RuntimeError, OSError) as e:
            raise AudioFormatError(f"Failed to read samples from {audio_path}: {e}") from e

    samples = np.ascontiguousarray(samples, dtype=np.int16)
    logger.debug(
        "Decoded %s: %d samples at %d Hz", audio_path, len(samples), sample_rate
    )
    return AudioStream(samples=samples, sample_rate=sample_rate, channels=SUPPORTED_CHANNELS)
