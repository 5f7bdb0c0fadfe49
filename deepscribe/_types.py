"""Shared types and dataclasses for cross-module use."""

from dataclasses import dataclass
from pathlib import Path

import numpy as np


@dataclass(frozen=True)
class ModelSelection:
    """Acoustic model and optional scorer chosen from a model directory."""

    model_path: Path
    scorer_path: Path | None = None


@dataclass
class AudioStream:
    """Decoded mono audio as signed 16-bit samples."""

    samples: np.ndarray
    sample_rate: int
    channels: int = 1

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        if self.sample_rate <= 0:
            return 0.0
        return len(self.samples) / self.sample_rate


@dataclass
class ResampledBuffer:
    """Signed 16-bit samples at the recognition engine's sample rate."""

    samples: np.ndarray
    sample_rate: int
    resampled: bool = False


@dataclass
class TranscriptionResult:
    """Result from a pipeline run."""

    text: str
    model_path: Path
    scorer_path: Path | None = None
    source_sample_rate: int = 0
    sample_count: int = 0
    resampled: bool = False
