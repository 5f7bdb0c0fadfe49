"""Speech recognition via a DeepSpeech model."""

import logging
import time
from collections.abc import Callable
from typing import Any

import numpy as np

from deepscribe._types import ModelSelection, ResampledBuffer
from deepscribe.config import ENGINE_SAMPLE_RATE
from deepscribe.errors import InferenceError, ModelLoadError

logger = logging.getLogger(__name__)


def _default_model_factory(model_path: str) -> Any:
    from deepspeech import Model

    return Model(model_path)


class Recognizer:
    """Encapsulates a DeepSpeech model and single-shot transcription.

    Loads the acoustic model once, attaches the scorer when one was selected,
    and transcribes whole buffers.
    """

    def __init__(
        self,
        selection: ModelSelection,
        *,
        use_scorer: bool = True,
        beam_width: int | None = None,
        lm_alpha: float | None = None,
        lm_beta: float | None = None,
        model_factory: Callable[[str], Any] | None = None,
    ):
        """Initialize recognizer.

        Args:
            selection: Model and scorer paths from the model locator
            use_scorer: Attach the selected scorer, if any
            beam_width: Optional decoder beam width
            lm_alpha: Optional scorer language model weight
            lm_beta: Optional scorer word insertion weight
            model_factory: Builds the engine from a model path (defaults to deepspeech.Model)
        """
        self.selection = selection
        self.use_scorer = use_scorer
        self.beam_width = beam_width
        self.lm_alpha = lm_alpha
        self.lm_beta = lm_beta
        self._model_factory = model_factory or _default_model_factory
        self._model = None
        logger.info(
            "Recognizer initialized: model=%s, scorer=%s",
            selection.model_path,
            selection.scorer_path if use_scorer else "disabled",
        )

    @property
    def loaded(self) -> bool:
        return self._model is not None

    @property
    def sample_rate(self) -> int:
        """Sample rate the loaded model expects."""
        if self._model is None:
            return ENGINE_SAMPLE_RATE
        try:
            return int(self._model.sampleRate())
        except (AttributeError, TypeError, ValueError):
            logger.debug("Engine does not report a sample rate, assuming %d Hz", ENGINE_SAMPLE_RATE)
            return ENGINE_SAMPLE_RATE

    def load(self) -> None:
        """Load the acoustic model and attach the scorer.

        Raises:
            ModelLoadError: If the model cannot be loaded or the scorer attached
        """
        if self._model is not None:
            return

        model_path = self.selection.model_path
        if not model_path.is_file():
            raise ModelLoadError(f"Acoustic model not found: {model_path}")

        logger.info("Loading acoustic model: %s", model_path)
        try:
            start_time = time.perf_counter()
            model = self._model_factory(str(model_path))
            duration = time.perf_counter() - start_time
            logger.info("Model loaded successfully in %.2f seconds", duration)
        except Exception as e:
            logger.error("Failed to load model %s: %s", model_path, e)
            raise ModelLoadError(f"Failed to load acoustic model '{model_path}': {e}") from e

        try:
            if self.beam_width is not None:
                model.setBeamWidth(self.beam_width)
                logger.debug("Beam width set to %d", self.beam_width)

            scorer_path = self.selection.scorer_path
            if self.use_scorer and scorer_path is not None:
                logger.info("Using external scorer `%s`", scorer_path)
                model.enableExternalScorer(str(scorer_path))
                if self.lm_alpha is not None and self.lm_beta is not None:
                    model.setScorerAlphaBeta(self.lm_alpha, self.lm_beta)
                    logger.debug(
                        "Scorer alpha/beta set to %.3f/%.3f", self.lm_alpha, self.lm_beta
                    )
        except Exception as e:
            logger.error("Failed to configure model %s: %s", model_path, e)
            raise ModelLoadError(
                f"Failed to attach scorer '{self.selection.scorer_path}': {e}"
            ) from e

        self._model = model

    def transcribe(self, buffer: ResampledBuffer) -> str:
        """Transcribe a whole buffer.

        Args:
            buffer: int16 samples at the engine sample rate

        Returns:
            Transcript text

        Raises:
            ModelLoadError: If the model was not loaded and loading fails
            InferenceError: If the buffer rate is wrong or the engine fails
        """
        self.load()

        if buffer.sample_rate != self.sample_rate:
            raise InferenceError(
                f"Engine expects {self.sample_rate} Hz audio, got {buffer.sample_rate} Hz"
            )

        samples = buffer.samples
        if samples.dtype != np.int16:
            raise InferenceError(f"Engine expects int16 samples, got {samples.dtype}")

        logger.info("Starting transcription of %d samples", len(samples))
        try:
            start_time = time.perf_counter()
            text = self._model.stt(samples)
            duration = time.perf_counter() - start_time
        except Exception as e:
            logger.error("Transcription failed: %s", e, exc_info=True)
            raise InferenceError(f"Transcription failed: {e}") from e

        if not isinstance(text, str):
            raise InferenceError(f"Engine returned {type(text).__name__}, expected str")

        logger.info("Transcription completed in %.2f seconds", duration)
        return text
