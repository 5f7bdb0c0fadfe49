"""Linear state machine running model discovery, decoding, resampling and recognition."""

import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from deepscribe._types import ModelSelection, TranscriptionResult
from deepscribe.config import Config
from deepscribe.decoder import decode_audio
from deepscribe.errors import DeepscribeError
from deepscribe.model_locator import locate_models
from deepscribe.recognizer import Recognizer
from deepscribe.resampler import resample_stream

logger = logging.getLogger(__name__)


class State(Enum):
    """Pipeline stage."""

    START = "start"
    MODEL_SELECTED = "model_selected"
    ENGINE_LOADED = "engine_loaded"
    AUDIO_DECODED = "audio_decoded"
    RESAMPLED = "resampled"
    TRANSCRIBED = "transcribed"
    DONE = "done"
    FAILED = "failed"


RecognizerFactory = Callable[[ModelSelection, Config], Recognizer]


def build_recognizer(selection: ModelSelection, config: Config) -> Recognizer:
    """Create a Recognizer from configuration."""
    return Recognizer(
        selection,
        use_scorer=config.scorer.enabled,
        beam_width=config.model.beam_width,
        lm_alpha=config.scorer.lm_alpha,
        lm_beta=config.scorer.lm_beta,
    )


class Pipeline:
    """Runs every stage exactly once, in order.

    Any error moves the pipeline to FAILED and is re-raised to the caller;
    there is no retry and no partial result. Audio is resampled to whatever
    rate the loaded engine reports.
    """

    def __init__(
        self,
        model_dir: str | Path,
        audio_path: str | Path,
        config: Config | None = None,
        *,
        recognizer_factory: RecognizerFactory | None = None,
    ):
        self.model_dir = Path(model_dir)
        self.audio_path = Path(audio_path)
        self.config = config or Config()
        self._recognizer_factory = recognizer_factory or build_recognizer

        self.state = State.START
        self.last_error: Exception | None = None

    def _advance(self, new_state: State) -> None:
        logger.debug("State transition: %s -> %s", self.state.name, new_state.name)
        self.state = new_state

    def run(self) -> TranscriptionResult:
        """Execute the pipeline.

        Returns:
            TranscriptionResult with the transcript text

        Raises:
            DeepscribeError: Subclass naming the stage that failed
            RuntimeError: If the pipeline has already run
        """
        if self.state != State.START:
            raise RuntimeError(f"Pipeline already ran (state={self.state.value})")

        try:
            return self._run_stages()
        except DeepscribeError as e:
            logger.debug("Pipeline failed in %s state: %s", self.state.name, e)
            self._fail(e)
            raise
        except Exception as e:
            logger.error("Unexpected error in %s state: %s", self.state.name, e)
            self._fail(e)
            raise

    def _fail(self, error: Exception) -> None:
        self.last_error = error
        self._advance(State.FAILED)

    def _run_stages(self) -> TranscriptionResult:
        cfg = self.config

        selection = locate_models(
            self.model_dir,
            default_model_name=cfg.model.default_name,
            sort_entries=cfg.model.sort_entries,
        )
        self._advance(State.MODEL_SELECTED)

        recognizer = self._recognizer_factory(selection, cfg)
        recognizer.load()
        self._advance(State.ENGINE_LOADED)

        stream = decode_audio(self.audio_path)
        self._advance(State.AUDIO_DECODED)

        buffer = resample_stream(stream, recognizer.sample_rate)
        self._advance(State.RESAMPLED)

        text = recognizer.transcribe(buffer)
        self._advance(State.TRANSCRIBED)

        result = TranscriptionResult(
            text=text,
            model_path=selection.model_path,
            scorer_path=selection.scorer_path if recognizer.use_scorer else None,
            source_sample_rate=stream.sample_rate,
            sample_count=len(buffer.samples),
            resampled=buffer.resampled,
        )
        self._advance(State.DONE)
        return result


def run_pipeline(
    model_dir: str | Path,
    audio_path: str | Path,
    config: Config | None = None,
    *,
    recognizer_factory: RecognizerFactory | None = None,
) -> TranscriptionResult:
    """Run the full pipeline once and return the result."""
    return Pipeline(
        model_dir,
        audio_path,
        config,
        recognizer_factory=recognizer_factory,
    ).run()
