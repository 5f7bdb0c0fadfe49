"""Typer CLI entrypoint for deepscribe."""

import json
import logging
from pathlib import Path

import click
import typer
from typer.core import TyperGroup

from deepscribe.config import ENGINE_SAMPLE_RATE, Config, load_config
from deepscribe.decoder import audio_info
from deepscribe.errors import ConfigurationError, DeepscribeError
from deepscribe.model_locator import locate_models
from deepscribe.pipeline import run_pipeline

DEFAULT_COMMAND = "transcribe"


class DefaultCommandGroup(TyperGroup):
    """Command group that runs ``transcribe`` when no command name is given.

    ``deepscribe MODEL_DIR AUDIO_FILE`` is the same as
    ``deepscribe transcribe MODEL_DIR AUDIO_FILE``. A model directory named
    like a command must be passed through ``transcribe`` explicitly.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        group_options = {opt for param in self.get_params(ctx) for opt in param.opts}
        if not args or (args[0] not in self.commands and args[0] not in group_options):
            args = [DEFAULT_COMMAND, *args]
        return super().parse_args(ctx, args)


app = typer.Typer(
    cls=DefaultCommandGroup,
    help="Offline speech-to-text for mono audio files via DeepSpeech",
)

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _merge_config_overrides(
    cfg: Config,
    *,
    no_scorer: bool = False,
    sort_models: bool = False,
) -> Config:
    """Apply CLI overrides to configuration.

    CLI options take precedence over config file values.
    """
    if no_scorer:
        logger.debug("Disabling external scorer")
        cfg.scorer.enabled = False

    if sort_models:
        logger.debug("Enumerating model directory in lexical order")
        cfg.model.sort_entries = True

    return cfg


def _load(config: Path | None, verbose: bool) -> Config:
    cfg = load_config(config)
    cfg.validate()
    if cfg.general.verbose and not verbose:
        _setup_logging(True)
    logger.debug("Config: %s", cfg)
    return cfg


@app.command()
def transcribe(
    model_dir: Path = typer.Argument(
        ..., help="Directory holding a .pb/.pbmm/.tflite model and an optional .scorer"
    ),
    audio_file: Path = typer.Argument(..., help="Mono audio file to transcribe"),
    config: Path | None = typer.Option(
        None, "--config", help="Path to configuration file"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging"
    ),
    no_scorer: bool = typer.Option(
        False, "--no-scorer", help="Ignore any scorer found in the model directory"
    ),
    sort_models: bool = typer.Option(
        False, "--sort-models", help="Pick the lexically last model file when several exist"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output result as JSON instead of plain text"
    ),
) -> None:
    """Transcribe an audio file and print the transcript."""
    _setup_logging(verbose)
    try:
        cfg = _load(config, verbose)
        cfg = _merge_config_overrides(cfg, no_scorer=no_scorer, sort_models=sort_models)
        result = run_pipeline(model_dir, audio_file, cfg)
    except DeepscribeError as e:
        logger.error("%s: %s", type(e).__name__, e)
        raise typer.Exit(1)
    except Exception as e:
        logger.error("Unexpected error: %s", e, exc_info=True)
        raise typer.Exit(1)

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "text": result.text,
                    "model": str(result.model_path),
                    "scorer": str(result.scorer_path) if result.scorer_path else None,
                    "source_sample_rate": result.source_sample_rate,
                    "sample_count": result.sample_count,
                    "resampled": result.resampled,
                },
                indent=2,
            )
        )
    else:
        typer.echo(result.text)


@app.command()
def locate(
    model_dir: Path = typer.Argument(..., help="Model directory to scan"),
    config: Path | None = typer.Option(
        None, "--config", help="Path to configuration file"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    sort_models: bool = typer.Option(
        False, "--sort-models", help="Pick the lexically last model file when several exist"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output as JSON instead of text"
    ),
) -> None:
    """Show which model and scorer would be used."""
    _setup_logging(verbose)
    try:
        cfg = _load(config, verbose)
        cfg = _merge_config_overrides(cfg, sort_models=sort_models)
        selection = locate_models(
            model_dir,
            default_model_name=cfg.model.default_name,
            sort_entries=cfg.model.sort_entries,
        )
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        raise typer.Exit(1)

    model_exists = selection.model_path.is_file()
    if json_output:
        typer.echo(
            json.dumps(
                {
                    "model": str(selection.model_path),
                    "model_exists": model_exists,
                    "scorer": str(selection.scorer_path) if selection.scorer_path else None,
                },
                indent=2,
            )
        )
    else:
        typer.echo(f"Model:  {selection.model_path}{'' if model_exists else ' (missing)'}")
        typer.echo(f"Scorer: {selection.scorer_path or 'none'}")


@app.command()
def info(
    audio_file: Path = typer.Argument(..., help="Audio file to inspect"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    json_output: bool = typer.Option(
        False, "--json", help="Output as JSON instead of text"
    ),
) -> None:
    """Show the stream description of an audio file."""
    _setup_logging(verbose)
    try:
        details = audio_info(audio_file)
    except DeepscribeError as e:
        logger.error("%s: %s", type(e).__name__, e)
        raise typer.Exit(1)

    details["supported"] = details["channels"] == 1
    details["needs_resampling"] = details["sample_rate"] != ENGINE_SAMPLE_RATE

    if json_output:
        typer.echo(json.dumps(details, indent=2))
    else:
        typer.echo(f"{details['path']}")
        typer.echo(f"  Format: {details['format']} ({details['subtype']})")
        typer.echo(f"  Channels: {details['channels']}")
        typer.echo(f"  Sample rate: {details['sample_rate']}Hz")
        typer.echo(f"  Frames: {details['frames']}")
        if not details["supported"]:
            typer.echo("  Not supported: only mono audio can be transcribed")
        elif details["needs_resampling"]:
            typer.echo(f"  Will be resampled to {ENGINE_SAMPLE_RATE}Hz")


if __name__ == "__main__":
    app()
