"""Acoustic model and scorer discovery in a model directory."""

import logging
from collections.abc import Iterable
from functools import reduce
from pathlib import Path

from deepscribe._types import ModelSelection
from deepscribe.config import DEFAULT_MODEL_NAME
from deepscribe.errors import ConfigurationError

logger = logging.getLogger(__name__)

MODEL_SUFFIXES = (".pb", ".pbmm", ".tflite")
SCORER_SUFFIX = ".scorer"


def _is_regular_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError as e:
        logger.debug("Skipping unreadable entry %s: %s", path, e)
        return False


def _fold_entry(
    acc: tuple[Path | None, Path | None], entry: Path
) -> tuple[Path | None, Path | None]:
    """Fold one directory entry into the (model, scorer) slots.

    Later candidates replace earlier ones in the same slot.
    """
    model, scorer = acc
    if not _is_regular_file(entry):
        return acc
    if entry.suffix in MODEL_SUFFIXES:
        return entry, scorer
    if entry.suffix == SCORER_SUFFIX:
        return model, entry
    return acc


def select_models(
    entries: Iterable[Path],
    directory: Path,
    *,
    default_model_name: str = DEFAULT_MODEL_NAME,
) -> ModelSelection:
    """Select model and scorer from entries in the order given.

    The last model candidate and the last scorer candidate win. When no
    model candidate is present, ``directory / default_model_name`` is
    returned whether or not it exists.

    Args:
        entries: Directory entries in enumeration order
        directory: Directory the entries belong to
        default_model_name: Fallback model file name

    Returns:
        ModelSelection for the given entries
    """
    model, scorer = reduce(_fold_entry, entries, (None, None))
    if model is None:
        model = Path(directory) / default_model_name
        logger.debug("No model file found in %s, falling back to %s", directory, model)
    return ModelSelection(model_path=model, scorer_path=scorer)


def locate_models(
    directory: str | Path,
    *,
    default_model_name: str = DEFAULT_MODEL_NAME,
    sort_entries: bool = False,
) -> ModelSelection:
    """Scan a model directory for an acoustic model and an optional scorer.

    Only direct entries are inspected. Files ending in ``.pb``, ``.pbmm`` or
    ``.tflite`` are model candidates and files ending in ``.scorer`` are
    scorer candidates; anything else is ignored.

    Directory enumeration order is platform dependent, so when several
    candidates share a slot the winner is whichever the filesystem lists
    last. Pass ``sort_entries=True`` to enumerate in lexical filename order
    instead.

    Args:
        directory: Model directory path
        default_model_name: Fallback model file name
        sort_entries: Enumerate entries in lexical order

    Returns:
        ModelSelection

    Raises:
        ConfigurationError: If the directory cannot be read
    """
    directory = Path(directory)
    try:
        entries = list(directory.iterdir())
    except (FileNotFoundError, NotADirectoryError) as e:
        raise ConfigurationError(f"Model directory is not a directory: {directory}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read model directory {directory}: {e}") from e

    if sort_entries:
        entries.sort(key=lambda p: p.name)

    selection = select_models(entries, directory, default_model_name=default_model_name)
    logger.info(
        "Selected model %s (scorer: %s)",
        selection.model_path,
        selection.scorer_path or "none",
    )
    return selection
