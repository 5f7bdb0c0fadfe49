"""Configuration loader and validation."""

import logging
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from deepscribe.errors import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = [
    "ModelConfig",
    "ScorerConfig",
    "GeneralConfig",
    "Config",
    "ConfigurationError",
    "load_config",
    "DEFAULT_MODEL_NAME",
    "ENGINE_SAMPLE_RATE",
]

DEFAULT_MODEL_NAME = "output_graph.pb"

# The acoustic models were trained on this sample rate.
ENGINE_SAMPLE_RATE = 16000

_SECTIONS = ("model", "scorer", "general")


@dataclass
class ModelConfig:
    """Acoustic model discovery and engine settings."""

    default_name: str = DEFAULT_MODEL_NAME
    sort_entries: bool = False
    beam_width: int | None = None


@dataclass
class ScorerConfig:
    """External scorer settings."""

    enabled: bool = True
    lm_alpha: float | None = None
    lm_beta: float | None = None


@dataclass
class GeneralConfig:
    """General application settings."""

    verbose: bool = False


@dataclass
class Config:
    """Main configuration container."""

    model: ModelConfig = field(default_factory=ModelConfig)
    scorer: ScorerConfig = field(default_factory=ScorerConfig)
    general: GeneralConfig = field(default_factory=GeneralConfig)

    @classmethod
    def from_toml(
        cls,
        path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> "Config":
        """Load configuration from TOML file with environment overrides.

        Args:
            path: Explicit config file path. If None, searches in order:
                  1. DEEPSCRIBE_CONFIG env var
                  2. ./deepscribe.toml
                  3. ~/.config/deepscribe.toml
                  Falls back to defaults when nothing is found.
            env: Environment variables for overrides (defaults to os.environ)

        Returns:
            Loaded Config instance

        Raises:
            ConfigurationError: If an explicit config file is missing or invalid
        """
        if env is None:
            import os

            env = os.environ

        resolved_path = _resolve_config_path(path, env)
        raw_data = _load_toml_file(resolved_path) if resolved_path else {}

        try:
            coerced = _coerce_config_values(raw_data, env)
            return cls(
                model=ModelConfig(**coerced["model"]),
                scorer=ScorerConfig(**coerced["scorer"]),
                general=GeneralConfig(**coerced["general"]),
            )
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration values: {e}") from e

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ConfigurationError: If any value has the wrong type or is out of range
        """
        validate_model_config(self.model)
        validate_scorer_config(self.scorer)
        validate_general_config(self.general)


def _resolve_config_path(
    cli_path: Path | None,
    env: Mapping[str, str],
) -> Path | None:
    """Resolve configuration file path following search order.

    Search order:
    1. CLI-provided path
    2. DEEPSCRIBE_CONFIG environment variable
    3. ./deepscribe.toml (current directory)
    4. ~/.config/deepscribe.toml (user config directory)

    Returns None when no file exists in the implicit locations.

    Raises:
        ConfigurationError: If an explicitly requested file does not exist
    """
    if cli_path:
        cli_path = Path(cli_path)
        if cli_path.exists():
            logger.info("Using config file: %s", cli_path.resolve())
            return cli_path.resolve()
        raise ConfigurationError(f"Config file not found: {cli_path}")

    if env_path := env.get("DEEPSCRIBE_CONFIG"):
        candidate = Path(env_path)
        if not candidate.exists():
            raise ConfigurationError(
                f"Config file from DEEPSCRIBE_CONFIG not found: {candidate}"
            )
        logger.info("Using config file: %s", candidate.resolve())
        return candidate.resolve()

    for candidate in (
        Path("deepscribe.toml"),
        Path.home() / ".config" / "deepscribe.toml",
    ):
        if candidate.exists():
            logger.info("Using config file: %s", candidate.resolve())
            return candidate.resolve()

    logger.debug("No config file found, using defaults")
    return None


def _load_toml_file(path: Path) -> dict:
    """Load and parse TOML configuration file.

    Raises:
        ConfigurationError: If file cannot be read or parsed
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Config file not found: {path}") from e
    except Exception as e:
        raise ConfigurationError(f"Failed to parse config file {path}: {e}") from e


def _coerce_config_values(raw_data: dict, env: Mapping[str, str]) -> dict:
    """Normalize raw TOML data for dataclass instantiation.

    Args:
        raw_data: Raw parsed TOML dictionary
        env: Environment variables for overrides

    Returns:
        Coerced dictionary ready for dataclass instantiation
    """
    coerced = {}

    for section in _SECTIONS:
        value = raw_data.get(section, {})
        if not isinstance(value, dict):
            raise ConfigurationError(f"Section [{section}] must be a table")
        coerced[section] = dict(value)

    unknown = set(raw_data) - set(_SECTIONS)
    if unknown:
        logger.warning("Ignoring unknown config sections: %s", ", ".join(sorted(unknown)))

    if beam_width := env.get("DEEPSCRIBE_BEAM_WIDTH"):
        try:
            coerced["model"]["beam_width"] = int(beam_width)
        except ValueError as e:
            raise ConfigurationError(
                f"DEEPSCRIBE_BEAM_WIDTH must be an integer, got '{beam_width}'"
            ) from e

    return coerced


def _require_bool(name: str, value: object) -> None:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{name} must be true or false, got {value!r}")


def _require_int(name: str, value: object) -> None:
    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


def _require_number(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def validate_model_config(model_cfg: ModelConfig) -> None:
    """Validate model configuration.

    Raises:
        ConfigurationError: If model configuration is invalid
    """
    if not isinstance(model_cfg.default_name, str):
        raise ConfigurationError(
            f"model.default_name must be a string, got {model_cfg.default_name!r}"
        )
    _require_bool("model.sort_entries", model_cfg.sort_entries)
    if model_cfg.beam_width is not None:
        _require_int("model.beam_width", model_cfg.beam_width)

    if not model_cfg.default_name or "/" in model_cfg.default_name:
        raise ConfigurationError(
            f"model.default_name must be a bare file name, got '{model_cfg.default_name}'"
        )

    if model_cfg.beam_width is not None and model_cfg.beam_width <= 0:
        raise ConfigurationError(
            f"beam_width must be positive, got {model_cfg.beam_width}"
        )


def validate_scorer_config(scorer_cfg: ScorerConfig) -> None:
    """Validate scorer configuration.

    Raises:
        ConfigurationError: If a value has the wrong type or only one of
            lm_alpha/lm_beta is set
    """
    _require_bool("scorer.enabled", scorer_cfg.enabled)
    if scorer_cfg.lm_alpha is not None:
        _require_number("scorer.lm_alpha", scorer_cfg.lm_alpha)
    if scorer_cfg.lm_beta is not None:
        _require_number("scorer.lm_beta", scorer_cfg.lm_beta)

    if (scorer_cfg.lm_alpha is None) != (scorer_cfg.lm_beta is None):
        raise ConfigurationError("scorer.lm_alpha and scorer.lm_beta must be set together")


def validate_general_config(general_cfg: GeneralConfig) -> None:
    """Validate general configuration."""
    _require_bool("general.verbose", general_cfg.verbose)


def load_config(
    path: Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> Config:
    """Load configuration from TOML file.

    Convenience wrapper around Config.from_toml().
    """
    return Config.from_toml(path, env=env)
