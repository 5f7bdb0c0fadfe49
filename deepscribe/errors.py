"""Error taxonomy shared by every pipeline stage."""

__all__ = [
    "DeepscribeError",
    "ConfigurationError",
    "ModelLoadError",
    "AudioFormatError",
    "InferenceError",
]


class DeepscribeError(Exception):
    """Base class for all pipeline failures."""

    pass


class ConfigurationError(DeepscribeError):
    """Invalid arguments, configuration file or unreadable model directory."""

    pass


class ModelLoadError(DeepscribeError):
    """Acoustic model could not be loaded or scorer could not be attached."""

    pass


class AudioFormatError(DeepscribeError):
    """Audio file unreadable by the decoder or not single-channel."""

    pass


class InferenceError(DeepscribeError):
    """Recognition engine failed while transcribing."""

    pass
