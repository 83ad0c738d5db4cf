class ClassMetricsError(Exception):
    """Base class for all classmetrics failures"""


class InputNotFound(ClassMetricsError, FileNotFoundError):
    """An image, model, mapping table or lexical database path is missing"""


class DatabaseNotFound(InputNotFound):
    """The lexical database file can't be located"""


class ModelLoadError(ClassMetricsError):
    """The model runtime failed to initialise or parse the model artifact"""


class NoInputImages(ClassMetricsError):
    """No image in the target directory matched the expected class"""


class ConfigError(ClassMetricsError):
    """The metrics configuration is incomplete or invalid"""


class ImageDecodeError(ClassMetricsError):
    """An image file exists but can't be decoded"""
