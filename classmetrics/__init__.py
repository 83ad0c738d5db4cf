from .config import MetricsConfig, load_config
from .errors import (
    ClassMetricsError,
    InputNotFound,
    DatabaseNotFound,
    ModelLoadError,
    NoInputImages,
    ConfigError,
    ImageDecodeError,
)
from .evaluator import ModelEvaluator, best_matches
from .labels import LabelResolver
from .metrics import ClassificationMetrics, MetricsReport
from .pixels import PixelTensorBuilder
from .runtime import ModelRuntime, TorchScriptRuntime

__version__="0.1.0"
