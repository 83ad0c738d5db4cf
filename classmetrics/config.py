from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from .errors import ConfigError

STRICT_PROMPT="Run metrics with strict mode (y/N)?"

#Config file section -> MetricsConfig field
PATH_KEYS={
    'model': 'model_path',
    'images': 'target_dir',
    'train_map': 'train_map_path',
    'wordnet': 'wordnet_path',
}
EVALUATION_KEYS=('expected_id', 'strict', 'threads', 'image_size', 'top_k', 'mean_center')

@dataclass(frozen=True)
class MetricsConfig:
    """Immutable parameters of one accuracy run"""
    model_path: str
    target_dir: str
    expected_id: str
    train_map_path: str
    wordnet_path: str=None
    strict: bool=False
    threads: int=1
    image_size: int=224
    top_k: int=5
    mean_center: bool=True

    def __post_init__(self):
        if not isinstance(self.expected_id, str):
            raise ConfigError(
                f"expected_id must be a string, got {self.expected_id!r}; "
                f"quote it in YAML (expected_id: \"01440764\")"
            )
        #Accept both "01772222" and the "n01772222" folder style
        expected_id=self.expected_id.strip()
        if expected_id.startswith('n'):
            expected_id=expected_id[1:]
        if not expected_id.isdigit():
            raise ConfigError(f"Invalid wordnet id '{self.expected_id}'")
        object.__setattr__(self, 'expected_id', expected_id)

        for name in ('strict', 'mean_center'):
            value=getattr(self, name)
            if not isinstance(value, bool):
                raise ConfigError(f"{name} must be true or false, got {value!r}")
        for name in ('threads', 'image_size', 'top_k'):
            value=getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be an integer, got {value!r}")

        if self.threads<1:
            raise ConfigError(f"threads must be at least 1, got {self.threads}")
        if self.image_size<1:
            raise ConfigError(f"image_size must be positive, got {self.image_size}")
        if self.top_k<1:
            raise ConfigError(f"top_k must be at least 1, got {self.top_k}")


def parse_strict_answer(answer: str) -> bool:
    """Only an exact lowercase 'y' turns strict mode on"""
    return answer=='y'

def ask_strict_mode(input_fn=input) -> bool:
    return parse_strict_answer(input_fn(STRICT_PROMPT + " "))

def flatten_config(raw: dict, **overrides) -> dict:
    """
    Map the parsed YAML layout onto MetricsConfig field names:

        paths: {model, images, train_map, wordnet}
        evaluation: {expected_id, strict, threads, image_size, top_k, mean_center}

    Keyword overrides win over file values; None overrides are ignored.
    """
    raw=raw or {}
    paths=raw.get('paths') or {}
    evaluation=raw.get('evaluation') or {}

    values={}
    for key, field_name in PATH_KEYS.items():
        if paths.get(key) is not None:
            values[field_name]=str(paths[key])
    for key in EVALUATION_KEYS:
        if evaluation.get(key) is not None:
            values[key]=evaluation[key]
    values.update({k: v for k, v in overrides.items() if v is not None})

    known={f.name for f in fields(MetricsConfig)}
    unknown=set(values)-known
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")
    return values

def require(values: dict, names) -> None:
    missing=[name for name in names if values.get(name) in (None, '')]
    if missing:
        raise ConfigError(f"Missing required config values: {', '.join(missing)}")

def config_from_dict(raw: dict, **overrides) -> MetricsConfig:
    values=flatten_config(raw, **overrides)
    require(values, ['model_path', 'target_dir', 'expected_id', 'train_map_path'])
    return MetricsConfig(**values)

def read_config_file(config_path: str=None) -> dict:
    if not config_path:
        return {}
    path=Path(config_path)
    if not path.is_file():
        raise ConfigError(f"Config file {config_path} can't be located!")
    with open(path, 'r') as f:
        try:
            return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {config_path}: {e}") from e

def load_config(config_path: str=None, **overrides) -> MetricsConfig:
    return config_from_dict(read_config_file(config_path), **overrides)
