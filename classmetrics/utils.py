import logging
import fnmatch
from pathlib import Path
from typing import List

from .errors import InputNotFound

IMAGE_EXTENSIONS=('.gif', '.bmp', '.jpg', '.jpeg', '.png')

def setup_logging(log_file: str=None, level=logging.INFO):
    handlers=[logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )
    return logging.getLogger()

def check_input_file(path, message: str=None, error=InputNotFound) -> Path:
    """Raise `error` unless `path` points to an existing file"""
    path=Path(path) if path is not None else None
    if path is None or not path.is_file():
        raise error(message or f"Unable to locate file with path '{path}'!")
    return path

def is_supported_image(path) -> bool:
    return Path(path).suffix.lower() in IMAGE_EXTENSIONS

def class_image_pattern(wordnet_id: str) -> str:
    return f"n{wordnet_id}_*.jpeg"

def list_class_images(target_dir, wordnet_id: str) -> List[Path]:
    """
    List the images of one class inside target_dir.
    Files follow the `n<wordnet_id>_*.jpeg` naming convention, matched
    case-insensitively and returned sorted by name.
    """
    target_dir=Path(target_dir)
    if not target_dir.is_dir():
        raise InputNotFound(f"The image directory {target_dir} can't be located!")

    pattern=class_image_pattern(wordnet_id).lower()
    files=[
        p for p in target_dir.iterdir()
        if p.is_file() and fnmatch.fnmatchcase(p.name.lower(), pattern)
    ]
    return sorted(files)
