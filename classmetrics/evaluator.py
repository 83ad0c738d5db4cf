import logging
from typing import List, Sequence

import numpy as np

from .errors import ModelLoadError
from .runtime import ModelRuntime, TorchScriptRuntime
from .utils import check_input_file

def best_matches(scores: Sequence[float], k: int=5) -> List[int]:
    """
    Class offsets of the k highest scores, best first.

    Every selected score is mapped back to the first index holding that
    value, so classes with identical scores collapse onto the earliest one.
    NaN scores rank below every number.
    """
    scores=np.asarray(scores, dtype=np.float64).reshape(-1)
    missing=np.isnan(scores)
    ranked=np.sort(scores[~missing])[::-1]
    top_values=np.concatenate([ranked, scores[missing]])[:k]

    offsets=[]
    for value in top_values:
        matches=missing if np.isnan(value) else scores==value
        offsets.append(int(np.flatnonzero(matches)[0]))
    return offsets


class ModelEvaluator:
    """Wraps a loaded model and ranks its output classes"""

    def __init__(self, model_path: str, threads: int=1, runtime: ModelRuntime=None, top_k: int=5):
        check_input_file(model_path, f"The model path {model_path} can't be located!")

        self.model_path=str(model_path)
        self.threads=threads
        self.top_k=top_k
        self.runtime=runtime if runtime is not None else TorchScriptRuntime()
        self.logger=logging.getLogger(__name__)

        try:
            self.model=self.runtime.load(self.model_path, threads)
        except Exception as e:
            raise ModelLoadError(f"Failed to load model {self.model_path}: {e}") from e

        self.input_slot=self.runtime.input_slot_name(self.model)
        self.output_slot=self.runtime.output_slot_name(self.model)
        self.logger.info(f"Model ready (input '{self.input_slot}', output '{self.output_slot}')")

    def scores(self, tensor) -> np.ndarray:
        """Raw score vector over the full class space"""
        outputs=self.runtime.infer(self.model, {self.input_slot: tensor})
        return np.asarray(outputs[self.output_slot]).reshape(-1)

    def evaluate(self, tensor) -> List[int]:
        """Top-k class offsets for one input tensor, best first"""
        return best_matches(self.scores(tensor), self.top_k)
