import logging
from typing import Dict, Sequence

import numpy as np
import torch

def slot_name(debug_name: str) -> str:
    """Drop the SSA suffix TorchScript appends to value names, e.g. x.1 -> x"""
    return debug_name.split('.')[0] or debug_name


class ModelRuntime:
    """
    Capability interface of an inference backend.

    A runtime loads a model artifact into an opaque handle and runs forward
    inference on it. Inputs and outputs are addressed by slot name.
    """

    def load(self, path: str, threads: int=1):
        raise NotImplementedError

    def input_slot_name(self, handle) -> str:
        raise NotImplementedError

    def output_slot_name(self, handle) -> str:
        raise NotImplementedError

    def infer(self, handle, inputs: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        raise NotImplementedError


class TorchScriptRuntime(ModelRuntime):
    """Runs TorchScript models saved with torch.jit.save"""

    def __init__(self, input_shape: Sequence[int]=(3, 224, 224), device: str='cpu'):
        self.input_shape=tuple(input_shape)
        self.device=device
        self.logger=logging.getLogger(__name__)

    def load(self, path: str, threads: int=1):
        torch.set_num_threads(max(1, int(threads)))
        model=torch.jit.load(str(path), map_location=self.device)
        model.eval()
        self.logger.info(f"Loaded TorchScript model from {path} ({threads} thread(s))")
        return model

    def input_slot_name(self, handle) -> str:
        #First graph input is the module itself
        names=[value.debugName() for value in handle.graph.inputs()]
        return slot_name(names[1])

    def output_slot_name(self, handle) -> str:
        return slot_name(next(iter(handle.graph.outputs())).debugName())

    def infer(self, handle, inputs: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        tensor=np.asarray(inputs[self.input_slot_name(handle)], dtype=np.float32)
        batch=torch.from_numpy(tensor).reshape(1, *self.input_shape).to(self.device)

        with torch.no_grad():
            output=handle(batch)

        scores=output.detach().cpu().reshape(-1).numpy()
        return {self.output_slot_name(handle): scores}
