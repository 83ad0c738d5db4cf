import math
import numpy as np
import pytest
import torch
import torch.nn as nn

from classmetrics.errors import InputNotFound, ModelLoadError
from classmetrics.evaluator import ModelEvaluator, best_matches
from classmetrics.runtime import TorchScriptRuntime

def test_best_matches_ranks_by_descending_score():
    scores=[0.1, 0.9, 0.3, 0.05, 0.7, 0.2, 0.5]
    assert best_matches(scores)==[1, 4, 6, 2, 5]

def test_best_matches_returns_all_classes_when_fewer_than_k():
    assert best_matches([0.2, 0.5, 0.1])==[1, 0, 2]
    assert len(best_matches(np.arange(1000)))==5

def test_duplicate_scores_collapse_onto_first_index():
    scores=[0.1, 0.8, 0.3, 0.8, 0.0]
    assert best_matches(scores)==[1, 1, 2, 0, 4]

def test_evaluate_binds_input_slot_and_reads_output_slot(model_path, fake_runtime_cls):
    seen=[]
    def scores(tensor):
        seen.append(tensor)
        return np.linspace(0, 1, 1000)
    runtime=fake_runtime_cls(scores)

    evaluator=ModelEvaluator(model_path, threads=4, runtime=runtime)
    offsets=evaluator.evaluate(np.zeros(12, dtype=np.float32))

    assert offsets==[999, 998, 997, 996, 995]
    assert runtime.loaded==[(str(model_path), 4)]
    assert len(seen)==1
    assert evaluator.input_slot=='features'
    assert evaluator.output_slot=='z'

def test_top_k_is_configurable(model_path, fake_runtime_cls):
    runtime=fake_runtime_cls(lambda tensor: [0.3, 0.1, 0.6])
    assert ModelEvaluator(model_path, runtime=runtime, top_k=1).evaluate([0])==[2]

def test_missing_model_raises(tmp_path, fake_runtime_cls):
    with pytest.raises(InputNotFound):
        ModelEvaluator(tmp_path/"missing.pt", runtime=fake_runtime_cls(lambda t: [1]))

def test_runtime_failure_becomes_model_load_error(model_path, fake_runtime_cls):
    with pytest.raises(ModelLoadError) as excinfo:
        ModelEvaluator(model_path, runtime=fake_runtime_cls(lambda t: [1], fail_load=True))
    assert isinstance(excinfo.value.__cause__, RuntimeError)

def test_malformed_torchscript_artifact_is_a_load_error(model_path):
    with pytest.raises(ModelLoadError):
        ModelEvaluator(model_path, runtime=TorchScriptRuntime(input_shape=(3, 4, 4)))


class ChannelMeans(nn.Module):
    def forward(self, x):
        return x.mean(dim=[2, 3])

def test_torchscript_runtime_end_to_end(tmp_path):
    path=tmp_path/"channel_means.pt"
    torch.jit.save(torch.jit.script(ChannelMeans()), str(path))

    evaluator=ModelEvaluator(path, runtime=TorchScriptRuntime(input_shape=(3, 4, 4)))
    tensor=np.concatenate([np.full(16, 1.0), np.full(16, 3.0), np.full(16, 2.0)]).astype(np.float32)

    assert evaluator.input_slot=='x'
    assert evaluator.evaluate(tensor)==[1, 2, 0]
    assert np.allclose(evaluator.scores(tensor), [1.0, 3.0, 2.0])

def test_nan_scores_rank_last():
    assert best_matches([0.1, math.nan, 0.9, 0.3])==[2, 3, 0, 1]
    assert best_matches([math.nan, 0.5, math.nan], k=5)==[1, 0, 0]
    assert best_matches([math.nan]*8)==[0]*5

def test_model_emitting_nan_still_yields_five_offsets(model_path, fake_runtime_cls):
    def scores(tensor):
        values=np.linspace(0, 1, 10)
        values[[3, 9]]=np.nan
        return values
    evaluator=ModelEvaluator(model_path, runtime=fake_runtime_cls(scores))

    assert evaluator.evaluate([0])==[8, 7, 6, 5, 4]
