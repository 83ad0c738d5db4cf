import numpy as np
import pytest
from PIL import Image

from classmetrics.runtime import ModelRuntime

CAT_ID="01772222"

TRAIN_MAP_LINES=[
    "train.zip@/n01440764/n01440764_10026.JPEG 0",
    "train.zip@/n01443537/n01443537_10007.JPEG 1",
    "train.zip@/n01484850/n01484850_10016.JPEG 2",
    "train.zip@/n01491361/n01491361_10052.JPEG 3",
    "train.zip@/n01494475/n01494475_10039.JPEG 4",
    "train.zip@/n01496331/n01496331_1014.JPEG 5",
    "train.zip@/n02084071/n02084071_1115.JPEG\t7",
    "train.zip@/n01772222/n01772222_1.JPEG 42",
    "train.zip@/n01772222/n01772222_2.JPEG 42",
    "train.zip@/n09999999/n09999999_1.JPEG 420",
]

WORDNET_LINES=[
    "  1 This software and database is being provided to you, the LICENSEE, by",
    f"{CAT_ID} 05 n 02 cat 0 feline 0 014 @ 02121620 n 0000 | small domesticated carnivore",
    "02084071 05 n 01 dog 0 003 @ 02083346 n 0000 | a member of the genus Canis",
    "01440764 05 n 02 tench 0 Tinca_tinca 0 003 @ 01439121 n 0000 | freshwater dace-like game fish",
    "01443537 05 n 01 goldfish 0 002 @ 01439121 n 0000 | small golden or orange-red freshwater fishes",
    "01484850 00 n 01 bogus 0 rank 0 000 | the 00 rank never resolves",
    f"{CAT_ID} 05 n 01 lion 0 000 | later records for the same id are ignored",
]

@pytest.fixture
def train_map_path(tmp_path):
    path=tmp_path/"train_map.txt"
    path.write_text("\n".join(TRAIN_MAP_LINES)+"\n", encoding='utf-8')
    return path

@pytest.fixture
def wordnet_path(tmp_path):
    path=tmp_path/"data.noun"
    path.write_text("\n".join(WORDNET_LINES)+"\n", encoding='utf-8')
    return path

@pytest.fixture
def model_path(tmp_path):
    path=tmp_path/"model.pt"
    path.write_bytes(b"not a real model")
    return path

def save_image(path, pixels):
    """Write an [height, width, 3] uint8 array as an image file"""
    Image.fromarray(np.asarray(pixels, dtype=np.uint8)).save(path)
    return path

@pytest.fixture
def image_dir(tmp_path):
    """Ten cat images plus files the class scan must skip"""
    directory=tmp_path/"images"
    directory.mkdir()
    rng=np.random.default_rng(0)
    for i in range(10):
        save_image(directory/f"n{CAT_ID}_{i:02d}.jpeg", rng.integers(0, 256, (12, 16, 3)))
    save_image(directory/"n02084071_00.jpeg", rng.integers(0, 256, (12, 16, 3)))
    save_image(directory/f"n{CAT_ID}_extra.png", rng.integers(0, 256, (12, 16, 3)))
    return directory


class FakeRuntime(ModelRuntime):
    """In-memory runtime returning scores from a callable"""

    def __init__(self, score_fn, fail_load=False):
        self.score_fn=score_fn
        self.fail_load=fail_load
        self.loaded=[]
        self.calls=0

    def load(self, path, threads=1):
        if self.fail_load:
            raise RuntimeError("corrupt model")
        self.loaded.append((str(path), threads))
        return {'path': str(path)}

    def input_slot_name(self, handle):
        return 'features'

    def output_slot_name(self, handle):
        return 'z'

    def infer(self, handle, inputs):
        self.calls+=1
        return {'z': np.asarray(self.score_fn(inputs['features']))}


class ScriptedEvaluator:
    """Returns pre-planned offsets, one list per evaluated image"""

    def __init__(self, plans):
        self.plans=list(plans)
        self.tensors=[]

    def evaluate(self, tensor):
        self.tensors.append(tensor)
        return self.plans.pop(0)


@pytest.fixture
def fake_runtime_cls():
    return FakeRuntime

@pytest.fixture
def scripted_evaluator_cls():
    return ScriptedEvaluator
