from typing import Dict, List

from .evaluator import ModelEvaluator, best_matches
from .labels import LabelResolver
from .pixels import PixelTensorBuilder
from .runtime import ModelRuntime, TorchScriptRuntime

class ImageClassifier:
    """Interface for single image predictions"""

    def __init__(self,
                 model_path: str,
                 train_map_path: str,
                 wordnet_path: str=None,
                 threads: int=1,
                 image_size: int=224,
                 top_k: int=5,
                 mean_center: bool=True,
                 runtime: ModelRuntime=None,
                 evaluator: ModelEvaluator=None):
        self.top_k=top_k
        self.mean_center=mean_center
        #Without a lexical database only wordnet ids are reported
        self.with_labels=wordnet_path is not None
        self.builder=PixelTensorBuilder(image_size)
        self.resolver=LabelResolver(train_map_path, wordnet_path)

        if evaluator is None:
            evaluator=ModelEvaluator(
                model_path,
                threads=threads,
                runtime=runtime or TorchScriptRuntime(input_shape=(3, image_size, image_size)),
                top_k=top_k
            )
        self.evaluator=evaluator

    def predict(self, image_path: str) -> List[Dict]:
        """Best matches for one image
        Args:
            image_path: image file to classify

        Returns:
            List of {'offset', 'score', 'wordnet_id', 'label'} dicts, best first;
            labels are None when no lexical database is configured
        """
        tensor=self.builder.build(image_path, compute_mean=self.mean_center)
        scores=self.evaluator.scores(tensor)

        predictions=[]
        for offset in best_matches(scores, self.top_k):
            predictions.append({
                'offset': offset,
                'score': float(scores[offset]),
                'wordnet_id': self.resolver.wordnet_id(offset),
                'label': self.resolver.label_for(offset) if self.with_labels else None,
            })
        return predictions
