import json
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import List

from tqdm import tqdm

from .config import MetricsConfig
from .errors import NoInputImages
from .evaluator import ModelEvaluator
from .labels import LabelResolver
from .pixels import PixelTensorBuilder
from .runtime import ModelRuntime, TorchScriptRuntime
from .utils import list_class_images, class_image_pattern

@dataclass
class ImageResult:
    path: str
    offsets: List[int]
    wordnet_ids: List[str]
    top1_hit: bool
    topk_hit: bool
    success: bool


@dataclass
class MetricsReport:
    """Outcome of one accuracy run"""
    expected_id: str
    strict: bool
    top_k: int=5
    results: List[ImageResult]=field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successes(self) -> int:
        return sum(r.success for r in self.results)

    @property
    def top1_hits(self) -> int:
        return sum(r.top1_hit for r in self.results)

    @property
    def topk_hits(self) -> int:
        return sum(r.topk_hit for r in self.results)

    def _rate(self, hits: int) -> float:
        if self.total==0:
            raise NoInputImages(f"No images evaluated for n{self.expected_id}")
        return (hits/self.total)*100

    @property
    def percentage(self) -> float:
        return self._rate(self.successes)

    @property
    def top1_percentage(self) -> float:
        return self._rate(self.top1_hits)

    @property
    def topk_percentage(self) -> float:
        return self._rate(self.topk_hits)

    def to_dict(self) -> dict:
        return {
            'expected_id': self.expected_id,
            'strict': self.strict,
            'top_k': self.top_k,
            'total': self.total,
            'successes': self.successes,
            'percentage': self.percentage,
            'top1_percentage': self.top1_percentage,
            'topk_percentage': self.topk_percentage,
            'results': [asdict(r) for r in self.results],
        }

    def save(self, path):
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


class ClassificationMetrics:
    """
    Measures how often a model recognises the images of one class.

    Every `n<expected_id>_*.jpeg` file in the target directory is turned into
    a mean-centred tensor, ranked by the model and resolved to wordnet ids.
    In strict mode only the best match counts, otherwise any of the top-k.
    """

    def __init__(self,
                 config: MetricsConfig,
                 evaluator: ModelEvaluator=None,
                 resolver: LabelResolver=None,
                 builder: PixelTensorBuilder=None,
                 runtime: ModelRuntime=None):
        self.config=config
        self.evaluator=evaluator
        self.resolver=resolver
        self.builder=builder if builder is not None else PixelTensorBuilder(config.image_size)
        self.runtime=runtime
        self.logger=logging.getLogger(__name__)

    def matching_files(self) -> List[Path]:
        return list_class_images(self.config.target_dir, self.config.expected_id)

    def _prepare(self):
        if self.evaluator is None:
            runtime=self.runtime
            if runtime is None:
                size=self.config.image_size
                runtime=TorchScriptRuntime(input_shape=(3, size, size))
            self.evaluator=ModelEvaluator(
                self.config.model_path,
                threads=self.config.threads,
                runtime=runtime,
                top_k=self.config.top_k
            )
        if self.resolver is None:
            self.resolver=LabelResolver(self.config.train_map_path, self.config.wordnet_path)

    def is_present(self, wordnet_ids: List[str]) -> bool:
        """Whether the expected id satisfies the matching policy"""
        if self.config.strict:
            return bool(wordnet_ids) and wordnet_ids[0]==self.config.expected_id
        return self.config.expected_id in wordnet_ids[:self.config.top_k]

    def evaluate_image(self, path: Path) -> ImageResult:
        tensor=self.builder.build(path, compute_mean=self.config.mean_center)
        offsets=self.evaluator.evaluate(tensor)
        wordnet_ids=self.resolver.wordnet_ids(offsets)

        expected=self.config.expected_id
        top1_hit=bool(wordnet_ids) and wordnet_ids[0]==expected
        topk_hit=expected in wordnet_ids[:self.config.top_k]
        return ImageResult(
            path=str(path),
            offsets=list(offsets),
            wordnet_ids=list(wordnet_ids),
            top1_hit=top1_hit,
            topk_hit=topk_hit,
            success=self.is_present(wordnet_ids)
        )

    def run_report(self) -> MetricsReport:
        files=self.matching_files()
        if not files:
            raise NoInputImages(
                f"No files matching {class_image_pattern(self.config.expected_id)} "
                f"in {self.config.target_dir}"
            )

        self._prepare()
        mode='strict' if self.config.strict else f"top-{self.config.top_k}"
        self.logger.info(f"Evaluating {len(files)} images of n{self.config.expected_id} ({mode})")

        report=MetricsReport(
            expected_id=self.config.expected_id,
            strict=self.config.strict,
            top_k=self.config.top_k
        )
        for path in tqdm(files, desc="Evaluating"):
            result=self.evaluate_image(path)
            self.logger.debug(f"{path.name}: {result.wordnet_ids} -> {'hit' if result.success else 'miss'}")
            report.results.append(result)

        self.logger.info(
            f"{report.successes}/{report.total} matched, "
            f"top-1 {report.top1_percentage:.2f}%, top-{report.top_k} {report.topk_percentage:.2f}%"
        )
        return report

    def run(self) -> float:
        """Success percentage in [0, 100]"""
        return self.run_report().percentage
