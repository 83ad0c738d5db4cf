import sys
import argparse
import logging

from .config import load_config, ask_strict_mode, flatten_config, read_config_file, require
from .errors import ClassMetricsError
from .metrics import ClassificationMetrics
from .predict import ImageClassifier
from .utils import setup_logging

logger=logging.getLogger(__name__)

def add_config_arguments(parser):
    parser.add_argument('--config', type=str, default=None, help='YAML config file')
    parser.add_argument('--model', dest='model_path', help='Model artifact')
    parser.add_argument('--train-map', dest='train_map_path', help='Mapping table (offset -> wordnet id)')
    parser.add_argument('--wordnet', dest='wordnet_path', help='Lexical database (wordnet id -> label)')
    parser.add_argument('--threads', type=int, help='Threads used by the model runtime')
    parser.add_argument('--top-k', dest='top_k', type=int, help='Number of best matches to keep')
    parser.add_argument('--log-file', type=str, default=None)
    parser.add_argument('--verbose', action='store_true', help='Log every image')

def build_run_parser():
    parser=argparse.ArgumentParser(description='Measure the top-N accuracy of an image classifier')
    add_config_arguments(parser)
    parser.add_argument('--images', dest='target_dir', help='Directory of images to validate')
    parser.add_argument('--expected-id', dest='expected_id', help='Expected wordnet id of the images')
    mode=parser.add_mutually_exclusive_group()
    mode.add_argument('--strict', action='store_true', default=None, help='Only count the best match')
    mode.add_argument('--ask', action='store_true', help='Ask for strict mode (y/N) interactively')
    parser.add_argument('--output', type=str, default=None, help='Write per-image results as JSON')
    return parser

def build_classify_parser():
    parser=argparse.ArgumentParser(description='Classify one image')
    parser.add_argument('image', help='Image file to classify')
    add_config_arguments(parser)
    return parser

def config_overrides(args, names):
    return {name: getattr(args, name, None) for name in names}

def run_main(argv=None, input_fn=input) -> int:
    args=build_run_parser().parse_args(argv)
    setup_logging(args.log_file, level=logging.DEBUG if args.verbose else logging.INFO)

    strict=ask_strict_mode(input_fn) if args.ask else args.strict
    overrides=config_overrides(args, [
        'model_path', 'target_dir', 'expected_id', 'train_map_path',
        'wordnet_path', 'threads', 'top_k'
    ])
    overrides['strict']=strict

    try:
        config=load_config(args.config, **overrides)
        report=ClassificationMetrics(config).run_report()
    except ClassMetricsError as e:
        logger.error(str(e))
        return 1

    if args.output:
        report.save(args.output)
        logger.info(f"Results saved to {args.output}")

    print(f"The match percentage is at {report.percentage}%")
    return 0

def classify_main(argv=None) -> int:
    args=build_classify_parser().parse_args(argv)
    setup_logging(args.log_file, level=logging.DEBUG if args.verbose else logging.INFO)

    overrides=config_overrides(args, [
        'model_path', 'train_map_path', 'wordnet_path', 'threads', 'top_k'
    ])

    try:
        values=flatten_config(read_config_file(args.config), **overrides)
        require(values, ['model_path', 'train_map_path'])
        #Only the settings of a single image run
        values.pop('target_dir', None)
        values.pop('expected_id', None)
        values.pop('strict', None)
        predictions=ImageClassifier(**values).predict(args.image)
    except ClassMetricsError as e:
        logger.error(str(e))
        return 1

    print(f"\nTop {len(predictions)} predictions for {args.image}:")
    for rank, p in enumerate(predictions, 1):
        wordnet_id=f"n{p['wordnet_id']}" if p['wordnet_id'] else '<unresolved>'
        if p['label'] is None:
            print(f"{rank}. {wordnet_id:<14} {p['score']:.4f}")
            continue
        label=p['label'] or '<unresolved>'
        print(f"{rank}. {label:<40} {wordnet_id:<14} {p['score']:.4f}")
    return 0

def run():
    sys.exit(run_main())

def classify():
    sys.exit(classify_main())
