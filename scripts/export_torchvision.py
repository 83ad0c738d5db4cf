import sys
import argparse
from pathlib import Path
sys.path.append(str(Path(__file__).parent.parent))

import torch
import torchvision

from classmetrics.utils import setup_logging

def main():
    parser=argparse.ArgumentParser(description='Export a pretrained torchvision classifier as TorchScript')
    parser.add_argument('--arch', type=str, default='resnet152')
    parser.add_argument('--output', type=str, default='models/ResNet_152.model.pt')
    parser.add_argument('--image-size', type=int, default=224)
    args=parser.parse_args()

    logger=setup_logging()

    model=getattr(torchvision.models, args.arch)(weights='DEFAULT')
    model.eval()

    example=torch.zeros(1, 3, args.image_size, args.image_size)
    traced=torch.jit.trace(model, example)

    Path(args.output).parent.mkdir(parents=True, exist_ok=True)
    torch.jit.save(traced, args.output)
    logger.info(f"Saved {args.arch} to {args.output}")

if __name__=='__main__':
    main()
