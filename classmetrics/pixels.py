import logging
from pathlib import Path
from typing import Tuple, Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import ImageDecodeError
from .utils import check_input_file, is_supported_image

#Reference input resolution of the ImageNet models
DEFAULT_SIZE=224

class PixelTensorBuilder:
    """
    Turns an image file into the flat channel-major vector a model expects.

    The image is cropped around its centre to a fixed square (aspect is kept,
    never stretched) and its pixels are emitted channel by channel:
    all red values, then all green, then all blue, each channel row-major.
    Values are raw 0-255 intensities, optionally centred on the channel mean.
    """

    def __init__(self, size: Union[int, Tuple[int, int]]=DEFAULT_SIZE):
        if isinstance(size, int):
            size=(size, size)
        self.size=tuple(size)
        self.logger=logging.getLogger(__name__)

    @property
    def tensor_length(self) -> int:
        width, height=self.size
        return 3*width*height

    def load_image(self, path) -> Image.Image:
        """Decode the image and crop it to the target size around its centre"""
        path=check_input_file(path, f"Unable to locate file with path '{path}'!")
        if not is_supported_image(path):
            self.logger.warning(f"Unexpected image extension for {path.name}, decoding anyway")
        try:
            with Image.open(path) as img:
                img=img.convert('RGB')
                return ImageOps.fit(
                    img,
                    self.size,
                    method=Image.Resampling.BILINEAR,
                    centering=(0.5, 0.5)
                )
        except (UnidentifiedImageError, OSError) as e:
            raise ImageDecodeError(f"Unable to decode image '{path}': {e}") from e

    def channels(self, path) -> np.ndarray:
        """Pixels as a [3, height, width] float32 array in RGB order"""
        img=self.load_image(path)
        pixels=np.asarray(img, dtype=np.float32) # [height, width, 3]
        return np.ascontiguousarray(pixels.transpose(2, 0, 1))

    def channel_means(self, path) -> np.ndarray:
        """Arithmetic mean of each channel's raw intensities (R, G, B)"""
        return self.channels(path).astype(np.float64).mean(axis=(1, 2))

    def build(self, path, compute_mean: bool=False) -> np.ndarray:
        """
        Build the model input for one image.

        Args:
            path: image file (gif, bmp, jpg, jpeg or png)
            compute_mean: subtract each channel's mean from its values

        Returns:
            float32 vector of length 3*width*height
        """
        channels=self.channels(path)
        if compute_mean:
            means=channels.astype(np.float64).mean(axis=(1, 2))
            channels=(channels - means[:, None, None]).astype(np.float32)

        tensor=channels.reshape(-1)
        self.logger.debug(f"Built tensor of {tensor.size} values from {Path(path).name}")
        return tensor
