"""Noise suppression for scanned document images."""

import cv2
import numpy as np

from src.utils.logger import get_logger

logger = get_logger(__name__)


def denoise_gaussian(image: np.ndarray, kernel_size: int = 3) -> np.ndarray:
    """Apply a Gaussian blur to suppress sensor noise.

    Args:
        image: Input image as a numpy array.
        kernel_size: Size of the Gaussian kernel (must be odd and positive).

    Returns:
        Blurred image with the same shape and dtype.

    Raises:
        ValueError: If the kernel size is even or not positive.
    """
    if kernel_size < 1 or kernel_size % 2 == 0:
        raise ValueError(f"Gaussian kernel size must be odd and positive: {kernel_size}")
    result = cv2.GaussianBlur(image, (kernel_size, kernel_size), 0)
    logger.debug("Applied Gaussian denoise with kernel_size=%d", kernel_size)
    return result
