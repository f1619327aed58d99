"""Morphological cleanup of binarized document images."""

import cv2
import numpy as np

from src.utils.logger import get_logger

logger = get_logger(__name__)


def close_morphology(binary: np.ndarray, kernel_size: int = 2) -> np.ndarray:
    """Apply a morphological closing (dilate, then erode).

    Removes isolated speckle and reconnects strokes broken by thresholding.

    Args:
        binary: Binary image with pixel values 0 or 255.
        kernel_size: Side length of the square structuring element.

    Returns:
        Closed binary image with the same shape.
    """
    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (kernel_size, kernel_size))
    result = cv2.morphologyEx(binary, cv2.MORPH_CLOSE, kernel)
    logger.debug("Applied morphological closing with %dx%d kernel", kernel_size, kernel_size)
    return result
