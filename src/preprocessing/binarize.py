"""Grayscale conversion and global thresholding for document images.

Provides Otsu's variance-maximizing threshold in both polarities: normal
(black text on white, fed to OCR) and inverted (white text on black, used
for contour analysis).
"""

import cv2
import numpy as np

from src.utils.logger import get_logger

logger = get_logger(__name__)


def to_gray(image: np.ndarray) -> np.ndarray:
    """Convert an image to single-channel grayscale.

    Args:
        image: Input image (grayscale, BGR, or BGRA).

    Returns:
        Grayscale image.
    """
    if image.ndim == 2:
        return image
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    if image.shape[2] == 1:
        return image[:, :, 0]
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def binarize_otsu(image: np.ndarray) -> np.ndarray:
    """Binarize an image using Otsu's automatic thresholding.

    Args:
        image: Input image (BGR or grayscale).

    Returns:
        Binary image with pixel values 0 or 255.
    """
    gray = to_gray(image)
    threshold, binary = cv2.threshold(
        gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU
    )
    logger.debug("Applied Otsu binarization (threshold=%.1f)", threshold)
    return binary


def binarize_otsu_inverted(image: np.ndarray) -> np.ndarray:
    """Binarize with Otsu's threshold so that dark ink becomes foreground.

    Args:
        image: Input image (BGR or grayscale).

    Returns:
        Binary image where text pixels are 255 and background is 0.
    """
    gray = to_gray(image)
    _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY_INV + cv2.THRESH_OTSU)
    return binary
