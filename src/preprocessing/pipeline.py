"""Deterministic image normalization for OCR.

Decodes raw document bytes and runs a fixed sequence of steps: grayscale,
Gaussian blur, Otsu binarization, morphological closing. The pipeline keeps
no state between calls, so identical input always yields identical pixels.
"""

import cv2
import numpy as np

from src.documents.exceptions import ImageDecodeError
from src.utils.config import PreprocessingConfig
from src.utils.logger import get_logger

from .binarize import binarize_otsu, to_gray
from .denoise import denoise_gaussian
from .morphology import close_morphology

logger = get_logger(__name__)


def decode_image(data: bytes) -> np.ndarray:
    """Decode encoded image bytes (PNG, JPEG, ...) into a BGR array.

    Args:
        data: Raw encoded image bytes.

    Returns:
        Decoded image as a numpy array.

    Raises:
        ImageDecodeError: If the buffer is empty or cannot be decoded.
    """
    if not data:
        raise ImageDecodeError("Could not decode image: empty buffer")

    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if image is None or image.size == 0:
        raise ImageDecodeError("Could not decode image: unsupported or corrupt data")
    return image


class ImagePreprocessor:
    """Normalizes decoded document images for OCR.

    Args:
        config: Preprocessing configuration with kernel sizes.
    """

    def __init__(self, config: PreprocessingConfig | None = None) -> None:
        self.config = config or PreprocessingConfig()

    def process(self, image: np.ndarray) -> np.ndarray:
        """Run the normalization pipeline on a decoded image.

        Args:
            image: Decoded image (grayscale, BGR, or BGRA).

        Returns:
            Single-channel image with pixel values 0 or 255.

        Raises:
            ImageDecodeError: If the image is missing or zero-sized.
        """
        if image is None or image.size == 0:
            raise ImageDecodeError("Could not process image: zero-sized buffer")

        gray = to_gray(image)
        blurred = denoise_gaussian(gray, kernel_size=self.config.blur_kernel_size)
        binary = binarize_otsu(blurred)
        result = close_morphology(binary, kernel_size=self.config.morph_kernel_size)

        logger.debug("Normalized image of shape %s", result.shape)
        return result

    def process_bytes(self, data: bytes) -> np.ndarray:
        """Decode image bytes and normalize the result.

        Args:
            data: Raw encoded image bytes.

        Returns:
            Normalized binary image.
        """
        return self.process(decode_image(data))
