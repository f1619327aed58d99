"""Process-wide initialization of the native OCR and imaging libraries.

Tesseract location, tessdata prefix, and the OpenCV thread pool are global
to the process, so they are configured exactly once at startup instead of
from engine constructors.
"""

import os
import threading
from pathlib import Path

import cv2
import pytesseract

from src.utils.config import OCRConfig
from src.utils.logger import get_logger

logger = get_logger(__name__)

_lock = threading.Lock()
_initialized = False


def initialize_runtime(config: OCRConfig, opencv_threads: int | None = None) -> bool:
    """Configure native libraries for this process.

    Args:
        config: OCR configuration with the Tesseract binary and data paths.
        opencv_threads: Thread count for OpenCV's internal pool. ``None``
            leaves the OpenCV default in place.

    Returns:
        ``True`` if this call performed the initialization, ``False`` if
        the runtime had already been initialized.
    """
    global _initialized

    with _lock:
        if _initialized:
            logger.debug("Runtime already initialized, skipping")
            return False

        if config.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = config.tesseract_cmd
            logger.info("Using Tesseract binary at %s", config.tesseract_cmd)

        if config.tessdata_path:
            if Path(config.tessdata_path).exists():
                os.environ["TESSDATA_PREFIX"] = config.tessdata_path
                logger.info("Using tessdata from %s", config.tessdata_path)
            else:
                logger.warning(
                    "Tessdata path %s does not exist, using Tesseract default",
                    config.tessdata_path,
                )

        if opencv_threads is not None:
            cv2.setNumThreads(opencv_threads)

        logger.info("OpenCV %s initialized", cv2.__version__)
        _initialized = True
        return True


def is_runtime_initialized() -> bool:
    """Return whether :func:`initialize_runtime` has completed."""
    return _initialized
