"""Handwritten versus printed text classification.

A contour heuristic: printed glyphs form compact, regular components with
moderate aspect ratios, while handwriting produces irregular outlines and
long connected strokes.
"""

import math
from dataclasses import dataclass

import cv2
import numpy as np

from src.preprocessing.binarize import binarize_otsu_inverted
from src.utils.logger import get_logger

logger = get_logger(__name__)

MIN_COMPONENT_AREA = 100
MAX_COMPONENT_AREA_RATIO = 0.1
IRREGULARITY_THRESHOLD = 0.8
MAX_PRINTED_ASPECT_RATIO = 3.0
MIN_PRINTED_ASPECT_RATIO = 0.3


@dataclass
class ContourStatistics:
    """Aggregate shape statistics of the text components in an image."""

    component_count: int
    avg_irregularity: float
    avg_aspect_ratio: float

    @property
    def is_handwritten(self) -> bool:
        if self.component_count == 0:
            return False
        return (
            self.avg_irregularity > IRREGULARITY_THRESHOLD
            or self.avg_aspect_ratio > MAX_PRINTED_ASPECT_RATIO
            or self.avg_aspect_ratio < MIN_PRINTED_ASPECT_RATIO
        )


class TextTypeClassifier:
    """Decides whether an image contains mainly handwritten text."""

    def analyze(self, image: np.ndarray) -> ContourStatistics:
        """Compute contour statistics for the text components of an image.

        Components whose bounding box is smaller than 100 px² or larger
        than 10% of the image are ignored as noise or background.

        Args:
            image: Input image (BGR or grayscale, raw or normalized).

        Returns:
            Statistics over the remaining components.
        """
        binary = binarize_otsu_inverted(image)
        contours, _ = cv2.findContours(
            binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE
        )

        max_area = image.shape[0] * image.shape[1] * MAX_COMPONENT_AREA_RATIO
        total_irregularity = 0.0
        total_aspect_ratio = 0.0
        count = 0

        for contour in contours:
            x, y, width, height = cv2.boundingRect(contour)
            box_area = width * height
            if box_area < MIN_COMPONENT_AREA or box_area > max_area:
                continue

            perimeter = cv2.arcLength(contour, True)
            if perimeter == 0:
                continue

            circularity = 4 * math.pi * cv2.contourArea(contour) / (perimeter**2)
            total_irregularity += 1 - circularity
            total_aspect_ratio += width / height
            count += 1

        if count == 0:
            return ContourStatistics(0, 0.0, 0.0)

        return ContourStatistics(
            component_count=count,
            avg_irregularity=total_irregularity / count,
            avg_aspect_ratio=total_aspect_ratio / count,
        )

    def is_handwritten(self, image: np.ndarray) -> bool:
        """Classify an image as handwritten or printed.

        Never raises: analysis errors and images without usable components
        are classified as printed.

        Args:
            image: Input image (BGR or grayscale, raw or normalized).

        Returns:
            ``True`` if the text looks handwritten.
        """
        try:
            stats = self.analyze(image)
        except Exception as exc:
            logger.warning(
                "Text type analysis failed, defaulting to printed text: %s", exc
            )
            return False

        result = stats.is_handwritten
        logger.debug(
            "Text analysis - components: %d, irregularity: %.3f, aspect ratio: %.3f, "
            "handwritten: %s",
            stats.component_count,
            stats.avg_irregularity,
            stats.avg_aspect_ratio,
            result,
        )
        return result
