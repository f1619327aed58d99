"""Shared test fixtures for the picture-to-JSON test suite."""

from collections.abc import Iterator
from pathlib import Path

import cv2
import numpy as np
import pytest

from src.documents.orchestrator import DocumentProcessingService
from src.documents.repository import InMemoryDocumentRepository
from src.documents.storage import DocumentStorage
from src.extraction.json_generator import JsonGenerator
from src.ocr.base import EngineType, OCREngine, OCRResult
from src.ocr.languages import LanguageConfigurator, LanguageSettings
from src.ocr.selector import OCRService
from src.preprocessing.pipeline import ImagePreprocessor
from src.utils.config import StorageConfig


class StubOCREngine(OCREngine):
    """OCR engine returning canned text, recording the languages it saw."""

    def __init__(
        self,
        text: str = "",
        confidence: int = 90,
        engine_type: EngineType = EngineType.TESSERACT,
        available: bool = True,
    ) -> None:
        self.text = text
        self.responses: list[str] = []
        self.error: Exception | None = None
        self._confidence = confidence
        self._engine_type = engine_type
        self.available = available
        self.calls: list[LanguageSettings | None] = []

    def extract_text(
        self, image: np.ndarray, languages: LanguageSettings | None = None
    ) -> OCRResult:
        self.calls.append(languages)
        if self.error is not None:
            raise self.error
        text = self.responses.pop(0) if self.responses else self.text
        return OCRResult(
            text=text,
            engine_type=self._engine_type,
            confidence=self._confidence,
            language=(languages or LanguageSettings()).tesseract_tag,
        )

    def confidence(self) -> int:
        return self._confidence

    def engine_type(self) -> EngineType:
        return self._engine_type

    def is_available(self) -> bool:
        return self.available


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple synthetic grayscale test image."""
    image = np.zeros((200, 300), dtype=np.uint8)
    image[50:150, 50:250] = 255
    return image


@pytest.fixture
def sample_color_image() -> np.ndarray:
    """Create a simple synthetic BGR test image."""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[50:150, 50:250] = (255, 255, 255)
    return image


@pytest.fixture
def printed_image() -> np.ndarray:
    """White page with a grid of compact square glyphs."""
    image = np.full((200, 300), 255, dtype=np.uint8)
    for y in range(20, 180, 40):
        for x in range(20, 280, 40):
            image[y : y + 20, x : x + 20] = 0
    return image


@pytest.fixture
def handwritten_image() -> np.ndarray:
    """White page with long, thin strokes."""
    image = np.full((200, 300), 255, dtype=np.uint8)
    for y in range(20, 180, 30):
        image[y : y + 10, 40:140] = 0
        image[y : y + 10, 160:260] = 0
    return image


@pytest.fixture
def png_bytes(sample_color_image: np.ndarray) -> bytes:
    """Encode the sample color image as PNG."""
    ok, encoded = cv2.imencode(".png", sample_color_image)
    assert ok
    return encoded.tobytes()


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"


@pytest.fixture
def stub_engine() -> StubOCREngine:
    """Local engine returning a small signup form."""
    return StubOCREngine(
        text="First Name: John\nLast Name: Doe\nEmail: john.doe@example.com"
    )


@pytest.fixture
def repository() -> InMemoryDocumentRepository:
    return InMemoryDocumentRepository()


@pytest.fixture
def service(
    tmp_path: Path,
    stub_engine: StubOCREngine,
    repository: InMemoryDocumentRepository,
) -> Iterator[DocumentProcessingService]:
    """Document processing service wired with a stub OCR engine."""
    storage_config = StorageConfig(upload_directory=str(tmp_path / "uploads"))
    svc = DocumentProcessingService(
        repository=repository,
        storage=DocumentStorage(storage_config.upload_directory),
        preprocessor=ImagePreprocessor(),
        ocr_service=OCRService([stub_engine], auto_detect_handwriting=False),
        json_generator=JsonGenerator(),
        languages=LanguageConfigurator("en"),
        storage_config=storage_config,
        max_workers=2,
    )
    yield svc
    svc.shutdown(wait=True)


@pytest.fixture
def engine_factory() -> type[StubOCREngine]:
    """Return the stub engine class for tests that need several engines."""
    return StubOCREngine
