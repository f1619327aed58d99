"""Configuration management for the picture-to-JSON pipeline.

Loads and validates YAML configuration with sensible defaults for
preprocessing, OCR engines, document storage, and background processing.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from src.ocr.base import EngineType

logger = logging.getLogger(__name__)

MAX_FILE_SIZE_BYTES = 50 * 1024 * 1024


class PreprocessingConfig(BaseModel):
    """Configuration for the image normalization pipeline."""

    blur_kernel_size: int = 3
    morph_kernel_size: int = 2


class OCRConfig(BaseModel):
    """Configuration for OCR engine selection and the Tesseract engine."""

    tesseract_cmd: str | None = None
    tessdata_path: str | None = None
    default_engine: EngineType = EngineType.TESSERACT
    auto_detect_handwriting: bool = True
    preferred_language: str = "en"
    additional_languages: list[str] = Field(default_factory=list)
    psm: int = 1
    oem: int = 1
    pdf_dpi: int = 300

    @field_validator("default_engine", mode="before")
    @classmethod
    def _normalize_engine(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class GoogleVisionConfig(BaseModel):
    """Configuration for the Google Cloud Vision engine."""

    enabled: bool = False
    credentials_path: str | None = None


class StorageConfig(BaseModel):
    """Configuration for uploaded document storage."""

    upload_directory: str = "uploads"
    max_file_size: int = MAX_FILE_SIZE_BYTES
    allowed_content_types: list[str] = Field(
        default_factory=lambda: [
            "image/png",
            "image/jpeg",
            "image/jpg",
            "application/pdf",
        ]
    )


class ProcessingConfig(BaseModel):
    """Configuration for background document processing."""

    max_workers: int = 4
    batch_workers: int = 2


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    google_vision: GoogleVisionConfig = Field(default_factory=GoogleVisionConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
