"""Application entry point for the picture-to-JSON API server."""

import uvicorn

from src.api.app import app
from src.utils.config import load_config
from src.utils.logger import setup_logging
from src.utils.runtime import initialize_runtime


def main() -> None:
    """Start the FastAPI application server."""
    config = load_config()
    setup_logging(config.log_level)
    initialize_runtime(config.ocr)
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
