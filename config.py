"""
Configuration management for PDF Keyword Highlighter.
Loads settings from environment variables with sensible defaults.
"""

import os
from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


class Settings:
    """Application settings loaded from environment."""

    # Application
    APP_NAME: str = "PDF Keyword Highlighter"
    APP_VERSION: str = "1.0.0"

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Search
    DEFAULT_ZOOM: float = float(os.getenv("DEFAULT_ZOOM", "1.0"))
    # "pattern" treats keywords as regular expressions, "literal" escapes them
    MATCH_MODE: str = os.getenv("MATCH_MODE", "pattern").lower()

    # OCR fallback (documents without a text layer)
    OCR_ENGINE: str = os.getenv("OCR_ENGINE", "tesseract").lower()
    OCR_LANGUAGE: str = os.getenv("OCR_LANGUAGE", "eng")
    # Fixed highlight height for OCR matches, in viewport units
    OCR_LINE_HEIGHT: float = float(os.getenv("OCR_LINE_HEIGHT", "12"))
    TESSERACT_CMD: str = os.getenv("TESSERACT_CMD", "")

    # Image conversion endpoint used by the OCR path
    CONVERT_IMAGE_URL: str = os.getenv(
        "CONVERT_IMAGE_URL", "http://localhost:8000/api/convertToImage"
    )
    IMAGE_RESOLUTION: int = int(os.getenv("IMAGE_RESOLUTION", "150"))

    # Networking
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "60"))
    DOWNLOAD_MAX_RETRIES: int = int(os.getenv("DOWNLOAD_MAX_RETRIES", "3"))

    # AWS (only needed when OCR_ENGINE=textract)
    AWS_ACCESS_KEY_ID: str = os.getenv("AWS_ACCESS_KEY_ID", "")
    AWS_SECRET_ACCESS_KEY: str = os.getenv("AWS_SECRET_ACCESS_KEY", "")
    AWS_REGION: str = os.getenv("AWS_REGION", "us-east-1")

    @classmethod
    def validate(cls) -> list[str]:
        """Validate settings. Returns list of missing/invalid settings."""
        issues = []

        if cls.MATCH_MODE not in ("pattern", "literal"):
            issues.append(f"MATCH_MODE must be 'pattern' or 'literal', got '{cls.MATCH_MODE}'")

        if cls.OCR_ENGINE not in ("tesseract", "textract"):
            issues.append(f"OCR_ENGINE must be 'tesseract' or 'textract', got '{cls.OCR_ENGINE}'")

        if cls.DEFAULT_ZOOM <= 0:
            issues.append("DEFAULT_ZOOM must be positive")

        if cls.OCR_ENGINE == "textract":
            aws_vars = [cls.AWS_ACCESS_KEY_ID, cls.AWS_SECRET_ACCESS_KEY]
            if not all(aws_vars):
                issues.append("OCR_ENGINE is textract but AWS credentials are missing")

        return issues


settings = Settings()
