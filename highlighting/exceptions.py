"""
Exceptions raised by the highlighting pipeline and its collaborators.

None of these escape the search entry point; the orchestrator logs them
and returns whatever highlights were produced before the failure.
"""


class HighlightError(Exception):
    """Base class for highlighting errors."""


class MalformedGeometryError(HighlightError, ValueError):
    """A text run, viewport or rectangle has missing or non-finite geometry."""


class InvalidKeywordError(HighlightError, ValueError):
    """A keyword could not be compiled into a search pattern."""


class DocumentLoadError(HighlightError):
    """The document could not be fetched or parsed."""


class ImageConversionError(HighlightError):
    """The image conversion service failed or returned an unusable payload."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class OCRError(HighlightError):
    """The OCR engine failed to recognize an image."""
