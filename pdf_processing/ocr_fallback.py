"""
OCR engines for documents without a text layer.

Two engines are available: Tesseract (via pytesseract, the default) and
AWS Textract. Both take one page image and return its recognized text
with lines separated by newlines.
"""

import base64
import binascii
import io
from typing import Optional, Union
import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError
from PIL import Image, UnidentifiedImageError
import pytesseract
import structlog

from config import settings
from highlighting.exceptions import OCRError

logger = structlog.get_logger()

ImageInput = Union[str, bytes]


def decode_image(image: ImageInput) -> bytes:
    """
    Decode an image representation into raw bytes.

    Accepts raw bytes, a base64 string, or a data URL
    ("data:image/png;base64,...").

    Raises:
        OCRError: If the payload is not valid base64
    """
    if isinstance(image, (bytes, bytearray)):
        return bytes(image)

    payload = image
    if payload.startswith("data:"):
        _, _, payload = payload.partition(",")

    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise OCRError(f"Image is not valid base64: {e}") from e


class OCREngine:
    """Interface of an OCR engine."""

    name = "base"

    def recognize(self, image: ImageInput, language: Optional[str] = None) -> str:
        raise NotImplementedError


class TesseractOCR(OCREngine):
    """OCR using a local Tesseract installation."""

    name = "tesseract"

    def __init__(self, tesseract_cmd: Optional[str] = None):
        tesseract_cmd = tesseract_cmd or settings.TESSERACT_CMD
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        logger.info("TesseractOCR initialized", cmd=tesseract_cmd or "tesseract")

    def recognize(self, image: ImageInput, language: Optional[str] = None) -> str:
        """
        Recognize the text of one image.

        Args:
            image: Image bytes, base64 string or data URL
            language: Tesseract language code (default from settings)

        Returns:
            Recognized text
        """
        language = language or settings.OCR_LANGUAGE

        try:
            with Image.open(io.BytesIO(decode_image(image))) as pil_image:
                text = pytesseract.image_to_string(pil_image, lang=language)
        except UnidentifiedImageError as e:
            raise OCRError(f"Unreadable image: {e}") from e
        except pytesseract.TesseractError as e:
            logger.error("Tesseract failed", error=str(e))
            raise OCRError(f"Tesseract error: {e}") from e

        logger.info("OCR completed", engine=self.name, language=language, chars=len(text))
        return text


class TextractOCR(OCREngine):
    """
    OCR using AWS Textract.

    Textract detects the language itself; the language argument is only
    logged.
    """

    name = "textract"

    def __init__(
        self,
        aws_access_key: Optional[str] = None,
        aws_secret_key: Optional[str] = None,
        aws_region: Optional[str] = None
    ):
        """
        Initialize Textract OCR with AWS credentials.

        Args:
            aws_access_key: AWS access key ID
            aws_secret_key: AWS secret access key
            aws_region: AWS region
        """
        self.aws_access_key = aws_access_key or settings.AWS_ACCESS_KEY_ID
        self.aws_secret_key = aws_secret_key or settings.AWS_SECRET_ACCESS_KEY
        self.aws_region = aws_region or settings.AWS_REGION

        self._client = None

        logger.info("TextractOCR initialized", region=self.aws_region)

    @property
    def client(self):
        """Lazy-load Textract client."""
        if self._client is None:
            self._client = boto3.client(
                'textract',
                aws_access_key_id=self.aws_access_key,
                aws_secret_access_key=self.aws_secret_key,
                region_name=self.aws_region
            )
        return self._client

    def recognize(self, image: ImageInput, language: Optional[str] = None) -> str:
        """
        Recognize the text of one image with DetectDocumentText.

        Returns:
            LINE blocks joined by newlines
        """
        if not self.aws_access_key or not self.aws_secret_key:
            raise OCRError("OCR not available - AWS credentials not configured")

        try:
            response = self.client.detect_document_text(
                Document={'Bytes': decode_image(image)}
            )
        except NoCredentialsError as e:
            raise OCRError("AWS credentials invalid") from e
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            logger.error("Textract API error", error_code=error_code, error=str(e))
            raise OCRError(f"Textract error: {error_code}") from e
        except BotoCoreError as e:
            logger.error("Textract request failed", error=str(e))
            raise OCRError(str(e)) from e

        return self._parse_textract_response(response, language)

    def _parse_textract_response(self, response: dict, language: Optional[str]) -> str:
        """Join the LINE blocks of a Textract response."""
        lines = [
            block.get('Text', '')
            for block in response.get('Blocks', [])
            if block.get('BlockType') == 'LINE'
        ]
        text = '\n'.join(lines)

        logger.info(
            "OCR completed",
            engine=self.name,
            language=language,
            lines=len(lines),
            chars=len(text)
        )
        return text


def get_ocr_engine(name: Optional[str] = None) -> OCREngine:
    """Create the OCR engine selected by name or settings.OCR_ENGINE."""
    name = (name or settings.OCR_ENGINE).lower()
    if name == "tesseract":
        return TesseractOCR()
    if name == "textract":
        return TextractOCR()
    raise ValueError(f"Unknown OCR engine: {name}")
