"""
Pytest configuration and fixtures.
"""
import base64
import io
import os
import sys
from unittest.mock import MagicMock

import pytest
import fitz  # PyMuPDF
from PIL import Image

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

os.environ.setdefault("ENVIRONMENT", "test")

from quickink.pdf.context import GenerationContext, SignatureInfo  # noqa: E402


def make_png_data_uri(width: int = 100, height: int = 30) -> str:
    """Build a PNG data URI with a dark stroke on a transparent background."""
    img = Image.new("RGBA", (width, height), (255, 255, 255, 0))
    for x in range(width):
        img.putpixel((x, height // 2), (20, 20, 60, 255))
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()


def make_pdf(
    page_height: float = 792,
    page_width: float = 612,
    pages: int = 1,
    text: str = "Original page",
) -> bytes:
    """Build a PDF with one line of text per page."""
    doc = fitz.open()
    for number in range(1, pages + 1):
        page = doc.new_page(width=page_width, height=page_height)
        page.insert_text((40, 40), f"{text} {number}", fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


def pdf_text(pdf_bytes: bytes) -> list:
    """Extract text of every page."""
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        return [page.get_text() for page in doc]
    finally:
        doc.close()


@pytest.fixture
def png_data_uri():
    """100x30 signature image, smaller than every bounding box."""
    return make_png_data_uri(100, 30)


@pytest.fixture
def signature_info(png_data_uri):
    """Signing event used across tests."""
    return SignatureInfo(
        signature_image_data=png_data_uri,
        signer_name="Jane Doe",
        signer_email="jane@x.com",
        signed_at="2024-01-01T12:00:00Z",
        document_title="Bob's Agreement #1!",
        ip_address="203.0.113.7",
    )


@pytest.fixture
def context():
    """Generation context using base-14 Helvetica."""
    return GenerationContext()


@pytest.fixture
def mock_settings():
    """Create mock settings."""
    settings = MagicMock()
    settings.gcs_bucket = "test-bucket"
    settings.gcs_public_base_url = "https://storage.googleapis.com"
    settings.signed_documents_folder = "signed-documents"
    settings.product_name = "QuickInk"
    settings.use_system_fonts = False
    settings.certificate_fallback_on_fetch_error = False
    settings.pdf_failure_is_fatal = False
    settings.environment = "test"
    settings.debug = True
    return settings
