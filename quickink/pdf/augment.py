"""
Embed a signature block into an existing PDF using PyMuPDF (fitz).
"""
import logging

import fitz  # PyMuPDF

from quickink.pdf.context import GenerationContext, SignatureInfo
from quickink.pdf.errors import DocumentLoadError
from quickink.pdf.image import load_signature_image
from quickink.pdf.layout import draw_footer, draw_signature_block, plan_placement

logger = logging.getLogger(__name__)


def open_pdf(pdf_bytes: bytes) -> fitz.Document:
    """
    Open PDF bytes.

    Raises:
        DocumentLoadError: If the bytes are not a PDF with at least one page,
            or the PDF needs a password to open
    """
    if not pdf_bytes:
        raise DocumentLoadError("Source document is empty")

    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except (fitz.FileDataError, RuntimeError, ValueError) as e:
        raise DocumentLoadError(f"Invalid PDF file: {e}")

    if doc.needs_pass or doc.is_encrypted:
        doc.close()
        raise DocumentLoadError("Source document is password protected")

    if not doc.is_pdf or doc.page_count == 0:
        doc.close()
        raise DocumentLoadError("Source document has no pages")

    return doc


def augment_document(
    pdf_bytes: bytes,
    info: SignatureInfo,
    context: GenerationContext,
) -> bytes:
    """
    Add a signature block and footer to the last page of a PDF.

    When the last page is too short for the block a blank page of the same
    size is appended and receives the block instead. Existing pages are
    otherwise left as they are.

    Args:
        pdf_bytes: Source PDF
        info: Signing event to render
        context: Fonts and product name

    Returns:
        Serialized signed PDF

    Raises:
        DocumentLoadError: If the source is not a loadable PDF
        ImageDecodeError: If the signature image cannot be decoded
    """
    # Decode before touching the document so a bad image never yields output
    image = load_signature_image(info.signature_image_data)

    doc = open_pdf(pdf_bytes)
    try:
        original_page_count = doc.page_count
        last_page = doc[original_page_count - 1]
        page_width = last_page.rect.width
        page_height = last_page.rect.height

        placement = plan_placement(page_width, page_height)

        if placement.new_page:
            target_page = doc.new_page(width=page_width, height=page_height)
        else:
            target_page = last_page

        draw_signature_block(target_page, info, image, placement, context.fonts)
        draw_footer(target_page, info, context.fonts, context.product_name)

        metadata = doc.metadata or {}
        metadata["keywords"] = (
            f"{metadata.get('keywords') or ''} Signed by: {info.signer_name}"
        ).strip()
        metadata["producer"] = f"{context.product_name} E-Signature"
        doc.set_metadata(metadata)

        output = doc.tobytes(garbage=3, deflate=True)
    finally:
        doc.close()

    logger.info(
        f"Embedded signature block on {'new' if placement.new_page else 'last'} page "
        f"({original_page_count} -> {original_page_count + int(placement.new_page)} pages, "
        f"page height {page_height:.0f}) at ({placement.x:.0f}, {placement.y:.0f})"
    )
    return output
