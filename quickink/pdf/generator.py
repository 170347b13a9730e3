"""
Signed document generation entry point.

- With a source document URL: fetch the PDF and embed the signature block.
- Without one: generate a standalone signing certificate.
"""
import logging
from typing import Optional, Sequence

from quickink.pdf.augment import augment_document
from quickink.pdf.certificate import compose_certificate
from quickink.pdf.context import AuditEntry, GenerationContext, SignatureInfo
from quickink.pdf.errors import FetchError
from quickink.pdf.fetch import fetch_document
from quickink.utils.logging import mask_email

logger = logging.getLogger(__name__)


async def generate_signed_document(
    source_url: Optional[str],
    info: SignatureInfo,
    context: Optional[GenerationContext] = None,
    audit_entries: Optional[Sequence[AuditEntry]] = None,
) -> bytes:
    """
    Produce the signed PDF for one signing event.

    Args:
        source_url: URL of the document that was signed, or None/empty
        info: Signing event
        context: Generation resources; defaults to Helvetica and strict fetch
        audit_entries: Audit trail for the certificate path

    Returns:
        Complete PDF bytes

    Raises:
        FetchError: Source unreachable (unless the context enables fallback)
        DocumentLoadError: Source is not a PDF
        ImageDecodeError: Signature image cannot be decoded
        SignerValidationError: Signer fields missing (certificate path)
    """
    context = context or GenerationContext()
    source_url = (source_url or "").strip()

    if not source_url:
        logger.info(f"No source document, generating certificate for {mask_email(info.signer_email)}")
        return compose_certificate(info, context, audit_entries=audit_entries)

    try:
        pdf_bytes = await fetch_document(source_url, client=context.http_client)
    except FetchError as e:
        if not context.fallback_on_fetch_error:
            raise
        logger.warning(f"Source document unavailable ({e.message}), generating certificate instead")
        return compose_certificate(info, context, audit_entries=audit_entries)

    return augment_document(pdf_bytes, info, context)
