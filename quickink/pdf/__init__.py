# PDF module
from quickink.pdf.context import (
    AuditEntry,
    FontSet,
    GenerationContext,
    SignatureInfo,
    validate_signature_info,
)
from quickink.pdf.errors import (
    DocumentLoadError,
    FetchError,
    ImageDecodeError,
    SignedDocumentError,
    SignerValidationError,
)
from quickink.pdf.generator import generate_signed_document

__all__ = [
    "AuditEntry",
    "FontSet",
    "GenerationContext",
    "SignatureInfo",
    "validate_signature_info",
    "DocumentLoadError",
    "FetchError",
    "ImageDecodeError",
    "SignedDocumentError",
    "SignerValidationError",
    "generate_signed_document",
]
